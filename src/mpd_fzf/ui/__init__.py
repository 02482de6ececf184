"""Display-line helpers for the selector."""
