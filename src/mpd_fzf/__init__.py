"""Pick tracks from the MPD database with fzf and queue them after the current song."""
