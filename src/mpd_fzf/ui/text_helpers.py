"""Terminal column width helpers.

All widths are terminal cells as measured by :func:`rich.cells.cell_len`, so
East Asian wide characters count as two columns.
"""

from __future__ import annotations

from rich.cells import cell_len

DEFAULT_ELLIPSIS = ".."


def truncate_to_width(
    text: str, max_cols: int, ellipsis: str = DEFAULT_ELLIPSIS
) -> str:
    """Cut ``text`` to at most ``max_cols`` cells, ending with ``ellipsis``.

    A wide character that would straddle the cut is dropped whole. When the
    ellipsis itself does not fit, the text is cut without it.
    """
    if max_cols < 0:
        raise ValueError(f"max_cols must be >= 0, got {max_cols}")
    if cell_len(text) <= max_cols:
        return text
    tail = ellipsis if cell_len(ellipsis) <= max_cols else ""
    budget = max_cols - cell_len(tail)
    kept = ""
    for char in text:
        candidate = kept + char
        if cell_len(candidate) > budget:
            break
        kept = candidate
    return kept + tail


def pad_to_width(text: str, cols: int) -> str:
    """Right-pad ``text`` with spaces to exactly ``cols`` cells."""
    return text + " " * max(0, cols - cell_len(text))


def fit_to_width(text: str, cols: int, ellipsis: str = DEFAULT_ELLIPSIS) -> str:
    return pad_to_width(truncate_to_width(text, cols, ellipsis), cols)
