"""Page arithmetic: 1-indexed page numbers to inclusive row windows."""

from __future__ import annotations

from app.models.employee import Window


def compute_window(page_number: int, page_size: int) -> Window:
    if page_number < 1:
        raise ValueError(f"page_number must be >= 1, got {page_number}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    start_row = (page_number - 1) * page_size + 1
    return Window(start_row=start_row, end_row=start_row + page_size - 1)


def compute_total_pages(total_count: int, page_size: int) -> int:
    # No matches means zero pages, not an empty first page.
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    if total_count <= 0:
        return 0
    return (total_count + page_size - 1) // page_size
