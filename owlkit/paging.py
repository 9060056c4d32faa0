"""Normalisation of page numbers and sizes."""

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def norm_page(page: int) -> int:
    """Return page, or 1 if it is not positive."""
    return page if page > 0 else 1


def norm_page_size(page_size: int) -> int:
    """Return page_size limited to 1..100, defaulting to 10 when not positive."""
    if page_size <= 0:
        return DEFAULT_PAGE_SIZE
    return min(page_size, MAX_PAGE_SIZE)