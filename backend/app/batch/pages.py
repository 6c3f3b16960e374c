"""
Page count estimation.

An approximation from byte size only, used until the processing backend
reports real page counts.
"""

from .settings import PAGE_ESTIMATE_DIVISOR


def estimate_pages(size_bytes: int, divisor: int = PAGE_ESTIMATE_DIVISOR) -> int:
    """
    Estimate the page count of a PDF from its size.

    Returns max(1, ceil(size_bytes / divisor)).

    Raises:
        ValueError: If size_bytes is negative
    """
    if size_bytes < 0:
        raise ValueError(f"File size cannot be negative: {size_bytes}")
    return max(1, -(-size_bytes // divisor))
