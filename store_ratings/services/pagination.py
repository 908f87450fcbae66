"""Page arithmetic shared by the listing services."""
import math


def page_offset(page: int, limit: int) -> int:
    """Row offset of the first item on *page* (1-based)."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for *total* items; 0 when there are none."""
    return math.ceil(total / limit) if total else 0


def page_envelope(total: int, page: int, limit: int) -> dict:
    return {"total_count": total, "page": page, "total_pages": total_pages(total, limit)}
