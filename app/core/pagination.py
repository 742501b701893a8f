from __future__ import annotations

import math

DEFAULT_PAGE = 1


def paginate(items: list, page: int = DEFAULT_PAGE, per_page: int = 10) -> dict:
    if per_page < 1:
        raise ValueError("per_page must be >= 1.")

    total_items = len(items)
    total_pages = math.ceil(total_items / per_page)
    current_page = min(max(page, DEFAULT_PAGE), max(total_pages, DEFAULT_PAGE))

    start_index = (current_page - 1) * per_page
    end_index = min(start_index + per_page, total_items)

    return {
        "items": items[start_index:end_index],
        "currentPage": current_page,
        "totalPages": total_pages,
        "totalItems": total_items,
        "itemsPerPage": per_page,
        "startItem": start_index + 1 if total_items else 0,
        "endItem": end_index if total_items else 0,
        "hasNextPage": current_page < total_pages,
        "hasPreviousPage": current_page > DEFAULT_PAGE,
    }
