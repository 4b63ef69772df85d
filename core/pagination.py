from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence, Tuple, TypeVar


T = TypeVar("T")


def apply_pagination(items: Sequence[T], page: int, limit: int) -> Tuple[List[T], Dict[str, Any]]:
    """Slice one page out of ``items``. Pages past the end clamp to the last page."""
    limit = max(int(limit), 1)
    page = max(int(page), 1)

    total = len(items)
    total_pages = max(math.ceil(total / limit), 1)
    current = min(page, total_pages)
    start = (current - 1) * limit

    return list(items[start : start + limit]), {
        "page": current,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": current < total_pages,
        "hasPrev": current > 1,
    }
