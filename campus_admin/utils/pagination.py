"""
Pagination utilities
"""

import math
from typing import Any, Dict, List, Sequence, Tuple, TypeVar

from pydantic import BaseModel, Field

T = TypeVar('T')

class PaginationParams(BaseModel):
    """Pagination parameters"""
    page: int = Field(1, ge=1, description="Page number")
    limit: int = Field(20, ge=1, description="Page size")

    @property
    def offset(self) -> int:
        """Calculate offset"""
        return (self.page - 1) * self.limit

def paginate(
    items: Sequence[T],
    page: int = 1,
    limit: int = 20
) -> Tuple[List[T], Dict[str, Any]]:
    """
    Slice an already-fetched, already-filtered list into one page

    Args:
        items: Full result list
        page: Page number
        limit: Page size

    Returns:
        The page of items and the pagination block for the response
    """
    params = PaginationParams(page=page, limit=limit)
    total = len(items)
    pages = math.ceil(total / params.limit)

    page_items = list(items[params.offset:params.offset + params.limit])

    return page_items, {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "pages": pages,
    }
