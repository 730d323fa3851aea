"""Shared helpers"""

from .pagination import PaginationParams, paginate

__all__ = ["PaginationParams", "paginate"]
