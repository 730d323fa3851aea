"""
Tests for in-memory pagination.
"""
import pytest
from pydantic import ValidationError

from campus_admin.utils.pagination import paginate

def test_page_size_beyond_the_default_cap():
    page_items, pagination = paginate(range(300), 1, 150)

    assert page_items == list(range(150))
    assert pagination == {"page": 1, "limit": 150, "total": 300, "pages": 2}

def test_last_partial_page():
    page_items, pagination = paginate(list("abcdefg"), 3, 3)

    assert page_items == ["g"]
    assert pagination["pages"] == 3

def test_empty_result():
    page_items, pagination = paginate([], 1, 10)

    assert page_items == []
    assert pagination == {"page": 1, "limit": 10, "total": 0, "pages": 0}

@pytest.mark.parametrize("page, limit", [(0, 10), (1, 0)])
def test_rejects_non_positive_bounds(page, limit):
    with pytest.raises(ValidationError):
        paginate(range(5), page, limit)
