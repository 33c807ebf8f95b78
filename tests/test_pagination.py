"""
Tests for pagination clamping and page metadata.
"""

import pytest

from risen.storage.pagination import MAX_OFFSET, Page, clamp_pagination


@pytest.mark.parametrize("offset, limit, expected", [
    (None, None, (0, 20)),
    ("5", "abc", (5, 20)),
    (-3, 500, (0, 100)),
    (0, 0, (0, 20)),
    (2, "7", (2, 7)),
    (0, -4, (0, 1)),
    (2.9, 10.5, (2, 10)),
    (True, 10, (0, 10)),
])
def test_clamp_pagination(offset, limit, expected):
    assert clamp_pagination(offset, limit, default_limit=20, max_limit=100) == expected


def test_offset_fits_sqlite_integer():
    assert clamp_pagination(10 ** 30, None, default_limit=20, max_limit=100) == (MAX_OFFSET, 20)
    assert clamp_pagination("1e40", 5, default_limit=20, max_limit=100) == (MAX_OFFSET, 5)


def test_experiment_ceiling():
    assert clamp_pagination(0, 80, default_limit=10, max_limit=50) == (0, 50)
    assert clamp_pagination(0, None, default_limit=10, max_limit=50) == (0, 10)


class TestPage:

    def test_middle_page(self):
        page = Page(items=["c", "d"], total_count=5, offset=2, limit=2)

        assert page.current_page == 2
        assert page.total_pages == 3
        assert page.has_more is True
        assert page.next_offset == 4
        assert page.first_index == 3
        assert page.last_index == 4

    def test_last_page(self):
        page = Page(items=["e"], total_count=5, offset=4, limit=2)

        assert page.current_page == 3
        assert page.has_more is False
        assert page.last_index == 5

    def test_empty_result(self):
        page = Page(items=[], total_count=0, offset=0, limit=20)

        assert page.total_pages == 0
        assert page.has_more is False
