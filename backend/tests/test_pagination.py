"""
Tests for pagination metadata.
"""

import pytest

from userauth.schemas.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    build_pagination_info,
    normalize_page_params,
)


class TestBuildPaginationInfo:
    def test_middle_page(self):
        info = build_pagination_info(total_docs=25, page=2, limit=10)

        assert info.start == 10
        assert info.end == 19
        assert info.total_pages == 3
        assert info.next == 3
        assert info.previous == 1

    def test_last_partial_page(self):
        info = build_pagination_info(total_docs=25, page=3, limit=10)

        assert info.start == 20
        assert info.end == 24
        assert info.next is None
        assert info.previous == 2

    def test_first_page(self):
        info = build_pagination_info(total_docs=5, page=1, limit=10)

        assert (info.start, info.end) == (0, 4)
        assert info.total_pages == 1
        assert info.next is None
        assert info.previous is None

    def test_empty_result(self):
        info = build_pagination_info(total_docs=0, page=1, limit=10)

        assert (info.start, info.end) == (-1, -1)
        assert info.total_pages == 0
        assert info.next is None
        assert info.previous is None

    def test_empty_result_on_later_page(self):
        info = build_pagination_info(total_docs=0, page=3, limit=10)

        assert info.previous == 2

    def test_page_beyond_range(self):
        info = build_pagination_info(total_docs=25, page=7, limit=10)

        assert (info.start, info.end) == (-1, -1)
        assert info.page == 7
        assert info.next is None
        assert info.previous == 3

    def test_serializes_camel_case(self):
        data = build_pagination_info(total_docs=1, page=1, limit=10).model_dump(by_alias=True)

        assert set(data) == {"totalDocs", "start", "end", "totalPages", "page", "next", "previous"}


class TestNormalizePageParams:
    @pytest.mark.parametrize(
        "page,limit,expected",
        [
            (None, None, (1, DEFAULT_LIMIT)),
            (0, 5, (1, 5)),
            (-2, 5, (1, 5)),
            (3, 500, (3, MAX_LIMIT)),
            (2, 0, (2, DEFAULT_LIMIT)),
        ],
    )
    def test_defaults_and_cap(self, page, limit, expected):
        assert normalize_page_params(page, limit) == expected
