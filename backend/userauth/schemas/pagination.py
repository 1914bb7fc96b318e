"""
Pagination metadata.

build_pagination_info() derives page navigation from the total number of
matching rows, the requested page and the page size.
"""

import math
from typing import Optional

from pydantic import Field

from userauth.schemas.base import CamelModel


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MIN_LIMIT = 1


class PaginationInfo(CamelModel):
    total_docs: int = Field(description="Total number of documents in the complete dataset")
    start: int = Field(description="Zero-based index of the first record on this page, -1 if none")
    end: int = Field(description="Zero-based index of the last record on this page, -1 if none")
    total_pages: int = Field(description="Total number of pages")
    page: int = Field(description="Current page number (1-based)")
    next: Optional[int] = Field(default=None, description="Next page number, null on the last page")
    previous: Optional[int] = Field(default=None, description="Previous page number, null on the first page")


def normalize_page_params(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    """
    Apply defaults and the page size cap.

    Returns:
        (page, limit) with page >= 1 and 1 <= limit <= MAX_LIMIT
    """
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = min(limit or DEFAULT_LIMIT, MAX_LIMIT)
    return page, max(limit, MIN_LIMIT)


def build_pagination_info(total_docs: int, page: int, limit: int) -> PaginationInfo:
    """
    Compute pagination metadata.

    Args:
        total_docs: Number of rows matching the query
        page: Requested page (1-based)
        limit: Page size

    Returns:
        PaginationInfo. Pages past the end report start/end of -1 and
        point ``previous`` at the last real page.

    Example:
        >>> build_pagination_info(total_docs=25, page=3, limit=10).end
        24
    """
    total_pages = math.ceil(total_docs / limit) if limit > 0 else 0

    if total_docs == 0:
        return PaginationInfo(
            total_docs=0,
            start=-1,
            end=-1,
            total_pages=0,
            page=page,
            next=None,
            previous=page - 1 if page > 1 else None,
        )

    if page > total_pages:
        return PaginationInfo(
            total_docs=total_docs,
            start=-1,
            end=-1,
            total_pages=total_pages,
            page=page,
            next=None,
            previous=total_pages,
        )

    start = (page - 1) * limit
    docs_on_page = min(limit, max(0, total_docs - start))
    end = start + docs_on_page - 1 if docs_on_page > 0 else -1

    return PaginationInfo(
        total_docs=total_docs,
        start=start,
        end=end,
        total_pages=total_pages,
        page=page,
        next=page + 1 if page < total_pages else None,
        previous=page - 1 if page > 1 else None,
    )
