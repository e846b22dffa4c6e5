"""
Pagination metadata and page links.

Everything is computed from the total count, so the store only needs one
counted query per page.
"""

import math
from typing import Any, List, Mapping, Optional
from urllib.parse import urlencode

from pydantic import BaseModel

from ..errors import InvalidPageSize


class PageLink(BaseModel):
    """One item of a pager: a page number, or an ellipsis marking a gap."""

    page: Optional[int] = None
    current: bool = False
    ellipsis: bool = False

    model_config = {"frozen": True}

    def url(self, base: str = "", params: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        """
        Render the link's URL, keeping any other query parameters.

        Ellipsis markers have no URL. Parameters set to None are dropped.
        """
        if self.ellipsis:
            return None

        query = {k: v for k, v in (params or {}).items() if v is not None and k != "page"}
        query["page"] = self.page
        return f"{base}?{urlencode(query)}"


class Pagination(BaseModel):
    page: int
    per_page: int
    total_records: int
    total_pages: int
    has_previous: bool
    has_next: bool
    previous_page: Optional[int] = None
    next_page: Optional[int] = None
    links: List[PageLink] = []

    model_config = {"frozen": True}

    @classmethod
    def build(cls, total: int, page: int, per_page: int, window: int = 2) -> "Pagination":
        """
        Compute pagination for ``total`` records.

        A requested page past the last one falls back to page 1.

        Args:
            total: Number of matching records
            page: Requested page, 1-indexed
            per_page: Page size
            window: How many pages around the current one get their own link

        Raises:
            InvalidPageSize: If page or per_page is below 1
        """
        if per_page < 1:
            raise InvalidPageSize(f"per_page must be at least 1, got {per_page}")
        if page < 1:
            raise InvalidPageSize(f"page must be at least 1, got {page}")

        total_pages = math.ceil(total / per_page)
        if page > total_pages:
            page = 1

        return cls(
            page=page,
            per_page=per_page,
            total_records=total,
            total_pages=total_pages,
            has_previous=page > 1,
            has_next=page < total_pages,
            previous_page=page - 1 if page > 1 else None,
            next_page=page + 1 if page < total_pages else None,
            links=_links(page, total_pages, window),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def _links(page: int, total_pages: int, window: int) -> List[PageLink]:
    if total_pages < 1:
        return []

    shown = {1, total_pages}
    shown.update(
        range(max(1, page - window), min(total_pages, page + window) + 1)
    )

    links: List[PageLink] = []
    previous = 0
    for number in sorted(shown):
        if number - previous > 1:
            links.append(PageLink(ellipsis=True))
        links.append(PageLink(page=number, current=number == page))
        previous = number

    return links
