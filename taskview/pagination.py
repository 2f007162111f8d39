"""Page slicing and navigation metadata."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Sequence, TypeVar
from urllib.parse import urlencode

from taskview.config import DEFAULT_PER_PAGE, MAX_PER_PAGE

Row = TypeVar("Row")


@dataclass(frozen=True)
class PageMeta:
    current_page: int
    total_pages: int
    total_rows: int
    per_page: int
    has_prev: bool
    has_next: bool
    has_first: bool
    has_last: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def effective_per_page(per_page: int | None, default: int = DEFAULT_PER_PAGE) -> int:
    if per_page is None or per_page <= 0:
        return default
    return min(per_page, MAX_PER_PAGE)


def paginate(
    rows: Sequence[Row],
    page: int | None = None,
    per_page: int | None = None,
    *,
    default_per_page: int = DEFAULT_PER_PAGE,
) -> tuple[list[Row], PageMeta]:
    """Slice ``rows`` to one page; out-of-range pages clamp to the last page."""
    size = effective_per_page(per_page, default_per_page)
    total_rows = len(rows)
    total_pages = max(1, math.ceil(total_rows / size))
    current = page if page is not None and page > 0 else 1
    current = min(current, total_pages)

    start = (current - 1) * size
    page_rows = list(rows[start : start + size])
    meta = PageMeta(
        current_page=current,
        total_pages=total_pages,
        total_rows=total_rows,
        per_page=size,
        has_prev=current > 1,
        has_next=current < total_pages,
        has_first=current > 1,
        has_last=current < total_pages,
    )
    return page_rows, meta


def build_page_links(
    path: str, params: Mapping[str, str], meta: PageMeta
) -> dict[str, str]:
    """First/prev/next/last URLs keeping the other query parameters."""

    def page_url(number: int) -> str:
        query = {key: value for key, value in params.items() if key != "page"}
        query["page"] = str(number)
        return f"{path}?{urlencode(query)}"

    links = {"first": "", "prev": "", "next": "", "last": ""}
    if meta.has_prev:
        links["first"] = page_url(1)
        links["prev"] = page_url(meta.current_page - 1)
    if meta.has_next:
        links["next"] = page_url(meta.current_page + 1)
        links["last"] = page_url(meta.total_pages)
    return links
