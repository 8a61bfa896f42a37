"""Page boundary resolution and navigation links for list endpoints.

List requests never fail on bad pagination input: anything that does not
parse falls back to a default and parsed values are clamped into range.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.user_api.entities.core.user.repository import UserPage
from src.user_api.runtime.config.config_data import PaginationConfig

PAGE_NUMBER_PARAM = "pageNumber"
PAGE_SIZE_PARAM = "pageSize"

# Requests carry 32-bit integers; anything wider is treated as unparsable.
_INTEGER = re.compile(r"[+-]?0*[0-9]{1,10}")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class LinkBuilder(Protocol):
    """Produces an absolute URI for a named route.

    ``path_params`` fill the route's path template; ``query_params`` are
    appended as the query string.
    """

    def __call__(
        self,
        route_name: str,
        path_params: Mapping[str, Any] | None = None,
        query_params: Mapping[str, Any] | None = None,
    ) -> str: ...


class PaginationHeader(BaseModel):
    """Navigation summary attached to list responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    previous_page_link: str | None = None
    next_page_link: str | None = None
    total_count: int
    page_size: int
    current_page: int
    total_pages: int

    def to_header_value(self) -> str:
        return self.model_dump_json(by_alias=True)


def parse_int(raw: str | None) -> int | None:
    """Parse an optionally signed 32-bit decimal integer, or return None."""
    if raw is None:
        return None
    text = raw.strip()
    if not _INTEGER.fullmatch(text):
        return None
    value = int(text)
    if not _INT32_MIN <= value <= _INT32_MAX:
        return None
    return value


def resolve_page_number(
    raw: str | None, config: PaginationConfig | None = None
) -> int:
    config = config or PaginationConfig()
    value = parse_int(raw)
    if value is None:
        return config.default_page_number
    return max(1, value)


def resolve_page_size(raw: str | None, config: PaginationConfig | None = None) -> int:
    """Resolve the requested page size.

    Missing, unparsable and non-positive values give the default size; the
    rest are clamped into ``[min_page_size, max_page_size]``.
    """
    config = config or PaginationConfig()
    value = parse_int(raw)
    if value is None or value < 1:
        return config.default_page_size
    return min(config.max_page_size, max(config.min_page_size, value))


def build_pagination_header(
    page: UserPage,
    link_builder: LinkBuilder,
    route_name: str,
) -> PaginationHeader:
    """Summarise ``page`` and link to its neighbours where they exist."""
    previous_link = None
    if page.has_previous:
        previous_link = link_builder(
            route_name,
            query_params={
                PAGE_NUMBER_PARAM: page.current_page - 1,
                PAGE_SIZE_PARAM: page.page_size,
            },
        )

    next_link = None
    if page.has_next:
        next_link = link_builder(
            route_name,
            query_params={
                PAGE_NUMBER_PARAM: page.current_page + 1,
                PAGE_SIZE_PARAM: page.page_size,
            },
        )

    return PaginationHeader(
        previous_page_link=previous_link,
        next_page_link=next_link,
        total_count=page.total_count,
        page_size=page.page_size,
        current_page=page.current_page,
        total_pages=page.total_pages,
    )
