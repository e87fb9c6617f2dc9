"""
Pagination

``page`` and ``limit`` arrive as raw query strings. Anything missing,
non-numeric or below 1 silently falls back to the default, and so does any
value that would push ``LIMIT`` or ``OFFSET`` past a signed 64-bit integer.
"""

import math
from dataclasses import dataclass
from typing import Optional

from fastapi import Query, Request

from marketplace.serving.api.responses import Pagination

DEFAULT_PAGE = 1

# Largest LIMIT/OFFSET the database accepts
MAX_BIGINT = 2**63 - 1


def parse_positive_int(raw: Optional[str], default: int, maximum: Optional[int] = None) -> int:
    """Parse a query value as a positive integer, or return ``default``."""
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    if value < 1 or (maximum is not None and value > maximum):
        return default
    return value


@dataclass
class PageParams:
    """Requested page"""
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    request: Request,
    page: Optional[str] = Query(None, description="Page number, 1-based"),
    limit: Optional[str] = Query(None, description="Items per page"),
) -> PageParams:
    """FastAPI dependency reading the page/limit query values."""
    default_limit = request.app.state.settings.default_page_size
    limit_value = parse_positive_int(limit, default_limit, maximum=MAX_BIGINT)
    return PageParams(
        page=parse_positive_int(page, DEFAULT_PAGE, maximum=MAX_BIGINT // limit_value + 1),
        limit=limit_value,
    )


def build_pagination(params: PageParams, total: int) -> Pagination:
    """Page metadata for ``total`` rows."""
    total_pages = math.ceil(total / params.limit) if total else 0
    return Pagination(
        page=params.page,
        limit=params.limit,
        total=total,
        totalPages=total_pages,
        hasNext=params.page < total_pages,
        hasPrev=params.page > 1,
    )
