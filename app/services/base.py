"""Shared helpers for service modules (exceptions, pagination)"""

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

# Leading integer, the way query strings like "2", " 3abc" or "-1" are read.
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class ServiceError(Exception):
    """Base exception for service layer errors."""


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""


class InvalidInputError(ServiceError):
    """Raised when request parameters fail a service-level check."""


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        # Not clamped: a negative skip is left for the data store to reject.
        return (self.page - 1) * self.limit


def parse_leading_int(raw: Optional[str]) -> Optional[int]:
    """Parse the integer prefix of ``raw``; None when there is none."""
    if raw is None:
        return None
    match = _LEADING_INT.match(str(raw))
    if not match:
        return None
    return int(match.group(1))


def parse_leading_float(raw: Optional[str]) -> Optional[float]:
    """Parse the numeric prefix of ``raw`` as a float; None when there is none."""
    if raw is None:
        return None
    match = _LEADING_FLOAT.match(str(raw))
    if not match:
        return None
    return float(match.group(1))


def resolve_page_request(
    raw_page: Optional[str],
    raw_limit: Optional[str],
    *,
    default_page: int = DEFAULT_PAGE,
    default_limit: int = DEFAULT_LIMIT,
) -> PageRequest:
    """
    Derive the page window from untrusted query-string values.

    Missing, non-numeric and zero values fall back to the defaults. Negative
    values and the integer part of fractional values are kept as parsed.
    """
    page = parse_leading_int(raw_page) or default_page
    limit = parse_leading_int(raw_limit) or default_limit
    return PageRequest(page=page, limit=limit)


def total_pages(total_items: int, limit: int) -> Union[int, float]:
    """
    Ceiling of ``total_items / limit`` under float division.

    A ceiling that lands on negative zero (only reachable with a negative
    limit) is returned as ``-0.0`` so the sign survives serialization.
    """
    quotient = total_items / limit
    pages = math.ceil(quotient)
    if pages == 0 and math.copysign(1.0, quotient) < 0:
        return -0.0
    return pages


def paginate_results(
    results: List[Any],
    *,
    page_request: PageRequest,
    total: int,
    items_key: str,
    total_key: str,
) -> Dict[str, Any]:
    """Wrap result lists with pagination metadata."""
    return {
        items_key: results,
        "currentPage": page_request.page,
        "totalPages": total_pages(total, page_request.limit),
        total_key: total,
    }
