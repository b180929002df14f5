"""Turn raw listing input into FilterCriteria without ever failing the request."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from app.models.employee import EmployeeQueryParams, FilterCriteria

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


def _normalize_values(values: Iterable[str] | None) -> frozenset[str]:
    if not values:
        return frozenset()
    return frozenset(v.strip() for v in values if isinstance(v, str) and v.strip())


def parse_page_number(page: str | int | None) -> int:
    """Coerce a page number to an integer >= 1, falling back to page 1."""
    if page is None:
        return 1
    if isinstance(page, bool):
        return 1
    if isinstance(page, int):
        number = page
    else:
        text = str(page).strip()
        try:
            number = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                logger.debug("Non-numeric page number %r, using page 1", page)
                return 1
            if not math.isfinite(value):
                logger.debug("Non-finite page number %r, using page 1", page)
                return 1
            number = int(value)
    if number < 1:
        logger.debug("Non-positive page number %r, using page 1", page)
        return 1
    return number


def build_criteria(
    keyword: str | None = None,
    positions: Iterable[str] | None = None,
    departments: Iterable[str] | None = None,
    statuses: Iterable[str] | None = None,
    page: str | int | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> FilterCriteria:
    return FilterCriteria(
        keyword=(keyword or "").strip(),
        positions=_normalize_values(positions),
        departments=_normalize_values(departments),
        statuses=_normalize_values(statuses),
        page_size=page_size,
        page_number=parse_page_number(page),
    )


def criteria_from_params(params: EmployeeQueryParams, page_size: int = DEFAULT_PAGE_SIZE) -> FilterCriteria:
    return build_criteria(
        keyword=params.keyword,
        positions=params.positions,
        departments=params.departments,
        statuses=params.statuses,
        page=params.page,
        page_size=page_size,
    )
