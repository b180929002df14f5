"""Windowed multi-criteria employee listing.

Each request runs count and fetch inside one store snapshot, so the reported
total and the returned page describe the same data. The engine keeps no
per-request state and needs no locking of its own.
"""

from __future__ import annotations

import logging

from app.core.errors import EmployeeNotFoundError
from app.models.employee import EmployeeListItem, EmployeeQueryParams, PageCount, PageResult, Window
from app.services.criteria import DEFAULT_PAGE_SIZE, build_criteria, criteria_from_params
from app.services.employee_store import EmployeeStore
from app.services.record_projector import project, project_page
from app.services.window_planner import compute_total_pages, compute_window

logger = logging.getLogger(__name__)


class EmployeeQueryEngine:
    def __init__(self, store: EmployeeStore, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        self.store = store
        self.page_size = page_size

    async def query(self, params: EmployeeQueryParams) -> PageResult:
        criteria = criteria_from_params(params, self.page_size)

        async with self.store.snapshot() as snapshot:
            total_count = await snapshot.count(criteria)
            window = compute_window(criteria.page_number, criteria.page_size)
            total_pages = compute_total_pages(total_count, criteria.page_size)
            logger.debug(
                "Employee page %d/%d rows %d-%d of %d",
                criteria.page_number,
                total_pages,
                window.start_row,
                window.end_row,
                total_count,
            )
            raw_records = await snapshot.fetch(criteria, window)

        return PageResult(
            records=project_page(raw_records, total_count),
            total_count=total_count,
            total_pages=total_pages,
            page=criteria.page_number,
            page_size=criteria.page_size,
        )

    async def count_pages(self, params: EmployeeQueryParams) -> PageCount:
        criteria = criteria_from_params(params, self.page_size)

        async with self.store.snapshot() as snapshot:
            total_count = await snapshot.count(criteria)

        return PageCount(
            total_count=total_count,
            total_pages=compute_total_pages(total_count, criteria.page_size),
            page_size=criteria.page_size,
        )

    async def list_all(self, keyword: str | None = None) -> list[EmployeeListItem]:
        """Every employee whose name contains ``keyword``, unpaginated, in store order."""
        criteria = build_criteria(keyword=keyword, page_size=self.page_size)

        async with self.store.snapshot() as snapshot:
            total_count = await snapshot.count(criteria)
            if total_count == 0:
                return []
            raw_records = await snapshot.fetch(criteria, Window(start_row=1, end_row=total_count))

        return [project(raw) for raw in raw_records]

    async def get_employee(self, empno: str) -> EmployeeListItem:
        raw = await self.store.get(empno)
        if raw is None:
            raise EmployeeNotFoundError(empno)
        return project(raw)
