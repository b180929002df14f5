from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_query_engine, require_directory_admin
from app.models.auth import UserInfo
from app.models.employee import EmployeeListItem, EmployeeQueryParams, PageCount, PageResult
from app.services.query_engine import EmployeeQueryEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _merge(*groups: list[str] | None) -> list[str] | None:
    merged = [value for group in groups if group for value in group]
    return merged or None


def listing_params(
    keyword: str | None = None,
    position: list[str] | None = Query(None),  # noqa: B008
    dept: list[str] | None = Query(None),  # noqa: B008
    status: list[str] | None = Query(None),  # noqa: B008
    arr_position: list[str] | None = Query(None, alias="arr_position[]", include_in_schema=False),  # noqa: B008
    arr_dept: list[str] | None = Query(None, alias="arr_dept[]", include_in_schema=False),  # noqa: B008
    arr_status: list[str] | None = Query(None, alias="arr_status[]", include_in_schema=False),  # noqa: B008
    page: str | None = None,
) -> EmployeeQueryParams:
    # page stays a string so a malformed value falls back to page 1 instead of a 422
    return EmployeeQueryParams(
        keyword=keyword,
        positions=_merge(position, arr_position),
        departments=_merge(dept, arr_dept),
        statuses=_merge(status, arr_status),
        page=page,
    )


@router.get("/search", response_model=PageResult, response_model_exclude_unset=True)
async def search_employees(
    params: EmployeeQueryParams = Depends(listing_params),  # noqa: B008
    engine: EmployeeQueryEngine = Depends(get_query_engine),  # noqa: B008
    user: UserInfo = Depends(require_directory_admin),  # noqa: B008
):
    return await engine.query(params)


@router.get("/pages", response_model=PageCount)
async def count_employee_pages(
    params: EmployeeQueryParams = Depends(listing_params),  # noqa: B008
    engine: EmployeeQueryEngine = Depends(get_query_engine),  # noqa: B008
    user: UserInfo = Depends(require_directory_admin),  # noqa: B008
):
    return await engine.count_pages(params)


@router.get("", response_model=list[EmployeeListItem], response_model_exclude_unset=True)
async def list_employees(
    keyword: str | None = None,
    engine: EmployeeQueryEngine = Depends(get_query_engine),  # noqa: B008
    user: UserInfo = Depends(require_directory_admin),  # noqa: B008
):
    return await engine.list_all(keyword)


@router.get("/{empno}", response_model=EmployeeListItem, response_model_exclude_unset=True)
async def get_employee(
    empno: str,
    engine: EmployeeQueryEngine = Depends(get_query_engine),  # noqa: B008
    user: UserInfo = Depends(require_directory_admin),  # noqa: B008
):
    logger.debug("Employee detail requested for %s", empno)
    return await engine.get_employee(empno)
