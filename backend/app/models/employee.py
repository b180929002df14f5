"""Employee directory models: search criteria, raw store records and list pages."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FilterCriteria(BaseModel):
    """Normalized listing request.

    Dimensions combine with AND, values inside one dimension with OR.
    An empty dimension places no restriction on the result.
    """

    model_config = ConfigDict(frozen=True)

    keyword: str = ""
    positions: frozenset[str] = frozenset()
    departments: frozenset[str] = frozenset()
    statuses: frozenset[str] = frozenset()
    page_size: int = Field(default=10, gt=0)
    page_number: int = Field(default=1, ge=1)

    def filter_key(self) -> tuple:
        """The part of the criteria that decides which records match, without pagination."""
        return (
            self.keyword,
            tuple(sorted(self.positions)),
            tuple(sorted(self.departments)),
            tuple(sorted(self.statuses)),
        )


class Window(BaseModel):
    """Inclusive, 1-indexed row range of one page."""

    model_config = ConfigDict(frozen=True)

    start_row: int = Field(ge=1)
    end_row: int

    @model_validator(mode="after")
    def _check_bounds(self) -> Window:
        if self.end_row < self.start_row:
            raise ValueError("end_row must not precede start_row")
        return self

    @property
    def size(self) -> int:
        return self.end_row - self.start_row + 1


class RawRecord(BaseModel):
    """One employee as the store returns it. The national id stays inside the store."""

    model_config = ConfigDict(frozen=True)

    empno: str
    name: str = ""
    profile_color: str | None = None
    status: str | None = None
    hire_date: str | None = None
    retire_date: str | None = None
    continuous_service_months: int | None = None
    working_days: int | None = None
    dept: str | None = None
    deptname: str | None = None
    position: str | None = None
    email: str | None = None
    gender: str | None = None
    mobile: str | None = None


class EmployeeListItem(BaseModel):
    """Client-facing employee record.

    ``gender`` and ``total_count`` are only serialized when they were set, so
    responses must be dumped with ``exclude_unset=True``.
    """

    model_config = ConfigDict(populate_by_name=True)

    empno: str
    profile_color: str | None = None
    profile_name: str = Field(alias="profileName")
    name: str
    status: str | None = None
    hire_date: str | None = Field(default=None, alias="hireDate")
    retire_date: str | None = Field(default=None, alias="retireDate")
    continuous_service_months: int | None = Field(default=None, alias="continuousServiceMonth")
    working_days: int | None = Field(default=None, alias="workingDays")
    dept: str | None = None
    position: str | None = None
    deptname: str | None = None
    email: str | None = None
    gender: str | None = None
    mobile: str | None = None
    total_count: int | None = Field(default=None, alias="totalCount")


class PageResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    records: list[EmployeeListItem]
    total_count: int = Field(ge=0, alias="totalCount")
    total_pages: int = Field(ge=0, alias="totalPages")
    page: int = Field(ge=1)
    page_size: int = Field(gt=0, alias="pageSize")


class PageCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_count: int = Field(ge=0, alias="totalCount")
    total_pages: int = Field(ge=0, alias="totalPages")
    page_size: int = Field(gt=0, alias="pageSize")


class EmployeeQueryParams(BaseModel):
    """Raw, unvalidated listing input as it arrives from the client."""

    keyword: str | None = None
    positions: list[str] | None = None
    departments: list[str] | None = None
    statuses: list[str] | None = None
    page: str | int | None = None
