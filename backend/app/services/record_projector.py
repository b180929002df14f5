"""Map raw store records to the client-facing list shape."""

from __future__ import annotations

from typing import Any

from app.core.errors import ProjectionError
from app.models.employee import EmployeeListItem, RawRecord

# RawRecord attribute -> EmployeeListItem attribute, copied unchanged
_PASSTHROUGH: list[tuple[str, str]] = [
    ("empno", "empno"),
    ("profile_color", "profile_color"),
    ("name", "name"),
    ("status", "status"),
    ("hire_date", "hire_date"),
    ("retire_date", "retire_date"),
    ("continuous_service_months", "continuous_service_months"),
    ("working_days", "working_days"),
    ("dept", "dept"),
    ("position", "position"),
    ("deptname", "deptname"),
    ("email", "email"),
    ("mobile", "mobile"),
]


def project(raw: RawRecord, total_count: int | None = None) -> EmployeeListItem:
    """Project one record.

    ``profile_name`` drops the first character of the name (the family name).
    ``gender`` is only set when the store derived it from a national id, and
    ``total_count`` only when the record is part of a counted page; unset
    fields are omitted from the serialized record.
    """
    if not raw.name:
        raise ProjectionError(f"Employee '{raw.empno}' has an empty name", empno=raw.empno)

    data: dict[str, Any] = {target: getattr(raw, source) for source, target in _PASSTHROUGH}
    data["profile_name"] = raw.name[1:]

    if raw.gender:
        data["gender"] = raw.gender
    if total_count is not None:
        data["total_count"] = total_count

    return EmployeeListItem(**data)


def project_page(records: list[RawRecord], total_count: int) -> list[EmployeeListItem]:
    return [project(raw, total_count) for raw in records]
