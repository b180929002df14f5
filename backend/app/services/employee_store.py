"""Record store contract and the in-memory copy-on-write store.

The query engine reads through a snapshot: ``count`` and ``fetch`` issued
inside one ``snapshot()`` block observe the same data, whatever writes land
in between.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import date, datetime
from typing import Any, Protocol

from app.models.employee import FilterCriteria, RawRecord, Window

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d", "%d.%m.%Y")

# Stored document field -> RawRecord attribute
_FIELD_MAP: list[tuple[str, str]] = [
    ("name", "name"),
    ("profile_color", "profile_color"),
    ("status", "status"),
    ("hire_date", "hiredate"),
    ("retire_date", "retiredate"),
    ("dept", "fk_deptno"),
    ("deptname", "deptname"),
    ("position", "position"),
    ("email", "email"),
    ("mobile", "mobile"),
]


class EmployeeSnapshot(Protocol):
    async def count(self, criteria: FilterCriteria) -> int: ...

    async def fetch(self, criteria: FilterCriteria, window: Window) -> list[RawRecord]: ...


class EmployeeStore(Protocol):
    def snapshot(self) -> AbstractAsyncContextManager[EmployeeSnapshot]: ...

    async def get(self, empno: str) -> RawRecord | None: ...

    async def check_connection(self) -> bool: ...


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def _service_months(start: date, end: date) -> int:
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def gender_from_national_id(rrn: str | None) -> str | None:
    """Gender digit is the first digit after the six-digit birth date."""
    if not rrn:
        return None
    digits = [ch for ch in str(rrn) if ch.isdigit()]
    if len(digits) < 7:
        return None
    return "male" if int(digits[6]) % 2 == 1 else "female"


def build_raw_record(doc: dict[str, Any], today: date | None = None) -> RawRecord:
    data: dict[str, Any] = {"empno": str(doc.get("empno") or doc.get("id") or "unknown")}

    for attr, doc_key in _FIELD_MAP:
        value = doc.get(doc_key)
        data[attr] = str(value) if value is not None else None
    data["name"] = data["name"] or ""

    hired = parse_date(data["hire_date"])
    if hired:
        end = parse_date(data["retire_date"]) or today or date.today()
        data["continuous_service_months"] = _service_months(hired, end)
        data["working_days"] = max((end - hired).days + 1, 0)

    data["gender"] = gender_from_national_id(doc.get("rrn"))

    return RawRecord(**data)


def matches(record: RawRecord, criteria: FilterCriteria) -> bool:
    if criteria.keyword and criteria.keyword.casefold() not in record.name.casefold():
        return False
    if criteria.positions and record.position not in criteria.positions:
        return False
    if criteria.departments and record.dept not in criteria.departments:
        return False
    if criteria.statuses and record.status not in criteria.statuses:
        return False
    return True


class _InMemorySnapshot:
    def __init__(self, records: tuple[RawRecord, ...]) -> None:
        self._records = records

    def _matching(self, criteria: FilterCriteria) -> list[RawRecord]:
        return [r for r in self._records if matches(r, criteria)]

    async def count(self, criteria: FilterCriteria) -> int:
        return len(self._matching(criteria))

    async def fetch(self, criteria: FilterCriteria, window: Window) -> list[RawRecord]:
        # Slicing past the end yields fewer rows, never an error.
        return self._matching(criteria)[window.start_row - 1 : window.end_row]


class InMemoryEmployeeStore:
    """Employee store backed by an immutable, empno-sorted tuple.

    Writers are serialized and publish a fresh tuple; snapshots keep the
    tuple that was current when they were opened.
    """

    def __init__(self, docs: Iterable[dict[str, Any]] | None = None) -> None:
        self._records: tuple[RawRecord, ...] = ()
        self._lock = asyncio.Lock()
        if docs:
            self._records = self._sorted(build_raw_record(d) for d in docs)

    @staticmethod
    def _sorted(records: Iterable[RawRecord]) -> tuple[RawRecord, ...]:
        return tuple(sorted(records, key=lambda r: r.empno))

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[_InMemorySnapshot]:
        yield _InMemorySnapshot(self._records)

    async def load(self, docs: Iterable[dict[str, Any]]) -> int:
        records = self._sorted(build_raw_record(d) for d in docs)
        async with self._lock:
            self._records = records
        logger.info("InMemoryEmployeeStore loaded %d employees", len(records))
        return len(records)

    async def upsert(self, doc: dict[str, Any]) -> RawRecord:
        record = build_raw_record(doc)
        async with self._lock:
            kept = [r for r in self._records if r.empno != record.empno]
            kept.append(record)
            self._records = self._sorted(kept)
        return record

    async def remove(self, empno: str) -> bool:
        async with self._lock:
            kept = tuple(r for r in self._records if r.empno != empno)
            removed = len(kept) != len(self._records)
            self._records = kept
        return removed

    async def get(self, empno: str) -> RawRecord | None:
        for record in self._records:
            if record.empno == empno:
                return record
        return None

    async def check_connection(self) -> bool:
        return True
