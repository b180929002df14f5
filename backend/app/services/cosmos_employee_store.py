"""Cosmos DB employee store.

A snapshot pins the ordered id list of each filter it sees on first use, so
the count and the page fetched afterwards are cut from the same match set.
Documents deleted between the id query and the page read are skipped: the
page can come back short but never shifted.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
from azure.core.exceptions import AzureError
from azure.cosmos.aio import CosmosClient

from app.core.config import Settings
from app.core.errors import StoreUnavailableError
from app.models.employee import FilterCriteria, RawRecord, Window
from app.services.employee_store import build_raw_record

logger = logging.getLogger(__name__)

_ORDER_BY = " ORDER BY c.empno"

# FilterCriteria attribute -> (query parameter, document field)
_DIMENSIONS: list[tuple[str, str, str]] = [
    ("positions", "@positions", "c.position"),
    ("departments", "@departments", "c.fk_deptno"),
    ("statuses", "@statuses", "c.status"),
]


def build_where_clause(criteria: FilterCriteria) -> tuple[str, list[dict[str, Any]]]:
    clauses: list[str] = []
    params: list[dict[str, Any]] = []

    if criteria.keyword:
        clauses.append("CONTAINS(c.name, @keyword, true)")
        params.append({"name": "@keyword", "value": criteria.keyword})

    for attr, param, field in _DIMENSIONS:
        values = getattr(criteria, attr)
        if values:
            clauses.append(f"ARRAY_CONTAINS({param}, {field})")
            params.append({"name": param, "value": sorted(values)})

    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


async def _run_query(container: Any, query: str, params: list[dict[str, Any]]) -> list[Any]:
    items: list[Any] = []
    try:
        async for item in container.query_items(
            query=query,
            parameters=params,
            enable_cross_partition_query=True,
        ):
            items.append(item)
    except (AzureError, aiohttp.ClientError, TimeoutError) as err:
        logger.exception("Cosmos DB query failed")
        raise StoreUnavailableError(f"Employee store query failed: {err}") from err
    return items


class CosmosSnapshot:
    def __init__(self, container: Any) -> None:
        self._container = container
        self._ids: dict[tuple, list[str]] = {}

    async def _matching_ids(self, criteria: FilterCriteria) -> list[str]:
        key = criteria.filter_key()
        if key not in self._ids:
            where, params = build_where_clause(criteria)
            query = "SELECT VALUE c.id FROM c" + where + _ORDER_BY
            self._ids[key] = [str(i) for i in await _run_query(self._container, query, params)]
            logger.debug("Pinned %d matching ids for %s", len(self._ids[key]), key)
        return self._ids[key]

    async def count(self, criteria: FilterCriteria) -> int:
        return len(await self._matching_ids(criteria))

    async def fetch(self, criteria: FilterCriteria, window: Window) -> list[RawRecord]:
        ids = (await self._matching_ids(criteria))[window.start_row - 1 : window.end_row]
        if not ids:
            return []

        docs = await _run_query(
            self._container,
            "SELECT * FROM c WHERE ARRAY_CONTAINS(@ids, c.id)",
            [{"name": "@ids", "value": ids}],
        )
        by_id = {str(doc.get("id")): doc for doc in docs}
        return [build_raw_record(by_id[i]) for i in ids if i in by_id]


class CosmosEmployeeStore:
    def __init__(self) -> None:
        self.client: CosmosClient | None = None
        self.container: Any = None
        self.initialized: bool = False

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        endpoint = settings.COSMOS_DB_ENDPOINT
        key = settings.COSMOS_DB_KEY
        container_name = settings.COSMOS_DB_EMPLOYEES_CONTAINER

        if not endpoint or not key:
            logger.warning("Cosmos DB credentials missing — employee store not initialized")
            return

        self.client = CosmosClient(endpoint, key)
        db = self.client.get_database_client(settings.COSMOS_DB_DATABASE)
        self.container = db.get_container_client(container_name)
        self.initialized = True
        logger.info("CosmosEmployeeStore initialized (container=%s)", container_name)

    async def close(self) -> None:
        if self.client:
            await self.client.close()
            self.client = None
            self.container = None
            self.initialized = False

    def _require_container(self) -> Any:
        if not self.container:
            raise StoreUnavailableError("Employee store is not configured")
        return self.container

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[CosmosSnapshot]:
        yield CosmosSnapshot(self._require_container())

    async def get(self, empno: str) -> RawRecord | None:
        items = await _run_query(
            self._require_container(),
            "SELECT * FROM c WHERE c.id = @empno OR c.empno = @empno",
            [{"name": "@empno", "value": empno}],
        )
        if not items:
            return None
        return build_raw_record(items[0])

    async def check_connection(self) -> bool:
        if not self.container:
            return False
        try:
            async for _ in self.container.query_items(
                query="SELECT VALUE COUNT(1) FROM c",
                enable_cross_partition_query=True,
            ):
                return True
            return True
        except Exception:
            logger.exception("Cosmos DB connection check failed")
            return False


employee_store = CosmosEmployeeStore()
