"""Shared Supabase data access helpers."""

from __future__ import annotations

import logging
import time
from typing import Any

from postgrest import APIError

from app.config import settings
from app.utils.errors import (
    DuplicateRecordError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
)
from supabase import AsyncClient

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
# Postgres classes 22 (data exception) and 23 (integrity constraint) are caller mistakes.
CLIENT_ERROR_CLASSES = ("22", "23")


def is_unique_violation(exc: APIError) -> bool:
    """Return True when a query failed due to a unique constraint."""
    message = str(getattr(exc, "message", "")).lower()
    code = str(getattr(exc, "code", "")).lower()
    return "duplicate key value" in message or code == UNIQUE_VIOLATION


def translate_api_error(exc: APIError) -> Exception:
    """Map a PostgREST error onto the application error hierarchy."""
    message = str(getattr(exc, "message", None) or "Database request failed")
    code = str(getattr(exc, "code", "") or "")
    if is_unique_violation(exc):
        return DuplicateRecordError(message)
    if code.startswith(CLIENT_ERROR_CLASSES):
        return InvalidInputError(message)
    return PersistenceError(message)


class SupabaseService:
    """Thin helper wrapper around an async Supabase client."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def execute(self, query, default: Any = None) -> Any:
        """Execute a Supabase query and normalize API errors."""
        started = time.perf_counter()
        try:
            response = await query.execute()
        except APIError as exc:
            raise translate_api_error(exc) from exc
        elapsed_ms = (time.perf_counter() - started) * 1000
        threshold_ms = settings.slow_query_log_threshold_ms
        if threshold_ms > 0 and elapsed_ms >= threshold_ms:
            logger.warning("Slow Supabase query %.1fms", elapsed_ms)
        data = response.data
        return default if data is None and default is not None else data

    async def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        not_found_label: str | None = None,
    ) -> dict[str, Any]:
        """Select a single row and raise NotFoundError when missing."""
        row = await self.select_first(table, filters, columns=columns)
        if row is None:
            raise NotFoundError(not_found_label or table)
        return row

    async def select_first(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Select a single row or return None."""
        query = self.client.table(table).select(columns)
        for key, value in filters.items():
            query = query.eq(key, value)
        rows = await self.execute(query.limit(1), default=[])
        return rows[0] if rows else None

    async def select_many(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select many rows from a table with optional filters and paging."""
        query = self.client.table(table).select(columns)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return await self.execute(query, default=[])

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        """Count rows in a table with optional equality filters."""
        query = self.client.table(table).select("*", count="exact", head=True)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        try:
            response = await query.execute()
        except APIError as exc:
            raise translate_api_error(exc) from exc
        return response.count or 0

    async def insert_one(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return the created object."""
        rows = await self.execute(self.client.table(table).insert(payload), default=[])
        if not rows:
            raise PersistenceError(f"Failed to insert into {table}")
        return rows[0]

    async def insert_many(
        self, table: str, payloads: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert many rows and return inserted rows."""
        if not payloads:
            return []
        return await self.execute(self.client.table(table).insert(payloads), default=[])

    async def update(
        self,
        table: str,
        filters: dict[str, Any],
        payload: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update rows by equality filters and return the updated rows."""
        query = self.client.table(table).update(payload)
        for key, value in filters.items():
            query = query.eq(key, value)
        return await self.execute(query, default=[])

    async def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete rows by equality filters and return removed rows."""
        query = self.client.table(table).delete()
        for key, value in filters.items():
            query = query.eq(key, value)
        return await self.execute(query, default=[])

    async def rpc(self, function: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Call a Postgres function exposed through PostgREST."""
        return await self.execute(self.client.rpc(function, params), default=[])
