"""Supabase data collaborator.

Translates ``TableQuery`` reads and the table writes used by the feature
services into calls on the async supabase client, and PostgREST failures
into the TenderDesk error hierarchy.

PostgREST reports "zero rows for a single-row read" with code ``PGRST116``.
That code is turned into ``RecordNotFoundError`` here and nowhere else, so
callers declare "no rows is not an error" by catching that class.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from tenderdesk.config.models.api_settings import APISettings
from tenderdesk.shared.errors import (
    BackendError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    RecordNotFoundError,
    create_config_error,
    create_not_authenticated_error,
)
from tenderdesk.shared.models.database import User
from tenderdesk.shared.models.table_query import Cardinality, TableQuery

logger = logging.getLogger(__name__)

NO_ROWS_CODE = "PGRST116"
CONSTRAINT_CODES = frozenset({"23502", "23503", "23505", "23514"})


def translate_api_error(error: APIError, table: str | None, operation: str) -> BackendError:
    """Map a PostgREST error onto the backend error classes."""
    backend_code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    context = ErrorContext(
        operation=operation,
        additional_data={"table": table, "backend_code": backend_code},
    )

    if backend_code == NO_ROWS_CODE:
        return RecordNotFoundError(ErrorCode.BACKEND_NO_ROWS, message, context, error, backend_code=backend_code)
    if backend_code in CONSTRAINT_CODES:
        return BackendError(ErrorCode.CONSTRAINT_VIOLATION, message, context, error, backend_code=backend_code)
    return BackendError(ErrorCode.BACKEND_ERROR, message, context, error, backend_code=backend_code)


def _to_user(raw: Any) -> Optional[User]:
    if raw is None:
        return None
    return User(id=str(raw.id), email=getattr(raw, "email", None))


class SupabaseDataClient:
    """Data collaborator backed by a Supabase project.

    The underlying async client is created lazily on first use.

    Args:
        settings: API settings holding the project URL and anon key
        client: Pre-built client (tests, or callers sharing a session)
    """

    def __init__(self, settings: APISettings, client: AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client
        self._lock = asyncio.Lock()

    async def get_client(self) -> AsyncClient:
        if self._client is not None:
            return self._client
        async with self._lock:
            if self._client is None:
                if not self._settings.is_configured:
                    raise create_config_error(
                        "Supabase URL and key are not configured",
                        config_key="api.supabase_url",
                        operation="create_supabase_client",
                    )
                self._client = await acreate_client(self._settings.supabase_url, self._settings.supabase_key)
                logger.info("Supabase client created for %s", self._settings.supabase_url)
        return self._client

    # ------------------------------------------------------------------ reads

    async def select(self, query: TableQuery) -> Any:
        client = await self.get_client()
        builder = client.table(query.table).select(query.columns)

        for column, value in query.eq.items():
            builder = builder.eq(column, value)
        for column in query.is_null:
            builder = builder.is_(column, "null")
        for column, value in query.gte.items():
            builder = builder.gte(column, value)
        for column, value in query.lte.items():
            builder = builder.lte(column, value)
        for column, values in query.not_in.items():
            builder = builder.not_.in_(column, list(values))
        if query.or_filter:
            builder = builder.or_(query.or_filter)
        for order in query.order:
            builder = builder.order(order.column, desc=order.descending)

        if query.cardinality == Cardinality.MANY:
            if query.limit is not None:
                builder = builder.limit(query.limit)
            response = await self._execute(builder, query.table, "select")
            return response.data or []

        # Single-row reads take the first row of the ordered result
        builder = builder.limit(1)
        response = await self._execute(builder, query.table, "select")
        rows = response.data or []
        if rows:
            return rows[0]
        if query.cardinality == Cardinality.MAYBE_ONE:
            return None
        raise RecordNotFoundError(
            ErrorCode.BACKEND_NO_ROWS,
            f"No {query.table} row matched the query",
            ErrorContext(operation="select", additional_data={"table": query.table}),
            backend_code=NO_ROWS_CODE,
        )

    async def count(self, table: str, filters: Mapping[str, Any]) -> int:
        client = await self.get_client()
        builder = client.table(table).select("*", count="exact", head=True)
        for column, value in filters.items():
            builder = builder.eq(column, value)
        response = await self._execute(builder, table, "count")
        return response.count or 0

    # ----------------------------------------------------------------- writes

    async def insert(self, table: str, row: Mapping[str, Any], columns: str = "*") -> dict[str, Any]:
        client = await self.get_client()
        response = await self._execute(client.table(table).insert(dict(row)), table, "insert")
        inserted = self._first_row(response.data, table, "insert")
        if columns == "*" or "id" not in inserted:
            return inserted
        # Embedded relations need a second read
        return await self.select(TableQuery(table, columns=columns, eq={"id": inserted["id"]}).single())

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        filters: Mapping[str, Any],
    ) -> dict[str, Any]:
        client = await self.get_client()
        builder = client.table(table).update(dict(values))
        for column, value in filters.items():
            builder = builder.eq(column, value)
        response = await self._execute(builder, table, "update")
        return self._first_row(response.data, table, "update")

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        client = await self.get_client()
        builder = client.table(table).delete()
        for column, value in filters.items():
            builder = builder.eq(column, value)
        await self._execute(builder, table, "delete")

    async def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        client = await self.get_client()
        response = await self._execute(client.rpc(function, dict(params)), None, f"rpc:{function}")
        return response.data

    # ------------------------------------------------------------------- auth

    async def get_current_user(self) -> Optional[User]:
        client = await self.get_client()
        response = await client.auth.get_user()
        if response is None:
            return None
        return _to_user(response.user)

    async def sign_in_with_password(self, email: str, password: str) -> User:
        client = await self.get_client()
        response = await client.auth.sign_in_with_password({"email": email, "password": password})
        user = _to_user(response.user)
        if user is None:
            raise create_not_authenticated_error("sign_in")
        return user

    async def sign_up(self, email: str, password: str) -> Optional[User]:
        client = await self.get_client()
        response = await client.auth.sign_up({"email": email, "password": password})
        return _to_user(response.user)

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        client = await self.get_client()
        await client.auth.reset_password_for_email(email, {"redirect_to": redirect_to})

    async def sign_out(self) -> None:
        client = await self.get_client()
        await client.auth.sign_out()

    # ---------------------------------------------------------------- helpers

    @staticmethod
    async def _execute(builder: Any, table: str | None, operation: str) -> Any:
        try:
            return await builder.execute()
        except APIError as e:
            raise translate_api_error(e, table, operation) from e
        except httpx.TimeoutException as e:
            raise InfrastructureError(
                ErrorCode.API_TIMEOUT,
                "Request to the database timed out",
                ErrorContext(operation=operation, additional_data={"table": table}),
                e,
            ) from e
        except httpx.TransportError as e:
            raise InfrastructureError(
                ErrorCode.NETWORK_ERROR,
                f"Network error: {e}",
                ErrorContext(operation=operation, additional_data={"table": table}),
                e,
            ) from e

    @staticmethod
    def _first_row(data: Any, table: str, operation: str) -> dict[str, Any]:
        if isinstance(data, list):
            if data:
                return data[0]
            raise RecordNotFoundError(
                ErrorCode.BACKEND_NO_ROWS,
                f"No {table} row was returned by {operation}",
                ErrorContext(operation=operation, additional_data={"table": table}),
                backend_code=NO_ROWS_CODE,
            )
        return data
