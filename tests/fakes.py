"""
In-memory collaborators shared by the test suite.

``FakeDataClient`` interprets ``TableQuery`` reads the way PostgREST would;
``RecordingNotifier`` keeps every message it is asked to show.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from tenderdesk.shared.errors import ErrorCode, ErrorContext, RecordNotFoundError
from tenderdesk.shared.models.database import User
from tenderdesk.shared.models.table_query import Cardinality, TableQuery

COMPANY_ID = "c1"
USER_ID = "u1"


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _or_matches(row: Mapping[str, Any], or_filter: str) -> bool:
    """Evaluate ``col.is.null`` and ``col.eq.value`` disjunctions."""
    for clause in or_filter.split(","):
        column, op, argument = clause.split(".", 2)
        value = row.get(column)
        if op == "is" and argument == "null" and value is None:
            return True
        if op == "eq" and value is not None and _as_text(value) == argument:
            return True
    return False


# Column defaults the hosted schema fills in on insert
COLUMN_DEFAULTS: dict[str, dict[str, Any]] = {
    "tenders": {"status": "identified", "applied": False, "our_bid_amount": None},
    "competitors": {"encounter_count": 0},
}


class FakeDataClient:
    """In-memory stand-in for the Supabase data collaborator.

    Embedded relations must be stored on the rows already; the ``columns``
    of a query are recorded but not interpreted. Equality filters on an
    embedded column (``tender.user_company_id``) null the embed instead of
    dropping the row, like PostgREST does.
    """

    def __init__(
        self,
        tables: Optional[dict[str, list[dict[str, Any]]]] = None,
        user: Optional[User] = None,
    ) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.user = user
        self.calls: list[tuple[str, Any]] = []
        self.rpc_calls: list[tuple[str, dict[str, Any]]] = []
        self.failures: dict[str, Exception] = {}
        self._ids = itertools.count(1)

    # ------------------------------------------------------------ inspection

    def selects(self, table: Optional[str] = None) -> list[TableQuery]:
        return [q for op, q in self.calls if op == "select" and (table is None or q.table == table)]

    def fail(self, operation: str, error: Exception) -> None:
        """Make every later call of ``operation`` raise ``error``."""
        self.failures[operation] = error

    def _check(self, operation: str, payload: Any) -> None:
        self.calls.append((operation, payload))
        if operation in self.failures:
            raise self.failures[operation]

    def _rows(self, table: str, filters: Mapping[str, Any]) -> list[dict[str, Any]]:
        return [row for row in self.tables.get(table, []) if all(row.get(k) == v for k, v in filters.items())]

    # ------------------------------------------------------------------ reads

    async def select(self, query: TableQuery) -> Any:
        self._check("select", query)
        rows = []
        for stored in self.tables.get(query.table, []):
            row = self._filter_row(dict(stored), query)
            if row is not None:
                rows.append(row)

        for order in reversed(list(query.order)):
            rows.sort(
                key=lambda r, c=order.column: (r.get(c) is None, r.get(c) if r.get(c) is not None else 0),
                reverse=order.descending,
            )
        if query.limit is not None:
            rows = rows[: query.limit]

        if query.cardinality == Cardinality.MANY:
            return rows
        if not rows:
            if query.cardinality == Cardinality.MAYBE_ONE:
                return None
            raise RecordNotFoundError(
                ErrorCode.BACKEND_NO_ROWS,
                "JSON object requested, multiple (or no) rows returned",
                ErrorContext(operation="select", additional_data={"table": query.table}),
                backend_code="PGRST116",
            )
        return rows[0]

    @staticmethod
    def _filter_row(row: dict[str, Any], query: TableQuery) -> Optional[dict[str, Any]]:
        for column, expected in query.eq.items():
            if "." in column:
                embed, embedded_column = column.split(".", 1)
                nested = row.get(embed)
                if nested is not None and nested.get(embedded_column) != expected:
                    row[embed] = None
            elif row.get(column) != expected:
                return None
        if any(row.get(column) is not None for column in query.is_null):
            return None
        if any(row.get(c) is None or row[c] < v for c, v in query.gte.items()):
            return None
        if any(row.get(c) is None or row[c] > v for c, v in query.lte.items()):
            return None
        if any(row.get(c) in values for c, values in query.not_in.items()):
            return None
        if query.or_filter and not _or_matches(row, query.or_filter):
            return None
        return row

    async def count(self, table: str, filters: Mapping[str, Any]) -> int:
        self._check("count", (table, dict(filters)))
        return len(self._rows(table, filters))

    # ----------------------------------------------------------------- writes

    async def insert(self, table: str, row: Mapping[str, Any], columns: str = "*") -> dict[str, Any]:
        self._check("insert", (table, dict(row)))
        stored = {"id": f"{table}-{next(self._ids)}", **COLUMN_DEFAULTS.get(table, {}), **row}
        self.tables.setdefault(table, []).append(stored)
        return dict(stored)

    async def update(self, table: str, values: Mapping[str, Any], filters: Mapping[str, Any]) -> dict[str, Any]:
        self._check("update", (table, dict(values), dict(filters)))
        matched = self._rows(table, filters)
        if not matched:
            raise RecordNotFoundError(ErrorCode.BACKEND_NO_ROWS, "No rows updated", backend_code="PGRST116")
        for row in matched:
            row.update(values)
        return dict(matched[0])

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        self._check("delete", (table, dict(filters)))
        doomed = self._rows(table, filters)
        self.tables[table] = [row for row in self.tables.get(table, []) if row not in doomed]

    async def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        self._check("rpc", (function, dict(params)))
        self.rpc_calls.append((function, dict(params)))
        return None

    # ------------------------------------------------------------------- auth

    async def get_current_user(self) -> Optional[User]:
        self._check("get_current_user", None)
        return self.user

    async def sign_in_with_password(self, email: str, password: str) -> User:
        self._check("sign_in_with_password", email)
        self.user = User(id=USER_ID, email=email)
        return self.user

    async def sign_up(self, email: str, password: str) -> Optional[User]:
        self._check("sign_up", email)
        return User(id=USER_ID, email=email)

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        self._check("reset_password_for_email", (email, redirect_to))

    async def sign_out(self) -> None:
        self._check("sign_out", None)
        self.user = None


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.failures: list[str] = []
        self.infos: list[str] = []

    def notify_success(self, message: str) -> None:
        self.successes.append(message)

    def notify_failure(self, message: str) -> None:
        self.failures.append(message)

    def notify_info(self, message: str) -> None:
        self.infos.append(message)


@dataclass
class StaticCompany:
    """Company context with fixed ids."""

    company_id: Optional[str] = COMPANY_ID
    user_id: Optional[str] = USER_ID
