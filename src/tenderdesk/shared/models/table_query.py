"""Backend-neutral description of a table read.

Feature services describe what they want to read as a ``TableQuery``; the
data collaborator translates it into its own query language. This keeps
the feature layer testable against an in-memory collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class Cardinality(str, Enum):
    """How many rows a query expects.

    ONE fails with ``RecordNotFoundError`` on zero rows; MAYBE_ONE returns
    None instead.
    """

    MANY = "many"
    ONE = "one"
    MAYBE_ONE = "maybe_one"


@dataclass(frozen=True)
class Order:
    column: str
    descending: bool = False


@dataclass(frozen=True)
class TableQuery:
    """A filtered, ordered select on one table.

    Attributes:
        table: Table name
        columns: Column list in PostgREST select syntax, embeds included
        eq: Equality filters
        is_null: Columns that must be null
        gte: Lower bounds (inclusive)
        lte: Upper bounds (inclusive)
        not_in: Columns whose value must not be one of the given values
        or_filter: Disjunction in PostgREST syntax, e.g.
            ``"user_company_id.is.null,user_company_id.eq.c1"``
        order: Sort order, first entry most significant
        limit: Maximum number of rows
        cardinality: Expected number of rows
    """

    table: str
    columns: str = "*"
    eq: Mapping[str, Any] = field(default_factory=dict)
    is_null: Sequence[str] = ()
    gte: Mapping[str, Any] = field(default_factory=dict)
    lte: Mapping[str, Any] = field(default_factory=dict)
    not_in: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    or_filter: Optional[str] = None
    order: Sequence[Order] = ()
    limit: Optional[int] = None
    cardinality: Cardinality = Cardinality.MANY

    def single(self) -> TableQuery:
        return replace(self, cardinality=Cardinality.ONE)

    def maybe_single(self) -> TableQuery:
        return replace(self, cardinality=Cardinality.MAYBE_ONE)
