"""Table store contract and query builder."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any

from smarta.store.serialization import serialize_value

TABLES = (
    "properties",
    "tenants",
    "meters",
    "meter_readings",
    "billing",
    "payments",
)

# child table -> {column: parent table}
FOREIGN_KEYS: dict[str, dict[str, str]] = {
    "tenants": {"property_id": "properties"},
    "meters": {"property_id": "properties", "tenant_id": "tenants"},
    "meter_readings": {"meter_id": "meters"},
    "billing": {"tenant_id": "tenants", "meter_id": "meters"},
    "payments": {"billing_id": "billing", "tenant_id": "tenants"},
}

# Foreign keys cleared instead of cascaded when the parent row is deleted
SET_NULL_ON_DELETE = {("meters", "tenant_id")}

UNIQUE_COLUMNS: dict[str, tuple[str, ...]] = {
    "payments": ("payment_reference",),
}

# meter_readings is append-only and has no updated_at column
UPDATED_AT_TABLES = frozenset(TABLES) - {"meter_readings"}

OPERATORS = ("eq", "neq", "is_null", "gte", "lte", "in")


@dataclass
class Filter:
    """Single column predicate."""

    column: str
    op: str
    value: Any = None

    def matches(self, row: dict[str, Any]) -> bool:
        """Evaluate the predicate against a row."""
        current = row.get(self.column)
        if self.op == "eq":
            return current == self.value
        if self.op == "neq":
            return current != self.value
        if self.op == "is_null":
            return current is None
        if self.op == "in":
            return current in self.value
        if current is None:
            return False
        if self.op == "gte":
            return current >= self.value
        if self.op == "lte":
            return current <= self.value
        raise ValueError(f"Unknown operator: {self.op}")


@dataclass
class Query:
    """Select query over one table.

    Builder methods return the query itself so they can be chained::

        Query("meters").is_null("tenant_id").eq("status", "available").order("meter_number")
    """

    table: str
    filters: list[Filter] = field(default_factory=list)
    order_by: str | None = None
    descending: bool = False
    row_limit: int | None = None

    def eq(self, column: str, value: Any) -> Query:
        self.filters.append(Filter(column, "eq", serialize_value(value)))
        return self

    def neq(self, column: str, value: Any) -> Query:
        self.filters.append(Filter(column, "neq", serialize_value(value)))
        return self

    def is_null(self, column: str) -> Query:
        self.filters.append(Filter(column, "is_null"))
        return self

    def gte(self, column: str, value: Any) -> Query:
        self.filters.append(Filter(column, "gte", serialize_value(value)))
        return self

    def lte(self, column: str, value: Any) -> Query:
        self.filters.append(Filter(column, "lte", serialize_value(value)))
        return self

    def in_(self, column: str, values: Any) -> Query:
        self.filters.append(Filter(column, "in", [serialize_value(v) for v in values]))
        return self

    def order(self, column: str, descending: bool = False) -> Query:
        self.order_by = column
        self.descending = descending
        return self

    def limit(self, count: int) -> Query:
        self.row_limit = count
        return self


class TableStore(ABC):
    """Access to the landlord tables.

    Rows are plain dicts keyed by column name. The store assigns ``id``,
    ``created_at`` and ``updated_at``.
    """

    @abstractmethod
    def select(self, query: Query) -> list[dict[str, Any]]:
        """Return rows matching the query."""

    @abstractmethod
    def get(self, table: str, row_id: str) -> dict[str, Any]:
        """Return one row by id.

        Raises
        ------
        EntityNotFoundError
            If no row has this id.
        """

    @abstractmethod
    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored."""

    @abstractmethod
    def update(self, table: str, row_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply changes to one row and return it as stored.

        Raises
        ------
        EntityNotFoundError
            If no row has this id.
        """

    @abstractmethod
    def delete(self, table: str, row_id: str) -> None:
        """Delete one row; dependent rows follow the schema's delete rules."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[TableStore]:
        """Group writes so that they all apply or none do."""

    def first(self, query: Query) -> dict[str, Any] | None:
        """Return the first matching row, if any."""
        rows = self.select(query.limit(1))
        return rows[0] if rows else None

    def close(self) -> None:
        """Release resources held by the store."""
