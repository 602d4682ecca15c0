"""In-memory table store with referential integrity."""

import copy
import itertools
import logging
import threading
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from smarta.exceptions import (
    DataStoreError,
    EntityNotFoundError,
    ReferentialIntegrityError,
    UniqueConstraintError,
)
from smarta.store.base import (
    FOREIGN_KEYS,
    SET_NULL_ON_DELETE,
    TABLES,
    UNIQUE_COLUMNS,
    UPDATED_AT_TABLES,
    Query,
    TableStore,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryTableStore(TableStore):
    """Table store held in process memory.

    Behaves like the hosted backend: foreign keys and unique columns are
    enforced, deletes cascade, and timestamps are set by the store.
    Used for tests, demos and local development.

    Parameters
    ----------
    clock : Callable[[], datetime] | None
        Source of ``created_at``/``updated_at`` timestamps.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self.tables: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in TABLES}
        self._clock = clock or _utcnow
        self._sequence = itertools.count()
        self._inserted: dict[str, int] = {}
        self._lock = threading.RLock()

    def select(self, query: Query) -> list[dict[str, Any]]:
        """Return copies of the rows matching the query."""
        with self._lock:
            rows = [
                dict(row)
                for row in self._table(query.table).values()
                if all(f.matches(row) for f in query.filters)
            ]

        if query.order_by:
            column = query.order_by
            rows.sort(
                key=lambda r: (r.get(column) is None, r.get(column), self._inserted.get(r["id"], 0)),
                reverse=query.descending,
            )

        if query.row_limit is not None:
            rows = rows[: query.row_limit]

        logger.debug("select %s: %d rows", query.table, len(rows))
        return rows

    def get(self, table: str, row_id: str) -> dict[str, Any]:
        """Return a copy of one row by id."""
        with self._lock:
            row = self._table(table).get(row_id)
            if row is None:
                raise EntityNotFoundError(f"{table} row {row_id} not found")
            return dict(row)

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row, assigning id and timestamps."""
        with self._lock:
            rows = self._table(table)
            stored = dict(row)
            if not stored.get("id"):
                stored["id"] = str(uuid.uuid4())
            if stored["id"] in rows:
                raise UniqueConstraintError(f"{table} row {stored['id']} already exists")

            now = self._clock()
            stored.setdefault("created_at", now)
            if stored["created_at"] is None:
                stored["created_at"] = now
            if table in UPDATED_AT_TABLES:
                stored["updated_at"] = now

            self._check_foreign_keys(table, stored)
            self._check_unique(table, stored)

            rows[stored["id"]] = stored
            self._inserted[stored["id"]] = next(self._sequence)
            return dict(stored)

    def update(self, table: str, row_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply changes to a row and stamp ``updated_at``."""
        with self._lock:
            rows = self._table(table)
            if row_id not in rows:
                raise EntityNotFoundError(f"{table} row {row_id} not found")

            stored = {**rows[row_id], **changes, "id": row_id}
            if table in UPDATED_AT_TABLES:
                stored["updated_at"] = self._clock()

            self._check_foreign_keys(table, stored)
            self._check_unique(table, stored)

            rows[row_id] = stored
            return dict(stored)

    def delete(self, table: str, row_id: str) -> None:
        """Delete a row and apply cascades to dependent rows."""
        with self._lock:
            rows = self._table(table)
            if rows.pop(row_id, None) is None:
                logger.debug("delete %s %s: no such row", table, row_id)
                return
            self._inserted.pop(row_id, None)

            for child, columns in FOREIGN_KEYS.items():
                for column, parent in columns.items():
                    if parent != table:
                        continue
                    dependants = [
                        r["id"] for r in self.tables[child].values() if r.get(column) == row_id
                    ]
                    for child_id in dependants:
                        if (child, column) in SET_NULL_ON_DELETE:
                            self.tables[child][child_id][column] = None
                        else:
                            self.delete(child, child_id)

    @contextmanager
    def transaction(self) -> Iterator["InMemoryTableStore"]:
        """Restore every table if the block raises."""
        with self._lock:
            snapshot = copy.deepcopy(self.tables)
            inserted = dict(self._inserted)
            try:
                yield self
            except BaseException:
                self.tables = snapshot
                self._inserted = inserted
                logger.debug("transaction rolled back")
                raise

    def summary(self) -> dict[str, int]:
        """Return row counts per table."""
        with self._lock:
            return {name: len(rows) for name, rows in self.tables.items()}

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        try:
            return self.tables[table]
        except KeyError:
            raise DataStoreError(f"Unknown table: {table}") from None

    def _check_foreign_keys(self, table: str, row: dict[str, Any]) -> None:
        for column, parent in FOREIGN_KEYS.get(table, {}).items():
            value = row.get(column)
            if value is not None and value not in self.tables[parent]:
                raise ReferentialIntegrityError(f"{parent} row {value} not found ({table}.{column})")

    def _check_unique(self, table: str, row: dict[str, Any]) -> None:
        for column in UNIQUE_COLUMNS.get(table, ()):
            value = row.get(column)
            if value is None:
                continue
            for other in self.tables[table].values():
                if other["id"] != row["id"] and other.get(column) == value:
                    raise UniqueConstraintError(f"{table}.{column} {value!r} already exists")
