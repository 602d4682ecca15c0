"""PostgreSQL table store over the hosted landlord schema."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import errors, sql
from psycopg.rows import dict_row

from smarta.config import PostgresConfig
from smarta.exceptions import (
    DataStoreError,
    EntityNotFoundError,
    ReferentialIntegrityError,
    UniqueConstraintError,
)
from smarta.store.base import TABLES, UPDATED_AT_TABLES, Filter, Query, TableStore

logger = logging.getLogger(__name__)

_COMPARISONS = {"eq": "=", "gte": ">=", "lte": "<="}


class PostgresTableStore(TableStore):
    """Table store backed by a PostgreSQL database.

    The schema (tables, defaults for ``id``/``created_at``/``updated_at``,
    foreign keys and cascades) is owned by the database, not by this
    project.

    Parameters
    ----------
    config : PostgresConfig | str
        Connection configuration or a libpq connection string.
    connection : psycopg.Connection | None
        Existing connection to use instead of opening one.
    """

    def __init__(
        self,
        config: PostgresConfig | str | None = None,
        connection: psycopg.Connection | None = None,
    ) -> None:
        if connection is None:
            if isinstance(config, PostgresConfig):
                conninfo = config.connection_string
            else:
                conninfo = config or PostgresConfig().connection_string
            try:
                connection = psycopg.connect(conninfo, autocommit=True, row_factory=dict_row)
            except psycopg.Error as e:
                raise DataStoreError(f"Could not connect to PostgreSQL: {e}") from e
        self._conn = connection

    def select(self, query: Query) -> list[dict[str, Any]]:
        """Run a SELECT built from the query."""
        stmt = sql.SQL("SELECT * FROM {}").format(self._identifier(query.table))
        params: list[Any] = []

        if query.filters:
            conditions = [self._compile_filter(f, params) for f in query.filters]
            stmt += sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conditions)

        if query.order_by:
            direction = sql.SQL("DESC") if query.descending else sql.SQL("ASC")
            stmt += sql.SQL(" ORDER BY {} {}").format(sql.Identifier(query.order_by), direction)

        if query.row_limit is not None:
            stmt += sql.SQL(" LIMIT %s")
            params.append(query.row_limit)

        return self._execute(stmt, params)

    def get(self, table: str, row_id: str) -> dict[str, Any]:
        """Return one row by id."""
        row = self.first(Query(table).eq("id", row_id))
        if row is None:
            raise EntityNotFoundError(f"{table} row {row_id} not found")
        return row

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """INSERT a row; database defaults fill id and timestamps."""
        values = {k: v for k, v in row.items() if not (k in ("id", "created_at", "updated_at") and v is None)}
        columns = list(values)
        stmt = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            self._identifier(table),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() * len(columns)),
        )
        return self._execute(stmt, [values[c] for c in columns])[0]

    def update(self, table: str, row_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """UPDATE one row, stamping ``updated_at`` server-side."""
        assignments = [sql.SQL("{} = %s").format(sql.Identifier(c)) for c in changes]
        if table in UPDATED_AT_TABLES and "updated_at" not in changes:
            assignments.append(sql.SQL("updated_at = now()"))
        if not assignments:
            return self.get(table, row_id)

        stmt = sql.SQL("UPDATE {} SET {} WHERE id = %s RETURNING *").format(
            self._identifier(table),
            sql.SQL(", ").join(assignments),
        )
        rows = self._execute(stmt, [*changes.values(), row_id])
        if not rows:
            raise EntityNotFoundError(f"{table} row {row_id} not found")
        return rows[0]

    def delete(self, table: str, row_id: str) -> None:
        """DELETE one row; cascades are applied by the database."""
        stmt = sql.SQL("DELETE FROM {} WHERE id = %s").format(self._identifier(table))
        self._execute(stmt, [row_id])

    @contextmanager
    def transaction(self) -> Iterator["PostgresTableStore"]:
        """Run the block inside a database transaction."""
        with self._conn.transaction():
            yield self

    def close(self) -> None:
        """Close the connection."""
        self._conn.close()
        logger.info("PostgreSQL store closed")

    @staticmethod
    def _identifier(table: str) -> sql.Identifier:
        if table not in TABLES:
            raise DataStoreError(f"Unknown table: {table}")
        return sql.Identifier(table)

    @staticmethod
    def _compile_filter(flt: Filter, params: list[Any]) -> sql.Composable:
        column = sql.Identifier(flt.column)
        if flt.op == "is_null" or (flt.op == "eq" and flt.value is None):
            return sql.SQL("{} IS NULL").format(column)
        if flt.op == "neq":
            # NULL rows differ from any value, as in the in-memory store
            params.append(flt.value)
            return sql.SQL("{} IS DISTINCT FROM %s").format(column)
        if flt.op == "in":
            params.append(list(flt.value))
            return sql.SQL("{} = ANY(%s)").format(column)
        if flt.op in _COMPARISONS:
            params.append(flt.value)
            return sql.SQL("{} " + _COMPARISONS[flt.op] + " %s").format(column)
        raise ValueError(f"Unknown operator: {flt.op}")

    def _execute(self, stmt: sql.Composable, params: list[Any]) -> list[dict[str, Any]]:
        try:
            with self._conn.cursor() as cur:
                cur.execute(stmt, params)
                return cur.fetchall() if cur.description else []
        except errors.UniqueViolation as e:
            raise UniqueConstraintError(str(e)) from e
        except errors.ForeignKeyViolation as e:
            raise ReferentialIntegrityError(str(e)) from e
        except psycopg.Error as e:
            raise DataStoreError(str(e)) from e
