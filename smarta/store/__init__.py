"""Table stores holding the landlord tables."""

from smarta.store.base import Filter, Query, TableStore
from smarta.store.memory import InMemoryTableStore
from smarta.store.postgres import PostgresTableStore

__all__ = ["Filter", "InMemoryTableStore", "PostgresTableStore", "Query", "TableStore"]
