"""Append-only repository base for PostgreSQL tables.

Rows are inserted and read back; there is no update or
delete path.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from psycopg2 import errors as pg_errors

from .connection import ConnectionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class DuplicateError(RepositoryError):
    """A row with the same id already exists."""
    pass


class AppendOnlyRepository(ABC, Generic[T]):
    """Base repository for insert-and-read tables.

    Subclasses provide the row/entity conversions and inherit:
    - Connection handling
    - Error wrapping into RepositoryError
    - Logging
    """

    def __init__(self, connection_manager: ConnectionManager, table_name: str):
        self.connection_manager = connection_manager
        self.table_name = table_name

        logger.info("REPOSITORY_INITIALIZED", extra={"table_name": table_name})

    @property
    @abstractmethod
    def columns(self) -> Sequence[str]:
        """Column order used for both inserts and selects."""

    @abstractmethod
    def _row_to_entity(self, row: tuple) -> T:
        pass

    @abstractmethod
    def _entity_to_params(self, entity: T) -> Dict[str, Any]:
        pass

    def insert(self, entity: T) -> None:
        """Insert one row.

        Raises:
            DuplicateError: If the primary key already exists
            RepositoryError: On any other database failure
        """
        params = self._entity_to_params(entity)
        columns = list(self.columns)
        query = (
            f"INSERT INTO {self.table_name} ({', '.join(columns)}) "
            f"VALUES ({', '.join(['%s'] * len(columns))})"
        )

        try:
            with self.connection_manager.get_connection() as conn:
                try:
                    with conn.cursor() as cur:
                        cur.execute(query, [params[c] for c in columns])
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise
        except Exception as e:
            if isinstance(e, pg_errors.UniqueViolation):
                raise DuplicateError(f"Duplicate row in {self.table_name}: {e}") from e
            logger.error(
                "REPOSITORY_INSERT_FAILED",
                extra={"table_name": self.table_name, "error": str(e)}
            )
            raise RepositoryError(f"Failed to insert into {self.table_name}: {e}") from e

    def select_where(
        self,
        column: str,
        value: Any,
        order_by: str = "created_at",
        limit: Optional[int] = None,
    ) -> List[T]:
        """Select rows where column equals value, ascending by order_by."""
        if column not in self.columns or order_by not in self.columns:
            raise ValueError(f"Unknown column for {self.table_name}")

        query = (
            f"SELECT {', '.join(self.columns)} FROM {self.table_name} "
            f"WHERE {column} = %s ORDER BY {order_by} ASC"
        )
        params: List[Any] = [value]
        if limit is not None:
            query += " LIMIT %s"
            params.append(limit)

        try:
            with self.connection_manager.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    rows = cur.fetchall()
        except Exception as e:
            logger.error(
                "REPOSITORY_SELECT_FAILED",
                extra={"table_name": self.table_name, "error": str(e)}
            )
            raise RepositoryError(f"Failed to read from {self.table_name}: {e}") from e

        return [self._row_to_entity(row) for row in rows]

    def count(self) -> int:
        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT COUNT(*) FROM {self.table_name}")
                row = cur.fetchone()

        return row[0] if row else 0
