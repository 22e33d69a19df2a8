"""
DuckDB connection handling for the deck store.

A ConnectionHandler owns one connection per database. Every connection and
transaction cursor it hands out runs with its session time zone set to UTC,
so TIMESTAMPTZ columns come back as UTC datetimes (DuckDB uses pytz for the
conversion). Multi-statement writes go through `transaction()`.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

import duckdb

from ..exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"
SESSION_TIMEZONE = "UTC"


class ConnectionHandler:
    """Opens, configures and closes the DuckDB connection behind a store."""

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        """
        Parameters:
            db_path (Union[str, Path]): Database file, or ":memory:" (any
                case) for a throwaway in-memory store.
            read_only (bool): Open the file without write access.
        """
        if isinstance(db_path, str) and db_path.lower() == MEMORY_DB:
            self.db_path_resolved = Path(MEMORY_DB)
        else:
            self.db_path_resolved = Path(db_path).expanduser().resolve()
        self.read_only: bool = read_only
        self.is_new_db: bool = False
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        logger.debug(f"Deck store location: {self.db_path_resolved}")

    @property
    def is_memory(self) -> bool:
        return str(self.db_path_resolved) == MEMORY_DB

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def _configure_session(self, conn: duckdb.DuckDBPyConnection) -> None:
        conn.execute(f"SET TimeZone = '{SESSION_TIMEZONE}';")

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """
        Return the open connection, connecting on first use.

        A store counts as new when it is in memory or its file does not
        exist yet; the file's parent directory is created as needed.

        Raises:
            DatabaseConnectionError: If DuckDB cannot open or configure the
                database.
        """
        if self._connection is not None:
            return self._connection

        if self.is_memory:
            self.is_new_db = True
        else:
            self.is_new_db = not self.db_path_resolved.exists()
            if not self.read_only:
                self.db_path_resolved.parent.mkdir(parents=True, exist_ok=True)

        conn: Optional[duckdb.DuckDBPyConnection] = None
        try:
            conn = duckdb.connect(
                database=str(self.db_path_resolved), read_only=self.read_only
            )
            self._configure_session(conn)
        except duckdb.Error as e:
            if conn is not None:
                conn.close()
            logger.error(
                f"Could not open deck store at {self.db_path_resolved}: {e}"
            )
            raise DatabaseConnectionError(
                f"Failed to connect to database: {e}", original_exception=e
            ) from e

        self._connection = conn
        mode = "read-only" if self.read_only else "read-write"
        logger.info(
            f"Opened {'new' if self.is_new_db else 'existing'} deck store "
            f"at {self.db_path_resolved} ({mode})."
        )
        return conn

    @contextmanager
    def transaction(self, action: str) -> Iterator[duckdb.DuckDBPyConnection]:
        """
        Run a block of statements atomically on a dedicated cursor.

        Commits when the block finishes; on any exception the transaction is
        rolled back and the exception propagates unchanged. `action` names the
        operation in log messages.
        """
        with self.get_connection().cursor() as cursor:
            cursor.begin()
            try:
                self._configure_session(cursor)
                yield cursor
                cursor.commit()
            except Exception:
                self._rollback(cursor, action)
                raise

    def _rollback(self, cursor: duckdb.DuckDBPyConnection, action: str) -> None:
        try:
            cursor.rollback()
            logger.info(f"Transaction rolled back after failed {action}.")
        except duckdb.Error as rb_err:
            logger.error(f"Failed to rollback transaction: {rb_err}")

    def close_connection(self) -> None:
        """Close the connection; the next `get_connection` reconnects."""
        if self._connection is None:
            return
        try:
            self._connection.close()
            logger.info(f"Closed deck store at {self.db_path_resolved}.")
        except duckdb.Error as e:
            logger.error(f"Error closing the database connection: {e}")
        finally:
            self._connection = None
