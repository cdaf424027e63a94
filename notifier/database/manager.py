"""
Database Manager for the notification worker
Owns the DuckDB store that holds the notifications table
"""
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import duckdb

from ..config import config
from ..exceptions import StoreNotInitializedError
from .migrations.runner import MigrationRunner
from .repos import NotificationRepository, SessionRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Lifecycle-scoped handle to the relational store.

    Constructed once at process start and passed to every component that
    touches the store. Nothing is opened until init() is called.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Args:
            db_path: Path to the DuckDB file (defaults to config.DB_PATH)
        """
        self.db_path = Path(db_path or config.DB_PATH)
        self._conn: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.Lock()

        self.notifications = NotificationRepository(self)
        self.sessions = SessionRepository(self)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self._conn is not None

    def init(self) -> None:
        """Open the store and apply pending migrations. Safe to call twice."""
        with self._lock:
            if self._conn is not None:
                return
            self.db_path.parent.mkdir(exist_ok=True, parents=True)
            conn = duckdb.connect(str(self.db_path))
            try:
                applied = MigrationRunner(conn).run_pending()
            except Exception:
                conn.close()
                raise
            self._conn = conn
            logger.info(f"Database ready at {self.db_path} ({applied} migration(s) applied)")

    def close(self) -> None:
        """Release the store. Idempotent."""
        with self._lock:
            if self._conn is None:
                return
            conn, self._conn = self._conn, None
            conn.close()
            logger.info("Database connection closed")

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def _cursor(self) -> duckdb.DuckDBPyConnection:
        with self._lock:
            if self._conn is None:
                raise StoreNotInitializedError("DatabaseManager.init() has not been called")
            # cursor() gives each caller its own connection to the same database,
            # so worker threads never share one.
            return self._conn.cursor()

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        """Read-write connection; commits on success, rolls back on error."""
        cursor = self._cursor()
        try:
            cursor.begin()
            yield cursor
            cursor.commit()
        except Exception as e:
            try:
                cursor.rollback()
            except duckdb.Error:
                pass
            logger.error(f"Database error: {e}")
            raise
        finally:
            cursor.close()

    @contextmanager
    def get_read_connection(self) -> Iterator[Any]:
        """Connection for read-only queries (no explicit transaction)."""
        cursor = self._cursor()
        try:
            yield cursor
        finally:
            cursor.close()

    def __str__(self) -> str:
        state = "open" if self.initialized else "closed"
        return f"DatabaseManager(path={self.db_path}, state={state})"
