"""Database connection manager for the State Store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from enrollgate.state_store.models import Base

if TYPE_CHECKING:
    import sqlite3

    from sqlalchemy import Connection, Engine

# Execution option naming the SQLite BEGIN mode (DEFERRED, IMMEDIATE, EXCLUSIVE).
BEGIN_MODE_OPTION = "enrollgate_begin"


class Database:
    """Database connection manager.

    Manages SQLite database connections with WAL mode enabled. Transactions
    are begun explicitly so write sessions can take the database write lock
    up front with BEGIN IMMEDIATE; concurrent writers then wait up to
    `busy_timeout` seconds instead of racing on stale reads.
    """

    def __init__(self, db_path: str = "enrollgate.db", busy_timeout: float = 30.0) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for in-memory DB.
            busy_timeout: Seconds a connection waits for a competing write lock.
        """
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._write_session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = _sqlite_engine(self.db_path, self.busy_timeout)
        return self._engine

    @property
    def write_engine(self) -> Engine:
        """Engine view whose transactions start with BEGIN IMMEDIATE."""
        return self.engine.execution_options(**{BEGIN_MODE_OPTION: "IMMEDIATE"})

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    @property
    def write_session_factory(self) -> sessionmaker[Session]:
        """Get or create the factory for write-locking sessions."""
        if self._write_session_factory is None:
            self._write_session_factory = sessionmaker(
                bind=self.write_engine,
                expire_on_commit=False,
            )
        return self._write_session_factory

    def create_tables(self) -> None:
        """Create all tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    def get_session(self, write: bool = False) -> Session:
        """Get a new database session.

        Args:
            write: Whether the session should hold the write lock from its
                   first statement.

        Returns:
            A new SQLAlchemy session.
        """
        if write:
            return self.write_session_factory()
        return self.session_factory()

    def is_wal_mode(self) -> bool:
        """Check if WAL mode is enabled.

        Returns:
            True if WAL mode is enabled.
        """
        with self.engine.connect() as conn:
            result = conn.execute(text("PRAGMA journal_mode"))
            mode = result.scalar()
            return mode == "wal"

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._write_session_factory = None


def _sqlite_engine(db_path: str, busy_timeout: float) -> Engine:
    """SQLite engine in WAL mode with foreign keys and explicit BEGIN."""
    connect_args = {"check_same_thread": False, "timeout": busy_timeout}
    if db_path == ":memory:":
        # One shared connection, otherwise every session sees an empty database
        engine = create_engine(
            "sqlite:///:memory:", poolclass=StaticPool, connect_args=connect_args
        )
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{db_path}", connect_args=connect_args)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: sqlite3.Connection, _record: object) -> None:
        # Autocommit at the driver level; the "begin" hook owns transactions
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA journal_mode=WAL")
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Connection) -> None:
        mode = conn.get_execution_options().get(BEGIN_MODE_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine
