"""
SQL sessions against the target database.

PyMySQL is blocking, so every statement runs in a worker thread via
asyncio.to_thread. A session is owned by exactly one worker and its
statements are issued strictly one after another.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from logging import Logger
from typing import Any, Protocol
from urllib.parse import unquote, urlsplit

import pymysql

from corrupttest.config import Settings
from corrupttest.errors import SetupError, StatementError
from corrupttest.logging import get_logger, redact_sensitive

logger = get_logger(__name__)

DEFAULT_PORT = 4000


class SQLSession(Protocol):
    """Anything that can execute one SQL statement at a time."""

    async def execute(self, statement: str) -> None: ...


def parse_database_url(url: str) -> dict[str, Any]:
    """
    Convert a mysql:// URI into pymysql.connect() keyword arguments.

    Example: mysql://root:pw@127.0.0.1:4000/test
    """
    parts = urlsplit(url)
    if parts.scheme not in {"mysql", "mysql+pymysql"}:
        raise ValueError(f"Unsupported database URL scheme: {parts.scheme!r}")
    database = parts.path.lstrip("/") or None
    return {
        "host": parts.hostname or "127.0.0.1",
        "port": parts.port or DEFAULT_PORT,
        "user": unquote(parts.username) if parts.username else "root",
        "password": unquote(parts.password) if parts.password else "",
        "database": database,
        "autocommit": True,
        "charset": "utf8mb4",
    }


class MySQLSession:
    """One checked-out PyMySQL connection."""

    def __init__(self, connection: pymysql.connections.Connection, log: Logger | None = None) -> None:
        self._connection = connection
        self._logger = log or logger

    def _execute_sync(self, statement: str) -> None:
        with self._connection.cursor() as cursor:
            cursor.execute(statement)
            cursor.fetchall()

    async def execute(self, statement: str) -> None:
        """
        Execute a statement and discard any rows.

        Raises:
            StatementError: the server rejected the statement or the link broke
        """
        self._logger.debug("executing: %s", statement)
        try:
            await asyncio.to_thread(self._execute_sync, statement)
        except pymysql.MySQLError as e:
            code, message = _split_mysql_error(e)
            raise StatementError(message, statement=statement, code=code) from e


def _split_mysql_error(error: pymysql.MySQLError) -> tuple[int | None, str]:
    args = error.args
    if len(args) >= 2 and isinstance(args[0], int):
        return args[0], str(args[1])
    return None, str(error)


class MySQLPool:
    """
    Small connection pool: connections are opened on demand and reused.

    Session variables stick to a connection, so each worker should configure
    the session it acquires before running workloads on it.
    """

    def __init__(self, database_url: str, max_size: int = 1) -> None:
        self._connect_kwargs = parse_database_url(database_url)
        self._max_size = max_size
        self._idle: asyncio.Queue[pymysql.connections.Connection] = asyncio.Queue()
        self._opened: list[pymysql.connections.Connection] = []
        self._open_lock = asyncio.Lock()

    async def _connect(self) -> pymysql.connections.Connection:
        logger.info("Opening database connection: %s", redact_sensitive(self._connect_kwargs))
        try:
            return await asyncio.to_thread(pymysql.connect, **self._connect_kwargs)
        except pymysql.MySQLError as e:
            raise SetupError(f"cannot connect to database: {e}") from e

    async def _checkout(self) -> pymysql.connections.Connection:
        async with self._open_lock:
            if self._idle.empty() and len(self._opened) < self._max_size:
                connection = await self._connect()
                self._opened.append(connection)
                return connection
        return await self._idle.get()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[MySQLSession]:
        """Check out a connection for exclusive use."""
        connection = await self._checkout()
        try:
            yield MySQLSession(connection)
        finally:
            self._idle.put_nowait(connection)

    async def close(self) -> None:
        for connection in self._opened:
            await asyncio.to_thread(connection.close)
        self._opened.clear()
        self._idle = asyncio.Queue()


def session_setup_statements(settings: Settings) -> list[str]:
    """Statements that switch the write-path safeguards for one session."""
    statements = [
        f"SET @@tidb_enable_mutation_checker = {settings.mutation_checker_value}",
        f"SET @@tidb_txn_assertion_level = '{settings.assertion.value.upper()}'",
    ]
    if settings.txn_mode is not None:
        statements.append(f"SET tidb_txn_mode = '{settings.txn_mode}'")
    return statements


async def configure_session(session: SQLSession, settings: Settings) -> None:
    """
    Apply safeguard toggles to the session that will run the workloads.

    These are session-scoped: setting them on any other connection has no
    effect on the workload.

    Raises:
        SetupError: a toggle could not be applied
    """
    for statement in session_setup_statements(settings):
        try:
            await session.execute(statement)
        except StatementError as e:
            raise SetupError(f"failed to configure session ({statement}): {e}") from e
