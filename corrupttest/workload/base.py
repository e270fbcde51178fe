"""
Workload interface.

A workload is a fixed statement sequence run against one table while one
injection is active. It never raises for statement failures: those roll the
open transaction back and become a failed WorkloadOutcome.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Protocol

from corrupttest.config import DEFAULT_FAILPOINT
from corrupttest.database import SQLSession
from corrupttest.domain import Row, Table, WorkloadOutcome, injection_directive
from corrupttest.domain.row import datum_to_sql, next_datum
from corrupttest.errors import FaultInjectionError, SetupError, StatementError
from corrupttest.logging import get_logger

logger = get_logger(__name__)


class FailpointSwitch(Protocol):
    """The part of FailpointController a workload needs."""

    async def enable(self, name: str, value: str) -> None: ...

    async def disable(self, name: str) -> None: ...


def insert_statement(table: Table, row: Row) -> str:
    return f"INSERT INTO {table.name} VALUES ({row.to_sql()})"


def update_statement(table: Table, row: Row) -> str:
    """Move `row` to a new first-column value, locating it by its second column."""
    first, second = table.columns[0].name, table.columns[1].name
    return (
        f"UPDATE {table.name} SET {first} = {datum_to_sql(next_datum(row[0]))} "
        f"WHERE {second} = {datum_to_sql(row[1])}"
    )


def delete_statement(table: Table, row: Row) -> str:
    second = table.columns[1].name
    return f"DELETE FROM {table.name} WHERE {second} = {datum_to_sql(row[1])}"


class Workload(ABC):
    """
    Abstract base class for workloads.

    Subclasses implement run(), issuing statements in order and enabling the
    failpoint at the point where the corruption should land. Disabling the
    failpoint is the caller's job so it happens on every path.
    """

    name: ClassVar[str]
    description: ClassVar[str]

    # Prefix the directive with "1*" so only the next mutation is corrupted
    first_application_only: ClassVar[bool] = True

    def __init__(
        self,
        failpoint_name: str = DEFAULT_FAILPOINT,
        begin_statement: str = "BEGIN OPTIMISTIC",
    ) -> None:
        self.failpoint_name = failpoint_name
        self.begin_statement = begin_statement

    def directive(self, injection: str) -> str:
        return injection_directive(injection, self.first_application_only)

    async def enable_injection(self, failpoints: FailpointSwitch, injection: str) -> None:
        await failpoints.enable(self.failpoint_name, self.directive(injection))

    async def execute(
        self,
        session: SQLSession,
        table: Table,
        injection: str,
        failpoints: FailpointSwitch,
    ) -> WorkloadOutcome:
        """
        Run the workload once.

        Raises:
            FaultInjectionError: the failpoint could not be enabled (after rollback)
            SetupError: the rollback itself failed
        """
        try:
            await self.run(session, table, injection, failpoints)
        except StatementError as e:
            logger.info(
                "%s on %s with %s: statement failed: %s",
                self.name,
                table.name,
                injection,
                e,
            )
            await self.rollback(session)
            return WorkloadOutcome.failed(str(e))
        except FaultInjectionError:
            await self.rollback(session)
            raise
        return WorkloadOutcome.ok()

    async def rollback(self, session: SQLSession) -> None:
        """Abort the open transaction, if any."""
        try:
            await session.execute("ROLLBACK")
        except StatementError as e:
            raise SetupError(f"rollback failed, session is unusable: {e}") from e

    @abstractmethod
    async def run(
        self,
        session: SQLSession,
        table: Table,
        injection: str,
        failpoints: FailpointSwitch,
    ) -> None:
        """
        Issue the workload's statements.

        StatementError must be left to propagate; execute() handles it.
        """
        pass
