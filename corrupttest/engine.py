"""
Workload engine: the per-table state machine.

For one table on one session:

    DROP IF EXISTS -> CREATE
    for each injection:
        [TRUNCATE]                      (every injection after the first)
        lock failpoint
          workload (enables the failpoint itself)
          disable failpoint             (always)
        unlock failpoint
        classify (+ admin check table) -> record
    DROP IF EXISTS                      (also when a step above fails)

DDL failures are fatal. Statement failures inside the workload are
classified. Failpoint control failures abort the table.
"""

import time
from collections.abc import Sequence

from corrupttest.classifier import evaluate
from corrupttest.database import SQLSession
from corrupttest.domain import AVAILABLE_INJECTIONS, Effectiveness, ResultKey, Table
from corrupttest.errors import FaultInjectionError, SetupError, StatementError
from corrupttest.failpoint import FailpointController
from corrupttest.logging import get_logger
from corrupttest.runtime.results import ResultStore
from corrupttest.runtime.run_context import RunContext
from corrupttest.workload.base import Workload

logger = get_logger(__name__)


class WorkloadEngine:
    """Runs one workload variant over every injection for a table."""

    def __init__(
        self,
        workload: Workload,
        failpoints: FailpointController,
        context: RunContext,
        injections: Sequence[str] = AVAILABLE_INJECTIONS,
    ) -> None:
        self.workload = workload
        self.failpoints = failpoints
        self.context = context
        self.injections = tuple(injections)

    async def _ddl(self, session: SQLSession, statement: str) -> None:
        try:
            await session.execute(statement)
        except StatementError as e:
            raise SetupError(f"DDL failed: {statement}: {e}") from e

    async def create_table(self, session: SQLSession, table: Table) -> None:
        await self._ddl(session, table.drop_statement())
        start_time = time.perf_counter()
        await self._ddl(session, table.create_statement())
        self.context.metrics.add_create_table(time.perf_counter() - start_time)

    async def _disable_after_fatal(self, failpoint: str) -> None:
        """Best-effort disable that never replaces the fatal error in flight."""
        try:
            await self.failpoints.disable(failpoint)
        except FaultInjectionError as e:
            logger.error("Could not disable failpoint %s after a fatal error: %s", failpoint, e)

    async def _drop_after_error(self, session: SQLSession, table: Table) -> None:
        """Best-effort DROP on the error path; its own failure is only logged."""
        try:
            await session.execute(table.drop_statement())
        except StatementError as e:
            logger.error("Could not drop table %s after an error: %s", table.name, e)

    async def run_injection(
        self, session: SQLSession, table: Table, injection: str
    ) -> Effectiveness:
        """Exercise one injection and classify the result."""
        failpoint = self.workload.failpoint_name
        async with self.failpoints.exclusive(failpoint):
            try:
                outcome = await self.workload.execute(session, table, injection, self.failpoints)
            except SetupError:
                await self._disable_after_fatal(failpoint)
                raise
            except BaseException:
                await self.failpoints.disable(failpoint)
                raise
            await self.failpoints.disable(failpoint)
        return await evaluate(session, table, outcome)

    async def run_table(self, session: SQLSession, table: Table, results: ResultStore) -> None:
        """
        Run every injection against `table`, recording one result each.

        The table is dropped on every path. On the error path the DROP is
        best effort and the original error is re-raised.

        Raises:
            SetupError: DDL failed or the session broke
            FaultInjectionError: a failpoint control call failed
        """
        await self.create_table(session, table)
        try:
            for position, injection in enumerate(self.injections):
                if position > 0:
                    await self._ddl(session, table.truncate_statement())
                logger.info("%s: %s on %s ready to go", self.workload.name, injection, table.name)
                effectiveness = await self.run_injection(session, table, injection)
                logger.info(
                    "%s: %s on %s finished: %s",
                    self.workload.name,
                    injection,
                    table.name,
                    effectiveness.value,
                )
                results.record(ResultKey(table, self.workload.name, injection), effectiveness)
        except BaseException:
            await self._drop_after_error(session, table)
            raise
        await self._ddl(session, table.drop_statement())
