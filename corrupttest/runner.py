"""
Harness runner: drives the schema space through a workload.

Each worker owns one connection, configures its session toggles once, and
consumes a disjoint round-robin partition of the (optionally limited) table
sequence. Per-worker results are merged when all workers are done.

Cancellation is cooperative: the stop signal is checked before a table
starts, never in the middle of one, so open transactions always reach
COMMIT or ROLLBACK.
"""

import asyncio
from collections.abc import Callable, Iterable, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from corrupttest.config import Settings
from corrupttest.database import SQLSession, configure_session
from corrupttest.domain import AVAILABLE_INJECTIONS, Table
from corrupttest.engine import WorkloadEngine
from corrupttest.errors import FaultInjectionError
from corrupttest.failpoint import FailpointController
from corrupttest.logging import get_logger
from corrupttest.runtime.results import ResultStore
from corrupttest.runtime.run_context import RunContext
from corrupttest.schema_space import enumerate_tables, limit_tables, partition
from corrupttest.workload.base import Workload
from corrupttest.workload.registry import get_workload

logger = get_logger(__name__)


class SessionPool(Protocol):
    def acquire(self) -> AbstractAsyncContextManager[SQLSession]: ...


class HarnessRunner:
    """Runs one workload over the schema space with a pool of workers."""

    def __init__(
        self,
        settings: Settings,
        pool: SessionPool,
        failpoints: FailpointController,
        context: RunContext,
        workload: Workload | None = None,
        injections: Sequence[str] = AVAILABLE_INJECTIONS,
        tables: Callable[[], Iterable[Table]] = enumerate_tables,
    ) -> None:
        """
        Initialize the runner.

        Args:
            settings: Harness settings (workers, limit, toggles)
            pool: Source of database sessions
            failpoints: Failpoint controller shared by all workers
            context: Run context receiving counters and the stop signal
            workload: Workload to run (default: settings.workload from the registry)
            injections: Injection kinds tried on every table
            tables: Factory returning a fresh table sequence per worker
        """
        self.settings = settings
        self.pool = pool
        self.context = context
        self.workload = workload or get_workload(
            settings.workload,
            failpoint_name=settings.failpoint_name,
            begin_statement=settings.begin_statement,
        )
        self.engine = WorkloadEngine(self.workload, failpoints, context, injections)
        self._tables = tables

    def worker_tables(self, index: int) -> Iterable[Table]:
        """Tables assigned to worker `index`."""
        tables = limit_tables(self._tables(), self.settings.limit)
        return partition(tables, index, self.settings.workers)

    async def _worker(self, index: int) -> ResultStore:
        store = ResultStore()
        try:
            async with self.pool.acquire() as session:
                await configure_session(session, self.settings)
                for table in self.worker_tables(index):
                    if self.context.stop_requested:
                        logger.info("Worker %d stopping before table %s", index, table.name)
                        self.context.mark_interrupted()
                        break
                    try:
                        await self.engine.run_table(session, table, store)
                    except FaultInjectionError as e:
                        self.context.metrics.tables_aborted += 1
                        logger.error("Table %s aborted: %s", table.name, e)
                        continue
                    self.context.metrics.tables_completed += 1
                    logger.info(
                        "table per second: %.3f",
                        self.context.tables_per_second(),
                    )
        except Exception:
            # any worker failure ends the run; the others stop at their next table
            self.context.request_stop()
            raise
        return store

    async def run(self) -> ResultStore:
        """
        Run all workers to completion and merge their results.

        Raises:
            SetupError: a worker hit a fatal error; the others stop at
                their next table boundary before this is raised. Any other
                worker exception is raised the same way.
        """
        logger.info(
            "Running workload %s with %d worker(s)",
            self.workload.name,
            self.settings.workers,
        )
        outcomes = await asyncio.gather(
            *(self._worker(i) for i in range(self.settings.workers)),
            return_exceptions=True,
        )
        errors = [o for o in outcomes if isinstance(o, BaseException)]
        if errors:
            raise errors[0]
        stores = [o for o in outcomes if isinstance(o, ResultStore)]
        results = ResultStore.merge(stores)
        logger.info(
            "%d tables finish (%d aborted)",
            self.context.metrics.tables_completed,
            self.context.metrics.tables_aborted,
        )
        return results
