"""
Run context for a harness run.

Holds the run id, run-scoped counters and the cooperative stop signal.
One context is created per run and passed to every component that needs it.
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4


def generate_run_id(prefix: str = "corrupttest") -> str:
    """
    Generate a unique run ID.

    Format: {prefix}_{timestamp}_{uuid8}
    Example: corrupttest_20240115_143022_a1b2c3d4
    """
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    short_uuid = uuid4().hex[:8]
    return f"{prefix}_{timestamp}_{short_uuid}"


@dataclass
class RunMetrics:
    """
    Counters accumulated over a run.

    Only touched from the event loop thread, so plain attributes are enough.
    """

    failpoint_duration_ms: float = 0.0
    failpoint_calls: int = 0
    create_table_duration_ms: float = 0.0
    tables_completed: int = 0
    tables_aborted: int = 0

    def add_failpoint_call(self, duration_s: float) -> None:
        self.failpoint_duration_ms += duration_s * 1000
        self.failpoint_calls += 1

    def add_create_table(self, duration_s: float) -> None:
        self.create_table_duration_ms += duration_s * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "failpoint_duration_ms": round(self.failpoint_duration_ms, 1),
            "failpoint_calls": self.failpoint_calls,
            "create_table_duration_ms": round(self.create_table_duration_ms, 1),
            "tables_completed": self.tables_completed,
            "tables_aborted": self.tables_aborted,
        }


@dataclass
class RunContext:
    """Context shared by all workers of one run."""

    run_id: str = field(default_factory=generate_run_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    metrics: RunMetrics = field(default_factory=RunMetrics)
    _started: float = field(default_factory=time.perf_counter, repr=False)
    _stop: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    # Set when a worker skipped tables because of a stop request
    interrupted: bool = False

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        """Ask workers to stop before starting their next table."""
        self._stop.set()

    def mark_interrupted(self) -> None:
        self.interrupted = True

    def elapsed_s(self) -> float:
        return time.perf_counter() - self._started

    def tables_per_second(self) -> float:
        elapsed = self.elapsed_s()
        if elapsed <= 0:
            return 0.0
        return self.metrics.tables_completed / elapsed

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "run_id": self.run_id,
            "created_at": self.created_at.isoformat(),
            "elapsed_s": round(self.elapsed_s(), 2),
            "tables_per_second": round(self.tables_per_second(), 3),
            "interrupted": self.interrupted,
            **self.metrics.to_dict(),
        }
