"""
Outcome models: what a workload produced and how it was classified.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from corrupttest.domain.table import Table


class Effectiveness(str, Enum):
    """Classification of one (table, workload, injection) trial."""

    SUCCESS = "success"  # a safeguard reported the corruption at write time
    OTHER_ERROR = "other_error"  # the workload failed for some other reason
    FAILURE = "failure"  # written silently, found later by the structural check
    CONSISTENT = "consistent"  # the injection had no observable effect


@dataclass(frozen=True)
class WorkloadOutcome:
    """Terminal result of a workload's statement sequence."""

    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls) -> "WorkloadOutcome":
        return cls()

    @classmethod
    def failed(cls, error: str) -> "WorkloadOutcome":
        return cls(error=error)


@dataclass(frozen=True)
class RecheckResult:
    """Result of the structural re-check run after a successful workload."""

    error: str | None = None

    @property
    def detected(self) -> bool:
        return self.error is not None


class ResultKey(NamedTuple):
    """Identity of one trial in the results map."""

    table: Table
    workload: str
    injection: str
