"""
Per-injection tallies of effectiveness.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from corrupttest.domain import AVAILABLE_INJECTIONS, Effectiveness, ResultKey


@dataclass
class EffectivenessCounts:
    """How many trials of one injection fell into each category."""

    success: int = 0
    other_error: int = 0
    failure: int = 0
    consistent: int = 0

    def add(self, effectiveness: Effectiveness) -> None:
        if effectiveness == Effectiveness.SUCCESS:
            self.success += 1
        elif effectiveness == Effectiveness.OTHER_ERROR:
            self.other_error += 1
        elif effectiveness == Effectiveness.FAILURE:
            self.failure += 1
        elif effectiveness == Effectiveness.CONSISTENT:
            self.consistent += 1
        else:
            raise ValueError(f"unknown effectiveness: {effectiveness!r}")

    @property
    def total(self) -> int:
        return self.success + self.other_error + self.failure + self.consistent

    @property
    def success_ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.success / self.total

    def to_dict(self) -> dict[str, int]:
        return {
            "success": self.success,
            "other_error": self.other_error,
            "failure": self.failure,
            "consistent": self.consistent,
        }


def aggregate(
    results: Mapping[ResultKey, Effectiveness],
    injections: Iterable[str] = AVAILABLE_INJECTIONS,
) -> dict[str, EffectivenessCounts]:
    """
    Count results per injection.

    Every injection in `injections` gets a row, even with no results.
    Injections present in `results` but not listed are appended in
    first-seen order.
    """
    counts = {injection: EffectivenessCounts() for injection in injections}
    for key, effectiveness in results.items():
        counts.setdefault(key.injection, EffectivenessCounts()).add(effectiveness)
    return counts


def format_summary(counts: Mapping[str, EffectivenessCounts]) -> list[str]:
    """Human-readable summary lines, one per injection."""
    return [
        f"{injection}: success:{c.success} other error:{c.other_error} "
        f"failure:{c.failure} consistent:{c.consistent}"
        for injection, c in counts.items()
    ]
