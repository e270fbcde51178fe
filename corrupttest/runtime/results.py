"""
Write-once results map keyed by (table, workload, injection).
"""

from collections.abc import Iterable, Iterator, Mapping

from corrupttest.domain import Effectiveness, ResultKey
from corrupttest.errors import ResultConflictError


class ResultStore(Mapping[ResultKey, Effectiveness]):
    """
    Results of one run (or one worker's partition of it).

    Each key may be recorded exactly once. Workers own separate stores
    which are merged after they finish.
    """

    def __init__(self) -> None:
        self._results: dict[ResultKey, Effectiveness] = {}

    def record(self, key: ResultKey, effectiveness: Effectiveness) -> None:
        """
        Record the classification of one trial.

        Raises:
            ResultConflictError: if the key was already recorded
        """
        if key in self._results:
            raise ResultConflictError(
                f"result for table={key.table.name} workload={key.workload} "
                f"injection={key.injection} recorded twice"
            )
        self._results[key] = effectiveness

    def __getitem__(self, key: ResultKey) -> Effectiveness:
        return self._results[key]

    def __iter__(self) -> Iterator[ResultKey]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    @classmethod
    def merge(cls, stores: Iterable["ResultStore"]) -> "ResultStore":
        """Combine per-worker stores; overlapping keys are a conflict."""
        merged = cls()
        for store in stores:
            for key, effectiveness in store.items():
                merged.record(key, effectiveness)
        return merged
