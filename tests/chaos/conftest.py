"""
Chaos testing configuration and shared fixtures.

Provides a simulated target database whose safeguards react to the
corruption failpoint the way the real one does.
"""

import pytest

from corrupttest.errors import StatementError
from tests.fixtures.fakes import FakeFailpoints, FakeSession


class SimulatedTarget(FakeSession):
    """
    A session whose COMMIT and admin check react to the active failpoint.

    - mutation checker ON: COMMIT of a corrupted transaction fails with an
      inconsistency error
    - mutation checker OFF: COMMIT succeeds and the corruption is stored;
      admin check reports it only when `check_detects` is set
    """

    def __init__(self, failpoints: FakeFailpoints, check_detects: bool = True) -> None:
        super().__init__(hook=self._react)
        self.failpoints = failpoints
        self.check_detects = check_detects
        self.checker_enabled = True
        self.corrupted = False

    def _react(self, statement: str) -> None:
        if statement.startswith("SET @@tidb_enable_mutation_checker"):
            self.checker_enabled = statement.endswith("ON")
        elif statement.startswith("INSERT") and self.failpoints.active:
            self.corrupted = True
        elif statement == "COMMIT" and self.corrupted:
            if self.checker_enabled:
                self.corrupted = False
                raise StatementError(
                    "inconsistent index i2 handle 1, index-values:\"\" != record-values:\"hello\"",
                    statement=statement,
                    code=8134,
                )
        elif statement == "ROLLBACK":
            self.corrupted = False
        elif statement.startswith("admin check table") and self.corrupted:
            if self.check_detects:
                raise StatementError(
                    "data inconsistency in table: t0, index: i2",
                    statement=statement,
                    code=8133,
                )
        elif statement.startswith(("TRUNCATE", "DROP")):
            self.corrupted = False


@pytest.fixture
def chaos_failpoints() -> FakeFailpoints:
    return FakeFailpoints()


@pytest.fixture
def target(chaos_failpoints: FakeFailpoints) -> SimulatedTarget:
    return SimulatedTarget(chaos_failpoints)
