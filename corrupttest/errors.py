"""
Error taxonomy for the corruption harness.

- SetupError: connection / DDL / session problems. Fatal for the run.
- FaultInjectionError: a failpoint control call failed. Aborts the current table.
- StatementError: a DML or transaction statement failed. Recovered inside the
  workload and routed into classification.
"""


class CorruptTestError(Exception):
    """Base class for harness errors."""

    pass


class SetupError(CorruptTestError):
    """Raised when the harness cannot prepare the database for a workload."""

    pass


class FaultInjectionError(CorruptTestError):
    """Raised when enabling or disabling a failpoint fails."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StatementError(CorruptTestError):
    """Raised when the database rejects a statement."""

    def __init__(self, message: str, statement: str, code: int | None = None):
        super().__init__(message)
        self.message = message
        self.statement = statement
        self.code = code

    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.code}: {self.message}"
        return self.message


class SchemaDefectError(CorruptTestError):
    """Raised when a generated table references a column it does not declare."""

    pass


class ResultConflictError(CorruptTestError):
    """Raised when a result key is recorded more than once."""

    pass


class UnknownWorkloadError(ValueError):
    """Raised when a workload name is not registered."""

    pass
