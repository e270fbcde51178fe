"""
Effectiveness classification.

1. Workload failed with an error mentioning "inconsist" or "assertion"
   -> SUCCESS (a safeguard caught the corruption at write time)
2. Workload failed otherwise -> OTHER_ERROR
3. Workload succeeded -> structural re-check:
   - re-check reports an error -> FAILURE (caught late)
   - re-check is clean -> CONSISTENT

A clean re-check is not necessarily a misreport: the corrupting write may
never have reached storage if its transaction aborted for another reason.
"""

from corrupttest.domain import Effectiveness, RecheckResult, Table, WorkloadOutcome
from corrupttest.database import SQLSession
from corrupttest.errors import StatementError
from corrupttest.logging import get_logger

logger = get_logger(__name__)

SAFEGUARD_MARKERS = ("inconsist", "assertion")


def is_safeguard_error(error: str) -> bool:
    """True when the error text comes from a write-path safeguard."""
    text = error.lower()
    return any(marker in text for marker in SAFEGUARD_MARKERS)


def classify(outcome: WorkloadOutcome, recheck: RecheckResult | None = None) -> Effectiveness:
    """
    Classify a workload outcome. Pure: same inputs, same answer.

    Raises:
        ValueError: a successful outcome was given without a re-check result
    """
    if outcome.error is not None:
        if is_safeguard_error(outcome.error):
            return Effectiveness.SUCCESS
        return Effectiveness.OTHER_ERROR
    if recheck is None:
        raise ValueError("a successful workload needs a re-check result to be classified")
    if recheck.detected:
        return Effectiveness.FAILURE
    return Effectiveness.CONSISTENT


async def recheck_table(session: SQLSession, table: Table) -> RecheckResult:
    """Run the structural consistency scan against `table`."""
    try:
        await session.execute(table.check_statement())
    except StatementError as e:
        logger.info("admin check table %s reported: %s", table.name, e)
        return RecheckResult(error=str(e))
    return RecheckResult()


async def evaluate(session: SQLSession, table: Table, outcome: WorkloadOutcome) -> Effectiveness:
    """Classify `outcome`, running the re-check only when the workload succeeded."""
    recheck = await recheck_table(session, table) if outcome.succeeded else None
    return classify(outcome, recheck)
