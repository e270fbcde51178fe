"""
Registry of workload variants by name.
"""

from corrupttest.config import DEFAULT_FAILPOINT
from corrupttest.errors import UnknownWorkloadError
from corrupttest.workload.base import Workload
from corrupttest.workload.insertion import DoubleInsertion, SingleInsertion
from corrupttest.workload.transactions import T2, T3, T4

WORKLOADS: dict[str, type[Workload]] = {
    "single": SingleInsertion,
    "double": DoubleInsertion,
    "t2": T2,
    "t3": T3,
    "t4": T4,
}


def get_workload(
    name: str,
    failpoint_name: str = DEFAULT_FAILPOINT,
    begin_statement: str = "BEGIN OPTIMISTIC",
) -> Workload:
    """
    Create a workload instance by name.

    Args:
        name: Workload name (case-insensitive, e.g. "double")
        failpoint_name: Failpoint the workload enables
        begin_statement: Statement that opens a transaction

    Raises:
        UnknownWorkloadError: If the name is not registered
    """
    key = name.strip().lower()
    if key not in WORKLOADS:
        available = ", ".join(WORKLOADS.keys())
        raise UnknownWorkloadError(f"Unknown workload '{name}'. Available: {available}")
    return WORKLOADS[key](failpoint_name=failpoint_name, begin_statement=begin_statement)


def list_workloads() -> list[dict[str, str]]:
    """Get name and description of every registered workload."""
    return [{"name": name, "description": cls.description} for name, cls in WORKLOADS.items()]
