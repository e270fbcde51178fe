"""
Workload variants.

Each variant drives a fixed DDL-free statement sequence for one
(table, injection) pair; the engine frames them with CREATE/DROP.
"""

from corrupttest.workload.base import FailpointSwitch, Workload
from corrupttest.workload.insertion import DoubleInsertion, SingleInsertion
from corrupttest.workload.registry import WORKLOADS, get_workload, list_workloads
from corrupttest.workload.transactions import T2, T3, T4

__all__ = [
    "WORKLOADS",
    "DoubleInsertion",
    "FailpointSwitch",
    "SingleInsertion",
    "T2",
    "T3",
    "T4",
    "Workload",
    "get_workload",
    "list_workloads",
]
