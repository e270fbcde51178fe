"""
Domain models for the corruption harness.

- ColumnType / Column: the two columns of a generated table
- IndexColumn / Index / Uniqueness: the two indices of a generated table
- Table: a complete generated table definition
- Row: values inserted by workloads
- Effectiveness / WorkloadOutcome / RecheckResult / ResultKey: trial outcomes
"""

from corrupttest.domain.column import Collation, Column, ColumnKind, ColumnType
from corrupttest.domain.index import PREFIX_LENGTH, Index, IndexColumn, Uniqueness
from corrupttest.domain.injection import AVAILABLE_INJECTIONS, injection_directive
from corrupttest.domain.outcome import (
    Effectiveness,
    RecheckResult,
    ResultKey,
    WorkloadOutcome,
)
from corrupttest.domain.row import Datum, Row
from corrupttest.domain.table import Table

__all__ = [
    "AVAILABLE_INJECTIONS",
    "PREFIX_LENGTH",
    "Collation",
    "Column",
    "ColumnKind",
    "ColumnType",
    "Datum",
    "Effectiveness",
    "Index",
    "IndexColumn",
    "RecheckResult",
    "ResultKey",
    "Row",
    "Table",
    "Uniqueness",
    "WorkloadOutcome",
    "injection_directive",
]
