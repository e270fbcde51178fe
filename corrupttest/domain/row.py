"""
Row values used by workloads.

Rows are seeded from the table's column types so that every workload
inserts a canonical, predictable value.
"""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from corrupttest.domain.column import Column, ColumnKind

Datum = int | str

INT_SEED = 10
STRING_SEED = "hello"
STRING_SUFFIX = " x"


def seed_datum(column: Column) -> Datum:
    """Canonical first value for a column."""
    if column.column_type.kind == ColumnKind.INT:
        return INT_SEED
    return STRING_SEED


def next_datum(value: Datum) -> Datum:
    """A value distinct from `value` of the same type."""
    if isinstance(value, int):
        return value + 1
    return f"{value}{STRING_SUFFIX}"


def datum_to_sql(value: Datum) -> str:
    """Render a datum as a SQL literal."""
    if isinstance(value, int):
        return str(value)
    escaped = value.replace("\\", "\\\\").replace("'", "''")
    return f"'{escaped}'"


class Row(BaseModel):
    """An ordered list of values matching a table's columns."""

    model_config = ConfigDict(frozen=True)

    values: tuple[Datum, ...]

    @classmethod
    def new(cls, columns: Sequence[Column]) -> "Row":
        return cls(values=tuple(seed_datum(c) for c in columns))

    def successor(self) -> "Row":
        """A second row whose every value differs from this one."""
        return Row(values=tuple(next_datum(v) for v in self.values))

    def __getitem__(self, position: int) -> Datum:
        return self.values[position]

    def __len__(self) -> int:
        return len(self.values)

    def to_sql(self) -> str:
        return ",".join(datum_to_sql(v) for v in self.values)
