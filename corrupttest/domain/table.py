"""
Table domain model.

A table has exactly two columns (c1, c2) and exactly two indices (i1, i2).
Tables are hashable so they can be part of a result key.
"""

from pydantic import BaseModel, ConfigDict, Field

from corrupttest.domain.column import Column
from corrupttest.domain.index import Index
from corrupttest.domain.row import Row
from corrupttest.errors import SchemaDefectError

# Maximum number of columns an index may cover
MAX_INDEX_COLUMNS = 2

# Column order of i1 and i2 after pruning symmetric duplicates
CANONICAL_INDEX_ORDER: tuple[tuple[str, ...], ...] = (("c1", "c2"), ("c2", "c1"))


class Table(BaseModel):
    """A generated table definition."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    columns: tuple[Column, ...]
    indices: tuple[Index, ...]

    # =========================================================================
    # Statements
    # =========================================================================

    def create_statement(self) -> str:
        """Deterministic CREATE TABLE text."""
        parts = [c.to_sql() for c in self.columns]
        parts.extend(i.to_sql() for i in self.indices)
        return f"CREATE TABLE {self.name} ({', '.join(parts)})"

    def drop_statement(self) -> str:
        return f"DROP TABLE IF EXISTS {self.name}"

    def truncate_statement(self) -> str:
        return f"TRUNCATE TABLE {self.name}"

    def check_statement(self) -> str:
        """Structural scan comparing index contents against row data."""
        return f"admin check table {self.name}"

    def new_row(self) -> Row:
        return Row.new(self.columns)

    # =========================================================================
    # Invariants
    # =========================================================================

    def column(self, name: str) -> Column:
        """
        Look up a declared column.

        Raises:
            SchemaDefectError: if the table does not declare `name`
        """
        for col in self.columns:
            if col.name == name:
                return col
        raise SchemaDefectError(f"table {self.name} has no column {name!r}")

    def constraint_satisfied(self) -> bool:
        """
        Check the structural rules every generated table must obey.

        Raises:
            SchemaDefectError: if an index references an undeclared column.
                That is a generator bug, not a rejected candidate.
        """
        if sum(1 for i in self.indices if i.uniqueness.is_primary()) > 1:
            return False
        if any(len(i.columns) > MAX_INDEX_COLUMNS for i in self.indices):
            return False
        for index in self.indices:
            for index_column in index.columns:
                column = self.column(index_column.name)
                # prefix index is only for string type
                if index_column.length is not None and not column.column_type.is_string:
                    return False
        return True

    def is_canonical(self) -> bool:
        """True when i1 covers (c1, c2) and i2 covers (c2, c1)."""
        orders = tuple(i.column_names for i in self.indices)
        return orders == CANONICAL_INDEX_ORDER
