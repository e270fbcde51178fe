"""
Index domain model.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# The only prefix length exercised for string index columns
PREFIX_LENGTH = 3


class Uniqueness(str, Enum):
    """How an index constrains its keys and where it is stored."""

    NON_UNIQUE = "non_unique"
    UNIQUE = "unique"
    CLUSTERED_PRIMARY = "clustered_primary"
    NON_CLUSTERED_PRIMARY = "non_clustered_primary"

    def is_primary(self) -> bool:
        return self in (Uniqueness.CLUSTERED_PRIMARY, Uniqueness.NON_CLUSTERED_PRIMARY)

    @property
    def key_prefix(self) -> str:
        """Keyword(s) before KEY in the index definition."""
        if self == Uniqueness.NON_UNIQUE:
            return ""
        if self == Uniqueness.UNIQUE:
            return "UNIQUE "
        return "PRIMARY "

    @property
    def storage_suffix(self) -> str:
        """Clustering clause after the column list."""
        if self == Uniqueness.CLUSTERED_PRIMARY:
            return " CLUSTERED"
        if self == Uniqueness.NON_CLUSTERED_PRIMARY:
            return " NONCLUSTERED"
        return ""


class IndexColumn(BaseModel):
    """A column reference inside an index, optionally with a prefix length."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    length: int | None = Field(default=None, gt=0)

    def to_sql(self) -> str:
        if self.length is None:
            return self.name
        return f"{self.name}({self.length})"


class Index(BaseModel):
    """A table index."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    columns: tuple[IndexColumn, ...]
    uniqueness: Uniqueness = Uniqueness.NON_UNIQUE

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    def to_sql(self) -> str:
        cols = ", ".join(c.to_sql() for c in self.columns)
        return (
            f"{self.uniqueness.key_prefix}KEY {self.name} ({cols})"
            f"{self.uniqueness.storage_suffix}"
        )
