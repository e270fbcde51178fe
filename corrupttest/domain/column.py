"""
Column domain model.

A column is either an INT or a VARCHAR with an optional collation.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Collation(str, Enum):
    """Collations exercised for string columns."""

    UNICODE_CI = "utf8mb4_unicode_ci"
    GENERAL_CI = "utf8mb4_general_ci"
    BIN = "utf8mb4_bin"


class ColumnKind(str, Enum):
    """Kind of column type."""

    INT = "int"
    STRING = "string"


class ColumnType(BaseModel):
    """
    Column type: Int, or String with an optional collation.

    Use the int_type()/string_type() constructors rather than building
    the model by hand.
    """

    model_config = ConfigDict(frozen=True)

    kind: ColumnKind
    collation: Collation | None = None

    @model_validator(mode="after")
    def collation_only_for_strings(self) -> "ColumnType":
        if self.kind == ColumnKind.INT and self.collation is not None:
            raise ValueError("INT columns cannot carry a collation")
        return self

    @classmethod
    def int_type(cls) -> "ColumnType":
        return cls(kind=ColumnKind.INT)

    @classmethod
    def string_type(cls, collation: Collation | None = None) -> "ColumnType":
        return cls(kind=ColumnKind.STRING, collation=collation)

    @property
    def is_string(self) -> bool:
        return self.kind == ColumnKind.STRING

    def to_sql(self) -> str:
        """Render the type as it appears in CREATE TABLE."""
        if self.kind == ColumnKind.INT:
            return "INT"
        if self.collation is None:
            return "VARCHAR(10)"
        return f"VARCHAR(10) COLLATE {self.collation.value}"


class Column(BaseModel):
    """A named table column."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    column_type: ColumnType

    def to_sql(self) -> str:
        return f"{self.name} {self.column_type.to_sql()}"
