"""
Lazy enumeration of the table schema space.

Each level of a table definition has its own generator; the table
generator nests them as a Cartesian product:

    c1 type x c2 type x (i1 columns x uniqueness) x (i2 columns x uniqueness)

Index column order is fixed to (c1, c2) for i1 and (c2, c1) for i2. The other
orders only produce tables that are symmetric duplicates, so they are never
generated. Candidates that break a table invariant are skipped silently.

The sequence is finite and deterministic: enumerating twice yields the same
tables, with the same names, in the same order.
"""

from collections.abc import Iterable, Iterator, Sequence
from itertools import islice
from typing import TypeVar

from corrupttest.domain import (
    PREFIX_LENGTH,
    Collation,
    Column,
    ColumnType,
    Index,
    IndexColumn,
    Table,
    Uniqueness,
)
from corrupttest.domain.table import CANONICAL_INDEX_ORDER

T = TypeVar("T")

COLUMN_NAMES: tuple[str, str] = ("c1", "c2")
INDEX_NAMES: tuple[str, str] = ("i1", "i2")


def collations() -> Iterator[Collation | None]:
    yield None
    yield from Collation


def column_types() -> Iterator[ColumnType]:
    yield ColumnType.int_type()
    for collation in collations():
        yield ColumnType.string_type(collation)


def columns(name: str) -> Iterator[Column]:
    for column_type in column_types():
        yield Column(name=name, column_type=column_type)


def index_columns(name: str) -> Iterator[IndexColumn]:
    for length in (None, PREFIX_LENGTH):
        yield IndexColumn(name=name, length=length)


def uniquenesses() -> Iterator[Uniqueness]:
    yield from Uniqueness


def indices(name: str, column_names: Sequence[str]) -> Iterator[Index]:
    """Every index over `column_names` (in that order)."""
    first, second = column_names
    for ic1 in index_columns(first):
        for ic2 in index_columns(second):
            for uniqueness in uniquenesses():
                yield Index(name=name, columns=(ic1, ic2), uniqueness=uniqueness)


def candidate_tables() -> Iterator[tuple[tuple[Column, ...], tuple[Index, ...]]]:
    """Unfiltered (columns, indices) combinations."""
    name1, name2 = COLUMN_NAMES
    for c1 in columns(name1):
        for c2 in columns(name2):
            for i1 in indices(INDEX_NAMES[0], CANONICAL_INDEX_ORDER[0]):
                for i2 in indices(INDEX_NAMES[1], CANONICAL_INDEX_ORDER[1]):
                    yield (c1, c2), (i1, i2)


def enumerate_tables(prefix: str = "t") -> Iterator[Table]:
    """
    Yield every valid table of the pruned schema space.

    Tables are named {prefix}{n}, n being the table's position in the sequence.
    """
    table_count = 0
    for cols, idxs in candidate_tables():
        table = Table(name=f"{prefix}{table_count}", columns=cols, indices=idxs)
        if table.constraint_satisfied() and table.is_canonical():
            yield table
            table_count += 1


def limit_tables(tables: Iterable[Table], limit: int | None) -> Iterator[Table]:
    """Take at most `limit` tables (all of them when limit is None)."""
    return iter(tables) if limit is None else islice(tables, limit)


def partition(items: Iterable[T], index: int, count: int) -> Iterator[T]:
    """
    Round-robin slice `index` of `count` over a sequence.

    Slices for index 0..count-1 are disjoint and together cover the input.
    """
    if count < 1:
        raise ValueError("partition count must be at least 1")
    if not 0 <= index < count:
        raise ValueError(f"partition index {index} out of range for {count} partitions")
    return islice(items, index, None, count)
