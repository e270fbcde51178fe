"""
Tests for domain models.
"""

import pytest
from pydantic import ValidationError

from corrupttest.domain import (
    Collation,
    Column,
    ColumnKind,
    ColumnType,
    Index,
    IndexColumn,
    Row,
    Table,
    Uniqueness,
    injection_directive,
)
from corrupttest.errors import SchemaDefectError


def _table(
    c1: ColumnType,
    c2: ColumnType,
    i1: tuple[IndexColumn, IndexColumn],
    i2: tuple[IndexColumn, IndexColumn],
    u1: Uniqueness = Uniqueness.NON_UNIQUE,
    u2: Uniqueness = Uniqueness.NON_UNIQUE,
) -> Table:
    return Table(
        name="t",
        columns=(Column(name="c1", column_type=c1), Column(name="c2", column_type=c2)),
        indices=(
            Index(name="i1", columns=i1, uniqueness=u1),
            Index(name="i2", columns=i2, uniqueness=u2),
        ),
    )


class TestColumnType:
    """Tests for ColumnType."""

    def test_int_has_no_collation(self) -> None:
        """INT columns reject a collation."""
        with pytest.raises(ValidationError):
            ColumnType(kind=ColumnKind.INT, collation=Collation.BIN)

    def test_sql_rendering(self) -> None:
        assert ColumnType.int_type().to_sql() == "INT"
        assert ColumnType.string_type().to_sql() == "VARCHAR(10)"
        assert (
            ColumnType.string_type(Collation.GENERAL_CI).to_sql()
            == "VARCHAR(10) COLLATE utf8mb4_general_ci"
        )

    def test_is_immutable(self) -> None:
        column_type = ColumnType.int_type()
        with pytest.raises(ValidationError):
            column_type.kind = ColumnKind.STRING  # type: ignore


class TestUniqueness:
    """Tests for Uniqueness."""

    @pytest.mark.parametrize(
        "uniqueness,expected",
        [
            (Uniqueness.NON_UNIQUE, False),
            (Uniqueness.UNIQUE, False),
            (Uniqueness.CLUSTERED_PRIMARY, True),
            (Uniqueness.NON_CLUSTERED_PRIMARY, True),
        ],
    )
    def test_is_primary(self, uniqueness: Uniqueness, expected: bool) -> None:
        assert uniqueness.is_primary() is expected


class TestRow:
    """Tests for Row seeding and successor rows."""

    def test_new_seeds_canonical_values(self, int_string_table: Table) -> None:
        row = int_string_table.new_row()
        assert row.values == (10, "hello")
        assert row.to_sql() == "10,'hello'"

    def test_successor_of_int_row_increments_each_column(self) -> None:
        cols = [
            Column(name="c1", column_type=ColumnType.int_type()),
            Column(name="c2", column_type=ColumnType.int_type()),
        ]
        row = Row.new(cols)
        assert row.successor().values == (11, 11)

    def test_successor_of_string_appends_marker(self, int_string_table: Table) -> None:
        successor = int_string_table.new_row().successor()
        assert successor.values == (11, "hello x")
        assert successor[1] != "hello"

    def test_string_literal_escaping(self) -> None:
        row = Row(values=("it's",))
        assert row.to_sql() == "'it''s'"


class TestTableStatements:
    """Tests for DDL rendering."""

    def test_create_statement(self, int_string_table: Table) -> None:
        assert int_string_table.create_statement() == (
            "CREATE TABLE t0 (c1 INT, c2 VARCHAR(10) COLLATE utf8mb4_bin, "
            "UNIQUE KEY i1 (c1, c2), KEY i2 (c2(3), c1))"
        )

    def test_primary_key_clustering(self) -> None:
        table = _table(
            ColumnType.int_type(),
            ColumnType.string_type(),
            (IndexColumn(name="c1"), IndexColumn(name="c2")),
            (IndexColumn(name="c2"), IndexColumn(name="c1")),
            u1=Uniqueness.CLUSTERED_PRIMARY,
        )
        assert "PRIMARY KEY i1 (c1, c2) CLUSTERED" in table.create_statement()

        table = _table(
            ColumnType.int_type(),
            ColumnType.string_type(),
            (IndexColumn(name="c1"), IndexColumn(name="c2")),
            (IndexColumn(name="c2"), IndexColumn(name="c1")),
            u2=Uniqueness.NON_CLUSTERED_PRIMARY,
        )
        assert "PRIMARY KEY i2 (c2, c1) NONCLUSTERED" in table.create_statement()

    def test_create_statement_is_deterministic(self, int_string_table: Table) -> None:
        copy = Table.model_validate(int_string_table.model_dump())
        assert copy.create_statement() == int_string_table.create_statement()
        assert copy == int_string_table
        assert hash(copy) == hash(int_string_table)

    def test_other_statements(self, int_string_table: Table) -> None:
        assert int_string_table.drop_statement() == "DROP TABLE IF EXISTS t0"
        assert int_string_table.truncate_statement() == "TRUNCATE TABLE t0"
        assert int_string_table.check_statement() == "admin check table t0"


class TestTableConstraints:
    """Tests for table invariants."""

    def test_valid_table(self, int_string_table: Table) -> None:
        assert int_string_table.constraint_satisfied()
        assert int_string_table.is_canonical()

    def test_two_primary_indices_rejected(self) -> None:
        table = _table(
            ColumnType.int_type(),
            ColumnType.int_type(),
            (IndexColumn(name="c1"), IndexColumn(name="c2")),
            (IndexColumn(name="c2"), IndexColumn(name="c1")),
            u1=Uniqueness.CLUSTERED_PRIMARY,
            u2=Uniqueness.NON_CLUSTERED_PRIMARY,
        )
        assert not table.constraint_satisfied()

    def test_prefix_on_int_rejected(self) -> None:
        table = _table(
            ColumnType.int_type(),
            ColumnType.string_type(),
            (IndexColumn(name="c1", length=3), IndexColumn(name="c2")),
            (IndexColumn(name="c2"), IndexColumn(name="c1")),
        )
        assert not table.constraint_satisfied()

    def test_prefix_on_string_accepted(self) -> None:
        table = _table(
            ColumnType.int_type(),
            ColumnType.string_type(Collation.UNICODE_CI),
            (IndexColumn(name="c1"), IndexColumn(name="c2", length=3)),
            (IndexColumn(name="c2", length=3), IndexColumn(name="c1")),
        )
        assert table.constraint_satisfied()

    def test_undeclared_column_is_a_defect(self) -> None:
        """Referencing a missing column raises instead of filtering."""
        table = _table(
            ColumnType.int_type(),
            ColumnType.int_type(),
            (IndexColumn(name="c1"), IndexColumn(name="c3")),
            (IndexColumn(name="c2"), IndexColumn(name="c1")),
        )
        with pytest.raises(SchemaDefectError):
            table.constraint_satisfied()

    def test_non_canonical_order(self) -> None:
        table = _table(
            ColumnType.int_type(),
            ColumnType.int_type(),
            (IndexColumn(name="c2"), IndexColumn(name="c1")),
            (IndexColumn(name="c1"), IndexColumn(name="c2")),
        )
        assert table.constraint_satisfied()
        assert not table.is_canonical()


class TestInjectionDirective:
    """Tests for failpoint directives."""

    def test_every_application(self) -> None:
        assert injection_directive("missingIndex") == 'return("missingIndex")'

    def test_first_application_only(self) -> None:
        assert injection_directive("missingIndex", True) == '1*return("missingIndex")'
