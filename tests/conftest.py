"""
Pytest configuration and shared fixtures.
"""

import os
from collections.abc import Generator

import pytest

from corrupttest.config import Settings
from corrupttest.domain import Collation, Column, ColumnType, Index, IndexColumn, Table, Uniqueness
from corrupttest.runtime.run_context import RunContext
from tests.fixtures.fakes import FakeFailpoints, FakeSession


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure no local CORRUPTTEST_* variables leak into tests."""
    for var in list(os.environ):
        if var.startswith("CORRUPTTEST_"):
            monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the cached settings between tests."""
    from corrupttest.config import get_settings

    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def run_context() -> RunContext:
    return RunContext(run_id="test_run")


@pytest.fixture
def int_string_table() -> Table:
    """t0 (c1 INT, c2 VARCHAR(10) COLLATE utf8mb4_bin), i1 unique, i2 plain."""
    return Table(
        name="t0",
        columns=(
            Column(name="c1", column_type=ColumnType.int_type()),
            Column(name="c2", column_type=ColumnType.string_type(Collation.BIN)),
        ),
        indices=(
            Index(
                name="i1",
                columns=(IndexColumn(name="c1"), IndexColumn(name="c2")),
                uniqueness=Uniqueness.UNIQUE,
            ),
            Index(
                name="i2",
                columns=(IndexColumn(name="c2", length=3), IndexColumn(name="c1")),
                uniqueness=Uniqueness.NON_UNIQUE,
            ),
        ),
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def failpoints() -> FakeFailpoints:
    return FakeFailpoints()
