"""
Tests for the command line entry point.
"""

import argparse
import logging
from pathlib import Path

import pandas as pd
import pytest

from corrupttest import cli
from corrupttest.aggregator import EffectivenessCounts
from corrupttest.config import Settings
from corrupttest.domain import Effectiveness, ResultKey, Table
from corrupttest.errors import ResultConflictError, SetupError
from corrupttest.report import summary_frame, write_summary_csv
from corrupttest.runtime.results import ResultStore
from corrupttest.runtime.run_context import RunContext


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep cmd_run from replacing pytest's log handlers."""
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


def _results(table: Table) -> ResultStore:
    store = ResultStore()
    store.record(ResultKey(table, "double", "missingIndex"), Effectiveness.SUCCESS)
    store.record(ResultKey(table, "double", "extraIndex"), Effectiveness.FAILURE)
    return store


class TestParsing:
    """Tests for argument parsing."""

    @pytest.mark.parametrize("value,expected", [("ON", True), ("off", False), ("1", True)])
    def test_parse_switch(self, value: str, expected: bool) -> None:
        assert cli.parse_switch(value) is expected

    def test_parse_switch_invalid(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_switch("maybe")

    def test_settings_from_args(self, settings: Settings) -> None:
        args = cli.build_parser().parse_args(
            ["run", "-w", "Double", "-m", "OFF", "-a", "fast", "-l", "20", "--workers", "2"]
        )
        merged = cli.settings_from_args(args, base=settings)
        assert merged.workload == "double"
        assert merged.mutation_checker is False
        assert merged.assertion.value == "fast"
        assert merged.limit == 20
        assert merged.workers == 2
        assert merged.database_url == settings.database_url

    def test_flags_keep_base_values(self) -> None:
        base = Settings(_env_file=None, workload="t4", limit=3)
        args = cli.build_parser().parse_args(["run"])
        merged = cli.settings_from_args(args, base=base)
        assert merged.workload == "t4"
        assert merged.limit == 3


class TestRunCommand:
    """Tests for `corrupttest run`."""

    def test_unknown_workload(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["run", "-w", "workload_a"]) == cli.EXIT_USAGE
        assert "Unknown workload" in capsys.readouterr().err

    def test_invalid_limit(self) -> None:
        assert cli.main(["run", "-l", "0"]) == cli.EXIT_USAGE

    def test_success_writes_summary(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, int_string_table: Table
    ) -> None:
        async def fake_run_harness(settings: Settings, context: RunContext) -> ResultStore:
            return _results(int_string_table)

        monkeypatch.setattr(cli, "run_harness", fake_run_harness)
        summary = tmp_path / "summary.csv"

        code = cli.main(["run", "-w", "double", "-m", "ON", "--summary-csv", str(summary)])

        assert code == cli.EXIT_OK
        frame = pd.read_csv(summary)
        missing = frame[frame["injection"] == "missingIndex"].iloc[0]
        assert missing["success"] == 1
        assert missing["mutation_checker"] == "ON"
        assert len(frame) == 4

    def test_setup_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def fake_run_harness(settings: Settings, context: RunContext) -> ResultStore:
            raise SetupError("cannot connect to database")

        monkeypatch.setattr(cli, "run_harness", fake_run_harness)

        assert cli.main(["run"]) == cli.EXIT_FATAL

    def test_interrupted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def fake_run_harness(settings: Settings, context: RunContext) -> ResultStore:
            context.request_stop()
            context.mark_interrupted()
            return ResultStore()

        monkeypatch.setattr(cli, "run_harness", fake_run_harness)

        assert cli.main(["run"]) == cli.EXIT_INTERRUPTED

    def test_stop_after_completion(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A signal that arrives after the last table does not count as an interruption."""

        async def fake_run_harness(settings: Settings, context: RunContext) -> ResultStore:
            context.request_stop()
            return ResultStore()

        monkeypatch.setattr(cli, "run_harness", fake_run_harness)

        assert cli.main(["run"]) == cli.EXIT_OK

    def test_unexpected_error(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        async def fake_run_harness(settings: Settings, context: RunContext) -> ResultStore:
            raise ResultConflictError("result for table=t0 recorded twice")

        monkeypatch.setattr(cli, "run_harness", fake_run_harness)

        with caplog.at_level(logging.CRITICAL, logger="corrupttest.cli"):
            assert cli.main(["run"]) == cli.EXIT_FATAL
        assert "recorded twice" in caplog.text


class TestOtherCommands:
    """Tests for `compare` and `workloads`."""

    def test_workloads(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["workloads"]) == cli.EXIT_OK
        out = capsys.readouterr().out
        for name in ("single", "double", "t2", "t3", "t4"):
            assert name in out

    def test_compare(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        good = summary_frame(
            {"extraIndex": EffectivenessCounts(success=4)},
            workload="single",
            mutation_checker="ON",
            assertion="strict",
        )
        bad = summary_frame(
            {"extraIndex": EffectivenessCounts(success=1, failure=3)},
            workload="single",
            mutation_checker="ON",
            assertion="strict",
        )
        baseline = write_summary_csv(good, tmp_path / "baseline.csv")
        current = write_summary_csv(bad, tmp_path / "current.csv")

        assert cli.main(["compare", str(baseline), str(baseline)]) == cli.EXIT_OK
        assert "no regressions" in capsys.readouterr().out

        assert cli.main(["compare", str(current), str(baseline)]) == cli.EXIT_FATAL
        assert "REGRESSION single/ON/strict/extraIndex" in capsys.readouterr().out
