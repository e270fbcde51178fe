"""
Summary table export and baseline comparison.

The summary has one row per injection with the four effectiveness counts,
labelled with the run's workload and safeguard settings. A change in an
injection's success ratio against a stored baseline is a regression.
"""

import io
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import httpx
import pandas as pd

from corrupttest.aggregator import EffectivenessCounts
from corrupttest.logging import get_logger

logger = get_logger(__name__)

KEY_COLUMNS = ["workload", "mutation_checker", "assertion", "injection"]
COUNT_COLUMNS = ["success", "other_error", "failure", "consistent"]
SUMMARY_COLUMNS = KEY_COLUMNS + COUNT_COLUMNS


@dataclass
class Regression:
    """An injection whose success ratio moved against the baseline."""

    workload: str
    mutation_checker: str
    assertion: str
    injection: str
    baseline_ratio: float
    current_ratio: float | None

    def describe(self) -> str:
        current = "missing" if self.current_ratio is None else f"{self.current_ratio:.3f}"
        return (
            f"{self.workload}/{self.mutation_checker}/{self.assertion}/{self.injection}: "
            f"success ratio {self.baseline_ratio:.3f} -> {current}"
        )


def summary_frame(
    counts: Mapping[str, EffectivenessCounts],
    workload: str,
    mutation_checker: str,
    assertion: str,
) -> pd.DataFrame:
    """Build the summary table for one run."""
    rows = [
        {
            "workload": workload,
            "mutation_checker": mutation_checker,
            "assertion": assertion,
            "injection": injection,
            **c.to_dict(),
        }
        for injection, c in counts.items()
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def write_summary_csv(frame: pd.DataFrame, path: Path) -> Path:
    """Write (or append to) a summary CSV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        existing = pd.read_csv(path, dtype={c: str for c in KEY_COLUMNS})
        frame = pd.concat([existing, frame], ignore_index=True)
        frame = frame.drop_duplicates(subset=KEY_COLUMNS, keep="last")
    frame.to_csv(path, index=False)
    logger.info("Wrote %d summary rows to %s", len(frame), path)
    return path


def _validate(frame: pd.DataFrame, source: str) -> pd.DataFrame:
    missing = [c for c in SUMMARY_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"{source} is missing columns: {', '.join(missing)}")
    return frame[SUMMARY_COLUMNS]


def load_summary(source: str | Path, timeout: float = 30.0) -> pd.DataFrame:
    """
    Read a summary CSV from a local path or an http(s) URL.

    Raises:
        httpx.HTTPStatusError: the URL answered with an error status
        ValueError: the CSV lacks summary columns
    """
    text_source = str(source)
    if text_source.startswith(("http://", "https://")):
        response = httpx.get(text_source, timeout=timeout)
        response.raise_for_status()
        frame = pd.read_csv(io.StringIO(response.text), dtype={c: str for c in KEY_COLUMNS})
    else:
        frame = pd.read_csv(Path(text_source), dtype={c: str for c in KEY_COLUMNS})
    return _validate(frame, text_source)


def success_ratios(frame: pd.DataFrame) -> pd.Series:
    """Success ratio per summary key."""
    totals = frame[COUNT_COLUMNS].sum(axis=1)
    ratios = (frame["success"] / totals.where(totals > 0)).fillna(0.0)
    ratios.index = pd.MultiIndex.from_frame(frame[KEY_COLUMNS])
    return ratios


def compare_to_baseline(
    current: pd.DataFrame,
    baseline: pd.DataFrame,
    tolerance: float = 0.0,
) -> list[Regression]:
    """
    Find injections whose success ratio changed by more than `tolerance`.

    Rows present only in the current summary are new and not regressions.
    Rows present only in the baseline are reported with current_ratio=None.
    """
    current_ratios = success_ratios(current)
    baseline_ratios = success_ratios(baseline)
    regressions = []
    for key, baseline_ratio in baseline_ratios.items():
        current_ratio = current_ratios.get(key)
        if current_ratio is not None and abs(current_ratio - baseline_ratio) <= tolerance:
            continue
        workload, mutation_checker, assertion, injection = key
        regressions.append(
            Regression(
                workload=workload,
                mutation_checker=mutation_checker,
                assertion=assertion,
                injection=injection,
                baseline_ratio=float(baseline_ratio),
                current_ratio=None if current_ratio is None else float(current_ratio),
            )
        )
    return regressions
