"""
Runtime state for a harness run: run context, counters and results.
"""

from corrupttest.runtime.results import ResultStore
from corrupttest.runtime.run_context import RunContext, RunMetrics, generate_run_id

__all__ = ["ResultStore", "RunContext", "RunMetrics", "generate_run_id"]
