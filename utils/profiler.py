"""
Timing of inference cycles.

CodeProfiler measures a block and logs how long it took together with any
per-cycle facts recorded for it, such as the number of rules evaluated or
the number of points in the aggregated output set. CycleStats keeps the
timings of many cycles so a run can be summarized at the end.
"""
import time
import logging
from typing import Dict, List, Optional

import numpy as np

profiler_log = logging.getLogger('profiler')


class CycleStats:
    """
    Collects elapsed times of profiled blocks.

    Attributes:
        samples_ms (List[float]): One entry per finished block.
    """

    def __init__(self):
        self.samples_ms: List[float] = []

    def add(self, elapsed_ms: float) -> None:
        self.samples_ms.append(float(elapsed_ms))

    def summary(self) -> Dict[str, float]:
        """Returns count, mean, p95 and max in ms. Empty stats give zeros."""
        if not self.samples_ms:
            return {"count": 0, "mean_ms": 0.0, "p95_ms": 0.0, "max_ms": 0.0}
        samples = np.asarray(self.samples_ms)
        return {
            "count": int(samples.size),
            "mean_ms": float(samples.mean()),
            "p95_ms": float(np.percentile(samples, 95)),
            "max_ms": float(samples.max()),
        }


class CodeProfiler:
    """
    A context manager to time the execution of a code block.

    Example:
        with CodeProfiler("Inference cycle", rules=len(machine.rules)) as prof:
            label, crisp = machine.compute()
            prof.record(points=len(machine.last_aggregate))

    Attributes:
        name (str): The name of the code block being timed.
        budget_ms (float): Elapsed time above which a warning is logged.
        fields (Dict[str, object]): Per-cycle facts logged with the timing.
        stats (Optional[CycleStats]): Receives the elapsed time on exit.
        elapsed_ms (float): Duration of the last run, set on exit.
    """
    def __init__(self, name="", budget_ms=10.0, stats: Optional[CycleStats] = None, **fields):
        self.name = name
        self.budget_ms = budget_ms
        self.stats = stats
        self.fields = dict(fields)
        self.elapsed_ms = 0.0

    def record(self, **fields) -> None:
        """Adds facts learned inside the block, e.g. the aggregate size."""
        self.fields.update(fields)

    def _describe(self) -> str:
        if not self.fields:
            return ""
        return " (" + ", ".join(f"{k}={v}" for k, v in self.fields.items()) + ")"

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        if self.stats is not None:
            self.stats.add(self.elapsed_ms)
        status = " failed" if exc_type is not None else ""
        profiler_log.info("'%s'%s execution time: %.3f ms%s",
                          self.name, status, self.elapsed_ms, self._describe())
        if self.elapsed_ms > self.budget_ms:
            profiler_log.warning(
                "'%s' exceeded %.1f ms budget.", self.name, self.budget_ms)
