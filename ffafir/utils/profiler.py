"""Per-stage timing for the FFA datapath.

Usage:
    from ffafir.utils.profiler import Profiler

    profiler = Profiler("ffa")
    with profiler.measure("subfilters"):
        ...
    profiler.report()  # logs averages and starts a new window
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Generator

logger = logging.getLogger(__name__)


@dataclass
class StageStats:
    """Accumulated timings for one named stage."""

    calls: int = 0
    total_ns: int = 0
    min_ns: int = 0
    max_ns: int = 0

    def record(self, elapsed_ns: int) -> None:
        if self.calls == 0:
            self.min_ns = self.max_ns = elapsed_ns
        else:
            self.min_ns = min(self.min_ns, elapsed_ns)
            self.max_ns = max(self.max_ns, elapsed_ns)
        self.calls += 1
        self.total_ns += elapsed_ns

    @property
    def avg_us(self) -> float:
        return self.total_ns / self.calls / 1000.0 if self.calls else 0.0


@dataclass
class Profiler:
    """Collects stage timings and sample throughput for one filter."""

    name: str
    enabled: bool = True

    _stats: dict[str, StageStats] = field(default_factory=lambda: defaultdict(StageStats))
    _samples: int = 0
    _window_start: float = field(default_factory=time.perf_counter)

    @contextmanager
    def measure(self, stage: str) -> Generator[None, None, None]:
        """Time the enclosed block under ``stage``."""
        if not self.enabled:
            yield
            return
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self._stats[stage].record(time.perf_counter_ns() - start)

    def add_samples(self, count: int) -> None:
        self._samples += count

    def stats(self, stage: str) -> StageStats:
        """Stats for ``stage`` in the current window (empty if never timed)."""
        return self._stats.get(stage, StageStats())

    @property
    def samples(self) -> int:
        return self._samples

    def report(self) -> str | None:
        """Log a summary of the current window and reset it.

        Returns:
            The report text, or None when nothing was recorded
        """
        if not self.enabled or not self._stats:
            return None

        elapsed_s = max(time.perf_counter() - self._window_start, 1e-9)
        lines = [f"[PROFILE] {self.name} - {elapsed_s:.3f}s window, {self._samples:,} samples"]
        total_ns = sum(s.total_ns for s in self._stats.values())
        for stage, s in sorted(self._stats.items(), key=lambda kv: kv[1].total_ns, reverse=True):
            pct = 100.0 * s.total_ns / total_ns if total_ns else 0.0
            lines.append(
                f"  {stage}: {pct:5.1f}% | {s.calls:6d} calls | "
                f"avg={s.avg_us:.1f}us min={s.min_ns / 1000:.1f}us max={s.max_ns / 1000:.1f}us"
            )
        text = "\n".join(lines)
        logger.info(text)
        self.reset()
        return text

    def reset(self) -> None:
        self._stats.clear()
        self._samples = 0
        self._window_start = time.perf_counter()
