"""
Timing and profiling utilities for the Solana RPC benchmark.

This module provides:
- `Stopwatch`: wall-clock anchor plus monotonic nanosecond offsets, used by
  every endpoint worker to attribute timings to its own endpoint.
- `profile_block`: context manager measuring a whole benchmark run
  (duration, peak RSS via a psutil sampling thread, CPU percent).

Usage examples:
    from solbench.utils.profiler import profile_block

    with profile_block("benchmark-run") as stats:
        run_workers()

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, Optional

import psutil


@dataclass(frozen=True)
class Stopwatch:
    """
    Start instant captured on both the wall clock and the monotonic clock.

    Wall-clock end times are derived from the monotonic elapsed time, so an
    end time is never earlier than its start time.
    """

    started_at: datetime
    started_ns: int

    @classmethod
    def start(cls) -> "Stopwatch":
        wall_ns = time.time_ns()
        mono_ns = time.perf_counter_ns()
        started_at = datetime.fromtimestamp(wall_ns // 1_000 / 1_000_000, tz=timezone.utc)
        return cls(started_at=started_at, started_ns=mono_ns)

    def elapsed_ns(self) -> int:
        return max(time.perf_counter_ns() - self.started_ns, 0)

    def at(self, elapsed_ns: int) -> datetime:
        return self.started_at + timedelta(microseconds=elapsed_ns // 1_000)


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    peak_rss_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "duration_seconds": round(self.duration_seconds, 3),
            "peak_rss_bytes": self.peak_rss_bytes,
            "cpu_percent": round(self.cpu_percent, 1) if self.cpu_percent is not None else None,
        }


@contextlib.contextmanager
def profile_block(
    label: str, sample_interval_ms: int = 50
) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Measures:
    - Wall-clock duration (perf_counter)
    - Peak RSS via background sampling thread (psutil)
    - CPU percent of this process over the block (psutil)

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                return
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    # CPU percent needs a priming call
    process.cpu_percent(interval=None)

    sampler = threading.Thread(target=_sample_memory, name=f"profile-{label}", daemon=True)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts

        stop_sampling.set()
        sampler.join(timeout=1.0)

        stats.peak_rss_bytes = peak_rss if peak_rss > 0 else None
        stats.cpu_percent = process.cpu_percent(interval=None)


__all__ = ["ProfileStats", "Stopwatch", "profile_block"]
