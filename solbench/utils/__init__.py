"""
Utilities package for the Solana RPC benchmark.

Exports shared helpers for logging, timing and profiling.
Keep this package lightweight and free of chain-specific logic.
"""

from solbench.utils.logging import configure_logging, get_logger
from solbench.utils.profiler import ProfileStats, Stopwatch, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "Stopwatch",
    "profile_block",
]
