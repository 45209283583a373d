"""
Solana RPC Bench - concurrent benchmark of Solana JSON-RPC endpoints.

Submits one minimal transfer through every configured endpoint at the same
time and records, per endpoint:

- block height before building the transaction and at confirmation
- submission and confirmation latency (monotonic nanoseconds)
- the transaction signature and full confirmation metadata
- a classified error when the endpoint fails

One endpoint failing never aborts the run: every endpoint yields exactly one
MetricRecord.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from solbench.config import Settings, get_settings
from solbench.domain import BenchmarkRequest, ErrorKind, MetricError, MetricRecord
from solbench.orchestrator import build_payload, parse_endpoints, run_benchmark, summarize
from solbench.utils.logging import configure_logging, get_logger
from solbench.workers import EndpointWorker, build_transfer

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "BenchmarkRequest",
    "ErrorKind",
    "MetricError",
    "MetricRecord",
    # Orchestration
    "build_payload",
    "parse_endpoints",
    "run_benchmark",
    "summarize",
    # Workers
    "EndpointWorker",
    "build_transfer",
    # Logging
    "configure_logging",
    "get_logger",
]
