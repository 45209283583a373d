"""
Domain package for the Solana RPC benchmark.

Exports the request/record models and the error taxonomy used by workers,
the orchestrator and the CLI. Keep this package focused on data definitions.
"""

from solbench.domain.errors import (
    BenchmarkError,
    ConfirmationTimeoutError,
    EndpointUnreachableError,
    ErrorKind,
    InvalidAmountError,
    InvalidEndpointError,
    InvalidRecipientError,
    KeypairLoadError,
    NoEndpointsError,
    SubmissionRejectedError,
    ValidationFailure,
    WorkerFailure,
)
from solbench.domain.models import BenchmarkRequest, MetricError, MetricRecord, WorkerState

__all__ = [
    "BenchmarkError",
    "BenchmarkRequest",
    "ConfirmationTimeoutError",
    "EndpointUnreachableError",
    "ErrorKind",
    "InvalidAmountError",
    "InvalidEndpointError",
    "InvalidRecipientError",
    "KeypairLoadError",
    "MetricError",
    "MetricRecord",
    "NoEndpointsError",
    "SubmissionRejectedError",
    "ValidationFailure",
    "WorkerFailure",
    "WorkerState",
]
