"""
Error taxonomy for the Solana RPC benchmark.

Two families exist:

- ``ValidationFailure`` kinds abort a run before any worker is spawned.
- ``WorkerFailure`` kinds are caught at the worker boundary and stored on the
  worker's MetricRecord; they never reach sibling workers or the coordinator.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    ENDPOINT_UNREACHABLE = "EndpointUnreachable"
    SUBMISSION_REJECTED = "SubmissionRejected"
    CONFIRMATION_TIMEOUT = "ConfirmationTimeout"
    INVALID_AMOUNT = "InvalidAmount"
    NO_ENDPOINTS = "NoEndpoints"
    INVALID_ENDPOINT = "InvalidEndpoint"
    INVALID_RECIPIENT = "InvalidRecipient"


class BenchmarkError(Exception):
    """Base class for every error raised by the harness."""

    kind: ErrorKind | None = None


class KeypairLoadError(BenchmarkError):
    """The sender keypair file could not be read or decoded."""


class ValidationFailure(BenchmarkError):
    """Invalid run input, raised before any worker exists."""


class InvalidAmountError(ValidationFailure):
    kind = ErrorKind.INVALID_AMOUNT


class NoEndpointsError(ValidationFailure):
    kind = ErrorKind.NO_ENDPOINTS


class InvalidEndpointError(ValidationFailure):
    kind = ErrorKind.INVALID_ENDPOINT


class InvalidRecipientError(ValidationFailure):
    kind = ErrorKind.INVALID_RECIPIENT


class WorkerFailure(BenchmarkError):
    """Failure scoped to a single endpoint worker."""


class EndpointUnreachableError(WorkerFailure):
    kind = ErrorKind.ENDPOINT_UNREACHABLE


class SubmissionRejectedError(WorkerFailure):
    kind = ErrorKind.SUBMISSION_REJECTED


class ConfirmationTimeoutError(WorkerFailure):
    kind = ErrorKind.CONFIRMATION_TIMEOUT


__all__ = [
    "BenchmarkError",
    "ConfirmationTimeoutError",
    "EndpointUnreachableError",
    "ErrorKind",
    "InvalidAmountError",
    "InvalidEndpointError",
    "InvalidRecipientError",
    "KeypairLoadError",
    "NoEndpointsError",
    "SubmissionRejectedError",
    "ValidationFailure",
    "WorkerFailure",
]
