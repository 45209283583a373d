"""
Endpoint worker: benchmarks one RPC endpoint with one transfer.

Each worker runs strictly sequentially on its own thread:

    Created -> Querying -> Building -> Submitting -> Confirming -> Done

`EndpointWorker.run` never raises. Every failure is classified and stored on
the returned MetricRecord, so one endpoint cannot abort the run or affect
sibling workers. The transaction is submitted at most once; only the
confirmation polling is retried.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from solders.signature import Signature
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)
from tenacity.wait import wait_base

from solbench.config import Settings
from solbench.domain.errors import (
    BenchmarkError,
    ConfirmationTimeoutError,
    ErrorKind,
    SubmissionRejectedError,
    ValidationFailure,
    WorkerFailure,
)
from solbench.domain.models import BenchmarkRequest, MetricError, MetricRecord, WorkerState
from solbench.infrastructure.rpc_client import RpcEndpoint, SignatureStatus
from solbench.utils.logging import get_logger
from solbench.utils.profiler import Stopwatch
from solbench.workers.builder import build_transfer, sign_transfer

log = get_logger(__name__)


@dataclass(frozen=True)
class ConfirmationPolicy:
    """
    Bounded polling budget for transaction confirmation.

    Attributes
    ----------
    max_attempts : int
        Number of status polls before giving up with ConfirmationTimeout.
    backoff : str
        "fixed" waits `backoff_seconds` between polls; "exponential" doubles
        from `backoff_seconds` up to `backoff_max_seconds`.
    """

    max_attempts: int = 30
    backoff: str = "fixed"
    backoff_seconds: float = 1.0
    backoff_max_seconds: float = 8.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConfirmationPolicy":
        return cls(
            max_attempts=settings.confirm_max_attempts,
            backoff=settings.confirm_backoff,
            backoff_seconds=settings.confirm_backoff_seconds,
            backoff_max_seconds=settings.confirm_backoff_max_seconds,
        )

    def wait_strategy(self) -> wait_base:
        if self.backoff == "exponential":
            return wait_exponential(
                multiplier=self.backoff_seconds,
                min=self.backoff_seconds,
                max=self.backoff_max_seconds,
            )
        return wait_fixed(self.backoff_seconds)


@dataclass(frozen=True)
class _Confirmation:
    status: SignatureStatus
    metadata: Dict[str, Any]
    block_height: int


class _Trace:
    """Mutable draft of a MetricRecord, owned by exactly one worker."""

    def __init__(self, endpoint: str, index: int) -> None:
        self.endpoint = endpoint
        self.index = index
        self.clock = Stopwatch.start()
        self.fields: Dict[str, Any] = {"confirmation_attempts": 0}

    def fail(self, state: WorkerState, kind: ErrorKind, message: str) -> None:
        self.fields["failed_in"] = state
        self.fields["error"] = MetricError(kind=kind, message=message)

    def finish(self) -> MetricRecord:
        duration_ns = self.clock.elapsed_ns()
        return MetricRecord(
            endpoint=self.endpoint,
            index=self.index,
            created_at=self.clock.started_at,
            ended_at=self.clock.at(duration_ns),
            duration_ns=duration_ns,
            **self.fields,
        )


def setup_failure_record(endpoint: str, index: int, exc: Exception) -> MetricRecord:
    """Record for a worker whose RPC client could not be created."""
    trace = _Trace(endpoint, index)
    trace.fail(WorkerState.CREATED, ErrorKind.ENDPOINT_UNREACHABLE, f"{type(exc).__name__}: {exc}")
    return trace.finish()


class EndpointWorker:
    """
    Benchmark one endpoint: query, build, sign, submit, confirm.

    Parameters
    ----------
    rpc : RpcEndpoint
        Client bound to this worker's endpoint only.
    index : int
        Position of the endpoint in the run's endpoint list.
    policy : ConfirmationPolicy, optional
        Polling budget; defaults to ConfirmationPolicy().
    sleep : callable, optional
        Sleep function used between confirmation polls.
    """

    def __init__(
        self,
        rpc: RpcEndpoint,
        index: int = 0,
        policy: Optional[ConfirmationPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.rpc = rpc
        self.endpoint = rpc.endpoint
        self.index = index
        self.policy = policy or ConfirmationPolicy()
        self._sleep = sleep
        self.state = WorkerState.CREATED

    def _enter(self, state: WorkerState) -> None:
        self.state = state
        log.debug(
            f"[WORKER {state.value.upper()}] {self.endpoint}",
            extra={"endpoint": self.endpoint, "state": state.value},
        )

    def run(self, request: BenchmarkRequest) -> MetricRecord:
        trace = _Trace(self.endpoint, self.index)
        log.info(
            f"[WORKER START] {self.endpoint}",
            extra={"endpoint": self.endpoint, "index": self.index},
        )
        try:
            self._execute(request, trace)
        except ValidationFailure as exc:
            # Nothing was sent: the request could not be turned into a transaction.
            trace.fail(
                self.state, ErrorKind.SUBMISSION_REJECTED, f"{exc.kind.value}: {exc}"
            )
        except BenchmarkError as exc:
            trace.fail(self.state, exc.kind or ErrorKind.ENDPOINT_UNREACHABLE, str(exc))
        except Exception as exc:  # noqa: BLE001 - a worker must always yield a record
            log.exception(f"[WORKER CRASHED] {self.endpoint}", extra={"endpoint": self.endpoint})
            kind = (
                ErrorKind.CONFIRMATION_TIMEOUT
                if "transaction_signature" in trace.fields
                else ErrorKind.ENDPOINT_UNREACHABLE
            )
            trace.fail(self.state, kind, f"{type(exc).__name__}: {exc}")
        finally:
            self.state = WorkerState.DONE

        record = trace.finish()
        if record.error is None:
            log.info(
                f"[WORKER DONE] {self.endpoint}",
                extra={
                    "endpoint": self.endpoint,
                    "signature": record.transaction_signature,
                    "duration_ms": round(record.duration_ms, 3),
                },
            )
        else:
            log.warning(
                f"[WORKER FAILED] {self.endpoint}: {record.error.kind.value}",
                extra={
                    "endpoint": self.endpoint,
                    "error_kind": record.error.kind.value,
                    "error": record.error.message,
                    "failed_in": record.failed_in.value if record.failed_in else None,
                },
            )
        return record

    def _execute(self, request: BenchmarkRequest, trace: _Trace) -> None:
        self._enter(WorkerState.QUERYING)
        trace.fields["block_height_at_start"] = self.rpc.get_block_height()

        self._enter(WorkerState.BUILDING)
        blockhash = self.rpc.get_latest_blockhash()
        trace.fields["blockhash"] = str(blockhash)
        message = build_transfer(
            request.sender.pubkey(),
            request.recipient,
            request.lamports,
            blockhash,
            memo=request.memo_for(self.index),
        )
        transaction = sign_transfer(message, request.sender)

        self._enter(WorkerState.SUBMITTING)
        signature = self.rpc.submit_transaction(transaction)
        trace.fields["transaction_signature"] = str(signature)
        trace.fields["submitted_after_ns"] = trace.clock.elapsed_ns()
        log.info(
            f"[WORKER SUBMITTED] {self.endpoint}",
            extra={"endpoint": self.endpoint, "signature": str(signature)},
        )

        self._enter(WorkerState.CONFIRMING)
        confirmation = self._await_confirmation(signature, trace)
        trace.fields["confirmed_after_ns"] = trace.clock.elapsed_ns()
        trace.fields["confirmation_slot"] = confirmation.status.slot
        trace.fields["block_height_at_confirmation"] = confirmation.block_height
        trace.fields["confirmation_metadata"] = confirmation.metadata
        if confirmation.status.err is not None:
            raise SubmissionRejectedError(
                f"Transaction confirmed with on-chain error: {confirmation.status.err}"
            )

    def _poll_once(self, signature: Signature, trace: _Trace) -> Optional[_Confirmation]:
        trace.fields["confirmation_attempts"] += 1
        status = self.rpc.get_signature_status(signature)
        if status is None or not status.confirmed:
            return None
        metadata = self.rpc.get_transaction_metadata(signature)
        if metadata is None:
            return None
        return _Confirmation(
            status=status, metadata=metadata, block_height=self.rpc.get_block_height()
        )

    def _await_confirmation(self, signature: Signature, trace: _Trace) -> _Confirmation:
        retrying = Retrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=self.policy.wait_strategy(),
            retry=retry_if_result(lambda outcome: outcome is None)
            | retry_if_exception_type(WorkerFailure),
            sleep=self._sleep,
        )
        try:
            return retrying(self._poll_once, signature, trace)
        except RetryError as exc:
            last = exc.last_attempt
            detail = f": last error {last.exception()}" if last.failed else ""
            raise ConfirmationTimeoutError(
                f"Transaction {signature} not confirmed after "
                f"{self.policy.max_attempts} attempts{detail}"
            ) from exc


__all__ = ["ConfirmationPolicy", "EndpointWorker", "setup_failure_record"]
