"""
Domain models for the Solana RPC benchmark.

`BenchmarkRequest` is the immutable input shared by every worker of a run.
`MetricRecord` is the immutable output each worker emits exactly once; it is
a pydantic model so it can be serialized to JSON without extra glue.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solbench.domain.errors import ErrorKind


class WorkerState(str, Enum):
    CREATED = "Created"
    QUERYING = "Querying"
    BUILDING = "Building"
    SUBMITTING = "Submitting"
    CONFIRMING = "Confirming"
    DONE = "Done"


def _new_run_id() -> str:
    return secrets.token_hex(4)


@dataclass(frozen=True)
class BenchmarkRequest:
    """
    Inputs for one benchmark run.

    The keypair is shared by reference across workers; signing does not
    mutate it.
    """

    sender: Keypair
    recipient: Pubkey
    endpoints: Tuple[str, ...]
    lamports: int = 1
    tag_memo: bool = True
    run_id: str = field(default_factory=_new_run_id)

    def memo_for(self, index: int) -> Optional[str]:
        """Memo text that makes each worker's transaction unique."""
        if not self.tag_memo:
            return None
        return f"solbench:{self.run_id}:{index}"


class MetricError(BaseModel):
    kind: ErrorKind
    message: str

    model_config = {"frozen": True}


class MetricRecord(BaseModel):
    """
    Timing and outcome of one endpoint worker.
    """

    endpoint: str = Field(..., description="RPC endpoint URL benchmarked by the worker.")
    index: int = Field(..., description="Position of the endpoint in the input list.")
    created_at: datetime = Field(..., description="Wall-clock worker start (UTC).")
    ended_at: datetime = Field(..., description="Wall-clock worker end (UTC).")
    duration_ns: int = Field(..., ge=0, description="Monotonic worker duration.")
    block_height_at_start: Optional[int] = None
    blockhash: Optional[str] = None
    transaction_signature: Optional[str] = None
    submitted_after_ns: Optional[int] = None
    confirmation_attempts: int = 0
    confirmation_slot: Optional[int] = None
    block_height_at_confirmation: Optional[int] = None
    confirmed_after_ns: Optional[int] = None
    confirmation_metadata: Optional[Dict[str, Any]] = None
    failed_in: Optional[WorkerState] = None
    error: Optional[MetricError] = None

    model_config = {"frozen": True}

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def duration_ms(self) -> float:
        return self.duration_ns / 1_000_000

    @property
    def blocks_to_confirm(self) -> Optional[int]:
        if self.block_height_at_start is None or self.block_height_at_confirmation is None:
            return None
        return self.block_height_at_confirmation - self.block_height_at_start


__all__ = [
    "BenchmarkRequest",
    "MetricError",
    "MetricRecord",
    "WorkerState",
]
