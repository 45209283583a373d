"""
Pytest configuration for the Solana RPC benchmark.

Provides fixtures for:
- Fake RPC endpoints scripted per test (no network access)
- Sender/recipient keys and benchmark requests
- Settings with a fast confirmation policy
"""

from __future__ import annotations

import json
import secrets
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from solbench.config import Settings
from solbench.domain.errors import EndpointUnreachableError, SubmissionRejectedError
from solbench.domain.models import BenchmarkRequest
from solbench.infrastructure.rpc_client import SignatureStatus


class FakeRpcEndpoint:
    """
    Scripted stand-in for SolanaRpcEndpoint.

    Parameters
    ----------
    fail_on : iterable[str]
        Method names that raise EndpointUnreachableError.
    crash_on : iterable[str]
        Method names that raise RuntimeError (unclassified failure).
    reject : bool
        Whether submit_transaction raises SubmissionRejectedError.
    confirm_after : int
        Status poll number on which the signature becomes confirmed.
    confirm : bool
        If False the signature is never confirmed.
    poll_errors : int
        Number of leading status polls that raise EndpointUnreachableError.
    on_chain_err : str, optional
        Error attached to the confirmed status.
    barrier : threading.Barrier, optional
        Waited on during the first block height query.
    """

    def __init__(
        self,
        endpoint: str = "https://good.example",
        *,
        block_height: int = 1_000,
        fail_on: Iterable[str] = (),
        crash_on: Iterable[str] = (),
        reject: bool = False,
        confirm_after: int = 1,
        confirm: bool = True,
        poll_errors: int = 0,
        on_chain_err: Optional[str] = None,
        barrier: Optional[threading.Barrier] = None,
    ) -> None:
        self.endpoint = endpoint
        self.height = block_height
        self.fail_on = set(fail_on)
        self.crash_on = set(crash_on)
        self.reject = reject
        self.confirm_after = confirm_after
        self.confirm = confirm
        self.poll_errors = poll_errors
        self.on_chain_err = on_chain_err
        self.barrier = barrier
        self.submitted: List[Transaction] = []
        self.blockhashes: List[Hash] = []
        self.status_calls = 0
        self.close_calls = 0

    def _check(self, operation: str) -> None:
        if operation in self.crash_on:
            raise RuntimeError(f"{operation} exploded")
        if operation in self.fail_on:
            raise EndpointUnreachableError(f"{operation} failed: connection refused")

    def get_block_height(self) -> int:
        self._check("get_block_height")
        if self.barrier is not None:
            barrier, self.barrier = self.barrier, None
            barrier.wait()
        height = self.height
        self.height += 1
        return height

    def get_latest_blockhash(self) -> Hash:
        self._check("get_latest_blockhash")
        blockhash = Hash(secrets.token_bytes(32))
        self.blockhashes.append(blockhash)
        return blockhash

    def submit_transaction(self, transaction: Transaction) -> Signature:
        self._check("submit_transaction")
        self.submitted.append(transaction)
        if self.reject:
            raise SubmissionRejectedError("sendTransaction rejected: insufficient funds")
        return transaction.signatures[0]

    def get_signature_status(self, signature: Signature) -> Optional[SignatureStatus]:
        self._check("get_signature_status")
        self.status_calls += 1
        if self.status_calls <= self.poll_errors:
            raise EndpointUnreachableError("getSignatureStatuses failed: read timeout")
        if not self.confirm:
            return None
        if self.status_calls < self.confirm_after:
            return SignatureStatus(slot=self.height, confirmed=False)
        return SignatureStatus(slot=self.height + 10, confirmed=True, err=self.on_chain_err)

    def get_transaction_metadata(self, signature: Signature) -> Optional[Dict[str, Any]]:
        self._check("get_transaction_metadata")
        return {
            "slot": self.height + 10,
            "blockTime": 1_700_000_000,
            "meta": {"err": self.on_chain_err, "fee": 5000},
            "transaction": {"signatures": [str(signature)]},
        }

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def fake_rpc() -> type[FakeRpcEndpoint]:
    """The FakeRpcEndpoint class, for tests that script endpoints."""
    return FakeRpcEndpoint


@pytest.fixture
def sender() -> Keypair:
    return Keypair()


@pytest.fixture
def recipient() -> Pubkey:
    return Keypair().pubkey()


@pytest.fixture
def make_request(sender: Keypair, recipient: Pubkey):
    def _make(endpoints: Iterable[str] = ("https://good.example",), lamports: int = 1):
        return BenchmarkRequest(
            sender=sender,
            recipient=recipient,
            endpoints=tuple(endpoints),
            lamports=lamports,
        )

    return _make


@pytest.fixture
def fast_settings(tmp_path: Path) -> Settings:
    """
    Settings with a small, sleep-free confirmation budget.
    """
    return Settings(
        confirm_max_attempts=3,
        confirm_backoff="fixed",
        confirm_backoff_seconds=0.0,
        rpc_timeout_seconds=2.0,
        results_dir=tmp_path / "results",
        log_level="DEBUG",
    )


@pytest.fixture
def keypair_file(tmp_path: Path, sender: Keypair) -> Path:
    """A solana-keygen style keypair file holding `sender`."""
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(sender))), encoding="utf-8")
    return path
