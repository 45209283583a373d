"""
RPC client capability for the Solana RPC benchmark.

Workers never talk to solana-py directly: they depend on the `RpcEndpoint`
protocol below. `SolanaRpcEndpoint` implements it on top of
`solana.rpc.api.Client` and translates transport and RPC errors into the
harness error taxonomy:

- connection/timeout/HTTP failures and RPC errors on read calls
  -> EndpointUnreachableError
- RPC errors returned for a submitted transaction -> SubmissionRejectedError
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, TypeVar, runtime_checkable

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from solbench.domain.errors import EndpointUnreachableError, SubmissionRejectedError
from solbench.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}
_TRANSPORT_ERRORS = (SolanaRpcException, httpx.HTTPError, OSError)


@dataclass(frozen=True)
class SignatureStatus:
    """
    Confirmation state of a submitted signature as seen by one endpoint.
    """

    slot: int
    confirmed: bool
    err: Optional[str] = None


@runtime_checkable
class RpcEndpoint(Protocol):
    """
    Chain operations a worker needs from one RPC endpoint.

    Every call is bounded by the endpoint's per-call timeout and raises a
    WorkerFailure subclass on failure.
    """

    endpoint: str

    def get_block_height(self) -> int:
        ...

    def get_latest_blockhash(self) -> Hash:
        ...

    def submit_transaction(self, transaction: Transaction) -> Signature:
        ...

    def get_signature_status(self, signature: Signature) -> Optional[SignatureStatus]:
        """Return None while the endpoint does not know the signature yet."""
        ...

    def get_transaction_metadata(self, signature: Signature) -> Optional[Dict[str, Any]]:
        """Return the full getTransaction result, or None if not yet available."""
        ...

    def close(self) -> None:
        """Release the endpoint's connections."""
        ...


def _confirmation_rank(status: Any) -> int:
    if status.confirmation_status is None:
        # Nodes omit confirmationStatus for rooted transactions.
        return 2 if status.confirmations is None else 1
    if status.confirmation_status == TransactionConfirmationStatus.Finalized:
        return 2
    if status.confirmation_status == TransactionConfirmationStatus.Confirmed:
        return 1
    return 0


class SolanaRpcEndpoint:
    """
    `RpcEndpoint` backed by a solana-py HTTP client.

    Parameters
    ----------
    endpoint : str
        JSON-RPC URL of the node.
    timeout : float
        Per-call HTTP timeout in seconds.
    commitment : str
        Commitment level used for queries and required for confirmation.
    client : Client, optional
        Pre-built client (tests inject fakes here).
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 10.0,
        commitment: str = "confirmed",
        client: Optional[Client] = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.commitment = Commitment(commitment)
        self._required_rank = _COMMITMENT_RANK[commitment]
        self._owns_client = client is None
        self._client = client or Client(endpoint, commitment=self.commitment, timeout=timeout)

    def close(self) -> None:
        """
        Close the HTTP session of a client built here.

        Injected clients are left to their owner.
        """
        if not self._owns_client:
            return
        try:
            self._client._provider.session.close()
        except Exception:
            log.warning(f"[RPC CLOSE FAILED] {self.endpoint}", exc_info=True)

    def _call(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except RPCException as exc:
            raise EndpointUnreachableError(
                f"{operation} returned an RPC error: {exc}"
            ) from exc
        except _TRANSPORT_ERRORS as exc:
            raise EndpointUnreachableError(f"{operation} failed: {exc}") from exc

    def get_block_height(self) -> int:
        resp = self._call(
            "getBlockHeight", lambda: self._client.get_block_height(self.commitment)
        )
        return resp.value

    def get_latest_blockhash(self) -> Hash:
        resp = self._call(
            "getLatestBlockhash", lambda: self._client.get_latest_blockhash(self.commitment)
        )
        return resp.value.blockhash

    def submit_transaction(self, transaction: Transaction) -> Signature:
        opts = TxOpts(skip_preflight=False, preflight_commitment=self.commitment)
        try:
            resp = self._client.send_raw_transaction(bytes(transaction), opts=opts)
        except RPCException as exc:
            raise SubmissionRejectedError(f"sendTransaction rejected: {exc}") from exc
        except _TRANSPORT_ERRORS as exc:
            raise EndpointUnreachableError(f"sendTransaction failed: {exc}") from exc
        return resp.value

    def get_signature_status(self, signature: Signature) -> Optional[SignatureStatus]:
        resp = self._call(
            "getSignatureStatuses", lambda: self._client.get_signature_statuses([signature])
        )
        status = resp.value[0]
        if status is None:
            return None
        return SignatureStatus(
            slot=status.slot,
            confirmed=_confirmation_rank(status) >= self._required_rank,
            err=str(status.err) if status.err is not None else None,
        )

    def get_transaction_metadata(self, signature: Signature) -> Optional[Dict[str, Any]]:
        # getTransaction rejects "processed"; confirmed is the weakest level it serves.
        commitment = self.commitment if self._required_rank > 0 else Commitment("confirmed")
        resp = self._call(
            "getTransaction",
            lambda: self._client.get_transaction(
                signature,
                encoding="json",
                commitment=commitment,
                max_supported_transaction_version=0,
            ),
        )
        if resp.value is None:
            return None
        return json.loads(resp.value.to_json())


__all__ = ["RpcEndpoint", "SignatureStatus", "SolanaRpcEndpoint"]
