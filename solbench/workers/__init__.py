"""
Workers package for the Solana RPC benchmark.

Re-exports the endpoint worker and the transaction builder so downstream code
can import from `solbench.workers` directly.
"""

from solbench.workers.builder import build_transfer, sign_transfer, validate_lamports
from solbench.workers.endpoint import ConfirmationPolicy, EndpointWorker

__all__ = [
    "ConfirmationPolicy",
    "EndpointWorker",
    "build_transfer",
    "sign_transfer",
    "validate_lamports",
]
