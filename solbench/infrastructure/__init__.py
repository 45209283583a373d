"""
Infrastructure package for the Solana RPC benchmark.

Centralizes chain I/O concerns (RPC client adapter, keypair loading).
Keep this layer focused on I/O and error translation, decoupled from
worker/orchestrator logic.
"""

from solbench.infrastructure.keypair import load_keypair
from solbench.infrastructure.rpc_client import RpcEndpoint, SignatureStatus, SolanaRpcEndpoint

__all__ = [
    "RpcEndpoint",
    "SignatureStatus",
    "SolanaRpcEndpoint",
    "load_keypair",
]
