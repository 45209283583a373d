"""
Fund the benchmark keypair on a devnet/testnet/local validator.

Each benchmark run pays one transaction fee per endpoint, so the sender needs
a small balance. Airdrops are rate-limited on public clusters; retries use
exponential backoff.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Optional

import typer
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.core import RPCException
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from solbench.config import get_settings
from solbench.domain.errors import KeypairLoadError
from solbench.infrastructure.keypair import load_keypair

app = typer.Typer(help="Request an airdrop for the benchmark keypair.")

LAMPORTS_PER_SOL = 1_000_000_000


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((RPCException, SolanaRpcException)),
    reraise=True,
)
def _request_airdrop(client: Client, pubkey, lamports: int) -> str:
    return str(client.request_airdrop(pubkey, lamports).value)


@app.command()
def main(
    endpoint: str = typer.Option(
        "https://api.devnet.solana.com", "--endpoint", "-e", help="Cluster RPC URL."
    ),
    keypair: Optional[Path] = typer.Option(
        None, "--keypair", "-k", help="Keypair to fund (default from BENCH_KEYPAIR_PATH)."
    ),
    sol: float = typer.Option(1.0, "--sol", help="Amount of SOL to request."),
) -> None:
    settings = get_settings()
    try:
        owner = load_keypair(keypair or settings.keypair_path)
    except KeypairLoadError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    client = Client(endpoint, timeout=settings.rpc_timeout_seconds)
    lamports = int(sol * LAMPORTS_PER_SOL)
    start = time.perf_counter()
    try:
        signature = _request_airdrop(client, owner.pubkey(), lamports)
    except (RPCException, SolanaRpcException) as exc:
        typer.echo(f"Airdrop failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    balance = client.get_balance(owner.pubkey()).value
    typer.echo(
        f"Requested {sol} SOL for {owner.pubkey()} in {time.perf_counter() - start:.2f}s "
        f"(signature {signature}); current balance {balance / LAMPORTS_PER_SOL:.4f} SOL"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(130)
