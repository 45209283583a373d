from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from solders.pubkey import Pubkey

from solbench.config import get_settings
from solbench.domain.errors import InvalidRecipientError, KeypairLoadError, ValidationFailure
from solbench.domain.models import BenchmarkRequest
from solbench.infrastructure.keypair import load_keypair
from solbench.orchestrator import build_payload, parse_endpoints, persist_results, run_benchmark
from solbench.reporter import print_results, write_jsonl
from solbench.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Solana RPC endpoint benchmark CLI.")
log = get_logger(__name__)


def _parse_recipient(raw: str) -> Pubkey:
    try:
        return Pubkey.from_string(raw)
    except ValueError as exc:
        raise InvalidRecipientError(f"Invalid recipient address: {raw!r}") from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"endpoints={settings.endpoints or '-'} | keypair={settings.keypair_path} | "
        f"lamports={settings.lamports} commitment={settings.commitment} "
        f"timeout={settings.rpc_timeout_seconds}s | "
        f"confirm={settings.confirm_max_attempts}x {settings.confirm_backoff} "
        f"{settings.confirm_backoff_seconds}s"
    )


@app.command()
def run(
    endpoints: Optional[str] = typer.Option(
        None,
        "--endpoints",
        "-e",
        help="Comma-separated list of Solana RPC endpoints (default from BENCH_ENDPOINTS).",
    ),
    keypair: Optional[Path] = typer.Option(
        None,
        "--keypair",
        "-k",
        help="Path to the Solana keypair JSON file (default from BENCH_KEYPAIR_PATH).",
    ),
    recipient: Optional[str] = typer.Option(
        None,
        "--recipient",
        "-r",
        help="Recipient public key (defaults to the sender, i.e. a self-transfer).",
    ),
    amount: Optional[int] = typer.Option(
        None,
        "--amount",
        "-a",
        help="Lamports to transfer per endpoint (default from BENCH_LAMPORTS).",
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
    jsonl: bool = typer.Option(
        False, "--jsonl", help="Print records as JSON lines instead of a table."
    ),
    persist: bool = typer.Option(True, "--persist/--no-persist", help="Write results to disk."),
    results_dir: Optional[Path] = typer.Option(
        None, "--results-dir", help="Directory for JSON artifacts (default from RESULTS_DIR)."
    ),
) -> None:
    """
    Submit one transfer through every endpoint concurrently and report timings.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=json_logs or settings.log_json)

    keypair_path = keypair or settings.keypair_path
    try:
        sender = load_keypair(keypair_path)
    except KeypairLoadError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    try:
        request = BenchmarkRequest(
            sender=sender,
            recipient=_parse_recipient(recipient) if recipient else sender.pubkey(),
            endpoints=parse_endpoints(endpoints if endpoints is not None else settings.endpoints),
            lamports=amount if amount is not None else settings.lamports,
            tag_memo=settings.memo,
        )
        profile: dict = {}
        records = run_benchmark(request, settings=settings, profile=profile)
    except ValidationFailure as exc:
        typer.echo(f"Error [{exc.kind.value}]: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    typer.echo(
        f"Benchmarked {len(records)} endpoint(s) from {sender.pubkey()} "
        f"(keypair {Path(keypair_path).expanduser()}).",
        err=True,
    )
    payload = build_payload(request, records, profile)
    if jsonl:
        write_jsonl(records, sys.stdout)
    else:
        print_results(records, summary=payload["summary"])

    if persist:
        try:
            persist_results(payload, results_dir or settings.results_dir)
        except OSError as exc:
            typer.echo(f"Warning: results not persisted: {exc}", err=True)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
