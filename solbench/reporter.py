from __future__ import annotations

import json
from typing import Any, Dict, Optional, Sequence, TextIO

from rich import box
from rich.console import Console
from rich.table import Table

from solbench.domain.models import MetricRecord


def _ms(value_ns: Optional[int]) -> str:
    if value_ns is None:
        return "N/A"
    return f"{value_ns / 1_000_000:,.1f}"


def _short_signature(signature: Optional[str]) -> str:
    if not signature:
        return "No signature"
    return f"{signature[:8]}…{signature[-8:]}"


def _sort_key(record: MetricRecord) -> tuple[int, int]:
    # Confirmed endpoints first, fastest on top; failures keep input order.
    if record.succeeded:
        return (0, record.duration_ns)
    return (1, record.index)


def print_results(
    records: Sequence[MetricRecord],
    summary: Optional[Dict[str, Any]] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render benchmark records as a rich table, followed by the run summary.
    """
    console = console or Console()

    if not records:
        console.print("[yellow]No results to display.[/yellow]")
        return

    table = Table(
        title="Solana RPC Benchmark Results",
        box=box.ROUNDED,
        caption="Sorted by total latency (failures last)",
    )

    table.add_column("#", justify="right", style="dim")
    table.add_column("Endpoint", style="cyan", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Start Height", justify="right", style="magenta")
    table.add_column("Confirm Height", justify="right", style="magenta")
    table.add_column("Submit (ms)", justify="right", style="green")
    table.add_column("Confirm (ms)", justify="right", style="green")
    table.add_column("Total (ms)", justify="right", style="bold green")
    table.add_column("Signature", style="blue")
    table.add_column("Error", style="red")

    for record in sorted(records, key=_sort_key):
        if record.succeeded:
            status = "[green]Confirmed[/green]"
        else:
            status = f"[red]{record.error.kind.value}[/red]"
        table.add_row(
            str(record.index + 1),
            record.endpoint,
            status,
            str(record.block_height_at_start) if record.block_height_at_start is not None else "N/A",
            str(record.block_height_at_confirmation)
            if record.block_height_at_confirmation is not None
            else "N/A",
            _ms(record.submitted_after_ns),
            _ms(record.confirmed_after_ns),
            f"{record.duration_ms:,.1f}",
            _short_signature(record.transaction_signature),
            record.error.message if record.error else "",
        )

    console.print(table)

    if summary:
        parts = [f"{summary['succeeded']}/{summary['endpoints']} confirmed"]
        if "total_ms" in summary:
            total = summary["total_ms"]
            parts.append(f"median {total['median']:,.1f} ms ± {total['stddev']:,.1f}")
        if summary.get("fastest_endpoint"):
            parts.append(f"fastest: {summary['fastest_endpoint']}")
        console.print(" │ ".join(parts))


def write_jsonl(records: Sequence[MetricRecord], stream: TextIO) -> None:
    """Write one JSON object per record, one record per line."""
    for record in records:
        stream.write(json.dumps(record.model_dump(mode="json"), sort_keys=True) + "\n")


__all__ = ["print_results", "write_jsonl"]
