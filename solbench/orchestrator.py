"""
Orchestrator for benchmark runs: validate, fan out one worker per endpoint,
wait for all of them, then aggregate and persist their records.

Usage (example from CLI):
    from solbench.orchestrator import parse_endpoints, run_benchmark

    request = BenchmarkRequest(sender=keypair, recipient=keypair.pubkey(),
                               endpoints=parse_endpoints("https://a,https://b"))
    records = run_benchmark(request)

Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>-<run_id>.json` (timestamped archive)
- `results/run-<timestamp>-<run_id>.jsonl` (one MetricRecord per line)
"""

from __future__ import annotations

import json
import statistics
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from solbench.config import Settings, get_settings
from solbench.domain.errors import InvalidEndpointError, NoEndpointsError
from solbench.domain.models import BenchmarkRequest, MetricRecord
from solbench.infrastructure.rpc_client import RpcEndpoint, SolanaRpcEndpoint
from solbench.utils.logging import get_logger
from solbench.utils.profiler import profile_block
from solbench.workers.builder import validate_lamports
from solbench.workers.endpoint import ConfirmationPolicy, EndpointWorker, setup_failure_record

log = get_logger(__name__)

_URL_ADAPTER = TypeAdapter(AnyHttpUrl)


def _round_float(value: float, decimals: int = 3) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def parse_endpoints(raw: str | Sequence[str]) -> Tuple[str, ...]:
    """
    Turn a comma-separated string (or a sequence) into validated endpoint URLs.

    Order and duplicates are preserved; blank entries are dropped.

    Raises
    ------
    NoEndpointsError
        If nothing remains after trimming.
    InvalidEndpointError
        If an entry is not an http(s) URL.
    """
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    endpoints = tuple(item.strip() for item in items if item and item.strip())
    if not endpoints:
        raise NoEndpointsError("At least one RPC endpoint is required")
    for endpoint in endpoints:
        try:
            _URL_ADAPTER.validate_python(endpoint)
        except ValidationError as exc:
            raise InvalidEndpointError(f"Invalid RPC endpoint URL: {endpoint!r}") from exc
    return endpoints


def validate_request(request: BenchmarkRequest) -> None:
    """Fail fast on inputs that must abort the run before any worker exists."""
    if not request.endpoints:
        raise NoEndpointsError("At least one RPC endpoint is required")
    validate_lamports(request.lamports)


def _rpc_factory(settings: Settings) -> Callable[[str], RpcEndpoint]:
    """Build the per-endpoint RPC client factory."""

    def make(endpoint: str) -> RpcEndpoint:
        return SolanaRpcEndpoint(
            endpoint,
            timeout=settings.timeout_for(endpoint),
            commitment=settings.commitment,
        )

    return make


def _run_worker(
    make_rpc: Callable[[str], RpcEndpoint],
    policy: ConfirmationPolicy,
    request: BenchmarkRequest,
    index: int,
    endpoint: str,
) -> MetricRecord:
    rpc: Optional[RpcEndpoint] = None
    try:
        rpc = make_rpc(endpoint)
        worker = EndpointWorker(rpc, index=index, policy=policy)
    except Exception as exc:  # noqa: BLE001 - every endpoint must yield a record
        log.exception(f"[WORKER SETUP FAILED] {endpoint}", extra={"endpoint": endpoint})
        if rpc is not None:
            rpc.close()
        return setup_failure_record(endpoint, index, exc)

    try:
        return worker.run(request)
    finally:
        rpc.close()


def _fan_out(
    request: BenchmarkRequest,
    make_rpc: Callable[[str], RpcEndpoint],
    policy: ConfirmationPolicy,
) -> List[MetricRecord]:
    with ThreadPoolExecutor(
        max_workers=len(request.endpoints), thread_name_prefix="bench-worker"
    ) as pool:
        futures = [
            pool.submit(_run_worker, make_rpc, policy, request, index, endpoint)
            for index, endpoint in enumerate(request.endpoints)
        ]
        return [future.result() for future in futures]


def run_benchmark(
    request: BenchmarkRequest,
    settings: Optional[Settings] = None,
    profile: Optional[Dict[str, Any]] = None,
) -> List[MetricRecord]:
    """
    Run one worker per endpoint concurrently and return their records.

    Parameters
    ----------
    request : BenchmarkRequest
        Shared, immutable run input.
    settings : Settings, optional
        Timeouts, commitment and polling policy. Defaults to get_settings().
    profile : dict, optional
        If given, receives the run's profiler measurements.

    Returns
    -------
    List[MetricRecord]
        Exactly one record per entry in `request.endpoints`, in input order.

    Raises
    ------
    NoEndpointsError, InvalidAmountError
        Before any worker is spawned.
    """
    validate_request(request)
    settings = settings or get_settings()
    policy = ConfirmationPolicy.from_settings(settings)
    make_rpc = _rpc_factory(settings)

    log.info(
        f"[RUN START] {len(request.endpoints)} endpoint(s)",
        extra={
            "run_id": request.run_id,
            "endpoints": list(request.endpoints),
            "lamports": request.lamports,
            "sender": str(request.sender.pubkey()),
            "recipient": str(request.recipient),
        },
    )
    with profile_block(f"run-{request.run_id}") as stats:
        records = _fan_out(request, make_rpc, policy)

    if profile is not None:
        profile.update(stats.as_dict())

    failed = sum(1 for record in records if not record.succeeded)
    log.info(
        f"[RUN COMPLETE] {len(records) - failed}/{len(records)} endpoint(s) confirmed",
        extra={
            "run_id": request.run_id,
            "succeeded": len(records) - failed,
            "failed": failed,
            "duration_seconds": _round_float(stats.duration_seconds),
        },
    )
    return records


def _latency_stats(values: List[float]) -> Dict[str, float]:
    return {
        "median": _round_float(statistics.median(values)),
        "mean": _round_float(statistics.mean(values)),
        "stddev": _round_float(statistics.stdev(values)) if len(values) > 1 else 0.0,
        "min": _round_float(min(values)),
        "max": _round_float(max(values)),
    }


def summarize(records: Sequence[MetricRecord]) -> Dict[str, Any]:
    """
    Aggregate a run's records into counts and latency statistics.

    Latency statistics (milliseconds) only cover confirmed, error-free records.
    """
    succeeded = [record for record in records if record.succeeded]
    errors = Counter(record.error.kind.value for record in records if record.error is not None)
    summary: Dict[str, Any] = {
        "endpoints": len(records),
        "succeeded": len(succeeded),
        "failed": len(records) - len(succeeded),
        "errors": dict(sorted(errors.items())),
    }
    if succeeded:
        summary["total_ms"] = _latency_stats([record.duration_ms for record in succeeded])
        submit = [
            record.submitted_after_ns / 1_000_000
            for record in succeeded
            if record.submitted_after_ns is not None
        ]
        if submit:
            summary["submit_ms"] = _latency_stats(submit)
        fastest = min(succeeded, key=lambda record: record.duration_ns)
        summary["fastest_endpoint"] = fastest.endpoint
    return summary


def build_payload(
    request: BenchmarkRequest,
    records: Sequence[MetricRecord],
    profile: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Assemble the JSON document describing one run."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "run_id": request.run_id,
        "sender": str(request.sender.pubkey()),
        "recipient": str(request.recipient),
        "lamports": request.lamports,
        "endpoints": list(request.endpoints),
        "summary": summarize(records),
        "profile": profile or {},
        "records": [record.model_dump(mode="json") for record in records],
    }


def persist_results(payload: Dict[str, Any], results_dir: Path | str) -> Dict[str, Path]:
    """
    Write the run payload as JSON (latest + archive) and its records as JSON lines.
    """
    results_path = Path(results_dir)
    results_path.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    paths = {
        "latest": results_path / "latest.json",
        "archive": results_path / f"run-{timestamp}-{payload['run_id']}.json",
        "records": results_path / f"run-{timestamp}-{payload['run_id']}.jsonl",
    }

    for key in ("latest", "archive"):
        with paths[key].open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)
    with paths["records"].open("w", encoding="utf-8") as f:
        for record in payload["records"]:
            f.write(json.dumps(record, sort_keys=True) + "\n")

    log.info("Results persisted", extra={name: str(path) for name, path in paths.items()})
    return paths


__all__ = [
    "build_payload",
    "parse_endpoints",
    "persist_results",
    "run_benchmark",
    "summarize",
    "validate_request",
]
