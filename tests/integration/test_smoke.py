"""
Integration tests against a real Solana RPC node.

These tests submit real transfers (1 lamport, self-transfer) and verify that:
1. A reachable endpoint yields a confirmed record with metadata
2. An unreachable endpoint yields an EndpointUnreachable record in the same run
3. Two runs produce independent signatures

Run with a funded keypair, e.g. against `solana-test-validator`:
    RUN_INTEGRATION_TESTS=1 SOLBENCH_TEST_ENDPOINT=http://127.0.0.1:8899 \
    SOLBENCH_TEST_KEYPAIR=~/.config/solana/id.json pytest tests/integration/
"""

from __future__ import annotations

import os

import pytest

from solbench.config import Settings
from solbench.domain.errors import ErrorKind
from solbench.domain.models import BenchmarkRequest
from solbench.infrastructure.keypair import load_keypair
from solbench.orchestrator import run_benchmark

UNREACHABLE_ENDPOINT = "http://127.0.0.1:9"

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and a reachable Solana RPC node",
)


@pytest.fixture(scope="module")
def live_endpoint() -> str:
    return os.getenv("SOLBENCH_TEST_ENDPOINT", "http://127.0.0.1:8899")


@pytest.fixture(scope="module")
def live_request_factory(live_endpoint: str):
    keypair = load_keypair(os.getenv("SOLBENCH_TEST_KEYPAIR", "~/.config/solana/id.json"))

    def _make(*endpoints: str) -> BenchmarkRequest:
        return BenchmarkRequest(
            sender=keypair, recipient=keypair.pubkey(), endpoints=endpoints or (live_endpoint,)
        )

    return _make


@pytest.fixture(scope="module")
def live_settings() -> Settings:
    return Settings(
        rpc_timeout_seconds=5.0,
        confirm_max_attempts=60,
        confirm_backoff_seconds=0.5,
    )


class TestLiveEndpoint:
    def test_live_endpoint_confirms_transfer(self, live_request_factory, live_settings):
        (record,) = run_benchmark(live_request_factory(), settings=live_settings)

        assert record.error is None, record.error
        assert record.transaction_signature
        assert record.confirmation_metadata
        assert record.block_height_at_confirmation >= record.block_height_at_start

    def test_unreachable_endpoint_does_not_affect_live_one(
        self, live_request_factory, live_settings, live_endpoint
    ):
        records = run_benchmark(
            live_request_factory(live_endpoint, UNREACHABLE_ENDPOINT), settings=live_settings
        )

        by_endpoint = {record.endpoint: record for record in records}
        assert by_endpoint[live_endpoint].succeeded
        assert by_endpoint[UNREACHABLE_ENDPOINT].error.kind is ErrorKind.ENDPOINT_UNREACHABLE

    def test_runs_are_independent(self, live_request_factory, live_settings):
        (first,) = run_benchmark(live_request_factory(), settings=live_settings)
        (second,) = run_benchmark(live_request_factory(), settings=live_settings)

        assert first.transaction_signature != second.transaction_signature
