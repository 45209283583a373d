"""
Configuration settings for the Solana RPC benchmark.

Uses Pydantic Settings to load environment variables for RPC timeouts,
confirmation polling, logging, and benchmark defaults. CLI options override
these values for a single run.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Literal

from pydantic import Field, PositiveFloat
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    results_dir: Path = Field(Path("results"), alias="RESULTS_DIR")

    # Benchmark defaults
    endpoints: str = Field("", alias="BENCH_ENDPOINTS")
    keypair_path: Path = Field(
        Path("~/.config/solana/id.json").expanduser(), alias="BENCH_KEYPAIR_PATH"
    )
    lamports: int = Field(1, alias="BENCH_LAMPORTS")
    memo: bool = Field(True, alias="BENCH_MEMO")

    # RPC
    commitment: Literal["processed", "confirmed", "finalized"] = Field(
        "confirmed", alias="RPC_COMMITMENT"
    )
    rpc_timeout_seconds: float = Field(10.0, gt=0, alias="RPC_TIMEOUT_SECONDS")
    rpc_timeout_overrides: Dict[str, PositiveFloat] = Field(
        default_factory=dict, alias="RPC_TIMEOUT_OVERRIDES"
    )

    # Confirmation polling
    confirm_max_attempts: int = Field(30, ge=1, alias="CONFIRM_MAX_ATTEMPTS")
    confirm_backoff: Literal["fixed", "exponential"] = Field("fixed", alias="CONFIRM_BACKOFF")
    confirm_backoff_seconds: float = Field(1.0, ge=0, alias="CONFIRM_BACKOFF_SECONDS")
    confirm_backoff_max_seconds: float = Field(8.0, ge=0, alias="CONFIRM_BACKOFF_MAX_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def timeout_for(self, endpoint: str) -> float:
        """Per-call timeout for an endpoint, honoring RPC_TIMEOUT_OVERRIDES."""
        return self.rpc_timeout_overrides.get(endpoint, self.rpc_timeout_seconds)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
