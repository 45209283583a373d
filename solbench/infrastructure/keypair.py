"""
Key material loading for the Solana RPC benchmark.

Reads keypair files in the format written by `solana-keygen`: a JSON array
of 64 integers (32-byte secret seed followed by the 32-byte public key).
"""

from __future__ import annotations

import json
from pathlib import Path

from solders.keypair import Keypair

from solbench.domain.errors import KeypairLoadError


def load_keypair(path: Path | str) -> Keypair:
    """
    Load a signing keypair from a solana-keygen JSON file.

    Raises
    ------
    KeypairLoadError
        If the file is missing, unreadable, or does not hold 64 key bytes.
    """
    keypair_path = Path(path).expanduser()
    try:
        raw = json.loads(keypair_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise KeypairLoadError(f"Cannot read keypair file {keypair_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise KeypairLoadError(f"Keypair file {keypair_path} is not valid JSON") from exc

    if not isinstance(raw, list) or len(raw) != 64:
        raise KeypairLoadError(f"Keypair file {keypair_path} must hold a 64-element array")
    try:
        return Keypair.from_bytes(bytes(raw))
    except (TypeError, ValueError) as exc:
        raise KeypairLoadError(f"Keypair file {keypair_path} holds invalid key bytes") from exc


__all__ = ["load_keypair"]
