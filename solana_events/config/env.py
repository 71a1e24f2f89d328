"""
Environment variable loading and validation for Solana Events.

- SOLANA_RPC_URL: HTTP JSON-RPC endpoint (default: mainnet-beta public node)
- SOLANA_WS_URL: websocket endpoint; derived from SOLANA_RPC_URL when unset
- SOLANA_COMMITMENT: processed | confirmed | finalized (default: confirmed)
- BLOCK_CHUNK_SIZE, BLOCK_MAX_RETRIES, RPC_TIMEOUT_SEC: numeric tuning
- INCLUDE_FAILED_TRANSACTIONS: 1/true/yes/on to classify failed transactions
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from solana_events.core.exceptions import ConfigError

# Project root: config is solana_events/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
VALID_COMMITMENTS = ("processed", "confirmed", "finalized")
_TRUTHY = ("1", "true", "yes", "on")


def load_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    load_dotenv(_ENV_PATH, override=False)


def http_to_ws(url: str) -> str:
    """Convert https:// or http:// to wss:// or ws:// for the subscription endpoint."""
    s = url.strip()
    if s.startswith("https://"):
        return "wss://" + s[8:]
    if s.startswith("http://"):
        return "ws://" + s[7:]
    return s


def get_rpc_url() -> str:
    load_env()
    return (os.getenv("SOLANA_RPC_URL") or "").strip() or MAINNET_RPC_URL


def get_ws_url() -> str:
    """SOLANA_WS_URL when set, otherwise the RPC URL with a websocket scheme."""
    load_env()
    url = (os.getenv("SOLANA_WS_URL") or "").strip()
    if url:
        return url
    return http_to_ws(get_rpc_url())


def get_commitment() -> str:
    load_env()
    raw = (os.getenv("SOLANA_COMMITMENT") or "confirmed").strip().lower()
    if raw not in VALID_COMMITMENTS:
        raise ConfigError(f"SOLANA_COMMITMENT must be one of {VALID_COMMITMENTS}, got {raw!r}")
    return raw


def get_int(name: str, default: int, *, minimum: int = 0) -> int:
    """Read an integer env var; raise ConfigError when malformed or below minimum."""
    load_env()
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def get_float(name: str, default: float) -> float:
    load_env()
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def get_bool(name: str, default: bool = False) -> bool:
    load_env()
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY
