"""
Application-level exceptions.

RPC failures are split into transport problems (network, timeout, HTTP status)
and JSON-RPC error responses; the block fetcher retries both. A slot that
simply has no block is not an error and never raises.
"""

from __future__ import annotations

from typing import Any


class SolanaEventsError(Exception):
    """Base class for all solana_events errors."""


class ConfigError(SolanaEventsError):
    """Invalid or missing configuration value."""


class RpcError(SolanaEventsError):
    """Transient block retrieval failure; safe to retry."""


class RpcTransportError(RpcError):
    """Network, timeout or HTTP status failure talking to the RPC node."""


class RpcResponseError(RpcError):
    """JSON-RPC error object returned by the node."""

    def __init__(self, message: str, code: int | None = None, data: Any = None) -> None:
        super().__init__(f"Solana RPC error: {message} (code={code})")
        self.code = code
        self.data = data


class NormalizationError(SolanaEventsError):
    """Raw transaction payload is missing required structure (signature, message)."""
