"""
Solana JSON-RPC client for block retrieval.

Thin async wrapper over httpx for getBlock with jsonParsed encoding.
Transport/HTTP failures raise RpcTransportError and JSON-RPC error
objects raise RpcResponseError; both are retried by the block fetcher.
A skipped slot (or one pruned from long-term storage) is reported as
None, not as an error.
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx

from solana_events.core.exceptions import RpcResponseError, RpcTransportError
from solana_events.events_logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 30.0

# JSON-RPC error codes meaning "this slot has no block"
SLOT_SKIPPED_CODE = -32007
LONG_TERM_STORAGE_MISSING_CODE = -32009
NO_BLOCK_ERROR_CODES = frozenset({SLOT_SKIPPED_CODE, LONG_TERM_STORAGE_MISSING_CODE})


class SolanaRpcClient:
    """
    Async JSON-RPC client bound to one endpoint.

    Use as an async context manager, or call aclose() when done. An existing
    httpx.AsyncClient may be injected (tests pass one with a MockTransport).
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        self._rpc_url = rpc_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))
        self._ids = itertools.count(1)

    async def __aenter__(self) -> SolanaRpcClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call and return its result; raise RpcError subclasses on failure."""
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            resp = await self._client.post(self._rpc_url, json=body)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise RpcTransportError(f"{method} failed: {e}") from e
        except ValueError as e:
            raise RpcTransportError(f"{method} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RpcTransportError(f"{method} returned unexpected payload type")
        err = data.get("error")
        if err:
            if isinstance(err, dict):
                raise RpcResponseError(
                    str(err.get("message", err)), code=err.get("code"), data=err.get("data")
                )
            raise RpcResponseError(str(err))
        return data.get("result")

    async def get_block(
        self,
        slot: int,
        *,
        commitment: str = "confirmed",
        max_supported_transaction_version: int = 0,
        transaction_details: str = "full",
    ) -> dict[str, Any] | None:
        """
        Fetch the block at `slot` with jsonParsed transactions.

        Returns None when the slot was skipped or has no block available.
        """
        opts = {
            "encoding": "jsonParsed",
            "commitment": commitment,
            "maxSupportedTransactionVersion": max_supported_transaction_version,
            "transactionDetails": transaction_details,
            "rewards": False,
        }
        try:
            result = await self._call("getBlock", [slot, opts])
        except RpcResponseError as e:
            if e.code in NO_BLOCK_ERROR_CODES:
                logger.debug("rpc_block_unavailable", slot=slot, code=e.code)
                return None
            raise
        if result is None:
            return None
        if not isinstance(result, dict):
            raise RpcTransportError(f"getBlock returned unexpected result for slot {slot}")
        return result
