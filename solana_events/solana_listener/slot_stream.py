"""
Real-time slot notifications over the Solana websocket API.

Connects to the RPC websocket endpoint, issues slotSubscribe, and invokes
a callback with each notified slot number in production order.
Auto-reconnects with exponential backoff; stop() ends the loop after the
current message.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, Awaitable, Callable

import websockets
from websockets.exceptions import ConnectionClosed

from solana_events.events_logging import get_logger

logger = get_logger(__name__)

DEFAULT_WS_PING_INTERVAL = 30.0
DEFAULT_WS_PING_TIMEOUT = 10.0
DEFAULT_RECONNECT_MIN_SEC = 1.0
DEFAULT_RECONNECT_MAX_SEC = 60.0
_WS_CLOSE_TIMEOUT = 5.0

SlotCallback = Callable[[int], Awaitable[None]] | Callable[[int], None]


def parse_slot_notification(msg: Any) -> int | None:
    """Return the slot from a slotNotification message; None for anything else."""
    if not isinstance(msg, dict) or msg.get("method") != "slotNotification":
        return None
    params = msg.get("params") or {}
    result = params.get("result") or {}
    slot = result.get("slot") if isinstance(result, dict) else None
    if isinstance(slot, int) and not isinstance(slot, bool) and slot >= 0:
        return slot
    return None


class SlotSubscriber:
    """
    slotSubscribe client with reconnect.

    Every slotNotification is passed to on_slot (sync or async). Slots are
    forwarded as received; deduplication is the consumer's concern.
    """

    def __init__(
        self,
        ws_url: str,
        on_slot: SlotCallback,
        *,
        reconnect_min_sec: float = DEFAULT_RECONNECT_MIN_SEC,
        reconnect_max_sec: float = DEFAULT_RECONNECT_MAX_SEC,
        ping_interval: float | None = DEFAULT_WS_PING_INTERVAL,
        ping_timeout: float | None = DEFAULT_WS_PING_TIMEOUT,
    ) -> None:
        if not ws_url.strip():
            raise ValueError("ws_url must be non-empty")
        self._ws_url = ws_url
        self._on_slot = on_slot
        self._reconnect_min = reconnect_min_sec
        self._reconnect_max = reconnect_max_sec
        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._subscription_id: int | None = None
        self._stop = asyncio.Event()

    @property
    def subscription_id(self) -> int | None:
        return self._subscription_id

    def stop(self) -> None:
        """Signal the subscriber to stop after the current iteration."""
        self._stop.set()

    async def run(self) -> None:
        """
        Connect, subscribe, forward slots, reconnect on failure.
        Exits when stop() is called.
        """
        backoff = self._reconnect_min
        run_id = 0
        while not self._stop.is_set():
            run_id += 1
            try:
                logger.info("slot_stream_connecting", run_id=run_id, url=self._ws_url)
                async with websockets.connect(
                    self._ws_url,
                    ping_interval=self._ping_interval,
                    ping_timeout=self._ping_timeout,
                    close_timeout=_WS_CLOSE_TIMEOUT,
                ) as ws:
                    backoff = self._reconnect_min
                    await ws.send(
                        json.dumps({"jsonrpc": "2.0", "id": 1, "method": "slotSubscribe"})
                    )
                    await self._receive_loop(ws)
            except asyncio.CancelledError:
                raise
            except ConnectionClosed as e:
                logger.warning(
                    "slot_stream_disconnected",
                    run_id=run_id,
                    code=getattr(e.rcvd, "code", None),
                    reason=getattr(e.rcvd, "reason", None),
                )
            except Exception as e:
                logger.exception("slot_stream_error", run_id=run_id, error=str(e))
            finally:
                self._subscription_id = None

            if self._stop.is_set():
                break
            logger.info("slot_stream_reconnect", run_id=run_id, backoff_sec=round(backoff, 1))
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=backoff)
            except asyncio.TimeoutError:
                pass
            backoff = min(backoff * 2, self._reconnect_max)
        logger.info("slot_stream_stopped", run_id=run_id)

    async def _receive_loop(self, ws: Any) -> None:
        async for raw in ws:
            if self._stop.is_set():
                return
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                logger.debug("slot_stream_invalid_json")
                continue
            await self.handle_message(msg)

    async def handle_message(self, msg: Any) -> None:
        """Route one decoded websocket message: subscription ack or slot notification."""
        if not isinstance(msg, dict):
            return
        if "result" in msg and "id" in msg and "method" not in msg:
            if msg.get("error") is None and isinstance(msg.get("result"), int):
                self._subscription_id = msg["result"]
                logger.info("slot_stream_subscribed", subscription_id=self._subscription_id)
            return
        if msg.get("error"):
            logger.warning("slot_stream_rpc_error", error=str(msg["error"]))
            return
        slot = parse_slot_notification(msg)
        if slot is None:
            return
        logger.debug("slot_stream_slot", slot=slot)
        await self._dispatch(slot)

    async def _dispatch(self, slot: int) -> None:
        try:
            result = self._on_slot(slot)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.exception("slot_stream_callback_failed", slot=slot, error=str(e))
