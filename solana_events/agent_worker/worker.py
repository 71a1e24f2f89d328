"""
24/7 ingestion worker: slot stream → block fetcher → processor → sink.

Runs one asyncio loop: the websocket subscriber enqueues every notified
slot on the BlockFetcher, which fetches blocks one at a time and hands
extracted events to the sink. SIGINT/SIGTERM stop the stream, cancel the
in-flight fetch and close the RPC client.
"""

from __future__ import annotations

import asyncio
import signal

from solana_events.config import Settings, get_settings
from solana_events.events_logging import get_logger
from solana_events.ingestion.block_fetcher import BlockFetcher, BlockOutcome
from solana_events.ingestion.processor import TransactionProcessor
from solana_events.ingestion.sink import EventSink, LoggingSink
from solana_events.solana_listener.rpc import SolanaRpcClient
from solana_events.solana_listener.slot_stream import SlotSubscriber

logger = get_logger(__name__)


async def run_pipeline(
    settings: Settings,
    stop_event: asyncio.Event,
    *,
    sink: EventSink | None = None,
) -> None:
    """Run stream + fetcher until stop_event is set."""
    sink = sink or LoggingSink()
    async with SolanaRpcClient(settings.rpc_url, timeout_sec=settings.rpc_timeout_sec) as rpc:
        fetcher = BlockFetcher(rpc, TransactionProcessor(sink), settings.to_fetcher_config())
        subscriber = SlotSubscriber(settings.ws_url, fetcher.enqueue_slot)
        stream_task = asyncio.create_task(subscriber.run())
        logger.info(
            "worker_started",
            rpc_url=settings.masked_rpc_url(),
            commitment=settings.commitment,
            chunk_size=settings.chunk_size,
            include_failed_transactions=settings.include_failed_transactions,
        )
        try:
            await stop_event.wait()
        finally:
            subscriber.stop()
            stream_task.cancel()
            await asyncio.gather(stream_task, return_exceptions=True)
            await fetcher.close()


async def run_slots(
    settings: Settings,
    slots: list[int],
    *,
    sink: EventSink | None = None,
) -> list[BlockOutcome]:
    """Fetch and process specific slots once, in order; no subscription."""
    sink = sink or LoggingSink()
    outcomes: list[BlockOutcome] = []
    async with SolanaRpcClient(settings.rpc_url, timeout_sec=settings.rpc_timeout_sec) as rpc:
        fetcher = BlockFetcher(rpc, TransactionProcessor(sink), settings.to_fetcher_config())
        for slot in slots:
            outcomes.append(await fetcher.process_slot(slot))
    return outcomes


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform / not in main thread
            logger.debug("worker_signal_handler_unavailable", signal=sig.name)


def run_worker(settings: Settings | None = None) -> None:
    """
    Run the ingestion worker until SIGINT/SIGTERM. Blocks the calling thread.
    """
    settings = settings or get_settings()

    async def _main() -> None:
        stop_event = asyncio.Event()
        _install_signal_handlers(stop_event)
        await run_pipeline(settings, stop_event)

    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        logger.info("worker_keyboard_interrupt")
    finally:
        logger.info("worker_stopped")
