"""
Block fetcher / scheduler: slot → getBlock → chunked transaction processing.

Responsibilities:
- Keep at most one block fetch in flight; slots arriving while busy wait in
  a FIFO backlog and are fetched in arrival order.
- Retry transient retrieval errors with exponential backoff (2 ** attempt
  seconds, attempts 1..max_retries); after that the slot is logged and dropped.
- Treat a missing block (skipped slot) as a completed fetch with no events.
- Process a block's transactions in fixed-size chunks: concurrent inside a
  chunk, strictly sequential between chunks.
- Isolate failures per transaction and per slot so the stream keeps going.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from solana_events.core.exceptions import RpcError
from solana_events.events_logging import bind_transaction, get_logger
from solana_events.ingestion.processor import TransactionProcessor
from solana_events.solana_listener.normalizer import is_failed, transaction_signature

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 20
DEFAULT_MAX_RETRIES = 5
DEFAULT_BACKOFF_BASE_SEC = 2.0
DEFAULT_POST_BLOCK_DELAY_SEC = 0.1

STATUS_PROCESSED = "processed"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"

_RESULT_EVENT = "event"
_RESULT_NONE = "none"
_RESULT_ERROR = "error"


@dataclass
class BlockFetcherConfig:
    """
    Config for block retrieval and fan-out.

    chunk_size: Transactions processed concurrently per chunk.
    max_retries: Retries after the first failed getBlock call.
    backoff_base_sec: Delay before retry n is backoff_base_sec ** n.
    post_block_delay_sec: Pause after a processed block, to stay under free-tier rate limits.
    include_failed_transactions: Also classify transactions whose execution failed.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base_sec: float = DEFAULT_BACKOFF_BASE_SEC
    post_block_delay_sec: float = DEFAULT_POST_BLOCK_DELAY_SEC
    commitment: str = "confirmed"
    max_supported_transaction_version: int = 0
    transaction_details: str = "full"
    include_failed_transactions: bool = False

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")


@dataclass
class BlockOutcome:
    """Result of fetching and processing one slot."""

    slot: int
    status: str
    transaction_count: int = 0
    event_count: int = 0
    error_count: int = 0
    attempts: int = 0


class BlockFetcher:
    """
    Serializes block fetches and fans out transaction processing.

    enqueue_slot() must be called from the event loop thread; the backlog and
    in-flight flag are only touched by enqueue_slot() and the drain task.
    """

    def __init__(
        self,
        rpc: Any,
        processor: TransactionProcessor,
        config: BlockFetcherConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            rpc: Object with an async get_block(slot, *, commitment,
                max_supported_transaction_version, transaction_details) method,
                normally SolanaRpcClient.
            processor: Per-transaction processor (normalize, classify, parse, sink).
            config: Fetcher tuning; defaults to BlockFetcherConfig().
            sleep: Cooperative delay used for backoff and pacing.
        """
        self._rpc = rpc
        self._processor = processor
        self._config = config or BlockFetcherConfig()
        self._sleep = sleep
        self._backlog: deque[int] = deque()
        self._in_flight = False
        self._current_slot: int | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def backlog_size(self) -> int:
        return len(self._backlog)

    def enqueue_slot(self, slot: int) -> None:
        """
        Start fetching `slot` now if idle, otherwise append it to the backlog.
        A slot already in flight or already waiting is ignored.
        """
        if slot == self._current_slot or slot in self._backlog:
            logger.debug("slot_duplicate_ignored", slot=slot)
            return
        if self._in_flight:
            self._backlog.append(slot)
            logger.debug("slot_backlogged", slot=slot, backlog_size=len(self._backlog))
            return
        self._in_flight = True
        self._current_slot = slot
        self._task = asyncio.get_running_loop().create_task(self._drain(slot))

    async def wait_idle(self) -> None:
        """Wait until the in-flight fetch and the whole backlog are done."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    async def close(self) -> None:
        """Cancel the drain task; slots still in the backlog are discarded."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
        dropped = len(self._backlog)
        self._backlog.clear()
        logger.info("block_fetcher_closed", dropped_backlog=dropped)

    async def _drain(self, slot: int) -> None:
        next_slot: int | None = slot
        try:
            while next_slot is not None:
                self._current_slot = next_slot
                try:
                    await self.process_slot(next_slot)
                except Exception as e:
                    logger.exception("block_processing_failed", slot=next_slot, error=str(e))
                next_slot = self._backlog.popleft() if self._backlog else None
        finally:
            self._in_flight = False
            self._current_slot = None

    async def _get_block(self, slot: int) -> Mapping[str, Any] | None:
        cfg = self._config
        return await self._rpc.get_block(
            slot,
            commitment=cfg.commitment,
            max_supported_transaction_version=cfg.max_supported_transaction_version,
            transaction_details=cfg.transaction_details,
        )

    async def process_slot(self, slot: int) -> BlockOutcome:
        """
        Fetch and process one slot with the full retry policy.
        Never raises for retrieval errors; exhaustion yields status "failed".
        """
        cfg = self._config
        attempt = 0
        logger.info("block_fetch_started", slot=slot)
        while True:
            try:
                block = await self._get_block(slot)
                break
            except RpcError as e:
                attempt += 1
                if attempt > cfg.max_retries:
                    logger.error(
                        "block_fetch_exhausted",
                        slot=slot,
                        attempts=attempt,
                        max_retries=cfg.max_retries,
                        error=str(e),
                    )
                    return BlockOutcome(slot=slot, status=STATUS_FAILED, attempts=attempt)
                delay = cfg.backoff_base_sec ** attempt
                logger.warning(
                    "block_fetch_retry",
                    slot=slot,
                    attempt=attempt,
                    max_retries=cfg.max_retries,
                    delay_sec=delay,
                    error=str(e),
                )
                await self._sleep(delay)

        if not block:
            logger.info("block_empty", slot=slot)
            return BlockOutcome(slot=slot, status=STATUS_EMPTY, attempts=attempt + 1)

        outcome = await self._process_block(slot, block)
        outcome.attempts = attempt + 1
        if cfg.post_block_delay_sec > 0:
            await self._sleep(cfg.post_block_delay_sec)
        return outcome

    async def _process_block(self, slot: int, block: Mapping[str, Any]) -> BlockOutcome:
        transactions = [tx for tx in block.get("transactions") or [] if isinstance(tx, dict)]
        if not self._config.include_failed_transactions:
            selected = [tx for tx in transactions if not is_failed(tx)]
        else:
            selected = transactions
        block_time = block.get("blockTime")
        logger.info(
            "block_fetched",
            slot=slot,
            transaction_count=len(transactions),
            selected_count=len(selected),
        )

        outcome = BlockOutcome(slot=slot, status=STATUS_PROCESSED, transaction_count=len(selected))
        size = self._config.chunk_size
        for start in range(0, len(selected), size):
            chunk = selected[start : start + size]
            results = await asyncio.gather(
                *(self._process_transaction(tx, slot, block_time) for tx in chunk)
            )
            outcome.event_count += results.count(_RESULT_EVENT)
            outcome.error_count += results.count(_RESULT_ERROR)

        logger.info(
            "block_processed",
            slot=slot,
            transaction_count=outcome.transaction_count,
            event_count=outcome.event_count,
            error_count=outcome.error_count,
        )
        return outcome

    async def _process_transaction(
        self,
        raw: Mapping[str, Any],
        slot: int,
        block_time: int | None,
    ) -> str:
        try:
            event = await self._processor.process(raw, block_time=block_time, slot=slot)
        except Exception as e:
            bind_transaction(logger, slot, transaction_signature(raw)).warning(
                "transaction_processing_failed",
                error=str(e),
                exc_info=True,
            )
            return _RESULT_ERROR
        return _RESULT_EVENT if event is not None else _RESULT_NONE
