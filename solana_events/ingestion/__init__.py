# Block ingestion: slot scheduling, block retrieval, per-transaction processing, sinks.

from solana_events.ingestion.block_fetcher import (
    BlockFetcher,
    BlockFetcherConfig,
    BlockOutcome,
)
from solana_events.ingestion.processor import TransactionProcessor, extract_event
from solana_events.ingestion.sink import EventSink, LoggingSink

__all__ = [
    "BlockFetcher",
    "BlockFetcherConfig",
    "BlockOutcome",
    "EventSink",
    "LoggingSink",
    "TransactionProcessor",
    "extract_event",
]
