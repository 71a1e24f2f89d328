"""
Per-transaction processing: normalize → classify → parse → sink.

Dispatch order: a known DEX program takes priority. For a supported DEX a
deposit/withdraw instruction routes to the liquidity parser, anything
else to the swap parser; a recognized but unsupported DEX yields no event.
Without a DEX match, transfer, token creation and program creation are
tried in that order and the first successful parse wins.
"""

from __future__ import annotations

from typing import Any, Mapping

from solana_events.classifier.detector import (
    match_contract_creation,
    match_dex,
    match_token_creation,
    match_transfer,
)
from solana_events.classifier.programs import SUPPORTED_DEXES
from solana_events.events_logging import bind_transaction, get_logger
from solana_events.ingestion.sink import EventSink, emit
from solana_events.parsers.creation import parse_contract_creation, parse_token_creation
from solana_events.parsers.events import DomainEvent
from solana_events.parsers.liquidity import detect_liquidity_operation, parse_liquidity
from solana_events.parsers.swap import parse_swap
from solana_events.parsers.transfer import parse_transfer
from solana_events.solana_listener.models import TransactionRecord
from solana_events.solana_listener.normalizer import normalize_transaction

logger = get_logger(__name__)


def _extract_dex_event(record: TransactionRecord, dex_name: str, program_id: str) -> DomainEvent | None:
    if dex_name not in SUPPORTED_DEXES:
        logger.debug("dex_unsupported", signature=record.signature, dex=dex_name)
        return None
    detected = detect_liquidity_operation(record, program_id)
    if detected is not None:
        return parse_liquidity(record, dex_name, detected)
    return parse_swap(record, dex_name)


def extract_event(record: TransactionRecord) -> DomainEvent | None:
    """At most one event for the record; None is a normal outcome."""
    dex = match_dex(record)
    if dex is not None:
        return _extract_dex_event(record, dex.dex_name, dex.program_id)

    if match_transfer(record):
        event = parse_transfer(record)
        if event is not None:
            return event
    if match_token_creation(record):
        event = parse_token_creation(record)
        if event is not None:
            return event
    if match_contract_creation(record):
        return parse_contract_creation(record)
    return None


class TransactionProcessor:
    """Turns raw block transactions into events and hands them to the sink."""

    def __init__(self, sink: EventSink) -> None:
        self._sink = sink

    async def process(
        self,
        raw: Mapping[str, Any],
        *,
        block_time: int | None = None,
        slot: int | None = None,
    ) -> DomainEvent | None:
        """
        Process one raw transaction. Normalization or sink errors propagate;
        the block fetcher isolates them per transaction.
        """
        record = normalize_transaction(raw, block_time=block_time, slot=slot)
        event = extract_event(record)
        if event is None:
            return None
        bind_transaction(logger, slot, record.signature).debug("transaction_event", kind=event.kind)
        await emit(self._sink, event)
        return event
