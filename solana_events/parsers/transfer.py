"""
Transfer parser: native SOL transfers first, then SPL token transfers.

Only top-level parsed instructions are considered. For a plain token
`transfer` the mint is looked up in the post-balance snapshot at the
destination's account index; a missing snapshot leaves it unset.
"""

from __future__ import annotations

from solana_events.classifier.detector import (
    is_native_transfer_instruction,
    is_token_transfer_instruction,
)
from solana_events.parsers.events import TransferEvent
from solana_events.parsers.legs import TransferLeg, leg_from_instruction, parse_amount
from solana_events.solana_listener.models import TransactionRecord


def parse_native_transfer(record: TransactionRecord) -> TransferEvent | None:
    ix = next((i for i in record.instructions if is_native_transfer_instruction(i)), None)
    if ix is None:
        return None
    lamports = parse_amount(ix.info.get("lamports"))
    if lamports is None:
        return None
    return TransferEvent(
        signature=record.signature,
        source=str(ix.info.get("source") or ""),
        destination=str(ix.info.get("destination") or ""),
        amount=str(lamports),
        is_native_transfer=True,
        timestamp=record.block_time,
    )


def _destination_mint(record: TransactionRecord, leg: TransferLeg) -> str | None:
    if leg.mint:
        return leg.mint
    idx = record.account_index(leg.destination)
    if idx is None:
        return None
    balance = record.post_token_balances.get(idx)
    return balance.mint if balance is not None else None


def parse_token_transfer(record: TransactionRecord) -> TransferEvent | None:
    ix = next((i for i in record.instructions if is_token_transfer_instruction(i)), None)
    if ix is None:
        return None
    leg = leg_from_instruction(ix)
    if leg is None:
        return None
    return TransferEvent(
        signature=record.signature,
        source=leg.source or leg.authority or "",
        destination=leg.destination,
        amount=str(leg.amount),
        is_native_transfer=False,
        token_mint=_destination_mint(record, leg),
        timestamp=record.block_time,
    )


def parse_transfer(record: TransactionRecord) -> TransferEvent | None:
    """Native transfer if present, else token transfer, else None."""
    if not record.instructions:
        return None
    return parse_native_transfer(record) or parse_token_transfer(record)
