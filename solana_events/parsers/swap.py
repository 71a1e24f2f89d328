"""
Swap parser.

Recovers trade direction from the ordered inner token transfers: the
first transfer is the trader paying in, the last is the pool paying out.
Routed (multi-hop) swaps are reported first-hop-in / last-hop-out, which
can misstate the intermediate legs.
"""

from __future__ import annotations

from solana_events.events_logging import get_logger
from solana_events.parsers.events import SwapEvent
from solana_events.parsers.legs import collect_token_transfer_legs
from solana_events.solana_listener.models import TransactionRecord

logger = get_logger(__name__)

MIN_SWAP_LEGS = 2


def parse_swap(record: TransactionRecord, dex_name: str) -> SwapEvent | None:
    """
    Parse a swap through `dex_name`; None when fewer than two token transfer
    legs exist in the inner instructions.
    """
    legs = collect_token_transfer_legs(record)
    if len(legs) < MIN_SWAP_LEGS:
        logger.debug(
            "swap_not_enough_transfers",
            signature=record.signature,
            dex=dex_name,
            leg_count=len(legs),
        )
        return None
    first, last = legs[0], legs[-1]
    return SwapEvent(
        dex=dex_name,
        signature=record.signature,
        trader_account=record.fee_payer,
        token_in=first.destination,
        amount_in=str(first.amount),
        token_out=last.source,
        amount_out=str(last.amount),
        timestamp=record.block_time,
    )
