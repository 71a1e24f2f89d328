"""
Event parsers: one TransactionRecord in, zero or one DomainEvent out.

Ambiguous or unsupported layouts return None; parsers never raise for
a well-formed record.
"""

from solana_events.parsers.creation import parse_contract_creation, parse_token_creation
from solana_events.parsers.events import (
    ContractCreationEvent,
    DomainEvent,
    LiquidityEvent,
    SwapEvent,
    TokenAmount,
    TokenCreationEvent,
    TransferEvent,
)
from solana_events.parsers.liquidity import (
    detect_liquidity_operation,
    parse_add_liquidity,
    parse_liquidity,
    parse_remove_liquidity,
)
from solana_events.parsers.swap import parse_swap
from solana_events.parsers.transfer import parse_transfer

__all__ = [
    "ContractCreationEvent",
    "DomainEvent",
    "LiquidityEvent",
    "SwapEvent",
    "TokenAmount",
    "TokenCreationEvent",
    "TransferEvent",
    "detect_liquidity_operation",
    "parse_add_liquidity",
    "parse_contract_creation",
    "parse_liquidity",
    "parse_remove_liquidity",
    "parse_swap",
    "parse_token_creation",
    "parse_transfer",
]
