"""
Solana listener package.

Subscribes to slot notifications, retrieves blocks over JSON-RPC and
normalizes raw transactions into TransactionRecords for the classifier
and event parsers.
"""

from solana_events.solana_listener.models import (
    InnerInstructionGroup,
    Instruction,
    OpaqueInstruction,
    ParsedInstruction,
    TokenBalance,
    TransactionRecord,
)
from solana_events.solana_listener.normalizer import normalize_transaction
from solana_events.solana_listener.rpc import SolanaRpcClient
from solana_events.solana_listener.slot_stream import SlotSubscriber

__all__ = [
    "InnerInstructionGroup",
    "Instruction",
    "OpaqueInstruction",
    "ParsedInstruction",
    "SlotSubscriber",
    "SolanaRpcClient",
    "TokenBalance",
    "TransactionRecord",
    "normalize_transaction",
]
