"""
Transfer-leg extraction shared by the swap and liquidity parsers.

A TransferLeg is derived from one parsed SPL token transfer/transferChecked
inner instruction. Amounts are parsed from decimal strings (or JSON
integers) straight into Python ints; anything else is rejected rather
than passed through a float.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from solana_events.classifier.programs import TOKEN_PROGRAM_ID, TOKEN_TRANSFER_TYPES
from solana_events.solana_listener.models import ParsedInstruction, TransactionRecord

# canonical decimal integer: ASCII digits, no sign on zero, no leading zeros
_INTEGER_RE = re.compile(r"-?[1-9][0-9]*|0")


@dataclass(frozen=True)
class TransferLeg:
    source: str
    destination: str
    amount: int
    mint: str | None = None
    authority: str | None = None


def parse_amount(value: Any) -> int | None:
    """
    Exact integer from a canonical decimal string or int; None for floats,
    bools, padded or zero-prefixed strings and junk, so str() of the result
    is always the ledger's own text.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_RE.fullmatch(value):
        try:
            return int(value)
        except ValueError:
            # longer than the interpreter's int string conversion limit
            return None
    return None


def transfer_amount(info: Mapping[str, Any]) -> int | None:
    """Amount of a transfer/transferChecked info block (transferChecked nests it in tokenAmount)."""
    amount = parse_amount(info.get("amount"))
    if amount is not None:
        return amount
    token_amount = info.get("tokenAmount")
    if isinstance(token_amount, Mapping):
        return parse_amount(token_amount.get("amount"))
    return None


def leg_from_instruction(ix: ParsedInstruction) -> TransferLeg | None:
    info = ix.info
    amount = transfer_amount(info)
    if amount is None:
        return None
    mint = info.get("mint")
    authority = info.get("authority") or info.get("multisigAuthority")
    return TransferLeg(
        source=str(info.get("source") or ""),
        destination=str(info.get("destination") or ""),
        amount=amount,
        mint=str(mint) if mint else None,
        authority=str(authority) if authority else None,
    )


def collect_token_transfer_legs(record: TransactionRecord) -> list[TransferLeg]:
    """All token-program transfer legs across inner-instruction groups, in emission order."""
    legs: list[TransferLeg] = []
    for ix in record.iter_inner_instructions():
        if not isinstance(ix, ParsedInstruction):
            continue
        if ix.program_id != TOKEN_PROGRAM_ID or ix.type not in TOKEN_TRANSFER_TYPES:
            continue
        leg = leg_from_instruction(ix)
        if leg is not None:
            legs.append(leg)
    return legs


def snapshot_mint(record: TransactionRecord, account: str) -> str | None:
    """Mint held by a token account per the post (then pre) balance snapshot."""
    if not account:
        return None
    idx = record.account_index(account)
    if idx is None:
        return None
    for snapshot in (record.post_token_balances, record.pre_token_balances):
        balance = snapshot.get(idx)
        if balance is not None:
            return balance.mint
    return None


def resolve_leg_mint(record: TransactionRecord, leg: TransferLeg) -> str | None:
    """Explicit mint, else the snapshot mint of the destination, else of the source."""
    if leg.mint:
        return leg.mint
    return snapshot_mint(record, leg.destination) or snapshot_mint(record, leg.source)
