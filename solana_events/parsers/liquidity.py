"""
Liquidity parser for Raydium AMM v4 deposits and withdrawals.

Detection looks at the first data byte of the DEX program's undecoded
top-level instructions (3 = deposit, 4 = withdraw). Parsing then works
on the inner token transfer legs:

- add: the two largest legs by magnitude are the pool tokens; a further
  positive leg with a different mint is the minted LP receipt (optional).
- remove: the first negative leg is the burned LP token (required); the
  two largest positive legs are the tokens paid out of the pool.

Legs without an explicit mint get one from the token-balance snapshots;
when none is found the mint is reported as an empty string.
"""

from __future__ import annotations

from dataclasses import dataclass

from solana_events.classifier.programs import (
    DEX_PROGRAM_IDS,
    DEX_RAYDIUM,
    RAYDIUM_ADD_LIQUIDITY_DISCRIMINATOR,
    RAYDIUM_REMOVE_LIQUIDITY_DISCRIMINATOR,
)
from solana_events.events_logging import get_logger
from solana_events.parsers.events import LiquidityEvent, LiquidityOperation, TokenAmount
from solana_events.parsers.legs import (
    TransferLeg,
    collect_token_transfer_legs,
    resolve_leg_mint,
)
from solana_events.solana_listener.models import OpaqueInstruction, TransactionRecord

logger = get_logger(__name__)

MIN_LIQUIDITY_LEGS = 2
# Raydium AMM v4 deposit/withdraw: [token_program, amm, amm_authority, ...]
_POOL_ACCOUNT_POSITION = 1

_DISCRIMINATORS: dict[int, LiquidityOperation] = {
    RAYDIUM_ADD_LIQUIDITY_DISCRIMINATOR: "add",
    RAYDIUM_REMOVE_LIQUIDITY_DISCRIMINATOR: "remove",
}


@dataclass(frozen=True)
class LiquidityInstruction:
    """Detected liquidity instruction: operation and the pool it targets, if known."""

    operation: LiquidityOperation
    pool_address: str | None = None


def detect_liquidity_operation(
    record: TransactionRecord,
    program_id: str | None = DEX_PROGRAM_IDS[DEX_RAYDIUM],
) -> LiquidityInstruction | None:
    """
    Scan top-level undecoded instructions (of `program_id`, or of any program when
    None) for a deposit/withdraw discriminator. First hit wins.
    """
    for ix in record.instructions:
        if not isinstance(ix, OpaqueInstruction):
            continue
        if program_id is not None and ix.program_id != program_id:
            continue
        data = ix.data_bytes()
        if not data:
            continue
        operation = _DISCRIMINATORS.get(data[0])
        if operation is None:
            continue
        pool = ix.accounts[_POOL_ACCOUNT_POSITION] if len(ix.accounts) > _POOL_ACCOUNT_POSITION else None
        return LiquidityInstruction(operation=operation, pool_address=pool or None)
    return None


def _token_amount(record: TransactionRecord, leg: TransferLeg) -> TokenAmount:
    return TokenAmount(mint=resolve_leg_mint(record, leg) or "", amount=str(leg.amount))


def parse_add_liquidity(
    record: TransactionRecord,
    dex_name: str,
    *,
    pool_address: str | None = None,
) -> LiquidityEvent | None:
    legs = collect_token_transfer_legs(record)
    if len(legs) < MIN_LIQUIDITY_LEGS:
        logger.debug("add_liquidity_not_enough_transfers", signature=record.signature, leg_count=len(legs))
        return None

    by_magnitude = sorted(legs, key=lambda leg: abs(leg.amount), reverse=True)
    token_a = _token_amount(record, by_magnitude[0])
    token_b = _token_amount(record, by_magnitude[1])

    lp_token = None
    for leg in legs:
        if leg.amount <= 0:
            continue
        mint = resolve_leg_mint(record, leg)
        if mint and mint != token_a.mint and mint != token_b.mint:
            lp_token = TokenAmount(mint=mint, amount=str(leg.amount))
            break

    return LiquidityEvent(
        dex=dex_name,
        signature=record.signature,
        operation="add",
        trader_account=record.fee_payer,
        token_a=token_a,
        token_b=token_b,
        lp_token=lp_token,
        pool_address=pool_address,
        timestamp=record.block_time,
    )


def parse_remove_liquidity(
    record: TransactionRecord,
    dex_name: str,
    *,
    pool_address: str | None = None,
) -> LiquidityEvent | None:
    legs = collect_token_transfer_legs(record)
    if len(legs) < MIN_LIQUIDITY_LEGS:
        logger.debug("remove_liquidity_not_enough_transfers", signature=record.signature, leg_count=len(legs))
        return None

    lp_leg = next((leg for leg in legs if leg.amount < 0), None)
    if lp_leg is None:
        logger.debug("remove_liquidity_no_lp_leg", signature=record.signature)
        return None

    positive = sorted((leg for leg in legs if leg.amount > 0), key=lambda leg: leg.amount, reverse=True)
    if len(positive) < MIN_LIQUIDITY_LEGS:
        logger.debug("remove_liquidity_not_enough_payouts", signature=record.signature, payout_count=len(positive))
        return None

    return LiquidityEvent(
        dex=dex_name,
        signature=record.signature,
        operation="remove",
        trader_account=record.fee_payer,
        token_a=_token_amount(record, positive[0]),
        token_b=_token_amount(record, positive[1]),
        lp_token=_token_amount(record, lp_leg),
        pool_address=pool_address,
        timestamp=record.block_time,
    )


def parse_liquidity(
    record: TransactionRecord,
    dex_name: str,
    detected: LiquidityInstruction,
) -> LiquidityEvent | None:
    """Run the add or remove parser for an already detected liquidity instruction."""
    if detected.operation == "add":
        return parse_add_liquidity(record, dex_name, pool_address=detected.pool_address)
    return parse_remove_liquidity(record, dex_name, pool_address=detected.pool_address)
