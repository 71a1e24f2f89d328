"""
Domain events produced by the event parsers.

Every event is created from exactly one TransactionRecord and handed to a
sink; the pipeline keeps no reference afterwards. Token amounts are raw
integer amounts as decimal strings, reported exactly as they appear on
the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Union

EVENT_SWAP = "swap"
EVENT_LIQUIDITY = "liquidity"
EVENT_TRANSFER = "transfer"
EVENT_TOKEN_CREATION = "token_creation"
EVENT_CONTRACT_CREATION = "contract_creation"

LiquidityOperation = Literal["add", "remove"]


@dataclass(frozen=True)
class TokenAmount:
    mint: str
    """Mint address; empty string when it could not be determined."""
    amount: str

    def to_dict(self) -> dict[str, Any]:
        return {"mint": self.mint, "amount": self.amount}


@dataclass(frozen=True)
class SwapEvent:
    """
    Token swap through a DEX.

    token_in/token_out are the token accounts of the first and last inner
    transfer: the account the trader paid into and the account the payout
    came from.
    """

    dex: str
    signature: str
    trader_account: str
    token_in: str
    amount_in: str
    token_out: str
    amount_out: str
    timestamp: int | None = None

    kind = EVENT_SWAP

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "dex": self.dex,
            "signature": self.signature,
            "trader_account": self.trader_account,
            "token_in": self.token_in,
            "amount_in": self.amount_in,
            "token_out": self.token_out,
            "amount_out": self.amount_out,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class LiquidityEvent:
    """Liquidity added to or removed from a DEX pool."""

    dex: str
    signature: str
    operation: LiquidityOperation
    trader_account: str
    token_a: TokenAmount
    token_b: TokenAmount
    lp_token: TokenAmount | None = None
    pool_address: str | None = None
    timestamp: int | None = None

    kind = EVENT_LIQUIDITY

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "dex": self.dex,
            "signature": self.signature,
            "operation": self.operation,
            "trader_account": self.trader_account,
            "token_a": self.token_a.to_dict(),
            "token_b": self.token_b.to_dict(),
            "lp_token": self.lp_token.to_dict() if self.lp_token else None,
            "pool_address": self.pool_address,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class TransferEvent:
    """Native SOL (lamports) or SPL token transfer."""

    signature: str
    source: str
    destination: str
    amount: str
    is_native_transfer: bool
    token_mint: str | None = None
    timestamp: int | None = None

    kind = EVENT_TRANSFER

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "signature": self.signature,
            "source": self.source,
            "destination": self.destination,
            "amount": self.amount,
            "token_mint": self.token_mint,
            "is_native_transfer": self.is_native_transfer,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class TokenCreationEvent:
    """New SPL token mint initialized."""

    signature: str
    mint: str
    creator: str
    decimals: int | None = None
    mint_authority: str | None = None
    freeze_authority: str | None = None
    timestamp: int | None = None

    kind = EVENT_TOKEN_CREATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "signature": self.signature,
            "mint": self.mint,
            "creator": self.creator,
            "decimals": self.decimals,
            "mint_authority": self.mint_authority,
            "freeze_authority": self.freeze_authority,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ContractCreationEvent:
    """Program deployed or upgraded through the upgradeable BPF loader."""

    signature: str
    deployer: str
    instruction_type: str | None = None
    """Loader instruction (deployWithMaxDataLen, upgrade, ...); None when undecoded."""
    program_account: str | None = None
    authority: str | None = None
    timestamp: int | None = None

    kind = EVENT_CONTRACT_CREATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "signature": self.signature,
            "deployer": self.deployer,
            "instruction_type": self.instruction_type,
            "program_account": self.program_account,
            "authority": self.authority,
            "timestamp": self.timestamp,
        }


DomainEvent = Union[
    SwapEvent,
    LiquidityEvent,
    TransferEvent,
    TokenCreationEvent,
    ContractCreationEvent,
]
