"""
Data models for decoded Solana transactions.

A TransactionRecord is the unit of work handed to the classifier and the
event parsers: signature, resolved account keys, top-level and inner
instructions, success flag, block time and token-balance snapshots.
Records are immutable; parsers only read them.

Instructions are a tagged variant: ParsedInstruction when the RPC node
decoded the payload (jsonParsed), OpaqueInstruction when only raw data
and account addresses are available.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

import base58


@dataclass(frozen=True)
class ParsedInstruction:
    """Instruction decoded by the RPC node into {type, info}."""

    program_id: str
    program: str
    """Program name assigned by the node (system, spl-token, bpf-upgradeable-loader, ...)."""
    type: str
    info: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OpaqueInstruction:
    """Instruction the node could not decode: base58 data plus account addresses."""

    program_id: str
    data: str = ""
    accounts: tuple[str, ...] = ()

    def data_bytes(self) -> bytes:
        """Decode the base58 payload; empty bytes when the payload is empty or invalid."""
        if not self.data:
            return b""
        try:
            return base58.b58decode(self.data)
        except ValueError:
            return b""


Instruction = Union[ParsedInstruction, OpaqueInstruction]


@dataclass(frozen=True)
class InnerInstructionGroup:
    """Instructions emitted while executing the top-level instruction at `index`."""

    index: int
    instructions: tuple[Instruction, ...] = ()


@dataclass(frozen=True)
class TokenBalance:
    """One pre/post token balance snapshot entry."""

    account_index: int
    mint: str
    amount: str
    """Raw integer amount as a decimal string (uiTokenAmount.amount)."""
    owner: str | None = None


@dataclass(frozen=True)
class TransactionRecord:
    """
    Decoded transaction as extracted from a block.

    Read-only during classification and parsing; owned by a single
    processing task.
    """

    signature: str
    account_keys: tuple[str, ...]
    instructions: tuple[Instruction, ...]
    inner_instructions: tuple[InnerInstructionGroup, ...] = ()
    succeeded: bool = True
    block_time: int | None = None
    slot: int | None = None
    pre_token_balances: Mapping[int, TokenBalance] = field(default_factory=dict)
    post_token_balances: Mapping[int, TokenBalance] = field(default_factory=dict)

    @property
    def fee_payer(self) -> str:
        """First account key (fee payer / first signer); empty string if unknown."""
        return self.account_keys[0] if self.account_keys else ""

    def iter_inner_instructions(self):
        """Yield every inner instruction across all groups, in emission order."""
        for group in self.inner_instructions:
            yield from group.instructions

    def account_index(self, address: str) -> int | None:
        try:
            return self.account_keys.index(address)
        except ValueError:
            return None
