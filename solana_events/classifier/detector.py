"""
Transaction classifier: which event families a TransactionRecord belongs to.

Pure table lookups over program identifiers and parsed instruction types;
unknown programs never match. Every predicate treats malformed
or missing fields as "no match" and never raises.
"""

from __future__ import annotations

from dataclasses import dataclass

from solana_events.classifier.programs import (
    CONTRACT_CREATION_PROGRAM_IDS,
    DEX_BY_PROGRAM_ID,
    MINT_INITIALIZATION_TYPES,
    NATIVE_TRANSFER_TYPE,
    SYSTEM_PROGRAM_NAME,
    TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_NAME,
    TOKEN_TRANSFER_TYPES,
)
from solana_events.solana_listener.models import ParsedInstruction, TransactionRecord


@dataclass(frozen=True)
class DexMatch:
    dex_name: str
    program_id: str


@dataclass(frozen=True)
class Classification:
    """All four predicates for one record; the processor decides precedence."""

    dex: DexMatch | None
    is_transfer: bool
    is_token_creation: bool
    is_contract_creation: bool


def match_dex(record: TransactionRecord) -> DexMatch | None:
    """First top-level instruction whose program id is a known DEX program."""
    for ix in record.instructions:
        name = DEX_BY_PROGRAM_ID.get(getattr(ix, "program_id", None) or "")
        if name is not None:
            return DexMatch(dex_name=name, program_id=ix.program_id)
    return None


def match_token_creation(record: TransactionRecord) -> bool:
    """Any inner token-program instruction initializing a mint."""
    return any(
        isinstance(ix, ParsedInstruction)
        and ix.program_id == TOKEN_PROGRAM_ID
        and ix.type in MINT_INITIALIZATION_TYPES
        for ix in record.iter_inner_instructions()
    )


def match_contract_creation(record: TransactionRecord) -> bool:
    """Any top-level instruction targeting the upgradeable BPF loader."""
    return any(
        getattr(ix, "program_id", None) in CONTRACT_CREATION_PROGRAM_IDS
        for ix in record.instructions
    )


def is_native_transfer_instruction(ix: object) -> bool:
    return (
        isinstance(ix, ParsedInstruction)
        and ix.program == SYSTEM_PROGRAM_NAME
        and ix.type == NATIVE_TRANSFER_TYPE
    )


def is_token_transfer_instruction(ix: object) -> bool:
    return (
        isinstance(ix, ParsedInstruction)
        and ix.program == TOKEN_PROGRAM_NAME
        and ix.type in TOKEN_TRANSFER_TYPES
    )


def match_transfer(record: TransactionRecord) -> bool:
    """Any parsed top-level system transfer or SPL token transfer/transferChecked."""
    return any(
        is_native_transfer_instruction(ix) or is_token_transfer_instruction(ix)
        for ix in record.instructions
    )


def classify(record: TransactionRecord) -> Classification:
    return Classification(
        dex=match_dex(record),
        is_transfer=match_transfer(record),
        is_token_creation=match_token_creation(record),
        is_contract_creation=match_contract_creation(record),
    )
