"""
Token and program creation parsers.

Token creation comes from the first inner initializeMint* instruction of
the token program. Program creation comes from the first top-level
instruction of the upgradeable BPF loader; when the node decoded it, the
program account and authority are read from its info.
"""

from __future__ import annotations

from typing import Any, Mapping

from solana_events.classifier.programs import (
    CONTRACT_CREATION_PROGRAM_IDS,
    MINT_INITIALIZATION_TYPES,
    TOKEN_PROGRAM_ID,
)
from solana_events.parsers.events import ContractCreationEvent, TokenCreationEvent
from solana_events.solana_listener.models import ParsedInstruction, TransactionRecord


def _optional_str(info: Mapping[str, Any], key: str) -> str | None:
    value = info.get(key)
    return str(value) if value else None


def parse_token_creation(record: TransactionRecord) -> TokenCreationEvent | None:
    for ix in record.iter_inner_instructions():
        if not isinstance(ix, ParsedInstruction):
            continue
        if ix.program_id != TOKEN_PROGRAM_ID or ix.type not in MINT_INITIALIZATION_TYPES:
            continue
        mint = _optional_str(ix.info, "mint")
        if mint is None:
            continue
        decimals = ix.info.get("decimals")
        return TokenCreationEvent(
            signature=record.signature,
            mint=mint,
            creator=record.fee_payer,
            decimals=decimals if isinstance(decimals, int) and not isinstance(decimals, bool) else None,
            mint_authority=_optional_str(ix.info, "mintAuthority"),
            freeze_authority=_optional_str(ix.info, "freezeAuthority"),
            timestamp=record.block_time,
        )
    return None


def parse_contract_creation(record: TransactionRecord) -> ContractCreationEvent | None:
    for ix in record.instructions:
        if ix.program_id not in CONTRACT_CREATION_PROGRAM_IDS:
            continue
        if isinstance(ix, ParsedInstruction):
            return ContractCreationEvent(
                signature=record.signature,
                deployer=record.fee_payer,
                instruction_type=ix.type or None,
                program_account=_optional_str(ix.info, "programAccount"),
                authority=_optional_str(ix.info, "authority"),
                timestamp=record.block_time,
            )
        return ContractCreationEvent(
            signature=record.signature,
            deployer=record.fee_payer,
            timestamp=record.block_time,
        )
    return None
