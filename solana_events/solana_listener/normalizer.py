"""
Transaction normalizer: raw getBlock transactions to TransactionRecord.

Accepts the per-transaction entries of a getBlock result (jsonParsed or json
encoding) and produces immutable TransactionRecords with tagged
instructions. Account keys are resolved to base58 strings; for versioned
transactions meta.loadedAddresses are appended so indexes line up with
token-balance snapshots.
"""

from __future__ import annotations

from typing import Any, Mapping

from solana_events.core.exceptions import NormalizationError
from solana_events.solana_listener.models import (
    InnerInstructionGroup,
    Instruction,
    OpaqueInstruction,
    ParsedInstruction,
    TokenBalance,
    TransactionRecord,
)


def _get_account_keys(
    message: dict[str, Any],
    meta: dict[str, Any] | None = None,
) -> list[str]:
    """
    Resolve accountKeys to a list of base58 strings (handles json vs jsonParsed).
    For versioned json-encoded transactions, appends meta.loadedAddresses (writable + readonly).
    """
    keys = message.get("accountKeys")
    if not keys:
        return []
    if isinstance(keys[0], str):
        out = list(keys)
    else:
        # jsonParsed already lists lookup-table accounts (source="lookupTable")
        return [k.get("pubkey", "") for k in keys if isinstance(k, dict)]
    loaded = (meta or {}).get("loadedAddresses") or {}
    for role in ("writable", "readonly"):
        for addr in loaded.get(role) or []:
            if isinstance(addr, str):
                out.append(addr)
    return out


def _resolve_index(account_keys: list[str], idx: Any) -> str:
    if isinstance(idx, int) and 0 <= idx < len(account_keys):
        return account_keys[idx]
    return ""


def normalize_instruction(raw: Mapping[str, Any], account_keys: list[str]) -> Instruction:
    """Build a ParsedInstruction or OpaqueInstruction from one raw instruction dict."""
    program_id = raw.get("programId")
    if program_id is None:
        program_id = _resolve_index(account_keys, raw.get("programIdIndex"))
    program_id = str(program_id or "")

    parsed = raw.get("parsed")
    if parsed is not None:
        # Some programs (e.g. memo) parse to a bare string
        if isinstance(parsed, dict):
            ix_type = str(parsed.get("type") or "")
            info = parsed.get("info")
            info = info if isinstance(info, dict) else {}
        else:
            ix_type, info = "", {}
        return ParsedInstruction(
            program_id=program_id,
            program=str(raw.get("program") or ""),
            type=ix_type,
            info=info,
        )

    accounts: list[str] = []
    for acc in raw.get("accounts") or []:
        if isinstance(acc, str):
            accounts.append(acc)
        else:
            accounts.append(_resolve_index(account_keys, acc))
    data = raw.get("data")
    return OpaqueInstruction(
        program_id=program_id,
        data=data if isinstance(data, str) else "",
        accounts=tuple(accounts),
    )


def _normalize_balances(raw: Any) -> dict[int, TokenBalance]:
    out: dict[int, TokenBalance] = {}
    if not isinstance(raw, list):
        return out
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        idx = entry.get("accountIndex")
        mint = entry.get("mint")
        if not isinstance(idx, int) or not mint:
            continue
        ui = entry.get("uiTokenAmount") or {}
        out[idx] = TokenBalance(
            account_index=idx,
            mint=str(mint),
            amount=str(ui.get("amount", "0")),
            owner=entry.get("owner"),
        )
    return out


def normalize_transaction(
    raw: Mapping[str, Any],
    *,
    block_time: int | None = None,
    slot: int | None = None,
) -> TransactionRecord:
    """
    Normalize one raw block transaction into a TransactionRecord.

    Args:
        raw: {"transaction": {...}, "meta": {...}} entry from getBlock.
        block_time: blockTime of the enclosing block (block entries carry none).
        slot: slot of the enclosing block.

    Raises:
        NormalizationError: when the signature or message is missing.
    """
    tx_obj = raw.get("transaction")
    if not isinstance(tx_obj, dict):
        raise NormalizationError("transaction object missing")
    signatures = tx_obj.get("signatures") or []
    if not signatures or not isinstance(signatures[0], str):
        raise NormalizationError("transaction signature missing")
    message = tx_obj.get("message")
    if not isinstance(message, dict):
        raise NormalizationError(f"message missing for {signatures[0]}")
    meta = raw.get("meta")
    if not isinstance(meta, dict):
        meta = {}

    account_keys = _get_account_keys(message, meta)
    instructions = tuple(
        normalize_instruction(ix, account_keys)
        for ix in message.get("instructions") or []
        if isinstance(ix, dict)
    )
    inner_groups = []
    for group in meta.get("innerInstructions") or []:
        if not isinstance(group, dict):
            continue
        inner_groups.append(
            InnerInstructionGroup(
                index=int(group.get("index", 0)),
                instructions=tuple(
                    normalize_instruction(ix, account_keys)
                    for ix in group.get("instructions") or []
                    if isinstance(ix, dict)
                ),
            )
        )

    ts = raw.get("blockTime")
    if ts is None:
        ts = block_time
    if ts is not None and not isinstance(ts, int):
        try:
            ts = int(ts)
        except (TypeError, ValueError):
            ts = None

    return TransactionRecord(
        signature=signatures[0],
        account_keys=tuple(account_keys),
        instructions=instructions,
        inner_instructions=tuple(inner_groups),
        succeeded=meta.get("err") is None,
        block_time=ts,
        slot=slot,
        pre_token_balances=_normalize_balances(meta.get("preTokenBalances")),
        post_token_balances=_normalize_balances(meta.get("postTokenBalances")),
    )


def transaction_signature(raw: Mapping[str, Any]) -> str | None:
    """Best-effort signature of a raw transaction, for logging before normalization."""
    tx_obj = raw.get("transaction")
    if isinstance(tx_obj, dict):
        sigs = tx_obj.get("signatures") or []
        if sigs and isinstance(sigs[0], str):
            return sigs[0]
    return None


def is_failed(raw: Mapping[str, Any]) -> bool:
    """True when the raw transaction's meta reports an execution error."""
    meta = raw.get("meta")
    return isinstance(meta, dict) and meta.get("err") is not None
