"""
Pytest fixtures for Solana Events tests. Builders for raw jsonParsed getBlock
transaction payloads, shaped like real RPC responses.
"""

from __future__ import annotations

from typing import Any

import base58
import pytest

from solana_events.classifier.programs import (
    DEX_PROGRAM_IDS,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)

TRADER = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
RAYDIUM_PROGRAM_ID = DEX_PROGRAM_IDS["Raydium"]
SIGNATURE = "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"


def token_transfer(
    source: str,
    destination: str,
    amount: str | int,
    *,
    mint: str | None = None,
    authority: str = TRADER,
) -> dict[str, Any]:
    """spl-token transfer (or transferChecked when mint is given) as jsonParsed returns it."""
    info: dict[str, Any] = {"source": source, "destination": destination, "authority": authority}
    if mint is None:
        info["amount"] = amount
        ix_type = "transfer"
    else:
        info["mint"] = mint
        info["tokenAmount"] = {"amount": amount, "decimals": 6, "uiAmountString": "0"}
        ix_type = "transferChecked"
    return {
        "program": "spl-token",
        "programId": TOKEN_PROGRAM_ID,
        "parsed": {"type": ix_type, "info": info},
        "stackHeight": 2,
    }


def system_transfer(source: str, destination: str, lamports: int | str) -> dict[str, Any]:
    return {
        "program": "system",
        "programId": SYSTEM_PROGRAM_ID,
        "parsed": {
            "type": "transfer",
            "info": {"source": source, "destination": destination, "lamports": lamports},
        },
        "stackHeight": None,
    }


def opaque(program_id: str, data: bytes = b"", accounts: list[str] | None = None) -> dict[str, Any]:
    """Undecoded instruction with base58 data, as jsonParsed returns for unknown programs."""
    return {
        "programId": program_id,
        "accounts": accounts or [],
        "data": base58.b58encode(data).decode() if data else "",
        "stackHeight": None,
    }


def token_balance(index: int, mint: str, amount: str = "0", owner: str = TRADER) -> dict[str, Any]:
    return {
        "accountIndex": index,
        "mint": mint,
        "owner": owner,
        "programId": TOKEN_PROGRAM_ID,
        "uiTokenAmount": {"amount": amount, "decimals": 6, "uiAmount": None, "uiAmountString": "0"},
    }


def raw_tx(
    instructions: list[dict[str, Any]],
    *,
    inner: list[list[dict[str, Any]]] | None = None,
    account_keys: list[str] | None = None,
    signature: str = SIGNATURE,
    err: Any = None,
    pre_token_balances: list[dict[str, Any]] | None = None,
    post_token_balances: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """One getBlock transaction entry (jsonParsed, version 0)."""
    keys = account_keys or [TRADER]
    return {
        "transaction": {
            "signatures": [signature],
            "message": {
                "accountKeys": [
                    {"pubkey": k, "signer": i == 0, "writable": True, "source": "transaction"}
                    for i, k in enumerate(keys)
                ],
                "instructions": instructions,
                "recentBlockhash": "EkSnNWid2cvwEVnVx9aBqawnmiCNiDgp3gUdkDPTKN1N",
            },
        },
        "meta": {
            "err": err,
            "fee": 5000,
            "innerInstructions": [
                {"index": i, "instructions": group} for i, group in enumerate(inner or [])
            ],
            "preTokenBalances": pre_token_balances or [],
            "postTokenBalances": post_token_balances or [],
            "logMessages": [],
        },
        "version": 0,
    }


@pytest.fixture
def swap_tx() -> dict[str, Any]:
    """Raydium AMM v4 swapBaseIn (tag 9): trader pays 1_000_000 in, receives 52_000_000 out."""
    return raw_tx(
        [opaque(RAYDIUM_PROGRAM_ID, bytes([9]) + (1_000_000).to_bytes(8, "little"), [TOKEN_PROGRAM_ID, "AmmPool111"])],
        inner=[[
            token_transfer("TraderUsdcAta", "PoolUsdcVault", "1000000"),
            token_transfer("PoolSolVault", "TraderSolAta", "52000000"),
        ]],
        account_keys=[TRADER, "TraderUsdcAta", "PoolUsdcVault", "PoolSolVault", "TraderSolAta"],
    )
