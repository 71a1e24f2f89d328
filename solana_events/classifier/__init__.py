"""
Transaction classifier package.

Static program-id tables and the predicates that map a TransactionRecord
to DEX interaction, transfer, token creation or contract creation.
"""

from solana_events.classifier.detector import (
    Classification,
    DexMatch,
    classify,
    match_contract_creation,
    match_dex,
    match_token_creation,
    match_transfer,
)

__all__ = [
    "Classification",
    "DexMatch",
    "classify",
    "match_contract_creation",
    "match_dex",
    "match_token_creation",
    "match_transfer",
]
