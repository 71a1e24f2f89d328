"""
Static program-identifier tables used by the classifier and parsers.

Supporting a new DEX means adding an entry to DEX_PROGRAM_IDS and, when
its events should be decoded, to SUPPORTED_DEXES with a parser.
"""

from __future__ import annotations

DEX_RAYDIUM = "Raydium"
DEX_RAYDIUM_CAMM = "Raydium_CAMM"
DEX_SERUM = "Serum"
DEX_ORCA = "Orca"
DEX_JUPITER = "Jupiter"
DEX_PUMPFUN = "PumpFun"
DEX_PHOENIX = "Phoenix"

DEX_PROGRAM_IDS: dict[str, str] = {
    DEX_RAYDIUM: "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8",
    DEX_RAYDIUM_CAMM: "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK",
    DEX_SERUM: "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin",
    DEX_ORCA: "whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc",
    DEX_JUPITER: "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4",
    DEX_PUMPFUN: "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P",
    DEX_PHOENIX: "PhoeNiXZ8ByJGLkxNfZRnkUfjvmuYqLR89jjFHGqdXY",
}

# Reverse lookup; program ids are unique
DEX_BY_PROGRAM_ID: dict[str, str] = {pid: name for name, pid in DEX_PROGRAM_IDS.items()}

# DEXes whose swaps/liquidity operations are decoded; others are recognized only
SUPPORTED_DEXES = frozenset({DEX_RAYDIUM})

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

# Program names assigned by the node in jsonParsed instructions
SYSTEM_PROGRAM_NAME = "system"
TOKEN_PROGRAM_NAME = "spl-token"

CONTRACT_CREATION_PROGRAM_IDS = frozenset({
    "BPFLoaderUpgradeab1e11111111111111111111111",
})

MINT_INITIALIZATION_TYPES = frozenset({
    "initializeMint",
    "initializeMint1",
    "initializeMint2",
})

TOKEN_TRANSFER_TYPES = frozenset({"transfer", "transferChecked"})
NATIVE_TRANSFER_TYPE = "transfer"

# Raydium AMM v4 instruction tags (first data byte)
RAYDIUM_ADD_LIQUIDITY_DISCRIMINATOR = 3
RAYDIUM_REMOVE_LIQUIDITY_DISCRIMINATOR = 4
