"""
Solana Events: block ingestion and event extraction pipeline.

Listens for new Solana slots, fetches each block, classifies its
transactions and decodes swaps, liquidity operations, transfers and
token/program creations into structured events for downstream consumers.
"""

__version__ = "0.1.0"
