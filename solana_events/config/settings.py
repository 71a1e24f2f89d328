"""
Application settings and environment configuration.

Typed settings (RPC/websocket endpoints, commitment, fetcher tuning) built
from environment variables via config.env, for use by the listener, block
fetcher and worker.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from solana_events.config import env

if TYPE_CHECKING:
    from solana_events.ingestion.block_fetcher import BlockFetcherConfig

DEFAULT_CHUNK_SIZE = 20
DEFAULT_MAX_RETRIES = 5
DEFAULT_RPC_TIMEOUT_SEC = 30.0


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one worker process."""

    rpc_url: str
    ws_url: str
    commitment: str = "confirmed"
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_retries: int = DEFAULT_MAX_RETRIES
    rpc_timeout_sec: float = DEFAULT_RPC_TIMEOUT_SEC
    include_failed_transactions: bool = False

    def to_fetcher_config(self) -> BlockFetcherConfig:
        from solana_events.ingestion.block_fetcher import BlockFetcherConfig

        return BlockFetcherConfig(
            chunk_size=self.chunk_size,
            max_retries=self.max_retries,
            commitment=self.commitment,
            include_failed_transactions=self.include_failed_transactions,
        )

    def masked_rpc_url(self) -> str:
        """RPC URL with any api-key query value hidden, for logging."""
        if "api-key=" in self.rpc_url:
            return self.rpc_url.split("api-key=")[0] + "api-key=***"
        return self.rpc_url


def get_settings() -> Settings:
    """
    Return the current application settings.

    Raises:
        ConfigError: when a numeric or enumerated value is malformed.
    """
    return Settings(
        rpc_url=env.get_rpc_url(),
        ws_url=env.get_ws_url(),
        commitment=env.get_commitment(),
        chunk_size=env.get_int("BLOCK_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, minimum=1),
        max_retries=env.get_int("BLOCK_MAX_RETRIES", DEFAULT_MAX_RETRIES, minimum=0),
        rpc_timeout_sec=env.get_float("RPC_TIMEOUT_SEC", DEFAULT_RPC_TIMEOUT_SEC),
        include_failed_transactions=env.get_bool("INCLUDE_FAILED_TRANSACTIONS"),
    )
