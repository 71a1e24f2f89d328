"""
Configuration management for the Solana Events worker.

Loads and validates settings from environment variables and an optional
.env file. Exposes a single source of truth for all service configuration.
"""

from solana_events.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
