"""
Structured logging for Solana Events.

JSON logs with timestamp, event_type, slot and signature fields.
Use get_logger() in all modules for aggregation-friendly output.
"""

from solana_events.events_logging.logger import bind_transaction, configure_logging, get_logger

__all__ = ["bind_transaction", "configure_logging", "get_logger"]
