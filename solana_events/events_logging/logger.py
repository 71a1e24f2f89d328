"""
Structured logging for the ingestion pipeline.

Every record is one line with event_type, level, timestamp and logger, plus
the keyword fields of the call (slot, signature, attempt, ...). JSON by
default (LOG_FORMAT=json); LOG_FORMAT=console gives readable local output.
LOG_LEVEL sets the threshold.

Imports nothing from solana_events so any module can import it first.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

# stdlib loggers of the HTTP/websocket libraries; httpx logs every request at INFO
_NOISY_LIBRARIES = ("httpx", "httpcore", "websockets")


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Level name; defaults to LOG_LEVEL, then INFO.
        fmt: "json" or "console"; defaults to LOG_FORMAT, then json.
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    level_value = getattr(logging, level_name, logging.INFO)
    fmt = (fmt or os.getenv("LOG_FORMAT") or "json").strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
    ]
    if fmt == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(_normalize_event)
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(stream=sys.stdout, level=level_value, format="%(levelname)s %(name)s %(message)s")
    for name in _NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(max(level_value, logging.WARNING))


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("block_processed", slot=312_000_000, event_count=4)

    Output (JSON): {"slot": 312000000, "event_count": 4, "level": "info",
    "timestamp": "...", "logger": "module.name", "event_type": "block_processed"}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_transaction(logger: structlog.BoundLogger, slot: int | None, signature: str | None) -> structlog.BoundLogger:
    """Logger with slot and signature bound, for per-transaction log lines."""
    return logger.bind(slot=slot, signature=signature)
