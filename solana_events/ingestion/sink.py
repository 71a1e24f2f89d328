"""
Downstream event sinks.

A sink is any callable taking one DomainEvent; it may be sync or return an
awaitable. LoggingSink writes each event as a structured log line and is
the worker's default consumer.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable

from solana_events.events_logging import get_logger
from solana_events.parsers.events import DomainEvent

logger = get_logger(__name__)

EventSink = Callable[[DomainEvent], Awaitable[None] | None]


class LoggingSink:
    """Log every event as `event_extracted` with its fields."""

    def __init__(self, *, level: str = "info") -> None:
        self._log = getattr(logger, level)
        self.count = 0

    def __call__(self, event: DomainEvent) -> None:
        self.count += 1
        fields = event.to_dict()
        # block time, kept apart from the log record timestamp
        fields["block_time"] = fields.pop("timestamp")
        self._log("event_extracted", **fields)


async def emit(sink: EventSink, event: DomainEvent) -> None:
    """Hand an event to a sync or async sink."""
    result: Any = sink(event)
    if inspect.isawaitable(result):
        await result
