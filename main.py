"""
Main entrypoint: slot-driven ingestion worker.

Without arguments, subscribes to new slots and runs until SIGINT/SIGTERM.
With --slot (repeatable), fetches and processes just those slots and exits.

Env: SOLANA_RPC_URL, SOLANA_WS_URL, SOLANA_COMMITMENT, BLOCK_CHUNK_SIZE,
BLOCK_MAX_RETRIES, RPC_TIMEOUT_SEC, INCLUDE_FAILED_TRANSACTIONS, LOG_LEVEL, LOG_FORMAT.
"""

import argparse
import asyncio
import sys

# Configure structured JSON logging before other imports that may log
from solana_events.events_logging import get_logger

logger = get_logger("main")


def main() -> None:
    parser = argparse.ArgumentParser(description="Solana block ingestion and event extraction")
    parser.add_argument(
        "--slot",
        type=int,
        action="append",
        default=[],
        help="Process this slot once and exit (repeatable)",
    )
    args = parser.parse_args()

    from solana_events.agent_worker import run_slots, run_worker
    from solana_events.config import get_settings
    from solana_events.core.exceptions import ConfigError

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.error("main_config_error", error=str(e))
        sys.exit(1)

    if args.slot:
        outcomes = asyncio.run(run_slots(settings, args.slot))
        for outcome in outcomes:
            logger.info(
                "main_slot_done",
                slot=outcome.slot,
                status=outcome.status,
                event_count=outcome.event_count,
                error_count=outcome.error_count,
            )
        return

    run_worker(settings)


if __name__ == "__main__":
    main()
