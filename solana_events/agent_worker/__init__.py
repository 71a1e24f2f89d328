"""
Agent worker package: long-running ingestion process.

Wires the slot subscription, block fetcher and event sink together and
coordinates shutdown.
"""

from solana_events.agent_worker.worker import run_pipeline, run_slots, run_worker

__all__ = ["run_pipeline", "run_slots", "run_worker"]
