"""
Tests for the block fetcher: single in-flight fetch with FIFO backlog,
exponential retry, empty blocks, failed-transaction filtering and chunked
fan-out.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from conftest import RAYDIUM_PROGRAM_ID, TRADER, opaque, raw_tx, system_transfer, token_transfer
from solana_events.core.exceptions import RpcResponseError, RpcTransportError
from solana_events.ingestion.block_fetcher import (
    STATUS_EMPTY,
    STATUS_FAILED,
    STATUS_PROCESSED,
    BlockFetcher,
    BlockFetcherConfig,
)
from solana_events.ingestion.processor import TransactionProcessor


def _tx(n: int, *, err: Any = None) -> dict[str, Any]:
    return raw_tx([system_transfer(TRADER, f"Dest{n}", n + 1)], signature=f"sig{n}", err=err)


class FakeRpc:
    """get_block stand-in: returns blocks by slot, raising any queued errors first."""

    def __init__(self, blocks: dict[int, Any] | None = None, errors: list[Exception] | None = None):
        self.blocks = blocks or {}
        self.errors = list(errors or [])
        self.calls: list[tuple[int, dict[str, Any]]] = []
        self.gates: dict[int, asyncio.Event] = {}
        self.active = 0
        self.max_active = 0

    async def get_block(self, slot: int, **kwargs: Any) -> Any:
        self.calls.append((slot, kwargs))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            gate = self.gates.get(slot)
            if gate is not None:
                await gate.wait()
            if self.errors:
                raise self.errors.pop(0)
            return self.blocks.get(slot)
        finally:
            self.active -= 1


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _fetcher(rpc, sink=None, **cfg) -> tuple[BlockFetcher, list, RecordingSleep]:
    events: list = []
    sleep = RecordingSleep()
    cfg.setdefault("post_block_delay_sec", 0)
    processor = TransactionProcessor(sink or events.append)
    return BlockFetcher(rpc, processor, BlockFetcherConfig(**cfg), sleep=sleep), events, sleep


def test_retry_exhaustion_backoff_schedule():
    """Every attempt fails: 1 + 5 calls, sleeping 2, 4, 8, 16, 32 seconds (62 total)."""
    rpc = FakeRpc(errors=[RpcTransportError("timeout")] * 10)
    fetcher, events, sleep = _fetcher(rpc)

    outcome = asyncio.run(fetcher.process_slot(100))

    assert outcome.status == STATUS_FAILED
    assert outcome.attempts == 6
    assert len(rpc.calls) == 6
    assert sleep.delays == [2, 4, 8, 16, 32]
    assert sum(sleep.delays) == 62
    assert events == []


def test_retry_then_success():
    rpc = FakeRpc(
        blocks={7: {"blockTime": 1_700_000_000, "transactions": [_tx(1)]}},
        errors=[RpcResponseError("rate limited", code=429), RpcTransportError("reset")],
    )
    fetcher, events, sleep = _fetcher(rpc)

    outcome = asyncio.run(fetcher.process_slot(7))

    assert outcome.status == STATUS_PROCESSED
    assert outcome.attempts == 3
    assert sleep.delays == [2, 4]
    assert len(events) == 1
    assert events[0].timestamp == 1_700_000_000


def test_get_block_options_from_config():
    rpc = FakeRpc(blocks={1: {"transactions": []}})
    fetcher, _, _ = _fetcher(rpc, commitment="finalized")
    asyncio.run(fetcher.process_slot(1))
    assert rpc.calls[0][1] == {
        "commitment": "finalized",
        "max_supported_transaction_version": 0,
        "transaction_details": "full",
    }


def test_missing_block_is_empty_not_error():
    rpc = FakeRpc()
    fetcher, events, sleep = _fetcher(rpc)
    outcome = asyncio.run(fetcher.process_slot(55))
    assert outcome.status == STATUS_EMPTY
    assert len(rpc.calls) == 1
    assert sleep.delays == []
    assert events == []


def test_block_with_no_transactions_yields_no_events():
    rpc = FakeRpc(blocks={3: {"blockTime": 1, "transactions": []}})
    fetcher, events, _ = _fetcher(rpc)
    outcome = asyncio.run(fetcher.process_slot(3))
    assert outcome.status == STATUS_PROCESSED
    assert outcome.transaction_count == 0
    assert events == []


def test_failed_transactions_skipped_by_default():
    block = {"transactions": [_tx(1), _tx(2, err={"InstructionError": [0, "Custom"]}), _tx(3)]}
    fetcher, events, _ = _fetcher(FakeRpc(blocks={9: block}))
    outcome = asyncio.run(fetcher.process_slot(9))
    assert outcome.transaction_count == 2
    assert [e.signature for e in events] == ["sig1", "sig3"]


def test_failed_transactions_included_when_enabled():
    block = {"transactions": [_tx(1), _tx(2, err={"InstructionError": [0, "Custom"]})]}
    fetcher, events, _ = _fetcher(FakeRpc(blocks={9: block}), include_failed_transactions=True)
    asyncio.run(fetcher.process_slot(9))
    assert sorted(e.signature for e in events) == ["sig1", "sig2"]


def test_transaction_error_does_not_abort_block():
    """A malformed transaction and a raising sink are isolated per transaction."""
    block = {"transactions": [_tx(1), {"transaction": {}}, _tx(2)]}

    def sink(event):
        if event.signature == "sig2":
            raise RuntimeError("sink down")
        received.append(event)

    received: list = []
    fetcher, _, _ = _fetcher(FakeRpc(blocks={4: block}), sink=sink)
    outcome = asyncio.run(fetcher.process_slot(4))
    assert outcome.status == STATUS_PROCESSED
    assert outcome.error_count == 2
    assert outcome.event_count == 1
    assert [e.signature for e in received] == ["sig1"]


def test_chunks_are_sequential_and_concurrent_inside():
    log: list[tuple[str, str]] = []

    class TracingProcessor:
        async def process(self, raw, *, block_time=None, slot=None):
            sig = raw["transaction"]["signatures"][0]
            log.append(("start", sig))
            await asyncio.sleep(0)
            log.append(("end", sig))
            return None

    block = {"transactions": [_tx(i) for i in range(5)]}
    fetcher = BlockFetcher(
        FakeRpc(blocks={1: block}),
        TracingProcessor(),
        BlockFetcherConfig(chunk_size=2, post_block_delay_sec=0),
    )
    outcome = asyncio.run(fetcher.process_slot(1))
    assert outcome.transaction_count == 5

    chunks = [["sig0", "sig1"], ["sig2", "sig3"], ["sig4"]]
    pos = {entry: i for i, entry in enumerate(log)}
    for current, following in zip(chunks, chunks[1:]):
        last_end = max(pos[("end", s)] for s in current)
        first_start = min(pos[("start", s)] for s in following)
        assert last_end < first_start
    # both members of the first chunk start before either finishes
    assert pos[("start", "sig1")] < pos[("end", "sig0")]


def test_large_amounts_pass_through_unchanged():
    big = "340282366920938463463374607431768211455"
    tx = raw_tx(
        [opaque(RAYDIUM_PROGRAM_ID, bytes([9]))],
        inner=[[token_transfer("A", "B", big), token_transfer("C", "D", "12345678901234567890")]],
    )
    fetcher, events, _ = _fetcher(FakeRpc(blocks={2: {"transactions": [tx]}}))
    asyncio.run(fetcher.process_slot(2))
    assert events[0].amount_in == big
    assert events[0].amount_out == "12345678901234567890"


def test_post_block_delay_applied():
    fetcher, _, sleep = _fetcher(FakeRpc(blocks={2: {"transactions": []}}), post_block_delay_sec=0.1)
    asyncio.run(fetcher.process_slot(2))
    assert sleep.delays == [0.1]


def test_single_in_flight_and_fifo_backlog():
    """Slots arriving while busy are fetched one at a time in arrival order."""
    rpc = FakeRpc(blocks={s: {"transactions": []} for s in (10, 11, 12, 13)})

    async def scenario():
        gate = asyncio.Event()
        rpc.gates[10] = gate
        fetcher, _, _ = _fetcher(rpc)
        fetcher.enqueue_slot(10)
        await asyncio.sleep(0)
        for slot in (12, 11, 13):
            fetcher.enqueue_slot(slot)
        assert fetcher.in_flight
        assert fetcher.backlog_size == 3
        gate.set()
        await fetcher.wait_idle()
        return fetcher

    fetcher = asyncio.run(scenario())
    assert [slot for slot, _ in rpc.calls] == [10, 12, 11, 13]
    assert rpc.max_active == 1
    assert not fetcher.in_flight
    assert fetcher.backlog_size == 0


def test_duplicate_slots_coalesced():
    rpc = FakeRpc(blocks={1: {"transactions": []}, 2: {"transactions": []}})

    async def scenario():
        gate = asyncio.Event()
        rpc.gates[1] = gate
        fetcher, _, _ = _fetcher(rpc)
        fetcher.enqueue_slot(1)
        fetcher.enqueue_slot(1)
        fetcher.enqueue_slot(2)
        fetcher.enqueue_slot(2)
        gate.set()
        await fetcher.wait_idle()

    asyncio.run(scenario())
    assert [slot for slot, _ in rpc.calls] == [1, 2]


def test_backlog_continues_after_exhausted_slot():
    rpc = FakeRpc(blocks={2: {"transactions": [_tx(1)]}}, errors=[RpcTransportError("down")] * 6)

    async def scenario():
        fetcher, events, sleep = _fetcher(rpc)
        fetcher.enqueue_slot(1)
        fetcher.enqueue_slot(2)
        await fetcher.wait_idle()
        return events, sleep

    events, sleep = asyncio.run(scenario())
    assert [slot for slot, _ in rpc.calls] == [1] * 6 + [2]
    assert sleep.delays == [2, 4, 8, 16, 32]
    assert len(events) == 1


def test_enqueue_after_idle_starts_new_fetch():
    rpc = FakeRpc(blocks={1: {"transactions": []}, 2: {"transactions": []}})

    async def scenario():
        fetcher, _, _ = _fetcher(rpc)
        fetcher.enqueue_slot(1)
        await fetcher.wait_idle()
        fetcher.enqueue_slot(2)
        await fetcher.wait_idle()
        await fetcher.close()

    asyncio.run(scenario())
    assert [slot for slot, _ in rpc.calls] == [1, 2]


def test_close_discards_backlog():
    rpc = FakeRpc(blocks={1: {"transactions": []}})

    async def scenario():
        rpc.gates[1] = asyncio.Event()
        fetcher, _, _ = _fetcher(rpc)
        fetcher.enqueue_slot(1)
        fetcher.enqueue_slot(2)
        await asyncio.sleep(0)
        await fetcher.close()
        return fetcher

    fetcher = asyncio.run(scenario())
    assert fetcher.backlog_size == 0
    assert not fetcher.in_flight
    assert [slot for slot, _ in rpc.calls] == [1]


@pytest.mark.parametrize("kwargs", [{"chunk_size": 0}, {"max_retries": -1}])
def test_config_validation(kwargs):
    with pytest.raises(ValueError):
        BlockFetcherConfig(**kwargs)
