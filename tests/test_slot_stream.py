"""
Tests for slotSubscribe message handling (no network).
"""

from __future__ import annotations

import asyncio

import pytest

from solana_events.solana_listener.slot_stream import SlotSubscriber, parse_slot_notification

WS_URL = "wss://rpc.example.test"


def _notification(slot):
    return {
        "jsonrpc": "2.0",
        "method": "slotNotification",
        "params": {"result": {"parent": 74, "root": 43, "slot": slot}, "subscription": 0},
    }


def test_parse_slot_notification():
    assert parse_slot_notification(_notification(75)) == 75


@pytest.mark.parametrize(
    "msg",
    [
        None,
        "slotNotification",
        {"jsonrpc": "2.0", "result": 0, "id": 1},
        {"method": "accountNotification", "params": {"result": {"slot": 5}}},
        _notification(-1),
        _notification("75"),
        _notification(True),
        {"method": "slotNotification", "params": {}},
    ],
)
def test_parse_slot_notification_rejects(msg):
    assert parse_slot_notification(msg) is None


def test_handle_message_ack_then_slots_sync_callback():
    seen = []
    sub = SlotSubscriber(WS_URL, seen.append)

    async def feed():
        await sub.handle_message({"jsonrpc": "2.0", "result": 23784, "id": 1})
        for slot in (100, 101, 101, 102):
            await sub.handle_message(_notification(slot))

    asyncio.run(feed())
    assert sub.subscription_id == 23784
    # forwarded as received; duplicates are the consumer's concern
    assert seen == [100, 101, 101, 102]


def test_handle_message_async_callback():
    seen = []

    async def on_slot(slot):
        await asyncio.sleep(0)
        seen.append(slot)

    sub = SlotSubscriber(WS_URL, on_slot)
    asyncio.run(sub.handle_message(_notification(9)))
    assert seen == [9]


def test_handle_message_error_and_callback_failure_do_not_raise():
    def on_slot(slot):
        raise RuntimeError("consumer broke")

    sub = SlotSubscriber(WS_URL, on_slot)

    async def feed():
        await sub.handle_message({"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}})
        await sub.handle_message(_notification(3))
        await sub.handle_message(["not", "a", "dict"])

    asyncio.run(feed())
    assert sub.subscription_id is None


def test_stop_before_run_exits_immediately():
    sub = SlotSubscriber(WS_URL, lambda slot: None)
    sub.stop()
    asyncio.run(sub.run())


def test_empty_url_rejected():
    with pytest.raises(ValueError):
        SlotSubscriber(" ", lambda slot: None)
