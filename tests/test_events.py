"""Tests for the event emitter."""
import pytest

from media_uploader.utils.events import EventEmitter


@pytest.mark.asyncio
async def test_sync_and_async_listeners():
    events = EventEmitter()
    seen = []

    async def async_listener(value):
        seen.append(("async", value))

    events.on("change", lambda value: seen.append(("sync", value)))
    events.on("change", async_listener)
    await events.emit("change", 1)

    assert seen == [("sync", 1), ("async", 1)]


@pytest.mark.asyncio
async def test_failing_listener_does_not_stop_others():
    events = EventEmitter()
    seen = []

    def broken(_):
        raise ValueError("boom")

    events.on("batch_failed", broken)
    events.on("batch_failed", seen.append)
    await events.emit("batch_failed", 2)

    assert seen == [2]


@pytest.mark.asyncio
async def test_off_and_duplicate_subscription():
    events = EventEmitter()
    seen = []
    events.on("change", seen.append)
    events.on("change", seen.append)
    assert events.listener_count("change") == 1

    events.off("change", seen.append)
    await events.emit("change", "x")

    assert seen == []
    assert events.listener_count("change") == 0
    assert events.listener_count("never") == 0
