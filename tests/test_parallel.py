"""Tests for the bounded worker pool."""
import asyncio

import pytest

from media_uploader.orchestrator.parallel import get_parallel_count, run_bounded


def test_parallel_count_calculation():
    MB = 1024 * 1024
    assert get_parallel_count(100 * 1024) == 8
    assert get_parallel_count(1 * MB) == 4
    assert get_parallel_count(5 * MB) == 2


@pytest.mark.asyncio
async def test_results_are_index_aligned():
    async def worker(delay):
        await asyncio.sleep(delay)
        return delay

    delays = [0.03, 0.0, 0.02, 0.01]
    assert await run_bounded(delays, worker, concurrency=4) == delays


@pytest.mark.asyncio
async def test_concurrency_is_capped():
    in_flight = 0
    peak = 0

    async def worker(item):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return item * 2

    results = await run_bounded(list(range(10)), worker, concurrency=3)

    assert results == [i * 2 for i in range(10)]
    assert peak == 3


@pytest.mark.asyncio
async def test_unbounded_when_concurrency_unset():
    in_flight = 0
    peak = 0

    async def worker(item):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return item

    await run_bounded(list(range(6)), worker, concurrency=None)
    assert peak == 6


@pytest.mark.asyncio
async def test_empty_items():
    async def worker(item):
        return item

    assert await run_bounded([], worker, concurrency=2) == []
