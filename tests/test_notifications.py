import asyncio

import pytest

from graphdash.notifications import QUEUE_SIZE, NotificationAggregator, make_queue


def test_queue_is_bounded():
    queue = make_queue()
    assert queue.maxsize == QUEUE_SIZE == 100


def test_flush_joins_batch_in_arrival_order(sink):
    queue = asyncio.Queue()
    for index in range(5):
        queue.put_nowait(f"line {index}")
    aggregator = NotificationAggregator(queue, sink)

    assert aggregator.flush() == 5
    assert sink.writes == ["line 0\nline 1\nline 2\nline 3\nline 4"]
    assert queue.empty()


def test_flush_without_items_writes_nothing(sink):
    aggregator = NotificationAggregator(asyncio.Queue(), sink)

    assert aggregator.flush() == 0
    assert sink.writes == []


@pytest.mark.asyncio
async def test_lines_within_one_tick_become_one_write(sink):
    queue = make_queue()
    aggregator = NotificationAggregator(queue, sink, interval=0.05)
    task = asyncio.create_task(aggregator.run())

    for index in range(10):
        await queue.put(f"n{index}")
    await asyncio.sleep(0.12)

    aggregator.stop()
    await asyncio.wait_for(task, timeout=1)

    assert sink.writes == ["\n".join(f"n{index}" for index in range(10))]


@pytest.mark.asyncio
async def test_separate_ticks_give_separate_writes(sink):
    queue = make_queue()
    aggregator = NotificationAggregator(queue, sink, interval=0.05)
    task = asyncio.create_task(aggregator.run())

    await queue.put("first")
    await asyncio.sleep(0.15)
    await queue.put("second")
    await asyncio.sleep(0.15)

    aggregator.stop()
    await asyncio.wait_for(task, timeout=1)

    assert sink.writes == ["first", "second"]


@pytest.mark.asyncio
async def test_stop_flushes_pending_lines(sink):
    queue = make_queue()
    aggregator = NotificationAggregator(queue, sink, interval=10)
    task = asyncio.create_task(aggregator.run())
    await asyncio.sleep(0)

    await queue.put("late")
    aggregator.stop()
    await asyncio.wait_for(task, timeout=1)

    assert sink.writes == ["late"]
