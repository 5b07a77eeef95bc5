from __future__ import annotations

import asyncio
import logging
from typing import List

from graphdash.sink import DisplaySink

QUEUE_SIZE = 100
TICK_INTERVAL = 0.1


def make_queue() -> asyncio.Queue[str]:
    return asyncio.Queue(maxsize=QUEUE_SIZE)


class NotificationAggregator:
    """Moves queued webhook lines into the webhook panel once per tick.

    Whatever arrived since the previous tick is joined and written in a
    single call, so a burst of notifications costs one redraw.
    """

    def __init__(
        self,
        queue: asyncio.Queue[str],
        sink: DisplaySink,
        interval: float = TICK_INTERVAL,
    ) -> None:
        self.queue = queue
        self.sink = sink
        self.interval = interval
        self._stop_event = asyncio.Event()
        self._logger = logging.getLogger("graphdash.notifications")

    def flush(self) -> int:
        batch: List[str] = []
        while True:
            try:
                batch.append(self.queue.get_nowait())
            except asyncio.QueueEmpty:
                break
            self.queue.task_done()
        if batch:
            self.sink.write("\n".join(batch))
            self._logger.debug("Flushed %s webhook line(s)", len(batch))
        return len(batch)

    async def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
            self.flush()

    def stop(self) -> None:
        self._stop_event.set()
