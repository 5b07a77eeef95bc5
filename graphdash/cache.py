from __future__ import annotations

import asyncio
import time
from typing import Callable, Dict, Iterable, Optional

from graphdash.models import Room

ROOM_CACHE_TTL = 300.0


class RoomCache:
    def __init__(
        self,
        ttl: float = ROOM_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.rooms: Dict[str, Room] = {}
        self.last_update: float | None = None
        self.lock = asyncio.Lock()
        self._clock = clock

    def is_fresh(self) -> bool:
        if self.last_update is None:
            return False
        return self._clock() - self.last_update < self.ttl

    def get(self, email: str) -> Optional[Room]:
        if not self.is_fresh():
            return None
        return self.rooms.get(email.strip().lower())

    def replace(self, rooms: Iterable[Room]) -> None:
        self.rooms = {
            room.email_address.lower(): room for room in rooms if room.email_address
        }
        self.last_update = self._clock()
