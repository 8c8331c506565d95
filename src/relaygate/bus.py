from __future__ import annotations

import asyncio
from typing import Any, Dict


class Channel:
    def __init__(self, maxsize: int = 1000):
        self.q: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.maxsize = int(maxsize)
        self.dropped = 0

    @property
    def depth(self) -> int:
        return self.q.qsize()

    async def publish(self, item: Any, block: bool = False, timeout: float | None = None) -> bool:
        # non-blocking by default: a full queue drops the item and counts it
        try:
            if block:
                await asyncio.wait_for(self.q.put(item), timeout=timeout)
            else:
                self.q.put_nowait(item)
            return True
        except (asyncio.QueueFull, asyncio.TimeoutError):
            self.dropped += 1
            return False


class EventBus:
    """Named, bounded channels that hand validated events to downstream consumers.

    Storage, subscription matching and relaying each subscribe to a channel;
    the bus only moves items and keeps depth/drop counters.
    """

    DEFAULT_CHANNELS = [
        "events_out",
        "notices",
    ]

    def __init__(self, default_maxsize: int = 1000):
        self.default_maxsize = int(default_maxsize)
        self.channels: Dict[str, Channel] = {
            name: Channel(maxsize=self.default_maxsize) for name in self.DEFAULT_CHANNELS
        }

    def register_channel(self, name: str, maxsize: int | None = None) -> Channel:
        if maxsize is None:
            maxsize = self.default_maxsize
        ch = Channel(maxsize=int(maxsize))
        self.channels[name] = ch
        return ch

    def subscribe(self, name: str) -> asyncio.Queue:
        ch = self.channels.get(name)
        if ch is None:
            ch = self.register_channel(name)
        return ch.q

    async def publish(self, name: str, item: Any, block: bool = False, timeout: float | None = None) -> bool:
        ch = self.channels.get(name)
        if ch is None:
            ch = self.register_channel(name)
        return await ch.publish(item, block=block, timeout=timeout)

    def metrics(self) -> Dict[str, Dict[str, int]]:
        """Per-channel queue depth, drop count and capacity."""
        return {
            name: {"queue_depth": ch.depth, "dropped": ch.dropped, "maxsize": ch.maxsize}
            for name, ch in self.channels.items()
        }
