"""
Client registry.

The only shared mutable state of the server: registered screen names and
the sink of each registered client, kept in one mapping so a name can never
exist without its sink. All access goes through one asyncio.Lock; the lock
is never held across socket I/O.
"""

import asyncio
from typing import Dict, Optional, Tuple

from server.chat.sink import LineSink


class ClientRegistry:
    """Registered names and their outbound sinks."""

    def __init__(self):
        self._sinks: Dict[str, LineSink] = {}  # name -> sink, in registration order
        self.lock = asyncio.Lock()

    async def try_register(self, name: str, sink: LineSink) -> bool:
        """
        Register name with its sink if the name is non-empty and free.

        Check and insert happen under one lock acquisition, so of several
        sessions racing for the same name exactly one succeeds.
        """
        if not name:
            return False
        async with self.lock:
            if name in self._sinks:
                return False
            self._sinks[name] = sink
            return True

    async def attach_sink(self, name: str, sink: LineSink):
        """Replace the sink of an already registered name."""
        async with self.lock:
            if name not in self._sinks:
                raise KeyError(name)
            self._sinks[name] = sink

    async def remove(self, name: str) -> bool:
        """Remove name and sink together. Absent names are ignored."""
        async with self.lock:
            return self._sinks.pop(name, None) is not None

    async def lookup_sink(self, name: str) -> Optional[LineSink]:
        async with self.lock:
            return self._sinks.get(name)

    async def snapshot_names(self) -> Tuple[str, ...]:
        async with self.lock:
            return tuple(self._sinks)

    async def snapshot_sinks(self) -> Tuple[LineSink, ...]:
        async with self.lock:
            return tuple(self._sinks.values())

    async def snapshot(self) -> Tuple[Tuple[str, ...], Tuple[LineSink, ...]]:
        """Names and sinks from the same point in time."""
        async with self.lock:
            return tuple(self._sinks), tuple(self._sinks.values())

    def __contains__(self, name: str) -> bool:
        return name in self._sinks

    def __len__(self) -> int:
        return len(self._sinks)
