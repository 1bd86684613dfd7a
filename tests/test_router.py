#!/usr/bin/env python3
"""
Unit tests for server/chat/router.py and server/chat/sink.py

Tests delivery semantics:
- Broadcast reaches every registered client, sender included
- Directed messages skip unknown recipients and repeat for duplicates
- A failing recipient does not stop delivery to the others
- Concurrent writers never interleave partial lines on one sink
"""

import asyncio
import unittest
from unittest.mock import Mock

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.protocol_definitions import BroadcastMessage, DirectedMessage
from server.chat.registry import ClientRegistry
from server.chat.router import MessageRouter
from server.chat.sink import LineSink


class RecordingSink:
    """Sink that keeps the lines it was given."""

    def __init__(self, fail: bool = False):
        self.lines = []
        self.fail = fail

    async def send_line(self, line: str) -> bool:
        if self.fail:
            return False
        self.lines.append(line)
        return True


class FakeWriter:
    """Minimal StreamWriter stand-in that yields inside drain()."""

    def __init__(self, drain_error: Exception = None, drain_delay: float = 0):
        self.chunks = []
        self.drain_error = drain_error
        self.drain_delay = drain_delay
        self.closing = False
        self.transport = Mock()

    def get_extra_info(self, name):
        return ('127.0.0.1', 50000)

    def write(self, data: bytes):
        self.chunks.append(data)

    async def drain(self):
        await asyncio.sleep(self.drain_delay)
        if self.drain_error:
            raise self.drain_error

    def is_closing(self):
        return self.closing

    def close(self):
        self.closing = True

    async def wait_closed(self):
        return None


class TestMessageRouter(unittest.IsolatedAsyncioTestCase):
    """Test cases for MessageRouter."""

    async def asyncSetUp(self):
        self.registry = ClientRegistry()
        self.router = MessageRouter(self.registry)
        self.sinks = {}
        for name in ("alice", "bob", "carol"):
            self.sinks[name] = RecordingSink()
            await self.registry.try_register(name, self.sinks[name])

    async def test_broadcast_includes_sender(self):
        delivered = await self.router.route(BroadcastMessage("alice", "hi"))
        self.assertEqual(delivered, 3)
        for sink in self.sinks.values():
            self.assertEqual(sink.lines, ["MESSAGE alice: hi"])

    async def test_directed_skips_unknown_recipient(self):
        delivered = await self.router.route(DirectedMessage("carol", ("alice", "zed"), "hello"))
        self.assertEqual(delivered, 1)
        self.assertEqual(self.sinks["alice"].lines, ["MESSAGE carol: hello"])
        self.assertEqual(self.sinks["bob"].lines, [])
        self.assertEqual(self.sinks["carol"].lines, [])

    async def test_directed_duplicate_recipient_receives_twice(self):
        await self.router.route(DirectedMessage("bob", ("alice", "alice"), "x"))
        self.assertEqual(self.sinks["alice"].lines, ["MESSAGE bob: x", "MESSAGE bob: x"])

    async def test_directed_with_no_known_recipient(self):
        delivered = await self.router.route(DirectedMessage("bob", ("nobody",), "x"))
        self.assertEqual(delivered, 0)

    async def test_failing_sink_does_not_stop_broadcast(self):
        broken = RecordingSink(fail=True)
        await self.registry.try_register("dave", broken)

        delivered = await self.router.route(BroadcastMessage("bob", "still here"))

        self.assertEqual(delivered, 3)
        for name in ("alice", "bob", "carol"):
            self.assertEqual(self.sinks[name].lines, ["MESSAGE bob: still here"])

    async def test_roster_reflects_registry(self):
        await self.registry.remove("bob")
        await self.router.broadcast_roster()
        self.assertEqual(self.sinks["alice"].lines, ["CLIENTLISTalice,carol,"])
        self.assertEqual(self.sinks["carol"].lines, ["CLIENTLISTalice,carol,"])
        self.assertEqual(self.sinks["bob"].lines, [])


class TestLineSink(unittest.IsolatedAsyncioTestCase):
    """Test cases for LineSink."""

    async def test_concurrent_writes_stay_whole_lines(self):
        writer = FakeWriter()
        sink = LineSink(writer)

        lines = [f"MESSAGE user{i}: body {i}" for i in range(20)]
        results = await asyncio.gather(*(sink.send_line(line) for line in lines))

        self.assertTrue(all(results))
        self.assertEqual(len(writer.chunks), 20)
        self.assertEqual(sorted(writer.chunks), sorted((line + "\n").encode() for line in lines))

    async def test_write_failure_aborts_connection(self):
        writer = FakeWriter(drain_error=ConnectionResetError("gone"))
        sink = LineSink(writer)
        self.assertFalse(await sink.send_line("MESSAGE a: b"))
        writer.transport.abort.assert_called_once()
        self.assertFalse(await sink.send_line("MESSAGE a: c"))

    async def test_write_timeout_aborts_instead_of_flushing(self):
        writer = FakeWriter(drain_delay=5)
        sink = LineSink(writer, write_timeout=0.05)

        self.assertFalse(await sink.send_line("MESSAGE a: b"))

        writer.transport.abort.assert_called_once()
        self.assertFalse(writer.closing)

    async def test_closed_sink_refuses_lines(self):
        writer = FakeWriter()
        sink = LineSink(writer)
        await sink.close()
        self.assertFalse(await sink.send_line("MESSAGE a: b"))
        self.assertEqual(writer.chunks, [])

    async def test_close_aborts_when_peer_never_drains(self):
        writer = FakeWriter()
        writer.wait_closed = lambda: asyncio.sleep(5)
        sink = LineSink(writer, write_timeout=0.05)

        await asyncio.wait_for(sink.close(), 2)

        self.assertTrue(writer.closing)
        writer.transport.abort.assert_called_once()


if __name__ == '__main__':
    unittest.main()
