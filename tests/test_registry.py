#!/usr/bin/env python3
"""
Unit tests for server/chat/registry.py

Tests the uniqueness and consistency guarantees of ClientRegistry:
- Exactly one winner when sessions race for the same name
- Names and sinks are added and removed together
- Removing an unknown name is harmless
"""

import asyncio
import unittest
from unittest.mock import Mock

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from server.chat.registry import ClientRegistry


class TestClientRegistry(unittest.IsolatedAsyncioTestCase):
    """Test cases for ClientRegistry."""

    def setUp(self):
        self.registry = ClientRegistry()

    async def test_register_and_lookup(self):
        sink = Mock()
        self.assertTrue(await self.registry.try_register("alice", sink))
        self.assertIs(await self.registry.lookup_sink("alice"), sink)
        self.assertIn("alice", self.registry)

    async def test_duplicate_name_rejected_without_change(self):
        first, second = Mock(), Mock()
        await self.registry.try_register("alice", first)
        self.assertFalse(await self.registry.try_register("alice", second))
        self.assertIs(await self.registry.lookup_sink("alice"), first)
        self.assertEqual(len(self.registry), 1)

    async def test_names_are_case_sensitive(self):
        self.assertTrue(await self.registry.try_register("alice", Mock()))
        self.assertTrue(await self.registry.try_register("Alice", Mock()))

    async def test_empty_name_rejected(self):
        self.assertFalse(await self.registry.try_register("", Mock()))
        self.assertEqual(len(self.registry), 0)

    async def test_concurrent_registration_has_one_winner(self):
        sinks = [Mock() for _ in range(50)]
        results = await asyncio.gather(*(self.registry.try_register("alice", s) for s in sinks))
        self.assertEqual(results.count(True), 1)
        winner = sinks[results.index(True)]
        self.assertIs(await self.registry.lookup_sink("alice"), winner)

    async def test_remove_drops_name_and_sink(self):
        await self.registry.try_register("alice", Mock())
        self.assertTrue(await self.registry.remove("alice"))
        self.assertIsNone(await self.registry.lookup_sink("alice"))
        self.assertEqual(await self.registry.snapshot_names(), ())
        self.assertEqual(await self.registry.snapshot_sinks(), ())

    async def test_remove_absent_name_is_safe(self):
        self.assertFalse(await self.registry.remove("ghost"))

    async def test_name_reusable_after_remove(self):
        await self.registry.try_register("alice", Mock())
        await self.registry.remove("alice")
        self.assertTrue(await self.registry.try_register("alice", Mock()))

    async def test_snapshot_is_consistent_and_ordered(self):
        sinks = {name: Mock() for name in ("carol", "alice", "bob")}
        for name, sink in sinks.items():
            await self.registry.try_register(name, sink)

        names, snapshot_sinks = await self.registry.snapshot()
        self.assertEqual(names, ("carol", "alice", "bob"))
        self.assertEqual(snapshot_sinks, tuple(sinks[n] for n in names))
        self.assertEqual(await self.registry.snapshot_names(), names)

    async def test_attach_sink_replaces_sink(self):
        old, new = Mock(), Mock()
        await self.registry.try_register("alice", old)
        await self.registry.attach_sink("alice", new)
        self.assertIs(await self.registry.lookup_sink("alice"), new)

    async def test_attach_sink_requires_registration(self):
        with self.assertRaises(KeyError):
            await self.registry.attach_sink("ghost", Mock())


if __name__ == '__main__':
    unittest.main()
