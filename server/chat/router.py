"""
Message router module.

Delivers parsed messages to registry sinks. Delivery is best-effort: an
unknown recipient is skipped and a failing sink never stops the others.
"""

import asyncio
from typing import Iterable

from common.protocol_definitions import (
    Message, BroadcastMessage, DirectedMessage,
    create_message_line, create_client_list_line
)
from server.chat.registry import ClientRegistry
from server.chat.sink import LineSink
from server.utils.logger import logger


class MessageRouter:
    """Broadcast, directed and roster delivery."""

    def __init__(self, registry: ClientRegistry):
        self.registry = registry

    async def route(self, message: Message) -> int:
        """Deliver a message. Returns the number of successful deliveries."""
        if isinstance(message, DirectedMessage):
            return await self.send_directed(message)
        return await self.broadcast(message)

    async def broadcast(self, message: BroadcastMessage) -> int:
        """Send to every registered client, the sender included."""
        sinks = await self.registry.snapshot_sinks()
        delivered = await self._fan_out(sinks, create_message_line(message.sender, message.body))
        logger.log_broadcast(message.sender, message.body, len(sinks))
        return delivered

    async def send_directed(self, message: DirectedMessage) -> int:
        """Send to each listed recipient that is currently registered."""
        sinks = []
        for name in message.recipients:
            sink = await self.registry.lookup_sink(name)
            if sink is None:
                logger.debug(f"Dropping message from {message.sender} to unknown recipient '{name}'")
                continue
            sinks.append(sink)

        delivered = await self._fan_out(sinks, create_message_line(message.sender, message.body))
        logger.log_directed(message.sender, message.recipients, delivered, message.body)
        return delivered

    async def broadcast_roster(self) -> int:
        """Push the current roster to every registered client."""
        names, sinks = await self.registry.snapshot()
        return await self._fan_out(sinks, create_client_list_line(names))

    async def _fan_out(self, sinks: Iterable[LineSink], line: str) -> int:
        results = await asyncio.gather(*(sink.send_line(line) for sink in sinks))
        return sum(1 for ok in results if ok)
