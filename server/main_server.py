#!/usr/bin/env python3
"""
Line Chat Relay Server - Main Server Module

Accepts client connections and runs one ClientSession per connection
against a shared ClientRegistry.
"""

import asyncio
from typing import Optional

from server.chat.registry import ClientRegistry
from server.chat.router import MessageRouter
from server.chat.session import ClientSession
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatRelayServer:
    """Connection acceptor for the chat relay."""

    def __init__(self, config: Optional[ServerConfig] = None, registry: Optional[ClientRegistry] = None):
        self.config = config or ServerConfig()
        self.registry = registry if registry is not None else ClientRegistry()
        self.router = MessageRouter(self.registry)
        self.server: Optional[asyncio.AbstractServer] = None

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        session = ClientSession(reader, writer, self.registry, self.router,
                                write_timeout=self.config.write_timeout)
        await session.run()

    async def open(self) -> asyncio.AbstractServer:
        """Bind the listening socket without blocking."""
        self.server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port,
            limit=self.config.max_line_length
        )
        addr = ', '.join(str(sock.getsockname()) for sock in self.server.sockets)
        logger.info(f"Chat relay listening on {addr}")
        return self.server

    @property
    def port(self) -> Optional[int]:
        """Actual bound port (useful when configured with port 0)."""
        if self.server is None or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[1]

    async def start(self):
        """Start the server and serve until cancelled."""
        if self.server is None:
            await self.open()
        async with self.server:
            await self.server.serve_forever()

    async def close(self):
        """Stop accepting connections."""
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()
            logger.info("Chat relay stopped")
