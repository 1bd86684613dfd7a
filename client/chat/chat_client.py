"""
Chat client module.

This module handles client-side chat protocol functionality: answering the
name prompt, sending broadcast and directed messages, and dispatching
server lines to the UI.
"""

import asyncio
from typing import Callable, List, Optional, Sequence

from common.constants import ENCODING, LINE_TERMINATOR, ServerCommands
from common.protocol_definitions import (
    parse_server_line, parse_client_list, create_directed_line,
    strip_line_terminator
)
from client.utils.config import ClientConfig
from client.utils.logger import logger


class ChatClient:
    """Client-side chat functionality."""

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

        self.name_requests = 0
        self.pending_name: Optional[str] = None
        self.username: Optional[str] = None
        self.name_accepted = False
        self.roster: List[str] = []

        # Callbacks
        self.name_handler: Optional[Callable[[bool], Optional[str]]] = None
        self.accepted_handler: Optional[Callable[[str], None]] = None
        self.message_handler: Optional[Callable[[str], None]] = None
        self.roster_handler: Optional[Callable[[List[str]], None]] = None

    def set_name_handler(self, handler: Callable[[bool], Optional[str]]):
        """
        Set the handler asked for a screen name.

        It receives True when the previous name was rejected. Returning None
        means the name will be supplied later through submit_name().
        """
        self.name_handler = handler

    def set_accepted_handler(self, handler: Callable[[str], None]):
        self.accepted_handler = handler

    def set_message_handler(self, handler: Callable[[str], None]):
        """Set the handler for chat text ("sender: body")."""
        self.message_handler = handler

    def set_roster_handler(self, handler: Callable[[List[str]], None]):
        self.roster_handler = handler

    async def connect(self, retry_count: Optional[int] = None, base_delay: Optional[float] = None) -> bool:
        """Establish connection to the server with retry logic and exponential backoff."""
        retry_count = retry_count if retry_count is not None else self.config.retry_attempts
        base_delay = base_delay if base_delay is not None else self.config.retry_delay_base
        attempt = 0

        while attempt < retry_count:
            try:
                self.reader, self.writer = await asyncio.wait_for(
                    asyncio.open_connection(self.config.host, self.config.port),
                    timeout=self.config.connect_timeout
                )
                logger.log_connection(self.config.host, self.config.port, True)
                return True
            except (OSError, asyncio.TimeoutError) as e:
                attempt += 1
                logger.log_connection(self.config.host, self.config.port, False)
                logger.log_error("connection", e)

                if attempt < retry_count:
                    delay = base_delay * (2 ** (attempt - 1))  # Exponential backoff
                    logger.info(f"Retrying connection in {delay}s (attempt {attempt}/{retry_count})...")
                    await asyncio.sleep(delay)

        logger.error(f"Failed to connect after {retry_count} attempts")
        return False

    async def send_line(self, line: str) -> bool:
        """Send one line to the server."""
        if not self.writer:
            logger.error("Not connected to server")
            return False

        try:
            self.writer.write((line + LINE_TERMINATOR).encode(ENCODING))
            await self.writer.drain()
            return True
        except (ConnectionError, OSError) as e:
            logger.log_error("send", e)
            return False

    async def submit_name(self, name: str) -> bool:
        """Propose a screen name."""
        self.pending_name = name
        return await self.send_line(name)

    async def send_broadcast(self, text: str) -> bool:
        """Send a message to everyone."""
        return await self.send_line(text)

    async def send_directed(self, recipients: Sequence[str], text: str) -> bool:
        """Send a message to the listed recipients only."""
        if not recipients:
            return False
        return await self.send_line(create_directed_line(recipients, text))

    async def handle_line(self, line: str):
        """Dispatch one server line."""
        command, payload = parse_server_line(line)

        if command == ServerCommands.SUBMIT_NAME:
            await self._handle_submit_name()
        elif command == ServerCommands.NAME_ACCEPTED:
            self.name_accepted = True
            self.username = self.pending_name
            logger.log_name_accepted(self.username)
            if self.accepted_handler:
                self.accepted_handler(self.username)
        elif command == ServerCommands.MESSAGE:
            if self.message_handler:
                self.message_handler(payload)
        elif command == ServerCommands.CLIENT_LIST:
            self.roster = parse_client_list(payload)
            logger.log_roster(self.roster)
            if self.roster_handler:
                self.roster_handler(self.roster)
        else:
            logger.debug(f"Ignoring unknown server line: {line!r}")

    async def _handle_submit_name(self):
        self.name_requests += 1
        rejected = self.name_requests > 1

        name = None
        if self.config.username and not rejected:
            name = self.config.username
        elif self.name_handler:
            name = self.name_handler(rejected)

        if name is not None:
            await self.submit_name(name)
        elif self.name_handler is None:
            if self.pending_name is None:
                logger.warning("Server asked for a screen name but none is configured")
            else:
                logger.warning(f"Screen name '{self.pending_name}' was rejected and no other name is available")

    async def listen(self):
        """Read server lines until the connection closes."""
        while self.reader is not None:
            data = await self.reader.readline()
            if not data:
                logger.info("Connection closed by server")
                break
            await self.handle_line(strip_line_terminator(data.decode(ENCODING, errors='replace')))

    async def close(self):
        """Close the connection."""
        if self.writer is None:
            return
        writer, self.writer = self.writer, None
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Error while closing connection: {e}")
