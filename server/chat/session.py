"""
Client session module.

One ClientSession drives one connection through the naming handshake,
the active message loop and teardown.
"""

import asyncio
from enum import Enum
from typing import Optional

from common.constants import ENCODING, WRITE_TIMEOUT
from common.protocol_definitions import (
    parse_client_line, create_submit_name_line, create_name_accepted_line,
    strip_line_terminator
)
from server.chat.registry import ClientRegistry
from server.chat.router import MessageRouter
from server.chat.sink import LineSink
from server.utils.logger import logger


class SessionState(Enum):
    CONNECTING = 'connecting'
    NAMING = 'naming'
    ACTIVE = 'active'
    CLOSED = 'closed'


class ClientSession:
    """Per-connection state machine: handshake, active messaging, teardown."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 registry: ClientRegistry, router: MessageRouter,
                 write_timeout: Optional[float] = WRITE_TIMEOUT):
        self.reader = reader
        self.sink = LineSink(writer, write_timeout)
        self.registry = registry
        self.router = router
        self.addr = self.sink.peer
        self.name: Optional[str] = None
        self.state = SessionState.CONNECTING

    async def run(self):
        """Serve the connection until the peer goes away. Always tears down."""
        logger.log_connection(self.addr)
        try:
            self._transition(SessionState.NAMING)
            if await self._negotiate_name():
                self._transition(SessionState.ACTIVE)
                await self._message_loop()
        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for {self.addr}")
        except (ConnectionError, OSError, asyncio.IncompleteReadError, ValueError) as e:
            # ValueError: line longer than the reader limit
            logger.info(f"Connection fault for {self.addr}: {e!r}")
        except Exception as e:
            logger.log_error(f"session {self.addr}", e)
        finally:
            await self._teardown()

    async def _negotiate_name(self) -> bool:
        """Prompt until a free name is submitted. False if the peer left first."""
        while True:
            await self.sink.send_line(create_submit_name_line())
            name = await self._read_line()
            if name is None:
                return False
            # Holding the sink lock keeps roster lines from other sessions
            # behind the acknowledgment.
            async with self.sink.lock:
                if await self.registry.try_register(name, self.sink):
                    self.name = name
                    await self.sink.send_line_locked(create_name_accepted_line())
                    break
            logger.log_name_rejected(name, self.addr)

        logger.log_name_accepted(self.name, self.addr)
        await self.router.broadcast_roster()
        return True

    async def _message_loop(self):
        while True:
            line = await self._read_line()
            if line is None:
                return
            message = parse_client_line(self.name, line)
            if message is None:
                logger.debug(f"Dropping malformed directed message from {self.name}: {line!r}")
                continue
            await self.router.route(message)

    async def _read_line(self) -> Optional[str]:
        """Next line without its terminator, or None at end of stream."""
        data = await self.reader.readline()
        if not data:
            return None
        return strip_line_terminator(data.decode(ENCODING, errors='replace'))

    async def _teardown(self):
        if self.state is SessionState.CLOSED:
            return
        self._transition(SessionState.CLOSED)
        if self.name is not None:
            await self.registry.remove(self.name)
            await self.router.broadcast_roster()
        logger.log_disconnect(self.name, self.addr)
        await self.sink.close()

    def _transition(self, state: SessionState):
        logger.debug(f"Session {self.addr}: {self.state.value} -> {state.value}")
        self.state = state
