"""
Outbound line sink.

Wraps the StreamWriter of one connected client. Several sessions may
deliver to the same client at once, so every line is written and drained
under the sink's own lock.
"""

import asyncio
from typing import Optional

from common.constants import ENCODING, LINE_TERMINATOR, WRITE_TIMEOUT
from server.utils.logger import logger


class LineSink:
    """A way to send one line of text to exactly one client."""

    def __init__(self, writer: asyncio.StreamWriter, write_timeout: Optional[float] = WRITE_TIMEOUT):
        self.writer = writer
        self.peer = writer.get_extra_info('peername')
        self.write_timeout = write_timeout
        self.lock = asyncio.Lock()  # one line at a time
        self.closed = False

    async def send_line(self, line: str) -> bool:
        """Write one line. Returns False if the client could not be reached."""
        async with self.lock:
            return await self.send_line_locked(line)

    async def send_line_locked(self, line: str) -> bool:
        """Like send_line, for a caller already holding self.lock."""
        if self.closed or self.writer.is_closing():
            return False
        try:
            self.writer.write((line + LINE_TERMINATOR).encode(ENCODING))
            await asyncio.wait_for(self.writer.drain(), timeout=self.write_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Write to {self.peer} timed out after {self.write_timeout}s, dropping connection")
            self.abort()
            return False
        except (ConnectionError, OSError) as e:
            logger.warning(f"Failed to deliver to {self.peer}: {e}")
            self.abort()
            return False

    def abort(self):
        """
        Drop the connection without flushing buffered data.

        The owning session's pending read then sees end of stream and
        tears the session down.
        """
        self.closed = True
        self.writer.transport.abort()

    async def close(self):
        """Close the underlying connection once, flushing what the peer accepts."""
        async with self.lock:
            if not self.closed:
                self.closed = True
                self.writer.close()
        try:
            await asyncio.wait_for(self.writer.wait_closed(), timeout=self.write_timeout)
        except asyncio.TimeoutError:
            logger.debug(f"Connection {self.peer} did not flush in {self.write_timeout}s, aborting")
            self.writer.transport.abort()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Connection {self.peer} closed with error: {e}")
