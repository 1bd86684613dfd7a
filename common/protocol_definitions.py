"""
Protocol definitions for the line chat relay.

This module defines the message structures and the line formats used in
communication between client and server components. Every frame is one line
of text; the functions here never include the line terminator.
"""

from typing import List, Optional, Sequence, Tuple, Union
from dataclasses import dataclass

from common.constants import ServerCommands, DIRECTED_PREFIX, RECIPIENT_SEPARATOR


@dataclass(frozen=True)
class BroadcastMessage:
    """Message delivered to every registered client."""
    sender: str
    body: str


@dataclass(frozen=True)
class DirectedMessage:
    """Message delivered to the listed recipients only (order and duplicates kept)."""
    sender: str
    recipients: Tuple[str, ...]
    body: str


Message = Union[BroadcastMessage, DirectedMessage]


def parse_client_line(sender: str, line: str) -> Optional[Message]:
    """
    Parse one inbound line from an active client.

    A line starting with ``TO:`` is a directed message of the form
    ``TO:<name1,name2,...>:<body>``; the body keeps any further colons.
    Returns None for a malformed directed line. Anything else is a
    broadcast body.
    """
    if line.startswith(DIRECTED_PREFIX):
        parts = line.split(':', 2)
        if len(parts) < 3:
            return None
        recipients = tuple(name for name in parts[1].split(RECIPIENT_SEPARATOR) if name)
        return DirectedMessage(sender, recipients, parts[2])
    return BroadcastMessage(sender, line)


def format_chat_text(sender: str, body: str) -> str:
    """Render the text a recipient displays for a chat message."""
    return f"{sender}: {body}"


def create_submit_name_line() -> str:
    """Create the name request prompt."""
    return ServerCommands.SUBMIT_NAME


def create_name_accepted_line() -> str:
    """Create the handshake acknowledgment."""
    return ServerCommands.NAME_ACCEPTED


def create_message_line(sender: str, body: str) -> str:
    """Create a chat message line."""
    return ServerCommands.MESSAGE + format_chat_text(sender, body)


def create_client_list_line(names: Sequence[str]) -> str:
    """Create a roster line: every name followed by a comma, no leading space."""
    return ServerCommands.CLIENT_LIST + ''.join(f"{name}{RECIPIENT_SEPARATOR}" for name in names)


def create_directed_line(recipients: Sequence[str], text: str) -> str:
    """Create a directed message line (client -> server)."""
    return f"{DIRECTED_PREFIX}{RECIPIENT_SEPARATOR.join(recipients)}:{text}"


def parse_server_line(line: str) -> Tuple[Optional[str], str]:
    """
    Split a server line into (command, payload).

    Returns (None, line) for a line that matches no known command.
    """
    for command in (ServerCommands.SUBMIT_NAME, ServerCommands.NAME_ACCEPTED,
                    ServerCommands.MESSAGE, ServerCommands.CLIENT_LIST):
        if line.startswith(command):
            return command, line[len(command):]
    return None, line


def parse_client_list(payload: str) -> List[str]:
    """Parse a roster payload, tolerating the trailing comma."""
    return [name for name in payload.split(RECIPIENT_SEPARATOR) if name]


def strip_line_terminator(line: str) -> str:
    """Remove exactly one trailing line terminator ("\\n" or "\\r\\n")."""
    if line.endswith('\n'):
        line = line[:-1]
        if line.endswith('\r'):
            line = line[:-1]
    return line
