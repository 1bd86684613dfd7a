"""
Shared constants for the line chat relay.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 9001

# Wire format
ENCODING = 'utf-8'
LINE_TERMINATOR = '\n'
MAX_LINE_LENGTH = 64 * 1024  # bytes per line before the stream reader gives up

# Timeouts
CONNECT_TIMEOUT = 10.0  # seconds
WRITE_TIMEOUT = 10.0  # seconds for one drain() on a slow recipient

# Client reconnection
MAX_RETRY_ATTEMPTS = 3
RECONNECT_DELAY_BASE = 1.0  # seconds, doubled per attempt

# Logging
LOG_DIR = 'logs'
CHAT_LOG_FILE = 'chat_history.log'

# Directed message prefix (client -> server)
DIRECTED_PREFIX = 'TO:'
RECIPIENT_SEPARATOR = ','


# Server Commands
class ServerCommands:
    # Server to Client
    SUBMIT_NAME = 'SUBMITNAME'
    NAME_ACCEPTED = 'NAMEACCEPTED'
    MESSAGE = 'MESSAGE '
    CLIENT_LIST = 'CLIENTLIST'
