"""
Server configuration module.

This module handles server-side configuration settings.
"""

import logging
from typing import Optional

from common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, MAX_LINE_LENGTH, WRITE_TIMEOUT


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 logs_dir: Optional[str] = None, log_level: int = logging.INFO):
        self.host = host
        self.port = port

        # Logging configuration (no chat log file unless a directory is given)
        self.logs_dir = logs_dir
        self.log_level = log_level

        # Connection settings
        self.max_line_length = MAX_LINE_LENGTH
        self.write_timeout = WRITE_TIMEOUT

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir,
            'log_level': self.log_level
        }
