"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from common.constants import CHAT_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, log_level: int = logging.INFO):
        # Set up main logger
        self.logger = logging.getLogger('chat_relay_server')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        # Chat log file is off until a directory is configured
        self.chat_log_path: Optional[Path] = None

    def configure(self, logs_dir: Optional[str] = None, log_level: Optional[int] = None):
        """Apply settings from ServerConfig."""
        if log_level is not None:
            self.logger.setLevel(log_level)
        if logs_dir:
            path = Path(logs_dir)
            path.mkdir(parents=True, exist_ok=True)
            self.chat_log_path = path / CHAT_LOG_FILE

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr: tuple):
        """Log client connection."""
        self.info(f"New connection from {addr}")

    def log_name_rejected(self, name: str, addr: tuple):
        """Log a refused screen name."""
        self.info(f"Name '{name}' rejected for {addr}, re-prompting")

    def log_name_accepted(self, name: str, addr: tuple):
        """Log handshake completion."""
        self.info(f"'{name}' joined from {addr}")

    def log_disconnect(self, name: Optional[str], addr: tuple):
        """Log client disconnect."""
        if name is None:
            self.info(f"Connection from {addr} closed before naming")
        else:
            self.info(f"'{name}' ({addr}) disconnected")

    def log_broadcast(self, sender: str, body: str, recipients: int):
        """Log broadcast message."""
        self.debug(f"BROADCAST from {sender} to {recipients} client(s): {body}")
        self._write_chat_log(f"[BROADCAST] {sender} | {body}")

    def log_directed(self, sender: str, recipients: Sequence[str], delivered: int, body: str):
        """Log directed message."""
        self.debug(f"DIRECTED from {sender} to {', '.join(recipients)} ({delivered} delivered): {body}")
        self._write_chat_log(f"[TO {','.join(recipients)}] {sender} | {body}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error!r}")

    def _write_chat_log(self, content: str):
        if self.chat_log_path is None:
            return
        try:
            with open(self.chat_log_path, 'a', encoding='utf-8') as f:
                f.write(f"{datetime.now().isoformat()} | {content}\n")
        except OSError as e:
            self.error(f"Failed to write to log file {self.chat_log_path}: {e}")


# Global logger instance
logger = ServerLogger()
