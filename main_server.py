#!/usr/bin/env python3
"""
Line Chat Relay Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           TCP port (default: 9001)
    --log-dir DIR         Also append chat traffic to DIR/chat_history.log
    --debug               Verbose logging
"""

import asyncio
import argparse
import logging

from common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT
from server.main_server import ChatRelayServer
from server.utils.config import ServerConfig
from server.utils.logger import logger


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Line Chat Relay Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port (default: {DEFAULT_PORT})')
    parser.add_argument('--log-dir', type=str, default=None,
                        help='Directory for the chat history log (default: console only)')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args()

    config = ServerConfig(
        host=args.host,
        port=args.port,
        logs_dir=args.log_dir,
        log_level=logging.DEBUG if args.debug else logging.INFO
    )
    logger.configure(**config.get_log_settings())

    server = ChatRelayServer(config)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except OSError as e:
        logger.log_error("server startup", e)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
