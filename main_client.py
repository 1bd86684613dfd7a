#!/usr/bin/env python3
"""
Line Chat Relay Client - Main Entry Point

Usage:
    python main_client.py [--server-ip HOST] [--port PORT] [--username NAME]

If no username is given, or the given one is already taken, the screen
name is asked for in a dialog.
"""

import sys
import argparse

from common.constants import DEFAULT_HOST, DEFAULT_PORT


def run_gui_client(username: str = None, server_host: str = DEFAULT_HOST, server_port: int = DEFAULT_PORT):
    """Run the GUI client."""
    try:
        from client.ui.client_gui import ChatWindow
        from PyQt6.QtWidgets import QApplication
    except ImportError:
        print("[ERROR] PyQt6 not installed. Install with: pip install PyQt6")
        sys.exit(1)

    app = QApplication(sys.argv)

    window = ChatWindow(server_host, server_port, username)
    window.show()
    window.connect_to_server()

    sys.exit(app.exec())


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Line Chat Relay Client')
    parser.add_argument('--username', type=str, default=None,
                        help='Screen name (default: will be asked in GUI)')
    parser.add_argument('--server-ip', type=str, default=DEFAULT_HOST,
                        help=f'Server IP address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')

    args = parser.parse_args()
    run_gui_client(args.username, args.server_ip, args.port)


if __name__ == "__main__":
    main()
