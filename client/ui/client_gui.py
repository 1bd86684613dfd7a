#!/usr/bin/env python3
"""
Client GUI - PyQt6 chat window

Features:
- Chat area showing broadcast and directed messages
- Roster of connected clients with multi-selection
- Broadcast toggle: send to everyone, or to the selected clients only
- Screen name dialog during the naming handshake
"""

import sys
import asyncio
import threading
import os
from datetime import datetime
from typing import List, Optional

from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QTextEdit, QLineEdit, QListWidget, QPushButton, QCheckBox, QLabel,
    QMessageBox, QInputDialog, QAbstractItemView
)
from PyQt6.QtCore import QThread, pyqtSignal

from client.chat.chat_client import ChatClient
from client.utils.config import ClientConfig
from client.utils.logger import logger
from common.constants import DEFAULT_HOST, DEFAULT_PORT


# ============================================================================
# CHAT WIDGET
# ============================================================================

class ChatWidget(QWidget):
    """Chat interface with message area, roster and input."""

    broadcast_sent = pyqtSignal(str)  # message text
    directed_sent = pyqtSignal(list, str)  # recipient names, message text

    def __init__(self):
        super().__init__()
        self.setup_ui()
        self.set_input_enabled(False)

    def setup_ui(self):
        """Setup chat interface UI."""
        layout = QVBoxLayout()
        layout.setSpacing(5)
        layout.setContentsMargins(5, 5, 5, 5)

        # Input area
        input_layout = QHBoxLayout()

        self.input_field = QLineEdit()
        self.input_field.setPlaceholderText("Type a message...")
        self.input_field.returnPressed.connect(self.send_message)
        input_layout.addWidget(self.input_field)

        self.send_btn = QPushButton("Send")
        self.send_btn.clicked.connect(self.send_message)
        self.send_btn.setStyleSheet("""
            QPushButton {
                background-color: #0099FF;
                color: white;
                border: none;
                padding: 8px 15px;
                border-radius: 5px;
                font-weight: bold;
            }
            QPushButton:hover {
                background-color: #0080E6;
            }
        """)
        input_layout.addWidget(self.send_btn)
        layout.addLayout(input_layout)

        # Roster and messages side by side
        body_layout = QHBoxLayout()

        roster_layout = QVBoxLayout()
        roster_layout.addWidget(QLabel("Online"))
        self.client_list = QListWidget()
        self.client_list.setSelectionMode(QAbstractItemView.SelectionMode.MultiSelection)
        self.client_list.setMaximumWidth(180)
        roster_layout.addWidget(self.client_list)
        body_layout.addLayout(roster_layout)

        self.chat_text = QTextEdit()
        self.chat_text.setReadOnly(True)
        body_layout.addWidget(self.chat_text)
        layout.addLayout(body_layout)

        self.broadcast_check = QCheckBox("Broadcast")
        layout.addWidget(self.broadcast_check)

        self.setLayout(layout)

    def set_input_enabled(self, enabled: bool):
        self.input_field.setEnabled(enabled)
        self.send_btn.setEnabled(enabled)

    def selected_recipients(self) -> List[str]:
        return [item.text() for item in self.client_list.selectedItems()]

    def send_message(self):
        """Send to everyone or to the selected clients."""
        text = self.input_field.text()
        if not text:
            return

        if self.broadcast_check.isChecked():
            self.broadcast_sent.emit(text)
        else:
            recipients = self.selected_recipients()
            if not recipients:
                QMessageBox.warning(self, "No Recipient Selected",
                                    "Please select a recipient from the list")
                return
            self.directed_sent.emit(recipients, text)
        self.input_field.clear()

    def add_message(self, text: str, is_system: bool = False):
        """Add message to chat."""
        if is_system:
            timestamp = datetime.now().strftime("%H:%M")
            self.chat_text.append(f"[{timestamp}] {text}")
        else:
            self.chat_text.append(text)

        # Auto scroll to bottom
        scrollbar = self.chat_text.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())

    def update_client_list(self, names: List[str]):
        """Replace the roster, keeping the selection of names still present."""
        selected = set(self.selected_recipients())
        self.client_list.clear()
        for name in names:
            self.client_list.addItem(name)
            if name in selected:
                self.client_list.item(self.client_list.count() - 1).setSelected(True)


# ============================================================================
# MAIN WINDOW
# ============================================================================

class ChatWindow(QMainWindow):
    """Main application window."""

    def __init__(self, server_host: str = DEFAULT_HOST, server_port: int = DEFAULT_PORT,
                 username: Optional[str] = None):
        super().__init__()
        self.config = ClientConfig(server_host, server_port, username)
        self.network_thread: Optional[NetworkThread] = None

        self.setWindowTitle("Chatter Box :)")
        self.resize(640, 420)

        self.chat_widget = ChatWidget()
        self.setCentralWidget(self.chat_widget)
        self.chat_widget.broadcast_sent.connect(self.on_send_broadcast)
        self.chat_widget.directed_sent.connect(self.on_send_directed)

    def connect_to_server(self) -> bool:
        """Start the network thread."""
        self.network_thread = NetworkThread(self.config)
        self.network_thread.name_requested.connect(self.on_name_requested)
        self.network_thread.name_accepted.connect(self.on_name_accepted)
        self.network_thread.message_received.connect(self.chat_widget.add_message)
        self.network_thread.roster_received.connect(self.chat_widget.update_client_list)
        self.network_thread.disconnected.connect(self.on_disconnected)
        self.network_thread.start()
        return True

    def on_name_requested(self, rejected: bool):
        """Ask the user for a screen name."""
        prompt = "Name already in use, choose another:" if rejected else "Choose a screen name:"
        name, ok = QInputDialog.getText(self, "Screen name selection", prompt)
        if not ok:
            self.close()
            return
        self.network_thread.submit_name(name)

    def on_name_accepted(self, name: str):
        self.setWindowTitle(f"Chatter Box :) - {name}")
        self.chat_widget.set_input_enabled(True)
        self.chat_widget.add_message(f"Joined as {name}", is_system=True)

    def on_disconnected(self):
        self.chat_widget.set_input_enabled(False)
        self.chat_widget.add_message("Disconnected from server", is_system=True)

    def on_send_broadcast(self, text: str):
        if self.network_thread:
            self.network_thread.send_broadcast(text)

    def on_send_directed(self, recipients: list, text: str):
        if self.network_thread:
            self.network_thread.send_directed(recipients, text)

    def closeEvent(self, event):
        """Disconnect before closing."""
        if self.network_thread:
            self.network_thread.stop()
            self.network_thread.wait(2000)
        super().closeEvent(event)


# ============================================================================
# NETWORK THREAD
# ============================================================================

class NetworkThread(QThread):
    """Thread for handling network communication."""

    name_requested = pyqtSignal(bool)  # previous name rejected
    name_accepted = pyqtSignal(str)
    message_received = pyqtSignal(str)
    roster_received = pyqtSignal(list)
    disconnected = pyqtSignal()

    def __init__(self, config: ClientConfig):
        super().__init__()
        self.client = ChatClient(config)
        self.client.set_name_handler(self._request_name)
        self.client.set_accepted_handler(self.name_accepted.emit)
        self.client.set_message_handler(self.message_received.emit)
        self.client.set_roster_handler(self.roster_received.emit)
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.loop_ready = threading.Event()

    def _request_name(self, rejected: bool) -> None:
        # Answered later from the GUI thread through submit_name()
        self.name_requested.emit(rejected)
        return None

    def run(self):
        """Run network loop."""
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)
        self.loop_ready.set()
        try:
            self.loop.run_until_complete(self._connect_and_listen())
        finally:
            self.loop.close()

    async def _connect_and_listen(self):
        try:
            if not await self.client.connect():
                return
            await self.client.listen()
        except (ConnectionError, OSError) as e:
            logger.log_error("network", e)
        finally:
            await self.client.close()
            self.disconnected.emit()

    def _submit(self, coro):
        if not self.loop_ready.wait(timeout=5.0) or self.loop is None or self.loop.is_closed():
            logger.warning("Event loop not ready, message not sent")
            coro.close()
            return
        asyncio.run_coroutine_threadsafe(coro, self.loop)

    def submit_name(self, name: str):
        self._submit(self.client.submit_name(name))

    def send_broadcast(self, text: str):
        self._submit(self.client.send_broadcast(text))

    def send_directed(self, recipients: List[str], text: str):
        self._submit(self.client.send_directed(recipients, text))

    def stop(self):
        """Stop network thread."""
        if self.loop is not None and not self.loop.is_closed():
            self._submit(self.client.close())


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def main():
    """Main entry point."""
    app = QApplication(sys.argv)

    # Get server IP from environment or use default
    server_host = os.environ.get('SERVER_IP', DEFAULT_HOST)
    server_port = int(os.environ.get('SERVER_PORT', str(DEFAULT_PORT)))

    window = ChatWindow(server_host, server_port)
    window.show()
    window.connect_to_server()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
