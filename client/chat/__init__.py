"""
Chat module for client-side messaging functionality.

Handles:
- Naming handshake
- Broadcast and directed messages
- Roster updates
"""
