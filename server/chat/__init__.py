"""
Chat module for server-side relay functionality.

Handles:
- Client registry (unique names and their sinks)
- Per-connection sessions
- Message routing and roster updates
"""
