"""
Server package for the line chat relay.

This package contains all server-side functionality including:
- Connection acceptance
- Naming handshake and client sessions
- Broadcast and directed message routing
- Configuration and utilities
"""
