"""
Client package for the line chat relay.

This package contains all client-side functionality including:
- Chat protocol handling
- User interface
- Configuration and utilities
"""
