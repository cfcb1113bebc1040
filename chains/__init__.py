"""
chains - Node access for nimbook.

This package contains:
- providers.py: JSON-RPC transport with per-call timeout
- nimiq/: Nimiq connector, wire shapes and network table
"""
