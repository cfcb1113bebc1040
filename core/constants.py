# PATH: core/constants.py
"""
Constants for nimbook.

Contains error codes, defaults, and configuration constants shared by the
transport, the connector and the parser.
"""

from enum import Enum
from typing import Final


# Package version, also read by pyproject.toml
VERSION: Final[str] = "0.1.0"

# Keep at least this many block->addresses mappings to allow rollback
MIN_BLOCK_ADDRESSES_TO_KEEP: Final[int] = 100

# Timing defaults
DEFAULT_RPC_TIMEOUT_SECONDS: Final[int] = 25

# JSON-RPC
JSONRPC_VERSION: Final[str] = "2.0"

# Canonical header height is an unsigned 32-bit value
MAX_BLOCK_HEIGHT: Final[int] = 2**32 - 1


class ErrorCode(str, Enum):
    """
    Error codes carried by every NimbookError.

    Callers may match on the code instead of the exception type.
    """
    # Startup
    CONFIG_INVALID = "CONFIG_INVALID"
    RPC_CONNECT_FAILED = "RPC_CONNECT_FAILED"
    NETWORK_UNKNOWN = "NETWORK_UNKNOWN"

    # Infrastructure errors
    RPC_ERROR = "RPC_ERROR"
    RPC_TIMEOUT = "RPC_TIMEOUT"

    # Lookups
    BLOCK_NOT_FOUND = "BLOCK_NOT_FOUND"
    TX_NOT_FOUND = "TX_NOT_FOUND"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"

    # Gaps in the node's RPC surface
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"

    UNKNOWN = "UNKNOWN"
