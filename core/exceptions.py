# PATH: core/exceptions.py
"""
Typed exceptions for nimbook.

Infra errors (transport, timeouts) are kept apart from lookup errors
(not found, malformed payload) so callers can treat "absent" differently
from "unreachable".
"""

from typing import Optional

from core.constants import ErrorCode


class NimbookError(Exception):
    """Base exception for nimbook."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"


class ConfigurationError(NimbookError):
    """Coin configuration could not be parsed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.CONFIG_INVALID, details)


class RPCConnectionError(NimbookError):
    """RPC endpoint could not be dialed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.RPC_CONNECT_FAILED, details)


class NetworkClassificationError(NimbookError):
    """Genesis block hash does not belong to a known network."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.NETWORK_UNKNOWN, details)


class InfraError(NimbookError):
    """Infrastructure-related errors (RPC, timeouts)."""
    pass


class RPCError(InfraError):
    """RPC call failed, either in transport or on the node."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.RPC_ERROR, details)


class RPCTimeoutError(InfraError):
    """RPC call did not complete within the configured timeout."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.RPC_TIMEOUT, details)


class NotFoundError(NimbookError):
    """Node returned an empty result for a specific lookup."""
    pass


class BlockNotFoundError(NotFoundError):
    def __init__(self, message: str = "Block not found", details: Optional[dict] = None):
        super().__init__(message, ErrorCode.BLOCK_NOT_FOUND, details)


class TxNotFoundError(NotFoundError):
    def __init__(self, message: str = "Tx not found", details: Optional[dict] = None):
        super().__init__(message, ErrorCode.TX_NOT_FOUND, details)


class MalformedResponseError(NimbookError):
    """
    Node response does not match the expected JSON shape.

    Details always carry the requested hash and/or height.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.MALFORMED_RESPONSE, details)


class UnsupportedOperationError(NimbookError):
    """
    Operation the Nimiq RPC surface cannot perform.

    The message depends only on the operation, never on its arguments.
    """

    def __init__(self, operation: str, reason: str = "not supported"):
        super().__init__(
            f"{operation}: {reason}",
            ErrorCode.UNSUPPORTED_OPERATION,
            {"operation": operation},
        )
        self.operation = operation
