"""
core - Core utilities and models for nimbook.

This package contains:
- models.py: Canonical block/transaction models
- blockchain.py: Chain-access contract, base chain and base parser
- constants.py: Error codes and defaults
- exceptions.py: Typed exceptions with error codes
- logging.py: Structured JSON logging
"""

from core.blockchain import BaseChain, BaseParser, BlockChain
from core.constants import ErrorCode
from core.exceptions import (
    BlockNotFoundError,
    ConfigurationError,
    InfraError,
    MalformedResponseError,
    NetworkClassificationError,
    NimbookError,
    NotFoundError,
    RPCConnectionError,
    RPCError,
    RPCTimeoutError,
    TxNotFoundError,
    UnsupportedOperationError,
)
from core.logging import get_logger, set_global_context, setup_logging
from core.models import (
    Block,
    BlockHeader,
    BlockInfo,
    ChainInfo,
    MempoolEntry,
    Outpoint,
    ScriptPubKey,
    Tx,
    Vin,
    Vout,
)

__all__ = [
    # Contract
    "BaseChain",
    "BaseParser",
    "BlockChain",
    # Exceptions
    "BlockNotFoundError",
    "ConfigurationError",
    "ErrorCode",
    "InfraError",
    "MalformedResponseError",
    "NetworkClassificationError",
    "NimbookError",
    "NotFoundError",
    "RPCConnectionError",
    "RPCError",
    "RPCTimeoutError",
    "TxNotFoundError",
    "UnsupportedOperationError",
    # Models
    "Block",
    "BlockHeader",
    "BlockInfo",
    "ChainInfo",
    "MempoolEntry",
    "Outpoint",
    "ScriptPubKey",
    "Tx",
    "Vin",
    "Vout",
    # Logging
    "get_logger",
    "set_global_context",
    "setup_logging",
]
