"""
chains/nimiq/rpc.py - Nimiq backend connector.

Implements the BlockChain contract on top of a Nimiq node's JSON-RPC:
- blockNumber
- getBlockByNumber(height, verbose) / getBlockByHash(hash, verbose)
- getTransactionByHash(hash)
- mempoolContent(verbose)
- sendRawTransaction(hex)

Each operation issues one call bounded by rpc_timeout. Operations the node
cannot perform raise UnsupportedOperationError with a fixed message.
"""

import json
from dataclasses import dataclass, fields
from typing import Any, List, Optional

import httpx

from chains.nimiq.networks import build_genesis_table, classify_genesis
from chains.nimiq.parser import NimiqParser, RpcBlock, RpcHeader, RpcLightBlock, RpcTx
from chains.providers import RPCProvider
from core.blockchain import BaseChain, BlockChain
from core.constants import DEFAULT_RPC_TIMEOUT_SECONDS, MIN_BLOCK_ADDRESSES_TO_KEEP
from core.exceptions import (
    BlockNotFoundError,
    ConfigurationError,
    MalformedResponseError,
    TxNotFoundError,
    UnsupportedOperationError,
)
from core.logging import get_logger
from core.models import (
    AddressDescriptor,
    Block,
    BlockHeader,
    BlockInfo,
    ChainInfo,
    MempoolEntry,
    OnNewTxAddrFunc,
    Outpoint,
    Tx,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Configuration:
    """Coin configuration, immutable once loaded."""
    coin_name: str
    coin_shortcut: str
    rpc_url: str
    rpc_timeout: int = DEFAULT_RPC_TIMEOUT_SECONDS
    block_addresses_to_keep: int = MIN_BLOCK_ADDRESSES_TO_KEEP
    testnet_genesis_hash: str = ""
    devnet_genesis_hash: str = ""

    @classmethod
    def from_json(cls, raw: Any) -> "Configuration":
        """
        Parse a configuration document.

        Args:
            raw: JSON text (str/bytes) or an already decoded dict

        Raises:
            ConfigurationError: On malformed JSON or wrong field types
        """
        if isinstance(raw, (str, bytes, bytearray)):
            try:
                raw = json.loads(raw)
            except ValueError as e:
                raise ConfigurationError(f"Invalid configuration file: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"Invalid configuration file: expected JSON object, got {type(raw).__name__}"
            )

        values = {}
        for f in fields(cls):
            if f.name not in raw:
                continue
            value = raw[f.name]
            expected = str if f.type in (str, "str") else int
            if isinstance(value, bool) or not isinstance(value, expected):
                raise ConfigurationError(
                    f"Invalid configuration file: {f.name} must be {expected.__name__}",
                    details={"field": f.name, "value": value},
                )
            values[f.name] = value

        missing = [name for name in ("coin_name", "coin_shortcut", "rpc_url") if name not in values]
        if missing:
            raise ConfigurationError(
                f"Invalid configuration file: missing {', '.join(missing)}",
                details={"missing": missing},
            )

        if values.get("rpc_timeout", DEFAULT_RPC_TIMEOUT_SECONDS) <= 0:
            raise ConfigurationError(
                "Invalid configuration file: rpc_timeout must be positive",
                details={"field": "rpc_timeout", "value": values["rpc_timeout"]},
            )

        # keep at least 100 mappings block->addresses to allow rollback
        if values.get("block_addresses_to_keep", 0) < MIN_BLOCK_ADDRESSES_TO_KEEP:
            values["block_addresses_to_keep"] = MIN_BLOCK_ADDRESSES_TO_KEEP

        return cls(**values)


class NimiqRPC(BaseChain, BlockChain):
    """
    Connector between the BlockChain contract and a Nimiq node.

    Created once at startup with create(), classified with initialize(),
    torn down with shutdown().
    """

    def __init__(self, config: Configuration, provider: Optional[RPCProvider]):
        super().__init__(parser=NimiqParser(config.block_addresses_to_keep))
        self.chain_config = config
        self.genesis_networks = build_genesis_table(
            config.testnet_genesis_hash,
            config.devnet_genesis_hash,
        )
        self.rpc = provider

    @classmethod
    def create(
        cls,
        raw_config: Any,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "NimiqRPC":
        """
        Parse configuration and dial the RPC endpoint.

        Raises:
            ConfigurationError: If the configuration is malformed
            RPCConnectionError: If the endpoint cannot be dialed
        """
        config = Configuration.from_json(raw_config)
        provider = RPCProvider.dial(
            config.rpc_url,
            timeout_seconds=config.rpc_timeout,
            transport=transport,
        )
        return cls(config, provider)

    async def __aenter__(self) -> "NimiqRPC":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()

    async def _call(self, method: str, *params: Any) -> Any:
        response = await self.rpc.call(method, list(params))
        return response.result

    async def initialize(self) -> None:
        """Classify the network by the hash of the genesis block."""
        genesis = await self.get_block("", 1)
        network = classify_genesis(genesis.hash, self.genesis_networks)
        self.testnet = network.testnet
        self.network = network.name
        logger.info(
            f"rpc: block chain {self.network}",
            extra={"context": {"coin": self.chain_config.coin_name, "genesis": genesis.hash}},
        )

    async def shutdown(self) -> None:
        """Close the RPC handle if it is open. Never fails."""
        if self.rpc is not None:
            await self.rpc.close()
        logger.info("rpc: shutdown")

    def get_coin_name(self) -> str:
        return self.chain_config.coin_name

    def get_subversion(self) -> str:
        """Nimiq does not have subversion."""
        return ""

    def get_chain_parser(self) -> NimiqParser:
        return self.parser

    async def get_chain_info(self) -> ChainInfo:
        raise UnsupportedOperationError("get_chain_info", "not implemented")

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    async def get_best_block_height(self) -> int:
        """Height of the tip of the best chain."""
        result = await self._call("blockNumber")
        if isinstance(result, bool) or not isinstance(result, int) or result < 0:
            raise MalformedResponseError(
                f"blockNumber: expected unsigned integer, got {result!r}",
                details={"method": "blockNumber"},
            )
        return result

    async def _get_header_by_number(self, height: int) -> RpcHeader:
        raw = await self._call("getBlockByNumber", height, False)
        if raw is None:
            raise BlockNotFoundError(details={"height": height})
        return _annotate(RpcHeader.from_json, raw, height=height)

    async def get_best_block_hash(self) -> str:
        """Hash of the tip of the best chain."""
        height = await self.get_best_block_height()
        header = await self._get_header_by_number(height)
        return header.hash

    async def get_block_hash(self, height: int) -> str:
        header = await self._get_header_by_number(height)
        return header.hash

    async def get_block_header(self, hash: str) -> BlockHeader:
        raw = await self._call("getBlockByHash", hash, False)
        if raw is None:
            raise BlockNotFoundError(details={"hash": hash})
        header = _annotate(RpcHeader.from_json, raw, hash=hash)
        return _annotate(self.parser.header_to_block_header, header, hash=hash)

    async def get_block(self, hash: str = "", height: int = 0) -> Block:
        """
        Block with full transactions, by hash or height.

        Hash has precedence if both are passed. The same payload is decoded
        twice: once as header, once as transaction body.
        """
        if hash:
            raw = await self._call("getBlockByHash", hash, True)
        else:
            raw = await self._call("getBlockByNumber", height, True)
        if raw is None:
            raise BlockNotFoundError(details={"hash": hash, "height": height})

        head = _annotate(RpcHeader.from_json, raw, hash=hash, height=height)
        body = _annotate(RpcBlock.from_json, raw, hash=hash, height=height)
        return _annotate(self.parser.block_to_block, head, body, hash=hash, height=height)

    async def get_block_info(self, hash: str) -> BlockInfo:
        """Extended header (difficulty, nonce) with the list of txids."""
        raw = await self._call("getBlockByHash", hash, False)
        if raw is None:
            raise BlockNotFoundError(details={"hash": hash})

        head = _annotate(RpcHeader.from_json, raw, hash=hash)
        body = _annotate(RpcLightBlock.from_json, raw, hash=hash)
        return BlockInfo(
            header=_annotate(self.parser.header_to_block_header, head, hash=hash),
            difficulty=head.difficulty,
            nonce=head.nonce,
            txids=body.txs,
        )

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def get_transaction(self, txid: str) -> Tx:
        raw = await self._call("getTransactionByHash", txid)
        if raw is None:
            raise TxNotFoundError(details={"txid": txid})
        tx = _annotate(RpcTx.from_json, raw, txid=txid)
        return self.parser.tx_to_tx(tx)

    async def get_transaction_for_mempool(self, txid: str) -> Tx:
        raise UnsupportedOperationError("get_transaction_for_mempool")

    async def get_transaction_specific(self, tx: Tx) -> dict:
        raise UnsupportedOperationError("get_transaction_specific")

    async def get_mempool(self) -> List[str]:
        """Hashes of pending transactions."""
        result = await self._call("mempoolContent", False)
        if result is None:
            return []
        if not isinstance(result, list) or not all(isinstance(h, str) for h in result):
            raise MalformedResponseError(
                "mempoolContent: expected array of transaction hashes",
                details={"method": "mempoolContent"},
            )
        return result

    async def send_raw_transaction(self, hex: str) -> str:
        """Submit a serialized transaction, returns its hash."""
        result = await self._call("sendRawTransaction", hex)
        if not isinstance(result, str):
            raise MalformedResponseError(
                f"sendRawTransaction: expected transaction hash, got {result!r}",
                details={"method": "sendRawTransaction"},
            )
        return result

    # -------------------------------------------------------------------------
    # Not available on Nimiq RPC
    # -------------------------------------------------------------------------

    async def estimate_fee(self, blocks: int) -> int:
        raise UnsupportedOperationError("estimate_fee")

    async def estimate_smart_fee(self, blocks: int, conservative: bool) -> int:
        raise UnsupportedOperationError("estimate_smart_fee")

    async def resync_mempool(self, on_new_tx_addr: Optional[OnNewTxAddrFunc]) -> int:
        raise UnsupportedOperationError("resync_mempool", "not implemented")

    async def get_mempool_transactions(self, address: str) -> List[Outpoint]:
        raise UnsupportedOperationError("get_mempool_transactions")

    async def get_mempool_transactions_for_addr_desc(
        self, addr_desc: AddressDescriptor
    ) -> List[Outpoint]:
        raise UnsupportedOperationError("get_mempool_transactions_for_addr_desc")

    async def get_mempool_entry(self, txid: str) -> MempoolEntry:
        raise UnsupportedOperationError("get_mempool_entry")


def _annotate(func, *args, **ids):
    """Call a decoder, adding the requested identifiers to a MalformedResponseError."""
    try:
        return func(*args)
    except MalformedResponseError as e:
        label = ", ".join(f"{k} {v}" for k, v in ids.items())
        raise MalformedResponseError(
            f"{e.message} ({label})",
            details={**e.details, **ids},
        ) from e
