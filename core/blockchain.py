# PATH: core/blockchain.py
"""
Chain-access contract implemented by every coin adapter.

The indexer talks to a node only through BlockChain. Adapters implement
every method; operations a node cannot perform raise
UnsupportedOperationError instead of being left out.
"""

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union

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


class BaseParser:
    """
    Coin-independent part of a chain parser.

    Amounts are integers in the smallest unit; amount_decimal_point says
    where the decimal point goes when formatting them for display.
    """

    def __init__(self, block_addresses_to_keep: int, amount_decimal_point: int):
        self.block_addresses_to_keep = block_addresses_to_keep
        self.amount_decimal_point = amount_decimal_point

    def keep_block_addresses(self) -> int:
        return self.block_addresses_to_keep

    def amount_to_decimal_string(self, amount: int) -> str:
        """
        Format an integer amount with amount_decimal_point digits.

        Trailing zeros are removed, "12345" with 5 digits gives "0.12345",
        "100000" gives "1".
        """
        sign = "-" if amount < 0 else ""
        digits = str(abs(amount)).rjust(self.amount_decimal_point + 1, "0")
        if self.amount_decimal_point == 0:
            return sign + digits
        whole = digits[:-self.amount_decimal_point]
        frac = digits[-self.amount_decimal_point:].rstrip("0")
        if not frac:
            return sign + whole
        return f"{sign}{whole}.{frac}"

    def amount_to_big_int(self, value: Union[str, int]) -> int:
        """Parse a decimal amount ("1.5") into the smallest unit (150000)."""
        if isinstance(value, int):
            return value * 10**self.amount_decimal_point
        try:
            amount = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
        scaled = amount.scaleb(self.amount_decimal_point)
        if scaled != scaled.to_integral_value():
            raise ValueError(
                f"Amount {value!r} has more than {self.amount_decimal_point} decimal places"
            )
        return int(scaled)


class BaseChain:
    """State shared by all adapters: parser and network classification."""

    def __init__(self, parser: Optional[BaseParser] = None):
        self.parser = parser
        self.testnet = False
        self.network = ""

    def is_testnet(self) -> bool:
        return self.testnet

    def get_network_name(self) -> str:
        return self.network


class BlockChain(ABC):
    """Full chain-access contract."""

    @abstractmethod
    async def initialize(self) -> None:
        """Determine network and prepare the adapter for use."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Release the backend connection. Must be idempotent."""

    @abstractmethod
    def get_coin_name(self) -> str: ...

    @abstractmethod
    def get_subversion(self) -> str: ...

    @abstractmethod
    def get_chain_parser(self) -> BaseParser: ...

    @abstractmethod
    async def get_chain_info(self) -> ChainInfo: ...

    @abstractmethod
    async def get_best_block_hash(self) -> str: ...

    @abstractmethod
    async def get_best_block_height(self) -> int: ...

    @abstractmethod
    async def get_block_hash(self, height: int) -> str: ...

    @abstractmethod
    async def get_block_header(self, hash: str) -> BlockHeader: ...

    @abstractmethod
    async def get_block(self, hash: str = "", height: int = 0) -> Block:
        """Block by hash or height, hash has precedence if both are passed."""

    @abstractmethod
    async def get_block_info(self, hash: str) -> BlockInfo: ...

    @abstractmethod
    async def get_mempool(self) -> List[str]: ...

    @abstractmethod
    async def get_transaction(self, txid: str) -> Tx: ...

    @abstractmethod
    async def get_transaction_for_mempool(self, txid: str) -> Tx: ...

    @abstractmethod
    async def get_transaction_specific(self, tx: Tx) -> dict: ...

    @abstractmethod
    async def estimate_fee(self, blocks: int) -> int: ...

    @abstractmethod
    async def estimate_smart_fee(self, blocks: int, conservative: bool) -> int: ...

    @abstractmethod
    async def send_raw_transaction(self, hex: str) -> str: ...

    @abstractmethod
    async def resync_mempool(self, on_new_tx_addr: Optional[OnNewTxAddrFunc]) -> int: ...

    @abstractmethod
    async def get_mempool_transactions(self, address: str) -> List[Outpoint]: ...

    @abstractmethod
    async def get_mempool_transactions_for_addr_desc(
        self, addr_desc: AddressDescriptor
    ) -> List[Outpoint]: ...

    @abstractmethod
    async def get_mempool_entry(self, txid: str) -> MempoolEntry: ...


__all__ = [
    "BaseChain",
    "BaseParser",
    "BlockChain",
]
