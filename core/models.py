# PATH: core/models.py
"""
Canonical, coin-agnostic data models.

Coin adapters map their wire shapes onto these. Amounts are integers in the
coin's smallest unit; no decimal scaling happens at this layer.

TX SHAPE CONTRACT
=================
A Tx carries inputs (Vin) and outputs (Vout). Account-based chains without
multi-input/output transactions map each transfer to exactly one Vin
(the sender) and exactly one Vout (the recipient, n=0, value_sat=amount).
=================
"""

from dataclasses import dataclass, field
from typing import Callable, List


# Coin-specific binary form of an address
AddressDescriptor = bytes

# Callback invoked for every (txid, address descriptor) pair during mempool resync
OnNewTxAddrFunc = Callable[[str, AddressDescriptor], None]


@dataclass
class BlockHeader:
    """Block header as seen by the indexer."""
    hash: str
    prev: str = ""
    next: str = ""
    height: int = 0
    confirmations: int = 0
    size: int = 0
    time: int = 0


@dataclass
class ScriptPubKey:
    addresses: List[str] = field(default_factory=list)
    hex: str = ""


@dataclass
class Vin:
    addresses: List[str] = field(default_factory=list)


@dataclass
class Vout:
    n: int
    value_sat: int
    script_pub_key: ScriptPubKey = field(default_factory=ScriptPubKey)


@dataclass
class Tx:
    """Canonical transaction."""
    txid: str
    vin: List[Vin] = field(default_factory=list)
    vout: List[Vout] = field(default_factory=list)
    block_time: int = 0
    confirmations: int = 0


@dataclass
class Block:
    """Block header with full transactions, in block order."""
    header: BlockHeader
    txs: List[Tx] = field(default_factory=list)

    @property
    def hash(self) -> str:
        return self.header.hash

    @property
    def prev(self) -> str:
        return self.header.prev

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def size(self) -> int:
        return self.header.size

    @property
    def time(self) -> int:
        return self.header.time


@dataclass
class BlockInfo:
    """
    Extended header with the list of txids.

    Difficulty and nonce are kept verbatim as the node reports them.
    """
    header: BlockHeader
    difficulty: str = ""
    nonce: str = ""
    txids: List[str] = field(default_factory=list)

    @property
    def hash(self) -> str:
        return self.header.hash


@dataclass
class Outpoint:
    txid: str
    vout: int


@dataclass
class MempoolEntry:
    txid: str
    size: int = 0
    fee_sat: int = 0
    time: int = 0
    height: int = 0


@dataclass
class ChainInfo:
    chain: str
    blocks: int = 0
    headers: int = 0
    best_block_hash: str = ""
    difficulty: str = ""
    subversion: str = ""
