"""
chains/nimiq/parser.py - Nimiq wire shapes and mapping to canonical models.

Wire shapes follow the node's JSON. Missing keys take the zero value of the
field; keys present with the wrong JSON type raise MalformedResponseError.
All integer fields are node-native units (Luna), no scaling is applied.

Mappings are pure:
- header_to_block_header: direct copy, height checked against uint32
- tx_to_tx: exactly one input (sender) and one output (recipient, value)
- block_to_block: header once, transactions in response order
"""

from dataclasses import dataclass, field
from typing import Any, List

from core.blockchain import BaseParser
from core.constants import MAX_BLOCK_HEIGHT
from core.exceptions import MalformedResponseError
from core.models import (
    AddressDescriptor,
    Block,
    BlockHeader,
    ScriptPubKey,
    Tx,
    Vin,
    Vout,
)


# In case of Nimiq the AddressDescriptor has fixed length
ADDRESS_DESCRIPTOR_LEN = 20

# Number of decimal points in Nimiq amounts (1 NIM = 100000 Luna)
NIMIQ_AMOUNT_DECIMAL_POINT = 5

# User-friendly address format: "NQ" + 2 IBAN check digits + 32 base32 chars
ADDRESS_COUNTRY_CODE = "NQ"
ADDRESS_ALPHABET = "0123456789ABCDEFGHJKLMNPQRSTUVXY"


# =============================================================================
# FIELD DECODING
# =============================================================================

def _require_object(data: Any, shape: str) -> dict:
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"{shape}: expected JSON object, got {type(data).__name__}",
            details={"shape": shape},
        )
    return data


def _str_field(data: dict, key: str, shape: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedResponseError(
            f"{shape}.{key}: expected string, got {type(value).__name__}",
            details={"shape": shape, "field": key},
        )
    return value


def _int_field(data: dict, key: str, shape: str, unsigned: bool = False) -> int:
    value = data.get(key)
    if value is None:
        return 0
    # bool is an int subclass but never a valid JSON number here
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedResponseError(
            f"{shape}.{key}: expected integer, got {type(value).__name__}",
            details={"shape": shape, "field": key},
        )
    if unsigned and value < 0:
        raise MalformedResponseError(
            f"{shape}.{key}: expected unsigned integer, got {value}",
            details={"shape": shape, "field": key},
        )
    return value


def _list_field(data: dict, key: str, shape: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponseError(
            f"{shape}.{key}: expected array, got {type(value).__name__}",
            details={"shape": shape, "field": key},
        )
    return value


# =============================================================================
# WIRE SHAPES
# =============================================================================

@dataclass
class RpcHeader:
    """Node's view of a block header."""
    number: int = 0
    hash: str = ""
    pow: str = ""
    parent_hash: str = ""
    nonce: str = ""
    body_hash: str = ""
    accounts_hash: str = ""
    miner: str = ""
    miner_address: str = ""
    difficulty: str = ""
    extra_data: str = ""
    size: int = 0
    time: int = 0

    @classmethod
    def from_json(cls, data: Any) -> "RpcHeader":
        shape = "header"
        data = _require_object(data, shape)
        nonce = data.get("nonce")
        # nonce is an integer on some node versions, keep its decimal form
        if isinstance(nonce, int) and not isinstance(nonce, bool):
            nonce = str(nonce)
        else:
            nonce = _str_field(data, "nonce", shape)
        return cls(
            number=_int_field(data, "number", shape),
            hash=_str_field(data, "hash", shape),
            pow=_str_field(data, "pow", shape),
            parent_hash=_str_field(data, "parentHash", shape),
            nonce=nonce,
            body_hash=_str_field(data, "bodyHash", shape),
            accounts_hash=_str_field(data, "accountsHash", shape),
            miner=_str_field(data, "miner", shape),
            miner_address=_str_field(data, "minerAddress", shape),
            difficulty=_str_field(data, "difficulty", shape),
            extra_data=_str_field(data, "extraData", shape),
            size=_int_field(data, "size", shape, unsigned=True),
            time=_int_field(data, "timestamp", shape),
        )


@dataclass
class RpcTx:
    """Node's view of a transaction."""
    hash: str = ""
    block_hash: str = ""
    timestamp: int = 0
    confirmations: int = 0
    transaction_index: int = 0
    from_: str = ""
    from_address: str = ""
    to: str = ""
    to_address: str = ""
    value: int = 0
    fee: int = 0

    @classmethod
    def from_json(cls, data: Any) -> "RpcTx":
        shape = "transaction"
        data = _require_object(data, shape)
        return cls(
            hash=_str_field(data, "hash", shape),
            block_hash=_str_field(data, "blockHash", shape),
            timestamp=_int_field(data, "timestamp", shape, unsigned=True),
            confirmations=_int_field(data, "confirmations", shape),
            transaction_index=_int_field(data, "transactionIndex", shape),
            from_=_str_field(data, "from", shape),
            from_address=_str_field(data, "fromAddress", shape),
            to=_str_field(data, "to", shape),
            to_address=_str_field(data, "toAddress", shape),
            value=_int_field(data, "value", shape, unsigned=True),
            fee=_int_field(data, "fee", shape, unsigned=True),
        )


@dataclass
class RpcLightBlock:
    """Block body with transaction hashes only (verbose flag off)."""
    txs: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "RpcLightBlock":
        shape = "light block"
        data = _require_object(data, shape)
        txs = _list_field(data, "transactions", shape)
        for i, txid in enumerate(txs):
            if not isinstance(txid, str):
                raise MalformedResponseError(
                    f"{shape}.transactions[{i}]: expected string, got {type(txid).__name__}",
                    details={"shape": shape, "field": "transactions", "index": i},
                )
        return cls(txs=list(txs))


@dataclass
class RpcBlock:
    """Block body with full transaction records (verbose flag on)."""
    txs: List[RpcTx] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "RpcBlock":
        shape = "block"
        data = _require_object(data, shape)
        return cls(txs=[RpcTx.from_json(tx) for tx in _list_field(data, "transactions", shape)])


# =============================================================================
# ADDRESSES
# =============================================================================

def _iban_check(value: str) -> int:
    digits = "".join(c if c.isdigit() else str(ord(c) - 55) for c in value.upper())
    return int(digits) % 97


def _to_base32(data: bytes) -> str:
    bits = len(data) * 8
    number = int.from_bytes(data, "big")
    return "".join(
        ADDRESS_ALPHABET[(number >> shift) & 0x1F]
        for shift in range(bits - 5, -1, -5)
    )


def _from_base32(text: str) -> bytes:
    number = 0
    for c in text:
        index = ADDRESS_ALPHABET.find(c)
        if index < 0:
            raise ValueError(f"Invalid address character {c!r}")
        number = (number << 5) | index
    return number.to_bytes(len(text) * 5 // 8, "big")


def to_user_friendly_address(addr_desc: AddressDescriptor, with_spaces: bool = True) -> str:
    """
    Format a 20-byte address as "NQxx XXXX ...".

    >>> to_user_friendly_address(bytes(20))
    'NQ07 0000 0000 0000 0000 0000 0000 0000 0000'
    """
    if len(addr_desc) != ADDRESS_DESCRIPTOR_LEN:
        raise ValueError(f"Address descriptor must be {ADDRESS_DESCRIPTOR_LEN} bytes")
    base32 = _to_base32(addr_desc)
    check = f"{98 - _iban_check(base32 + ADDRESS_COUNTRY_CODE + '00'):02d}"
    address = ADDRESS_COUNTRY_CODE + check + base32
    if with_spaces:
        return " ".join(address[i:i + 4] for i in range(0, len(address), 4))
    return address


def from_user_friendly_address(address: str) -> AddressDescriptor:
    """Parse "NQxx XXXX ..." into its 20-byte form, validating check digits."""
    address = address.replace(" ", "").upper()
    if not address.startswith(ADDRESS_COUNTRY_CODE):
        raise ValueError(f"Address must start with {ADDRESS_COUNTRY_CODE}")
    if len(address) != 36:
        raise ValueError("Address must be 36 characters long without spaces")
    if _iban_check(address[4:] + address[:4]) != 1:
        raise ValueError("Invalid address checksum")
    return _from_base32(address[4:])


# =============================================================================
# PARSER
# =============================================================================

class NimiqParser(BaseParser):
    """Maps Nimiq wire shapes onto the canonical model."""

    def __init__(self, block_addresses_to_keep: int):
        super().__init__(
            block_addresses_to_keep=block_addresses_to_keep,
            amount_decimal_point=NIMIQ_AMOUNT_DECIMAL_POINT,
        )

    def header_to_block_header(self, header: RpcHeader) -> BlockHeader:
        if not 0 <= header.number <= MAX_BLOCK_HEIGHT:
            raise MalformedResponseError(
                f"Block height {header.number} out of range",
                details={"hash": header.hash, "height": header.number},
            )
        return BlockHeader(
            hash=header.hash,
            prev=header.parent_hash,
            height=header.number,
            size=header.size,
            time=header.time,
        )

    def tx_to_tx(self, tx: RpcTx) -> Tx:
        return Tx(
            txid=tx.hash,
            vin=[Vin(addresses=[tx.from_])],
            vout=[
                Vout(
                    n=0,
                    value_sat=tx.value,
                    script_pub_key=ScriptPubKey(addresses=[tx.to]),
                )
            ],
        )

    def block_to_block(self, header: RpcHeader, body: RpcBlock) -> Block:
        return Block(
            header=self.header_to_block_header(header),
            txs=[self.tx_to_tx(tx) for tx in body.txs],
        )

    def get_addr_desc_from_address(self, address: str) -> AddressDescriptor:
        """
        Convert an address to its descriptor.

        Accepts the hex form used in transactions (with or without 0x)
        and the user-friendly "NQ.." form.
        """
        compact = address.replace(" ", "")
        if compact[:2].upper() == ADDRESS_COUNTRY_CODE:
            return from_user_friendly_address(compact)
        if compact[:2].lower() == "0x":
            compact = compact[2:]
        desc = bytes.fromhex(compact)
        if len(desc) != ADDRESS_DESCRIPTOR_LEN:
            raise ValueError(f"Address must be {ADDRESS_DESCRIPTOR_LEN} bytes, got {len(desc)}")
        return desc

    def get_addresses_from_addr_desc(self, addr_desc: AddressDescriptor) -> List[str]:
        """Addresses in the hex form transactions carry them."""
        if len(addr_desc) != ADDRESS_DESCRIPTOR_LEN:
            raise ValueError(f"Address descriptor must be {ADDRESS_DESCRIPTOR_LEN} bytes")
        return [addr_desc.hex()]
