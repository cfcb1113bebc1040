"""
chains/nimiq/networks.py - Known Nimiq networks.

A node is fingerprinted by the hash of its genesis block (height 1).
Hashes are hex-encoded, 32 bytes, and must match exactly.

Only the main network hash is built in. Test and dev network hashes are
deployment data and come from the coin configuration
(testnet_genesis_hash, devnet_genesis_hash); a node on a network whose
hash is not configured fails classification.
"""

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional

from core.exceptions import ConfigurationError, NetworkClassificationError


class NimiqNet(IntEnum):
    """Nimiq network ids."""
    MAIN_NET = 42
    TEST_NET = 1
    DEV_NET = 2


MAINNET_GENESIS_HASH = "264aaf8a4f9828a76c550635da078eb466306a189fcc03710bee9f649c869d12"

_HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")


@dataclass(frozen=True)
class NetworkInfo:
    name: str
    testnet: bool
    net_id: NimiqNet


MAINNET = NetworkInfo("mainnet", False, NimiqNet.MAIN_NET)
TESTNET = NetworkInfo("testnet", True, NimiqNet.TEST_NET)
DEVNET = NetworkInfo("devnet", True, NimiqNet.DEV_NET)


def build_genesis_table(
    testnet_hash: str = "",
    devnet_hash: str = "",
) -> Dict[str, NetworkInfo]:
    """
    Build the genesis hash -> network table.

    Args:
        testnet_hash: Genesis hash of the test network, "" if not known
        devnet_hash: Genesis hash of the dev network, "" if not known

    Raises:
        ConfigurationError: If a hash is not 32 bytes of lowercase hex,
            or two networks share a hash
    """
    table = {MAINNET_GENESIS_HASH: MAINNET}
    for key, value, network in (
        ("testnet_genesis_hash", testnet_hash, TESTNET),
        ("devnet_genesis_hash", devnet_hash, DEVNET),
    ):
        if not value:
            continue
        if not _HASH_PATTERN.match(value):
            raise ConfigurationError(
                f"Invalid configuration file: {key} must be 64 lowercase hex characters",
                details={"field": key, "value": value},
            )
        if value in table:
            raise ConfigurationError(
                f"Invalid configuration file: {key} is already the {table[value].name} genesis",
                details={"field": key, "value": value},
            )
        table[value] = network
    return table


GENESIS_NETWORKS: Dict[str, NetworkInfo] = build_genesis_table()


def classify_genesis(
    genesis_hash: str,
    networks: Optional[Dict[str, NetworkInfo]] = None,
) -> NetworkInfo:
    """
    Map a genesis block hash to its network.

    Raises:
        NetworkClassificationError: If the hash is not one of the known networks
    """
    if networks is None:
        networks = GENESIS_NETWORKS
    network = networks.get(genesis_hash)
    if network is None:
        raise NetworkClassificationError(
            f"Unknown network genesis {genesis_hash}",
            details={"genesis_hash": genesis_hash},
        )
    return network
