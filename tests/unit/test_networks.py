"""
tests/unit/test_networks.py - Genesis hash classification.
"""

import pytest

from chains.nimiq.networks import (
    GENESIS_NETWORKS,
    NimiqNet,
    build_genesis_table,
    classify_genesis,
)
from core.constants import ErrorCode
from core.exceptions import ConfigurationError, NetworkClassificationError

MAINNET = "264aaf8a4f9828a76c550635da078eb466306a189fcc03710bee9f649c869d12"
TESTNET = "a1" * 32
DEVNET = "d2" * 32


def test_mainnet_is_built_in():
    network = classify_genesis(MAINNET)

    assert network.name == "mainnet"
    assert network.testnet is False
    assert network.net_id == NimiqNet.MAIN_NET


def test_default_table_holds_only_mainnet():
    assert list(GENESIS_NETWORKS) == [MAINNET]


@pytest.mark.parametrize(
    "genesis_hash,name,testnet,net_id",
    [
        (MAINNET, "mainnet", False, NimiqNet.MAIN_NET),
        (TESTNET, "testnet", True, NimiqNet.TEST_NET),
        (DEVNET, "devnet", True, NimiqNet.DEV_NET),
    ],
)
def test_configured_networks(genesis_hash, name, testnet, net_id):
    table = build_genesis_table(testnet_hash=TESTNET, devnet_hash=DEVNET)

    network = classify_genesis(genesis_hash, table)

    assert network.name == name
    assert network.testnet is testnet
    assert network.net_id == net_id


def test_unconfigured_testnet_is_unknown():
    with pytest.raises(NetworkClassificationError):
        classify_genesis(TESTNET)


@pytest.mark.parametrize(
    "value",
    [
        "a1" * 31,
        "A1" * 32,
        "0x" + "a1" * 31,
        "zz" * 32,
    ],
)
def test_malformed_configured_hash(value):
    with pytest.raises(ConfigurationError) as exc_info:
        build_genesis_table(testnet_hash=value)

    assert exc_info.value.details["field"] == "testnet_genesis_hash"


def test_configured_hash_cannot_shadow_mainnet():
    with pytest.raises(ConfigurationError):
        build_genesis_table(devnet_hash=MAINNET)
    with pytest.raises(ConfigurationError):
        build_genesis_table(testnet_hash=TESTNET, devnet_hash=TESTNET)


def test_unknown_hash_raises():
    with pytest.raises(NetworkClassificationError) as exc_info:
        classify_genesis("00" * 32)

    assert exc_info.value.code == ErrorCode.NETWORK_UNKNOWN
    assert exc_info.value.details["genesis_hash"] == "00" * 32


def test_match_is_exact():
    with pytest.raises(NetworkClassificationError):
        classify_genesis(MAINNET.upper())
    with pytest.raises(NetworkClassificationError):
        classify_genesis(MAINNET[:-2])
