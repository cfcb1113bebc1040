# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for nimbook tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


BLOCK_HASH = "14c91f6d6f3a0b62271e546bb09461231ab7e4d1ddc2c3e1b93de52d48a1da87"
PARENT_HASH = "264aaf8a4f9828a76c550635da078eb466306a189fcc03710bee9f649c869d12"
TX_HASH_1 = "78957b87ab49546932a9ce7d1c14b8b0e3c9a3a8e2f4d5c6b7a8f9e0d1c2b3a4"
TX_HASH_2 = "a2f4c6e8b0d2f4a6c8e0b2d4f6a8c0e2b4d6f8a0c2e4b6d8f0a2c4e6b8d0f2a4"
SENDER = "ad25610feb43d75307763d3f010822a757027429"
RECIPIENT = "824aa01033c89595479bab9d8deb2d7d4d0bd2c8"


def make_tx(tx_hash: str, value: int = 100000, fee: int = 138) -> dict:
    return {
        "hash": tx_hash,
        "blockHash": BLOCK_HASH,
        "blockNumber": 2,
        "timestamp": 1523412521,
        "confirmations": 5,
        "transactionIndex": 0,
        "from": SENDER,
        "fromAddress": "NQ15 MLJN 23YB 8FBM 61TN 7LYG 2212 LVBG 4V19",
        "to": RECIPIENT,
        "toAddress": "NQ27 GH5A 044K R2AR AHUT MEEQ TSRD FM6G PLN8",
        "value": value,
        "fee": fee,
        "data": None,
        "flags": 0,
    }


def make_block(transactions: list, number: int = 2, block_hash: str = BLOCK_HASH) -> dict:
    return {
        "number": number,
        "hash": block_hash,
        "pow": "00000a8fa1aa2e9c6d7a5cdbd5a0e7c0e3e3ef2bb9fb4b4cd0f0b1a5fd1a8a77",
        "parentHash": PARENT_HASH,
        "nonce": 53167,
        "bodyHash": "4c2ad5ea3d6bb1e6e4d6a1b1fbe0e57b1ed1b1e7e43e3b63c0fe1d0f1c1b0ab2",
        "accountsHash": "3cb5dcb09bdb4e1b2bcd4c9b5a3e3f1b1b1c5e8c3b2d4f6e0f1a2b3c4d5e6f7a",
        "miner": RECIPIENT,
        "minerAddress": "NQ27 GH5A 044K R2AR AHUT MEEQ TSRD FM6G PLN8",
        "difficulty": "1",
        "extraData": "",
        "size": 215,
        "timestamp": 1523412456,
        "transactions": transactions,
    }


@pytest.fixture
def full_block_payload() -> dict:
    """Verbose block with two transactions."""
    return make_block([make_tx(TX_HASH_1, value=250000), make_tx(TX_HASH_2, value=7)])


@pytest.fixture
def light_block_payload() -> dict:
    """Non-verbose block carrying transaction hashes only."""
    return make_block([TX_HASH_1, TX_HASH_2])


@pytest.fixture
def tx_payload() -> dict:
    return make_tx(TX_HASH_1)
