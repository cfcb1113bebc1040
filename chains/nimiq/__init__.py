"""
chains.nimiq - Nimiq backend adapter.
"""

from chains.nimiq.networks import NetworkInfo, NimiqNet, build_genesis_table, classify_genesis
from chains.nimiq.parser import NimiqParser
from chains.nimiq.rpc import Configuration, NimiqRPC

__all__ = [
    "Configuration",
    "NetworkInfo",
    "NimiqNet",
    "NimiqParser",
    "NimiqRPC",
    "build_genesis_table",
    "classify_genesis",
]
