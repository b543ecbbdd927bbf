"""
Module 03 - Ledger

Append-only root-record chain and the insurer's off-chain tree store.
"""

from .root_chain import GENESIS_PREVIOUS_HASH, RootLedger, verify_records
from .store import StoreIOError, TreeStore, read_json_file, write_json_file

__all__ = [
    "GENESIS_PREVIOUS_HASH",
    "RootLedger",
    "verify_records",
    "StoreIOError",
    "TreeStore",
    "read_json_file",
    "write_json_file",
]
