"""
Core cryptographic utilities.

Module 02 provides Keccak-256 hashing for leaves, Merkle parents and
root-record block hashes.
"""
from .hashing import (
    DIGEST_SIZE,
    ZERO_DIGEST,
    keccak256,
    hash_record,
    hash_text,
    hash_canonical,
    hash_pair,
    is_digest,
    to_hex,
    from_hex,
    digest_from_hex,
)

__all__ = [
    "DIGEST_SIZE",
    "ZERO_DIGEST",
    "keccak256",
    "hash_record",
    "hash_text",
    "hash_canonical",
    "hash_pair",
    "is_digest",
    "to_hex",
    "from_hex",
    "digest_from_hex",
]
