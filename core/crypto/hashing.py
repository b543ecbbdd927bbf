"""
Module 02 - Hashing Utilities
Keccak-256 hashing used for leaf commitments, Merkle parents and root records.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- Keccak-256 hashing for raw bytes (Ethereum variant, not NIST SHA3-256)
- Sorted-pair parent hashing for Merkle nodes
- Canonical hashing for objects (via dumps_canonical)
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Every digest is exactly DIGEST_SIZE bytes
- Record encoding is the caller's responsibility; bytes are hashed exactly as given
- All operations are deterministic
"""
from __future__ import annotations

from typing import Any

from eth_utils import keccak

from core.schemas.canonical import dumps_canonical


# Width of every leaf, node, root and proof entry
DIGEST_SIZE: int = 32

# Used as previous_block_hash of the first root record
ZERO_DIGEST: bytes = b"\x00" * DIGEST_SIZE


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=bytes(data))


def hash_record(data: bytes) -> bytes:
    """
    Compute the leaf digest of an already-encoded record.

    This is the single hash-commitment entry point for leaves. Any byte
    sequence is valid input.
    """
    return keccak256(data)


def hash_text(text: str) -> bytes:
    """Hash a UTF-8 string (used for ad-hoc leaves such as names or labels)."""
    return keccak256(text.encode("utf-8"))


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: digest = keccak256(dumps_canonical(obj).encode("utf-8"))

    Args:
        obj: Any object that can be canonically serialized
             (Pydantic model, dict, list, primitives)

    Returns:
        32-byte Keccak-256 digest of the canonical JSON

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return keccak256(canonical_json.encode("utf-8"))


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Hash two child digests in sorted-pair order.

    parent = keccak256(min(a, b) + max(a, b))

    Byte-wise ordering makes the parent independent of which child sits on
    the left, so proofs carry no position flags.
    """
    if a <= b:
        return keccak256(a + b)
    return keccak256(b + a)


def is_digest(value: Any) -> bool:
    """True if value is a bytes-like object of exactly DIGEST_SIZE bytes."""
    return isinstance(value, (bytes, bytearray)) and len(value) == DIGEST_SIZE


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + bytes(data).hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not isinstance(hex_string, str) or not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {str(hex_string)[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def digest_from_hex(hex_string: str) -> bytes:
    """
    Decode a 0x-prefixed hex string that must hold exactly one digest.

    Raises:
        ValueError: If the string is not valid hex or not DIGEST_SIZE bytes
    """
    data = from_hex(hex_string)
    if len(data) != DIGEST_SIZE:
        raise ValueError(
            f"Expected a {DIGEST_SIZE}-byte digest, got {len(data)} bytes"
        )
    return data


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
