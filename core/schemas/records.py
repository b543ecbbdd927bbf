"""
Module 01 - Schemas & Canonicalization
File: records.py

Purpose: Root records (the hash-linked chain of published commitments)
and the insurer's off-chain tree records.

Block hash rule:
    block_hash = keccak256(dumps_canonical({block_number, merkle_root,
                 timestamp, insurer, previous_block_hash, insurance_count}))
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import hash_canonical, to_hex
from core.schemas.canonical import ensure_utc


# Fields covered by the block hash, in declaration order
COMMITTED_FIELDS: tuple[str, ...] = (
    "block_number",
    "merkle_root",
    "timestamp",
    "insurer",
    "previous_block_hash",
    "insurance_count",
)


class RootRecord(BaseModel):
    """
    One published Merkle root with its metadata.

    Each record references the block hash of its predecessor; the first
    record references 32 zero bytes.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    block_number: int = Field(..., ge=1, description="Sequence number, starting at 1")
    merkle_root: str = Field(..., description="0x-prefixed 32-byte root")
    timestamp: datetime = Field(..., description="Issuance time (UTC)")
    insurer: str = Field(..., description="Address of the issuing insurer")
    previous_block_hash: str = Field(..., description="Block hash of the preceding record")
    insurance_count: int = Field(..., ge=1, description="Number of leaves under the root")
    block_hash: str = Field(default="", description="Hash over the committed fields")

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def committed_payload(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in COMMITTED_FIELDS}

    def compute_block_hash(self) -> str:
        return to_hex(hash_canonical(self.committed_payload()))

    @classmethod
    def create(
        cls,
        *,
        block_number: int,
        merkle_root: str,
        timestamp: datetime,
        insurer: str,
        previous_block_hash: str,
        insurance_count: int,
    ) -> "RootRecord":
        """Build a record and seal it with its block hash."""
        unsealed = cls(
            block_number=block_number,
            merkle_root=merkle_root,
            timestamp=timestamp,
            insurer=insurer,
            previous_block_hash=previous_block_hash,
            insurance_count=insurance_count,
        )
        return unsealed.model_copy(update={"block_hash": unsealed.compute_block_hash()})


class TreeRecord(BaseModel):
    """Leaf list kept off-chain by the insurer for one published block."""

    model_config = ConfigDict(extra="forbid")

    block_number: int = Field(..., ge=1)
    merkle_root: str = Field(...)
    documents: list[str] = Field(
        default_factory=list,
        description="0x-prefixed leaf digests in tree order",
    )


class LedgerStatistics(BaseModel):
    """Totals across the root-record chain."""

    total_blocks: int = 0
    total_insurance_documents: int = 0


__all__ = [
    "COMMITTED_FIELDS",
    "RootRecord",
    "TreeRecord",
    "LedgerStatistics",
]
