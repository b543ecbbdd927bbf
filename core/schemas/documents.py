"""
Module 01 - Schemas & Canonicalization
File: documents.py

Purpose: Insurance document records and their leaf commitment.

Leaf rule (fixed, shared by insurer and verifier):
    leaf = keccak256(abi.encode(address user, string policyNumber,
                                string coverage, string expiryDate,
                                string amount))

The ABI encoding is length-prefixed per field, so no two distinct documents
share an encoding.
"""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import encode as abi_encode
from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import hash_record, to_hex


# ABI types of the encoded tuple, in field order
DOCUMENT_ABI_TYPES: tuple[str, ...] = ("address", "string", "string", "string", "string")


class InsuranceDocument(BaseModel):
    """
    One insurance policy committed by an insurer.

    JSON uses the camelCase names of the original data files
    (policyNumber, expiryDate); Python code uses snake_case.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    user: str = Field(..., description="Policy holder EVM address")
    policy_number: str = Field(..., alias="policyNumber", min_length=1)
    coverage: str = Field(..., description="Coverage type, e.g. 'Health Insurance'")
    expiry_date: str = Field(..., alias="expiryDate")
    amount: str = Field(..., description="Covered amount as a decimal string")

    @field_validator("user")
    @classmethod
    def _checksum_user(cls, value: str) -> str:
        if not is_address(value):
            raise ValueError(f"Invalid EVM address: {value!r}")
        return to_checksum_address(value)

    def encode(self) -> bytes:
        """ABI-encode the document fields in their fixed order."""
        return abi_encode(
            list(DOCUMENT_ABI_TYPES),
            [self.user, self.policy_number, self.coverage, self.expiry_date, self.amount],
        )

    def leaf(self) -> bytes:
        """32-byte leaf digest of this document."""
        return hash_document(self)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class DocumentWithProof(InsuranceDocument):
    """A document together with its leaf hash and membership proof (hex)."""

    hash: str = Field(..., description="0x-prefixed leaf digest")
    proof: list[str] = Field(default_factory=list, description="0x-prefixed sibling digests")


def hash_document(doc: InsuranceDocument) -> bytes:
    """Compute the leaf digest of an insurance document."""
    return hash_record(doc.encode())


def hash_documents(docs: Sequence[InsuranceDocument]) -> list[bytes]:
    """Leaf digests for a batch of documents, in input order."""
    return [hash_document(doc) for doc in docs]


def document_hash_hex(doc: InsuranceDocument) -> str:
    return to_hex(hash_document(doc))


def sample_documents() -> list[InsuranceDocument]:
    """The three demo policies shipped with the insurer tooling."""
    return [
        InsuranceDocument(
            user="0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
            policy_number="POL-001-2024",
            coverage="Health Insurance",
            expiry_date="2024-12-31",
            amount="10000",
        ),
        InsuranceDocument(
            user="0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
            policy_number="POL-002-2024",
            coverage="Auto Insurance",
            expiry_date="2024-12-31",
            amount="5000",
        ),
        InsuranceDocument(
            user="0x90F79bf6EB2c4f870365E785982E1f101E93b906",
            policy_number="POL-003-2024",
            coverage="Life Insurance",
            expiry_date="2024-12-31",
            amount="50000",
        ),
    ]


__all__ = [
    "DOCUMENT_ABI_TYPES",
    "InsuranceDocument",
    "DocumentWithProof",
    "hash_document",
    "hash_documents",
    "document_hash_hex",
    "sample_documents",
]
