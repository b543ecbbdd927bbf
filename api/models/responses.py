"""
Module 08 - API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "coverpass-api"
    version: str = "v1"
    blocks: int = Field(default=0, description="Root records published so far")
    current_root: str | None = Field(default=None, description="Root of the latest record")


class BuildResponse(BaseModel):
    """Response for POST /merkle/build."""

    root: str = Field(..., description="0x-prefixed Merkle root")
    count: int = Field(..., description="Number of leaves")
    depth: int = Field(..., description="Number of levels, leaves and root included")


class ProofResponse(BaseModel):
    """Response for POST /merkle/prove."""

    proof: list[str] = Field(..., description="Sibling digests, leaf level first")
    root: str
    leaf: str
    index: int


class VerifyProofResponse(BaseModel):
    """Response for POST /merkle/verify."""

    valid: bool


class DocumentHash(BaseModel):
    policy_number: str
    hash: str


class DocumentsHashResponse(BaseModel):
    """Response for POST /documents/hash."""

    hashes: list[DocumentHash] = Field(default_factory=list)


class PublishResponse(BaseModel):
    """Response for POST /ledger/publish."""

    ok: bool = True
    record: dict[str, Any] = Field(..., description="The published root record")
    documents: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Documents with hash and proof, for distribution to policy holders",
    )


class ChainVerificationResponse(BaseModel):
    """Response for GET /ledger/verify."""

    ok: bool
    blocks: int
    errors: list[str] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail
