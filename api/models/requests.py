"""
Module 08 - API Request Models

Pydantic models for API request validation.

Digests travel as 0x-prefixed hex strings. Request models check shape
only; malformed digests in /merkle/verify are reported as valid=false
rather than rejected.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from core.schemas.documents import InsuranceDocument


class BuildRequest(BaseModel):
    """Request body for POST /merkle/build."""

    leaves: list[str] = Field(
        ...,
        description="0x-prefixed 32-byte leaf digests, in tree order",
    )


class ProveRequest(BaseModel):
    """Request body for POST /merkle/prove. Exactly one of index or leaf."""

    leaves: list[str] = Field(..., description="0x-prefixed leaf digests")
    index: Optional[int] = Field(default=None, ge=0, description="Leaf index")
    leaf: Optional[str] = Field(default=None, description="Leaf digest to prove by value")

    @model_validator(mode="after")
    def _one_target(self) -> "ProveRequest":
        if (self.index is None) == (self.leaf is None):
            raise ValueError("Provide exactly one of 'index' or 'leaf'")
        return self


class VerifyProofRequest(BaseModel):
    """Request body for POST /merkle/verify."""

    proof: list[str] = Field(default_factory=list, description="Sibling digests, leaf level first")
    root: str = Field(..., description="Claimed root")
    leaf: str = Field(..., description="Leaf digest")


class DocumentsRequest(BaseModel):
    """Request body for POST /documents/hash."""

    documents: list[InsuranceDocument] = Field(..., min_length=1)


class PublishRequest(BaseModel):
    """Request body for POST /ledger/publish."""

    insurer: str = Field(..., description="Insurer account publishing the batch")
    documents: list[InsuranceDocument] = Field(..., min_length=1)


class RespondRequest(BaseModel):
    """Request body for POST /ledger/respond."""

    block_number: int = Field(..., ge=1)
    leaf: str = Field(..., description="Document hash to prove")


class CoverageRequest(BaseModel):
    """Request body for POST /coverage/verify."""

    verifier: str = Field(..., description="Verifier account")
    user: str = Field(..., description="Policy holder account")
    leaf: str = Field(..., description="Document hash")
    proof: list[str] = Field(default_factory=list, description="Sibling digests")
    block_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="Block to check against (default: current)",
    )
