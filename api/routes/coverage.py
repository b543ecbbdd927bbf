"""
Module 08 - Coverage Route

POST /coverage/verify: a whitelisted verifier checks a user's document
hash against a published root.
"""

from __future__ import annotations

from fastapi import APIRouter

from api.deps import get_service
from api.models.requests import CoverageRequest
from core.schemas.verification import CoverageResult


router = APIRouter(prefix="/coverage", tags=["coverage"])


@router.post("/verify", response_model=CoverageResult)
def verify_coverage(request: CoverageRequest) -> CoverageResult:
    """
    Verify coverage.

    403 if the caller lacks the verifier role, 404 if the block does not
    exist; an invalid proof is a 200 with valid=false.
    """
    return get_service().verify_coverage(
        verifier=request.verifier,
        user=request.user,
        leaf=request.leaf,
        proof=request.proof,
        block_number=request.block_number,
    )
