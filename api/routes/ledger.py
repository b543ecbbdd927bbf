"""
Module 08 - Ledger Routes

Root-record chain access:
- GET  /ledger/current        latest record
- GET  /ledger/history        every record, oldest first
- GET  /ledger/stats          totals
- GET  /ledger/blocks/{n}     one record
- GET  /ledger/verify         chain audit
- POST /ledger/publish        insurer publishes a documents batch
- POST /ledger/respond        proof for a leaf from a stored tree
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from api.deps import get_service
from api.models.requests import PublishRequest, RespondRequest
from api.models.responses import ChainVerificationResponse, ProofResponse, PublishResponse
from api.routes.merkle import parse_leaves
from core.schemas.errors import ErrorCodes, RootChainException
from core.schemas.records import LedgerStatistics, RootRecord


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ledger", tags=["ledger"])


@router.get("/current", response_model=RootRecord)
async def current_block() -> RootRecord:
    record = get_service().ledger.current()
    if record is None:
        raise RootChainException("No blocks published", code=ErrorCodes.BLOCK_NOT_FOUND)
    return record


@router.get("/history", response_model=list[RootRecord])
async def history() -> list[RootRecord]:
    return get_service().ledger.history()


@router.get("/stats", response_model=LedgerStatistics)
async def statistics() -> LedgerStatistics:
    return get_service().ledger.statistics()


@router.get("/blocks/{block_number}", response_model=RootRecord)
async def get_block(block_number: int) -> RootRecord:
    return get_service().ledger.get(block_number)


@router.get("/verify", response_model=ChainVerificationResponse)
async def verify_chain() -> ChainVerificationResponse:
    ledger = get_service().ledger
    result = ledger.verify_chain()
    return ChainVerificationResponse(
        ok=result.ok,
        blocks=len(ledger),
        errors=result.get_error_messages(),
    )


@router.post("/publish", response_model=PublishResponse)
def publish(request: PublishRequest) -> PublishResponse:
    """
    Commit a documents batch and publish its root.

    Runs in the threadpool; concurrent publishes are serialized by the ledger.
    """
    result = get_service().publish_documents(request.insurer, request.documents)
    data = result.to_dict()
    return PublishResponse(ok=True, record=data["record"], documents=data["documents"])


@router.post("/respond", response_model=ProofResponse)
async def respond(request: RespondRequest) -> ProofResponse:
    """Answer a proof request from the tree stored for a block."""
    leaf = parse_leaves([request.leaf])[0]
    proof = get_service().respond_proof(request.block_number, leaf)
    return ProofResponse(**proof.to_dict())
