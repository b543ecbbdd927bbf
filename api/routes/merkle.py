"""
Module 08 - Merkle Routes

Stateless tree operations over caller-supplied leaves:
- POST /merkle/build     root, leaf count and depth
- POST /merkle/prove     proof for one leaf (by index or value)
- POST /merkle/verify    check a proof against a root
- POST /documents/hash   leaf hashes of insurance documents
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from api.errors import InvalidRequestError
from api.models.requests import BuildRequest, DocumentsRequest, ProveRequest, VerifyProofRequest
from api.models.responses import (
    BuildResponse,
    DocumentHash,
    DocumentsHashResponse,
    ProofResponse,
    VerifyProofResponse,
)
from core.crypto.hashing import digest_from_hex, to_hex
from core.merkle.merkle_proofs import MerkleVerifier
from core.merkle.merkle_tree import build_merkle_tree
from core.schemas.documents import hash_document
from core.schemas.errors import InvalidDigestError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["merkle"])


def parse_leaves(values: list[str]) -> list[bytes]:
    """Decode hex leaves, reporting the first bad position."""
    leaves = []
    for position, value in enumerate(values):
        try:
            leaves.append(digest_from_hex(value))
        except ValueError as e:
            raise InvalidDigestError(f"Invalid leaf at position {position}: {e}", position=position) from e
    return leaves


@router.post("/merkle/build", response_model=BuildResponse)
async def build_tree(request: BuildRequest) -> BuildResponse:
    """Build a tree over the leaves and return its root."""
    tree = build_merkle_tree(parse_leaves(request.leaves))
    logger.debug("Built tree over %d leaves", len(tree))
    return BuildResponse(root=to_hex(tree.root), count=len(tree), depth=tree.depth)


@router.post("/merkle/prove", response_model=ProofResponse)
async def prove_leaf(request: ProveRequest) -> ProofResponse:
    """Generate a membership proof for one leaf."""
    tree = build_merkle_tree(parse_leaves(request.leaves))

    if request.leaf is not None:
        proof = tree.proof_for_leaf(parse_leaves([request.leaf])[0])
    else:
        if request.index >= len(tree):
            raise InvalidRequestError(
                f"Index {request.index} out of range for {len(tree)} leaves",
                details={"index": request.index, "count": len(tree)},
            )
        proof = tree.proof(request.index)

    return ProofResponse(**proof.to_dict())


@router.post("/merkle/verify", response_model=VerifyProofResponse)
async def verify_proof(request: VerifyProofRequest) -> VerifyProofResponse:
    """Verify a proof. Malformed digests yield valid=false."""
    return VerifyProofResponse(
        valid=MerkleVerifier.verify_hex(request.proof, request.root, request.leaf)
    )


@router.post("/documents/hash", response_model=DocumentsHashResponse)
async def hash_documents(request: DocumentsRequest) -> DocumentsHashResponse:
    """Leaf hash of each document, in request order."""
    return DocumentsHashResponse(
        hashes=[
            DocumentHash(policy_number=doc.policy_number, hash=to_hex(hash_document(doc)))
            for doc in request.documents
        ]
    )
