"""API request and response models."""

from api.models.requests import (
    BuildRequest,
    CoverageRequest,
    DocumentsRequest,
    ProveRequest,
    PublishRequest,
    RespondRequest,
    VerifyProofRequest,
)
from api.models.responses import (
    BuildResponse,
    ChainVerificationResponse,
    DocumentHash,
    DocumentsHashResponse,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    ProofResponse,
    PublishResponse,
    VerifyProofResponse,
)

__all__ = [
    "BuildRequest",
    "CoverageRequest",
    "DocumentsRequest",
    "ProveRequest",
    "PublishRequest",
    "RespondRequest",
    "VerifyProofRequest",
    "BuildResponse",
    "ChainVerificationResponse",
    "DocumentHash",
    "DocumentsHashResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "ProofResponse",
    "PublishResponse",
    "VerifyProofResponse",
]
