"""
Module 08 - Health Check Route

Liveness probe plus the ledger head, so operators can see at a glance
whether roots are being published.
"""

from fastapi import APIRouter

from api.deps import get_service
from api.models.responses import HealthResponse


router = APIRouter(tags=["health"])


def _health() -> HealthResponse:
    ledger = get_service().ledger
    current = ledger.current()
    return HealthResponse(
        ok=True,
        blocks=len(ledger),
        current_root=current.merkle_root if current else None,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Service status and the current ledger head."""
    return _health()


@router.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Root endpoint - same as health check."""
    return _health()
