"""
Common test fixtures shared by all modules.

Provides factory functions for core CoverPass data structures:
- Leaves (32-byte digests)
- InsuranceDocument batches
- A CoverPassService over a temporary data directory, with roles granted

These are the foundational building blocks used by higher-level fixtures.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from core.access.events import EventLog
from core.access.roles import Role, RoleRegistry
from core.coverpass import CoverPassService
from core.crypto.hashing import hash_text
from core.ledger.root_chain import RootLedger
from core.ledger.store import TreeStore
from core.schemas.documents import InsuranceDocument


# Well-known development accounts
ADMIN = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
INSURER = "0x15d34AAf54267DB7D7c367839AAf71A00a2C6A65"
VERIFIER = "0x9965507D1a55bcC2695C58ba16FB37d819B0A4dc"
HOLDERS = [
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
    "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
    "0x90F79bf6EB2c4f870365E785982E1f101E93b906",
]


# =============================================================================
# Leaves and Documents
# =============================================================================

def make_leaves(n: int, prefix: str = "leaf") -> list[bytes]:
    """n distinct 32-byte leaves derived from labels."""
    return [hash_text(f"{prefix}-{i}") for i in range(n)]


def make_document(
    index: int = 0,
    user: Optional[str] = None,
    coverage: str = "Health Insurance",
    amount: str = "10000",
) -> InsuranceDocument:
    return InsuranceDocument(
        user=user or HOLDERS[index % len(HOLDERS)],
        policy_number=f"POL-{index + 1:03d}-2025",
        coverage=coverage,
        expiry_date="2025-12-31",
        amount=amount,
    )


def make_documents(n: int = 3) -> list[InsuranceDocument]:
    return [make_document(i) for i in range(n)]


# =============================================================================
# Clock
# =============================================================================

def make_clock(
    start: datetime = datetime(2025, 1, 1, tzinfo=timezone.utc),
    step: timedelta = timedelta(minutes=1),
) -> Callable[[], datetime]:
    """Deterministic clock advancing by `step` on every call."""
    state = {"now": start - step}

    def _clock() -> datetime:
        state["now"] = state["now"] + step
        return state["now"]

    return _clock


# =============================================================================
# Service
# =============================================================================

def make_service(
    data_dir: Optional[Path] = None,
    grant_roles: bool = True,
) -> CoverPassService:
    """
    Service over files in data_dir (in-memory if None).

    With grant_roles, INSURER holds the insurer role and VERIFIER the
    verifier role.
    """
    def _path(name: str) -> Optional[Path]:
        return data_dir / name if data_dir is not None else None

    service = CoverPassService(
        ledger=RootLedger(_path("ledger.json"), clock=make_clock()),
        trees=TreeStore(_path("insurer_merkle_trees.json")),
        roles=RoleRegistry(admin=ADMIN, path=_path("roles.json")),
        events=EventLog(_path("events.json")),
        clock=make_clock(),
    )
    if grant_roles:
        service.grant_role(ADMIN, Role.INSURER, INSURER)
        service.grant_role(ADMIN, Role.VERIFIER, VERIFIER)
    return service
