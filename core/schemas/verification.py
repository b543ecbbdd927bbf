"""
Module 01 - Schemas & Canonicalization
File: verification.py

Purpose: Result models returned instead of raised.
- CheckResult / VerificationResult: ledger chain audits, one check per
  (block, property) pair
- CoverageResult: a single membership check made for a verifier
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CheckResult(BaseModel):
    """One audited property of one root record."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    check_id: str = Field(..., min_length=1, description="e.g. block_3_link")
    ok: bool
    message: str = ""
    block_number: int | None = Field(default=None, description="Record the check applies to")
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def passed(cls, check_id: str, block_number: int | None = None) -> "CheckResult":
        return cls(check_id=check_id, ok=True, message="ok", block_number=block_number)

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        block_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(
            check_id=check_id,
            ok=False,
            message=message,
            block_number=block_number,
            details=details or {},
        )


class VerificationResult(BaseModel):
    """
    Outcome of auditing a root-record chain.

    ok is True only when every check passed; an empty chain is trivially ok.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool
    checks: list[CheckResult] = Field(default_factory=list)

    @classmethod
    def from_checks(cls, checks: list[CheckResult]) -> "VerificationResult":
        return cls(ok=all(check.ok for check in checks), checks=list(checks))

    def get_failed_checks(self) -> list[CheckResult]:
        return [check for check in self.checks if not check.ok]

    def get_error_messages(self) -> list[str]:
        return [check.message for check in self.get_failed_checks()]

    @property
    def first_broken_block(self) -> int | None:
        """Lowest block number with a failed check, if any."""
        broken = [c.block_number for c in self.get_failed_checks() if c.block_number is not None]
        return min(broken) if broken else None


class CoverageResult(BaseModel):
    """
    Outcome of a coverage verification.

    Mirrors the (user, document hash, valid) triple a verifier receives,
    plus the root and block the proof was checked against.
    """

    model_config = ConfigDict(extra="forbid")

    user: str = Field(..., description="Address whose coverage was checked")
    document_hash: str = Field(..., description="0x-prefixed leaf digest")
    valid: bool = Field(..., description="Whether the proof reproduced the root")
    block_number: int | None = Field(
        default=None,
        description="Root record the proof was checked against",
    )
    merkle_root: str | None = Field(
        default=None,
        description="0x-prefixed root the proof was checked against",
    )
    verifier: str = Field(..., description="Address of the verifier")
    checked_at: datetime = Field(..., description="When the check ran (UTC)")
