"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the dependency-free part of the schemas package.

Document and root-record models hash themselves through core.crypto,
which in turn depends on canonical.py; import them from
core.schemas.documents and core.schemas.records directly.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
)

# Error models and exceptions
from .errors import (
    AuthorizationException,
    CanonicalizationException,
    CoverPassException,
    EmptyInputError,
    InvalidAccountError,
    ErrorCodes,
    InvalidDigestError,
    LeafNotFoundError,
    RootChainException,
)

# Verification results
from .verification import (
    CheckResult,
    CoverageResult,
    VerificationResult,
)


__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    # Errors
    "AuthorizationException",
    "CanonicalizationException",
    "CoverPassException",
    "EmptyInputError",
    "InvalidAccountError",
    "ErrorCodes",
    "InvalidDigestError",
    "LeafNotFoundError",
    "RootChainException",
    # Verification
    "CheckResult",
    "CoverageResult",
    "VerificationResult",
]
