"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Error codes and exceptions shared by the core, the CLI and the API.

Proof verification never raises: a proof that does not reproduce the
claimed root is reported as False. The exceptions below cover precondition
violations on the producer side, the ledger and the access policy. Each
carries a stable code and a details dict that the API copies into its
error envelope.
"""

from typing import Any


class ErrorCodes:
    """Stable machine-readable error codes."""

    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Merkle
    EMPTY_INPUT = "EMPTY_INPUT"
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"
    INVALID_DIGEST = "INVALID_DIGEST"

    # Ledger
    ROOT_CHAIN_BROKEN = "ROOT_CHAIN_BROKEN"
    BLOCK_NOT_FOUND = "BLOCK_NOT_FOUND"
    TREE_NOT_FOUND = "TREE_NOT_FOUND"

    # Access
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_ACCOUNT = "INVALID_ACCOUNT"


class CoverPassException(Exception):
    """Base exception for all CoverPass errors."""

    def __init__(
        self,
        message: str,
        code: str = "COVERPASS_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(CoverPassException):
    """A value has no canonical JSON form."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, code=ErrorCodes.CANONICALIZATION_ERROR, details=details)


class EmptyInputError(CoverPassException):
    """A tree was requested over zero leaves."""

    def __init__(self, message: str = "Cannot build a Merkle tree over zero leaves") -> None:
        super().__init__(message, code=ErrorCodes.EMPTY_INPUT)


class LeafNotFoundError(CoverPassException):
    """A proof was requested for a leaf value absent from the leaf list."""

    def __init__(self, leaf_hex: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"Leaf {leaf_hex} is not part of the leaf list",
            code=ErrorCodes.LEAF_NOT_FOUND,
            details={**(details or {}), "leaf": leaf_hex},
        )


class InvalidDigestError(CoverPassException):
    """A value handed to build/prove/publish is not a 32-byte digest."""

    def __init__(
        self,
        message: str,
        position: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if position is not None:
            details["position"] = position
        super().__init__(message, code=ErrorCodes.INVALID_DIGEST, details=details)


class RootChainException(CoverPassException):
    """
    The root-record chain is broken, or a requested block or tree is missing.

    The code distinguishes the cases: ROOT_CHAIN_BROKEN, BLOCK_NOT_FOUND,
    TREE_NOT_FOUND.
    """

    def __init__(
        self,
        message: str,
        block_number: int | None = None,
        code: str = ErrorCodes.ROOT_CHAIN_BROKEN,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if block_number is not None:
            details["block_number"] = block_number
        super().__init__(message, code=code, details=details)


class AuthorizationException(CoverPassException):
    """An account lacks the role an operation requires."""

    def __init__(self, account: str, role: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"Account {account} does not hold the {role} role",
            code=ErrorCodes.UNAUTHORIZED,
            details={**(details or {}), "account": account, "role": role},
        )


class InvalidAccountError(CoverPassException):
    """An account argument is not an EVM address."""

    def __init__(self, account: str) -> None:
        super().__init__(
            f"Invalid account address: {account!r}",
            code=ErrorCodes.INVALID_ACCOUNT,
            details={"account": account},
        )
