"""
Module 04 - Access Policy
File: roles.py

Purpose: Role registry gating who may publish roots and who may verify
coverage. The admin account is fixed by configuration; insurers and
verifiers are whitelisted and revoked by the admin.

Identities are plain address strings supplied by the caller. Nothing is
signed; the registry answers "does this account hold this role".
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from pathlib import Path

from eth_utils import is_address, to_checksum_address

from core.ledger.store import read_json_file, write_json_file, StoreIOError
from core.schemas.errors import AuthorizationException


logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Roles recognised by the access policy."""

    ADMIN = "DEFAULT_ADMIN_ROLE"
    INSURER = "INSURER_ROLE"
    VERIFIER = "VERIFIER_ROLE"


def normalize_account(account: str) -> str:
    """
    Checksum an EVM address so lookups are case-insensitive.

    Raises:
        ValueError: If account is not a valid address
    """
    if not isinstance(account, str) or not is_address(account):
        raise ValueError(f"Invalid account address: {account!r}")
    return to_checksum_address(account)


class RoleRegistry:
    """
    Accounts per role, optionally persisted to a JSON file.

    The admin passed at construction always holds ADMIN and cannot be revoked.

    Usage:
        registry = RoleRegistry(admin="0xf39F...")
        registry.grant(Role.INSURER, "0x7099...", by="0xf39F...")
        registry.require(Role.INSURER, "0x7099...")
    """

    def __init__(self, admin: str | None = None, path: Path | None = None) -> None:
        self.path = path
        self.admin = normalize_account(admin) if admin else None
        self._members: dict[Role, set[str]] = {role: set() for role in Role}
        self._lock = threading.Lock()
        if path is not None and path.exists():
            self._load()
        if self.admin:
            self._members[Role.ADMIN].add(self.admin)

    def _load(self) -> None:
        data = read_json_file(self.path)
        if not isinstance(data, dict):
            raise StoreIOError(f"Expected an object keyed by role in {self.path}")
        for role in Role:
            for account in data.get(role.value, []):
                self._members[role].add(normalize_account(account))
        logger.info(
            "Loaded roles from %s (%d insurers, %d verifiers)",
            self.path, len(self._members[Role.INSURER]), len(self._members[Role.VERIFIER]),
        )

    def save(self) -> None:
        if self.path is None:
            return
        write_json_file(
            self.path,
            {role.value: sorted(self._members[role]) for role in Role},
        )

    def has_role(self, role: Role, account: str) -> bool:
        try:
            return normalize_account(account) in self._members[role]
        except ValueError:
            return False

    def require(self, role: Role, account: str) -> str:
        """
        Policy check run before any gated operation.

        Returns:
            The checksummed account

        Raises:
            AuthorizationException: If account does not hold role
        """
        if not self.has_role(role, account):
            logger.warning("Denied %s for %s", role.value, account)
            raise AuthorizationException(account=str(account), role=role.value)
        return normalize_account(account)

    def grant(self, role: Role, account: str, by: str) -> bool:
        """
        Grant role to account on behalf of an admin.

        Returns:
            True if the account did not hold the role before

        Raises:
            AuthorizationException: If `by` is not an admin
            ValueError: If account is not a valid address
        """
        self.require(Role.ADMIN, by)
        account = normalize_account(account)
        with self._lock:
            if account in self._members[role]:
                return False
            self._members[role].add(account)
            self.save()
        logger.info("Granted %s to %s", role.value, account)
        return True

    def revoke(self, role: Role, account: str, by: str) -> bool:
        """
        Revoke role from account on behalf of an admin.

        Returns:
            True if the account held the role

        Raises:
            AuthorizationException: If `by` is not an admin
            ValueError: If account is invalid or is the configured admin
        """
        self.require(Role.ADMIN, by)
        account = normalize_account(account)
        if role is Role.ADMIN and account == self.admin:
            raise ValueError("The configured admin cannot be revoked")
        with self._lock:
            if account not in self._members[role]:
                return False
            self._members[role].discard(account)
            self.save()
        logger.info("Revoked %s from %s", role.value, account)
        return True

    def members(self, role: Role) -> list[str]:
        return sorted(self._members[role])

    def to_dict(self) -> dict[str, list[str]]:
        return {role.value: self.members(role) for role in Role}
