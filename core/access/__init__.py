"""
Module 04 - Access Policy

Roles (admin, insurer, verifier), the policy check run before gated
operations, and the append-only event log.
"""

from .events import Event, EventLog, EventType
from .roles import Role, RoleRegistry, normalize_account

__all__ = [
    "Event",
    "EventLog",
    "EventType",
    "Role",
    "RoleRegistry",
    "normalize_account",
]
