"""
Module 04 - Access Policy Unit Tests
Tests for core/access/roles.py and core/access/events.py
"""
import json

import pytest

from core.access.events import EventLog, EventType
from core.access.roles import Role, RoleRegistry, normalize_account
from core.schemas.errors import AuthorizationException, ErrorCodes

from fixtures.common import ADMIN, HOLDERS, INSURER, VERIFIER


class TestNormalizeAccount:

    def test_checksums(self):
        assert normalize_account(INSURER.lower()) == INSURER

    @pytest.mark.parametrize("value", ["0x1234", "", None, 42, "not an address"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            normalize_account(value)


class TestRoleRegistry:

    def test_admin_holds_admin_role(self):
        registry = RoleRegistry(admin=ADMIN)
        assert registry.has_role(Role.ADMIN, ADMIN)
        assert registry.has_role(Role.ADMIN, ADMIN.lower())

    def test_grant_and_require(self):
        registry = RoleRegistry(admin=ADMIN)
        assert registry.grant(Role.INSURER, INSURER, by=ADMIN)
        assert registry.require(Role.INSURER, INSURER.lower()) == INSURER

    def test_grant_twice_reports_no_change(self):
        registry = RoleRegistry(admin=ADMIN)
        registry.grant(Role.INSURER, INSURER, by=ADMIN)
        assert not registry.grant(Role.INSURER, INSURER, by=ADMIN)

    def test_roles_are_separate(self):
        registry = RoleRegistry(admin=ADMIN)
        registry.grant(Role.INSURER, INSURER, by=ADMIN)
        assert not registry.has_role(Role.VERIFIER, INSURER)

    def test_require_denied(self):
        registry = RoleRegistry(admin=ADMIN)
        with pytest.raises(AuthorizationException) as exc_info:
            registry.require(Role.VERIFIER, VERIFIER)
        assert exc_info.value.code == ErrorCodes.UNAUTHORIZED
        assert exc_info.value.details["role"] == Role.VERIFIER.value

    def test_require_invalid_account_denied(self):
        with pytest.raises(AuthorizationException):
            RoleRegistry(admin=ADMIN).require(Role.INSURER, "garbage")

    def test_non_admin_cannot_grant(self):
        registry = RoleRegistry(admin=ADMIN)
        with pytest.raises(AuthorizationException):
            registry.grant(Role.INSURER, INSURER, by=HOLDERS[0])
        assert not registry.has_role(Role.INSURER, INSURER)

    def test_no_admin_configured(self):
        registry = RoleRegistry()
        with pytest.raises(AuthorizationException):
            registry.grant(Role.INSURER, INSURER, by=ADMIN)

    def test_revoke(self):
        registry = RoleRegistry(admin=ADMIN)
        registry.grant(Role.VERIFIER, VERIFIER, by=ADMIN)
        assert registry.revoke(Role.VERIFIER, VERIFIER, by=ADMIN)
        assert not registry.has_role(Role.VERIFIER, VERIFIER)
        assert not registry.revoke(Role.VERIFIER, VERIFIER, by=ADMIN)

    def test_configured_admin_not_revocable(self):
        registry = RoleRegistry(admin=ADMIN)
        with pytest.raises(ValueError):
            registry.revoke(Role.ADMIN, ADMIN, by=ADMIN)

    def test_grant_invalid_account(self):
        with pytest.raises(ValueError):
            RoleRegistry(admin=ADMIN).grant(Role.INSURER, "0xnope", by=ADMIN)

    def test_persistence(self, tmp_path):
        path = tmp_path / "roles.json"
        registry = RoleRegistry(admin=ADMIN, path=path)
        registry.grant(Role.INSURER, INSURER, by=ADMIN)

        reloaded = RoleRegistry(admin=ADMIN, path=path)
        assert reloaded.has_role(Role.INSURER, INSURER)
        assert json.loads(path.read_text())["INSURER_ROLE"] == [INSURER]

    def test_to_dict(self):
        registry = RoleRegistry(admin=ADMIN)
        registry.grant(Role.INSURER, INSURER, by=ADMIN)
        data = registry.to_dict()
        assert data["DEFAULT_ADMIN_ROLE"] == [ADMIN]
        assert data["INSURER_ROLE"] == [INSURER]
        assert data["VERIFIER_ROLE"] == []


class TestEventLog:

    def test_emit_and_recent(self):
        log = EventLog()
        log.emit(EventType.ROLE_GRANTED, role="INSURER_ROLE", account=INSURER)
        log.emit(EventType.INSURANCE_PUBLISHED, block_number=1, insurance_count=3)

        recent = log.recent()
        assert [e.event_type for e in recent] == [
            EventType.INSURANCE_PUBLISHED,
            EventType.ROLE_GRANTED,
        ]
        assert recent[0].block_number == 1
        assert recent[1].data["account"] == INSURER

    def test_recent_limit(self):
        log = EventLog()
        for i in range(5):
            log.emit(EventType.COVERAGE_VERIFIED, block_number=i + 1)
        assert [e.block_number for e in log.recent(2)] == [5, 4]

    def test_of_type(self):
        log = EventLog()
        log.emit(EventType.ROLE_GRANTED)
        log.emit(EventType.ROLE_REVOKED)
        assert len(log.of_type(EventType.ROLE_REVOKED)) == 1

    def test_persistence_and_clear(self, tmp_path):
        path = tmp_path / "events.json"
        log = EventLog(path)
        log.emit(EventType.ROLE_GRANTED, account=INSURER)

        reloaded = EventLog(path)
        assert len(reloaded) == 1
        assert reloaded.recent()[0].event_type == EventType.ROLE_GRANTED

        assert reloaded.clear() == 1
        assert len(EventLog(path)) == 0

    def test_export(self, tmp_path):
        log = EventLog()
        log.emit(EventType.ROLE_GRANTED)
        out = log.export(tmp_path / "out.json")
        assert json.loads(out.read_text())[0]["event_type"] == "RoleGranted"

    def test_shared_by_reference(self):
        log = EventLog()
        alias = log
        alias.emit(EventType.ROLE_GRANTED)
        assert len(log) == 1
