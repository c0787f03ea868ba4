"""Unit tests for the access-control table."""

import pytest

from docmanager.auth.policy import POLICY, Rule, authorize, authorize_route, is_allowed
from docmanager.auth.principal import Principal
from docmanager.errors import Forbidden, NotFound, Unauthenticated
from docmanager.models.user import Role

USER = Principal(id=1, username="alice", roles=frozenset({Role.USER}))
OTHER = Principal(id=2, username="bob", roles=frozenset({Role.USER}))
ADMIN = Principal(id=3, username="admin", roles=frozenset({Role.USER, Role.ADMIN}))


def test_every_operation_has_a_rule() -> None:
    """Test the table only maps to known rules."""
    assert POLICY
    assert all(isinstance(rule, Rule) for rule in POLICY.values())


@pytest.mark.parametrize("operation", sorted(POLICY))
def test_anonymous_is_always_unauthenticated(operation: str) -> None:
    """Test a missing principal is rejected before any other rule."""
    with pytest.raises(Unauthenticated):
        authorize(None, operation, owner_id=1, target_id=1)


def test_owner_rule() -> None:
    """Test owners and admins pass, others do not."""
    assert is_allowed(USER, Rule.OWNER_OR_ADMIN, owner_id=1)
    assert is_allowed(ADMIN, Rule.OWNER_OR_ADMIN, owner_id=1)
    assert not is_allowed(OTHER, Rule.OWNER_OR_ADMIN, owner_id=1)
    assert not is_allowed(USER, Rule.OWNER_OR_ADMIN, owner_id=None)


def test_foreign_document_reported_as_missing() -> None:
    """Test a failed ownership check is indistinguishable from a missing document."""
    with pytest.raises(NotFound) as exc_info:
        authorize(OTHER, "document:read", owner_id=1, resource="Document", resource_id=5)

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail["message"] == "Document not found with id: '5'"


def test_admin_only_operation_forbidden_for_user() -> None:
    """Test role failures are 403."""
    with pytest.raises(Forbidden):
        authorize(USER, "document:reassign")
    authorize(ADMIN, "document:reassign")


def test_self_or_admin_rule() -> None:
    """Test users may act on themselves only; admins on anyone."""
    authorize(USER, "user:update", target_id=1)
    authorize(ADMIN, "user:update", target_id=1)
    with pytest.raises(Forbidden):
        authorize(OTHER, "user:update", target_id=1)


def test_route_check_defers_resource_rules() -> None:
    """Test route-level checks only authenticate for owner/self rules."""
    authorize_route(OTHER, "document:read")
    authorize_route(OTHER, "user:update")
    with pytest.raises(Forbidden):
        authorize_route(USER, "user:list")
    with pytest.raises(Unauthenticated):
        authorize_route(None, "document:list")


def test_principal_from_claims() -> None:
    """Test claims round into a principal without a database."""
    principal = Principal.from_claims({"sub": "3", "username": "admin", "roles": ["ADMIN", "USER"]})

    assert principal.id == 3
    assert principal.is_admin
    assert principal.has_role(Role.USER)


def test_principal_from_bad_claims() -> None:
    """Test unknown roles are rejected."""
    with pytest.raises(ValueError):
        Principal.from_claims({"sub": "3", "username": "x", "roles": ["ROOT"]})
