"""
Access control.

Every protected operation has one entry in ``POLICY``. Routes check the role
part up front through ``deps.require``; rules that depend on a resource
(owner or target user) are checked again by the service once the resource is
loaded, via ``authorize``.
"""

import enum

from docmanager.auth.principal import Principal
from docmanager.errors import Forbidden, NotFound, Unauthenticated


class Rule(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    OWNER_OR_ADMIN = "owner_or_admin"
    SELF_OR_ADMIN = "self_or_admin"


POLICY: dict[str, Rule] = {
    # auth
    "auth:me": Rule.AUTHENTICATED,
    "auth:logout": Rule.AUTHENTICATED,
    "auth:change_password": Rule.AUTHENTICATED,
    # documents
    "document:list": Rule.AUTHENTICATED,
    "document:search": Rule.AUTHENTICATED,
    "document:stats": Rule.AUTHENTICATED,
    "document:create": Rule.AUTHENTICATED,
    "document:read": Rule.OWNER_OR_ADMIN,
    "document:download": Rule.OWNER_OR_ADMIN,
    "document:update": Rule.OWNER_OR_ADMIN,
    "document:delete": Rule.OWNER_OR_ADMIN,
    "document:reassign": Rule.ADMIN,
    # tags
    "tag:list": Rule.AUTHENTICATED,
    "tag:read": Rule.AUTHENTICATED,
    "tag:create": Rule.AUTHENTICATED,
    "tag:update": Rule.ADMIN,
    "tag:delete": Rule.ADMIN,
    "tag:sweep": Rule.ADMIN,
    "tag:stats": Rule.ADMIN,
    # users
    "user:list": Rule.ADMIN,
    "user:create": Rule.ADMIN,
    "user:read": Rule.AUTHENTICATED,
    "user:update": Rule.SELF_OR_ADMIN,
    "user:delete": Rule.ADMIN,
}

_RESOURCE_RULES = (Rule.OWNER_OR_ADMIN, Rule.SELF_OR_ADMIN)


def is_allowed(
    principal: Principal | None,
    rule: Rule,
    owner_id: int | None = None,
    target_id: int | None = None,
) -> bool:
    if principal is None:
        return False
    if rule is Rule.AUTHENTICATED:
        return True
    if principal.is_admin:
        return True
    if rule is Rule.OWNER_OR_ADMIN:
        return owner_id is not None and owner_id == principal.id
    if rule is Rule.SELF_OR_ADMIN:
        return target_id is not None and target_id == principal.id
    return False


def authorize(
    principal: Principal | None,
    operation: str,
    *,
    owner_id: int | None = None,
    target_id: int | None = None,
    resource: str = "Resource",
    resource_id=None,
) -> None:
    """Raise the rejection for ``operation`` or return silently.

    A failed ownership check is reported exactly like a missing resource, so
    callers learn nothing about other users' documents.
    """
    rule = POLICY[operation]
    if principal is None:
        raise Unauthenticated()
    if is_allowed(principal, rule, owner_id=owner_id, target_id=target_id):
        return
    if rule is Rule.OWNER_OR_ADMIN:
        raise NotFound.for_resource(resource, "id", resource_id)
    raise Forbidden()


def authorize_route(principal: Principal | None, operation: str) -> None:
    rule = POLICY[operation]
    if principal is None:
        raise Unauthenticated()
    if rule in _RESOURCE_RULES:
        return
    if not is_allowed(principal, rule):
        raise Forbidden()
