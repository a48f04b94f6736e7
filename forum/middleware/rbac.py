"""
Access Control Gate

Each protected operation declares its own set of allowed roles and the gate
performs a plain membership test. There is no hierarchy: an Admin reaches a
GameMaster-only operation only when Admin is listed for it.

The identity checked is the stored account behind the token: banned or
deleted accounts are unauthenticated and the current role applies.
"""

import logging
from enum import Enum
from typing import Iterable

from fastapi import Depends

from forum.auth import Identity, get_current_identity
from forum.constants.roles import Role
from forum.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)


class AccessDecision(str, Enum):
    ALLOWED = "allowed"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


def authorize(identity: Identity | None, required_roles: Iterable[Role]) -> AccessDecision:
    """
    Check an identity against the roles an operation allows.

    Args:
        identity: Identity attached to the request, or None
        required_roles: Roles allowed to perform the operation

    Returns:
        AccessDecision: UNAUTHENTICATED without identity, FORBIDDEN when the
        role is not a member, ALLOWED otherwise
    """
    if identity is None:
        return AccessDecision.UNAUTHENTICATED
    if identity.role is None or identity.role not in set(required_roles):
        return AccessDecision.FORBIDDEN
    return AccessDecision.ALLOWED


def enforce(identity: Identity | None, required_roles: Iterable[Role]) -> Identity:
    """Raise the matching 401/403 error unless ``authorize`` allows."""
    required_roles = list(required_roles)
    decision = authorize(identity, required_roles)
    if decision == AccessDecision.UNAUTHENTICATED:
        raise AuthenticationError()
    if decision == AccessDecision.FORBIDDEN:
        logger.warning(
            f"User {identity.user_id} with role '{identity.role.value if identity.role else None}' "
            f"denied; requires one of {[role.value for role in required_roles]}"
        )
        raise AuthorizationError(required_roles=[role.value for role in required_roles])
    return identity


def require_roles(*roles: Role):
    """Dependency factory admitting only identities whose role is in ``roles``."""
    if not roles:
        raise ValueError("require_roles() needs at least one role")

    async def check_roles(identity: Identity | None = Depends(get_current_identity)) -> Identity:
        return enforce(identity, roles)

    return check_roles


def require_identity():
    """Dependency factory admitting any authenticated identity."""

    async def check_identity(identity: Identity | None = Depends(get_current_identity)) -> Identity:
        if identity is None:
            raise AuthenticationError()
        return identity

    return check_identity
