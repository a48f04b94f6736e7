"""
Role Constants for the forum

Roles form a closed set. Stored and compared values are the canonical
PascalCase labels; the lowercase labels written by older deployments are
accepted only by :func:`normalize_role`, which the authentication layer
calls once when an identity is built.
"""

from enum import Enum


class Role(str, Enum):
    """Enumeration of role names in the system."""

    PLAYER = "Player"
    GAME_MASTER = "GameMaster"
    ADMIN = "Admin"


# Default role for new user registrations
DEFAULT_ROLE = Role.PLAYER

# Legacy labels still present in old tokens and records
LEGACY_ROLE_ALIASES = {
    "user": Role.PLAYER,
    "moderator": Role.GAME_MASTER,
    "admin": Role.ADMIN,
}


def normalize_role(raw: str | None) -> Role | None:
    """
    Map a stored or token-supplied role label onto the Role enum.

    Args:
        raw: Role label, canonical or legacy

    Returns:
        Role | None: The canonical role, or None for missing/unknown labels
    """
    if raw is None:
        return None
    if isinstance(raw, Role):
        return raw
    try:
        return Role(raw)
    except ValueError:
        return LEGACY_ROLE_ALIASES.get(str(raw).strip().lower())
