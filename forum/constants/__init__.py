"""Constants package for the forum."""

from .cookies import (
    CATEGORY_COOKIES,
    CONSENT_COOKIE,
    PREFERENCES_COOKIE,
    CookieCategory,
    all_cookie_names,
    cookie_attributes,
)
from .roles import DEFAULT_ROLE, LEGACY_ROLE_ALIASES, Role, normalize_role

__all__ = [
    # Role constants
    "Role",
    "DEFAULT_ROLE",
    "LEGACY_ROLE_ALIASES",
    "normalize_role",
    # Cookie constants
    "CookieCategory",
    "CONSENT_COOKIE",
    "PREFERENCES_COOKIE",
    "CATEGORY_COOKIES",
    "cookie_attributes",
    "all_cookie_names",
]
