"""
Cookie Constants

Consent categories, the cookie names that belong to each of them, and the
default attributes every write of a category carries.
"""

from enum import Enum


class CookieCategory(str, Enum):
    """Consent categories, in the order they are presented to users."""

    ESSENTIAL = "essential"
    FUNCTIONAL = "functional"
    ANALYTICS = "analytics"
    MARKETING = "marketing"


CONSENT_COOKIE = "cookie-consent"
PREFERENCES_COOKIE = "cookie-preferences"

# App-level cookies gated by each non-essential category
CATEGORY_COOKIES = {
    CookieCategory.FUNCTIONAL: ("cookie-functional", "functional_data"),
    CookieCategory.ANALYTICS: ("cookie-analytics", "analytics_data"),
    CookieCategory.MARKETING: ("cookie-marketing", "marketing_data"),
}

HOUR = 60 * 60
DAY = 24 * HOUR

CATEGORY_MAX_AGE = {
    CookieCategory.ESSENTIAL: 24 * HOUR,
    CookieCategory.FUNCTIONAL: 30 * DAY,
    CookieCategory.ANALYTICS: 365 * DAY,
    CookieCategory.MARKETING: 90 * DAY,
}


def cookie_attributes(category: CookieCategory, production: bool) -> dict:
    """
    Default Set-Cookie attributes for a category.

    Args:
        category: Consent category of the cookie
        production: Whether the app runs in production

    Returns:
        dict: Keyword arguments understood by ``Response.set_cookie``
    """
    return {
        "max_age": CATEGORY_MAX_AGE[category],
        "httponly": category == CookieCategory.ESSENTIAL,
        "samesite": "strict" if production else "lax",
        "secure": production,
        "path": "/",
    }


def all_cookie_names() -> list[str]:
    """Every cookie name the consent layer knows about, consent cookies last."""
    names = [name for names in CATEGORY_COOKIES.values() for name in names]
    return names + [CONSENT_COOKIE, PREFERENCES_COOKIE]
