"""
Consent Store Codec

The consent record lives entirely client-side as a pair of essential
cookies: ``cookie-consent`` holds the ISO-8601 time consent was given and
``cookie-preferences`` holds the per-category flags as a JSON object. The
JSON is percent-encoded on the wire, the same way browser-side cookie
libraries encode values, so it never needs cookie quoting.

Nothing in this module raises on malformed client input: an unreadable
preferences token is reported as absent and callers fall back to the
default-deny record.
"""

import json
import logging
from dataclasses import dataclass, replace
from urllib.parse import quote, unquote

from starlette.requests import cookie_parser

from forum.constants.cookies import CONSENT_COOKIE, PREFERENCES_COOKIE, CookieCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConsentRecord:
    """Per-category consent flags. ``essential`` is always true."""

    essential: bool = True
    functional: bool = False
    analytics: bool = False
    marketing: bool = False

    def __post_init__(self):
        if self.essential is not True:
            object.__setattr__(self, "essential", True)

    def allows(self, category: CookieCategory | str) -> bool:
        return bool(getattr(self, CookieCategory(category).value))

    def with_category(self, category: CookieCategory | str, enabled: bool) -> "ConsentRecord":
        """Return a copy with a single category changed."""
        return replace(self, **{CookieCategory(category).value: bool(enabled)})

    def to_dict(self) -> dict[str, bool]:
        return {category.value: getattr(self, category.value) for category in CookieCategory}

    @classmethod
    def from_flags(cls, flags: dict) -> "ConsentRecord":
        """
        Build a record from a loosely-typed mapping such as a request body.

        Only literal ``True`` grants a category; anything else is a refusal.
        """
        return cls(**{category.value: flags.get(category.value) is True for category in CookieCategory})


def default_deny_record() -> ConsentRecord:
    """The posture assumed whenever explicit consent cannot be established."""
    return ConsentRecord()


def encode(record: ConsentRecord) -> str:
    """Serialize a record into the ``cookie-preferences`` token."""
    payload = replace(record, essential=True).to_dict()
    return quote(json.dumps(payload, separators=(",", ":")), safe="")


def parse_preferences(token: str | None) -> ConsentRecord | None:
    """
    Parse a ``cookie-preferences`` token.

    Args:
        token: Raw cookie value, percent-encoded or plain JSON

    Returns:
        ConsentRecord | None: The decoded record, or None when the token is
        missing or malformed
    """
    if token is None:
        return None
    try:
        data = json.loads(unquote(token))
    except (ValueError, RecursionError):
        logger.debug("Discarding unreadable consent preferences token")
        return None
    if not isinstance(data, dict):
        return None

    flags = {}
    for category in CookieCategory:
        value = data.get(category.value, False)
        if not isinstance(value, bool):
            logger.debug(f"Discarding consent preferences token with non-boolean '{category.value}'")
            return None
        flags[category.value] = value
    return ConsentRecord(**flags)


def decode(raw_cookie_header: str | None) -> tuple[str | None, str | None]:
    """
    Extract the consent token pair from a raw ``Cookie`` header.

    Returns:
        tuple: (timestamp token, preferences token); either may be None. The
        preferences token is None when present but unparsable.
    """
    cookies = cookie_parser(raw_cookie_header or "")
    timestamp_token = cookies.get(CONSENT_COOKIE) or None
    preferences_token = cookies.get(PREFERENCES_COOKIE) or None
    if preferences_token is not None and parse_preferences(preferences_token) is None:
        preferences_token = None
    return timestamp_token, preferences_token
