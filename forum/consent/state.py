"""
Consent State

Per-request view of what the visitor has agreed to, derived once from the
two consent cookies and never stored server-side.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping

from forum.constants.cookies import CONSENT_COOKIE, PREFERENCES_COOKIE, CookieCategory
from forum.consent.codec import ConsentRecord, default_deny_record, parse_preferences


@dataclass(frozen=True)
class ConsentState:
    has_consent: bool = False
    consent_date: datetime | None = None
    preferences: ConsentRecord = field(default_factory=default_deny_record)

    def has_given_consent(self, category: CookieCategory | str) -> bool:
        """Whether cookies of ``category`` may be written for this request."""
        category = CookieCategory(category)
        if category == CookieCategory.ESSENTIAL:
            return True
        if not self.has_consent:
            return False
        return self.preferences.allows(category)

    def to_dict(self) -> dict:
        return {
            "hasConsent": self.has_consent,
            "consentDate": self.consent_date.isoformat() if self.consent_date else None,
            "preferences": self.preferences.to_dict(),
        }

    @classmethod
    def from_cookies(cls, cookies: Mapping[str, str]) -> "ConsentState":
        return build_consent_state(cookies.get(CONSENT_COOKIE) or None, cookies.get(PREFERENCES_COOKIE) or None)


def _parse_timestamp(token: str) -> datetime | None:
    try:
        return datetime.fromisoformat(token.replace("Z", "+00:00"))
    except ValueError:
        return None


def build_consent_state(timestamp_token: str | None, preferences_token: str | None) -> ConsentState:
    """
    Derive the consent state from the cookie token pair.

    Presence of the timestamp token alone signals consent. Without it the
    preferences token is ignored and the default-deny record applies.
    """
    has_consent = timestamp_token is not None
    if not has_consent:
        return ConsentState()

    preferences = parse_preferences(preferences_token) or default_deny_record()
    return ConsentState(
        has_consent=True,
        consent_date=_parse_timestamp(timestamp_token),
        preferences=preferences,
    )
