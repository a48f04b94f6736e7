"""
Tests for per-request consent state
"""

from datetime import datetime, timezone

import pytest

from forum.constants.cookies import CookieCategory
from forum.consent.codec import ConsentRecord, default_deny_record, encode
from forum.consent.state import ConsentState, build_consent_state

GRANT_ALL = encode(ConsentRecord(functional=True, analytics=True, marketing=True))
TIMESTAMP = "2024-05-01T10:00:00+00:00"


class TestBuildConsentState:
    def test_no_tokens_is_default_deny(self):
        state = build_consent_state(None, None)
        assert state.has_consent is False
        assert state.consent_date is None
        assert state.preferences == default_deny_record()

    def test_stale_preferences_without_timestamp_are_ignored(self):
        """A preferences token alone never grants anything"""
        state = build_consent_state(None, GRANT_ALL)
        assert state.has_consent is False
        assert state.preferences == default_deny_record()
        for category in (CookieCategory.FUNCTIONAL, CookieCategory.ANALYTICS, CookieCategory.MARKETING):
            assert state.has_given_consent(category) is False

    def test_timestamp_and_preferences(self):
        state = build_consent_state(TIMESTAMP, encode(ConsentRecord(analytics=True)))
        assert state.has_consent is True
        assert state.consent_date == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert state.has_given_consent("analytics") is True
        assert state.has_given_consent("marketing") is False

    def test_timestamp_with_malformed_preferences_falls_back(self):
        state = build_consent_state(TIMESTAMP, "%%%broken")
        assert state.has_consent is True
        assert state.preferences == default_deny_record()

    def test_unparsable_timestamp_still_signals_consent(self):
        state = build_consent_state("yesterday", GRANT_ALL)
        assert state.has_consent is True
        assert state.consent_date is None
        assert state.has_given_consent("marketing") is True

    def test_zulu_timestamp(self):
        state = build_consent_state("2024-05-01T10:00:00.000Z", None)
        assert state.consent_date == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


class TestHasGivenConsent:
    @pytest.mark.parametrize(
        "state",
        [
            ConsentState(),
            build_consent_state(None, GRANT_ALL),
            build_consent_state(TIMESTAMP, None),
            build_consent_state(TIMESTAMP, GRANT_ALL),
        ],
    )
    def test_essential_always_granted(self, state):
        assert state.has_given_consent(CookieCategory.ESSENTIAL) is True

    def test_unknown_category_raises(self):
        with pytest.raises(ValueError):
            ConsentState().has_given_consent("tracking")


class TestFromCookies:
    def test_reads_consent_cookie_names(self):
        state = ConsentState.from_cookies({"cookie-consent": TIMESTAMP, "cookie-preferences": GRANT_ALL})
        assert state.has_consent is True
        assert state.preferences.marketing is True

    def test_empty_values_count_as_absent(self):
        state = ConsentState.from_cookies({"cookie-consent": "", "cookie-preferences": GRANT_ALL})
        assert state.has_consent is False

    def test_to_dict(self):
        state = ConsentState.from_cookies({"cookie-consent": TIMESTAMP})
        assert state.to_dict() == {
            "hasConsent": True,
            "consentDate": TIMESTAMP,
            "preferences": default_deny_record().to_dict(),
        }
