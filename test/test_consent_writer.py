"""
Tests for the consent-gated cookie writer
"""

from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from starlette.responses import Response

from forum.constants.cookies import CookieCategory, all_cookie_names
from forum.consent.codec import ConsentRecord, encode, parse_preferences
from forum.consent.state import ConsentState, build_consent_state
from forum.consent.writer import ConsentWriter, gate_cookie_write
from forum.exception_handlers import register_exception_handlers
from forum.middleware.consent import ConsentMiddleware, require_cookie_consent

TIMESTAMP = "2024-05-01T10:00:00+00:00"


def functional_only() -> ConsentState:
    return build_consent_state(TIMESTAMP, encode(ConsentRecord(functional=True)))


class TestGateCookieWrite:
    """The pure gate decides without side effects"""

    def test_essential_always_allowed(self):
        decision = gate_cookie_write(ConsentState(), "session", "abc", CookieCategory.ESSENTIAL)
        assert decision.allowed is True
        assert decision.directive.httponly is True
        assert decision.directive.max_age == 24 * 60 * 60

    def test_non_essential_denied_without_consent(self):
        for category in ("functional", "analytics", "marketing"):
            decision = gate_cookie_write(ConsentState(), "x", "1", category)
            assert decision.allowed is False
            assert decision.directive is None

    def test_attributes_follow_category(self):
        state = build_consent_state(TIMESTAMP, encode(ConsentRecord(functional=True, analytics=True, marketing=True)))
        expected = {
            "functional": 30 * 24 * 3600,
            "analytics": 365 * 24 * 3600,
            "marketing": 90 * 24 * 3600,
        }
        for category, max_age in expected.items():
            directive = gate_cookie_write(state, "x", "1", category).directive
            assert directive.max_age == max_age
            assert directive.httponly is False
            assert directive.samesite == "lax"
            assert directive.secure is False

    def test_production_attributes(self):
        directive = gate_cookie_write(ConsentState(), "session", "abc", production=True).directive
        assert directive.samesite == "strict"
        assert directive.secure is True


class TestConsentWriter:
    def test_functional_consent_scenario(self):
        """Only the accepted category is written"""
        writer = ConsentWriter(functional_only())
        assert writer.attempt_set_cookie("marketing_data", "m", CookieCategory.MARKETING) is False
        assert writer.attempt_set_cookie("functional_data", "f", CookieCategory.FUNCTIONAL) is True
        assert [d.name for d in writer.directives] == ["functional_data"]

    def test_set_consent_updates_state_within_request(self):
        writer = ConsentWriter(ConsentState())
        assert writer.attempt_set_cookie("cookie-analytics", "1", "analytics") is False

        now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        state = writer.set_consent(ConsentRecord(analytics=True), now=now)

        assert state.has_consent is True
        assert state.consent_date == now
        assert writer.attempt_set_cookie("cookie-analytics", "1", "analytics") is True

    def test_set_consent_writes_both_consent_cookies(self):
        writer = ConsentWriter(ConsentState())
        writer.set_consent(ConsentRecord(marketing=True, essential=False))

        directives = {d.name: d for d in writer.directives}
        assert set(directives) == {"cookie-consent", "cookie-preferences"}
        assert directives["cookie-consent"].httponly is True
        record = parse_preferences(directives["cookie-preferences"].value)
        assert record.essential is True
        assert record.marketing is True

    def test_clear_consent_expires_every_known_cookie(self):
        writer = ConsentWriter(functional_only())
        cleared = writer.clear_consent()

        assert set(cleared) == set(all_cookie_names())
        assert len(cleared) == 8
        assert all(d.expires and d.value == "" for d in writer.directives)
        assert writer.state.has_consent is False

    def test_clear_consent_is_idempotent(self):
        writer = ConsentWriter(functional_only())
        writer.clear_consent()
        first = sorted((d.name, d.value, d.max_age) for d in writer.directives)
        writer.clear_consent()
        second = sorted((d.name, d.value, d.max_age) for d in writer.directives)
        assert first == second

    def test_apply_emits_set_cookie_headers(self):
        writer = ConsentWriter(functional_only())
        writer.attempt_set_cookie("functional_data", "f", CookieCategory.FUNCTIONAL)
        writer.attempt_set_cookie("marketing_data", "m", CookieCategory.MARKETING)

        response = writer.apply(Response())
        headers = [value.decode() for key, value in response.raw_headers if key == b"set-cookie"]

        assert len(headers) == 1
        assert headers[0].startswith("functional_data=f")
        assert "Max-Age=2592000" in headers[0]


class TestRequireCookieConsent:
    """Dependency guarding features behind a consent category"""

    def build_app(self):
        app = FastAPI()
        register_exception_handlers(app)
        app.add_middleware(ConsentMiddleware)

        @app.get("/recommendations", dependencies=[Depends(require_cookie_consent(CookieCategory.MARKETING))])
        async def recommendations():
            return {"items": []}

        return app

    def test_rejected_without_consent(self):
        client = TestClient(self.build_app())
        response = client.get("/recommendations")

        assert response.status_code == 403
        assert response.json()["requiresConsent"] is True
        assert response.json()["cookieType"] == "marketing"

    def test_allowed_with_consent(self):
        client = TestClient(self.build_app())
        client.cookies.set("cookie-consent", TIMESTAMP)
        client.cookies.set("cookie-preferences", encode(ConsentRecord(marketing=True)))

        response = client.get("/recommendations")
        assert response.status_code == 200
