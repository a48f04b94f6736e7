"""
Consent-Gated Response Writer

Every cookie a handler wants to set goes through :func:`gate_cookie_write`,
a plain function of the current :class:`ConsentState` and the requested
write. It returns an explicit decision and, when allowed, the directive to
emit. :class:`ConsentWriter` is the per-request accumulator handlers use; it
owns its state and only touches a response in :meth:`ConsentWriter.apply`.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from starlette.responses import Response

from forum.constants.cookies import (
    CONSENT_COOKIE,
    PREFERENCES_COOKIE,
    CookieCategory,
    all_cookie_names,
    cookie_attributes,
)
from forum.consent.codec import ConsentRecord, encode
from forum.consent.state import ConsentState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CookieDirective:
    """A single Set-Cookie header, in structured form."""

    name: str
    value: str
    max_age: int
    httponly: bool = False
    samesite: str = "lax"
    secure: bool = False
    path: str = "/"

    @property
    def expires(self) -> bool:
        return self.max_age <= 0

    def apply(self, response: Response) -> None:
        response.set_cookie(
            key=self.name,
            value=self.value,
            max_age=self.max_age,
            path=self.path,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )


@dataclass(frozen=True)
class CookieDecision:
    allowed: bool
    directive: CookieDirective | None = None


def gate_cookie_write(
    state: ConsentState,
    name: str,
    value: str,
    category: CookieCategory | str = CookieCategory.ESSENTIAL,
    production: bool = False,
) -> CookieDecision:
    """
    Decide whether a cookie write may take effect.

    Args:
        state: Consent state of the current request
        name: Cookie name
        value: Cookie value
        category: Consent category the cookie belongs to
        production: Selects production cookie attributes

    Returns:
        CookieDecision: ``allowed`` plus the directive to emit, if any
    """
    category = CookieCategory(category)
    if not state.has_given_consent(category):
        return CookieDecision(allowed=False)
    directive = CookieDirective(name=name, value=value, **cookie_attributes(category, production))
    return CookieDecision(allowed=True, directive=directive)


def expiring_directive(name: str, production: bool = False) -> CookieDirective:
    """Directive that blanks and expires ``name`` on the client."""
    attributes = cookie_attributes(CookieCategory.ESSENTIAL, production)
    attributes["max_age"] = 0
    return CookieDirective(name=name, value="", **attributes)


class ConsentWriter:
    """
    Per-request cookie writer bound to the request's consent state.

    Directives are collected in write order and keyed by cookie name, so a
    later write of the same name replaces an earlier one.
    """

    def __init__(self, state: ConsentState, production: bool = False):
        self.state = state
        self.production = production
        self._directives: dict[str, CookieDirective] = {}

    @property
    def directives(self) -> list[CookieDirective]:
        return list(self._directives.values())

    def attempt_set_cookie(
        self, name: str, value: str, category: CookieCategory | str = CookieCategory.ESSENTIAL
    ) -> bool:
        decision = gate_cookie_write(self.state, name, value, category, self.production)
        if not decision.allowed:
            logger.debug(f"Refused '{name}' cookie write: no consent for '{CookieCategory(category).value}'")
            return False
        self._directives[name] = decision.directive
        return True

    def set_consent(self, preferences: ConsentRecord, now: datetime | None = None) -> ConsentState:
        """
        Record new consent preferences for this visitor.

        Both consent cookies are written as essential cookies, and the
        in-request state is replaced so later checks in the same request
        see the new preferences.
        """
        consent_date = now or datetime.now(timezone.utc)

        self.attempt_set_cookie(CONSENT_COOKIE, consent_date.isoformat(), CookieCategory.ESSENTIAL)
        self.attempt_set_cookie(PREFERENCES_COOKIE, encode(preferences), CookieCategory.ESSENTIAL)

        self.state = ConsentState(has_consent=True, consent_date=consent_date, preferences=preferences)
        return self.state

    def clear_consent(self) -> list[str]:
        """
        Expire every known category cookie and both consent cookies.

        Returns:
            list[str]: Names of the cookies cleared
        """
        names = all_cookie_names()
        for name in names:
            self._directives[name] = expiring_directive(name, self.production)
        self.state = ConsentState()
        return names

    def apply(self, response: Response) -> Response:
        """Emit the collected directives as Set-Cookie headers on ``response``."""
        for directive in self._directives.values():
            directive.apply(response)
        return response
