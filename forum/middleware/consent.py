"""
Cookie consent middleware and dependencies

The middleware derives the :class:`ConsentState` once per request from the
incoming cookies. Handlers get a :class:`ConsentWriter` bound to that state
and flush it onto their response; every cookie they set passes the gate.
"""

from fastapi import Depends, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from forum.constants.cookies import CookieCategory
from forum.consent.state import ConsentState
from forum.consent.writer import ConsentWriter
from forum.exceptions import ConsentRequiredError


class ConsentMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.consent = ConsentState.from_cookies(request.cookies)
        return await call_next(request)


def get_consent_state(request: Request) -> ConsentState:
    state = getattr(request.state, "consent", None)
    if state is None:
        state = ConsentState.from_cookies(request.cookies)
        request.state.consent = state
    return state


def get_consent_writer(request: Request, state: ConsentState = Depends(get_consent_state)) -> ConsentWriter:
    settings = getattr(request.app.state, "settings", None)
    return ConsentWriter(state, production=bool(settings and settings.is_production))


def require_cookie_consent(category: CookieCategory):
    """Dependency factory rejecting requests that have not accepted ``category``."""
    category = CookieCategory(category)

    def check_consent(state: ConsentState = Depends(get_consent_state)) -> ConsentState:
        if not state.has_given_consent(category):
            raise ConsentRequiredError(category.value)
        return state

    return check_consent
