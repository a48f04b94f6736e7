"""Cookie consent: codec, per-request state and the gated cookie writer."""

from .codec import ConsentRecord, decode, default_deny_record, encode, parse_preferences
from .state import ConsentState, build_consent_state
from .writer import ConsentWriter, CookieDecision, CookieDirective, gate_cookie_write

__all__ = [
    "ConsentRecord",
    "ConsentState",
    "ConsentWriter",
    "CookieDecision",
    "CookieDirective",
    "build_consent_state",
    "decode",
    "default_deny_record",
    "encode",
    "gate_cookie_write",
    "parse_preferences",
]
