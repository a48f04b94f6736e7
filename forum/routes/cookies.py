"""
Cookie Consent & Privacy Routes

Provides endpoints for cookie consent management:
- Cookie policy, cookie details and privacy summary (informational)
- Reading the current consent state
- Saving all preferences at once or updating a single category
- Withdrawing consent
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response

from forum.constants.cookies import CONSENT_COOKIE, PREFERENCES_COOKIE, CookieCategory
from forum.consent.codec import ConsentRecord
from forum.consent.state import ConsentState
from forum.consent.writer import ConsentWriter
from forum.exceptions import InvalidCookieCategoryError, ValidationError
from forum.middleware.consent import get_consent_state, get_consent_writer
from forum.schemas.consent import SavePreferencesRequest, UpdatePreferenceRequest

router = APIRouter(tags=["Cookies & Privacy"])

logger = logging.getLogger(__name__)

POLICY_VERSION = "1.0"
PRIVACY_CONTACT = "privacy@wow-community.com"

STORAGE_DURATION = {
    CookieCategory.ESSENTIAL: "24 hours",
    CookieCategory.FUNCTIONAL: "30 days",
    CookieCategory.ANALYTICS: "1 year",
    CookieCategory.MARKETING: "90 days",
}


def get_cookie_categories() -> dict:
    """Human-readable description of each consent category."""
    return {
        CookieCategory.ESSENTIAL.value: {
            "name": "Essential cookies",
            "description": "Required for the site to work, including session management and security.",
            "required": True,
            "examples": ["User session", "Authentication token", "CSRF protection"],
        },
        CookieCategory.FUNCTIONAL.value: {
            "name": "Functional cookies",
            "description": "Remember your preferences to provide a personalised experience.",
            "required": False,
            "examples": ["Preferred language", "Dark/light theme", "Display settings"],
        },
        CookieCategory.ANALYTICS.value: {
            "name": "Analytics cookies",
            "description": "Help us understand how visitors use the site by collecting anonymous information.",
            "required": False,
            "examples": ["Google Analytics", "Usage statistics", "Time on page"],
        },
        CookieCategory.MARKETING.value: {
            "name": "Marketing cookies",
            "description": "Used to show advertising relevant to your interests.",
            "required": False,
            "examples": ["Google Ads", "Facebook Pixel", "Retargeting"],
        },
    }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/policy")
async def get_cookie_policy():
    categories = get_cookie_categories()
    return {
        "title": "Cookie Policy",
        "lastUpdated": _now(),
        "version": POLICY_VERSION,
        "categories": categories,
        "sections": {
            "introduction": {
                "title": "What are cookies?",
                "content": "Cookies are small text files stored on your device when you visit a website. "
                "They help us improve your experience and provide personalised features.",
            },
            "purpose": {
                "title": "What do we use cookies for?",
                "content": "We use cookies to keep you signed in, remember your preferences, "
                "analyse site traffic and show relevant content.",
            },
            "management": {
                "title": "How can I manage my preferences?",
                "content": "You can accept or reject each cookie category from the settings panel, "
                "or manage cookies directly in your browser.",
            },
            "rights": {
                "title": "Your rights",
                "content": "You may withdraw consent at any time, delete stored cookies and ask "
                "what data we collect.",
            },
            "contact": {
                "title": "Contact",
                "content": f"For any question about this cookie policy, write to {PRIVACY_CONTACT}",
            },
        },
        "technicalInfo": {
            "cookieTypes": list(categories),
            "storageDuration": {category.value: duration for category, duration in STORAGE_DURATION.items()},
            "thirdPartyCookies": [
                {
                    "name": "Google Analytics",
                    "purpose": "Traffic analysis",
                    "link": "https://policies.google.com/privacy",
                },
                {
                    "name": "Cloudflare",
                    "purpose": "Security and performance",
                    "link": "https://www.cloudflare.com/privacypolicy/",
                },
            ],
        },
    }


@router.get("/preferences")
async def get_cookie_preferences(state: ConsentState = Depends(get_consent_state)):
    return {**state.to_dict(), "canChangePreferences": True}


@router.post("/preferences")
async def save_cookie_preferences(
    body: SavePreferencesRequest,
    response: Response,
    writer: ConsentWriter = Depends(get_consent_writer),
):
    """Replace the visitor's consent record wholesale."""
    state = writer.set_consent(ConsentRecord.from_flags(body.preferences))
    writer.apply(response)
    logger.info(f"Cookie preferences saved: {state.preferences.to_dict()}")
    return {
        "message": "Cookie preferences saved",
        "preferences": state.preferences.to_dict(),
        "consentDate": state.consent_date.isoformat(),
    }


@router.put("/preferences")
async def update_cookie_preference(
    body: UpdatePreferenceRequest,
    response: Response,
    writer: ConsentWriter = Depends(get_consent_writer),
):
    """Change a single category, keeping the others as they are."""
    try:
        category = CookieCategory(body.type)
    except ValueError:
        raise InvalidCookieCategoryError(body.type) from None

    if category == CookieCategory.ESSENTIAL and not body.enabled:
        raise ValidationError("Essential cookies cannot be disabled", field="enabled")

    preferences = writer.state.preferences.with_category(category, body.enabled)
    state = writer.set_consent(preferences)
    writer.apply(response)
    logger.info(f"Cookie preference '{category.value}' set to {body.enabled}")
    return {
        "message": f"{category.value} cookie preferences updated",
        "type": category.value,
        "enabled": body.enabled,
        "allPreferences": state.preferences.to_dict(),
        "updatedAt": state.consent_date.isoformat(),
    }


@router.delete("/consent")
async def withdraw_cookie_consent(
    response: Response,
    writer: ConsentWriter = Depends(get_consent_writer),
):
    cleared = writer.clear_consent()
    writer.apply(response)
    logger.info("Cookie consent withdrawn")
    return {
        "message": "Cookie consent withdrawn",
        "action": "withdrawn",
        "cleared": cleared,
        "timestamp": _now(),
    }


@router.get("/details")
async def get_cookie_details():
    return {
        "cookies": {
            CONSENT_COOKIE: {
                "type": CookieCategory.ESSENTIAL.value,
                "purpose": "Stores when cookie consent was given",
                "duration": STORAGE_DURATION[CookieCategory.ESSENTIAL],
                "essential": True,
            },
            PREFERENCES_COOKIE: {
                "type": CookieCategory.ESSENTIAL.value,
                "purpose": "Stores the visitor's cookie preferences",
                "duration": STORAGE_DURATION[CookieCategory.ESSENTIAL],
                "essential": True,
            },
            "token": {
                "type": CookieCategory.ESSENTIAL.value,
                "purpose": "Keeps the signed-in session",
                "duration": STORAGE_DURATION[CookieCategory.ESSENTIAL],
                "essential": True,
            },
            "cookie-functional": {
                "type": CookieCategory.FUNCTIONAL.value,
                "purpose": "Remembers display preferences such as the theme",
                "duration": STORAGE_DURATION[CookieCategory.FUNCTIONAL],
                "essential": False,
            },
            "analytics_data": {
                "type": CookieCategory.ANALYTICS.value,
                "purpose": "Collects anonymous usage data",
                "duration": STORAGE_DURATION[CookieCategory.ANALYTICS],
                "essential": False,
            },
            "marketing_data": {
                "type": CookieCategory.MARKETING.value,
                "purpose": "Personalises advertising content",
                "duration": STORAGE_DURATION[CookieCategory.MARKETING],
                "essential": False,
            },
        },
        "categories": get_cookie_categories(),
        "lastUpdated": _now(),
    }


@router.get("/privacy-summary")
async def get_privacy_summary():
    return {
        "title": "Privacy and Cookies Summary",
        "lastUpdated": _now(),
        "sections": {
            "dataCollection": {
                "title": "Data collection",
                "items": [
                    "Session and authentication data",
                    "User preferences",
                    "Anonymous usage statistics",
                    "Content interaction data",
                ],
            },
            "cookieUsage": {
                "title": "Cookie usage",
                "items": ["Keep the session active", "Personalise the experience", "Analyse site traffic", "Improve services"],
            },
            "userRights": {
                "title": "Your rights",
                "items": [
                    "Access your data",
                    "Correct inaccurate information",
                    "Delete your data",
                    "Withdraw consent",
                    "Data portability",
                ],
            },
            "security": {
                "title": "Security",
                "items": [
                    "Data encryption",
                    "Protection against unauthorised access",
                    "Regular security updates",
                    "GDPR compliance",
                ],
            },
        },
        "contact": {"email": PRIVACY_CONTACT, "responseTime": "48 hours", "gdprCompliant": True},
    }


@router.get("/consent-status")
async def get_consent_status(state: ConsentState = Depends(get_consent_state)):
    return {**state.to_dict(), "requiresAction": not state.has_consent}
