"""
Input Sanitization Utilities

User-written post and reply bodies keep a small set of formatting tags;
titles and category names are reduced to plain text.
"""

import re

import bleach

# Formatting allowed in post and reply bodies
POST_TAGS = ["p", "br", "strong", "em", "u", "a", "code", "pre", "blockquote", "ul", "ol", "li"]
POST_ATTRS = {
    "a": ["href", "title"],
}

ALLOWED_PROTOCOLS = ["http", "https", "mailto"]


def sanitize_plain_text(text: str | None) -> str:
    """
    Strip all HTML tags and collapse whitespace.

    Args:
        text: The text to sanitize

    Returns:
        Plain text with HTML tags stripped
    """
    if text is None:
        return ""
    cleaned = bleach.clean(text, tags=[], strip=True)
    return re.sub(r"\s+", " ", cleaned).strip()


def sanitize_post_body(text: str | None) -> str:
    """Sanitize a post or reply body, keeping basic formatting."""
    if text is None:
        return ""
    return bleach.clean(
        text.strip(),
        tags=POST_TAGS,
        attributes=POST_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )
