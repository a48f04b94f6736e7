"""
Tests for input sanitization and slug generation
"""

from forum.utils.sanitize import sanitize_plain_text, sanitize_post_body
from forum.utils.slugify import slugify


class TestSanitizePlainText:
    def test_strips_tags_and_collapses_whitespace(self):
        assert sanitize_plain_text("<b>Raid</b>   <i>night</i>\n") == "Raid night"

    def test_none_is_empty(self):
        assert sanitize_plain_text(None) == ""


class TestSanitizePostBody:
    def test_keeps_basic_formatting(self):
        assert sanitize_post_body("<strong>Bring</strong> potions") == "<strong>Bring</strong> potions"

    def test_removes_scripts_and_handlers(self):
        cleaned = sanitize_post_body('<img src="x" onerror="alert(1)"><script>alert(1)</script>hi')
        assert "<script" not in cleaned
        assert "onerror" not in cleaned
        assert "<img" not in cleaned

    def test_drops_javascript_links(self):
        cleaned = sanitize_post_body('<a href="javascript:alert(1)">click</a>')
        assert "javascript:" not in cleaned


class TestSlugify:
    def test_transliterates_accents(self):
        assert slugify("Élite Raids & Dungeons") == "elite-raids-dungeons"

    def test_only_punctuation_gives_empty_slug(self):
        assert slugify("!!!") == ""
