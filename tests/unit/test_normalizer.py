"""Unit tests for text normalization and markup stripping."""

import pytest

from knowledge_search.core import normalizer as normalizer_module
from knowledge_search.core.normalizer import TextNormalizer, extract_text
from knowledge_search.errors import MalformedMarkupError


class TestTextNormalizer:
    """Test cases for the TextNormalizer class."""

    @pytest.fixture
    def normalizer(self):
        """Create a text normalizer instance for testing."""
        return TextNormalizer()

    def test_normalize_case_and_whitespace(self, normalizer):
        """Test lower-casing and whitespace collapsing."""
        assert normalizer.normalize("  React   Hooks\tGuide \n") == "react hooks guide"

    def test_normalize_folds_accents(self, normalizer):
        """Test that accented characters match their plain forms."""
        assert normalizer.normalize("Café Déjà Vu") == "cafe deja vu"

    def test_normalize_empty(self, normalizer):
        """Test normalization of empty input."""
        assert normalizer.normalize("") == ""
        assert normalizer.normalize(None) == ""

    def test_tokenize_strips_punctuation(self, normalizer):
        """Test that punctuation at token edges is dropped."""
        assert normalizer.tokenize("Hello, World! (draft)") == ["hello", "world", "draft"]

    def test_tokenize_keeps_language_names(self, normalizer):
        """Test that '+' and '#' survive tokenization."""
        assert normalizer.tokenize("C++ and C#") == ["c++", "and", "c#"]

    def test_tokenize_keeps_inner_punctuation(self, normalizer):
        """Test that hyphenated words stay whole."""
        assert normalizer.tokenize("two-factor sign-in") == ["two-factor", "sign-in"]

    def test_tokenize_markup(self, normalizer):
        """Test that tags never become words."""
        tokens = normalizer.tokenize("<p>Hello <strong>world</strong></p>", markup=True)
        assert tokens == ["hello", "world"]

    def test_strip_markup_skips_scripts_and_styles(self, normalizer):
        """Test that script and style contents are not searchable."""
        markup = "<style>.x { color: red }</style><p>Visible</p><script>track()</script>"
        assert normalizer.tokenize(markup, markup=True) == ["visible"]

    def test_strip_markup_ignores_attributes(self, normalizer):
        """Test that attribute values do not leak into text."""
        markup = '<a href="https://example.com/secret" title="hidden">link</a>'
        assert normalizer.tokenize(markup, markup=True) == ["link"]

    def test_strip_markup_decodes_entities(self, normalizer):
        """Test that character references are decoded."""
        assert normalizer.strip_markup("Tom &amp; Jerry") == "Tom & Jerry"

    def test_strip_markup_separates_blocks(self, normalizer):
        """Test that adjacent block elements do not glue words together."""
        assert normalizer.tokenize("<li>one</li><li>two</li>", markup=True) == ["one", "two"]

    def test_strip_markup_plain_text_unchanged(self, normalizer):
        """Test the fast path for text without markup."""
        assert normalizer.strip_markup("plain text") == "plain text"

    def test_strip_markup_falls_back_to_raw_text(self, normalizer, monkeypatch):
        """Test that unparseable markup is searched as raw text."""
        def broken(markup):
            raise MalformedMarkupError("parser gave up")

        monkeypatch.setattr(normalizer_module, "extract_text", broken)

        assert normalizer.strip_markup("<p>raw") == "<p>raw"

    def test_extract_text(self):
        """Test the module-level text extractor."""
        assert extract_text("<div>a</div>b").split() == ["a", "b"]

    def test_prepare(self, normalizer):
        """Test that prepare returns joined text and words."""
        text, words = normalizer.prepare("Getting  Started!")
        assert text == "getting started"
        assert words == ("getting", "started")
