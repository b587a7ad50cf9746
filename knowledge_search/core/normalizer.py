"""Text normalization utilities for consistent matching."""

import unicodedata
from html.parser import HTMLParser
from typing import List, Tuple

import structlog

from ..errors import MalformedMarkupError

logger = structlog.get_logger(__name__)

# Characters trimmed from both ends of a token. '+' and '#' are kept so that
# terms like "c++" and "c#" survive.
_EDGE_PUNCTUATION = "\"'`.,;:!?()[]{}<>«»“”‘’…-_/\\|*~=&^%$@"


class _TextExtractor(HTMLParser):
    """Collects the text content of a markup fragment."""

    SKIP_TAGS = frozenset({"script", "style", "noscript", "template", "head"})
    BLOCK_TAGS = frozenset({
        "address", "article", "aside", "blockquote", "br", "dd", "div", "dl",
        "dt", "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5",
        "h6", "header", "hr", "img", "li", "main", "nav", "ol", "p", "pre",
        "section", "table", "td", "th", "tr", "ul",
    })

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: List[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs) -> None:
        if tag in self.SKIP_TAGS:
            self._skip_depth += 1
        elif tag in self.BLOCK_TAGS:
            self._parts.append(" ")

    def handle_endtag(self, tag) -> None:
        if tag in self.SKIP_TAGS:
            if self._skip_depth:
                self._skip_depth -= 1
        elif tag in self.BLOCK_TAGS:
            self._parts.append(" ")

    def handle_data(self, data) -> None:
        if not self._skip_depth:
            self._parts.append(data)

    def text(self) -> str:
        return "".join(self._parts)


def extract_text(markup: str) -> str:
    """
    Extract the text content of a markup fragment.

    Raises:
        MalformedMarkupError: If the parser gives up on the input.
    """
    parser = _TextExtractor()
    try:
        parser.feed(markup)
        parser.close()
    except Exception as exc:
        raise MalformedMarkupError(str(exc)) from exc
    return parser.text()


class TextNormalizer:
    """Handles text normalization for consistent matching."""

    def strip_markup(self, markup: str) -> str:
        """
        Remove tags from a markup fragment, keeping only its text.

        Script and style contents and attribute values never leak into the
        result. Input the parser cannot handle is returned unchanged.

        Args:
            markup: Markup or plain text

        Returns:
            Text content
        """
        if not markup:
            return ""

        if "<" not in markup and "&" not in markup:
            return markup

        try:
            return extract_text(markup)
        except MalformedMarkupError as exc:
            logger.debug("Falling back to raw text for malformed markup", error=str(exc))
            return markup

    def normalize(self, text: str) -> str:
        """
        Normalize text for consistent processing.

        Args:
            text: Input text to normalize

        Returns:
            Lower-cased text with accents folded and whitespace collapsed
        """
        if not text:
            return ""

        decomposed = unicodedata.normalize("NFKD", text)
        folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))

        return " ".join(folded.lower().split())

    def tokenize(self, text: str, markup: bool = False) -> List[str]:
        """
        Tokenize text into normalized words.

        Args:
            text: Input text
            markup: Strip markup before tokenizing

        Returns:
            List of tokens
        """
        if not text:
            return []

        if markup:
            text = self.strip_markup(text)

        tokens = []
        for raw in self.normalize(text).split(" "):
            token = raw.strip(_EDGE_PUNCTUATION)
            if token:
                tokens.append(token)

        return tokens

    def prepare(self, text: str, markup: bool = False) -> Tuple[str, Tuple[str, ...]]:
        """Return the normalized text of a field together with its words."""
        words = tuple(self.tokenize(text, markup=markup))
        return " ".join(words), words
