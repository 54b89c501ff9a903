"""
Text normalization utilities for slide text.

ElementTree escapes markup characters but happily writes characters that
XML 1.0 forbids, which makes the part unreadable for consumers. Everything
that ends up in an ``a:t`` or a metadata element goes through here first.
"""

import re
from typing import Optional


class TextNormalizer:
    """Normalizes caller-supplied text before it is placed into DrawingML."""

    # Characters with no business in slide text
    SPECIAL_CHARS = {
        '\u200b': '',       # Zero-width space → remove
        '\ufeff': '',       # Byte order mark → remove
        '\u00ad': '',       # Soft hyphen → remove
        '\u2028': ' ',      # Line separator → space
        '\u2029': ' ',      # Paragraph separator → space
    }

    # Regex for collapsing multiple whitespace characters
    WHITESPACE_PATTERN = re.compile(r'\s+')

    # Control characters, surrogates and non-characters are not allowed in XML 1.0
    ILLEGAL_XML_PATTERN = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')

    def __init__(self, preserve_whitespace: bool = False):
        """Initialize text normalizer.

        Args:
            preserve_whitespace: If True, keep whitespace exactly as given.
                                If False, collapse runs of whitespace to one space.
        """
        self.preserve_whitespace = preserve_whitespace

    def normalize_text(self, text: Optional[str]) -> str:
        """Return text that is safe to store in an XML text node."""
        if not text:
            return ""

        normalized = self._replace_special_chars(text)
        normalized = self._remove_illegal_chars(normalized)

        if not self.preserve_whitespace:
            normalized = self._normalize_whitespace(normalized)

        return normalized

    def _replace_special_chars(self, text: str) -> str:
        for original, replacement in self.SPECIAL_CHARS.items():
            text = text.replace(original, replacement)
        return text

    def _remove_illegal_chars(self, text: str) -> str:
        return self.ILLEGAL_XML_PATTERN.sub('', text)

    def _normalize_whitespace(self, text: str) -> str:
        return self.WHITESPACE_PATTERN.sub(' ', text).strip()


_DEFAULT_NORMALIZER = TextNormalizer()


def normalize_slide_text(text: Optional[str], preserve_whitespace: bool = False) -> str:
    """Convenience wrapper used by the slide and metadata builders."""
    if preserve_whitespace:
        return TextNormalizer(preserve_whitespace=True).normalize_text(text)
    return _DEFAULT_NORMALIZER.normalize_text(text)
