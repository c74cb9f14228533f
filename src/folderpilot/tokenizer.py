"""Summary: Word tokenization for the folder classifier.

Importance: Turns assembled message text into the normalized words the model counts.
Alternatives: Use an NLP toolkit tokenizer with stemming and stop words.
"""

from __future__ import annotations

import unicodedata
from abc import ABC, abstractmethod
from typing import Iterable, Iterator

import regex


# Letters, digits and combining marks, joined across the mid-word punctuation
# of Unicode word boundaries (e.g. "example.com", "don't", "हिन्दी").
_UNICODE_WORD = regex.compile(r"[\w\p{M}]+(?:[.'’:·][\w\p{M}]+)*")


class WordSegmenter(ABC):
    """Summary: Splits text into word-like units.

    Importance: Keeps boundary rules swappable for locales and for tests.
    Alternatives: Hardcode a single regular expression in the tokenizer.
    """

    @abstractmethod
    def segment(self, text: str) -> Iterable[str]:
        """Summary: Yield word-like units in text order.

        Importance: Feeds the filtering rules of the tokenizer.
        Alternatives: Return all boundary segments including punctuation.
        """


class PatternWordSegmenter(WordSegmenter):
    """Segmenter that yields every match of a regular expression."""

    def __init__(self, pattern: str | regex.Pattern) -> None:
        self._pattern = regex.compile(pattern) if isinstance(pattern, str) else pattern

    def segment(self, text: str) -> Iterable[str]:
        for match in self._pattern.finditer(text):
            yield match.group(0)


class UnicodeWordSegmenter(PatternWordSegmenter):
    """Summary: Default Unicode-aware word segmenter.

    Importance: Handles non-ASCII scripts and dotted host names as single words.
    Alternatives: Use ICU bindings for full locale-specific segmentation.
    """

    def __init__(self) -> None:
        super().__init__(_UNICODE_WORD)


class Tokenizer:
    """Summary: Produces unique normalized words for one message.

    Importance: Guarantees a word is counted at most once per message.
    Alternatives: Count every occurrence and weight by term frequency.
    """

    def __init__(self, segmenter: WordSegmenter | None = None) -> None:
        self._segmenter = segmenter or UnicodeWordSegmenter()

    def tokenize(self, text: str) -> Iterator[str]:
        """Summary: Lazily yield filtered, lower-cased, deduplicated words.

        Importance: Defines the exact vocabulary learned from a message.
        Alternatives: Return a set and lose the original word order.
        """

        seen: set[str] = set()
        for segment in self._segmenter.segment(text):
            # Composed and decomposed spellings are the same word.
            segment = unicodedata.normalize("NFC", segment)
            if len(segment) <= 1:
                continue
            if _has_digit(segment):
                continue
            word = segment.lower()
            if word in seen:
                continue
            seen.add(word)
            yield word


def _has_digit(value: str) -> bool:
    return any(ch.isdigit() for ch in value)
