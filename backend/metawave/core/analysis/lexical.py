"""Stateless text helpers shared by every analyzer."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from .lexicon import tagger_lexicon

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .lexicon import TaggerLexicon


WORD_RE = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)*")
NUMBER_RE = re.compile(r"\d+")
REPEATED_CHAR_RE = re.compile(r"(.)\1{2,}")


def is_latin(phrase: str) -> bool:
    return all(ord(ch) < 0x250 or not ch.isalpha() for ch in phrase)


def whitespace_tokens(text: str) -> list[str]:
    """Lowercased whitespace-separated tokens, empty tokens dropped."""
    return text.lower().split()


def word_tokens(text: str) -> list[str]:
    """Word-boundary tokens in original casing (punctuation and digits removed)."""
    return WORD_RE.findall(text)


def contains_phrase(text: str, phrase: str) -> bool:
    """Case-insensitive phrase test.

    Latin-script phrases must sit on word boundaries ("all" does not match
    "really"); other scripts have no spaces between words, so they match anywhere.
    """
    needle = phrase.lower().strip()
    if not needle:
        return False
    haystack = text.lower()
    if not is_latin(needle):
        return needle in haystack
    return re.search(rf"(?<!\w){re.escape(needle)}(?!\w)", haystack) is not None


def count_phrases(text: str, phrases: Iterable[str]) -> int:
    """Number of distinct phrases present in ``text``."""
    return sum(1 for phrase in phrases if contains_phrase(text, phrase))


def count_occurrences(text: str, keywords: Iterable[str]) -> int:
    """Total substring occurrences of every keyword (case-insensitive)."""
    haystack = text.lower()
    return sum(haystack.count(k.lower()) for k in keywords if k)


def tokens_containing(tokens: Iterable[str], keywords: Sequence[str]) -> int:
    """Number of tokens containing at least one keyword as a substring."""
    lowered = [k.lower() for k in keywords]
    return sum(1 for token in tokens if any(k in token for k in lowered))


def first_integer(text: str) -> int | None:
    match = NUMBER_RE.search(text)
    return int(match.group(0)) if match else None


def jaccard(a: set[str], b: set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def keyword_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the lowercased whitespace word sets."""
    return jaccard(set(whitespace_tokens(text1)), set(whitespace_tokens(text2)))


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class WordClass(str, Enum):
    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    OTHER = "other"


class LexicalTagger(ABC):
    """Tokenizer plus coarse part-of-speech classifier.

    Any implementation (an NLP library or the rule-based one below) can be
    injected into the analyzers.
    """

    @abstractmethod
    def tag(self, text: str) -> list[tuple[str, WordClass]]:  # pragma: no cover - interface only
        """Return ``(token, word_class)`` pairs in text order, original casing."""

    def words_of(self, text: str, word_class: WordClass, *, min_length: int = 3) -> set[str]:
        """Lowercased tokens of one class, ignoring tokens shorter than ``min_length``."""
        return {
            token.lower()
            for token, cls in self.tag(text)
            if cls is word_class and len(token) >= min_length
        }


class RuleBasedTagger(LexicalTagger):
    """Dictionary and suffix heuristics; good enough to separate nouns from verbs.

    Closed-class words are ``OTHER``; known verbs, auxiliaries and suffix
    patterns decide the rest, with a one-token lookbehind ("to" or a pronoun
    before a word makes it a verb). Words in non-Latin scripts are nouns.
    """

    _VERB_CUES = {"to", "i", "you", "we", "they", "he", "she", "will", "would", "can", "could", "should", "must"}

    def __init__(self, lexicon: TaggerLexicon | None = None) -> None:
        lexicon = lexicon or tagger_lexicon()
        self._function = {w.lower() for w in lexicon.function_words}
        self._auxiliaries = {w.lower() for w in lexicon.auxiliaries}
        self._verbs = {w.lower() for w in lexicon.verbs}
        self._adjectives = {w.lower() for w in lexicon.adjectives}
        self._verb_suffixes = tuple(lexicon.suffixes.verb)
        self._adjective_suffixes = tuple(lexicon.suffixes.adjective)
        self._adverb_suffixes = tuple(lexicon.suffixes.adverb)

    def tag(self, text: str) -> list[tuple[str, WordClass]]:
        tagged: list[tuple[str, WordClass]] = []
        previous = ""
        for token in word_tokens(text):
            word = token.lower().replace("’", "'")
            tagged.append((token, self._classify(word, previous)))
            previous = word
        return tagged

    def _classify(self, word: str, previous: str) -> WordClass:
        if not is_latin(word):
            return WordClass.NOUN
        if word in self._function:
            return WordClass.OTHER
        if word in self._auxiliaries:
            return WordClass.VERB
        if word in self._adjectives:
            return WordClass.ADJECTIVE
        if word in self._verbs or previous in self._VERB_CUES:
            return WordClass.VERB
        if len(word) > 4 and word.endswith(self._adverb_suffixes):
            return WordClass.ADVERB
        if len(word) > 4 and word.endswith(self._verb_suffixes):
            return WordClass.VERB
        if len(word) > 4 and word.endswith(self._adjective_suffixes):
            return WordClass.ADJECTIVE
        return WordClass.NOUN
