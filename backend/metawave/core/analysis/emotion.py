"""Per-text emotion scoring.

Everything here is heuristic and explainable: keyword tables from
``data/emotion.yaml`` and ``data/sentiment.yaml``, weighted sums, and clamps.
No function raises for odd input; blank text yields neutral results.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from metawave.config import settings
from metawave.core.models.analysis import (
    DetailedEmotionAnalysis,
    EmotionalShift,
    EmotionCategory,
    EmotionContext,
    EmotionDomain,
    EmotionTrigger,
    MultipleEmotionResult,
)
from metawave.core.models.note import EmotionScore
from metawave.utils.logging import get_logger

from .lexical import (
    REPEATED_CHAR_RE,
    clamp,
    count_occurrences,
    is_latin,
    tokens_containing,
    whitespace_tokens,
    word_tokens,
)
from .lexicon import emotion_lexicon, sentiment_lexicon

if TYPE_CHECKING:
    from enum import Enum

    from .lexicon import EmotionLexicon, SentimentLexicon

logger = get_logger(__name__)

NEUTRAL_AROUSAL = 0.5
AROUSAL_LENGTH_SATURATION = 500  # characters
SENTIMENT_ALPHA = 15.0
NEGATION_SCALAR = -0.74
NEGATION_WINDOW = 3  # tokens
EXCLAMATION_BOOST = 0.292
NEGATION_ADJUSTMENT = 0.2
SHIFT_THRESHOLD = 0.2


class EmotionAnalyzer(ABC):
    """Turns a text into a valence/arousal pair."""

    @abstractmethod
    def analyze(self, text: str) -> EmotionScore:  # pragma: no cover - interface only
        """Score ``text``; blank text must return ``EmotionScore.neutral()``."""


class BasicEmotionScorer(EmotionAnalyzer):
    """Lexicon valence plus keyword-density arousal."""

    def __init__(
        self,
        lexicon: EmotionLexicon | None = None,
        sentiment: SentimentLexicon | None = None,
    ) -> None:
        lexicon = lexicon or emotion_lexicon()
        sentiment = sentiment or sentiment_lexicon()
        self._high_arousal = [k.lower() for k in lexicon.arousal.high]
        self._low_arousal = [k.lower() for k in lexicon.arousal.low]

        polarity = sentiment.polarity()
        self._word_polarity = {k: v for k, v in polarity.items() if is_latin(k)}
        self._script_polarity = {k: v for k, v in polarity.items() if not is_latin(k)}
        self._negators = {n.lower() for n in sentiment.negators}
        self._intensifiers = {k.lower(): v for k, v in sentiment.intensifiers.items()}

    def analyze(self, text: str) -> EmotionScore:
        if not text or not text.strip():
            return EmotionScore.neutral()
        return EmotionScore(valence=self.valence(text), arousal=self.arousal(text))

    def valence(self, text: str) -> float:
        """Mean normalized polarity of the text's paragraphs, in [-1, 1]."""
        paragraph_scores = [
            self._paragraph_valence(p) for p in text.splitlines() if p.strip()
        ]
        if not paragraph_scores:
            return 0.0
        return clamp(sum(paragraph_scores) / len(paragraph_scores), -1.0, 1.0)

    def arousal(self, text: str) -> float:
        tokens = whitespace_tokens(text)
        high = tokens_containing(tokens, self._high_arousal)
        low = tokens_containing(tokens, self._low_arousal)

        arousal = NEUTRAL_AROUSAL
        if high + low > 0:
            arousal = high / (high + low)

        # Longer entries tend to be written in a more activated state
        length_factor = min(len(text) / AROUSAL_LENGTH_SATURATION, 1.0)
        return clamp((arousal + length_factor) / 2.0)

    def _paragraph_valence(self, paragraph: str) -> float:
        total = 0.0
        multiplier = 1.0
        negation_left = 0

        for token in word_tokens(paragraph):
            word = token.lower().replace("’", "'")
            if word in self._negators:
                negation_left = NEGATION_WINDOW
                continue
            if word in self._intensifiers:
                multiplier *= self._intensifiers[word]
                continue

            weight = self._token_polarity(word)
            if weight:
                if negation_left > 0:
                    weight *= NEGATION_SCALAR
                total += weight * multiplier
            multiplier = 1.0
            negation_left = max(0, negation_left - 1)

        if total:
            total += math.copysign(EXCLAMATION_BOOST * min(paragraph.count("!"), 4), total)
        return total / math.sqrt(total * total + SENTIMENT_ALPHA)

    def _token_polarity(self, word: str) -> float:
        if word in self._word_polarity:
            return self._word_polarity[word]
        if is_latin(word):
            return 0.0
        # Scripts without spaces come out as long runs; look for entries inside them
        return sum(v for k, v in self._script_polarity.items() if k in word)


class AdvancedEmotionScorer(EmotionAnalyzer):
    """Adds multi-emotion, intensity, context and shift analysis on top of a base analyzer."""

    def __init__(
        self,
        base: EmotionAnalyzer | None = None,
        lexicon: EmotionLexicon | None = None,
        secondary_count: int | None = None,
    ) -> None:
        lexicon = lexicon or emotion_lexicon()
        self._base = base or BasicEmotionScorer(lexicon=lexicon)
        self._secondary_count = (
            secondary_count if secondary_count is not None else settings.emotion_secondary_count
        )
        self._categories = _keyed_table(lexicon.categories, EmotionCategory)
        self._positive_negations = [p.lower() for p in lexicon.negations.positive]
        self._negative_negations = [p.lower() for p in lexicon.negations.negative]
        self._intensity_keywords = [k.lower() for k in lexicon.intensity_keywords]
        self._emphasis_keywords = [k.lower() for k in lexicon.emphasis_keywords]
        self._domains = _keyed_table(lexicon.domains, EmotionDomain)
        self._triggers = _keyed_table(lexicon.triggers, EmotionTrigger)

    def analyze(self, text: str) -> EmotionScore:
        return self._base.analyze(text)

    def analyze_multiple_emotions(self, text: str) -> MultipleEmotionResult:
        scores = self.emotion_breakdown(text)
        primary = select_primary_emotion(scores)
        return MultipleEmotionResult(
            scores=scores,
            primary_emotion=primary,
            secondary_emotions=secondary_emotions(scores, primary, self._secondary_count),
            intensity=self.intensity(text),
            context=self.analyze_context(text),
            base_score=self.analyze(text),
        )

    def analyze_detailed(self, text: str) -> DetailedEmotionAnalysis:
        return DetailedEmotionAnalysis(
            base_score=self.analyze(text),
            emotions=self.emotion_breakdown(text),
            intensity=self.intensity(text),
            confidence=confidence(text),
        )

    def emotion_breakdown(self, text: str) -> dict[EmotionCategory, float]:
        """Keyword density per category, adjusted for negated emotion words."""
        lowered = (text or "").lower()
        total_words = max(len(whitespace_tokens(lowered)), 1)

        scores = {category: 0.0 for category in EmotionCategory}
        for category, keywords in self._categories.items():
            scores[category] = count_occurrences(lowered, keywords) / total_words

        for phrase in self._positive_negations:
            if phrase in lowered:
                scores[EmotionCategory.JOY] += NEGATION_ADJUSTMENT
                scores[EmotionCategory.SADNESS] = max(0.0, scores[EmotionCategory.SADNESS] - NEGATION_ADJUSTMENT)
        for phrase in self._negative_negations:
            if phrase in lowered:
                scores[EmotionCategory.SADNESS] += NEGATION_ADJUSTMENT
                scores[EmotionCategory.JOY] = max(0.0, scores[EmotionCategory.JOY] - NEGATION_ADJUSTMENT)

        return scores

    def intensity(self, text: str) -> float:
        """Punctuation, casing and emphasis-word intensity in [0, 1]."""
        if not text:
            return 0.0
        length = max(len(text), 1)
        exclamation_density = text.count("!") / length
        caps_density = sum(1 for ch in text if ch.isupper()) / length
        repeated_runs = len(REPEATED_CHAR_RE.findall(text))
        lowered = text.lower()
        keyword_hits = sum(1 for k in self._intensity_keywords if k in lowered)

        intensity = (
            exclamation_density * 0.3
            + caps_density * 0.3
            + repeated_runs * 0.1
            + keyword_hits * 0.1
        )
        return clamp(intensity)

    def emotion_intensity(self, text: str) -> float:
        """Intensity that also folds in the base valence/arousal score."""
        if not text or not text.strip():
            return 0.0
        score = self.analyze(text)
        marks = text.count("!") + text.count("?") + sum(1 for ch in text if ch.isupper())
        lowered = text.lower()
        keyword_hits = sum(1 for k in self._emphasis_keywords if k in lowered)

        intensity = abs(score.valence) + score.arousal
        intensity += marks / max(len(text), 1) * 0.3
        intensity += keyword_hits * 0.1
        return clamp(intensity / 2.5)

    def analyze_context(self, text: str) -> EmotionContext:
        lowered = (text or "").lower()
        domains = [d for d, keywords in self._domains.items() if any(k in lowered for k in keywords)]
        triggers = [t for t, keywords in self._triggers.items() if any(k in lowered for k in keywords)]
        return EmotionContext(domains=domains or [EmotionDomain.GENERAL], triggers=triggers)

    def detect_emotional_shift(self, text: str) -> EmotionalShift | None:
        """Compare the first and last halves of a multi-line text.

        With an odd number of lines the middle one belongs to neither half.
        """
        lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
        if len(lines) < 2:
            return None

        half = len(lines) // 2
        first = self.analyze(" ".join(lines[:half]))
        second = self.analyze(" ".join(lines[-half:]))

        valence_shift = second.valence - first.valence
        arousal_shift = second.arousal - first.arousal
        if abs(valence_shift) <= SHIFT_THRESHOLD and abs(arousal_shift) <= SHIFT_THRESHOLD:
            return None

        return EmotionalShift(
            from_score=first,
            to_score=second,
            valence_shift=valence_shift,
            arousal_shift=arousal_shift,
        )


def select_primary_emotion(scores: dict[EmotionCategory, float]) -> EmotionCategory:
    """Highest-scoring category; the first maximum in category order wins ties."""
    primary = EmotionCategory.JOY
    best = -1.0
    for category in EmotionCategory:
        value = scores.get(category, 0.0)
        if value > best:
            primary, best = category, value
    return primary


def secondary_emotions(
    scores: dict[EmotionCategory, float],
    primary: EmotionCategory,
    count: int = 2,
) -> list[EmotionCategory]:
    ranked = sorted(
        (c for c in EmotionCategory if c is not primary),
        key=lambda c: scores.get(c, 0.0),
        reverse=True,
    )
    return ranked[: max(count, 0)]


def confidence(text: str) -> float:
    """Longer, punctuated texts give more trustworthy scores."""
    base = min(len(text or "") / 100.0, 1.0)
    has_punctuation = any(ch in "!?." for ch in text or "")
    return base if has_punctuation else base * 0.7


def _keyed_table(table: dict[str, list[str]], enum_type: type[Enum]) -> dict:
    keyed = {}
    for key, keywords in table.items():
        try:
            member = enum_type(key)
        except ValueError:
            logger.warning("Ignoring unknown %s key in keyword table: %s", enum_type.__name__, key)
            continue
        keyed[member] = [k.lower() for k in keywords if k]
    return keyed
