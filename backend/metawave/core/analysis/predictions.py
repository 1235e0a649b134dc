"""Short-range predictions drawn from recent notes.

Three independent heuristics, each of which may decline to predict:

* emotion trend: the last three scored notes of the past week against the
  three before them
* recurring pattern: the most frequent topic word showing up more often this
  week than before
* bias tendency: the share of notes that read negative or absolute
"""

from __future__ import annotations

import string
from collections import Counter
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from metawave.core.models.analysis import Prediction, PredictionImpact, PredictionType
from metawave.core.models.note import Modality
from metawave.utils.logging import get_logger

from .lexical import contains_phrase, whitespace_tokens
from .lexicon import prediction_lexicon

if TYPE_CHECKING:
    from collections.abc import Sequence

    from metawave.core.models.note import Note

    from .lexicon import PredictionLexicon

logger = get_logger(__name__)

RECENT = timedelta(days=7)

MIN_RECENT_NOTES = 5
MIN_RECENT_SCORES = 3
TREND_SAMPLE = 3
MIN_PREVIOUS_SCORES = 2
TREND_THRESHOLD = 0.2

MIN_PATTERN_NOTES = 10
MIN_TOPIC_LENGTH = 4
FREQUENCY_INCREASE = 1.5
MIN_RECENT_TOPIC_NOTES = 3

MIN_BIAS_NOTES = 10
NEGATIVE_VALENCE = -0.3
BIAS_RATIO = 0.3

TOKEN_PUNCTUATION = string.punctuation + "、。！？「」（）"

NEGATIVE_BIAS = "negative_bias"
CONFIRMATION_BIAS = "confirmation_bias"


class Predictor:
    def __init__(self, lexicon: PredictionLexicon | None = None) -> None:
        self._lexicon = lexicon or prediction_lexicon()

    def predict(self, notes: Sequence[Note], *, now: datetime | None = None) -> list[Prediction]:
        """Every prediction that applies, in a fixed order: trend, pattern, bias."""
        now = now or datetime.now(UTC)
        candidates = (
            self.emotion_trend(notes, now=now),
            self.recurring_pattern(notes, now=now),
            self.bias_tendency(notes),
        )
        predictions = [p for p in candidates if p is not None]
        logger.debug("Generated %d predictions over %d notes", len(predictions), len(notes))
        return predictions

    def emotion_trend(self, notes: Sequence[Note], *, now: datetime) -> Prediction | None:
        recent = sorted(
            (n for n in notes if n.has_text and n.created_at is not None and n.created_at >= now - RECENT),
            key=lambda n: n.created_at,
        )
        if len(recent) < MIN_RECENT_NOTES:
            return None

        scores = [n.emotion_score for n in recent if n.emotion_score is not None]
        if len(scores) < MIN_RECENT_SCORES:
            return None
        latest = scores[-TREND_SAMPLE:]
        previous = scores[:-TREND_SAMPLE][-TREND_SAMPLE:]
        if len(previous) < MIN_PREVIOUS_SCORES:
            return None

        valence_trend = _mean(s.valence for s in latest) - _mean(s.valence for s in previous)
        arousal_trend = _mean(s.arousal for s in latest) - _mean(s.arousal for s in previous)

        if valence_trend > TREND_THRESHOLD:
            kind = PredictionType.POSITIVE_TREND
            message = "Positive emotions have been rising in recent notes. This good stretch is likely to continue."
            confidence = min(0.9, 0.6 + abs(valence_trend))
        elif valence_trend < -TREND_THRESHOLD:
            kind = PredictionType.NEGATIVE_TREND
            message = "Negative emotions have been rising in recent notes. Rest or something you enjoy may help."
            confidence = min(0.9, 0.6 + abs(valence_trend))
        elif arousal_trend > TREND_THRESHOLD:
            kind = PredictionType.HIGH_AROUSAL
            message = "Recent notes show rising agitation. Setting aside time to unwind is recommended."
            confidence = 0.7
        else:
            kind = PredictionType.STABLE
            message = "Your emotional state has been fairly stable."
            confidence = 0.6

        return Prediction(
            type=kind,
            title="Emotion trend",
            message=message,
            confidence=confidence,
            impact=trend_impact(valence_trend, arousal_trend),
            timeframe="Next week",
        )

    def recurring_pattern(self, notes: Sequence[Note], *, now: datetime) -> Prediction | None:
        text_notes = [n for n in notes if n.modality is Modality.TEXT]
        if len(text_notes) < MIN_PATTERN_NOTES:
            return None

        topic = self.top_topic(text_notes)
        if topic is None:
            return None

        recent = [n for n in text_notes if n.created_at is not None and n.created_at >= now - RECENT]
        recent_ids = {n.id for n in recent}
        older = [n for n in text_notes if n.id not in recent_ids]
        recent_count = _mentions(topic, recent)
        increase = recent_count / max(_mentions(topic, older), 1)

        if increase <= FREQUENCY_INCREASE or recent_count < MIN_RECENT_TOPIC_NOTES:
            return None
        return Prediction(
            type=PredictionType.RECURRING_PATTERN,
            title="Recurring pattern",
            message=(
                f'Thoughts about "{topic}" keep coming back. Try noticing when this pattern '
                "starts and whether there is room to change it."
            ),
            confidence=min(0.8, 0.5 + increase * 0.1),
            impact=PredictionImpact.MEDIUM,
            timeframe="Ongoing",
        )

    def top_topic(self, notes: Sequence[Note]) -> str | None:
        """Most frequent word longer than three characters, stopwords excluded."""
        stopwords = {w.lower() for w in self._lexicon.stopwords}
        counts: Counter[str] = Counter()
        for note in notes:
            for token in whitespace_tokens(note.text):
                word = token.strip(TOKEN_PUNCTUATION)
                if len(word) >= MIN_TOPIC_LENGTH and word not in stopwords:
                    counts[word] += 1
        if not counts:
            return None
        return counts.most_common(1)[0][0]

    def bias_tendency(self, notes: Sequence[Note]) -> Prediction | None:
        if len(notes) < MIN_BIAS_NOTES:
            return None

        # Insertion order decides ties
        counts = {NEGATIVE_BIAS: 0, CONFIRMATION_BIAS: 0}
        for note in notes:
            if note.emotion_score is not None and note.emotion_score.valence < NEGATIVE_VALENCE:
                counts[NEGATIVE_BIAS] += 1
            if any(contains_phrase(note.text, phrase) for phrase in self._lexicon.absolutes):
                counts[CONFIRMATION_BIAS] += 1

        ratio = sum(counts.values()) / len(notes)
        if ratio <= BIAS_RATIO:
            return None

        dominant = max(counts, key=lambda k: counts[k])
        name = dominant.replace("_", " ").capitalize()
        return Prediction(
            type=PredictionType.BIAS_DETECTION,
            title="Cognitive bias tendency",
            message=f"{name} shows up often. Looking at things from a different angle may help.",
            confidence=min(0.8, ratio),
            impact=PredictionImpact.HIGH,
            timeframe="Ongoing",
        )


def trend_impact(valence_trend: float, arousal_trend: float) -> PredictionImpact:
    change = abs(valence_trend) + abs(arousal_trend)
    if change > 0.4:
        return PredictionImpact.HIGH
    if change > 0.2:
        return PredictionImpact.MEDIUM
    return PredictionImpact.LOW


def _mean(values) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def _mentions(topic: str, notes: Sequence[Note]) -> int:
    return sum(1 for n in notes if topic in n.text.lower())
