"""Corpus-level cognitive bias signals.

Each detector looks at the whole note collection at once and returns a score
in [0, 1]. Below its minimum note count a detector contributes 0.0.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from metawave.config import settings
from metawave.core.models.analysis import BiasSignal
from metawave.core.models.note import Modality
from metawave.utils.logging import get_logger

from .lexical import clamp, count_phrases, first_integer
from .lexicon import bias_lexicon

if TYPE_CHECKING:
    from collections.abc import Sequence

    from metawave.core.models.note import EmotionScore, Note

    from .lexicon import BiasLexicon

logger = get_logger(__name__)

MIN_NOTES = 3
MIN_NOTES_AVAILABILITY = 5
MIN_SCORED_FOR_CONSISTENCY = 3
CONSISTENCY_BAND = 0.1
NEGATIVE_VALENCE = -0.2
ANCHOR_VARIANCE_SCALE = 100.0


class BiasEvaluator:
    """Scores the five bias signals over a note collection."""

    def __init__(self, lexicon: BiasLexicon | None = None, *, include_voice: bool | None = None) -> None:
        self._lexicon = lexicon or bias_lexicon()
        self.include_voice = include_voice if include_voice is not None else settings.bias_include_voice

    def evaluate(self, notes: Sequence[Note]) -> dict[BiasSignal, float]:
        """Score every signal over the text notes of the collection.

        Voice transcripts are left out unless ``include_voice`` is set.
        """
        texts = [n for n in notes if n.has_text and self._eligible_modality(n)]
        logger.debug("Evaluating biases over %d notes (%d eligible)", len(notes), len(texts))
        return {
            BiasSignal.CONFIRMATION: self.confirmation_bias(texts),
            BiasSignal.AVAILABILITY: self.availability_bias(texts),
            BiasSignal.ANCHORING: self.anchoring_bias(texts),
            BiasSignal.LOSS_AVERSION: self.loss_aversion(texts),
            BiasSignal.SUNK_COST: self.sunk_cost(texts),
        }

    def confirmation_bias(self, notes: Sequence[Note]) -> float:
        if len(notes) < MIN_NOTES:
            return 0.0
        table = self._lexicon.confirmation

        score = _frequency(notes, table.get("extreme", [])) * 0.3
        score += _frequency(notes, table.get("contrastive", [])) * 0.2

        scored = _attached_scores(notes)
        if len(scored) >= MIN_SCORED_FOR_CONSISTENCY:
            score += emotion_consistency([s.valence for s in scored]) * 0.5

        return clamp(score)

    def availability_bias(self, notes: Sequence[Note]) -> float:
        if len(notes) < MIN_NOTES_AVAILABILITY:
            return 0.0
        table = self._lexicon.availability

        score = _frequency(notes, table.get("recency", [])) * 0.4
        score += _frequency(notes, table.get("emotional", [])) * 0.3
        score += _frequency(notes, table.get("personal", [])) * 0.3
        return clamp(score)

    def anchoring_bias(self, notes: Sequence[Note]) -> float:
        if len(notes) < MIN_NOTES:
            return 0.0
        table = self._lexicon.anchoring

        score = 0.0
        first_numbers = [n for n in (first_integer(note.text) for note in notes) if n is not None]
        if len(first_numbers) >= 2:
            variance = population_variance(first_numbers)
            score += (1.0 - min(1.0, variance / ANCHOR_VARIANCE_SCALE)) * 0.4

        score += _frequency(notes, table.get("comparison", [])) * 0.3
        score += _frequency(notes, table.get("first_impression", [])) * 0.3
        return clamp(score)

    def loss_aversion(self, notes: Sequence[Note]) -> float:
        if len(notes) < MIN_NOTES:
            return 0.0
        table = self._lexicon.loss_aversion

        score = _frequency(notes, table.get("loss", [])) * 0.4
        score += _frequency(notes, table.get("risk", [])) * 0.3

        scored = _attached_scores(notes)
        if scored:
            negative = sum(1 for s in scored if s.valence < NEGATIVE_VALENCE)
            score += negative / len(scored) * 0.3

        return clamp(score)

    def sunk_cost(self, notes: Sequence[Note]) -> float:
        if len(notes) < MIN_NOTES:
            return 0.0
        table = self._lexicon.sunk_cost

        score = _frequency(notes, table.get("investment", [])) * 0.3
        score += _frequency(notes, table.get("continuation", [])) * 0.3
        score += _frequency(notes, table.get("past_decision", [])) * 0.4
        return clamp(score)

    def _eligible_modality(self, note: Note) -> bool:
        return note.modality is Modality.TEXT or (self.include_voice and note.modality is Modality.VOICE)


def emotion_consistency(valences: Sequence[float]) -> float:
    """Share of the dominant polarity; values near zero count for neither side."""
    if len(valences) < 2:
        return 0.0
    positive = sum(1 for v in valences if v > CONSISTENCY_BAND)
    negative = sum(1 for v in valences if v < -CONSISTENCY_BAND)
    return max(positive, negative) / len(valences)


def population_variance(numbers: Sequence[int]) -> float:
    if len(numbers) < 2:
        return 0.0
    mean = sum(numbers) / len(numbers)
    return sum((n - mean) ** 2 for n in numbers) / len(numbers)


def _frequency(notes: Sequence[Note], phrases: Sequence[str]) -> float:
    """Distinct phrases present per note, averaged over the collection."""
    if not notes:
        return 0.0
    return sum(count_phrases(note.text, phrases) for note in notes) / len(notes)


def _attached_scores(notes: Sequence[Note]) -> list[EmotionScore]:
    return [n.emotion_score for n in notes if n.emotion_score is not None]
