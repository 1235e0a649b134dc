"""Forgettability scoring.

Each note gets five independent sub-scores (age, reference, value, emotion,
duplicate). Their sum is not re-clamped; notes whose sum exceeds the inclusion
threshold become pruning candidates. A reason is attached only when its
sub-score passes its own display threshold.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from metawave.config import settings
from metawave.core.errors import PersistenceError
from metawave.core.models.analysis import PruningCandidate
from metawave.core.models.base import ensure_aware
from metawave.utils.logging import get_logger

from .lexical import contains_phrase, keyword_similarity
from .lexicon import pruning_lexicon

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from metawave.core.models.note import Note

    from .lexicon import PruningLexicon

logger = get_logger(__name__)

DISTANT_PAST = datetime.min.replace(tzinfo=UTC)
DUPLICATE_SIMILARITY = 0.8
TITLE_LENGTH = 50
UNTITLED = "Untitled Note"

# (minimum age, score, label), checked oldest first
AGE_BANDS: tuple[tuple[timedelta, float, str], ...] = (
    (timedelta(days=365), 0.8, "over 1 year"),
    (timedelta(days=180), 0.6, "over 6 months"),
    (timedelta(days=90), 0.4, "over 3 months"),
    (timedelta(days=30), 0.2, "over 1 month"),
)


@dataclass(frozen=True)
class SubScore:
    value: float
    description: str


@dataclass
class PruningScore:
    total: float = 0.0
    reasons: list[str] = field(default_factory=list)

    def add(self, sub: SubScore, display_threshold: float, reason: str) -> None:
        self.total += sub.value
        if sub.value > display_threshold:
            self.reasons.append(reason)


class PruningScorer:
    """Ranks notes by how safely they could be deleted."""

    def __init__(self, lexicon: PruningLexicon | None = None, threshold: float | None = None) -> None:
        self._low_value = (lexicon or pruning_lexicon()).low_value
        self.threshold = threshold if threshold is not None else settings.pruning_threshold

    def analyze(
        self,
        notes: Sequence[Note],
        *,
        now: datetime | None = None,
        peers: Callable[[], Sequence[Note]] | None = None,
    ) -> list[PruningCandidate]:
        """Return candidates above the threshold, highest score first.

        ``peers`` fetches the notes used for duplicate detection; it defaults to
        ``notes`` itself. If it raises ``PersistenceError`` the duplicate
        sub-score is 0.0 for this run.
        """
        now = ensure_aware(now) or datetime.now(UTC)
        comparison = self._resolve_peers(notes, peers)

        candidates: list[PruningCandidate] = []
        for note in notes:
            score = self.score(note, now=now, peers=comparison)
            if score.total > self.threshold:
                candidates.append(
                    PruningCandidate(
                        note_id=note.id,
                        title=generate_title(note.text),
                        content=note.text,
                        created_at=note.created_at,
                        pruning_score=score.total,
                        reasons=score.reasons,
                    )
                )

        logger.info("Pruning analysis: %d of %d notes are candidates", len(candidates), len(notes))
        return sorted(candidates, key=lambda c: c.pruning_score, reverse=True)

    def score(self, note: Note, *, now: datetime, peers: Sequence[Note] | None) -> PruningScore:
        score = PruningScore()

        age = age_score(note.created_at, now)
        score.add(age, 0.5, f"Very old note ({age.description})")
        score.add(reference_score(note), 0.3, "Low reference frequency")
        score.add(self.value_score(note), 0.4, "Low content value")
        score.add(emotion_score(note), 0.3, "Negative emotional content")
        score.add(duplicate_score(note, peers), 0.4, "Similar content exists")

        return score

    def value_score(self, note: Note) -> SubScore:
        content = note.text.strip()
        if not content:
            return SubScore(0.8, "no content")

        length = len(content)
        if length < 20:
            return SubScore(0.7, "very short content")
        if length < 50 and any(contains_phrase(content, k) for k in self._low_value):
            return SubScore(0.6, "low-value keywords")
        if not note.tags and length < 100:
            return SubScore(0.4, "no tags, limited content")
        return SubScore(0.0, "valuable content")

    @staticmethod
    def _resolve_peers(
        notes: Sequence[Note],
        peers: Callable[[], Sequence[Note]] | None,
    ) -> Sequence[Note] | None:
        if peers is None:
            return notes
        try:
            return peers()
        except PersistenceError as err:
            logger.warning("Duplicate comparison unavailable, scoring without it: %s", err)
            return None


def age_score(created_at: datetime | None, now: datetime) -> SubScore:
    age = now - (created_at or DISTANT_PAST)
    for minimum, value, label in AGE_BANDS:
        if age > minimum:
            return SubScore(value, label)
    return SubScore(0.0, "recent")


def reference_score(note: Note) -> SubScore:
    # No reference log exists; short untagged notes are assumed never revisited
    length = len(note.text)
    tags = len(note.tags)
    if length < 50 and tags == 0:
        return SubScore(0.5, "short content, no tags")
    if length < 100 and tags <= 1:
        return SubScore(0.3, "limited content and tags")
    return SubScore(0.0, "sufficient content")


def emotion_score(note: Note) -> SubScore:
    if note.emotion_score is None:
        return SubScore(0.0, "no emotion data")
    valence = note.emotion_score.valence
    if valence < -0.7:
        return SubScore(0.6, "very negative emotion")
    if valence < -0.4:
        return SubScore(0.3, "negative emotion")
    return SubScore(0.0, "neutral/positive emotion")


def duplicate_score(note: Note, peers: Sequence[Note] | None) -> SubScore:
    if peers is None:
        return SubScore(0.0, "comparison failed")
    if not note.has_text:
        return SubScore(0.0, "no content to compare")

    similar = sum(
        1
        for other in peers
        if other.id != note.id and other.has_text
        and keyword_similarity(note.text, other.text) > DUPLICATE_SIMILARITY
    )
    if similar >= 3:
        return SubScore(0.7, f"many similar notes ({similar})")
    if similar >= 2:
        return SubScore(0.4, f"some similar notes ({similar})")
    return SubScore(0.0, "unique content")


def generate_title(text: str) -> str:
    if not text.strip():
        return UNTITLED
    first_line = text.strip().splitlines()[0]
    if len(first_line) > TITLE_LENGTH:
        return first_line[:TITLE_LENGTH] + "..."
    return first_line
