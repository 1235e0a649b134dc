from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from metawave.config import settings
from metawave.core.analysis import (
    AdvancedEmotionScorer,
    BiasEvaluator,
    LoopClusterer,
    PatternAnalyzer,
    Predictor,
    PruningScorer,
)
from metawave.core.errors import NoteNotFoundError
from metawave.core.models.analysis import (
    AnalysisReport,
    AnalysisStatistics,
    Insight,
    InsightKind,
)
from metawave.core.models.note import Modality
from metawave.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from metawave.core.models.analysis import (
        BiasSignal,
        EmotionalShift,
        LoopCluster,
        MultipleEmotionResult,
        PatternReport,
        Prediction,
        PruningCandidate,
    )
    from metawave.core.models.note import EmotionScore, Note
    from metawave.core.repositories.note_repository import NoteRepository

logger = get_logger(__name__)

NEGATIVE_TREND_VALENCE = -0.3
TOP_LOOP_INSIGHTS = 3


class AnalysisService:
    """Runs the note analyzers against a user's notes.

    The analyzers are pure and synchronous; collection-wide analyses are moved
    to a worker thread so the event loop stays free. All storage access goes
    through the repository, whose failures propagate as ``PersistenceError``.
    """

    def __init__(
        self,
        repo: NoteRepository,
        emotion: AdvancedEmotionScorer | None = None,
        biases: BiasEvaluator | None = None,
        loops: LoopClusterer | None = None,
        pruning: PruningScorer | None = None,
        patterns: PatternAnalyzer | None = None,
        predictor: Predictor | None = None,
        *,
        max_concurrency: int | None = None,
    ) -> None:
        self._repo = repo
        self._emotion = emotion or AdvancedEmotionScorer()
        self._biases = biases or BiasEvaluator()
        self._loops = loops or LoopClusterer()
        self._pruning = pruning or PruningScorer()
        self._patterns = patterns or PatternAnalyzer()
        self._predictor = predictor or Predictor()
        self._max_concurrency = max_concurrency or settings.analysis_max_concurrency

    # Text-level entry points

    def score_emotion(self, text: str) -> EmotionScore:
        return self._emotion.analyze(text)

    def analyze_multiple_emotions(self, text: str) -> MultipleEmotionResult:
        return self._emotion.analyze_multiple_emotions(text)

    def intensity(self, text: str) -> float:
        return self._emotion.intensity(text)

    def emotion_intensity(self, text: str) -> float:
        return self._emotion.emotion_intensity(text)

    def detect_emotional_shift(self, text: str) -> EmotionalShift | None:
        return self._emotion.detect_emotional_shift(text)

    # Collection-level entry points

    async def evaluate_biases(self, notes: Sequence[Note]) -> dict[BiasSignal, float]:
        return await asyncio.to_thread(self._biases.evaluate, notes)

    async def cluster_loops(self, notes: Sequence[Note]) -> list[LoopCluster]:
        return await asyncio.to_thread(self._loops.cluster, notes)

    async def analyze_pruning(self, notes: Sequence[Note], *, now: datetime | None = None) -> list[PruningCandidate]:
        return await asyncio.to_thread(self._pruning.analyze, notes, now=now)

    async def execute_pruning(self, candidates: Sequence[PruningCandidate]) -> int:
        """Delete the notes behind ``candidates`` in one batch.

        An empty list is a no-op. If the delete fails nothing is considered
        removed and the error propagates.
        """
        if not candidates:
            return 0
        note_ids = list(dict.fromkeys(c.note_id for c in candidates))
        await self._repo.delete_notes(note_ids)
        logger.info("Pruned %d notes", len(note_ids))
        return len(note_ids)

    # Repository-backed operations

    async def score_note(self, note_id: UUID) -> Note:
        note = await self._repo.get(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        if not note.has_text:
            logger.debug("Skipping emotion scoring for blank note %s", note_id)
            return note

        updated = await self._repo.update_emotion_score(note_id, self.score_emotion(note.text))
        if updated is None:
            raise NoteNotFoundError(note_id)
        return updated

    async def score_all_notes(self, user_id: UUID | None = None) -> int:
        """Score and persist every note with text. Returns the number scored."""
        notes = [n for n in await self._repo.fetch_all_notes(user_id=user_id) if n.has_text]
        scores = await asyncio.to_thread(lambda: [self.score_emotion(n.text) for n in notes])

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _persist(note: Note, score: EmotionScore) -> None:
            async with semaphore:
                await self._repo.update_emotion_score(note.id, score)

        # Every write settles before a failure is reported
        results = await asyncio.gather(
            *(_persist(n, s) for n, s in zip(notes, scores)),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error("Failed to persist %d of %d emotion scores", len(failures), len(notes))
            raise failures[0]
        logger.info("Scored emotions for %d notes", len(notes))
        return len(notes)

    async def detect_loops(self, user_id: UUID | None = None) -> list[LoopCluster]:
        notes = await self._repo.fetch_all_notes(user_id=user_id)
        return await self.cluster_loops(notes)

    async def detect_biases(self, user_id: UUID | None = None) -> dict[BiasSignal, float]:
        notes = await self._repo.fetch_all_notes(user_id=user_id)
        return await self.evaluate_biases(notes)

    async def find_pruning_candidates(
        self,
        user_id: UUID | None = None,
        *,
        now: datetime | None = None,
    ) -> list[PruningCandidate]:
        notes = await self._repo.fetch_all_notes(user_id=user_id)
        return await self.analyze_pruning(notes, now=now)

    async def analyze_patterns(
        self,
        user_id: UUID | None = None,
        *,
        now: datetime | None = None,
    ) -> PatternReport:
        notes = await self._repo.fetch_all_notes(user_id=user_id)
        return await asyncio.to_thread(self._patterns.analyze, notes, now=now)

    async def predict(
        self,
        user_id: UUID | None = None,
        *,
        now: datetime | None = None,
    ) -> list[Prediction]:
        notes = await self._repo.fetch_all_notes(user_id=user_id)
        return await asyncio.to_thread(self._predictor.predict, notes, now=now)

    async def comprehensive_analysis(
        self,
        user_id: UUID | None = None,
        *,
        now: datetime | None = None,
    ) -> AnalysisReport:
        """Score emotions, then run loop and bias detection over the fresh scores."""
        await self.score_all_notes(user_id)
        notes = await self._repo.fetch_all_notes(user_id=user_id)

        clusters = await self.cluster_loops(notes)
        bias_signals = await self.evaluate_biases(notes)
        statistics = build_statistics(notes, now or datetime.now(UTC))

        return AnalysisReport(
            clusters=clusters,
            statistics=statistics,
            insights=build_insights(notes, clusters, statistics),
            bias_signals=bias_signals,
        )


def build_statistics(notes: Sequence[Note], analysis_date: datetime) -> AnalysisStatistics:
    text_notes = [n for n in notes if n.modality is Modality.TEXT]
    voice_notes = [n for n in notes if n.modality is Modality.VOICE]
    scores = [n.emotion_score for n in text_notes if n.emotion_score is not None]

    return AnalysisStatistics(
        total_notes=len(notes),
        text_notes=len(text_notes),
        voice_notes=len(voice_notes),
        average_valence=sum(s.valence for s in scores) / len(scores) if scores else 0.0,
        average_arousal=sum(s.arousal for s in scores) / len(scores) if scores else 0.0,
        analysis_date=analysis_date,
    )


def build_insights(
    notes: Sequence[Note],
    clusters: Sequence[LoopCluster],
    statistics: AnalysisStatistics,
) -> list[Insight]:
    insights: list[Insight] = []

    if statistics.average_valence < NEGATIVE_TREND_VALENCE:
        insights.append(
            Insight(
                kind=InsightKind.BIORHYTHM,
                payload={
                    "type": "negative_trend",
                    "message": "Negative emotions have been frequent in recent notes.",
                    "recommendation": "Consider making room for rest or activities you enjoy.",
                },
            )
        )

    created = {n.id: n.created_at for n in notes}
    for cluster in clusters[:TOP_LOOP_INSIGHTS]:
        insights.append(
            Insight(
                kind=InsightKind.LOOP,
                note_ids=cluster.note_ids,
                payload={
                    "topic": cluster.topic,
                    "strength": cluster.strength,
                    "note_count": len(cluster.note_ids),
                    "time_span": time_span([created.get(i) for i in cluster.note_ids]),
                },
            )
        )

    return insights


def time_span(stamps: Sequence[datetime | None]) -> float:
    """Seconds between the earliest and latest known timestamp."""
    known = sorted(s for s in stamps if s is not None)
    if len(known) < 2:
        return 0.0
    return (known[-1] - known[0]).total_seconds()
