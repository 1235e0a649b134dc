"""Time patterns in a note collection.

Notes are bucketed by hour of day, by ISO weekday and by calendar day in the
configured zone. Averages are taken over the notes that carry an emotion
score; counts include every note with text.
"""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from metawave.config import settings
from metawave.core.models.analysis import (
    EmotionCategory,
    EmotionTrend,
    HourlyPattern,
    PatternReport,
    PatternSummary,
    WeeklyPattern,
)
from metawave.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date, tzinfo

    from metawave.core.models.note import EmotionScore, Note

logger = get_logger(__name__)

POSITIVE_VALENCE = 0.3
NEGATIVE_VALENCE = -0.3
HIGH_AROUSAL = 0.5
LOW_AROUSAL = 0.3


def category_for(score: EmotionScore) -> EmotionCategory | None:
    """Map a valence/arousal pair onto a basic emotion.

    Mild valence with mid-range arousal maps to nothing.
    """
    if score.valence > POSITIVE_VALENCE:
        return EmotionCategory.JOY
    if score.valence < NEGATIVE_VALENCE:
        return EmotionCategory.ANGER if score.arousal > HIGH_AROUSAL else EmotionCategory.SADNESS
    if score.arousal > HIGH_AROUSAL:
        return EmotionCategory.SURPRISE
    if score.arousal < LOW_AROUSAL:
        return EmotionCategory.DISGUST
    return None


def dominant_emotion(notes: Sequence[Note]) -> EmotionCategory | None:
    """Most frequent mapped category; ties go to the earlier category."""
    categories = (category_for(n.emotion_score) for n in notes if n.emotion_score is not None)
    counts = Counter(c for c in categories if c is not None)
    if not counts:
        return None
    return max(EmotionCategory, key=lambda c: counts[c])


def average_scores(notes: Sequence[Note]) -> tuple[float, float]:
    scores = [n.emotion_score for n in notes if n.emotion_score is not None]
    if not scores:
        return 0.0, 0.0
    return (
        sum(s.valence for s in scores) / len(scores),
        sum(s.arousal for s in scores) / len(scores),
    )


def most_common_key(counts: Counter) -> int | None:
    """Key with the highest count, the smallest key winning ties."""
    if not counts:
        return None
    return min(counts, key=lambda k: (-counts[k], k))


def zone(name: str) -> tzinfo:
    return UTC if name.upper() == "UTC" else ZoneInfo(name)


class PatternAnalyzer:
    """Hourly, weekly and daily emotion patterns."""

    def __init__(self, *, tz: tzinfo | None = None, trend_days: int | None = None) -> None:
        self.tz = tz or zone(settings.pattern_timezone)
        self.trend_days = trend_days if trend_days is not None else settings.pattern_trend_days

    def analyze(self, notes: Sequence[Note], *, now: datetime | None = None) -> PatternReport:
        eligible = [n for n in notes if n.has_text]
        logger.debug("Pattern analysis over %d notes (%d with text)", len(notes), len(eligible))
        return PatternReport(
            hourly=self.hourly_patterns(eligible),
            weekly=self.weekly_patterns(eligible),
            trends=self.emotion_trends(eligible, now=now),
            summary=self.summary(eligible),
        )

    def hourly_patterns(self, notes: Sequence[Note]) -> list[HourlyPattern]:
        buckets: dict[int, list[Note]] = {hour: [] for hour in range(24)}
        for note in notes:
            local = self._local(note)
            if local is not None:
                buckets[local.hour].append(note)

        patterns = []
        for hour, bucket in buckets.items():
            valence, arousal = average_scores(bucket)
            patterns.append(
                HourlyPattern(hour=hour, note_count=len(bucket), average_valence=valence, average_arousal=arousal)
            )
        return patterns

    def weekly_patterns(self, notes: Sequence[Note]) -> list[WeeklyPattern]:
        buckets: dict[int, list[Note]] = {weekday: [] for weekday in range(1, 8)}
        for note in notes:
            local = self._local(note)
            if local is not None:
                buckets[local.isoweekday()].append(note)

        patterns = []
        for weekday, bucket in buckets.items():
            valence, arousal = average_scores(bucket)
            patterns.append(
                WeeklyPattern(weekday=weekday, note_count=len(bucket), average_valence=valence, average_arousal=arousal)
            )
        return patterns

    def emotion_trends(
        self,
        notes: Sequence[Note],
        *,
        now: datetime | None = None,
        days: int | None = None,
    ) -> list[EmotionTrend]:
        """One entry per calendar day, oldest first, from ``days`` ago through today."""
        days = days if days is not None else self.trend_days
        today = (now or datetime.now(UTC)).astimezone(self.tz).date()
        start = today - timedelta(days=days)

        by_day: dict[date, list[Note]] = {}
        for note in notes:
            local = self._local(note)
            if local is not None and start <= local.date() <= today:
                by_day.setdefault(local.date(), []).append(note)

        trends = []
        for offset in range(days + 1):
            day = start + timedelta(days=offset)
            day_notes = by_day.get(day, [])
            valence, arousal = average_scores(day_notes)
            trends.append(
                EmotionTrend(
                    day=day,
                    note_count=len(day_notes),
                    average_valence=valence,
                    average_arousal=arousal,
                    dominant_emotion=dominant_emotion(day_notes),
                )
            )
        return trends

    def summary(self, notes: Sequence[Note]) -> PatternSummary:
        stamps = [local for local in (self._local(n) for n in notes) if local is not None]
        valence, arousal = average_scores(notes)
        return PatternSummary(
            total_notes=len(notes),
            average_valence=valence,
            average_arousal=arousal,
            most_active_hour=most_common_key(Counter(s.hour for s in stamps)),
            most_active_day=most_common_key(Counter(s.isoweekday() for s in stamps)),
        )

    def _local(self, note: Note) -> datetime | None:
        if note.created_at is None:
            return None
        return note.created_at.astimezone(self.tz)
