from __future__ import annotations

import math
from datetime import date, datetime  # noqa: TCH003
from enum import Enum
from uuid import UUID  # noqa: TCH003

from pydantic import ConfigDict, Field, computed_field

from .base import AppBaseModel, ValueModel
from .note import EmotionScore  # noqa: TCH001

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class EmotionCategory(str, Enum):
    """Basic emotion categories, in tie-breaking order."""

    JOY = "joy"
    SADNESS = "sadness"
    ANGER = "anger"
    FEAR = "fear"
    SURPRISE = "surprise"
    DISGUST = "disgust"


class EmotionDomain(str, Enum):
    """Life area a note is about."""

    WORK = "work"
    FAMILY = "family"
    HEALTH = "health"
    RELATIONSHIPS = "relationships"
    FINANCE = "finance"
    GENERAL = "general"


class EmotionTrigger(str, Enum):
    """Kind of event that set off the emotion."""

    DEADLINE = "deadline"
    SOCIAL_EVENT = "social_event"
    ACHIEVEMENT = "achievement"
    CONFLICT = "conflict"
    LOSS = "loss"
    SUCCESS = "success"


class BiasSignal(str, Enum):
    """Corpus-level cognitive bias signals."""

    CONFIRMATION = "confirmation"
    AVAILABILITY = "availability"
    ANCHORING = "anchoring"
    LOSS_AVERSION = "loss_aversion"
    SUNK_COST = "sunk_cost"


class EmotionContext(ValueModel):
    domains: list[EmotionDomain] = Field(default_factory=lambda: [EmotionDomain.GENERAL])
    triggers: list[EmotionTrigger] = Field(default_factory=list)


class MultipleEmotionResult(ValueModel):
    """Breakdown of a text into several simultaneous emotions."""

    scores: dict[EmotionCategory, float]
    primary_emotion: EmotionCategory
    secondary_emotions: list[EmotionCategory]
    intensity: float
    context: EmotionContext
    base_score: EmotionScore


class DetailedEmotionAnalysis(ValueModel):
    base_score: EmotionScore
    emotions: dict[EmotionCategory, float]
    intensity: float
    confidence: float


class EmotionalShift(ValueModel):
    """Change of tone between the first and second half of a multi-line text."""

    # Serialized output carries the computed fields; drop them when it is read back
    model_config = ConfigDict(extra="ignore")

    from_score: EmotionScore
    to_score: EmotionScore
    valence_shift: float
    arousal_shift: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def magnitude(self) -> float:
        return math.hypot(self.valence_shift, self.arousal_shift)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_positive(self) -> bool:
        return self.valence_shift > 0


class LoopCluster(ValueModel):
    """A recurring thought: similar notes written within one time window."""

    id: str
    note_ids: list[UUID] = Field(min_length=2)
    topic: str
    strength: float = Field(ge=0.0, le=1.0)
    created_at: datetime | None


class PruningCandidate(ValueModel):
    """Advisory deletion suggestion; never persisted."""

    note_id: UUID
    title: str
    content: str
    created_at: datetime | None
    pruning_score: float
    reasons: list[str] = Field(default_factory=list)


class InsightKind(str, Enum):
    LOOP = "loop"
    BIORHYTHM = "biorhythm"


class AnalysisStatistics(AppBaseModel):
    total_notes: int
    text_notes: int
    voice_notes: int
    average_valence: float
    average_arousal: float
    analysis_date: datetime


class Insight(AppBaseModel):
    """User-facing finding derived from a comprehensive analysis run."""

    kind: InsightKind
    note_ids: list[UUID] = Field(default_factory=list)
    payload: dict[str, str | float | int] = Field(default_factory=dict)


class AnalysisReport(AppBaseModel):
    clusters: list[LoopCluster]
    statistics: AnalysisStatistics
    insights: list[Insight]
    bias_signals: dict[BiasSignal, float]


class HourlyPattern(ValueModel):
    model_config = ConfigDict(extra="ignore")

    hour: int = Field(ge=0, le=23)
    note_count: int
    average_valence: float
    average_arousal: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def time_label(self) -> str:
        return f"{self.hour:02d}:00"


class WeeklyPattern(ValueModel):
    """Aggregate for one ISO weekday (1 = Monday ... 7 = Sunday)."""

    model_config = ConfigDict(extra="ignore")

    weekday: int = Field(ge=1, le=7)
    note_count: int
    average_valence: float
    average_arousal: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def day_label(self) -> str:
        return WEEKDAY_LABELS[self.weekday - 1]


class EmotionTrend(ValueModel):
    """One calendar day of the trend series."""

    day: date
    note_count: int
    average_valence: float
    average_arousal: float
    dominant_emotion: EmotionCategory | None = None


class PatternSummary(ValueModel):
    model_config = ConfigDict(extra="ignore")

    total_notes: int
    average_valence: float
    average_arousal: float
    most_active_hour: int | None = None
    most_active_day: int | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def most_active_hour_label(self) -> str | None:
        return f"{self.most_active_hour:02d}:00" if self.most_active_hour is not None else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def most_active_day_label(self) -> str | None:
        return WEEKDAY_LABELS[self.most_active_day - 1] if self.most_active_day is not None else None


class PatternReport(AppBaseModel):
    hourly: list[HourlyPattern]
    weekly: list[WeeklyPattern]
    trends: list[EmotionTrend]
    summary: PatternSummary


class PredictionType(str, Enum):
    POSITIVE_TREND = "positive_trend"
    NEGATIVE_TREND = "negative_trend"
    STABLE = "stable"
    HIGH_AROUSAL = "high_arousal"
    RECURRING_PATTERN = "recurring_pattern"
    BIAS_DETECTION = "bias_detection"


class PredictionImpact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Prediction(ValueModel):
    """Forward-looking heuristic over recent notes; advisory only."""

    type: PredictionType
    title: str
    message: str
    confidence: float = Field(ge=0.0, le=1.0)
    impact: PredictionImpact
    timeframe: str
