from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from pydantic import Field

from metawave.core.models.analysis import (  # noqa: TCH001
    BiasSignal,
    EmotionalShift,
    EmotionCategory,
    EmotionContext,
    PruningCandidate,
)
from metawave.core.models.base import AppBaseModel
from metawave.core.models.note import EmotionScore  # noqa: TCH001


class EmotionRequest(AppBaseModel):
    text: str = Field(max_length=10000, description="Text to score")


class EmotionAnalysisResponse(AppBaseModel):
    score: EmotionScore
    emotions: dict[EmotionCategory, float]
    primary_emotion: EmotionCategory
    secondary_emotions: list[EmotionCategory]
    intensity: float = Field(description="0.0 (flat) to 1.0 (intense)")
    emotion_intensity: float = Field(description="Intensity blended with the valence/arousal score")
    context: EmotionContext
    shift: EmotionalShift | None = None


class NoteEmotionRead(AppBaseModel):
    note_id: UUID
    emotion_score: EmotionScore | None


class BiasReport(AppBaseModel):
    signals: dict[BiasSignal, float]


class PruningExecuteRequest(AppBaseModel):
    candidates: list[PruningCandidate] = Field(default_factory=list)


class PruningExecuteResponse(AppBaseModel):
    deleted: int
