from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import Field, field_validator

from .base import TimestampedModel, ValueModel, ensure_aware


class Modality(str, Enum):
    """How the note was captured."""

    TEXT = "text"
    VOICE = "voice"


class EmotionScore(ValueModel):
    """Valence/arousal pair produced by an emotion analyzer."""

    valence: float = Field(default=0.0, description="-1.0 (negative) to +1.0 (positive)")
    arousal: float = Field(default=0.0, description="0.0 (calm) to 1.0 (activated)")

    @classmethod
    def neutral(cls) -> EmotionScore:
        return cls(valence=0.0, arousal=0.0)


class Note(TimestampedModel):
    """Note domain model.

    Owned by the persistence layer; the analysis engine only reads it.
    """

    id: UUID = Field(default_factory=uuid4, description="Unique note identifier")

    text: str = Field(default="", description="Typed or transcribed content")
    tags: list[str] = Field(default_factory=list, description="Tags for categorization")
    modality: Modality = Field(default=Modality.TEXT, description="Capture modality")

    # Attached by the emotion scorer at write time
    emotion_score: EmotionScore | None = None

    # Ownership (RLS on the Supabase side)
    user_id: UUID | None = None

    @field_validator("text", mode="before")
    @classmethod
    def coerce_text(cls, v: str | None) -> str:
        return v if v is not None else ""

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        """Validate and normalize tags."""
        if not v:
            return v

        # Normalize tags: lowercase, remove duplicates, keep order
        normalized = []
        for tag in v:
            if tag and len(tag.strip()) > 0:
                normalized_tag = tag.strip().lower()[:50]  # Limit tag length
                if normalized_tag not in normalized:
                    normalized.append(normalized_tag)

        return normalized

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamps(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": str(uuid4()),
                    "text": "The project deadline is stressing me out again.",
                    "tags": ["work"],
                    "modality": "text",
                    "emotion_score": {"valence": -0.4, "arousal": 0.6},
                }
            ]
        }
    }
