"""Shared pytest fixtures for the analysis tests."""

from datetime import UTC, datetime, timedelta

import pytest

from metawave.core.models.note import EmotionScore, Modality, Note
from metawave.core.repositories.implementations.memory.note_repository import InMemoryNoteRepository

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def now():
    """Fixed clock so age bands and time windows are deterministic."""
    return NOW


@pytest.fixture
def make_note():
    """Build a Note relative to the fixed clock.

    ``age`` is how long before NOW the note was written; ``valence`` attaches
    an emotion score (arousal defaults to the midpoint).
    """

    def _make(
        text="",
        *,
        age=timedelta(0),
        tags=(),
        modality=Modality.TEXT,
        valence=None,
        arousal=0.5,
        user_id=None,
        created_at=...,
    ):
        return Note(
            text=text,
            tags=list(tags),
            modality=modality,
            emotion_score=EmotionScore(valence=valence, arousal=arousal) if valence is not None else None,
            user_id=user_id,
            created_at=NOW - age if created_at is ... else created_at,
        )

    return _make


@pytest.fixture
def repo():
    return InMemoryNoteRepository()
