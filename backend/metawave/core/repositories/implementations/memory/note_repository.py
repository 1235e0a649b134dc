from __future__ import annotations

from typing import TYPE_CHECKING

from metawave.core.repositories.note_repository import NoteRepository
from metawave.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from metawave.core.models.note import EmotionScore, Note

logger = get_logger(__name__)


class InMemoryNoteRepository(NoteRepository):
    """Process-local NoteRepository for tests and local runs.

    Notes are immutable models, so updates replace the stored instance with a
    copy and never touch objects previously handed out.
    """

    def __init__(self, notes: Iterable[Note] = ()) -> None:
        self._notes: dict[UUID, Note] = {n.id: n for n in notes}

    async def fetch_all_notes(self, *, user_id: UUID | None = None) -> Sequence[Note]:
        notes = [n for n in self._notes.values() if user_id is None or n.user_id == user_id]
        return sorted(notes, key=lambda n: (n.created_at is not None, n.created_at or 0))

    async def get(self, note_id: UUID) -> Note | None:
        return self._notes.get(note_id)

    async def update_emotion_score(self, note_id: UUID, score: EmotionScore) -> Note | None:
        existing = self._notes.get(note_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={"emotion_score": score})
        self._notes[note_id] = updated
        return updated

    async def delete_notes(self, note_ids: Sequence[UUID]) -> None:
        ids = set(note_ids)
        for note_id in ids:
            self._notes.pop(note_id, None)
        logger.debug("Deleted %d notes from memory", len(ids))

    def __len__(self) -> int:
        return len(self._notes)
