from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from metawave.core.models.note import EmotionScore, Note


class NoteRepository(ABC):
    """Abstract repository interface for notes.

    The analysis engine never owns notes; it reads them through this contract
    and writes back only emotion scores and pruning deletions. Implementations
    perform I/O and therefore expose async methods. Storage failures are raised
    as ``PersistenceError``.
    """

    @abstractmethod
    async def fetch_all_notes(self, *, user_id: UUID | None = None) -> Sequence[Note]:  # pragma: no cover - interface only
        """Return every note, optionally restricted to one owner, oldest first."""

    @abstractmethod
    async def get(self, note_id: UUID) -> Note | None:  # pragma: no cover
        """Fetch a note by id or return None if not found."""

    @abstractmethod
    async def update_emotion_score(self, note_id: UUID, score: EmotionScore) -> Note | None:  # pragma: no cover
        """Attach ``score`` to a note and return the updated entity, or None if missing."""

    @abstractmethod
    async def delete_notes(self, note_ids: Sequence[UUID]) -> None:  # pragma: no cover
        """Delete the given notes.

        All-or-nothing: on failure ``PersistenceError`` is raised and no note has
        been removed.
        """
