from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from metawave.config import settings
from metawave.core.errors import PersistenceError
from metawave.core.models.note import EmotionScore, Note
from metawave.core.repositories.note_repository import NoteRepository
from metawave.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from supabase import Client


class SupabaseNoteRepository(NoteRepository):
    """Supabase implementation of the NoteRepository.

    Uses Supabase's PostgREST client. Assumes a notes table with the columns
    ``id, text, tags, modality, valence, arousal, user_id, created_at,
    updated_at``; the emotion score is stored flattened as two nullable columns.
    """

    def __init__(self, client: Client, table_name: str | None = None) -> None:
        self._client: Client = client
        self._table = table_name or settings.notes_table

    async def fetch_all_notes(self, *, user_id: UUID | None = None) -> Sequence[Note]:
        def _query():
            q = self._client.table(self._table).select("*")
            if user_id is not None:
                q = q.eq("user_id", str(user_id))
            return q.order("created_at").execute()

        resp = await self._run(_query, "fetch notes")
        items = resp.data or []
        logger.debug("Fetched %d notes", len(items))
        return self._to_notes(items, "fetch notes")

    async def get(self, note_id: UUID) -> Note | None:
        resp = await self._run(
            lambda: self._client.table(self._table)
            .select("*")
            .eq("id", str(note_id))
            .limit(1)
            .execute(),
            "fetch note",
        )
        items = resp.data or []
        if not items:
            return None
        return self._to_notes(items[:1], "fetch note")[0]

    async def update_emotion_score(self, note_id: UUID, score: EmotionScore) -> Note | None:
        resp = await self._run(
            lambda: self._client.table(self._table)
            .update({"valence": score.valence, "arousal": score.arousal})
            .eq("id", str(note_id))
            .execute(),
            "update emotion score",
        )
        items = resp.data or []
        if not items:
            return None
        return self._to_notes(items[:1], "update emotion score")[0]

    async def delete_notes(self, note_ids: Sequence[UUID]) -> None:
        if not note_ids:
            return
        # A single DELETE ... WHERE id IN (...) runs as one statement, so it
        # either removes every row or none of them
        await self._run(
            lambda: self._client.table(self._table)
            .delete()
            .in_("id", [str(i) for i in note_ids])
            .execute(),
            "delete notes",
        )
        logger.info("Deleted %d notes", len(note_ids))

    @staticmethod
    async def _run(func: Callable[[], Any], action: str) -> Any:
        try:
            return await asyncio.to_thread(func)
        except Exception as e:
            logger.error("Supabase failed to %s: %s", action, e)
            raise PersistenceError(f"Failed to {action}") from e

    @classmethod
    def _to_notes(cls, rows: Sequence[dict[str, Any]], action: str) -> list[Note]:
        try:
            return [cls._row_to_note(r) for r in rows]
        except ValidationError as e:
            logger.error("Supabase returned an unreadable row during %s: %s", action, e)
            raise PersistenceError(f"Failed to {action}") from e

    @staticmethod
    def _row_to_note(row: dict[str, Any]) -> Note:
        # Normalize nullable columns for Pydantic constraints
        normalized = dict(row)
        valence = normalized.pop("valence", None)
        arousal = normalized.pop("arousal", None)
        if valence is not None and arousal is not None:
            normalized["emotion_score"] = {"valence": valence, "arousal": arousal}

        # Columns owned by the app that the analysis model does not carry
        known = set(Note.model_fields)
        normalized = {k: v for k, v in normalized.items() if k in known}

        if normalized.get("tags") is None:
            normalized["tags"] = []
        return Note.model_validate(normalized)

