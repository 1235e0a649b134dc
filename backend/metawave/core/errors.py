from __future__ import annotations


class MetaWaveError(Exception):
    """Base class for errors raised by the application."""


class PersistenceError(MetaWaveError):
    """The note store could not complete a read or write.

    Raised instead of the underlying client error so that callers do not depend
    on the storage backend. No partial mutation is implied.
    """


class NoteNotFoundError(MetaWaveError):
    def __init__(self, note_id: object) -> None:
        super().__init__(f"Note {note_id} not found")
        self.note_id = note_id
