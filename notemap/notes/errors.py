"""Exceptions raised by the note persistence layer."""

from typing import Optional


class NoteStoreError(Exception):
    """Base class for all note store failures."""


class BackingStoreError(NoteStoreError):
    """The key-value backend could not complete a read or write."""


class CorruptStateError(NoteStoreError):
    """A stored value exists but does not have the expected shape."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class StorageWriteError(NoteStoreError):
    """The backing store rejected a write, or the value could not be serialized."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class NotFoundError(NoteStoreError):
    """No note with the requested id exists."""

    def __init__(self, note_id: str):
        super().__init__(f"Note '{note_id}' not found")
        self.note_id = note_id
