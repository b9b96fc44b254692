"""NoteMap - geo-anchored notes stored on the local device."""

__version__ = "1.0.0"
