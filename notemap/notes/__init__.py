"""Notes - local persistence of geo-anchored notes."""

from .backends import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from .config import NoteStoreConfig, load_config
from .errors import (
    BackingStoreError,
    CorruptStateError,
    NotFoundError,
    NoteStoreError,
    StorageWriteError,
)
from .models import Note
from .seeding import SAMPLE_CATALOG, generate_seed_notes
from .storage import SCHEMA_VERSION, NoteStore

__all__ = [
    "Note",
    "NoteStore",
    "NoteStoreConfig",
    "load_config",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "NoteStoreError",
    "BackingStoreError",
    "CorruptStateError",
    "NotFoundError",
    "StorageWriteError",
    "SAMPLE_CATALOG",
    "SCHEMA_VERSION",
    "generate_seed_notes",
]

__version__ = "1.0.0"
