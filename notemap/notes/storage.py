"""Storage layer for NoteMap - persistence of geo-anchored notes."""

import asyncio
import json
import logging
import secrets
import string
import time
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from .backends import KeyValueStore
from .config import NoteStoreConfig
from .errors import (
    BackingStoreError,
    CorruptStateError,
    NotFoundError,
    StorageWriteError,
)
from .models import Note
from .seeding import SEED_ID_PREFIX, generate_seed_notes

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
SEEDED_FLAG_VALUE = "true"

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _new_note_id() -> str:
    """Generate an id that stays unique across rapid successive calls.

    Returns:
        ``note-<nanosecond timestamp>-<random base36 suffix>``
    """
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"note-{time.time_ns()}-{suffix}"


def _with_unused_ids(samples: list[Note], taken: set[str]) -> list[Note]:
    """Re-suffix sample ids already present in taken.

    A retried seed can land in the same millisecond as the batch it repeats.
    """
    result = []
    for note in samples:
        note_id = note.id
        while note_id in taken:
            suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(4))
            note_id = f"{note.id}-{suffix}"
        taken.add(note_id)
        result.append(note if note_id == note.id else replace(note, id=note_id))
    return result


def _parse_notes(raw: str, key: str) -> list[Note]:
    """Decode the persisted collection.

    Accepts the versioned envelope as well as a bare array, which is how
    collections were written before the envelope existed.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptStateError(f"Stored notes are not valid JSON: {e}", key) from e

    if isinstance(data, dict):
        version = data.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            raise CorruptStateError("Stored notes envelope has no version", key)
        if version < 1:
            raise CorruptStateError(f"Stored notes have invalid schema version {version}", key)
        if version > SCHEMA_VERSION:
            raise CorruptStateError(
                f"Stored notes use schema version {version}, "
                f"newest supported is {SCHEMA_VERSION}",
                key,
            )
        items = data.get("notes")
    else:
        items = data

    if not isinstance(items, list):
        raise CorruptStateError("Stored notes are not a list", key)

    notes = []
    seen: set[str] = set()
    for index, item in enumerate(items):
        try:
            note = Note.from_dict(item)
        except ValueError as e:
            raise CorruptStateError(f"Stored note #{index} is invalid: {e}", key) from e
        if note.id in seen:
            raise CorruptStateError(f"Duplicate note id '{note.id}'", key)
        seen.add(note.id)
        notes.append(note)
    return notes


class NoteStore:
    """Single source of truth for the note collection.

    Every mutation loads the whole collection, computes the new one and writes
    it back in full. Mutations hold one asyncio lock for the whole cycle so
    overlapping calls never lose each other's writes.
    """

    def __init__(self, backend: KeyValueStore, config: Optional[NoteStoreConfig] = None):
        """Initialize the store.

        Args:
            backend: Durable key-value store holding the notes and seed flag
            config: Key names and paths. Defaults to NoteStoreConfig()
        """
        self.backend = backend
        self.config = config or NoteStoreConfig()
        self._lock = asyncio.Lock()

    @property
    def notes_key(self) -> str:
        return self.config.notes_key

    @property
    def seed_flag_key(self) -> str:
        return self.config.seed_flag_key

    async def load_notes(self) -> list[Note]:
        """Load all notes in insertion order.

        Returns:
            The stored notes, or an empty list if nothing was written yet

        Raises:
            CorruptStateError: If the stored value does not parse as notes
        """
        raw = await self.backend.get(self.notes_key)
        if raw is None:
            logger.debug("No stored notes yet")
            return []

        notes = _parse_notes(raw, self.notes_key)
        logger.debug(f"Loaded {len(notes)} notes")
        return notes

    async def save_notes(self, notes: Sequence[Note]) -> None:
        """Replace the stored collection with notes.

        Args:
            notes: The full collection to persist

        Raises:
            StorageWriteError: If serialization fails or the backend rejects the write
        """
        try:
            payload = json.dumps(
                {"version": SCHEMA_VERSION, "notes": [n.to_dict() for n in notes]}
            )
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Cannot serialize notes: {e}", self.notes_key) from e

        try:
            await self.backend.set(self.notes_key, payload)
        except (BackingStoreError, OSError) as e:
            logger.error(f"Error saving notes: {e}")
            raise StorageWriteError(f"Failed to save notes: {e}", self.notes_key) from e

        logger.debug(f"Saved {len(notes)} notes")

    async def get_note(self, note_id: str) -> Optional[Note]:
        """Get a note by its ID.

        Args:
            note_id: The note ID

        Returns:
            The Note or None if not found
        """
        for note in await self.load_notes():
            if note.id == note_id:
                return note
        return None

    async def create_note(
        self,
        title: str,
        description: str,
        latitude: float,
        longitude: float,
        date: Optional[str] = None,
        image_uri: Optional[str] = None,
    ) -> Note:
        """Create a new note with a freshly generated id.

        Args:
            title: Note title
            description: Note body, stored exactly as given
            latitude: Anchor latitude in degrees
            longitude: Anchor longitude in degrees
            date: Optional display date
            image_uri: Optional reference to an attached image

        Returns:
            The created Note

        Raises:
            ValueError: If a field has the wrong type
        """
        note = Note.build(
            id=_new_note_id(),
            latitude=latitude,
            longitude=longitude,
            title=title,
            description=description,
            date=date,
            image_uri=image_uri,
        )

        async with self._lock:
            notes = await self.load_notes()
            existing_ids = {n.id for n in notes}
            while note.id in existing_ids:
                note = replace(note, id=_new_note_id())

            await self.save_notes([*notes, note])

        logger.info(f"Created note: {note.id}")
        return note

    async def update_note(self, note_id: str, patch: dict) -> Note:
        """Merge patch over an existing note.

        Only the fields present in patch change; the id and anything omitted,
        coordinates included, keep their stored values.

        Args:
            note_id: The note to update
            patch: Field name -> new value

        Returns:
            The merged Note

        Raises:
            NotFoundError: If no note has this id
            ValueError: If patch names unknown fields, clears a required one
                or gives a value of the wrong type
        """
        async with self._lock:
            notes = await self.load_notes()
            index = next((i for i, n in enumerate(notes) if n.id == note_id), None)
            if index is None:
                raise NotFoundError(note_id)

            updated = notes[index].merged(patch)
            notes[index] = updated
            await self.save_notes(notes)

        logger.info(f"Updated note {note_id}")
        return updated

    async def delete_note(self, note_id: str) -> Optional[Note]:
        """Delete a note.

        Args:
            note_id: The note to delete

        Returns:
            The removed Note, or None if it was already gone
        """
        async with self._lock:
            notes = await self.load_notes()
            removed = next((n for n in notes if n.id == note_id), None)
            if removed is None:
                logger.debug(f"Note {note_id} already absent, nothing to delete")
                return None

            await self.save_notes([n for n in notes if n.id != note_id])

        logger.info(f"Deleted note {note_id}")
        return removed

    async def has_seeded(self) -> bool:
        """Check whether the sample notes were generated before."""
        return await self.backend.get(self.seed_flag_key) == SEEDED_FLAG_VALUE

    async def mark_seeded(self) -> None:
        """Record that the sample notes were generated.

        Raises:
            StorageWriteError: If the flag write is rejected
        """
        try:
            await self.backend.set(self.seed_flag_key, SEEDED_FLAG_VALUE)
        except (BackingStoreError, OSError) as e:
            logger.error(f"Error marking sample notes as generated: {e}")
            raise StorageWriteError(
                f"Failed to mark sample notes as generated: {e}", self.seed_flag_key
            ) from e

    @staticmethod
    def generate_seed_notes(
        latitude: float, longitude: float, now: Optional[datetime] = None
    ) -> list[Note]:
        """Build the sample notes around a location. Does not persist them."""
        return generate_seed_notes(latitude, longitude, now=now)

    async def seed_once(self, latitude: float, longitude: float) -> list[Note]:
        """Add the sample notes on first use.

        Notes are written before the flag. If the flag write fails the
        StorageWriteError propagates and the next call seeds again, so
        samples may be duplicated but are never lost.

        Args:
            latitude: Latitude of the first known location
            longitude: Longitude of the first known location

        Returns:
            The generated notes, or an empty list if seeding already happened
        """
        async with self._lock:
            if await self.has_seeded():
                logger.debug("Sample notes already generated, skipping")
                return []

            samples = self.generate_seed_notes(latitude, longitude)
            notes = await self.load_notes()
            if any(n.id.startswith(f"{SEED_ID_PREFIX}-") for n in notes):
                logger.warning("Sample notes present without seed flag, seeding again")
            samples = _with_unused_ids(samples, {n.id for n in notes})

            await self.save_notes([*notes, *samples])
            await self.mark_seeded()

        logger.info(f"Generated {len(samples)} sample notes")
        return samples
