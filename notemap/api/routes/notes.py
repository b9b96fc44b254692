"""Note endpoints for NoteMap API."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...notes import Note, NotFoundError, NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["notes"])

DESCRIPTION_PLACEHOLDER = "No description"


def get_store(request: Request) -> NoteStore:
    """Return the store the application was started with."""
    return request.app.state.store


def _clean_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Title cannot be empty")
    return value


def _clean_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or DESCRIPTION_PLACEHOLDER


class NoteModel(BaseModel):
    """A note as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    latitude: float
    longitude: float
    title: str
    description: str
    date: Optional[str] = None
    image_uri: Optional[str] = Field(default=None, alias="imageUri")

    @classmethod
    def from_note(cls, note: Note) -> "NoteModel":
        return cls.model_validate(note.to_dict())


class NoteCreateRequest(BaseModel):
    """Request model for creating a note."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = Field(default="", validate_default=True)
    latitude: float
    longitude: float
    date: Optional[str] = None
    image_uri: Optional[str] = Field(default=None, alias="imageUri")

    normalize_title = field_validator("title")(_clean_title)
    normalize_description = field_validator("description")(_clean_description)


class NotePatchRequest(BaseModel):
    """Request model for updating a note. Omitted fields keep their value."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    date: Optional[str] = None
    image_uri: Optional[str] = Field(default=None, alias="imageUri")

    normalize_title = field_validator("title")(_clean_title)
    normalize_description = field_validator("description")(_clean_description)


class SeedRequest(BaseModel):
    """Request model for first-run sample notes."""

    latitude: float
    longitude: float


class SeedResponse(BaseModel):
    """Response model for first-run sample notes."""

    seeded: bool
    notes: List[NoteModel]


@router.get("/notes", response_model=List[NoteModel])
async def list_notes(store: NoteStore = Depends(get_store)) -> List[NoteModel]:
    """List every note in insertion order."""
    notes = await store.load_notes()
    return [NoteModel.from_note(n) for n in notes]


@router.get("/notes/{note_id}", response_model=NoteModel)
async def get_note(note_id: str, store: NoteStore = Depends(get_store)) -> NoteModel:
    """Get a single note."""
    note = await store.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Note '{note_id}' not found")
    return NoteModel.from_note(note)


@router.post("/notes", response_model=NoteModel, status_code=201)
async def create_note(
    request: NoteCreateRequest, store: NoteStore = Depends(get_store)
) -> NoteModel:
    """
    Create a note at the given coordinates.

    The title is trimmed and an empty description becomes the
    placeholder before the note reaches the store.

    Args:
        request: The note fields

    Returns:
        The stored note including its generated id
    """
    note = await store.create_note(
        title=request.title,
        description=request.description,
        latitude=request.latitude,
        longitude=request.longitude,
        date=request.date,
        image_uri=request.image_uri,
    )
    logger.info(f"Note '{note.title}' was saved at ({note.latitude}, {note.longitude})")
    return NoteModel.from_note(note)


@router.patch("/notes/{note_id}", response_model=NoteModel)
async def update_note(
    note_id: str, request: NotePatchRequest, store: NoteStore = Depends(get_store)
) -> NoteModel:
    """
    Update the fields present in the request body.

    Sending ``null`` for ``date`` or ``imageUri`` clears it.

    Returns:
        The merged note
    """
    patch = request.model_dump(exclude_unset=True)
    try:
        note = await store.update_note(note_id, patch)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Note no longer exists") from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return NoteModel.from_note(note)


@router.delete("/notes/{note_id}", response_model=NoteModel)
async def delete_note(note_id: str, store: NoteStore = Depends(get_store)) -> NoteModel:
    """
    Delete a note.

    Returns:
        The removed note, so clients can confirm what was deleted
    """
    note = await store.delete_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Note '{note_id}' not found")
    logger.info(f"Note '{note.title}' was removed")
    return NoteModel.from_note(note)


@router.post("/notes/seed", response_model=SeedResponse)
async def seed_notes(
    request: SeedRequest, store: NoteStore = Depends(get_store)
) -> SeedResponse:
    """
    Add the sample notes around the given location on first use.

    Returns:
        Whether seeding ran on this call, and the notes it added
    """
    notes = await store.seed_once(request.latitude, request.longitude)
    return SeedResponse(
        seeded=bool(notes),
        notes=[NoteModel.from_note(n) for n in notes],
    )
