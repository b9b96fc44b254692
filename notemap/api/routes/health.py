"""Health check endpoints for NoteMap API."""

import logging

from fastapi import APIRouter, Depends

from ...notes import NoteStore, NoteStoreError
from .notes import get_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(store: NoteStore = Depends(get_store)) -> dict:
    """
    Health check endpoint.

    Returns:
        Health status of the API and whether the stored notes are readable
    """
    try:
        notes = await store.load_notes()
    except NoteStoreError as e:
        logger.warning(f"Health check could not read notes: {e}")
        return {"status": "degraded", "version": "1.0.0", "store": str(e)}

    return {
        "status": "healthy",
        "version": "1.0.0",
        "store": "ok",
        "notes": len(notes),
    }


@router.get("/")
async def root() -> dict:
    """
    Root endpoint.

    Returns:
        Basic API information
    """
    return {
        "name": "NoteMap API",
        "version": "1.0.0",
        "docs": "/docs"
    }
