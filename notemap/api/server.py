"""FastAPI server for NoteMap."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..notes import (
    CorruptStateError,
    JsonFileKeyValueStore,
    NoteStore,
    StorageWriteError,
    load_config as load_store_config,
)
from .config import load_config
from .routes import health_router, notes_router

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_store() -> NoteStore:
    """Build the file-backed store described by the store configuration."""
    config = load_store_config()
    logging.getLogger("notemap").setLevel(config.log_level.upper())
    logger.info(f"Using note store at {config.store_path}")
    return NoteStore(JsonFileKeyValueStore(config.store_path), config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("NoteMap API server starting up...")
    if getattr(app.state, "store", None) is None:
        app.state.store = create_store()
    yield
    logger.info("NoteMap API server shutting down...")


async def corrupt_state_handler(request: Request, exc: CorruptStateError) -> JSONResponse:
    """Stored notes could not be read; report it instead of resetting them."""
    logger.error(f"Corrupt note storage: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


async def storage_write_handler(request: Request, exc: StorageWriteError) -> JSONResponse:
    """The write did not land; clients must roll back optimistic changes."""
    logger.error(f"Note storage write failed: {exc}", exc_info=True)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app(store: Optional[NoteStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Note store to serve. When omitted, a file-backed store is
               built from configuration at startup.

    Returns:
        Configured FastAPI application
    """
    config = load_config()

    app = FastAPI(
        title="NoteMap API",
        description="Local API over the NoteMap note store",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CorruptStateError, corrupt_state_handler)
    app.add_exception_handler(StorageWriteError, storage_write_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(notes_router)

    return app


# Create the default app instance
app = create_app()
