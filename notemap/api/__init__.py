"""Local HTTP API over the note store."""
