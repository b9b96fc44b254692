"""Configuration for the note store."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

STORE_PATH_ENV = "NOTEMAP_STORE_PATH"


@dataclass
class NoteStoreConfig:
    """Configuration for NoteStore and its file backend."""

    # Storage paths
    store_path: Path = Path.home() / ".notemap" / "store.json"

    # Backing store keys
    notes_key: str = "@notemap_notes"
    seed_flag_key: str = "@notemap_test_notes_generated"

    # Logging
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        if not isinstance(self.store_path, Path):
            self.store_path = Path(self.store_path).expanduser()

    @classmethod
    def from_file(cls, path: Path) -> "NoteStoreConfig":
        """Load configuration from a JSON file.

        The ``NOTEMAP_STORE_PATH`` environment variable, when set, takes
        precedence over the file's ``store_path``.

        Args:
            path: Path to the configuration file.

        Returns:
            NoteStoreConfig with values from file, falling back to defaults
            for missing fields.
        """
        data: dict = {}
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Ignoring unreadable config {path}: {e}")
                data = {}

        defaults = cls()
        store_path = os.environ.get(STORE_PATH_ENV) or data.get(
            "store_path", defaults.store_path
        )

        return cls(
            store_path=store_path,
            notes_key=data.get("notes_key", defaults.notes_key),
            seed_flag_key=data.get("seed_flag_key", defaults.seed_flag_key),
            log_level=data.get("log_level", defaults.log_level),
        )

    @classmethod
    def default_config_path(cls) -> Path:
        """Return the default configuration file path."""
        return Path(__file__).parent.parent.parent / "configs" / "store_config.json"


def load_config() -> NoteStoreConfig:
    """Load the store configuration from the default path."""
    return NoteStoreConfig.from_file(NoteStoreConfig.default_config_path())
