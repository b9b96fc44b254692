"""Note record and its JSON representation."""

from dataclasses import dataclass, fields
from typing import Any, Optional

# Attribute name -> key used in the persisted JSON
_JSON_KEYS = {
    "id": "id",
    "latitude": "latitude",
    "longitude": "longitude",
    "title": "title",
    "description": "description",
    "date": "date",
    "image_uri": "imageUri",
}

REQUIRED_FIELDS = ("id", "latitude", "longitude", "title", "description")
OPTIONAL_FIELDS = ("date", "image_uri")
EDITABLE_FIELDS = frozenset(f for f in _JSON_KEYS if f != "id")


def _check_types(values: dict) -> None:
    """Raise ValueError unless values, keyed by attribute name, fit a Note."""
    for name in ("id", "title", "description"):
        if not isinstance(values.get(name), str):
            raise ValueError(f"Field '{name}' must be a string")
    for name in ("latitude", "longitude"):
        value = values.get(name)
        # bool is an int subclass but never a coordinate
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Field '{name}' must be a number")
    for name in OPTIONAL_FIELDS:
        value = values.get(name)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Field '{_JSON_KEYS[name]}' must be a string")


@dataclass(frozen=True)
class Note:
    """A text/image note anchored to a geographic coordinate."""

    id: str
    latitude: float
    longitude: float
    title: str
    description: str
    date: Optional[str] = None
    image_uri: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dict, omitting unset optional fields."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.name in OPTIONAL_FIELDS:
                continue
            data[_JSON_KEYS[f.name]] = value
        return data

    @classmethod
    def build(cls, **values: Any) -> "Note":
        """Create a Note after checking field types.

        Coordinates are stored as floats.

        Raises:
            ValueError: If a field has the wrong type.
        """
        _check_types(values)
        values["latitude"] = float(values["latitude"])
        values["longitude"] = float(values["longitude"])
        return cls(**values)

    @classmethod
    def from_dict(cls, data: dict) -> "Note":
        """Create a Note from its persisted dict form.

        Raises:
            ValueError: If a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")

        return cls.build(**{name: data.get(key) for name, key in _JSON_KEYS.items()})

    def merged(self, patch: dict) -> "Note":
        """Return a copy with the fields present in patch overwritten.

        The id is never changed; an ``id`` entry in patch is ignored.

        Raises:
            ValueError: If patch names an unknown field, clears a required one
                or gives a value of the wrong type.
        """
        changes = {k: v for k, v in patch.items() if k != "id"}

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown note fields: {', '.join(sorted(unknown))}")

        for name, value in changes.items():
            if value is None and name in REQUIRED_FIELDS:
                raise ValueError(f"Field '{name}' cannot be cleared")

        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return self.build(**values)
