"""The component record shared by every layer of the service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

_FIELD_TYPES: dict[str, type] = {
    "id": int,
    "name": str,
    "description": str,
    "parent_id": int,
    "created_at": str,
    "updated_at": str,
}


def _matches(value: Any, kind: type) -> bool:
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)


@dataclass
class Component:
    """A node in the component hierarchy; ``parent_id`` is None for roots."""

    id: int = 0
    name: str = ""
    description: str = ""
    parent_id: int | None = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping; empty timestamps are left out."""
        data = asdict(self)
        for stamp in ("created_at", "updated_at"):
            if not data[stamp]:
                del data[stamp]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Component:
        """Build a component from decoded JSON, ignoring unknown keys.

        Missing or null fields keep their defaults. A value of the wrong
        type raises ValueError.
        """
        if not isinstance(data, Mapping):
            raise ValueError("component payload must be a JSON object")
        values: dict[str, Any] = {}
        for field_name, kind in _FIELD_TYPES.items():
            value = data.get(field_name)
            if value is None:
                continue
            if not _matches(value, kind):
                raise ValueError(
                    f"field {field_name!r} must be of type {kind.__name__}, "
                    f"got {type(value).__name__}"
                )
            values[field_name] = value
        return cls(**values)