"""Local declarative state for a managed resource.

A ResourceState holds the declared field values of one resource, the opaque
ID its remote counterpart was given, and whether it was created during the
current operation. An empty ID means the resource is not considered to exist.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from filelock import FileLock

from tether.config.paths import get_state_path

logger = logging.getLogger(__name__)


class StateError(ValueError):
    """A value could not be written into state."""


@dataclass(frozen=True)
class FieldSpec:
    """Declared type of a state field."""

    type: type
    required: bool = False
    description: str = ""


class ResourceState:
    """Field values plus identity of a single resource instance."""

    def __init__(
        self,
        schema: dict[str, FieldSpec],
        values: dict[str, Any] | None = None,
        id: str = "",
    ) -> None:
        self._schema = schema
        self._values: dict[str, Any] = {}
        self._id = id
        self._is_new = False
        for key, value in (values or {}).items():
            self.set(key, value)

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, value: str) -> None:
        self._id = value

    @property
    def is_new_resource(self) -> bool:
        """True between a successful create write and the end of that call."""
        return self._is_new

    def mark_new(self, value: bool = True) -> None:
        self._is_new = value

    @property
    def exists(self) -> bool:
        return bool(self._id)

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._schema:
            raise KeyError(f"unknown state key {key!r}")
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Write one field, checking it against the schema.

        Raises:
            StateError: If the key is undeclared or the value has the wrong type.
        """
        spec = self._schema.get(key)
        if spec is None:
            raise StateError(f"unknown state key {key!r}")
        if value is None:
            self._values.pop(key, None)
            return
        if not isinstance(value, spec.type):
            raise StateError(
                f"expected {spec.type.__name__}, got {type(value).__name__}"
            )
        if isinstance(value, dict):
            if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
                raise StateError("expected a mapping of strings to strings")
            value = dict(value)
        self._values[key] = value

    def missing_required(self) -> list[str]:
        return [
            key
            for key, spec in self._schema.items()
            if spec.required and not self._values.get(key)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self._id, "values": dict(self._values)}

    def __repr__(self) -> str:
        return f"ResourceState(id={self._id!r}, values={self._values!r})"


class StateStorage:
    """Read/write a single resource's state as JSON.

    Uses file locking so two CLI invocations do not interleave writes.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or get_state_path()
        self._lock = FileLock(str(self._path) + ".lock")

    @property
    def path(self) -> Path:
        return self._path

    def load(self, schema: dict[str, FieldSpec]) -> ResourceState | None:
        """Load state, or None if no state file exists.

        Raises:
            StateError: If the file is unreadable or does not match ``schema``.
        """
        with self._lock:
            if not self._path.exists():
                return None
            try:
                raw = json.loads(self._path.read_text())
            except (json.JSONDecodeError, OSError) as e:
                raise StateError(f"failed to read {self._path}: {e}") from e
        values = raw.get("values") if isinstance(raw, dict) else None
        if not isinstance(values, dict):
            raise StateError(f"invalid state file {self._path}")
        return ResourceState(schema, values=values, id=str(raw.get("id") or ""))

    def save(self, state: ResourceState) -> None:
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(state.to_dict(), indent=2) + "\n")
        logger.debug("Saved state to %s", self._path)

    def remove(self) -> bool:
        """Delete the state file.

        Returns:
            True if a file was removed, False if none existed.
        """
        with self._lock:
            if not self._path.exists():
                return False
            self._path.unlink()
        return True
