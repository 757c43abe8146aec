"""JSON file-backed key-value storage."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from nutrition_sync.services.local_cache import KeyValueStorage

logger = logging.getLogger(__name__)


@dataclass
class JsonFileStorage(KeyValueStorage):
    """Stores string values in a single JSON object file.

    Every write replaces the file atomically so a crash mid-write leaves the
    previous content intact.
    """

    path: Path
    _items: dict[str, str] | None = field(default=None, init=False, repr=False)

    def get_item(self, key: str) -> str | None:
        """Return the stored string for a key."""
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a string under a key and flush the file."""
        items = dict(self._load())
        items[key] = value
        self._write(items)
        self._items = items

    def _load(self) -> dict[str, str]:
        if self._items is None:
            self._items = _read_items(self.path)
        return self._items

    def _write(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(json.dumps(items), encoding="utf-8")
        os.replace(tmp_path, self.path)


def _read_items(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Local storage file %s is unreadable; starting empty", path)
        return {}
    if not isinstance(raw, dict):
        logger.warning("Local storage file %s has unexpected content", path)
        return {}
    return {key: value for key, value in raw.items() if isinstance(value, str)}
