"""Local durable cache for the application state."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from pydantic import TypeAdapter

from nutrition_sync.domain.catalog import DEFAULT_TEMPLATES, WorkoutTemplate
from nutrition_sync.domain.logs import (
    History,
    Targets,
    dump_history,
    dump_targets,
    parse_history,
    parse_targets,
)

HISTORY_KEY = "nutrition_history"
TARGETS_KEY = "targets"
ONBOARDED_KEY = "hasVisited_v4"
TEMPLATES_KEY = "workout_templates"

_TEMPLATES_ADAPTER: TypeAdapter[list[WorkoutTemplate]] = TypeAdapter(
    list[WorkoutTemplate]
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyValueStorage(Protocol):
    """String key-value storage that survives restarts."""

    def get_item(self, key: str) -> str | None:
        """Return the stored string for a key, if present."""

    def set_item(self, key: str, value: str) -> None:
        """Store a string under a key, replacing any previous value."""


@dataclass
class InMemoryStorage(KeyValueStorage):
    """Volatile storage, useful when no disk location is configured."""

    _items: dict[str, str]

    def __init__(self) -> None:
        self._items = {}

    def get_item(self, key: str) -> str | None:
        """Return the stored string for a key."""
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a string under a key."""
        self._items[key] = value


@dataclass(frozen=True)
class LocalSnapshot:
    """Whatever was last cached; targets are None when never saved."""

    history: History
    targets: Targets | None


@dataclass
class LocalCache:
    """Synchronous save/load of history and targets under fixed keys."""

    storage: KeyValueStorage

    def save_local(self, history: History, targets: Targets) -> None:
        """Serialize and store both values; a failed write is logged, not raised."""
        self._write(HISTORY_KEY, json.dumps(dump_history(history)))
        self._write(TARGETS_KEY, json.dumps(dump_targets(targets)))

    def load_local(self) -> LocalSnapshot:
        """Return the cached state, treating unreadable content as absent."""
        history = self._read(HISTORY_KEY, parse_history)
        targets = self._read(TARGETS_KEY, parse_targets)
        return LocalSnapshot(history=history or {}, targets=targets)

    def has_onboarded(self) -> bool:
        """Return True once the welcome message has been shown."""
        return self.storage.get_item(ONBOARDED_KEY) == "true"

    def mark_onboarded(self) -> None:
        """Remember that the welcome message has been shown."""
        self._write(ONBOARDED_KEY, "true")

    def load_templates(self) -> list[WorkoutTemplate]:
        """Return saved workout routines, seeding the defaults on first use."""
        templates = self._read(TEMPLATES_KEY, _TEMPLATES_ADAPTER.validate_python)
        if templates is None:
            templates = list(DEFAULT_TEMPLATES)
            self.save_templates(templates)
        return templates

    def save_templates(self, templates: list[WorkoutTemplate]) -> None:
        """Store workout routines; they stay on this device and are not synced."""
        payload = _TEMPLATES_ADAPTER.dump_python(templates, mode="json", by_alias=True)
        self._write(TEMPLATES_KEY, json.dumps(payload))

    def _read(self, key: str, parse: Callable[[object], T]) -> T | None:
        raw = self.storage.get_item(key)
        if raw is None:
            return None
        try:
            return parse(json.loads(raw))
        except ValueError:
            logger.warning("Ignoring malformed cached value for %s", key)
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            self.storage.set_item(key, value)
        except OSError:
            logger.exception("Failed to write %s to local storage", key)
