"""
Key-value persistence.

A small get/set/remove capability that backs prompt history, presets, the
translation cache and the selected UI language. ``JsonFileStore`` keeps
everything in one JSON document on disk.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from loguru import logger

PROMPT_HISTORY_KEY = "prompt_history"


class KeyValueStore(ABC):
    """Abstract key-value store holding JSON-compatible values."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` if the key is missing."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a value under a key, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored."""
        pass


class MemoryStore(KeyValueStore):
    """In-process store, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store persisted as a single JSON object file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    @property
    def data(self) -> dict[str, Any]:
        """Load the document on first access."""
        if self._data is None:
            self._data = self._load()
        return self._data

    def _load(self) -> dict[str, Any]:
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(data, dict):
                    logger.debug("Loaded {} keys from {}", len(data), self.path)
                    return data
                logger.warning("Ignoring store file {}: not a JSON object", self.path)
            except json.JSONDecodeError as e:
                logger.warning("Could not load store file {}: {}", self.path, e)
        return {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.data, indent=2, ensure_ascii=False), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if key in self.data:
            del self.data[key]
            self._save()


class PromptHistory:
    """Recently used prompts, newest first, without duplicates."""

    def __init__(self, store: KeyValueStore, limit: int = 20):
        self.store = store
        self.limit = limit

    def entries(self) -> list[str]:
        value = self.store.get(PROMPT_HISTORY_KEY, [])
        return [item for item in value if isinstance(item, str)] if isinstance(value, list) else []

    def add(self, prompt: str) -> list[str]:
        """Move a prompt to the front, dropping exact duplicates and the overflow."""
        if not prompt.strip():
            return self.entries()
        entries = [prompt] + [item for item in self.entries() if item != prompt]
        entries = entries[: self.limit]
        self.store.set(PROMPT_HISTORY_KEY, entries)
        return entries

    def clear(self) -> None:
        self.store.remove(PROMPT_HISTORY_KEY)
