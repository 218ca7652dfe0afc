"""
Linear undo/redo history over immutable artifacts.

Entry 0 is always the pristine original of the session. Pushing after an
undo (or a reset) discards every entry beyond the cursor.
"""

from collections.abc import Callable

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..errors import NoOpError
from ..raster.base import Artifact


class HistoryEntry(BaseModel):
    """One image state and the edit that produced it."""

    model_config = ConfigDict(frozen=True)

    artifact: Artifact
    action_description: str | None = Field(
        default=None, description="Label of the edit; None for the original image"
    )


class HistoryStore:
    """Ordered history of entries with a cursor on the displayed one.

    The store has no capacity limit. ``on_discard`` is called with every
    entry that becomes unreachable (truncated or cleared) so derived
    resources can be released.
    """

    def __init__(self, on_discard: Callable[[HistoryEntry], None] | None = None):
        self._entries: list[HistoryEntry] = []
        self._cursor = -1
        self._on_discard = on_discard

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def cursor(self) -> int:
        """Index of the displayed entry, -1 when empty."""
        return self._cursor

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    @property
    def current(self) -> HistoryEntry | None:
        return self._entries[self._cursor] if self._entries else None

    @property
    def original(self) -> HistoryEntry | None:
        return self._entries[0] if self._entries else None

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def _discard(self, entries: list[HistoryEntry]) -> None:
        if not entries:
            return
        logger.debug("Discarding {} history entries", len(entries))
        if self._on_discard is not None:
            for entry in entries:
                self._on_discard(entry)

    def push(self, artifact: Artifact, action_description: str | None = None) -> HistoryEntry:
        """Truncate after the cursor, append a new entry and select it."""
        dropped = self._entries[self._cursor + 1 :]
        del self._entries[self._cursor + 1 :]
        entry = HistoryEntry(artifact=artifact, action_description=action_description)
        self._entries.append(entry)
        self._cursor = len(self._entries) - 1
        self._discard(dropped)
        logger.debug("History push: {} (cursor={})", action_description or "original", self._cursor)
        return entry

    def undo(self) -> HistoryEntry:
        """Move the cursor one entry back.

        Raises:
            NoOpError: If the cursor is already on the original
        """
        if not self.can_undo:
            raise NoOpError("Nothing to undo")
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> HistoryEntry:
        """Move the cursor one entry forward.

        Raises:
            NoOpError: If the cursor is already on the newest entry
        """
        if not self.can_redo:
            raise NoOpError("Nothing to redo")
        self._cursor += 1
        return self._entries[self._cursor]

    def reset_to_original(self, discard_redo: bool = False) -> None:
        """Select the original.

        Later entries stay reachable through ``redo`` until the next push,
        unless ``discard_redo`` drops them right away.
        """
        if not self._entries:
            return
        self._cursor = 0
        if discard_redo:
            dropped = self._entries[1:]
            del self._entries[1:]
            self._discard(dropped)

    def clear(self) -> None:
        dropped = self._entries
        self._entries = []
        self._cursor = -1
        self._discard(dropped)

    def recorded_actions(self) -> list[str]:
        """Descriptions of entries 1..cursor, in order, skipping unlabeled ones."""
        return [
            entry.action_description
            for entry in self._entries[1 : self._cursor + 1]
            if entry.action_description
        ]
