"""
Preset persistence.

Presets live as one JSON list under a single key of the key-value store.
Names are unique: saving an existing name replaces that preset in place.
"""

from loguru import logger
from pydantic import ValidationError

from ..storage import KeyValueStore
from .base import Preset

PRESETS_KEY = "pixshop_presets"


class PresetStore:
    """Saved presets keyed by name."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> list[Preset]:
        """Return every saved preset in save order, skipping corrupt records."""
        presets = []
        for record in self.store.get(PRESETS_KEY, []) or []:
            try:
                presets.append(Preset.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping invalid preset record: {}", e)
        return presets

    def _write(self, presets: list[Preset]) -> None:
        self.store.set(PRESETS_KEY, [preset.model_dump() for preset in presets])

    def get(self, name: str) -> Preset | None:
        return next((preset for preset in self.load() if preset.name == name), None)

    def save(self, preset: Preset) -> Preset:
        """Save a preset, replacing one with the same name.

        Raises:
            ValueError: If the preset has no actions
        """
        if not preset.actions:
            raise ValueError("A preset needs at least one recorded action")

        presets = self.load()
        for index, existing in enumerate(presets):
            if existing.name == preset.name:
                presets[index] = preset
                logger.info("Replaced preset '{}' ({} steps)", preset.name, len(preset.actions))
                break
        else:
            presets.append(preset)
            logger.info("Saved preset '{}' ({} steps)", preset.name, len(preset.actions))

        self._write(presets)
        return preset

    def delete(self, name: str) -> bool:
        """Delete a preset by name; returns False if it did not exist."""
        presets = self.load()
        remaining = [preset for preset in presets if preset.name != name]
        if len(remaining) == len(presets):
            return False
        self._write(remaining)
        logger.info("Deleted preset '{}'", name)
        return True
