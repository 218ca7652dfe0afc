"""
Presets package.

Recorded edit sequences, their persistence, and replay against the
original image.
"""

from .base import Preset, PresetAction, ReplayResult
from .replay import PresetReplayEngine
from .store import PRESETS_KEY, PresetStore

__all__ = [
    "PRESETS_KEY",
    "Preset",
    "PresetAction",
    "PresetReplayEngine",
    "PresetStore",
    "ReplayResult",
]
