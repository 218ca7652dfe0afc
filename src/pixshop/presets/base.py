"""
Data models for presets.

A preset is a named, ordered list of prompts recorded from an editing
session and replayed later as global adjustments.
"""

from pydantic import BaseModel, Field


class PresetAction(BaseModel):
    """One recorded step."""

    prompt: str = Field(min_length=1, description="Prompt replayed as an adjustment")


class Preset(BaseModel):
    """A named sequence of recorded steps."""

    name: str = Field(min_length=1)
    actions: list[PresetAction] = Field(default_factory=list)

    @classmethod
    def from_descriptions(cls, name: str, descriptions: list[str]) -> "Preset":
        """Build a preset from history action descriptions."""
        return cls(
            name=name,
            actions=[PresetAction(prompt=text) for text in descriptions if text.strip()],
        )


class ReplayResult(BaseModel):
    """Outcome of replaying a preset."""

    preset_name: str
    total_steps: int
    completed_steps: int = 0
    failed_step: int | None = Field(default=None, description="1-based index of the failed step")
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None and self.completed_steps == self.total_steps
