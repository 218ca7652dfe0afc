"""
Edit session.

Owns everything that belongs to one image being edited: the history, the
transient hotspot or lasso mask, the operation controller, suggestions,
variations and the prompt the image was generated from. Every mutation goes
through the methods below.
"""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger
from PIL import Image as PILImage
from pydantic import TypeAdapter, ValidationError

from ..config import settings
from ..errors import MalformedResponseError, MissingSelectionError
from ..i18n import ENGLISH_STRINGS, ui_string
from ..models import prompts
from ..models.base import ImageModel, ReversePrompt, Suggestion
from ..raster.base import Artifact, Point, Rect, Size
from ..raster.canvas import crop_artifact, mask_artifact
from ..raster.geometry import scale_point
from ..storage import KeyValueStore, MemoryStore, PromptHistory
from .actions import EditAction, LassoInpaint, LocalizedEdit, apply_action, result_filename
from .controller import OperationController, OperationStatus
from .history import HistoryEntry, HistoryStore

if TYPE_CHECKING:
    from ..presets.base import Preset, ReplayResult

_SUGGESTIONS = TypeAdapter(list[Suggestion])


class EditSession:
    """One editing session over a single image and its history."""

    def __init__(
        self,
        model: ImageModel,
        store: KeyValueStore | None = None,
        strings: dict[str, str] | None = None,
    ):
        self.model = model
        self.store = store if store is not None else MemoryStore()
        self.strings = strings or ENGLISH_STRINGS
        self.prompt_history = PromptHistory(self.store, limit=settings.prompt_history_limit)
        self.controller = OperationController()
        self.history = HistoryStore(on_discard=self._release_preview)

        self.hotspot: Point | None = None
        self.mask: Artifact | None = None
        self.original_prompt: str | None = None
        self.suggestions: list[Suggestion] = []
        self.variations: list[Artifact] = []
        self._previews: dict[int, PILImage.Image] = {}

    # State accessors

    @property
    def current(self) -> Artifact | None:
        entry = self.history.current
        return entry.artifact if entry else None

    @property
    def original(self) -> Artifact | None:
        entry = self.history.original
        return entry.artifact if entry else None

    @property
    def status(self) -> OperationStatus:
        return self.controller.status

    @property
    def error(self) -> str | None:
        return self.controller.error

    @property
    def loading_message(self) -> str | None:
        return self.controller.loading_message

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def _text(self, key: str, **values: object) -> str:
        return ui_string(self.strings, key, **values)

    def _require_image(self) -> Artifact:
        current = self.current
        if current is None:
            raise ValueError("No image loaded")
        return current

    # Previews

    def preview(self, artifact: Artifact | None = None) -> PILImage.Image:
        """Decoded view of an artifact, cached until it leaves history.

        Artifacts outside history (variations, style references) are decoded
        on every call and never cached.
        """
        artifact = artifact or self._require_image()
        if not any(entry.artifact is artifact for entry in self.history.entries):
            image = artifact.open()
            image.load()
            return image

        key = id(artifact)
        if key not in self._previews:
            image = artifact.open()
            image.load()
            self._previews[key] = image
        return self._previews[key]

    def _release_preview(self, entry: HistoryEntry) -> None:
        image = self._previews.pop(id(entry.artifact), None)
        if image is not None:
            image.close()

    # Lifecycle

    def start(self, artifact: Artifact, original_prompt: str | None = None) -> None:
        """Begin a new session on an uploaded or generated image."""
        self.controller.invalidate()
        self.history.clear()
        self.history.push(artifact)
        self.clear_selection()
        self.original_prompt = original_prompt
        self.suggestions = []
        self.variations = []
        size = artifact.size
        logger.info("Started session on {} ({:.0f}x{:.0f})", artifact.filename, size.width, size.height)

    def exit(self) -> None:
        """Leave the editor; results still in flight are discarded."""
        self.controller.invalidate()
        self.history.clear()
        self.clear_selection()
        self.original_prompt = None
        self.suggestions = []
        self.variations = []
        logger.info("Session closed")

    async def generate_from_text(self, prompt: str) -> Artifact | None:
        """Generate an image from text and start a session on it."""
        prompt = prompt.strip()
        if not prompt:
            return None
        self.prompt_history.add(prompt)

        async def work() -> Artifact:
            generated = await self.model.generate_image(prompt)
            return generated.model_copy(
                update={"filename": result_filename("generated", generated.mime_type)}
            )

        return await self.controller.run(
            "generate",
            work,
            on_success=lambda artifact: self.start(artifact, original_prompt=prompt),
            loading_message=self._text("loadingGeneratingImage"),
            failure_prefix="Failed to generate the image.",
        )

    # Selection

    def select_hotspot(self, display_point: Point, display_size: Size) -> Point:
        """Record a click on the displayed image as a natural-space hotspot."""
        natural = self._require_image().size
        self.hotspot = scale_point(display_point, display_size, natural)
        self.mask = None
        logger.debug("Hotspot set at ({}, {})", self.hotspot.x, self.hotspot.y)
        return self.hotspot

    def complete_lasso(self, points: list[Point], display_size: Size) -> Artifact:
        """Close a lasso polygon drawn on the displayed image into a mask.

        Raises:
            InsufficientPointsError: If fewer than three points are given
        """
        natural = self._require_image().size
        self.mask = mask_artifact(points, display_size, natural)
        self.hotspot = None
        return self.mask

    def clear_selection(self) -> None:
        self.hotspot = None
        self.mask = None

    # Edits

    async def apply(self, action: EditAction) -> Artifact | None:
        """
        Apply one edit action to the current image.

        Returns:
            The new artifact, or None if the edit failed or went stale

        Raises:
            OperationInProgressError: If another edit is in flight
            ValueError: If no image is loaded
        """
        self.controller.ensure_idle()
        source = self._require_image()

        def push(result: Artifact) -> None:
            self.history.push(result, action.describe())
            self.clear_selection()

        return await self.controller.run(
            action.kind,
            lambda: apply_action(self.model, source, action),
            on_success=push,
            loading_message=self._text(action.loading_key),
            failure_prefix=action.failure_prefix,
        )

    async def localized_edit(self, prompt: str) -> Artifact | None:
        """Edit around the selected hotspot.

        Raises:
            MissingSelectionError: If no hotspot is selected
        """
        if self.hotspot is None:
            raise MissingSelectionError("Click a point on the image before a localized edit")
        self.prompt_history.add(prompt)
        return await self.apply(LocalizedEdit(prompt=prompt, hotspot=self.hotspot))

    async def lasso_edit(self, prompt: str) -> Artifact | None:
        """Edit inside the completed lasso selection.

        Raises:
            MissingSelectionError: If no lasso selection is complete
        """
        if self.mask is None:
            raise MissingSelectionError("Complete a lasso selection before a lasso edit")
        self.prompt_history.add(prompt)
        return await self.apply(LassoInpaint(prompt=prompt, mask=self.mask))

    def crop(self, display_rect: Rect, display_size: Size, pixel_ratio: float | None = None) -> Artifact:
        """Crop the current image locally and push the result."""
        self.controller.ensure_idle()
        ratio = settings.device_pixel_ratio if pixel_ratio is None else pixel_ratio
        cropped = crop_artifact(self._require_image(), display_rect, display_size, ratio)
        self.controller.dismiss()
        self.history.push(cropped, "Crop")
        self.clear_selection()
        return cropped

    # Navigation
    # Moving the cursor dismisses a failed edit; its retry would apply to another image.

    def undo(self) -> bool:
        """Step back in history; False if there is nothing to undo."""
        self.controller.ensure_idle()
        if not self.history.can_undo:
            return False
        self.controller.dismiss()
        self.history.undo()
        self.clear_selection()
        return True

    def redo(self) -> bool:
        """Step forward in history; False if there is nothing to redo."""
        self.controller.ensure_idle()
        if not self.history.can_redo:
            return False
        self.controller.dismiss()
        self.history.redo()
        self.clear_selection()
        return True

    def reset(self) -> None:
        """Show the original again; later entries go away on the next edit."""
        self.controller.ensure_idle()
        self.controller.dismiss()
        self.history.reset_to_original()
        self.clear_selection()

    def dismiss_error(self) -> None:
        self.controller.dismiss()

    async def retry(self):
        return await self.controller.retry()

    def recorded_actions(self) -> list[str]:
        return self.history.recorded_actions()

    # Presets

    def record_preset(self, name: str) -> "Preset":
        """Capture the edits up to the cursor as a preset."""
        from ..presets.base import Preset

        return Preset.from_descriptions(name, self.recorded_actions())

    async def apply_preset(self, preset: "Preset", on_progress=None) -> "ReplayResult":
        """Replay a preset from the original image."""
        from ..presets.replay import PresetReplayEngine

        engine = PresetReplayEngine(self.model, self.history, self.controller, self.strings)
        self.clear_selection()
        return await engine.replay(preset, on_progress)

    # Suggestions & variations

    async def fetch_suggestions(self) -> list[Suggestion]:
        """Ask the model for edit suggestions; failures only get logged."""
        source = self._require_image()
        token = self.controller.token
        self.suggestions = []
        try:
            raw = await self.model.analyze_image(
                source, prompts.SUGGESTIONS, prompts.SUGGESTIONS_SCHEMA
            )
            suggestions = _SUGGESTIONS.validate_python(raw)
        except ValidationError as e:
            logger.warning("Edit suggestions had an unexpected shape: {}", e)
            return []
        except Exception as e:
            logger.warning("Failed to get edit suggestions: {}", e)
            return []

        if self.controller.is_current(token):
            self.suggestions = suggestions
        return suggestions

    async def generate_variations(self, count: int | None = None) -> list[Artifact] | None:
        """
        Generate alternative images for the current one.

        Uses the text prompt the image was generated from, or asks the model
        to describe the image first when there is none.
        """
        source = self._require_image()
        count = count or settings.variation_count

        async def work() -> list[Artifact]:
            prompt = self.original_prompt
            if not prompt:
                self.controller.set_loading_message(self._text("loadingAnalyzingForVariations"))
                raw = await self.model.analyze_image(
                    source, prompts.REVERSE_PROMPT, prompts.REVERSE_PROMPT_SCHEMA
                )
                try:
                    prompt = ReversePrompt.model_validate(raw).prompt
                except ValidationError as e:
                    raise MalformedResponseError(f"Could not read the image description: {e}") from e

            self.controller.set_loading_message(self._text("loadingVariations"))
            logger.info("Generating {} variations of '{}'", count, prompt)
            results = await asyncio.gather(
                *(self.model.generate_image(prompt) for _ in range(count))
            )
            return [
                result.model_copy(update={"filename": f"variation-{index + 1}.png"})
                for index, result in enumerate(results)
            ]

        def store(results: list[Artifact]) -> None:
            self.variations = results

        self.variations = []
        return await self.controller.run(
            "variations",
            work,
            on_success=store,
            loading_message=self._text("loadingVariations"),
            failure_prefix="Failed to generate variations.",
        )

    def select_variation(self, index: int) -> Artifact:
        """Push one of the generated variations as the next edit."""
        self.controller.ensure_idle()
        chosen = self.variations[index]
        chosen = chosen.model_copy(update={"filename": result_filename("variation", chosen.mime_type)})
        self.controller.dismiss()
        self.history.push(chosen, "Selected Variation")
        self.variations = []
        self.clear_selection()
        return chosen

    # Output

    def save_current(self, directory: Path | str | None = None) -> Path:
        """Write the current image as ``edited-<filename>``."""
        current = self._require_image()
        target_dir = Path(directory) if directory is not None else settings.output_path
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"edited-{current.filename}"
        path.write_bytes(current.data)
        logger.info("Saved {}", path)
        return path
