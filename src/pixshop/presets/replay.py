"""
Preset replay.

Rebuilds the history from the pristine original by running each recorded
prompt as a global adjustment, in order. The first failure stops the replay;
steps that already succeeded stay in history.
"""

from collections.abc import Callable

from loguru import logger

from ..editing.actions import Adjustment, apply_action, result_filename
from ..editing.controller import OperationController
from ..editing.history import HistoryStore
from ..errors import PresetStepError
from ..i18n import ENGLISH_STRINGS, ui_string
from ..models.base import ImageModel
from .base import Preset, ReplayResult

ProgressCallback = Callable[[int, int], None]


class PresetReplayEngine:
    """Replays presets against the original entry of a history."""

    def __init__(
        self,
        model: ImageModel,
        history: HistoryStore,
        controller: OperationController,
        strings: dict[str, str] | None = None,
    ):
        self.model = model
        self.history = history
        self.controller = controller
        self.strings = strings or ENGLISH_STRINGS

    async def replay(self, preset: Preset, on_progress: ProgressCallback | None = None) -> ReplayResult:
        """
        Replay a preset under the controller's single-flight guard.

        The guard covers the whole chain. Progress is reported as
        ``(current_step, total_steps)`` before each step starts.

        Args:
            preset: Preset to replay
            on_progress: Optional progress callback

        Returns:
            ReplayResult with completed steps and, on failure, the failed step

        Raises:
            ValueError: If the history is empty
            OperationInProgressError: If another edit is in flight
        """
        original = self.history.original
        if original is None:
            raise ValueError("Load an image before applying a preset")

        total = len(preset.actions)
        result = ReplayResult(preset_name=preset.name, total_steps=total)

        async def work() -> ReplayResult:
            token = self.controller.token
            self.history.reset_to_original(discard_redo=True)
            image = original.artifact

            for index, step in enumerate(preset.actions):
                number = index + 1
                self.controller.set_loading_message(
                    ui_string(self.strings, "loadingPreset", currentStep=number, totalSteps=total)
                )
                if on_progress is not None:
                    on_progress(number, total)
                logger.debug("Preset '{}' step {}/{}: {}", preset.name, number, total, step.prompt)

                try:
                    produced = await apply_action(self.model, image, Adjustment(prompt=step.prompt))
                except Exception as e:
                    result.failed_step = number
                    result.error = str(e)
                    raise PresetStepError(number, total, step.prompt, e) from e

                if not self.controller.is_current(token):
                    return result

                produced = produced.model_copy(
                    update={"filename": result_filename(f"preset-step-{index}", produced.mime_type)}
                )
                self.history.push(produced, f"Preset: {step.prompt}")
                image = produced
                result.completed_steps = number

            return result

        logger.info("Applying preset '{}' ({} steps)", preset.name, total)
        await self.controller.run(
            "preset",
            work,
            loading_message=ui_string(self.strings, "loadingPreset", currentStep=1, totalSteps=total),
        )
        if result.failed_step is not None:
            logger.warning(
                "Preset '{}' stopped at step {}/{}", preset.name, result.failed_step, total
            )
        return result
