"""
Edit actions.

Every edit the studio can delegate to the model is one variant of the
``EditAction`` tagged union. ``apply_action`` is the single place that turns
a variant into a model call.
"""

import time
from typing import Annotated, ClassVar, Literal, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..models import prompts
from ..models.base import ImageModel
from ..raster.base import Artifact, ExpandDirection, Point
from ..raster.canvas import expand_canvas

_EXTENSIONS = {"image/jpeg": "jpg", "image/webp": "webp", "image/gif": "gif"}


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename_prefix: ClassVar[str] = "edited"
    loading_key: ClassVar[str] = "loadingMagic"
    failure_prefix: ClassVar[str] = "Failed to edit the image."

    def describe(self) -> str:
        raise NotImplementedError


class LocalizedEdit(_Action):
    """Edit around a single point of the image."""

    kind: Literal["localized-edit"] = "localized-edit"
    prompt: str = Field(min_length=1)
    hotspot: Point

    filename_prefix: ClassVar[str] = "edited"
    loading_key: ClassVar[str] = "loadingLocalizedEdit"
    failure_prefix: ClassVar[str] = "Failed to generate the image."

    def describe(self) -> str:
        return f'Magic Edit: "{self.prompt}"'


class Filter(_Action):
    """Stylistic filter over the whole image."""

    kind: Literal["filter"] = "filter"
    prompt: str = Field(min_length=1)

    filename_prefix: ClassVar[str] = "filtered"
    loading_key: ClassVar[str] = "loadingFilter"
    failure_prefix: ClassVar[str] = "Failed to apply the filter."

    def describe(self) -> str:
        return f'Filter: "{self.prompt}"'


class Adjustment(_Action):
    """Photorealistic global adjustment."""

    kind: Literal["adjustment"] = "adjustment"
    prompt: str = Field(min_length=1)

    filename_prefix: ClassVar[str] = "adjusted"
    loading_key: ClassVar[str] = "loadingAdjustment"
    failure_prefix: ClassVar[str] = "Failed to apply the adjustment."

    def describe(self) -> str:
        return f'Adjustment: "{self.prompt}"'


class RemoveBackground(_Action):
    kind: Literal["remove-bg"] = "remove-bg"

    filename_prefix: ClassVar[str] = "bg-removed"
    loading_key: ClassVar[str] = "loadingRemoveBg"
    failure_prefix: ClassVar[str] = "Failed to remove background."

    def describe(self) -> str:
        return "Remove Background"


class Upscale(_Action):
    kind: Literal["upscale"] = "upscale"

    filename_prefix: ClassVar[str] = "upscaled"
    loading_key: ClassVar[str] = "loadingUpscale"
    failure_prefix: ClassVar[str] = "Failed to upscale the image."

    def describe(self) -> str:
        return "Upscale 2x"


class Expand(_Action):
    """Outpaint new canvas around the image."""

    kind: Literal["expand"] = "expand"
    pixels: int = Field(default=256, gt=0)
    direction: ExpandDirection = ExpandDirection.ALL
    prompt: str = ""

    filename_prefix: ClassVar[str] = "expanded"
    loading_key: ClassVar[str] = "loadingExpand"
    failure_prefix: ClassVar[str] = "Failed to expand the image."

    def describe(self) -> str:
        return f"Expand: {self.prompt or 'Extend scene'}"


class StyleTransfer(_Action):
    """Repaint the image in the style of a reference image."""

    kind: Literal["style-transfer"] = "style-transfer"
    style: Artifact

    filename_prefix: ClassVar[str] = "stylized"
    loading_key: ClassVar[str] = "loadingStyleTransfer"
    failure_prefix: ClassVar[str] = "Failed to transfer style."

    def describe(self) -> str:
        return f"Style Transfer from {self.style.filename}"


class LassoInpaint(_Action):
    """Edit only the region selected by a lasso mask."""

    kind: Literal["lasso"] = "lasso"
    prompt: str = Field(min_length=1)
    mask: Artifact

    filename_prefix: ClassVar[str] = "inpainted"
    loading_key: ClassVar[str] = "loadingLassoEdit"
    failure_prefix: ClassVar[str] = "Failed to apply lasso edit."

    def describe(self) -> str:
        return f'Lasso Edit: "{self.prompt}"'


EditAction = Annotated[
    Union[
        LocalizedEdit, Filter, Adjustment, RemoveBackground, Upscale, Expand, StyleTransfer, LassoInpaint
    ],
    Field(discriminator="kind"),
]

# Actions that can run unattended over a batch of images
BatchAction = Annotated[Union[Filter, Adjustment, RemoveBackground], Field(discriminator="kind")]


class NamedAction(BaseModel):
    """A batch action with its menu label."""

    name: str
    action: BatchAction


BATCH_ACTIONS: list[NamedAction] = [
    NamedAction(
        name="Synthwave Filter",
        action=Filter(
            prompt="Apply a vibrant 80s synthwave aesthetic with neon magenta and cyan glows, and subtle scan lines."
        ),
    ),
    NamedAction(
        name="Anime Filter",
        action=Filter(
            prompt="Give the image a vibrant Japanese anime style, with bold outlines, cel-shading, and saturated colors."
        ),
    ),
    NamedAction(
        name="Lomo Filter",
        action=Filter(
            prompt="Apply a Lomography-style cross-processing film effect with high-contrast, oversaturated colors, and dark vignetting."
        ),
    ),
    NamedAction(
        name="Noir Filter",
        action=Filter(
            prompt="Convert the image to a high-contrast, dramatic black-and-white noir style, with deep shadows and cinematic grain."
        ),
    ),
    NamedAction(
        name="Watercolor Filter",
        action=Filter(
            prompt="Transform the image into a delicate watercolor painting, with soft, blended colors, and a textured paper effect."
        ),
    ),
    NamedAction(
        name="Steampunk Filter",
        action=Filter(
            prompt="Apply a steampunk aesthetic to the image, with brass and copper tones, intricate gears, and a Victorian industrial feel."
        ),
    ),
    NamedAction(
        name="Double Exposure Filter",
        action=Filter(
            prompt="Create a surreal double exposure effect, blending the main subject with a misty forest landscape."
        ),
    ),
    NamedAction(
        name="Enhance Details",
        action=Adjustment(
            prompt="Slightly enhance the sharpness and details of the image without making it look unnatural."
        ),
    ),
    NamedAction(
        name="Warmer Lighting",
        action=Adjustment(
            prompt="Adjust the color temperature to give the image warmer, golden-hour style lighting."
        ),
    ),
    NamedAction(name="Remove Background", action=RemoveBackground()),
]


def find_batch_action(name: str) -> NamedAction:
    """Look up a catalogue action by its (case-insensitive) name."""
    for named in BATCH_ACTIONS:
        if named.name.lower() == name.lower():
            return named
    raise KeyError(f"Unknown batch action: {name}")


def result_filename(prefix: str, mime_type: str) -> str:
    """Build a timestamped filename for a new artifact."""
    return f"{prefix}-{int(time.time() * 1000)}.{_EXTENSIONS.get(mime_type, 'png')}"


async def apply_action(model: ImageModel, artifact: Artifact, action: EditAction) -> Artifact:
    """
    Run one edit action against the model.

    Args:
        model: Generative model client
        artifact: Image the action applies to
        action: The edit to perform

    Returns:
        New artifact named after the action

    Raises:
        EditError: If the model refuses or returns nothing usable
        TypeError: If the action is not an EditAction variant
    """
    logger.debug("Applying {} to {}", type(action).__name__, artifact.filename)

    if isinstance(action, LocalizedEdit):
        result = await model.transform_image(
            artifact, prompts.localized_edit(action.prompt, action.hotspot), hotspot=action.hotspot
        )
    elif isinstance(action, Filter):
        result = await model.transform_image(artifact, prompts.filter_prompt(action.prompt))
    elif isinstance(action, Adjustment):
        result = await model.transform_image(artifact, prompts.adjustment(action.prompt))
    elif isinstance(action, RemoveBackground):
        result = await model.transform_image(artifact, prompts.REMOVE_BACKGROUND)
    elif isinstance(action, Upscale):
        result = await model.transform_image(artifact, prompts.UPSCALE)
    elif isinstance(action, Expand):
        enlarged = expand_canvas(artifact, action.pixels, action.direction)
        result = await model.transform_image(enlarged, prompts.expand(action.prompt))
    elif isinstance(action, StyleTransfer):
        result = await model.transform_image(
            artifact, prompts.STYLE_TRANSFER, second_image=action.style
        )
    elif isinstance(action, LassoInpaint):
        result = await model.transform_image(
            artifact, prompts.lasso_inpaint(action.prompt), mask=action.mask
        )
    else:
        raise TypeError(f"Unsupported edit action: {type(action).__name__}")

    return result.model_copy(
        update={"filename": result_filename(action.filename_prefix, result.mime_type)}
    )
