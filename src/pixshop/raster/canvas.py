"""
Canvas operations on image artifacts.

Rasterizes lasso masks, extracts crops and composes enlarged canvases for
outpainting. Every function returns a new PNG artifact and never touches
its input.
"""

import time

from loguru import logger
from PIL import Image as PILImage
from PIL import ImageDraw

from ..errors import InsufficientPointsError
from .base import Artifact, ExpandDirection, Point, Rect, Size
from .geometry import scale_polygon, scale_rect

MASK_BACKGROUND = 0
MASK_FOREGROUND = 255

_LEFT_EDGES = {ExpandDirection.ALL, ExpandDirection.HORIZONTAL, ExpandDirection.LEFT}
_RIGHT_EDGES = {ExpandDirection.ALL, ExpandDirection.HORIZONTAL, ExpandDirection.RIGHT}
_TOP_EDGES = {ExpandDirection.ALL, ExpandDirection.VERTICAL, ExpandDirection.TOP}
_BOTTOM_EDGES = {ExpandDirection.ALL, ExpandDirection.VERTICAL, ExpandDirection.BOTTOM}


def _timestamp() -> int:
    return int(time.time() * 1000)


def rasterize_mask(
    points: list[Point],
    display_size: Size,
    natural_size: Size,
) -> PILImage.Image:
    """
    Fill a closed lasso polygon into a black/white mask.

    The vertices are scaled to natural space first and the fill is computed
    there, so the mask stays sharp under non-uniform scale factors.

    Args:
        points: Polygon vertices in display space
        display_size: Size of the image as displayed
        natural_size: Natural size of the image; the mask has this size

    Returns:
        An ``L`` mode image, 255 inside the polygon and 0 elsewhere

    Raises:
        InsufficientPointsError: If fewer than three points are given
    """
    if len(points) < 3:
        raise InsufficientPointsError(
            f"A lasso selection needs at least 3 points, got {len(points)}"
        )

    width, height = int(natural_size.width), int(natural_size.height)
    mask = PILImage.new("L", (width, height), MASK_BACKGROUND)
    vertices = scale_polygon(points, display_size, natural_size)
    ImageDraw.Draw(mask).polygon(vertices, fill=MASK_FOREGROUND, outline=MASK_FOREGROUND)
    logger.debug("Rasterized {}-point lasso into {}x{} mask", len(points), width, height)
    return mask


def mask_artifact(points: list[Point], display_size: Size, natural_size: Size) -> Artifact:
    """Rasterize a lasso polygon and encode it as ``mask.png``."""
    return Artifact.from_image(rasterize_mask(points, display_size, natural_size), "mask.png")


def crop_artifact(
    artifact: Artifact,
    display_rect: Rect,
    display_size: Size,
    pixel_ratio: float = 1.0,
) -> Artifact:
    """
    Cut a rectangle selected on the displayed image out of the artifact.

    The rectangle is mapped to natural pixels and the target buffer is
    allocated at the displayed crop size times ``pixel_ratio``, so a crop
    taken on a high-density display is not blurred.

    Args:
        artifact: Image to crop
        display_rect: Selection in display space
        display_size: Size of the image as displayed
        pixel_ratio: Device pixel ratio of the display

    Returns:
        New PNG artifact holding the cropped pixels
    """
    image = artifact.open()
    box = scale_rect(display_rect, display_size, artifact.size)
    region = image.crop(box)

    target = (
        max(1, round(display_rect.width * pixel_ratio)),
        max(1, round(display_rect.height * pixel_ratio)),
    )
    if region.size != target:
        region = region.resize(target, PILImage.Resampling.LANCZOS)

    logger.debug("Cropped box {} from {} into {}x{}", box, artifact.filename, *target)
    return Artifact.from_image(region, f"cropped-{_timestamp()}.png")


def expand_offsets(pixels: int, direction: ExpandDirection) -> tuple[int, int, int, int]:
    """Return the (left, top, right, bottom) padding implied by a direction."""
    direction = ExpandDirection(direction)
    return (
        pixels if direction in _LEFT_EDGES else 0,
        pixels if direction in _TOP_EDGES else 0,
        pixels if direction in _RIGHT_EDGES else 0,
        pixels if direction in _BOTTOM_EDGES else 0,
    )


def expand_canvas(artifact: Artifact, pixels: int, direction: ExpandDirection) -> Artifact:
    """
    Enlarge the canvas around an image, leaving new areas transparent.

    The result is the input to an outpainting call, not a finished edit.

    Args:
        artifact: Image to enlarge
        pixels: Number of pixels added to each affected edge
        direction: Which edges receive new canvas

    Returns:
        New PNG artifact with the original pixels at their offset

    Raises:
        ValueError: If ``pixels`` is not positive
    """
    if pixels <= 0:
        raise ValueError(f"Canvas expansion needs a positive pixel count, got {pixels}")

    image = artifact.open().convert("RGBA")
    left, top, right, bottom = expand_offsets(pixels, direction)
    width, height = image.size
    canvas = PILImage.new("RGBA", (width + left + right, height + top + bottom), (0, 0, 0, 0))
    canvas.paste(image, (left, top))

    logger.debug(
        "Expanded {} from {}x{} to {}x{} ({})",
        artifact.filename,
        width,
        height,
        canvas.width,
        canvas.height,
        ExpandDirection(direction).value,
    )
    return Artifact.from_image(canvas, f"expand-base-{_timestamp()}.png")
