"""
Pure geometry and encoding helpers.

Converts data URLs to artifacts and maps coordinates between the displayed
image and its natural resolution.
"""

import base64
import binascii
import math
import re

from ..errors import MalformedDataUrlError
from .base import Artifact, Point, Rect, Size

_MIME_PATTERN = re.compile(r":(.*?);")


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """
    Parse a base64 data URL.

    Args:
        data_url: A string of the form ``data:<mime>;base64,<payload>``

    Returns:
        Tuple of (mime_type, decoded_bytes)

    Raises:
        MalformedDataUrlError: If the comma separator, the MIME type or a valid
            base64 payload is missing
    """
    header, sep, payload = data_url.partition(",")
    if not sep:
        raise MalformedDataUrlError("Invalid data URL")

    match = _MIME_PATTERN.search(header)
    if not match or not match.group(1):
        raise MalformedDataUrlError("Could not parse MIME type from data URL")

    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise MalformedDataUrlError(f"Invalid base64 payload in data URL: {e}") from e

    return match.group(1), data


def artifact_from_data_url(data_url: str, filename: str) -> Artifact:
    """Decode a data URL into a named artifact."""
    mime_type, data = decode_data_url(data_url)
    return Artifact(data=data, filename=filename, mime_type=mime_type)


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; pixel snapping rounds .5 up
    return math.floor(value + 0.5)


def scale_point(point: Point, display_size: Size, natural_size: Size) -> Point:
    """
    Map a display-space point to natural (full resolution) pixel space.

    Each component is scaled by ``natural / display`` and rounded to the
    nearest pixel, so equal sizes return the point unchanged.
    """
    if display_size == natural_size:
        return point
    scale_x = natural_size.width / display_size.width
    scale_y = natural_size.height / display_size.height
    return Point(x=_round_half_up(point.x * scale_x), y=_round_half_up(point.y * scale_y))


def scale_polygon(points: list[Point], display_size: Size, natural_size: Size) -> list[tuple[float, float]]:
    """Scale polygon vertices to natural space without snapping to pixels."""
    scale_x = natural_size.width / display_size.width
    scale_y = natural_size.height / display_size.height
    return [(p.x * scale_x, p.y * scale_y) for p in points]


def scale_rect(rect: Rect, display_size: Size, natural_size: Size) -> tuple[int, int, int, int]:
    """
    Map a display-space rectangle to a natural-space pixel box.

    Both corners go through ``scale_point``; the result is clamped to the
    natural image bounds.

    Returns:
        Pillow box tuple (left, top, right, bottom)
    """
    top_left = scale_point(Point(x=rect.x, y=rect.y), display_size, natural_size)
    bottom_right = scale_point(
        Point(x=rect.x + rect.width, y=rect.y + rect.height), display_size, natural_size
    )
    max_x, max_y = int(natural_size.width), int(natural_size.height)
    left = min(max(int(top_left.x), 0), max_x)
    top = min(max(int(top_left.y), 0), max_y)
    right = min(max(int(bottom_right.x), left), max_x)
    bottom = min(max(int(bottom_right.y), top), max_y)
    return left, top, right, bottom
