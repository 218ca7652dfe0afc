"""
Raster utilities package.

Image artifacts, display/natural coordinate mapping, and canvas operations
(lasso masks, crops, canvas expansion).
"""

from .base import Artifact, ExpandDirection, Point, Rect, Size
from .canvas import crop_artifact, expand_canvas, mask_artifact, rasterize_mask
from .geometry import artifact_from_data_url, decode_data_url, scale_point, scale_rect

__all__ = [
    "Artifact",
    "ExpandDirection",
    "Point",
    "Rect",
    "Size",
    "artifact_from_data_url",
    "crop_artifact",
    "decode_data_url",
    "expand_canvas",
    "mask_artifact",
    "rasterize_mask",
    "scale_point",
    "scale_rect",
]
