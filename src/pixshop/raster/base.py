"""
Data models for images and pixel geometry.

Provides Pydantic models for image artifacts and the points, sizes and
rectangles exchanged between display space and natural (full resolution)
space.
"""

import base64
import mimetypes
from enum import Enum
from functools import cached_property
from io import BytesIO
from pathlib import Path

from PIL import Image as PILImage
from pydantic import BaseModel, ConfigDict, Field


class Artifact(BaseModel):
    """An immutable image blob with its filename and MIME type."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(description="Encoded image bytes", repr=False)
    filename: str = Field(description="File name used for downloads and archives")
    mime_type: str = Field(default="image/png", description="MIME type (e.g., 'image/png')")

    @classmethod
    def from_image(cls, image: PILImage.Image, filename: str) -> "Artifact":
        """Encode a Pillow image as a PNG artifact."""
        output = BytesIO()
        image.save(output, format="PNG")
        return cls(data=output.getvalue(), filename=filename, mime_type="image/png")

    @classmethod
    def from_file(cls, path: Path | str) -> "Artifact":
        """Read an image file, guessing its MIME type from the extension."""
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(data=path.read_bytes(), filename=path.name, mime_type=mime_type or "image/png")

    def open(self) -> PILImage.Image:
        """Decode the artifact into a Pillow image."""
        image = PILImage.open(BytesIO(self.data))
        image.load()
        return image

    @cached_property
    def size(self) -> "Size":
        """Natural pixel size of the encoded image."""
        with PILImage.open(BytesIO(self.data)) as image:
            width, height = image.size
        return Size(width=width, height=height)

    def to_base64(self) -> str:
        """Return the image bytes as a base64 string."""
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        """Return the artifact as a base64 data URL."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class Point(BaseModel):
    """A pixel coordinate."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Size(BaseModel):
    """A width/height pair in pixels."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(gt=0)
    height: float = Field(gt=0)


class Rect(BaseModel):
    """An axis-aligned rectangle given by its top-left corner and size."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class ExpandDirection(str, Enum):
    """Edges that receive new blank canvas when outpainting."""

    ALL = "all"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"
