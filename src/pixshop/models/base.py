"""Abstract base class for generative image models.

Enables swapping the remote model service (or a local double in tests)
behind one interface.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from ..raster.base import Artifact, Point


class Suggestion(BaseModel):
    """A suggested edit returned by image analysis."""

    name: str = Field(description="Short button label for the edit")
    prompt: str = Field(description="Detailed prompt that performs the edit")


class ReversePrompt(BaseModel):
    """A text prompt that would reproduce an analysed image."""

    prompt: str = Field(description="Text-to-image prompt describing the image")


class ImageModel(ABC):
    """Abstract interface for the remote generative model service."""

    @abstractmethod
    async def transform_image(
        self,
        image: Artifact,
        prompt: str,
        *,
        second_image: Artifact | None = None,
        hotspot: Point | None = None,
        mask: Artifact | None = None,
    ) -> Artifact:
        """Produce a new image from an input image and an instruction.

        Args:
            image: Image to edit
            prompt: Full instruction for the model
            second_image: Optional style reference image
            hotspot: Optional focus point in natural pixel space
            mask: Optional black/white selection mask

        Returns:
            The edited image

        Raises:
            RefusedError: If the request was blocked
            EmptyResultError: If no image came back

        """
        pass

    @abstractmethod
    async def generate_image(self, prompt: str) -> Artifact:
        """Generate an image from text.

        Raises:
            EmptyResultError: If no image came back

        """
        pass

    @abstractmethod
    async def analyze_image(self, image: Artifact, instruction: str, schema: dict) -> Any:
        """Ask for a structured JSON answer about an image.

        Args:
            image: Image to analyse
            instruction: What to extract
            schema: Response schema the answer must follow

        Returns:
            The decoded JSON value

        Raises:
            MalformedResponseError: If the answer is not valid JSON

        """
        pass

    @abstractmethod
    async def translate(self, strings: dict[str, str], target_language: str) -> dict[str, str]:
        """Translate the values of a string table.

        Raises:
            MalformedResponseError: If the answer is not a JSON object

        """
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the identifier of the image editing model."""
        pass
