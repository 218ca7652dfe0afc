"""Gemini generative model implementation.

Talks to the Gemini REST API with httpx: ``generateContent`` for image
edits, image analysis and translation, ``predict`` for Imagen text-to-image.
"""

import json
from typing import Any

import httpx
from loguru import logger

from ..errors import EmptyResultError, MalformedResponseError, RefusedError
from ..raster.base import Artifact, Point
from ..raster.geometry import artifact_from_data_url
from . import prompts
from .base import ImageModel

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Finish reasons that mean the model completed normally
NORMAL_FINISH_REASONS = {"STOP", "FINISH_REASON_UNSPECIFIED"}


def _inline_part(artifact: Artifact) -> dict:
    return {"inlineData": {"mimeType": artifact.mime_type, "data": artifact.to_base64()}}


def _first_candidate(payload: dict) -> dict:
    candidates = payload.get("candidates") or []
    return candidates[0] if candidates else {}


def _response_text(payload: dict) -> str:
    parts = _first_candidate(payload).get("content", {}).get("parts", [])
    return "".join(part.get("text", "") for part in parts).strip()


def image_from_response(payload: dict, filename: str = "result.png") -> Artifact:
    """
    Extract the generated image from a ``generateContent`` response.

    Args:
        payload: Decoded JSON response body
        filename: Name given to the returned artifact

    Returns:
        The first inline image in the response

    Raises:
        RefusedError: If the prompt was blocked or generation stopped early
        EmptyResultError: If the response holds no image
    """
    feedback = payload.get("promptFeedback") or {}
    if feedback.get("blockReason"):
        message = (
            f"Request was blocked. Reason: {feedback['blockReason']}. "
            f"{feedback.get('blockReasonMessage', '')}"
        ).strip()
        logger.warning(message)
        raise RefusedError(message)

    candidate = _first_candidate(payload)
    for part in candidate.get("content", {}).get("parts", []):
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
            logger.debug("Received image data ({})", mime_type)
            return artifact_from_data_url(f"data:{mime_type};base64,{inline['data']}", filename)

    finish_reason = candidate.get("finishReason")
    if finish_reason and finish_reason not in NORMAL_FINISH_REASONS:
        message = (
            f"Image generation stopped unexpectedly. Reason: {finish_reason}. "
            "This often relates to safety settings."
        )
        logger.warning(message)
        raise RefusedError(message)

    text = _response_text(payload)
    message = "The AI model did not return an image. " + (
        f'The model responded with text: "{text}"'
        if text
        else "This can happen due to safety filters or if the request is too complex. "
        "Try rephrasing your prompt to be more direct."
    )
    logger.warning("Model response did not contain an image part")
    raise EmptyResultError(message, text=text or None)


def json_from_response(payload: dict, what: str) -> Any:
    """Decode the JSON text of a ``generateContent`` response."""
    text = _response_text(payload)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse {} JSON: {}", what, e)
        raise MalformedResponseError(f"The AI returned {what} in an invalid format.") from e


class GeminiImageModel(ImageModel):
    """Gemini REST API client."""

    def __init__(
        self,
        api_key: str,
        edit_model: str = "gemini-2.5-flash-image-preview",
        text_model: str = "gemini-2.5-flash",
        imagen_model: str = "imagen-4.0-generate-001",
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 120,
    ):
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key
            edit_model: Model used for image edits
            text_model: Model used for JSON analysis and translation
            imagen_model: Model used for text-to-image generation
            base_url: REST API base URL
            timeout: HTTP request timeout in seconds

        Raises:
            ValueError: If api_key is empty or None

        """
        if not api_key:
            raise ValueError("Gemini API key is required")

        self.api_key = api_key
        self.edit_model = edit_model
        self.text_model = text_model
        self.imagen_model = imagen_model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        logger.info("Initialized Gemini: edit={}, text={}, imagen={}", edit_model, text_model, imagen_model)

    async def _post(self, model: str, method: str, body: dict) -> dict:
        url = f"{self.base_url}/models/{model}:{method}"
        logger.debug("POST {} ({} bytes)", url, len(json.dumps(body)))
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(url, json=body, headers={"x-goog-api-key": self.api_key})
            response.raise_for_status()
            return response.json()

    async def transform_image(
        self,
        image: Artifact,
        prompt: str,
        *,
        second_image: Artifact | None = None,
        hotspot: Point | None = None,
        mask: Artifact | None = None,
    ) -> Artifact:
        """Send an image edit to the image model.

        The hotspot is already part of the prompt text; it is only logged here.
        """
        if hotspot is not None:
            logger.debug("Edit focused at ({}, {})", hotspot.x, hotspot.y)

        parts = [_inline_part(image)]
        if second_image is not None:
            parts.append(_inline_part(second_image))
        if mask is not None:
            parts.append(_inline_part(mask))
        parts.append({"text": prompt})

        payload = await self._post(self.edit_model, "generateContent", {"contents": [{"parts": parts}]})
        return image_from_response(payload)

    async def generate_image(self, prompt: str) -> Artifact:
        """Generate one PNG image from text with Imagen."""
        logger.debug("Text-to-image: '{}'", prompt[:50])
        payload = await self._post(
            self.imagen_model,
            "predict",
            {
                "instances": [{"prompt": prompt}],
                "parameters": {"sampleCount": 1, "outputMimeType": "image/png"},
            },
        )

        predictions = payload.get("predictions") or []
        encoded = predictions[0].get("bytesBase64Encoded") if predictions else None
        if not encoded:
            raise EmptyResultError(
                "The AI model did not return an image. This can happen due to safety "
                "filters or an invalid prompt."
            )
        mime_type = predictions[0].get("mimeType") or "image/png"
        return artifact_from_data_url(f"data:{mime_type};base64,{encoded}", "generated.png")

    async def analyze_image(self, image: Artifact, instruction: str, schema: dict) -> Any:
        """Ask the text model for a JSON answer about an image."""
        payload = await self._post(
            self.text_model,
            "generateContent",
            {
                "contents": [{"parts": [_inline_part(image), {"text": instruction}]}],
                "generationConfig": {
                    "responseMimeType": "application/json",
                    "responseSchema": schema,
                },
            },
        )
        return json_from_response(payload, "analysis")

    async def translate(self, strings: dict[str, str], target_language: str) -> dict[str, str]:
        """Translate a UI string table, keeping keys and placeholders."""
        logger.debug("Translating {} strings to {}", len(strings), target_language)
        payload = await self._post(
            self.text_model,
            "generateContent",
            {
                "contents": [{"parts": [{"text": prompts.translation(strings, target_language)}]}],
                "generationConfig": {"responseMimeType": "application/json"},
            },
        )
        translated = json_from_response(payload, f"translated text for {target_language}")
        if not isinstance(translated, dict):
            raise MalformedResponseError(
                f"The AI returned translated text in an invalid format for {target_language}."
            )
        return translated

    @property
    def model_name(self) -> str:
        """Return the image editing model name."""
        return self.edit_model
