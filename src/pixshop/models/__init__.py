"""Generative model package.

Provides a factory function to create the configured model client.
"""

from .base import ImageModel, ReversePrompt, Suggestion
from .gemini import GeminiImageModel


def create_image_model(
    provider_type: str = "gemini",
    api_key: str = "",
    edit_model: str | None = None,
    text_model: str | None = None,
    imagen_model: str | None = None,
    base_url: str | None = None,
    timeout: int = 120,
) -> ImageModel:
    """Create a generative model client.

    Args:
        provider_type: Type of provider (currently only "gemini")
        api_key: API key for the provider
        edit_model: Optional image editing model override
        text_model: Optional analysis/translation model override
        imagen_model: Optional text-to-image model override
        base_url: Optional REST base URL override
        timeout: HTTP timeout in seconds

    Returns:
        Configured ImageModel instance

    Raises:
        ValueError: If provider_type is not recognized or api_key is empty

    """
    if provider_type == "gemini":
        overrides = {
            key: value
            for key, value in {
                "edit_model": edit_model,
                "text_model": text_model,
                "imagen_model": imagen_model,
                "base_url": base_url,
            }.items()
            if value
        }
        return GeminiImageModel(api_key=api_key, timeout=timeout, **overrides)
    else:
        raise ValueError(f"Unknown model provider: {provider_type}")


def create_default_model() -> ImageModel:
    """Create the model client described by the global settings."""
    from ..config import settings

    return create_image_model(
        provider_type="gemini",
        api_key=settings.gemini_api_key,
        edit_model=settings.edit_model,
        text_model=settings.text_model,
        imagen_model=settings.imagen_model,
        base_url=settings.gemini_base_url,
        timeout=settings.request_timeout,
    )


__all__ = [
    "GeminiImageModel",
    "ImageModel",
    "ReversePrompt",
    "Suggestion",
    "create_default_model",
    "create_image_model",
]
