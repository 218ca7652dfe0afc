"""Pytest fixtures and configuration for pixshop tests.

This module provides shared fixtures for testing the raster utilities, the
edit session, the batch scheduler, presets and the model client.
"""

import tempfile
from collections.abc import Callable, Generator
from io import BytesIO
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from pixshop.i18n import ENGLISH_STRINGS
from pixshop.models.base import ImageModel
from pixshop.raster.base import Artifact
from pixshop.storage import MemoryStore

# --- Temporary Directory Fixtures ---


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


# --- Image Fixtures ---


def png_artifact(
    width: int = 40,
    height: int = 30,
    color: tuple[int, int, int] = (255, 0, 0),
    filename: str = "photo.png",
) -> Artifact:
    """Build a solid-color PNG artifact."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), color=color).save(buffer, format="PNG")
    return Artifact(data=buffer.getvalue(), filename=filename, mime_type="image/png")


@pytest.fixture
def make_artifact() -> Callable[..., Artifact]:
    """Factory for solid-color PNG artifacts."""
    return png_artifact


@pytest.fixture
def sample_artifact() -> Artifact:
    """A 40x30 red image."""
    return png_artifact()


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Create sample image bytes for testing."""
    return png_artifact(100, 100).data


# --- Mock Model Fixtures ---


@pytest.fixture
def mock_image_model() -> ImageModel:
    """Create a mock model whose every image call returns a fresh artifact."""
    model = MagicMock(spec=ImageModel)
    model.model_name = "mock-model"
    calls = {"count": 0}

    def next_artifact(filename: str) -> Artifact:
        calls["count"] += 1
        shade = (calls["count"] * 20) % 256
        return png_artifact(color=(0, shade, 255), filename=filename)

    async def mock_transform_image(image, prompt, **kwargs) -> Artifact:
        """Return a new artifact for every edit."""
        return next_artifact("result.png")

    async def mock_generate_image(prompt: str) -> Artifact:
        """Return a new artifact for every generation."""
        return next_artifact("generated.png")

    async def mock_analyze_image(image, instruction, schema):
        """Return three suggestions or a reverse prompt, depending on the schema."""
        if schema.get("type") == "ARRAY":
            return [
                {"name": "Brighten", "prompt": "Brighten the scene"},
                {"name": "Blur Background", "prompt": "Blur the background"},
                {"name": "Vintage", "prompt": "Give it a vintage look"},
            ]
        return {"prompt": "A red square on a plain background"}

    async def mock_translate(strings: dict[str, str], target_language: str) -> dict[str, str]:
        """Prefix every value with the language code, keeping placeholders."""
        return {key: f"[{target_language}] {value}" for key, value in strings.items()}

    model.transform_image = AsyncMock(side_effect=mock_transform_image)
    model.generate_image = AsyncMock(side_effect=mock_generate_image)
    model.analyze_image = AsyncMock(side_effect=mock_analyze_image)
    model.translate = AsyncMock(side_effect=mock_translate)

    return model


# --- Storage Fixtures ---


@pytest.fixture
def memory_store() -> MemoryStore:
    """An empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def english_strings() -> dict[str, str]:
    return dict(ENGLISH_STRINGS)


# --- Settings Override Fixtures ---


@pytest.fixture
def mock_settings(temp_dir: Path, monkeypatch):
    """Override settings with test values."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-api-key")
    monkeypatch.setenv("STORAGE_PATH", str(temp_dir / "pixshop.json"))
    monkeypatch.setenv("OUTPUT_DIR", str(temp_dir / "output"))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    # Reload settings to pick up new env vars
    from pixshop.config import Settings

    return Settings()


# --- HTTP Mock Fixtures ---


@pytest.fixture
def gemini_image_response(sample_artifact: Artifact) -> dict:
    """A generateContent response carrying one inline image."""
    return {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": "image/png",
                                "data": sample_artifact.to_base64(),
                            }
                        }
                    ]
                },
                "finishReason": "STOP",
            }
        ]
    }
