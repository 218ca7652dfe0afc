"""Tests for the Gemini model client.

Tests response parsing, the HTTP requests sent and the factory function.
"""

import base64
import json

import httpx
import pytest
import respx
from httpx import Response

from pixshop.errors import EmptyResultError, MalformedResponseError, RefusedError
from pixshop.models import create_image_model
from pixshop.models.base import ImageModel
from pixshop.models.gemini import DEFAULT_BASE_URL, GeminiImageModel, image_from_response, json_from_response
from pixshop.raster import Point

EDIT_URL = f"{DEFAULT_BASE_URL}/models/gemini-2.5-flash-image-preview:generateContent"
TEXT_URL = f"{DEFAULT_BASE_URL}/models/gemini-2.5-flash:generateContent"
IMAGEN_URL = f"{DEFAULT_BASE_URL}/models/imagen-4.0-generate-001:predict"


def text_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


@pytest.fixture
def gemini() -> GeminiImageModel:
    return GeminiImageModel(api_key="test-key")


class TestImageFromResponse:
    """Test image_from_response."""

    def test_returns_inline_image(self, gemini_image_response, sample_artifact):
        """Test that the first inline image becomes an artifact."""
        artifact = image_from_response(gemini_image_response, "out.png")

        assert artifact.data == sample_artifact.data
        assert artifact.mime_type == "image/png"
        assert artifact.filename == "out.png"

    def test_snake_case_inline_data(self, sample_artifact):
        """Test that inline_data parts are accepted too."""
        payload = {
            "candidates": [
                {"content": {"parts": [{"inline_data": {"mime_type": "image/png", "data": sample_artifact.to_base64()}}]}}
            ]
        }

        assert image_from_response(payload).data == sample_artifact.data

    def test_block_reason_is_refusal(self):
        """Test that a blocked prompt raises RefusedError."""
        payload = {"promptFeedback": {"blockReason": "SAFETY", "blockReasonMessage": "Unsafe."}}

        with pytest.raises(RefusedError, match="Request was blocked. Reason: SAFETY. Unsafe."):
            image_from_response(payload)

    def test_abnormal_finish_is_refusal(self):
        """Test that a non-STOP finish without an image raises RefusedError."""
        payload = {"candidates": [{"content": {"parts": []}, "finishReason": "IMAGE_SAFETY"}]}

        with pytest.raises(RefusedError, match="IMAGE_SAFETY"):
            image_from_response(payload)

    def test_text_only_is_empty_result(self):
        """Test that a text-only answer raises EmptyResultError carrying the text."""
        with pytest.raises(EmptyResultError) as excinfo:
            image_from_response(text_response("I cannot edit this image."))

        assert excinfo.value.text == "I cannot edit this image."
        assert "I cannot edit this image." in str(excinfo.value)

    def test_empty_payload_is_empty_result(self):
        """Test that an empty response raises EmptyResultError."""
        with pytest.raises(EmptyResultError):
            image_from_response({})


class TestJsonFromResponse:
    """Test json_from_response."""

    def test_parses_json_text(self):
        """Test that JSON text is decoded."""
        assert json_from_response(text_response('{"prompt": "a cat"}'), "analysis") == {"prompt": "a cat"}

    def test_invalid_json_raises(self):
        """Test that non-JSON text raises MalformedResponseError."""
        with pytest.raises(MalformedResponseError, match="invalid format"):
            json_from_response(text_response("not json"), "analysis")


class TestGeminiImageModel:
    """Test GeminiImageModel requests."""

    def test_init_without_api_key_raises(self):
        """Test that initialization without API key raises ValueError."""
        with pytest.raises(ValueError, match="Gemini API key is required"):
            GeminiImageModel(api_key="")

    def test_implements_interface(self, gemini):
        """Test GeminiImageModel implements the ImageModel interface."""
        assert isinstance(gemini, ImageModel)
        assert gemini.model_name == "gemini-2.5-flash-image-preview"

    @pytest.mark.asyncio
    @respx.mock
    async def test_transform_image_request(self, gemini, gemini_image_response, sample_artifact, make_artifact):
        """Test the parts and headers of an edit request."""
        route = respx.post(EDIT_URL).mock(return_value=Response(200, json=gemini_image_response))
        mask = make_artifact(filename="mask.png")

        result = await gemini.transform_image(
            sample_artifact, "Edit it", hotspot=Point(x=1, y=2), mask=mask
        )

        assert result.data == sample_artifact.data
        request = route.calls.last.request
        assert request.headers["x-goog-api-key"] == "test-key"
        parts = json.loads(request.content)["contents"][0]["parts"]
        assert len(parts) == 3
        assert parts[1]["inlineData"]["data"] == mask.to_base64()
        assert parts[2] == {"text": "Edit it"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_transform_image_http_error(self, gemini, sample_artifact):
        """Test that HTTP failures propagate as httpx errors."""
        respx.post(EDIT_URL).mock(return_value=Response(500, json={"error": "boom"}))

        with pytest.raises(httpx.HTTPStatusError):
            await gemini.transform_image(sample_artifact, "Edit it")

    @pytest.mark.asyncio
    @respx.mock
    async def test_generate_image(self, gemini, sample_artifact):
        """Test text-to-image through the predict endpoint."""
        route = respx.post(IMAGEN_URL).mock(
            return_value=Response(
                200, json={"predictions": [{"bytesBase64Encoded": sample_artifact.to_base64()}]}
            )
        )

        artifact = await gemini.generate_image("a lighthouse")

        assert artifact.data == sample_artifact.data
        assert artifact.filename == "generated.png"
        body = json.loads(route.calls.last.request.content)
        assert body["instances"] == [{"prompt": "a lighthouse"}]

    @pytest.mark.asyncio
    @respx.mock
    async def test_generate_image_without_predictions(self, gemini):
        """Test that a missing image raises EmptyResultError."""
        respx.post(IMAGEN_URL).mock(return_value=Response(200, json={}))

        with pytest.raises(EmptyResultError):
            await gemini.generate_image("a lighthouse")

    @pytest.mark.asyncio
    @respx.mock
    async def test_analyze_image_sends_schema(self, gemini, sample_artifact):
        """Test that analysis asks for JSON with the given schema."""
        route = respx.post(TEXT_URL).mock(
            return_value=Response(200, json=text_response('{"prompt": "a red square"}'))
        )
        schema = {"type": "OBJECT"}

        result = await gemini.analyze_image(sample_artifact, "Describe it", schema)

        assert result == {"prompt": "a red square"}
        config = json.loads(route.calls.last.request.content)["generationConfig"]
        assert config == {"responseMimeType": "application/json", "responseSchema": schema}

    @pytest.mark.asyncio
    @respx.mock
    async def test_translate(self, gemini):
        """Test that translations come back as a mapping."""
        respx.post(TEXT_URL).mock(
            return_value=Response(200, json=text_response('{"undo": "Deshacer"}'))
        )

        assert await gemini.translate({"undo": "Undo"}, "es") == {"undo": "Deshacer"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_translate_rejects_non_object(self, gemini):
        """Test that a JSON list is not accepted as a translation."""
        respx.post(TEXT_URL).mock(return_value=Response(200, json=text_response('["Deshacer"]')))

        with pytest.raises(MalformedResponseError):
            await gemini.translate({"undo": "Undo"}, "es")

    @pytest.mark.asyncio
    @respx.mock
    async def test_custom_base_url(self, sample_artifact):
        """Test that a custom base URL is used for requests."""
        payload = base64.b64encode(sample_artifact.data).decode()
        route = respx.post("https://proxy.example.com/v1/models/gemini-2.5-flash-image-preview:generateContent").mock(
            return_value=Response(
                200,
                json={"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "image/png", "data": payload}}]}}]},
            )
        )
        model = GeminiImageModel(api_key="test-key", base_url="https://proxy.example.com/v1/")

        await model.transform_image(sample_artifact, "Edit it")

        assert route.called


class TestModelFactory:
    """Test create_image_model factory function."""

    def test_create_gemini_model(self):
        """Test creating the Gemini model with overrides."""
        model = create_image_model(provider_type="gemini", api_key="test-key", edit_model="custom-edit")

        assert isinstance(model, GeminiImageModel)
        assert model.edit_model == "custom-edit"
        assert model.text_model == "gemini-2.5-flash"

    def test_create_unknown_provider_raises(self):
        """Test that unknown provider type raises ValueError."""
        with pytest.raises(ValueError, match="Unknown model provider"):
            create_image_model(provider_type="unknown", api_key="test-key")

    def test_missing_api_key_raises(self):
        """Test that the factory refuses to build a client without a key."""
        with pytest.raises(ValueError, match="API key is required"):
            create_image_model(provider_type="gemini", api_key="")
