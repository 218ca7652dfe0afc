"""Tests for geometry helpers.

Tests data URL decoding and display-to-natural coordinate scaling.
"""

import base64

import pytest

from pixshop.errors import MalformedDataUrlError
from pixshop.raster import Point, Rect, Size, artifact_from_data_url, decode_data_url, scale_point, scale_rect


class TestDecodeDataUrl:
    """Test decode_data_url function."""

    def test_decodes_mime_and_bytes(self):
        """Test decoding a well-formed data URL."""
        payload = base64.b64encode(b"pixels").decode()

        mime_type, data = decode_data_url(f"data:image/jpeg;base64,{payload}")

        assert mime_type == "image/jpeg"
        assert data == b"pixels"

    def test_missing_comma_raises(self):
        """Test that a data URL without a comma is rejected."""
        with pytest.raises(MalformedDataUrlError, match="Invalid data URL"):
            decode_data_url("data:image/png;base64")

    def test_missing_mime_raises(self):
        """Test that a data URL without a MIME type is rejected."""
        with pytest.raises(MalformedDataUrlError, match="MIME type"):
            decode_data_url("data:base64,AAAA")

    def test_invalid_base64_raises(self):
        """Test that a corrupt payload is rejected rather than decoded."""
        with pytest.raises(MalformedDataUrlError):
            decode_data_url("data:image/png;base64,***")

    def test_error_is_value_error(self):
        """Test that data URL errors are also ValueErrors."""
        with pytest.raises(ValueError):
            decode_data_url("not a data url")

    def test_artifact_from_data_url(self, sample_artifact):
        """Test round-tripping an artifact through its data URL."""
        artifact = artifact_from_data_url(sample_artifact.to_data_url(), "copy.png")

        assert artifact.data == sample_artifact.data
        assert artifact.filename == "copy.png"
        assert artifact.mime_type == "image/png"


class TestScalePoint:
    """Test scale_point function."""

    @pytest.mark.parametrize("size", [Size(width=1, height=1), Size(width=640, height=480)])
    def test_identity_when_sizes_equal(self, size):
        """Test that equal sizes leave the point unchanged."""
        point = Point(x=12.3, y=45.6)

        assert scale_point(point, size, size) == point

    def test_origin_is_fixed(self):
        """Test that the origin maps to the origin for any sizes."""
        scaled = scale_point(Point(x=0, y=0), Size(width=300, height=200), Size(width=1200, height=900))

        assert scaled == Point(x=0, y=0)

    def test_scales_each_axis(self):
        """Test non-uniform scaling of both components."""
        scaled = scale_point(Point(x=50, y=20), Size(width=100, height=100), Size(width=400, height=300))

        assert scaled == Point(x=200, y=60)

    def test_rounds_half_up(self):
        """Test that halfway values round up to the next pixel."""
        scaled = scale_point(Point(x=1, y=3), Size(width=2, height=2), Size(width=5, height=5))

        assert scaled == Point(x=3, y=8)


class TestScaleRect:
    """Test scale_rect function."""

    def test_maps_both_corners(self):
        """Test mapping a rectangle to a natural-space box."""
        box = scale_rect(
            Rect(x=10, y=10, width=20, height=30),
            Size(width=100, height=100),
            Size(width=200, height=200),
        )

        assert box == (20, 20, 60, 80)

    def test_clamps_to_image_bounds(self):
        """Test that a rectangle hanging off the image is clamped."""
        box = scale_rect(
            Rect(x=-5, y=90, width=50, height=50),
            Size(width=100, height=100),
            Size(width=100, height=100),
        )

        assert box == (0, 90, 45, 100)
