"""Unit tests for image encoding helpers."""
import base64
import io

import pytest
from hypothesis import given
from hypothesis import strategies as st
from PIL import Image

from bananachat.images import (
    DEFAULT_MIME_TYPE,
    MAX_IMAGE_BYTES,
    decode_image,
    encode_image_file,
    image_extension,
    sniff_mime_type,
    strip_data_uri,
    to_data_uri,
)


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _pil_b64(image_format: str) -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2), (0, 255, 0)).save(buffer, format=image_format)
    return _b64(buffer.getvalue())


class TestDataUri:
    """Tests for data URI prefix handling."""

    def test_strip_prefix(self):
        assert strip_data_uri("data:image/png;base64,AAAA") == "AAAA"

    def test_plain_payload_unchanged(self):
        assert strip_data_uri("AAAA") == "AAAA"

    def test_to_data_uri_sniffs_type(self, png_b64):
        """Test that the prefix is rebuilt from the payload."""
        assert to_data_uri(png_b64) == f"data:image/png;base64,{png_b64}"

    def test_to_data_uri_explicit_type(self):
        assert to_data_uri("AAAA", "image/webp") == "data:image/webp;base64,AAAA"

    @given(st.binary(min_size=1, max_size=64))
    def test_prefix_is_stripped_once(self, raw):
        """Property test: stripping a rebuilt URI returns the payload."""
        payload = _b64(raw)
        assert strip_data_uri(to_data_uri(payload)) == payload


class TestSniffMimeType:
    """Tests for media type detection."""

    def test_png(self, png_b64):
        assert sniff_mime_type(png_b64) == "image/png"

    def test_jpeg(self, jpeg_b64):
        assert sniff_mime_type(jpeg_b64) == "image/jpeg"

    @pytest.mark.parametrize("image_format,expected", [
        ("GIF", "image/gif"),
        ("BMP", "image/bmp"),
        ("TIFF", "image/tiff"),
    ])
    def test_other_formats(self, image_format, expected):
        assert sniff_mime_type(_pil_b64(image_format)) == expected

    def test_tiff_file(self, tmp_path):
        """Test that a TIFF read from disk is not labelled as JPEG."""
        path = tmp_path / "scan.tiff"
        Image.new("RGB", (2, 2), (0, 0, 255)).save(path, format="TIFF")
        assert sniff_mime_type(encode_image_file(path)) == "image/tiff"

    def test_with_data_uri_prefix(self, png_b64):
        assert sniff_mime_type(f"data:image/png;base64,{png_b64}") == "image/png"

    def test_unknown_defaults_to_jpeg(self):
        """Test that unrecognised payloads fall back to JPEG."""
        assert sniff_mime_type(_b64(b"plain text here")) == DEFAULT_MIME_TYPE

    def test_truncated_header_defaults_to_jpeg(self):
        assert sniff_mime_type(_b64(b"\x89PNG")) == DEFAULT_MIME_TYPE

    def test_invalid_base64_defaults_to_jpeg(self):
        assert sniff_mime_type("not base64!!") == DEFAULT_MIME_TYPE


class TestDecodeImage:
    """Tests for decode_image."""

    def test_decodes_with_prefix(self, png_b64):
        raw = decode_image(f"data:image/png;base64,{png_b64}")
        assert raw.startswith(b"\x89PNG")

    def test_invalid_base64_fails(self):
        with pytest.raises(ValueError, match="Invalid base64"):
            decode_image("not base64!!")


class TestEncodeImageFile:
    """Tests for encode_image_file."""

    def test_encodes_file(self, png_file, png_b64):
        assert encode_image_file(png_file) == png_b64

    def test_accepts_string_path(self, png_file, png_b64):
        assert encode_image_file(str(png_file)) == png_b64

    def test_missing_file_fails(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            encode_image_file(tmp_path / "missing.png")

    def test_non_image_fails(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(ValueError, match="Not an image"):
            encode_image_file(path)

    def test_oversized_file_fails(self, tmp_path):
        path = tmp_path / "huge.png"
        path.write_bytes(b"\x00" * (MAX_IMAGE_BYTES + 1))
        with pytest.raises(ValueError, match="too large"):
            encode_image_file(path)


class TestImageExtension:
    """Tests for image_extension."""

    def test_png(self, png_b64):
        assert image_extension(png_b64) == ".png"

    def test_jpeg(self, jpeg_b64):
        assert image_extension(jpeg_b64) == ".jpg"
