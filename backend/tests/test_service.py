"""
Format converter tests.

    pytest backend/tests/test_service.py -v
"""
import asyncio
import io

import pytest
from PIL import Image

from conftest import CORRUPT_JPEG, make_jpeg
from imgconvert.conversion import ConversionService, TargetFormat, UploadedImage
from imgconvert.errors import ConversionError, UnsupportedFormatError, ValidationError


@pytest.fixture
def service():
    return ConversionService()


class TestTargetFormat:

    @pytest.mark.parametrize("value", ["png", "webp", "gif", "tiff"])
    def test_parse_accepts_exact_values(self, value):
        assert TargetFormat.parse(value).value == value

    @pytest.mark.parametrize("value", ["PNG", " png ", "Webp", "tiff\n"])
    def test_parse_is_case_and_whitespace_sensitive(self, value):
        with pytest.raises(UnsupportedFormatError):
            TargetFormat.parse(value)

    @pytest.mark.parametrize("value", [None, "", "jpeg", "bmp", "png;"])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(UnsupportedFormatError):
            TargetFormat.parse(value)

    def test_unsupported_format_is_validation_error(self):
        assert issubclass(UnsupportedFormatError, ValidationError)

    def test_content_types(self):
        assert TargetFormat.PNG.content_type == "image/png"
        assert TargetFormat.WEBP.content_type == "image/webp"
        assert TargetFormat.GIF.content_type == "image/gif"
        assert TargetFormat.TIFF.content_type == "image/tiff"

    @pytest.mark.parametrize(
        "original,expected",
        [
            ("photo.jpg", "photo.webp"),
            ("holiday.2024.jpeg", "holiday.2024.webp"),
            ("noext", "noext.webp"),
            ("", "image.webp"),
        ],
    )
    def test_output_filename(self, original, expected):
        assert TargetFormat.WEBP.output_filename(original) == expected

    def test_lossy_formats_use_fixed_quality(self):
        assert TargetFormat.WEBP.save_kwargs()["quality"] == 80
        assert TargetFormat.TIFF.save_kwargs()["quality"] == 80
        assert "quality" not in TargetFormat.PNG.save_kwargs()
        assert "quality" not in TargetFormat.GIF.save_kwargs()


class TestConvert:

    @pytest.mark.parametrize("fmt", list(TargetFormat))
    def test_output_decodes_with_same_dimensions(self, service, fmt):
        src = make_jpeg(120, 80)
        out = service.convert(src, fmt)
        with Image.open(io.BytesIO(out)) as img:
            assert img.format == fmt.name
            assert img.size == (120, 80)

    def test_accepts_format_string(self, service, jpeg_bytes):
        out = service.convert(jpeg_bytes, "png")
        assert out.startswith(b"\x89PNG")

    def test_unsupported_format_fails_before_decoding(self, service):
        # Garbage input would be a ConversionError if decoding were attempted.
        with pytest.raises(UnsupportedFormatError):
            service.convert(b"garbage", "bmp")

    def test_corrupt_input_raises_conversion_error(self, service):
        with pytest.raises(ConversionError):
            service.convert(CORRUPT_JPEG, TargetFormat.PNG)

    def test_truncated_jpeg_raises_conversion_error(self, service):
        data = make_jpeg(64, 64)
        with pytest.raises(ConversionError):
            service.convert(data[: len(data) // 3], TargetFormat.PNG)

    def test_cmyk_jpeg_converts(self, service):
        out = service.convert(make_jpeg(32, 32, mode="CMYK"), TargetFormat.PNG)
        with Image.open(io.BytesIO(out)) as img:
            assert img.mode == "RGB"
            assert img.size == (32, 32)

    def test_grayscale_jpeg_converts(self, service):
        out = service.convert(make_jpeg(16, 24, mode="L", color=128), TargetFormat.WEBP)
        with Image.open(io.BytesIO(out)) as img:
            assert img.size == (16, 24)


class TestConvertUpload:

    def test_success_result(self, service, jpeg_bytes):
        upload = UploadedImage("photo.jpg", "image/jpeg", jpeg_bytes)
        result = asyncio.run(service.convert_upload(upload, TargetFormat.GIF))
        assert result.ok
        assert result.output_filename == "photo.gif"
        assert result.data.startswith(b"GIF8")

    def test_failure_is_returned_not_raised(self, service):
        upload = UploadedImage("b.jpg", "image/jpeg", CORRUPT_JPEG)
        result = asyncio.run(service.convert_upload(upload, TargetFormat.PNG))
        assert not result.ok
        assert result.data is None
        assert result.error
