"""Image format conversion service backed by Pillow."""
import asyncio
import io
import logging
from typing import Optional, Union

from PIL import Image

from imgconvert.conversion.models import ConversionResult, TargetFormat, UploadedImage
from imgconvert.errors import ConversionError

logger = logging.getLogger("converter.service")

# Modes every target encoder can write directly; anything else (CMYK, YCbCr, I;16...) goes to RGB.
_PASSTHROUGH_MODES = ("RGB", "RGBA", "L")


class ConversionService:
    """Re-encodes raster images into one of the supported target formats."""

    def convert(self, data: bytes, target: Union[TargetFormat, str]) -> bytes:
        """Convert image bytes to ``target``. Pure bytes in, bytes out.

        The target is validated before any decode is attempted, so an unknown
        format raises UnsupportedFormatError even for garbage input. Decoder
        and encoder failures are raised as ConversionError.
        """
        fmt = target if isinstance(target, TargetFormat) else TargetFormat.parse(target)
        out = io.BytesIO()
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                if img.mode not in _PASSTHROUGH_MODES:
                    work = img.convert("RGB")
                else:
                    work = img
                work.save(out, **fmt.save_kwargs())
        except Exception as e:
            raise ConversionError(f"Could not convert image to {fmt.value}: {e}") from e
        return out.getvalue()

    async def convert_upload(
        self,
        image: UploadedImage,
        target: TargetFormat,
    ) -> ConversionResult:
        """Convert one uploaded file off the event loop. Failures are logged and returned, not raised."""
        output_filename = target.output_filename(image.filename)
        try:
            data = await asyncio.to_thread(self.convert, image.data, target)
        except ConversionError as e:
            logger.exception("Failed to convert %s: %s", image.filename, e)
            return ConversionResult(image.filename, output_filename, error=str(e))
        logger.info("Converted %s -> %s (%d bytes)", image.filename, output_filename, len(data))
        return ConversionResult(image.filename, output_filename, data=data)


# Singleton
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService()
    return _conversion_service
