"""Conversion request/response models."""
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Optional

from imgconvert.config import TIFF_QUALITY, WEBP_QUALITY
from imgconvert.errors import UnsupportedFormatError


class TargetFormat(str, Enum):
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    TIFF = "tiff"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TargetFormat":
        """Resolve an exact form value ("png", not "PNG" or " png") to a member.

        Raises UnsupportedFormatError for anything else.
        """
        try:
            return cls(value or "")
        except ValueError:
            raise UnsupportedFormatError(value) from None

    @property
    def content_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return self.value

    def save_kwargs(self) -> dict:
        """Keyword arguments for PIL.Image.save."""
        if self is TargetFormat.WEBP:
            return {"format": "WEBP", "quality": WEBP_QUALITY}
        if self is TargetFormat.TIFF:
            return {"format": "TIFF", "compression": "jpeg", "quality": TIFF_QUALITY}
        return {"format": self.name}

    def output_filename(self, original: str) -> str:
        """photo.jpg -> photo.png"""
        stem = PurePath(original or "").stem or "image"
        return f"{stem}.{self.extension}"


@dataclass
class UploadedImage:
    """An uploaded file held in memory for the duration of one request."""

    filename: str
    content_type: Optional[str]
    data: bytes


@dataclass
class ConversionResult:
    filename: str
    output_filename: str
    data: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.data is not None
