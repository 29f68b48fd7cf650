"""API routes for single-file conversion and zipped batch conversion."""
import asyncio
import logging
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response, StreamingResponse

from imgconvert.archive import ZipStreamWriter
from imgconvert.config import ZIP_FILENAME
from imgconvert.conversion.models import TargetFormat, UploadedImage
from imgconvert.conversion.service import get_conversion_service
from imgconvert.errors import ConversionError, UnsupportedFormatError, ValidationError

logger = logging.getLogger("converter.api")
router = APIRouter(tags=["converter"])


def _parse_target(value: Optional[str]) -> TargetFormat:
    try:
        return TargetFormat.parse(value)
    except UnsupportedFormatError:
        raise ValidationError("Invalid target format specified.") from None


async def _read_upload(file: UploadFile) -> UploadedImage:
    data = await file.read()
    return UploadedImage(filename=file.filename or "", content_type=file.content_type, data=data)


@router.post("/convert-single")
async def convert_single(
    image: Optional[UploadFile] = File(None),
    target_format: Optional[str] = Form(None, alias="format"),
):
    """Convert one uploaded image and return the converted bytes as the response body."""
    if image is None:
        raise ValidationError("No file uploaded.")
    target = _parse_target(target_format)
    upload = await _read_upload(image)

    svc = get_conversion_service()
    try:
        # Run in a worker thread; Pillow encoding is CPU bound.
        data = await asyncio.to_thread(svc.convert, upload.data, target)
    except ConversionError as e:
        logger.exception("Failed to convert %s: %s", upload.filename, e)
        raise HTTPException(500, "Failed to convert the image.")
    logger.info("Converted %s to %s (%d bytes)", upload.filename, target.value, len(data))
    return Response(content=data, media_type=target.content_type)


async def _zip_chunks(uploads: list[UploadedImage], target: TargetFormat) -> AsyncGenerator[bytes, None]:
    """Convert uploads one at a time, yielding archive bytes as each entry is added."""
    svc = get_conversion_service()
    writer = ZipStreamWriter()
    try:
        for upload in uploads:
            result = await svc.convert_upload(upload, target)
            if not result.ok:
                # Partial success: the rest of the batch continues.
                continue
            chunk = writer.add(result.output_filename, result.data)
            if chunk:
                yield chunk
        yield writer.finish()
    finally:
        writer.close()


async def _resume(first: bytes, chunks: AsyncGenerator[bytes, None]) -> AsyncGenerator[bytes, None]:
    yield first
    try:
        async for chunk in chunks:
            yield chunk
    except Exception as e:
        # Headers are already sent; the stream is aborted.
        logger.exception("Archive creation failed mid-stream: %s", e)
        raise
    finally:
        await chunks.aclose()


@router.post("/convert-and-zip")
async def convert_and_zip(
    images: Optional[list[UploadFile]] = File(None),
    target_format: Optional[str] = Form(None, alias="format"),
):
    """Convert every uploaded image and stream back a zip of those that succeeded."""
    if not images:
        raise ValidationError("No files were uploaded.")
    target = _parse_target(target_format)
    uploads = [await _read_upload(f) for f in images]
    logger.info("Batch of %d files to %s", len(uploads), target.value)

    # Produce the first chunk before committing headers, so an archive failure
    # at that point can still be answered with a 500.
    chunks = _zip_chunks(uploads, target)
    try:
        first = await chunks.__anext__()
    except Exception as e:
        logger.exception("Archive creation failed: %s", e)
        await chunks.aclose()
        raise HTTPException(500, "Failed to create the archive.")
    return StreamingResponse(
        _resume(first, chunks),
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename={ZIP_FILENAME}"},
    )
