"""
Shared fixtures.

Images are generated with Pillow on the fly so the tests need no binary assets.
"""
import io

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imgconvert.main import app


def make_jpeg(width: int = 100, height: int = 100, mode: str = "RGB", color=(200, 40, 40)) -> bytes:
    """Encode a solid-colour JPEG of the given size."""
    if mode == "CMYK":
        color = (0, 200, 200, 0)
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=90)
    return buf.getvalue()


CORRUPT_JPEG = b"\xff\xd8\xff\xe0 definitely not a jpeg body"


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def async_client():
    """httpx client talking to the app in-process, for the orchestrator tests."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
