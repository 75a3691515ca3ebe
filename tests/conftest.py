"""
Shared fixtures: images built with the real generators.
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from barcode_bridge import encode
from barcode_bridge.config import Settings


def to_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults, isolated from the environment's .env files."""
    return Settings(_env_file=None)


@pytest.fixture
def qr_png(settings) -> bytes:
    """PNG with a QR code holding "hello, world"."""
    return encode("hello, world", {"imageFormat": "PNG"}, settings=settings)


@pytest.fixture
def qr_base64(qr_png) -> str:
    return base64.b64encode(qr_png).decode("ascii")


@pytest.fixture
def qr_file(tmp_path, qr_png) -> str:
    path = tmp_path / "qrcode.png"
    path.write_bytes(qr_png)
    return str(path)


@pytest.fixture
def blank_png() -> bytes:
    """A white image with no barcode in it."""
    return to_png(Image.new("L", (240, 240), 255))


@pytest.fixture
def two_qr_png(settings) -> bytes:
    """Two different QR codes side by side on one canvas."""
    left = Image.open(BytesIO(encode("left code", {"imageFormat": "PNG"}, settings=settings)))
    right = Image.open(BytesIO(encode("right code", {"imageFormat": "PNG"}, settings=settings)))

    canvas = Image.new("L", (left.width + right.width + 40, max(left.height, right.height)), 255)
    canvas.paste(left.convert("L"), (0, 0))
    canvas.paste(right.convert("L"), (left.width + 40, 0))
    return to_png(canvas)
