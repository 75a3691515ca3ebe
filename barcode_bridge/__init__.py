"""
barcode-bridge: decode barcodes from images and encode text as barcode images.

Usage:
    from barcode_bridge import decode, encode

    encode("hello, world", {"outputFile": "qrcode.png"})
    decode("qrcode.png").text  # "hello, world"
    decode("qrcode.png", {"multi": True})  # [DecodeResult(...)]
"""

from barcode_bridge.api import decode, encode
from barcode_bridge.errors import (
    BarcodeBridgeError,
    GenerationError,
    InputError,
    InputErrorReason,
    IoError,
    OptionsError,
    RecognitionError,
)
from barcode_bridge.models import (
    BarcodeFormat,
    DecodeOptions,
    DecodeResult,
    EncodeOptions,
    ImageFormat,
    Point,
)

__version__ = "0.1.0"

__all__ = [
    # Operations
    "decode",
    "encode",
    # Models
    "BarcodeFormat",
    "ImageFormat",
    "DecodeOptions",
    "EncodeOptions",
    "DecodeResult",
    "Point",
    # Errors
    "BarcodeBridgeError",
    "InputError",
    "InputErrorReason",
    "OptionsError",
    "RecognitionError",
    "GenerationError",
    "IoError",
]
