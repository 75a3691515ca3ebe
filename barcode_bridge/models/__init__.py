"""
Pydantic models for options, results and classified inputs.
"""

from barcode_bridge.models.formats import (
    DECODABLE_FORMATS,
    ENCODABLE_FORMATS,
    BarcodeFormat,
    ImageFormat,
)
from barcode_bridge.models.inputs import (
    Base64Payload,
    DataUrlPayload,
    DecodeInput,
    FilePath,
)
from barcode_bridge.models.options import DecodeOptions, EncodeOptions
from barcode_bridge.models.result import DecodeResult, Point

__all__ = [
    # Formats
    "BarcodeFormat",
    "ImageFormat",
    "DECODABLE_FORMATS",
    "ENCODABLE_FORMATS",
    # Inputs
    "DecodeInput",
    "FilePath",
    "Base64Payload",
    "DataUrlPayload",
    # Options
    "DecodeOptions",
    "EncodeOptions",
    # Results
    "DecodeResult",
    "Point",
]
