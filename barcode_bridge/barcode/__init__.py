"""
Barcode decoding and encoding pipeline components.
"""

from barcode_bridge.barcode.decoder import BarcodeDecoder
from barcode_bridge.barcode.engine import generate, recognize
from barcode_bridge.barcode.generator import BarcodeGenerator
from barcode_bridge.barcode.normalizer import (
    normalize_decode_options,
    normalize_encode_options,
)
from barcode_bridge.barcode.projector import project
from barcode_bridge.barcode.resolver import classify, resolve
from barcode_bridge.barcode.validator import (
    calculate_gs1_check_digit,
    validate_gs1_check_digit,
    validate_payload,
)

__all__ = [
    "BarcodeDecoder",
    "BarcodeGenerator",
    "calculate_gs1_check_digit",
    "classify",
    "generate",
    "normalize_decode_options",
    "normalize_encode_options",
    "project",
    "recognize",
    "resolve",
    "validate_gs1_check_digit",
    "validate_payload",
]
