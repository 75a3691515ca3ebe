"""
Barcode engine adapter.

The only place where pyzbar, zxing-cpp, qrcode, python-barcode and pdf417gen
are called. Their results come back as ``DecodeResult`` models and their
errors as taxonomy errors. Scanners and writers are created per call, so
calls are reentrant and need no lock.
"""

import time

import structlog

from barcode_bridge.barcode.decoder import BarcodeDecoder
from barcode_bridge.barcode.generator import BarcodeGenerator
from barcode_bridge.models.options import DecodeOptions, EncodeOptions
from barcode_bridge.models.result import DecodeResult

logger = structlog.get_logger(__name__)


def recognize(image_data: bytes, options: DecodeOptions) -> list[DecodeResult]:
    """
    Find barcodes in an encoded image.

    Results keep the order the engine reports them in. With ``multi`` off
    the search stops at the first hit, but the list may still hold several
    symbols found in the same pass.

    Raises:
        InputError: If the bytes are not a recognizable image
        RecognitionError: If the image pixels cannot be read or scanned
    """
    start_time = time.time()
    results = BarcodeDecoder.from_options(options).decode(image_data)
    duration_ms = int((time.time() - start_time) * 1000)

    logger.debug(
        "Recognition complete",
        found=len(results),
        multi=options.multi,
        try_harder=options.try_harder,
        duration_ms=duration_ms,
    )
    return results


def generate(text: str, options: EncodeOptions, jpeg_quality: int = 95) -> bytes:
    """
    Render text as an encoded image.

    Raises:
        GenerationError: If the text cannot be encoded with these options
    """
    image_data = BarcodeGenerator(jpeg_quality=jpeg_quality).generate(text, options)
    logger.debug(
        "Generation complete",
        format=options.format.value,
        image_format=options.image_format.value if options.image_format else None,
        size_bytes=len(image_data),
    )
    return image_data
