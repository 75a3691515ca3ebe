"""
Public decode/encode operations.
"""

from collections.abc import Mapping
from typing import Any

import structlog

from barcode_bridge.barcode import (
    generate,
    normalize_decode_options,
    normalize_encode_options,
    project,
    recognize,
    resolve,
)
from barcode_bridge.config import Settings, get_settings
from barcode_bridge.models import DecodeOptions, DecodeResult, EncodeOptions
from barcode_bridge.storage import emit

logger = structlog.get_logger(__name__)


def decode(
    input: str,
    options: Mapping[str, Any] | DecodeOptions | None = None,
    settings: Settings | None = None,
) -> DecodeResult | list[DecodeResult] | None:
    """
    Decode barcodes from an image.

    Args:
        input: Path to an image file, raw base64 of an image, or a
            ``data:<mime>;base64,<payload>`` URL
        options: ``tryHarder``, ``formats``, ``multi``, ``alsoInverted``,
            ``returnCodabarStartEnd``, ``allowedLengths``,
            ``assumeCode39CheckDigit`` and ``characterSet``
        settings: Overrides the environment configuration

    Returns:
        With ``multi`` off, the first symbol found or None.
        With ``multi`` on, a list of every symbol found (possibly empty).

    Raises:
        InputError: If the input cannot be classified or read, or is not a recognizable image
        OptionsError: If an option is invalid
        RecognitionError: If the image pixels cannot be processed
    """
    settings = settings or get_settings()
    image_data = resolve(input, max_bytes=settings.max_input_bytes)
    decode_options = normalize_decode_options(options)

    results = recognize(image_data, decode_options)
    logger.info(
        "Decoded image",
        found=len(results),
        formats=sorted({r.format.value for r in results}),
        multi=decode_options.multi,
    )
    return project(results, decode_options.multi)


def encode(
    data: str,
    options: Mapping[str, Any] | EncodeOptions | None = None,
    settings: Settings | None = None,
) -> bytes:
    """
    Encode text as a barcode image.

    Args:
        data: Text to encode
        options: ``format``, ``width``, ``height``, ``margin``, ``outputFile``,
            ``imageFormat`` plus the QR options ``errorCorrection``,
            ``qrVersion``, ``qrMaskPattern`` and ``characterSet``, the PDF417
            options ``pdf417Columns`` and ``pdf417SecurityLevel``, and
            ``gs1Format`` for CODE_128
        settings: Overrides the environment configuration

    Returns:
        The encoded image bytes, also written to ``outputFile`` when set

    Raises:
        OptionsError: If an option is invalid
        GenerationError: If the text cannot be encoded or the symbol does not fit the requested size
        IoError: If the output file cannot be written
    """
    settings = settings or get_settings()
    encode_options = normalize_encode_options(options, settings)

    image_data = generate(data, encode_options, jpeg_quality=settings.jpeg_quality)
    logger.info(
        "Encoded barcode",
        format=encode_options.format.value,
        image_format=encode_options.image_format.value if encode_options.image_format else None,
        size_bytes=len(image_data),
        output_file=encode_options.output_file,
    )
    return emit(image_data, encode_options.output_file)
