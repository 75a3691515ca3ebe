"""
Input resolver: turns a decode input string into raw image bytes.

Classification order (first match wins):

1. ``data:<mime>;base64,<payload>`` -> data URL
2. strict base64 whose decoded bytes start with an image signature -> base64
3. anything else -> file path

The signature check in step 2 keeps short file names that happen to be
valid base64 (``test.png`` is not, ``abcd`` is) on the file path branch.
"""

import base64
import binascii
import re

import structlog

from barcode_bridge.errors import InputError, InputErrorReason
from barcode_bridge.models.inputs import Base64Payload, DataUrlPayload, DecodeInput, FilePath

logger = structlog.get_logger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[^;,]*)*?;base64,", re.I)

# Leading bytes of the image formats Pillow reads
IMAGE_SIGNATURES: tuple[bytes, ...] = (
    b"\xff\xd8\xff",  # JPEG
    b"\x89PNG\r\n\x1a\n",
    b"GIF87a",
    b"GIF89a",
    b"BM",
    b"II*\x00",  # TIFF little endian
    b"MM\x00*",  # TIFF big endian
)


def has_image_signature(data: bytes) -> bool:
    """Check whether bytes start with a known image file signature."""
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return True
    return data.startswith(IMAGE_SIGNATURES)


def _strict_b64decode(value: str) -> bytes | None:
    """Decode standard or URL-safe base64, or None if the string is not base64."""
    compact = "".join(value.split())
    if not compact or len(compact) % 4 == 1:
        return None
    padded = compact + "=" * (-len(compact) % 4)
    altchars = b"-_" if ("-" in padded or "_" in padded) else None
    try:
        return base64.b64decode(padded, altchars=altchars, validate=True)
    except (binascii.Error, ValueError):
        return None


def classify(value: str) -> DecodeInput:
    """
    Classify a decode input string.

    Never raises for a string; reading and payload validation happen in
    ``read_input``.
    """
    match = DATA_URL_PATTERN.match(value)
    if match:
        return DataUrlPayload(mime_type=match.group("mime").lower(), payload=value[match.end() :])

    decoded = _strict_b64decode(value)
    if decoded is not None and has_image_signature(decoded):
        return Base64Payload(data=decoded)

    return FilePath(path=value)


def read_input(source: DecodeInput, max_bytes: int | None = None) -> bytes:
    """
    Obtain the image bytes behind a classified input.

    Raises:
        InputError: If the file cannot be read or the payload is not an image
    """
    if isinstance(source, Base64Payload):
        data = source.data
    elif isinstance(source, DataUrlPayload):
        data = _strict_b64decode(source.payload)
        if data is None:
            raise InputError(
                InputErrorReason.MALFORMED_PAYLOAD,
                f"Data URL payload ({source.mime_type}) is not valid base64",
            )
    else:
        data = _read_file(source.path, max_bytes)

    if max_bytes is not None and len(data) > max_bytes:
        raise InputError(
            InputErrorReason.TOO_LARGE,
            f"Image is {len(data)} bytes, limit is {max_bytes}",
        )

    if not has_image_signature(data):
        raise InputError(
            InputErrorReason.UNRECOGNIZED_IMAGE,
            f"Input from {source.kind} is not a recognized image",
        )

    return data


def resolve(value: str, max_bytes: int | None = None) -> bytes:
    """
    Classify a decode input and return its raw image bytes.

    Args:
        value: File path, raw base64 image, or data URL
        max_bytes: Optional upper bound on the image size

    Returns:
        Encoded image bytes (JPEG, PNG, ...)

    Raises:
        InputError: If the input cannot be classified or read
    """
    if not isinstance(value, str):
        raise InputError(
            InputErrorReason.EMPTY_INPUT,
            f"Decode input must be a string, got {type(value).__name__}",
        )
    if not value.strip():
        raise InputError(InputErrorReason.EMPTY_INPUT, "Decode input is empty")

    source = classify(value)
    logger.debug("Classified decode input", kind=source.kind)
    return read_input(source, max_bytes)


def _read_file(path: str, max_bytes: int | None) -> bytes:
    try:
        with open(path, "rb") as f:
            # Read one byte past the limit so oversize files are detected without loading them
            return f.read() if max_bytes is None else f.read(max_bytes + 1)
    except FileNotFoundError as e:
        raise InputError(InputErrorReason.FILE_NOT_FOUND, f"File not found: {path}") from e
    except (OSError, ValueError) as e:
        # ValueError covers paths with embedded NUL characters
        raise InputError(InputErrorReason.UNREADABLE, f"Cannot read {path}: {e}") from e
