"""
Barcode symbologies and output image formats.
"""

import re
from enum import Enum


class BarcodeFormat(str, Enum):
    """Barcode symbologies known to the engines."""

    AZTEC = "AZTEC"
    CODABAR = "CODABAR"
    CODE_39 = "CODE_39"
    CODE_93 = "CODE_93"
    CODE_128 = "CODE_128"
    DATA_MATRIX = "DATA_MATRIX"
    EAN_8 = "EAN_8"
    EAN_13 = "EAN_13"
    ITF = "ITF"
    MAXICODE = "MAXICODE"
    PDF_417 = "PDF_417"
    QR_CODE = "QR_CODE"
    RSS_14 = "RSS_14"
    RSS_EXPANDED = "RSS_EXPANDED"
    UPC_A = "UPC_A"
    UPC_E = "UPC_E"
    UPC_EAN_EXTENSION = "UPC_EAN_EXTENSION"

    @classmethod
    def parse(cls, value: "str | BarcodeFormat") -> "BarcodeFormat":
        """
        Resolve a format name leniently.

        Accepts the canonical name (``QR_CODE``), any casing or separator
        variant (``qr-code``, ``QrCode``) and the ZBar symbol names
        (``QRCODE``, ``I25``, ``DATABAR``).

        Raises:
            ValueError: If the name matches no format
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Format name must be a string, got {type(value).__name__}")

        key = _squash(value)
        if key in _ALIASES:
            return _ALIASES[key]
        for member in cls:
            if _squash(member.value) == key:
                return member
        raise ValueError(f"Unknown barcode format: {value!r}")


class ImageFormat(str, Enum):
    """Encoded image formats Pillow can write."""

    JPEG = "JPEG"
    PNG = "PNG"
    BMP = "BMP"
    GIF = "GIF"
    TIFF = "TIFF"
    WEBP = "WEBP"

    @classmethod
    def parse(cls, value: "str | ImageFormat") -> "ImageFormat":
        """Resolve an image format name (``jpg`` and ``tif`` included)."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Image format must be a string, got {type(value).__name__}")
        key = value.strip().upper().lstrip(".")
        key = {"JPG": "JPEG", "TIF": "TIFF"}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown image format: {value!r}") from None

    @property
    def mime_type(self) -> str:
        return f"image/{self.value.lower()}"


def _squash(name: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", name.upper())


# ZBar symbol names and other common spellings
_ALIASES = {
    "QR": BarcodeFormat.QR_CODE,
    "I25": BarcodeFormat.ITF,
    "INTERLEAVED2OF5": BarcodeFormat.ITF,
    "DATABAR": BarcodeFormat.RSS_14,
    "DATABAREXP": BarcodeFormat.RSS_EXPANDED,
    "DATABAREXPANDED": BarcodeFormat.RSS_EXPANDED,
    "PDF417": BarcodeFormat.PDF_417,
    "EAN2": BarcodeFormat.UPC_EAN_EXTENSION,
    "EAN5": BarcodeFormat.UPC_EAN_EXTENSION,
}

# ZBar locates the linear symbologies, PDF_417 and QR_CODE; zxing-cpp the other 2D formats and RSS_EXPANDED
DECODABLE_FORMATS = frozenset(BarcodeFormat)

# Add-on symbols are only printed next to an EAN or UPC symbol
ENCODABLE_FORMATS = frozenset(BarcodeFormat) - {BarcodeFormat.UPC_EAN_EXTENSION}
