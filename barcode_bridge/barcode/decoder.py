"""
Barcode decoder using pyzbar (ZBar), with zxing-cpp for the symbologies
ZBar cannot locate.
"""

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from io import BytesIO

import numpy as np
import structlog
import zxingcpp
from PIL import Image, ImageOps
from pyzbar import pyzbar
from pyzbar.pyzbar import Decoded, ZBarSymbol
from pyzbar.pyzbar_error import PyZbarError

from barcode_bridge.barcode.validator import calculate_code39_check_char
from barcode_bridge.errors import InputError, InputErrorReason, RecognitionError
from barcode_bridge.models.formats import DECODABLE_FORMATS, BarcodeFormat
from barcode_bridge.models.options import DecodeOptions
from barcode_bridge.models.result import DecodeResult, Point

logger = structlog.get_logger(__name__)

PointMapper = Callable[[float, float], tuple[float, float]]

CODABAR_GUARDS = "ABCD"


def _identity(x: float, y: float) -> tuple[float, float]:
    return x, y


@dataclass(frozen=True)
class ScanVariant:
    """An image to scan plus the mapping of its coordinates back to the source."""

    name: str
    image: Image.Image
    to_source: PointMapper = _identity


class BarcodeDecoder:
    """
    Barcode decoder using ZBar via pyzbar, plus zxing-cpp for AZTEC,
    DATA_MATRIX, MAXICODE and RSS_EXPANDED.

    The base pass scans the grayscale image once. ``try_harder`` adds
    rotated, contrast-stretched, binarized and upscaled variants;
    ``also_inverted`` adds an inverted variant for light-on-dark symbols.
    Single mode stops at the first variant with a hit, multi mode scans
    them all.
    """

    # Map pyzbar symbol types to our formats
    SYMBOL_MAP = {
        "CODABAR": BarcodeFormat.CODABAR,
        "CODE39": BarcodeFormat.CODE_39,
        "CODE93": BarcodeFormat.CODE_93,
        "CODE128": BarcodeFormat.CODE_128,
        "EAN8": BarcodeFormat.EAN_8,
        "EAN13": BarcodeFormat.EAN_13,
        "ISBN10": BarcodeFormat.EAN_13,
        "ISBN13": BarcodeFormat.EAN_13,
        "I25": BarcodeFormat.ITF,
        "PDF417": BarcodeFormat.PDF_417,
        "QRCODE": BarcodeFormat.QR_CODE,
        "DATABAR": BarcodeFormat.RSS_14,
        "UPCA": BarcodeFormat.UPC_A,
        "UPCE": BarcodeFormat.UPC_E,
        "EAN2": BarcodeFormat.UPC_EAN_EXTENSION,
        "EAN5": BarcodeFormat.UPC_EAN_EXTENSION,
    }

    # Symbol types to enable per format
    FORMAT_SYMBOLS = {
        BarcodeFormat.CODABAR: [ZBarSymbol.CODABAR],
        BarcodeFormat.CODE_39: [ZBarSymbol.CODE39],
        BarcodeFormat.CODE_93: [ZBarSymbol.CODE93],
        BarcodeFormat.CODE_128: [ZBarSymbol.CODE128],
        BarcodeFormat.EAN_8: [ZBarSymbol.EAN8],
        BarcodeFormat.EAN_13: [ZBarSymbol.EAN13],
        BarcodeFormat.ITF: [ZBarSymbol.I25],
        BarcodeFormat.PDF_417: [ZBarSymbol.PDF417],
        BarcodeFormat.QR_CODE: [ZBarSymbol.QRCODE],
        BarcodeFormat.RSS_14: [ZBarSymbol.DATABAR],
        BarcodeFormat.UPC_A: [ZBarSymbol.UPCA],
        BarcodeFormat.UPC_E: [ZBarSymbol.UPCE],
        BarcodeFormat.UPC_EAN_EXTENSION: [ZBarSymbol.EAN2, ZBarSymbol.EAN5],
    }

    # Formats read by zxing-cpp
    ZXING_FORMATS = {
        BarcodeFormat.AZTEC: zxingcpp.BarcodeFormat.Aztec,
        BarcodeFormat.DATA_MATRIX: zxingcpp.BarcodeFormat.DataMatrix,
        BarcodeFormat.MAXICODE: zxingcpp.BarcodeFormat.MaxiCode,
        BarcodeFormat.RSS_EXPANDED: zxingcpp.BarcodeFormat.DataBarExpanded,
    }

    # zxing-cpp reports variants such as AztecCode; match them by name prefix
    ZXING_NAMES = (
        ("Aztec", BarcodeFormat.AZTEC),
        ("DataMatrix", BarcodeFormat.DATA_MATRIX),
        ("MaxiCode", BarcodeFormat.MAXICODE),
        ("DataBarExp", BarcodeFormat.RSS_EXPANDED),
    )

    ROTATIONS = (
        (90, Image.Transpose.ROTATE_90),
        (180, Image.Transpose.ROTATE_180),
        (270, Image.Transpose.ROTATE_270),
    )

    # Images smaller than this (longest side, px) get an upscaled variant
    UPSCALE_BELOW = 400

    def __init__(
        self,
        formats: frozenset[BarcodeFormat] = DECODABLE_FORMATS,
        try_harder: bool = False,
        also_inverted: bool = False,
        multi: bool = False,
        return_codabar_start_end: bool = False,
        allowed_lengths: frozenset[int] | None = None,
        assume_code39_check_digit: bool = False,
        character_set: str | None = None,
    ):
        """
        Initialize decoder.

        Args:
            formats: Formats to search for
            try_harder: Whether to scan transformed variants of the image
            also_inverted: Whether to scan the inverted image
            multi: Whether to collect every symbol instead of stopping at the first hit
            return_codabar_start_end: Whether to keep the A-D guards of CODABAR text
            allowed_lengths: Text lengths to report; others are dropped
            assume_code39_check_digit: Whether CODE_39 text ends in a mod-43 check
                character to verify and strip
            character_set: Codec for the payload bytes instead of UTF-8 with a Latin-1 fallback
        """
        self.formats = frozenset(formats)
        self.try_harder = try_harder
        self.also_inverted = also_inverted
        self.multi = multi
        self.return_codabar_start_end = return_codabar_start_end
        self.allowed_lengths = allowed_lengths
        self.assume_code39_check_digit = assume_code39_check_digit
        self.character_set = character_set

        self.symbols = sorted(
            {symbol for fmt in self.formats for symbol in self.FORMAT_SYMBOLS.get(fmt, ())},
            key=lambda s: s.value,
        )
        zxing_wanted = sorted(self.formats & self.ZXING_FORMATS.keys(), key=lambda f: f.value)
        self.zxing_formats = [self.ZXING_FORMATS[fmt] for fmt in zxing_wanted]

    @classmethod
    def from_options(cls, options: DecodeOptions) -> "BarcodeDecoder":
        return cls(
            formats=options.formats,
            try_harder=options.try_harder,
            also_inverted=options.also_inverted,
            multi=options.multi,
            return_codabar_start_end=options.return_codabar_start_end,
            allowed_lengths=options.allowed_lengths,
            assume_code39_check_digit=options.assume_code39_check_digit,
            character_set=options.character_set,
        )

    def decode(
        self,
        image_data: bytes | BytesIO | np.ndarray | Image.Image,
    ) -> list[DecodeResult]:
        """
        Decode barcodes from an image.

        Args:
            image_data: Image as bytes, BytesIO, numpy array, or PIL Image

        Returns:
            Detected symbols in engine order; empty when nothing was found

        Raises:
            InputError: If the bytes are not an image Pillow can identify
            RecognitionError: If the image pixels cannot be read or scanned
        """
        gray = self._to_grayscale(image_data)

        results: list[DecodeResult] = []
        seen: set[tuple[BarcodeFormat, str]] = set()

        for variant in self._variants(gray):
            found = self._decode_image(variant)
            new = [r for r in found if (r.format, r.text) not in seen]
            seen.update((r.format, r.text) for r in new)
            results.extend(new)

            logger.debug("Scanned variant", variant=variant.name, found=len(found), new=len(new))
            if results and not self.multi:
                break

        return results

    def _to_grayscale(
        self,
        image_data: bytes | BytesIO | np.ndarray | Image.Image,
    ) -> Image.Image:
        """Convert supported inputs to a loaded grayscale PIL Image."""
        if isinstance(image_data, (bytes, bytearray, BytesIO)):
            return self._open(image_data if isinstance(image_data, BytesIO) else BytesIO(image_data))

        try:
            if isinstance(image_data, Image.Image):
                return image_data.convert("L")
            elif isinstance(image_data, np.ndarray):
                return Image.fromarray(image_data).convert("L")
        except (OSError, ValueError) as e:
            raise RecognitionError(f"Cannot read image pixels: {e}") from e
        raise TypeError(f"Unsupported image type: {type(image_data)}")

    def _open(self, stream: BytesIO) -> Image.Image:
        # Header problems are bad input; pixel data problems are recognition failures
        try:
            image = Image.open(stream)
        except Image.DecompressionBombError as e:
            raise InputError(InputErrorReason.TOO_LARGE, f"Image is too large: {e}") from e
        except (OSError, SyntaxError, ValueError) as e:
            logger.debug("Image header not recognized", error=str(e))
            raise InputError(InputErrorReason.UNRECOGNIZED_IMAGE, f"Not a readable image: {e}") from e

        with image:
            try:
                image.load()
                return image.convert("L")
            except (OSError, ValueError) as e:
                logger.debug("Image could not be read", error=str(e))
                raise RecognitionError(f"Cannot read image pixels: {e}") from e

    def _variants(self, gray: Image.Image) -> Iterator[ScanVariant]:
        """Yield the images to scan, cheapest first."""
        yield ScanVariant("original", gray)
        if self.also_inverted:
            yield ScanVariant("inverted", ImageOps.invert(gray))
        if not self.try_harder:
            return

        width, height = gray.size
        for angle, transpose in self.ROTATIONS:
            yield ScanVariant(f"rotate_{angle}", gray.transpose(transpose), _unrotate(angle, width, height))

        yield ScanVariant("autocontrast", ImageOps.autocontrast(gray, cutoff=2))
        binarized = binarize(gray)
        yield ScanVariant("binarized", binarized)
        if self.also_inverted:
            yield ScanVariant("binarized_inverted", ImageOps.invert(binarized))

        if max(width, height) < self.UPSCALE_BELOW:
            yield ScanVariant(
                "upscaled",
                gray.resize((width * 2, height * 2), Image.Resampling.LANCZOS),
                lambda x, y: (x / 2, y / 2),
            )

    def _decode_image(self, variant: ScanVariant) -> list[DecodeResult]:
        """Decode barcodes from a single image variant."""
        results: list[DecodeResult] = []

        if self.symbols:
            try:
                decoded_objects: Sequence[Decoded] = pyzbar.decode(variant.image, symbols=self.symbols)
            except PyZbarError as e:
                raise RecognitionError(f"ZBar failed to scan image: {e}") from e
            for obj in decoded_objects:
                result = self._process_decoded(obj, variant)
                if result:
                    results.append(result)

        if self.zxing_formats:
            for barcode in self._read_zxing(variant):
                result = self._process_zxing(barcode, variant)
                if result:
                    results.append(result)

        return results

    def _read_zxing(self, variant: ScanVariant) -> list[zxingcpp.Barcode]:
        try:
            found = zxingcpp.read_barcodes(
                variant.image,
                formats=zxingcpp.BarcodeFormats(self.zxing_formats),
                try_rotate=self.try_harder,
                try_invert=self.also_inverted,
            )
            if not found and BarcodeFormat.MAXICODE in self.formats:
                # MaxiCode is only located when the image holds nothing but the symbol
                found = zxingcpp.read_barcodes(
                    variant.image,
                    formats=zxingcpp.BarcodeFormat.MaxiCode,
                    is_pure=True,
                )
        except (ValueError, RuntimeError) as e:
            raise RecognitionError(f"zxing-cpp failed to scan image: {e}") from e
        return list(found)

    def _process_decoded(self, decoded: Decoded, variant: ScanVariant) -> DecodeResult | None:
        """Convert a pyzbar result, or None for symbols outside the requested formats."""
        barcode_format = self.SYMBOL_MAP.get(decoded.type)
        if barcode_format is None or barcode_format not in self.formats:
            logger.debug("Skipping symbol", symbol_type=decoded.type)
            return None

        data = bytes(decoded.data)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            # Binary payloads; latin-1 keeps one character per byte
            text = data.decode("latin-1")

        if decoded.polygon:
            corners = [(p.x, p.y) for p in decoded.polygon]
        else:
            rect = decoded.rect
            corners = [
                (rect.left, rect.top),
                (rect.left + rect.width, rect.top),
                (rect.left + rect.width, rect.top + rect.height),
                (rect.left, rect.top + rect.height),
            ]

        metadata = {
            "symbology": decoded.type,
            "quality": str(decoded.quality),
            "variant": variant.name,
        }
        orientation = getattr(decoded, "orientation", None)
        if orientation:
            metadata["orientation"] = str(orientation)

        return self._make_result(barcode_format, text, data, corners, variant, metadata)

    def _process_zxing(self, barcode: zxingcpp.Barcode, variant: ScanVariant) -> DecodeResult | None:
        """Convert a zxing-cpp result, or None for symbols outside the requested formats."""
        name = barcode.format.name
        barcode_format = next((fmt for prefix, fmt in self.ZXING_NAMES if name.startswith(prefix)), None)
        if barcode_format is None or barcode_format not in self.formats:
            logger.debug("Skipping symbol", symbol_type=name)
            return None

        position = barcode.position
        corners = [
            (position.top_left.x, position.top_left.y),
            (position.top_right.x, position.top_right.y),
            (position.bottom_right.x, position.bottom_right.y),
            (position.bottom_left.x, position.bottom_left.y),
        ]
        metadata = {
            "symbology": name,
            "symbology_identifier": barcode.symbology_identifier,
            "variant": variant.name,
            "orientation": str(barcode.orientation),
        }
        return self._make_result(barcode_format, barcode.text, bytes(barcode.bytes), corners, variant, metadata)

    def _make_result(
        self,
        barcode_format: BarcodeFormat,
        text: str,
        data: bytes,
        corners: list[tuple[float, float]],
        variant: ScanVariant,
        metadata: dict[str, str],
    ) -> DecodeResult | None:
        """Apply the text options and build the result, or None when the text is rejected."""
        if self.character_set:
            text = data.decode(self.character_set, errors="replace")

        if barcode_format == BarcodeFormat.CODABAR and not self.return_codabar_start_end:
            text = strip_codabar_guards(text)

        if barcode_format == BarcodeFormat.CODE_39 and self.assume_code39_check_digit:
            if not has_code39_check_char(text):
                logger.debug("Dropping CODE_39 symbol with a bad check character", text=text)
                return None
            text = text[:-1]

        if self.allowed_lengths is not None and len(text) not in self.allowed_lengths:
            logger.debug("Dropping symbol by length", format=barcode_format.value, length=len(text))
            return None

        points = tuple(Point(x=sx, y=sy) for sx, sy in (variant.to_source(x, y) for x, y in corners))
        return DecodeResult(
            text=text,
            format=barcode_format,
            raw_bytes=data,
            points=points,
            metadata=metadata,
        )


def strip_codabar_guards(text: str) -> str:
    """Remove the A-D start and stop characters around CODABAR text."""
    if len(text) >= 2 and text[0].upper() in CODABAR_GUARDS and text[-1].upper() in CODABAR_GUARDS:
        return text[1:-1]
    return text


def has_code39_check_char(text: str) -> bool:
    """Check that the last character of CODE_39 text is the mod-43 check of the rest."""
    if len(text) < 2:
        return False
    try:
        return calculate_code39_check_char(text[:-1]) == text[-1]
    except ValueError:
        return False


def _unrotate(angle: int, width: int, height: int) -> PointMapper:
    """Map points on an image transposed by ``angle`` degrees (counter-clockwise) back to the source."""
    if angle == 90:
        return lambda x, y: (width - 1 - y, x)
    if angle == 180:
        return lambda x, y: (width - 1 - x, height - 1 - y)
    if angle == 270:
        return lambda x, y: (y, height - 1 - x)
    return _identity


def binarize(image: Image.Image) -> Image.Image:
    """
    Threshold a grayscale image with Otsu's method.

    Returns:
        Black and white image in mode "L"
    """
    pixels = np.asarray(image, dtype=np.uint8)
    hist = np.bincount(pixels.ravel(), minlength=256).astype(np.float64)
    total = pixels.size

    weight_bg = np.cumsum(hist)
    mass_bg = np.cumsum(hist * np.arange(256))
    weight_fg = total - weight_bg

    mean_bg = mass_bg / np.maximum(weight_bg, 1)
    mean_fg = (mass_bg[-1] - mass_bg) / np.maximum(weight_fg, 1)
    between = weight_bg * weight_fg * (mean_bg - mean_fg) ** 2

    threshold = int(np.argmax(between))
    return Image.fromarray(np.where(pixels > threshold, 255, 0).astype(np.uint8))
