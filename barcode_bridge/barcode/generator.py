"""
Barcode image generation.

QR_CODE is drawn with qrcode, PDF_417 with pdf417gen, the python-barcode
symbologies from their bar patterns, and AZTEC, DATA_MATRIX, MAXICODE,
CODE_93, UPC_E and the DataBar formats with zxing-cpp. Each renderer
produces the symbol at its smallest scale; the result is then scaled by a
whole factor so modules stay crisp, padded to the requested size and
encoded with Pillow.
"""

import re
from dataclasses import dataclass
from io import BytesIO

import barcode as pybarcode
import numpy as np
import pdf417gen
import qrcode
import structlog
import zxingcpp
from barcode.errors import BarcodeError
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage

from barcode_bridge.barcode.validator import validate_payload
from barcode_bridge.errors import GenerationError
from barcode_bridge.models.formats import BarcodeFormat, ImageFormat
from barcode_bridge.models.options import EncodeOptions

logger = structlog.get_logger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

# Quiet zones in modules when no margin is requested
DEFAULT_QR_BORDER = 4
DEFAULT_LINEAR_MARGIN = 10
DEFAULT_PDF417_MARGIN = 2
DEFAULT_MATRIX_MARGIN = 2

GS1_AI = re.compile(r"\((\d{2,4})\)")


@dataclass(frozen=True)
class Symbol:
    """
    A symbol drawn at its smallest scale, quiet zone included.

    Linear symbols are a single row; their height comes from the requested
    size or ``BarcodeGenerator.BAR_HEIGHT``.
    """

    image: Image.Image
    linear: bool
    scale: int


class BarcodeGenerator:
    """
    Render text as a barcode image.

    Args:
        jpeg_quality: Quality used when the output format is JPEG
    """

    # python-barcode class names
    LINEAR_CLASSES = {
        BarcodeFormat.CODABAR: "codabar",
        BarcodeFormat.CODE_39: "code39",
        BarcodeFormat.CODE_128: "code128",
        BarcodeFormat.EAN_8: "ean8",
        BarcodeFormat.EAN_13: "ean13",
        BarcodeFormat.ITF: "itf",
        BarcodeFormat.UPC_A: "upca",
    }

    # zxing-cpp writer formats
    ZXING_FORMATS = {
        BarcodeFormat.AZTEC: zxingcpp.BarcodeFormat.AztecCode,
        BarcodeFormat.DATA_MATRIX: zxingcpp.BarcodeFormat.DataMatrix,
        BarcodeFormat.MAXICODE: zxingcpp.BarcodeFormat.MaxiCode,
        BarcodeFormat.CODE_93: zxingcpp.BarcodeFormat.Code93,
        BarcodeFormat.UPC_E: zxingcpp.BarcodeFormat.UPCE,
        BarcodeFormat.RSS_14: zxingcpp.BarcodeFormat.DataBarOmni,
        BarcodeFormat.RSS_EXPANDED: zxingcpp.BarcodeFormat.DataBarExpanded,
    }
    ZXING_LINEAR = frozenset(
        {BarcodeFormat.CODE_93, BarcodeFormat.UPC_E, BarcodeFormat.RSS_14, BarcodeFormat.RSS_EXPANDED}
    )

    # MaxiCode hexagons need several pixels each to keep their shape
    ZXING_RENDER_SCALE = {BarcodeFormat.MAXICODE: 3}

    # Pixels per module when no width is requested
    QR_SCALE = 10
    PDF417_SCALE = 3
    LINEAR_SCALE = 4
    MATRIX_SCALE = 8

    # PDF417 rows are three modules tall
    PDF417_ROW_RATIO = 3

    # Bar height in pixels when no width is requested
    BAR_HEIGHT = 180

    def __init__(self, jpeg_quality: int = 95):
        self.jpeg_quality = jpeg_quality

    def generate(self, text: str, options: EncodeOptions) -> bytes:
        """
        Encode text as an image in ``options.image_format``.

        Raises:
            GenerationError: If the text does not fit the symbology, size or character set
        """
        image = self.render_image(text, options)
        image_format = options.image_format or ImageFormat.JPEG
        return self.encode_image(image, image_format)

    def render_image(self, text: str, options: EncodeOptions) -> Image.Image:
        """Render the symbol and fit it to the requested size."""
        if not isinstance(text, str):
            raise GenerationError(f"Barcode data must be a string, got {type(text).__name__}")

        validate_payload(text, options.format)
        logger.debug("Rendering barcode", format=options.format.value, length=len(text))

        if options.format == BarcodeFormat.QR_CODE:
            symbol = self._render_qr(text, options)
        elif options.format == BarcodeFormat.PDF_417:
            symbol = self._render_pdf417(text, options)
        elif options.format in self.LINEAR_CLASSES:
            symbol = self._render_linear(text, options)
        elif options.format in self.ZXING_FORMATS:
            symbol = self._render_zxing(text, options)
        else:
            raise GenerationError(f"Encoding not supported for {options.format.value}")

        return self.fit(symbol, options)

    def fit(self, symbol: Symbol, options: EncodeOptions) -> Image.Image:
        """
        Scale a symbol by a whole number of pixels per module.

        Without a width the symbol's own scale is used. With one, the
        largest scale that fits is used and the symbol is centred on a
        white canvas of exactly the requested size.

        Raises:
            GenerationError: If the requested size is smaller than one pixel per module
        """
        unit_width, unit_height = symbol.image.size

        if options.width is None:
            height = self.BAR_HEIGHT if symbol.linear else unit_height * symbol.scale
            return symbol.image.resize((unit_width * symbol.scale, height), Image.Resampling.NEAREST)

        width = options.width
        height = options.height or options.width
        if symbol.linear:
            scale = width // unit_width
            needed = f"{unit_width} px wide"
        else:
            scale = min(width // unit_width, height // unit_height)
            needed = f"{unit_width}x{unit_height} px"
        if scale == 0:
            raise GenerationError(f"{options.format.value} needs at least {needed}, got {width}x{height}")

        inner = (unit_width * scale, height if symbol.linear else unit_height * scale)
        canvas = Image.new("L", (width, height), 255)
        canvas.paste(
            symbol.image.resize(inner, Image.Resampling.NEAREST),
            ((width - inner[0]) // 2, (height - inner[1]) // 2),
        )
        return canvas

    def encode_image(self, image: Image.Image, image_format: ImageFormat) -> bytes:
        """Serialize a rendered image with Pillow."""
        buffer = BytesIO()
        save_options: dict[str, object] = {}
        if image_format == ImageFormat.JPEG:
            save_options["quality"] = self.jpeg_quality
        elif image_format == ImageFormat.WEBP:
            save_options["lossless"] = True

        try:
            image.save(buffer, format=image_format.value, **save_options)
        except (OSError, ValueError, KeyError) as e:
            raise GenerationError(f"Cannot write {image_format.value} image: {e}") from e
        return buffer.getvalue()

    def _render_qr(self, text: str, options: EncodeOptions) -> Symbol:
        payload: str | bytes = text
        if options.character_set:
            payload = _encode_text(text, options.character_set)

        border = DEFAULT_QR_BORDER if options.margin is None else options.margin
        try:
            qr = qrcode.QRCode(
                version=options.qr_version,
                error_correction=ERROR_CORRECTION_LEVELS[options.error_correction or "M"],
                box_size=1,
                border=border,
                mask_pattern=options.qr_mask_pattern,
            )
            qr.add_data(payload)
            qr.make(fit=options.qr_version is None)
        except (DataOverflowError, ValueError) as e:
            raise GenerationError(f"Text does not fit in a QR code: {e}") from e

        image = qr.make_image(image_factory=PilImage).get_image()
        return Symbol(image.convert("L"), linear=False, scale=self.QR_SCALE)

    def _render_pdf417(self, text: str, options: EncodeOptions) -> Symbol:
        margin = DEFAULT_PDF417_MARGIN if options.margin is None else options.margin
        try:
            codes = pdf417gen.encode(
                text,
                columns=options.pdf417_columns,
                security_level=options.pdf417_security_level,
                encoding=options.character_set or "utf-8",
            )
        except (ValueError, UnicodeEncodeError) as e:
            raise GenerationError(f"Text does not fit in a PDF417 symbol: {e}") from e

        image = pdf417gen.render_image(codes, scale=1, ratio=self.PDF417_ROW_RATIO, padding=margin)
        return Symbol(image.convert("L"), linear=False, scale=self.PDF417_SCALE)

    def _render_linear(self, text: str, options: EncodeOptions) -> Symbol:
        name = self.LINEAR_CLASSES[options.format]
        margin = DEFAULT_LINEAR_MARGIN if options.margin is None else options.margin

        kwargs: dict[str, object] = {}
        if options.format == BarcodeFormat.CODE_39:
            # The optional mod-43 character would be read back as part of the text
            kwargs["add_checksum"] = False
        elif options.format in (BarcodeFormat.CODABAR, BarcodeFormat.ITF):
            # One unit per narrow element so the pattern is one pixel per module
            kwargs.update(narrow=1, wide=3)
        if options.format == BarcodeFormat.CODE_128 and options.gs1_format:
            name = "gs1_128"
        if options.format == BarcodeFormat.CODABAR:
            text = text.upper()
            if text[0] not in "ABCD":
                text = f"A{text}A"

        try:
            barcode_class = pybarcode.get_barcode_class(name)
            pattern = barcode_class(text, **kwargs).build()[0]
        except (BarcodeError, ValueError, KeyError) as e:
            raise GenerationError(f"{options.format.value} cannot encode {text!r}: {e}") from e

        # "G" marks the longer guard bars of the EAN family
        row = np.array([0 if module in "1G" else 255 for module in pattern], dtype=np.uint8)
        row = np.pad(row, margin, constant_values=255)
        return Symbol(Image.fromarray(row[np.newaxis, :]), linear=True, scale=self.LINEAR_SCALE)

    def _render_zxing(self, text: str, options: EncodeOptions) -> Symbol:
        linear = options.format in self.ZXING_LINEAR
        if options.margin is not None:
            margin = options.margin
        else:
            margin = DEFAULT_LINEAR_MARGIN if linear else DEFAULT_MATRIX_MARGIN

        content: str | bytes = text
        if options.format == BarcodeFormat.RSS_EXPANDED:
            # The writer marks application identifiers with square brackets
            content = GS1_AI.sub(r"[\1]", text)
        elif options.character_set:
            content = _encode_text(text, options.character_set)

        try:
            barcode = zxingcpp.create_barcode(content, self.ZXING_FORMATS[options.format])
            render_scale = self.ZXING_RENDER_SCALE.get(options.format, 1)
            bitmap = barcode.to_image(scale=render_scale, add_hrt=False, add_quiet_zones=False)
        except (ValueError, RuntimeError) as e:
            raise GenerationError(f"{options.format.value} cannot encode {text!r}: {e}") from e

        pixels = np.asarray(bitmap, dtype=np.uint8)
        if pixels.ndim == 3:
            pixels = pixels[:, :, 0]
        pixels = np.where(pixels < 128, 0, 255).astype(np.uint8)

        if linear:
            middle = pixels.shape[0] // 2
            pixels = np.pad(pixels[middle : middle + 1], ((0, 0), (margin, margin)), constant_values=255)
            return Symbol(Image.fromarray(pixels), linear=True, scale=self.LINEAR_SCALE)

        pixels = np.pad(pixels, margin * render_scale, constant_values=255)
        return Symbol(Image.fromarray(pixels), linear=False, scale=self.MATRIX_SCALE // render_scale)


def _encode_text(text: str, character_set: str) -> bytes:
    try:
        return text.encode(character_set)
    except UnicodeEncodeError as e:
        raise GenerationError(f"Text cannot be encoded as {character_set}") from e
