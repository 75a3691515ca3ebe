"""
Tests for format enums and result models.
"""

import pytest
from pydantic import ValidationError

from barcode_bridge.models import (
    DECODABLE_FORMATS,
    ENCODABLE_FORMATS,
    BarcodeFormat,
    DecodeResult,
    ImageFormat,
    Point,
)


class TestBarcodeFormat:
    """Tests for BarcodeFormat parsing."""

    def test_canonical_names(self):
        """Test that every canonical name parses to itself."""
        for fmt in BarcodeFormat:
            assert BarcodeFormat.parse(fmt.value) is fmt

    def test_lenient_spellings(self):
        """Test case and separator variants."""
        assert BarcodeFormat.parse("qr_code") == BarcodeFormat.QR_CODE
        assert BarcodeFormat.parse("QrCode") == BarcodeFormat.QR_CODE
        assert BarcodeFormat.parse("ean-13") == BarcodeFormat.EAN_13
        assert BarcodeFormat.parse("Code128") == BarcodeFormat.CODE_128

    def test_zbar_aliases(self):
        """Test ZBar symbol names."""
        assert BarcodeFormat.parse("QRCODE") == BarcodeFormat.QR_CODE
        assert BarcodeFormat.parse("I25") == BarcodeFormat.ITF
        assert BarcodeFormat.parse("DATABAR") == BarcodeFormat.RSS_14
        assert BarcodeFormat.parse("DataBar-Exp") == BarcodeFormat.RSS_EXPANDED
        assert BarcodeFormat.parse("PDF417") == BarcodeFormat.PDF_417
        assert BarcodeFormat.parse("EAN5") == BarcodeFormat.UPC_EAN_EXTENSION

    def test_unknown(self):
        """Test that unknown names and non-strings raise ValueError."""
        with pytest.raises(ValueError):
            BarcodeFormat.parse("NOT_A_FORMAT")
        with pytest.raises(ValueError):
            BarcodeFormat.parse(13)  # type: ignore[arg-type]

    def test_format_sets(self):
        """Test the decodable and encodable subsets."""
        assert len(BarcodeFormat) == 17
        assert BarcodeFormat.QR_CODE in DECODABLE_FORMATS
        assert DECODABLE_FORMATS == set(BarcodeFormat)
        assert ENCODABLE_FORMATS == set(BarcodeFormat) - {BarcodeFormat.UPC_EAN_EXTENSION}
        assert BarcodeFormat.AZTEC in ENCODABLE_FORMATS


class TestImageFormat:
    """Tests for ImageFormat parsing."""

    def test_parse(self):
        """Test names, short extensions and casing."""
        assert ImageFormat.parse("jpg") == ImageFormat.JPEG
        assert ImageFormat.parse(".tif") == ImageFormat.TIFF
        assert ImageFormat.parse("png") == ImageFormat.PNG
        assert ImageFormat.parse(ImageFormat.GIF) == ImageFormat.GIF

    def test_parse_unknown(self):
        """Test that unknown formats raise ValueError."""
        with pytest.raises(ValueError):
            ImageFormat.parse("svg")

    def test_mime_type(self):
        """Test MIME types derived from the format name."""
        assert ImageFormat.JPEG.mime_type == "image/jpeg"
        assert ImageFormat.PNG.mime_type == "image/png"


class TestDecodeResult:
    """Tests for DecodeResult model."""

    def make_result(self) -> DecodeResult:
        return DecodeResult(
            text="hello",
            format=BarcodeFormat.QR_CODE,
            raw_bytes=b"hello",
            points=(Point(x=1, y=2), Point(x=3.5, y=4)),
            metadata={"symbology": "QRCODE"},
        )

    def test_create(self):
        """Test creating a result."""
        result = self.make_result()

        assert result.text == "hello"
        assert result.format == BarcodeFormat.QR_CODE
        assert result.raw_bytes == b"hello"
        assert result.points[1].x == 3.5
        assert result.num_bits == 40

    def test_optional_fields(self):
        """Test defaults for fields the engine may not report."""
        result = DecodeResult(text="", format=BarcodeFormat.EAN_13)

        assert result.raw_bytes is None
        assert result.points == ()
        assert result.metadata is None
        assert result.num_bits == 0

    def test_frozen(self):
        """Test that results cannot be mutated."""
        result = self.make_result()
        with pytest.raises(ValidationError):
            result.text = "changed"  # type: ignore[misc]

    def test_metadata_read_only(self):
        """Test that metadata cannot be changed after creation."""
        source = {"symbology": "QRCODE"}
        result = DecodeResult(text="hello", format=BarcodeFormat.QR_CODE, metadata=source)

        with pytest.raises(TypeError):
            result.metadata["symbology"] = "EAN13"  # type: ignore[index]
        source["symbology"] = "EAN13"
        assert result.metadata == {"symbology": "QRCODE"}

    def test_to_dict(self):
        """Test the JSON-safe mapping."""
        data = self.make_result().to_dict()

        assert data["text"] == "hello"
        assert data["format"] == "QR_CODE"
        assert data["rawBytes"] == [104, 101, 108, 108, 111]
        assert data["points"] == [{"x": 1.0, "y": 2.0}, {"x": 3.5, "y": 4.0}]
        assert data["metadata"] == {"symbology": "QRCODE"}
        assert type(data["metadata"]) is dict

    def test_equality(self):
        """Test that equal field values compare equal."""
        assert self.make_result() == self.make_result()
