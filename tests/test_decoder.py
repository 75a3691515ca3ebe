"""
Tests for the decoder, its scan variants and its text options.
"""

from io import BytesIO

import numpy as np
import pytest
from PIL import Image, ImageOps

from barcode_bridge import encode
from barcode_bridge.barcode.decoder import (
    BarcodeDecoder,
    _unrotate,
    binarize,
    has_code39_check_char,
    strip_codabar_guards,
)
from barcode_bridge.barcode.validator import calculate_code39_check_char
from barcode_bridge.errors import InputError, InputErrorReason, RecognitionError
from barcode_bridge.models import BarcodeFormat, DecodeOptions


class TestBinarize:
    """Tests for Otsu thresholding."""

    def test_two_levels(self):
        """Test that a two-tone image splits into pure black and white."""
        pixels = np.full((10, 10), 200, dtype=np.uint8)
        pixels[:, :5] = 40
        result = np.asarray(binarize(Image.fromarray(pixels)))

        assert set(np.unique(result)) == {0, 255}
        assert (result[:, :5] == 0).all()
        assert (result[:, 5:] == 255).all()

    def test_keeps_size_and_mode(self):
        """Test output geometry."""
        image = Image.new("L", (31, 17), 128)
        result = binarize(image)
        assert result.size == (31, 17)
        assert result.mode == "L"


class TestUnrotate:
    """Tests for mapping rotated coordinates back to the source image."""

    @pytest.mark.parametrize(
        "angle,transpose",
        [
            (90, Image.Transpose.ROTATE_90),
            (180, Image.Transpose.ROTATE_180),
            (270, Image.Transpose.ROTATE_270),
        ],
    )
    def test_pixel_maps_back(self, angle, transpose):
        """Test that a marked pixel lands where it started."""
        width, height = 7, 5
        image = Image.new("L", (width, height), 255)
        image.putpixel((2, 1), 0)

        rotated = np.asarray(image.transpose(transpose))
        ys, xs = np.nonzero(rotated == 0)
        mapper = _unrotate(angle, width, height)

        assert mapper(int(xs[0]), int(ys[0])) == (2, 1)

    def test_identity_for_other_angles(self):
        """Test that unknown angles leave points alone."""
        assert _unrotate(0, 10, 10)(3, 4) == (3, 4)


class TestBarcodeDecoder:
    """Tests for BarcodeDecoder."""

    def test_decode_qr(self, qr_png):
        """Test a single QR code with points inside the image."""
        results = BarcodeDecoder().decode(qr_png)

        assert len(results) == 1
        result = results[0]
        assert result.text == "hello, world"
        assert result.format == BarcodeFormat.QR_CODE
        assert result.raw_bytes == b"hello, world"
        assert result.metadata["symbology"] == "QRCODE"
        assert result.metadata["variant"] == "original"

        width, height = Image.open(BytesIO(qr_png)).size
        assert len(result.points) >= 4
        for point in result.points:
            assert 0 <= point.x <= width
            assert 0 <= point.y <= height

    def test_accepts_pil_and_numpy(self, qr_png):
        """Test the in-memory image types."""
        image = Image.open(BytesIO(qr_png))
        assert BarcodeDecoder().decode(image)[0].text == "hello, world"
        assert BarcodeDecoder().decode(np.asarray(image.convert("L")))[0].text == "hello, world"

    def test_blank_image(self, blank_png):
        """Test that an empty image yields no results, not an error."""
        assert BarcodeDecoder().decode(blank_png) == []
        assert BarcodeDecoder(try_harder=True, also_inverted=True, multi=True).decode(blank_png) == []

    def test_restricted_formats(self, qr_png):
        """Test that symbols outside the requested formats are not reported."""
        decoder = BarcodeDecoder(formats=frozenset({BarcodeFormat.EAN_13}))
        assert decoder.decode(qr_png) == []

    def test_multi(self, two_qr_png):
        """Test that multi mode reports both symbols."""
        results = BarcodeDecoder(multi=True).decode(two_qr_png)
        assert {r.text for r in results} == {"left code", "right code"}

    def test_multi_dedupes_across_variants(self, qr_png):
        """Test that a symbol found by several variants is reported once."""
        results = BarcodeDecoder(multi=True, try_harder=True, also_inverted=True).decode(qr_png)
        assert [r.text for r in results] == ["hello, world"]

    def test_inverted(self, qr_png):
        """Test light-on-dark symbols with also_inverted."""
        inverted = ImageOps.invert(Image.open(BytesIO(qr_png)).convert("L"))
        results = BarcodeDecoder(also_inverted=True).decode(inverted)
        assert results[0].text == "hello, world"

    def test_try_harder_small_image(self, settings):
        """Test that try_harder finds a code in a small image."""
        small = encode("small", {"imageFormat": "PNG", "width": 120}, settings=settings)
        results = BarcodeDecoder(try_harder=True).decode(small)
        assert results[0].text == "small"

    def test_unrecognized_image(self):
        """Test that a PNG signature followed by junk is rejected as input."""
        with pytest.raises(InputError) as exc_info:
            BarcodeDecoder().decode(b"\x89PNG\r\n\x1a\n" + b"junk" * 20)
        assert exc_info.value.reason == InputErrorReason.UNRECOGNIZED_IMAGE

    def test_truncated_pixels(self, qr_png):
        """Test that a valid header with missing pixel data raises RecognitionError."""
        with pytest.raises(RecognitionError):
            BarcodeDecoder().decode(qr_png[: len(qr_png) // 2])

    def test_unsupported_type(self):
        """Test that unsupported input types are rejected."""
        with pytest.raises(TypeError):
            BarcodeDecoder().decode("not bytes")  # type: ignore[arg-type]

    def test_from_options(self):
        """Test building a decoder from normalized options."""
        decoder = BarcodeDecoder.from_options(DecodeOptions(formats=["EAN_13", "UPC_A"], multi=True))
        assert decoder.formats == {BarcodeFormat.EAN_13, BarcodeFormat.UPC_A}
        assert decoder.multi is True
        assert decoder.try_harder is False


class TestTextOptions:
    """Tests for the options that shape the decoded text."""

    @pytest.fixture
    def codabar_png(self, settings) -> bytes:
        return encode("40156", {"format": "CODABAR", "imageFormat": "PNG"}, settings=settings)

    def test_codabar_guards_stripped(self, codabar_png):
        """Test that CODABAR text comes back without its A-D guards."""
        results = BarcodeDecoder(formats=frozenset({BarcodeFormat.CODABAR})).decode(codabar_png)
        assert results[0].text == "40156"

    def test_codabar_guards_kept(self, codabar_png):
        """Test return_codabar_start_end."""
        decoder = BarcodeDecoder(formats=frozenset({BarcodeFormat.CODABAR}), return_codabar_start_end=True)
        text = decoder.decode(codabar_png)[0].text

        assert text[0] in "ABCD"
        assert text[-1] in "ABCD"
        assert text[1:-1] == "40156"

    def test_allowed_lengths(self, qr_png):
        """Test that texts of other lengths are dropped."""
        assert BarcodeDecoder(allowed_lengths=frozenset({5})).decode(qr_png) == []
        assert BarcodeDecoder(allowed_lengths=frozenset({12})).decode(qr_png)[0].text == "hello, world"

    def test_code39_check_digit(self, settings):
        """Test that a valid mod-43 character is verified and stripped."""
        text = "CODE39" + calculate_code39_check_char("CODE39")
        image = encode(text, {"format": "CODE_39", "imageFormat": "PNG"}, settings=settings)
        formats = frozenset({BarcodeFormat.CODE_39})

        assert BarcodeDecoder(formats=formats).decode(image)[0].text == text
        assert BarcodeDecoder(formats=formats, assume_code39_check_digit=True).decode(image)[0].text == "CODE39"

    def test_code39_bad_check_digit(self, settings):
        """Test that a symbol whose last character is not the check is dropped."""
        image = encode("CODE39X", {"format": "CODE_39", "imageFormat": "PNG"}, settings=settings)
        decoder = BarcodeDecoder(formats=frozenset({BarcodeFormat.CODE_39}), assume_code39_check_digit=True)
        assert decoder.decode(image) == []

    def test_character_set(self, qr_png):
        """Test that payload bytes are decoded with the requested codec."""
        result = BarcodeDecoder(character_set="utf-16-le").decode(qr_png)[0]

        assert result.raw_bytes == b"hello, world"
        assert result.text == b"hello, world".decode("utf-16-le")


class TestMatrixFormats:
    """Tests for the symbologies read by zxing-cpp."""

    @pytest.mark.parametrize(
        "fmt,text",
        [
            ("AZTEC", "hello aztec"),
            ("DATA_MATRIX", "hello data matrix"),
        ],
    )
    def test_decode(self, settings, fmt, text):
        """Test a generated symbol with points inside the image."""
        image_data = encode(text, {"format": fmt, "imageFormat": "PNG"}, settings=settings)
        results = BarcodeDecoder().decode(image_data)

        assert [r.text for r in results] == [text]
        result = results[0]
        assert result.format == BarcodeFormat(fmt)
        assert result.raw_bytes == text.encode()
        assert result.metadata["variant"] == "original"

        width, height = Image.open(BytesIO(image_data)).size
        assert len(result.points) == 4
        for point in result.points:
            assert 0 <= point.x <= width
            assert 0 <= point.y <= height

    def test_restricted_to_zbar_formats(self, settings):
        """Test that zxing-cpp formats are skipped when not requested."""
        image_data = encode("hello aztec", {"format": "AZTEC", "imageFormat": "PNG"}, settings=settings)
        decoder = BarcodeDecoder(formats=frozenset({BarcodeFormat.QR_CODE}))

        assert decoder.zxing_formats == []
        assert decoder.decode(image_data) == []


class TestTextHelpers:
    """Tests for the CODABAR and CODE_39 text helpers."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("A40156A", "40156"),
            ("b123d", "123"),
            ("40156", "40156"),
            ("A", "A"),
        ],
    )
    def test_strip_codabar_guards(self, text, expected):
        """Test guard removal."""
        assert strip_codabar_guards(text) == expected

    def test_has_code39_check_char(self):
        """Test mod-43 verification."""
        assert has_code39_check_char("CODE39W")
        assert not has_code39_check_char("CODE39X")
        assert not has_code39_check_char("W")
        assert not has_code39_check_char("code39w")
