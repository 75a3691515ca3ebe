"""
Tests for result shaping.
"""

from barcode_bridge.barcode.projector import project
from barcode_bridge.models import BarcodeFormat, DecodeResult


def make_result(text: str) -> DecodeResult:
    return DecodeResult(text=text, format=BarcodeFormat.QR_CODE)


class TestProject:
    """Tests for single and multi mode shapes."""

    def test_single_mode(self):
        """Test that single mode returns the first result."""
        results = [make_result("first"), make_result("second")]
        assert project(results, multi=False) == results[0]

    def test_single_mode_empty(self):
        """Test that single mode reports nothing found as None."""
        assert project([], multi=False) is None

    def test_multi_mode(self):
        """Test that multi mode keeps every result in order."""
        results = (make_result("first"), make_result("second"))
        projected = project(results, multi=True)

        assert isinstance(projected, list)
        assert [r.text for r in projected] == ["first", "second"]

    def test_multi_mode_empty(self):
        """Test that multi mode reports nothing found as an empty list."""
        assert project([], multi=True) == []
