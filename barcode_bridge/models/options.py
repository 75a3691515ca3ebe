"""
Decode and encode option models.
"""

import codecs
from collections.abc import Iterable
from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator

from barcode_bridge.models.base import FrozenModel
from barcode_bridge.models.formats import (
    DECODABLE_FORMATS,
    ENCODABLE_FORMATS,
    BarcodeFormat,
    ImageFormat,
)


def _lookup_codec(v: str | None) -> str | None:
    if v is None:
        return None
    try:
        return codecs.lookup(v).name
    except LookupError:
        raise ValueError(f"Unknown character set: {v!r}") from None


class DecodeOptions(FrozenModel):
    """Configuration for a decode call."""

    try_harder: bool = Field(False, description="Scan transformed variants of the image")
    formats: frozenset[BarcodeFormat] = Field(
        default=DECODABLE_FORMATS,
        validation_alias=AliasChoices("formats", "barcodeFormat", "barcode_format"),
        description="Symbologies to search for",
    )
    multi: bool = Field(
        False,
        validation_alias=AliasChoices("multi", "decodeMulti", "decode_multi"),
        description="Return every symbol found instead of the first one",
    )
    also_inverted: bool = Field(False, description="Also scan the inverted image")

    return_codabar_start_end: bool = Field(False, description="Keep the A-D guards of CODABAR text")
    allowed_lengths: frozenset[int] | None = Field(None, description="Text lengths to accept")
    assume_code39_check_digit: bool = Field(
        False,
        description="Verify and strip the mod-43 check character of CODE_39 text",
    )
    character_set: str | None = Field(None, description="Decode payload bytes with this codec")

    @field_validator("formats", mode="before")
    @classmethod
    def parse_formats(cls, v: Any) -> frozenset[BarcodeFormat]:
        if v is None:
            return DECODABLE_FORMATS
        if isinstance(v, (str, BarcodeFormat)):
            v = [v]
        if not isinstance(v, Iterable):
            raise ValueError("formats must be a format name or a list of names")

        formats = frozenset(BarcodeFormat.parse(item) for item in v)
        if not formats:
            raise ValueError("formats must name at least one symbology")
        return formats

    @field_validator("allowed_lengths", mode="before")
    @classmethod
    def parse_lengths(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return [v]
        return v

    @field_validator("allowed_lengths")
    @classmethod
    def positive_lengths(cls, v: frozenset[int] | None) -> frozenset[int] | None:
        if v is None:
            return None
        if not v or min(v) < 1:
            raise ValueError("allowed_lengths must list positive lengths")
        return v

    @field_validator("character_set")
    @classmethod
    def known_codec(cls, v: str | None) -> str | None:
        return _lookup_codec(v)


class EncodeOptions(FrozenModel):
    """
    Configuration for an encode call.

    ``height`` falls back to ``width`` and ``image_format`` is settled by the
    normalizer, since both defaults depend on other fields or on settings.
    """

    format: BarcodeFormat = Field(
        BarcodeFormat.QR_CODE,
        validation_alias=AliasChoices("format", "barcodeFormat", "barcode_format"),
    )
    width: int | None = Field(None, gt=0, description="Image width in pixels")
    height: int | None = Field(None, gt=0, description="Image height in pixels")
    margin: int | None = Field(None, ge=0, description="Quiet zone in modules")
    output_file: str | None = Field(None, description="Also write the image here")
    image_format: ImageFormat | None = None

    # QR specific
    error_correction: Literal["L", "M", "Q", "H"] | None = None
    qr_version: int | None = Field(None, ge=1, le=40)
    qr_mask_pattern: int | None = Field(None, ge=0, le=7)
    character_set: str | None = None

    # PDF417 specific
    pdf417_columns: int = Field(6, ge=1, le=30, description="Data columns per row")
    pdf417_security_level: int = Field(2, ge=0, le=8, description="Error correction level")

    # CODE_128 only: prefix FNC1 to draw a GS1-128 symbol
    gs1_format: bool = False

    @field_validator("format", mode="before")
    @classmethod
    def parse_format(cls, v: Any) -> BarcodeFormat:
        if v is None:
            return BarcodeFormat.QR_CODE
        fmt = BarcodeFormat.parse(v)
        if fmt not in ENCODABLE_FORMATS:
            raise ValueError(f"Encoding not supported for {fmt.value}")
        return fmt

    @field_validator("image_format", mode="before")
    @classmethod
    def parse_image_format(cls, v: Any) -> ImageFormat | None:
        if v is None:
            return None
        return ImageFormat.parse(v)

    @field_validator("error_correction", mode="before")
    @classmethod
    def upper_error_correction(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("output_file")
    @classmethod
    def reject_blank_path(cls, v: str | None) -> str | None:
        # An empty path means "no file"
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("character_set")
    @classmethod
    def known_codec(cls, v: str | None) -> str | None:
        return _lookup_codec(v)
