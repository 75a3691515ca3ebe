"""
Decode result model.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import Field, computed_field, field_serializer, field_validator

from barcode_bridge.models.base import FrozenModel
from barcode_bridge.models.formats import BarcodeFormat


class Point(FrozenModel):
    """A finder/corner point in source image coordinates."""

    x: float
    y: float


class DecodeResult(FrozenModel):
    """One symbol found in an image."""

    text: str = Field(..., description="Decoded text")
    format: BarcodeFormat = Field(..., description="Symbology of the symbol")
    raw_bytes: bytes | None = Field(None, description="Payload bytes as reported by the engine")
    points: tuple[Point, ...] = Field(default_factory=tuple)
    metadata: Mapping[str, str] | None = Field(None, description="Engine details, read-only")

    @field_validator("metadata")
    @classmethod
    def freeze_metadata(cls, v: Mapping[str, str] | None) -> Mapping[str, str] | None:
        return MappingProxyType(dict(v)) if v is not None else None

    @computed_field
    @property
    def num_bits(self) -> int:
        return len(self.raw_bytes) * 8 if self.raw_bytes else 0

    @field_serializer("raw_bytes")
    def serialize_raw_bytes(self, v: bytes | None) -> list[int] | None:
        return list(v) if v is not None else None

    @field_serializer("metadata")
    def serialize_metadata(self, v: Mapping[str, str] | None) -> dict[str, str] | None:
        return dict(v) if v is not None else None

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe mapping with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
