"""
Classified decode inputs.

A decode input string is exactly one of these variants; see
``barcode_bridge.barcode.resolver.classify``.
"""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class FilePath:
    path: str
    kind: Literal["file_path"] = field(default="file_path", init=False)


@dataclass(frozen=True)
class Base64Payload:
    # Already decoded during classification
    data: bytes = field(repr=False)
    kind: Literal["base64"] = field(default="base64", init=False)


@dataclass(frozen=True)
class DataUrlPayload:
    mime_type: str
    payload: str = field(repr=False)
    kind: Literal["data_url"] = field(default="data_url", init=False)


DecodeInput = FilePath | Base64Payload | DataUrlPayload
