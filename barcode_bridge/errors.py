"""
Error taxonomy shared by decode and encode.
"""

from enum import Enum


class InputErrorReason(str, Enum):
    """Why a decode input could not be turned into image bytes."""

    EMPTY_INPUT = "empty_input"
    FILE_NOT_FOUND = "file_not_found"
    UNREADABLE = "unreadable"
    MALFORMED_PAYLOAD = "malformed_payload"
    UNRECOGNIZED_IMAGE = "unrecognized_image"
    TOO_LARGE = "too_large"


class BarcodeBridgeError(Exception):
    """Base class for every failure reported by decode/encode."""


class InputError(BarcodeBridgeError):
    """The decode input could not be classified or its bytes obtained."""

    def __init__(self, reason: InputErrorReason, message: str):
        super().__init__(message)
        self.reason = reason


class OptionsError(BarcodeBridgeError):
    """A supplied option is semantically invalid."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class RecognitionError(BarcodeBridgeError):
    """The engine could not process the image pixels."""


class GenerationError(BarcodeBridgeError):
    """The text cannot be encoded under the chosen symbology or size."""


class IoError(BarcodeBridgeError):
    """The encoded image could not be written to the output file."""

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path
