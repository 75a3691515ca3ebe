"""
Options normalizer: validates raw decode/encode options and fills defaults.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from barcode_bridge.config import Settings
from barcode_bridge.errors import OptionsError
from barcode_bridge.models.base import FrozenModel
from barcode_bridge.models.formats import BarcodeFormat
from barcode_bridge.models.options import DecodeOptions, EncodeOptions
from barcode_bridge.storage.paths import image_format_for_path

ModelT = TypeVar("ModelT", bound=FrozenModel)

RawOptions = Mapping[str, Any] | FrozenModel | None


def _validate(model: type[ModelT], raw: RawOptions) -> ModelT:
    if raw is None:
        return model()
    if isinstance(raw, model):
        return raw
    if not isinstance(raw, Mapping):
        raise OptionsError("options", f"expected a mapping, got {type(raw).__name__}")

    try:
        return model.model_validate(dict(raw))
    except ValidationError as e:
        # Report the first offending field; the rest usually follow from it
        error = e.errors()[0]
        loc = error["loc"]
        field = model.field_name_for(str(loc[0])) if loc else "options"
        raise OptionsError(field, error["msg"]) from e


def normalize_decode_options(raw: RawOptions = None) -> DecodeOptions:
    """
    Validate decode options.

    Args:
        raw: Mapping with camelCase or snake_case keys, a DecodeOptions, or None

    Returns:
        Frozen DecodeOptions with defaults applied

    Raises:
        OptionsError: If a value is invalid
    """
    return _validate(DecodeOptions, raw)


def normalize_encode_options(raw: RawOptions = None, settings: Settings | None = None) -> EncodeOptions:
    """
    Validate encode options and settle the defaults that depend on other fields.

    - ``height`` defaults to ``width``
    - ``image_format`` comes from the output file extension, else from settings

    Raises:
        OptionsError: If a value is invalid, a dimension exceeds the configured
            maximum or ``gs1_format`` is set for a format other than CODE_128
    """
    settings = settings or Settings()
    options = _validate(EncodeOptions, raw)

    for field in ("width", "height"):
        value = getattr(options, field)
        if value is not None and value > settings.max_dimension:
            raise OptionsError(field, f"{value}px exceeds maximum {settings.max_dimension}px")
    if options.gs1_format and options.format != BarcodeFormat.CODE_128:
        raise OptionsError("gs1_format", f"GS1 encoding applies to CODE_128, not {options.format.value}")

    updates: dict[str, Any] = {}
    if options.height is None and options.width is not None:
        updates["height"] = options.width
    if options.image_format is None:
        from_path = image_format_for_path(options.output_file) if options.output_file else None
        updates["image_format"] = from_path or settings.default_image_format

    return options.model_copy(update=updates) if updates else options
