"""
Local file output for encoded images.
"""

from barcode_bridge.storage.paths import get_extension, image_format_for_path
from barcode_bridge.storage.sink import emit

__all__ = [
    "emit",
    "get_extension",
    "image_format_for_path",
]
