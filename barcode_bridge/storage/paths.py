"""
File path utilities for image inputs and outputs.
"""

from barcode_bridge.models.formats import ImageFormat

# Extension -> image format for output files
EXTENSION_FORMATS = {
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "bmp": ImageFormat.BMP,
    "gif": ImageFormat.GIF,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
    "webp": ImageFormat.WEBP,
}


def get_extension(path: str) -> str:
    """Get the lowercase file extension of the last path component."""
    name = path.replace("\\", "/").rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


def image_format_for_path(path: str) -> ImageFormat | None:
    """
    Guess the image format from a file name.

    Args:
        path: Output path like "out/qrcode.png"

    Returns:
        Matching format, or None for unknown or missing extensions
    """
    return EXTENSION_FORMATS.get(get_extension(path))
