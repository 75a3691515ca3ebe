"""
Encode output sink: hands back generated bytes and optionally writes them.
"""

import os

import structlog

from barcode_bridge.errors import IoError

logger = structlog.get_logger(__name__)


def emit(image_data: bytes, output_file: str | None = None) -> bytes:
    """
    Return the encoded image, writing it to ``output_file`` when given.

    The file is created or overwritten. Parent directories are not created.

    Args:
        image_data: Encoded image bytes
        output_file: Optional destination path

    Returns:
        The same bytes, whether or not a file was written

    Raises:
        IoError: If the file cannot be written
    """
    if not output_file:
        return image_data

    try:
        with open(output_file, "wb") as f:
            f.write(image_data)
    except OSError as e:
        logger.warning("Failed to write output file", path=output_file, error=str(e))
        raise IoError(output_file, f"Cannot write {output_file}: {e.strerror or e}") from e

    logger.debug(
        "Wrote output file",
        path=os.path.abspath(output_file),
        size_bytes=len(image_data),
    )
    return image_data
