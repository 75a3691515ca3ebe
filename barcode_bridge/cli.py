"""
barcode-bridge command line.

Usage:
    barcode-bridge decode ./label.jpg
    barcode-bridge decode ./shelf.png --multi --json
    barcode-bridge decode ./shelf.png --format EAN_13 --format UPC_A --try-harder
    barcode-bridge encode "hello, world" --output qrcode.png
    barcode-bridge encode 4006381333931 --format EAN_13 --output ean.jpg
    barcode-bridge encode 0100012345678905 --format CODE_128 --gs1 --output gs1.png
"""

import json
import sys

import click
import structlog

from barcode_bridge import BarcodeBridgeError, DecodeResult, decode, encode
from barcode_bridge.config import configure_logging, get_settings
from barcode_bridge.models import DECODABLE_FORMATS, ENCODABLE_FORMATS, ImageFormat

logger = structlog.get_logger(__name__)

EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def format_result(result: DecodeResult) -> str:
    """One line per symbol: format and text."""
    return f"{result.format.value:<12} {result.text}"


@click.group()
@click.option("--log-level", default=None, help="Override BARCODE_BRIDGE_LOG_LEVEL")
def cli(log_level: str | None):
    """Decode barcodes from images and encode text as barcode images."""
    settings = get_settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)


@cli.command("decode")
@click.argument("source")
@click.option("--try-harder", is_flag=True, help="Also scan rotated and enhanced variants")
@click.option("--multi", is_flag=True, help="Report every barcode, not just the first")
@click.option("--also-inverted", is_flag=True, help="Also scan the inverted image")
@click.option(
    "--format",
    "formats",
    multiple=True,
    type=click.Choice(sorted(f.value for f in DECODABLE_FORMATS), case_sensitive=False),
    help="Restrict the search to these formats (repeatable)",
)
@click.option(
    "--allowed-length",
    "allowed_lengths",
    type=int,
    multiple=True,
    help="Accept only texts of this length (repeatable)",
)
@click.option("--codabar-start-end", is_flag=True, help="Keep the A-D guards of CODABAR text")
@click.option("--code39-check-digit", is_flag=True, help="Verify and strip the CODE_39 check character")
@click.option("--character-set", default=None, help="Decode payload bytes with this codec")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def decode_command(
    source: str,
    try_harder: bool,
    multi: bool,
    also_inverted: bool,
    formats: tuple[str, ...],
    allowed_lengths: tuple[int, ...],
    codabar_start_end: bool,
    code39_check_digit: bool,
    character_set: str | None,
    as_json: bool,
):
    """Decode SOURCE: an image path, raw base64 image, or data URL."""
    options: dict[str, object] = {
        "tryHarder": try_harder,
        "multi": multi,
        "alsoInverted": also_inverted,
        "returnCodabarStartEnd": codabar_start_end,
        "assumeCode39CheckDigit": code39_check_digit,
    }
    if formats:
        options["formats"] = list(formats)
    if allowed_lengths:
        options["allowedLengths"] = list(allowed_lengths)
    if character_set:
        options["characterSet"] = character_set

    try:
        outcome = decode(source, options)
    except BarcodeBridgeError as e:
        logger.error("Decode failed", error=str(e), error_type=type(e).__name__)
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    results = outcome if isinstance(outcome, list) else [outcome] if outcome else []

    if as_json:
        if multi:
            payload: object = [r.to_dict() for r in results]
        else:
            payload = results[0].to_dict() if results else None
        click.echo(json.dumps(payload, indent=2))
    else:
        for result in results:
            click.echo(format_result(result))

    if not results:
        if not as_json:
            click.echo("No barcode found", err=True)
        sys.exit(EXIT_NOT_FOUND)


@cli.command("encode")
@click.argument("data")
@click.option(
    "--output",
    "-o",
    "output_file",
    required=True,
    type=click.Path(dir_okay=False, writable=True),
    help="Image file to write",
)
@click.option(
    "--format",
    "barcode_format",
    default="QR_CODE",
    show_default=True,
    type=click.Choice(sorted(f.value for f in ENCODABLE_FORMATS), case_sensitive=False),
)
@click.option("--width", type=int, default=None, help="Image width in pixels")
@click.option("--height", type=int, default=None, help="Image height in pixels (default: width)")
@click.option("--margin", type=int, default=None, help="Quiet zone in modules")
@click.option(
    "--image-format",
    type=click.Choice([f.value for f in ImageFormat], case_sensitive=False),
    default=None,
    help="Image format (default: from the output extension, else JPEG)",
)
@click.option(
    "--error-correction",
    type=click.Choice(["L", "M", "Q", "H"], case_sensitive=False),
    default=None,
    help="QR error correction level",
)
@click.option("--gs1", "gs1_format", is_flag=True, help="Draw CODE_128 as GS1-128")
def encode_command(
    data: str,
    output_file: str,
    barcode_format: str,
    width: int | None,
    height: int | None,
    margin: int | None,
    image_format: str | None,
    error_correction: str | None,
    gs1_format: bool,
):
    """Encode DATA as a barcode image."""
    options = {
        "format": barcode_format,
        "width": width,
        "height": height,
        "margin": margin,
        "outputFile": output_file,
        "imageFormat": image_format,
        "errorCorrection": error_correction,
        "gs1Format": gs1_format or None,
    }

    try:
        image_data = encode(data, {k: v for k, v in options.items() if v is not None})
    except BarcodeBridgeError as e:
        logger.error("Encode failed", error=str(e), error_type=type(e).__name__)
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    click.echo(f"Wrote {len(image_data)} bytes to {output_file}")


if __name__ == "__main__":
    cli()
