"""
Symbology rules checked before text is handed to a generator.

Linear symbologies reject text the renderers would either mangle or fail on
with an unhelpful message, so the common cases are caught here first.
"""

import re

from barcode_bridge.errors import GenerationError
from barcode_bridge.models.formats import BarcodeFormat

# Ordered: a character's index is its mod-43 value
CODE39_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ-. $/+%"
CODE39_CHARS = frozenset(CODE39_ALPHABET)
CODABAR_CHARS = frozenset("0123456789-$:/.+")
CODABAR_GUARDS = frozenset("ABCD")

# Digits without / with check digit for the GS1 retail symbologies
GS1_LENGTHS = {
    BarcodeFormat.EAN_8: (7, 8),
    BarcodeFormat.EAN_13: (12, 13),
    BarcodeFormat.UPC_A: (11, 12),
    BarcodeFormat.RSS_14: (13, 14),
}

# Renderers lay CODE_128 and CODE_93 out in a single row; beyond this the bars become unreadable
MAX_LINEAR_LENGTH = 80

# GS1 element strings: "(01)09501101530003(17)250101"
GS1_ELEMENT_STRING = re.compile(r"(\(\d{2,4}\)[^()]+)+")

MATRIX_FORMATS = frozenset({BarcodeFormat.AZTEC, BarcodeFormat.DATA_MATRIX, BarcodeFormat.MAXICODE})


def calculate_gs1_check_digit(digits: str) -> int:
    """
    Calculate the GS1 mod-10 check digit for EAN-8, EAN-13 and UPC-A.

    Weights alternate 3, 1, 3, ... starting from the rightmost data digit.

    Args:
        digits: Data digits without the check digit

    Raises:
        ValueError: If ``digits`` is empty or not numeric
    """
    if not digits or not digits.isdigit():
        raise ValueError(f"Check digit needs a numeric string, got {digits!r}")

    total = sum(int(d) * (3 if i % 2 == 0 else 1) for i, d in enumerate(reversed(digits)))
    return (10 - total % 10) % 10


def validate_gs1_check_digit(code: str) -> bool:
    """Check that the last digit of ``code`` is its GS1 check digit."""
    if len(code) < 2 or not code.isdigit():
        return False
    return calculate_gs1_check_digit(code[:-1]) == int(code[-1])


def calculate_code39_check_char(text: str) -> str:
    """
    Calculate the optional mod-43 check character of a CODE_39 symbol.

    Raises:
        ValueError: If ``text`` has characters outside the CODE_39 set
    """
    try:
        total = sum(CODE39_ALPHABET.index(c) for c in text)
    except ValueError:
        raise ValueError(f"Not a CODE_39 text: {text!r}") from None
    return CODE39_ALPHABET[total % 43]


def expand_upc_e(code: str) -> str:
    """
    Expand a UPC-E number (number system, six digits, optional check) to its
    eleven-digit UPC-A body without check digit.
    """
    system, d = code[0], code[1:7]
    last = d[5]
    if last in "012":
        body = d[0:2] + last + "0000" + d[2:5]
    elif last == "3":
        body = d[0:3] + "00000" + d[3:5]
    elif last == "4":
        body = d[0:4] + "00000" + d[4]
    else:
        body = d[0:5] + "0000" + last
    return system + body


def validate_payload(text: str, barcode_format: BarcodeFormat) -> None:
    """
    Validate text against the character set and length rules of a symbology.

    QR_CODE and PDF_417 accept any text, and the other 2D formats any
    non-empty text; their capacity limits are enforced by the generators
    themselves.

    Raises:
        GenerationError: If the text cannot be encoded in this symbology
    """
    name = barcode_format.value

    if barcode_format in GS1_LENGTHS:
        short, full = GS1_LENGTHS[barcode_format]
        if not text.isdigit():
            raise GenerationError(f"{name} requires digits only")
        if len(text) not in (short, full):
            raise GenerationError(f"{name} requires {short} or {full} digits, got {len(text)}")
        if len(text) == full and not validate_gs1_check_digit(text):
            expected = calculate_gs1_check_digit(text[:-1])
            raise GenerationError(f"Invalid {name} check digit, expected {expected}")

    elif barcode_format == BarcodeFormat.ITF:
        if not text.isdigit() or len(text) % 2 != 0:
            raise GenerationError("ITF requires an even number of digits")

    elif barcode_format == BarcodeFormat.CODE_39:
        if not text:
            raise GenerationError("CODE_39 cannot encode empty text")
        if not set(text) <= CODE39_CHARS:
            raise GenerationError("CODE_39 supports only A-Z, 0-9, space and -.$/+%")

    elif barcode_format == BarcodeFormat.CODE_128:
        if not text:
            raise GenerationError("CODE_128 cannot encode empty text")
        if len(text) > MAX_LINEAR_LENGTH:
            raise GenerationError(f"CODE_128 text too long (max {MAX_LINEAR_LENGTH})")
        if any(ord(c) > 127 for c in text):
            raise GenerationError("CODE_128 supports ASCII characters only")

    elif barcode_format == BarcodeFormat.CODE_93:
        if not text:
            raise GenerationError("CODE_93 cannot encode empty text")
        if len(text) > MAX_LINEAR_LENGTH:
            raise GenerationError(f"CODE_93 text too long (max {MAX_LINEAR_LENGTH})")
        if any(ord(c) > 127 for c in text):
            raise GenerationError("CODE_93 supports ASCII characters only")

    elif barcode_format == BarcodeFormat.CODABAR:
        body = text.upper()
        if body[:1] in CODABAR_GUARDS and body[-1:] in CODABAR_GUARDS and len(body) >= 2:
            body = body[1:-1]
        if not body or not set(body) <= CODABAR_CHARS:
            raise GenerationError("CODABAR supports only 0-9 and -$:/.+ between A-D guards")

    elif barcode_format == BarcodeFormat.UPC_E:
        if not text.isdigit() or len(text) not in (7, 8) or text[0] not in "01":
            raise GenerationError("UPC_E requires 7 or 8 digits starting with 0 or 1")
        if len(text) == 8:
            expected = calculate_gs1_check_digit(expand_upc_e(text))
            if int(text[-1]) != expected:
                raise GenerationError(f"Invalid UPC_E check digit, expected {expected}")

    elif barcode_format == BarcodeFormat.RSS_EXPANDED:
        if not GS1_ELEMENT_STRING.fullmatch(text):
            raise GenerationError("RSS_EXPANDED requires GS1 data such as (01)09501101530003")

    elif barcode_format in MATRIX_FORMATS:
        if not text:
            raise GenerationError(f"{name} cannot encode empty text")
