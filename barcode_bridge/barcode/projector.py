"""
Result projector: shapes engine results into the public decode result.
"""

from collections.abc import Sequence

from barcode_bridge.models.result import DecodeResult


def project(
    results: Sequence[DecodeResult],
    multi: bool,
) -> DecodeResult | list[DecodeResult] | None:
    """
    Single mode returns the first result or None; multi mode always returns a list.

    Callers branch on the shape, so "nothing found" is None in single mode
    and an empty list in multi mode.
    """
    if multi:
        return list(results)
    return results[0] if results else None
