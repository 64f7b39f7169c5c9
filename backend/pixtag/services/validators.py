"""Argument checks shared by the services."""

from typing import Any

from pixtag.exceptions import ValidationError


def require_id(value: Any, field: str) -> int:
    """
    Coerce an identifier to a positive int.

    Accepts ints and strings of ASCII digits ("7"); rejects bools, floats,
    None, zero, negatives and other digit characters ("²", "٣") with a
    ValidationError naming `field`.
    """
    if isinstance(value, bool):
        value = None
    elif isinstance(value, str):
        digits = value.strip()
        if digits.isascii() and digits.isdigit():
            value = int(digits)

    if not isinstance(value, int) or value <= 0:
        raise ValidationError(
            message=f"{field} must be a positive integer.",
            field=field,
            context={"value": repr(value)[:50]},
        )
    return value
