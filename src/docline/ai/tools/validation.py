"""Argument coercion helpers shared by the document tools."""

from __future__ import annotations

from typing import Any

from .errors import InvalidParameterError, MissingParameterError


def coerce_int(value: Any, *, parameter: str) -> int:
    """Return ``value`` as an ``int``.

    JSON numbers arrive from the model layer as ``int`` or integral
    ``float``; booleans, strings and fractional numbers are rejected.
    """

    if isinstance(value, bool):
        raise InvalidParameterError(
            message=f"{parameter} must be an integer, got a boolean",
            parameter=parameter,
            value=value,
            expected="integer",
        )
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise InvalidParameterError(
        message=f"{parameter} must be an integer",
        parameter=parameter,
        value=value,
        expected="integer",
    )


def coerce_line_numbers(value: Any, *, parameter: str = "lines") -> list[int]:
    """Validate a non-empty list of line numbers, keeping caller order and repeats."""

    if value is None:
        raise MissingParameterError(
            message="No line numbers provided",
            parameter=parameter,
        )
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise InvalidParameterError(
            message=f"{parameter} must be a list of line numbers",
            parameter=parameter,
            value=value,
            expected="array of integers",
        )
    if not value:
        raise MissingParameterError(
            message="No line numbers provided",
            parameter=parameter,
        )
    return [coerce_int(item, parameter=parameter) for item in value]


__all__ = ["coerce_int", "coerce_line_numbers"]
