"""Canonical JSON serialization.

Semantically equal documents serialize to identical bytes: object keys are
sorted, insignificant whitespace is dropped, strings are written as UTF-8
with only the escapes JSON requires, and numbers have one spelling each.
Integral numbers (``1`` and ``1.0`` alike) are written as integers and all
other numbers in upper-case exponent form with one leading digit and a
non-empty fraction, e.g. ``1.5E0``, ``5.0E-1`` or ``1.25E-3``. Lone UTF-16
surrogates cannot be written as UTF-8 and are kept as lowercase ``\\uXXXX``
escapes.
"""

from __future__ import annotations

import json
import math
import re
from decimal import Decimal
from typing import Any

from .errors import SchemaCompileError

__all__ = [
    "canonicalize",
    "canonical_dumps",
    "reject_json_constant",
    "parse_finite_float",
]

# Integral floats at or beyond this magnitude keep exponent form.
_INTEGRAL_FLOAT_LIMIT = 1e21

_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def reject_json_constant(name: str) -> Any:
    """``parse_constant`` hook refusing ``NaN`` and ``Infinity``."""
    raise ValueError(f"non-standard JSON constant: {name}")


def parse_finite_float(text: str) -> float:
    """``parse_float`` hook refusing literals that overflow to infinity."""

    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def _format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        raise ValueError(f"cannot canonicalize non-finite number {value!r}")
    if value.is_integer() and abs(value) < _INTEGRAL_FLOAT_LIMIT:
        return str(int(value))
    sign, digits, exponent = Decimal(repr(value)).as_tuple()
    text = "".join(str(d) for d in digits).rstrip("0") or "0"
    exp10 = int(exponent) + len(digits) - 1
    mantissa = f"{text[0]}.{text[1:] or '0'}"
    return f"{'-' if sign else ''}{mantissa}E{exp10}"


def _escape_surrogate(match: re.Match[str]) -> str:
    return f"\\u{ord(match.group()):04x}"


def _encode(value: Any) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return _SURROGATE_RE.sub(_escape_surrogate, json.dumps(value, ensure_ascii=False))
    if isinstance(value, (int, float)):
        return _format_number(value)
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda item: item[0])
        return "{" + ",".join(f"{_encode(k)}:{_encode(v)}" for k, v in items) + "}"
    if isinstance(value, list):
        return "[" + ",".join(_encode(item) for item in value) + "]"
    raise TypeError(f"cannot canonicalize value of type {type(value).__name__}")


def canonical_dumps(value: Any) -> str:
    """Return the canonical JSON text of an already-decoded value."""

    return _encode(value)


def canonicalize(document: str | bytes) -> bytes:
    """Return the canonical UTF-8 encoding of the JSON ``document``.

    Raises :class:`SchemaCompileError` if ``document`` is not valid JSON, holds
    a number outside the float range, or nests too deeply to serialize.
    """

    try:
        parsed = json.loads(
            document,
            parse_constant=reject_json_constant,
            parse_float=parse_finite_float,
        )
        encoded = _encode(parsed)
    except (ValueError, UnicodeDecodeError, RecursionError) as exc:
        raise SchemaCompileError(f"invalid JSON document: {exc}", cause=exc) from exc
    return encoded.encode("utf-8")
