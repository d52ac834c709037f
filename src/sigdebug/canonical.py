"""Deterministic JSON canonicalization and hashing helpers.

Object keys are sorted by code point at every nesting level, separators are
compact and numbers follow the ECMAScript ``Number#toString`` rendering used
by browser ``JSON.stringify``. Independent verifiers must reproduce these bytes
exactly, so the output doubles as the wire format for signatures.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Mapping

from .errors import EncodingError

__all__ = [
    "canonicalize",
    "canonical_json",
    "canonical_hex",
    "payload_digest",
    "hash_canonical",
]

# Every integer below this magnitude is exactly representable as a float.
_FLOAT_EXACT_LIMIT = 2**53


def _format_float(value: float) -> str:
    """Render ``value`` the way ECMAScript serialises a Number."""
    if math.isnan(value) or math.isinf(value):
        raise EncodingError(f"Non-finite number {value!r} is not JSON serializable")
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr gives the shortest round-tripping digits; only the layout differs.
    mantissa, _, exp = repr(abs(value)).partition("e")
    int_part, _, frac_part = mantissa.partition(".")
    digits = int_part + frac_part
    point = len(int_part) + (int(exp) if exp else 0)
    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")
    k = len(digits)
    n = point

    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        body = "0." + "0" * -n + digits
    else:
        e = n - 1
        exponent = f"e{'+' if e > 0 else '-'}{abs(e)}"
        body = digits + exponent if k == 1 else f"{digits[0]}.{digits[1:]}{exponent}"
    return sign + body


def _format_int(value: int) -> str:
    """Render an integer, sharing the float form when a float holds it exactly.

    Integers that no float can represent exactly keep their full decimal digits.
    """
    if abs(value) >= _FLOAT_EXACT_LIMIT:
        try:
            as_float = float(value)
        except OverflowError:
            as_float = None
        if as_float is not None and as_float == value:
            return _format_float(as_float)
    try:
        return str(value)
    except ValueError as exc:
        raise EncodingError(f"Integer is too large to serialize: {exc}") from exc


def _encode(value: object, path: set[int]) -> str:
    """Serialise ``value`` recursively, tracking containers on the current path."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return _format_int(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)

    if isinstance(value, (Mapping, list, tuple)):
        marker = id(value)
        if marker in path:
            raise EncodingError("Circular reference detected")
        path.add(marker)
        try:
            if isinstance(value, Mapping):
                items = []
                for key in value:
                    if not isinstance(key, str):
                        raise EncodingError(
                            f"Object keys must be strings, got {type(key).__name__}"
                        )
                    items.append(key)
                members = (
                    f"{json.dumps(key, ensure_ascii=False)}:{_encode(value[key], path)}"
                    for key in sorted(items)
                )
                return "{" + ",".join(members) + "}"
            return "[" + ",".join(_encode(item, path) for item in value) + "]"
        finally:
            path.discard(marker)

    raise EncodingError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_json(payload: object) -> str:
    """Return the canonical JSON text for ``payload``.

    Raises:
        EncodingError: If ``payload`` holds a value JSON cannot represent,
            a non-string key, a non-finite number, or a cyclic reference.
    """
    try:
        return _encode(payload, set())
    except RecursionError as exc:
        raise EncodingError("Payload nesting is too deep to serialize") from exc


def canonicalize(payload: object) -> bytes:
    """Return the canonical UTF-8 byte form of ``payload``."""
    text = canonical_json(payload)
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(f"Payload contains unencodable text: {exc.reason}") from exc


def canonical_hex(payload: object) -> str:
    """Return the canonical bytes of ``payload`` as lowercase hex."""
    return canonicalize(payload).hex()


def payload_digest(payload: object) -> bytes:
    """Return the SHA-256 digest of the canonical bytes (the signing input)."""
    return hashlib.sha256(canonicalize(payload)).digest()


def hash_canonical(payload: object) -> str:
    """Return SHA-256 hex digest over the canonicalized JSON representation."""
    return payload_digest(payload).hex()
