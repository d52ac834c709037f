"""Exception hierarchy for :mod:`sigdebug`."""

from __future__ import annotations

__all__ = [
    "SigDebugError",
    "InvalidKeyError",
    "InvalidPublicKeyError",
    "EncodingError",
    "SignatureDecodeError",
]


class SigDebugError(Exception):
    """Base class for every error raised by the signature debugger."""


class InvalidKeyError(SigDebugError, ValueError):
    """Private key is malformed or outside ``[1, n-1]``."""


class InvalidPublicKeyError(SigDebugError, ValueError):
    """Public key hex does not decode to a secp256k1 point."""


class EncodingError(SigDebugError, TypeError):
    """Payload cannot be represented as canonical JSON."""


class SignatureDecodeError(SigDebugError, ValueError):
    """Signature hex is not a well-formed DER ``(r, s)`` sequence."""
