"""Signature debugger - secp256k1 signing and step-traced verification of JSON payloads."""

from __future__ import annotations

from importlib import import_module
from typing import Any, TYPE_CHECKING

__all__ = [
    "canonicalize",
    "generate",
    "derive_public_key",
    "validate_private_key",
    "sign",
    "verify",
    "KeyPair",
    "Signer",
    "SignatureResult",
    "VerificationResult",
    "VerificationStep",
    "SigDebugError",
    "InvalidKeyError",
    "InvalidPublicKeyError",
    "EncodingError",
    "SignatureDecodeError",
]

if TYPE_CHECKING:
    from .canonical import canonicalize
    from .errors import (
        EncodingError,
        InvalidKeyError,
        InvalidPublicKeyError,
        SigDebugError,
        SignatureDecodeError,
    )
    from .keys import KeyPair, derive_public_key, generate, validate_private_key
    from .signer import SignatureResult, Signer, sign
    from .verifier import VerificationResult, VerificationStep, verify


def __getattr__(name: str) -> Any:
    """Lazily import submodules so ``cryptography`` loads on first use."""

    module_map = {
        "canonicalize": "canonical",
        "generate": "keys",
        "derive_public_key": "keys",
        "validate_private_key": "keys",
        "KeyPair": "keys",
        "sign": "signer",
        "Signer": "signer",
        "SignatureResult": "signer",
        "verify": "verifier",
        "VerificationResult": "verifier",
        "VerificationStep": "verifier",
        "SigDebugError": "errors",
        "InvalidKeyError": "errors",
        "InvalidPublicKeyError": "errors",
        "EncodingError": "errors",
        "SignatureDecodeError": "errors",
    }

    if name not in module_map:
        raise AttributeError(name)

    module = import_module(f".{module_map[name]}", __name__)
    return getattr(module, name)
