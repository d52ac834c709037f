"""Async wrappers that keep curve work off the event loop thread."""

from __future__ import annotations

import asyncio

from .keys import KeyPair, generate
from .settings import SigDebugSettings
from .signer import SignatureResult, sign
from .verifier import VerificationResult, verify

__all__ = ["generate_async", "sign_async", "verify_async"]


async def generate_async(*, settings: SigDebugSettings | None = None) -> KeyPair:
    """Run :func:`sigdebug.keys.generate` in a worker thread."""
    return await asyncio.to_thread(generate, settings=settings)


async def sign_async(
    payload: object,
    private_key_hex: str,
    *,
    settings: SigDebugSettings | None = None,
) -> SignatureResult:
    """Run :func:`sigdebug.signer.sign` in a worker thread."""
    return await asyncio.to_thread(sign, payload, private_key_hex, settings=settings)


async def verify_async(
    payload: object,
    signature_hex: str,
    public_key_hex: str,
    *,
    settings: SigDebugSettings | None = None,
) -> VerificationResult:
    """Run :func:`sigdebug.verifier.verify` in a worker thread."""
    return await asyncio.to_thread(
        verify, payload, signature_hex, public_key_hex, settings=settings
    )
