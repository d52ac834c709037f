"""Step-annotated ECDSA verification for the signature debugger.

:func:`verify` never raises. It runs five stages and records each one:

1. Input Validation
2. Public Key Parsing
3. Payload Canonicalization
4. ECDSA Signature Verification
5. Final Validation

Failures in stages 1-3 mean the debugger input was malformed. They end the
run and populate :attr:`VerificationResult.error`. A failure in stage 4 is a
genuine signature rejection: the run still completes and stage 5 reports
``is_valid=False``.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Literal

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from pydantic import BaseModel, ConfigDict, Field

from .canonical import canonicalize
from .errors import EncodingError, InvalidPublicKeyError, SignatureDecodeError
from .keys import HEX_DIGITS, load_public_key
from .settings import SigDebugSettings, get_settings

__all__ = [
    "StepStatus",
    "VerificationStep",
    "VerificationResult",
    "decode_signature",
    "verify",
]

logger = logging.getLogger(__name__)

StepStatus = Literal["info", "success", "error"]

MISSING_PARAMETERS = "Missing required parameters"
INVALID_PUBLIC_KEY = "Invalid public key format"
UNSERIALIZABLE_PAYLOAD = "Payload is not JSON-serializable"


class VerificationStep(BaseModel):
    """One stage of a verification run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    step: int = Field(..., ge=1, description="1-based ordinal within the run.")
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    status: StepStatus
    details: str | None = None


class VerificationResult(BaseModel):
    """Outcome of :func:`verify` together with its step trace."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_valid: bool = Field(
        ..., description="Outcome of the final ECDSA check."
    )
    steps: tuple[VerificationStep, ...] = Field(
        default=(),
        description="Stages attempted, in order. Stages after a fatal error are absent.",
    )
    error: str | None = Field(
        default=None,
        description="Top-level message when verification could not reach a conclusion.",
    )

    @property
    def fatal(self) -> bool:
        """``True`` when the input was malformed rather than the signature wrong."""
        return self.error is not None

    @property
    def final_step(self) -> VerificationStep | None:
        """Last recorded stage, or ``None`` for an empty trace."""
        return self.steps[-1] if self.steps else None


class _Trace:
    """Accumulates frozen steps with strictly increasing ordinals."""

    def __init__(self) -> None:
        self.steps: list[VerificationStep] = []

    def record(
        self,
        title: str,
        description: str,
        status: StepStatus,
        details: str | None = None,
    ) -> None:
        self.steps.append(
            VerificationStep(
                step=len(self.steps) + 1,
                title=title,
                description=description,
                status=status,
                details=details,
            )
        )

    def fail(self, error: str) -> VerificationResult:
        logger.warning("Verification aborted at step %d: %s", len(self.steps), error)
        return VerificationResult(is_valid=False, steps=tuple(self.steps), error=error)


def _signature_bytes(signature_hex: str) -> bytes:
    candidate = signature_hex.strip()
    if candidate[:2] in ("0x", "0X"):
        candidate = candidate[2:]
    if not HEX_DIGITS.issuperset(candidate):
        raise SignatureDecodeError(
            "Signature is not valid hex: contains non-hex characters"
        )
    try:
        raw = bytes.fromhex(candidate)
    except ValueError as exc:
        raise SignatureDecodeError(f"Signature is not valid hex: {exc}") from exc
    try:
        decode_dss_signature(raw)
    except ValueError as exc:
        raise SignatureDecodeError(f"Signature is not valid DER: {exc}") from exc
    return raw


def decode_signature(signature_hex: str) -> tuple[int, int]:
    """Decode a DER signature hex into its ``(r, s)`` integers.

    Raises:
        SignatureDecodeError: If the input is not hex or not a DER sequence.
    """
    return decode_dss_signature(_signature_bytes(signature_hex))


def _check_signature(
    public_key: ec.EllipticCurvePublicKey, data: bytes, signature_hex: str
) -> bool:
    der_signature = _signature_bytes(signature_hex)
    try:
        public_key.verify(der_signature, data, ec.ECDSA(hashes.SHA256()))
    except InvalidSignature:
        return False
    return True


def verify(
    payload: object,
    signature_hex: str,
    public_key_hex: str,
    *,
    settings: SigDebugSettings | None = None,
) -> VerificationResult:
    """Verify ``signature_hex`` over ``payload`` and explain every stage.

    Args:
        payload: JSON value the signature is claimed to cover.
        signature_hex: DER-encoded ECDSA signature as hex.
        public_key_hex: Compressed or uncompressed secp256k1 point as hex.
        settings: Optional pre-instantiated settings.

    Returns:
        A :class:`VerificationResult`. All failures are reported as data.
    """
    settings = settings or get_settings()
    trace = _Trace()

    # Step 1
    if (
        payload is None
        or not isinstance(signature_hex, str)
        or not signature_hex.strip()
        or not isinstance(public_key_hex, str)
        or not public_key_hex.strip()
    ):
        trace.record(
            "Input Validation",
            "Validating signature and public key format",
            "error",
            "Payload, signature and public key are all required",
        )
        return trace.fail(MISSING_PARAMETERS)
    trace.record(
        "Input Validation",
        "Validating signature and public key format",
        "success",
        "All inputs present and valid",
    )

    # Step 2
    try:
        public_key = load_public_key(public_key_hex)
    except InvalidPublicKeyError as exc:
        trace.record(
            "Public Key Parsing",
            "Parsing public key from hex format",
            "error",
            str(exc),
        )
        return trace.fail(INVALID_PUBLIC_KEY)
    trace.record(
        "Public Key Parsing",
        "Parsing public key from hex format",
        "success",
        "Public key parsed successfully "
        f"({public_key_hex.strip()[: settings.key_preview_chars]}...)",
    )

    # Step 3
    try:
        data = canonicalize(payload)
    except EncodingError as exc:
        trace.record(
            "Payload Canonicalization",
            "Creating deterministic JSON representation",
            "error",
            str(exc),
        )
        return trace.fail(UNSERIALIZABLE_PAYLOAD)
    digest_hex = hashlib.sha256(data).hexdigest()
    trace.record(
        "Payload Canonicalization",
        "Creating deterministic JSON representation",
        "success",
        f"Payload hash: {digest_hex[: settings.hash_preview_chars]}...",
    )

    # Step 4
    try:
        is_valid = _check_signature(public_key, data, signature_hex)
    except SignatureDecodeError as exc:
        is_valid = False
        details = str(exc)
    else:
        details = (
            "Signature verification succeeded"
            if is_valid
            else "Signature does not match payload"
        )
    trace.record(
        "ECDSA Signature Verification",
        "Verifying signature against payload hash",
        "success" if is_valid else "error",
        details,
    )

    # Step 5
    trace.record(
        "Final Validation",
        "Confirming cryptographic integrity",
        "success" if is_valid else "error",
        "Signature is cryptographically valid and matches the payload"
        if is_valid
        else "Signature validation failed - payload may have been tampered with",
    )

    if not is_valid:
        logger.info("Signature rejected for payload hash %s...", digest_hex[:16])
    return VerificationResult(is_valid=is_valid, steps=tuple(trace.steps))
