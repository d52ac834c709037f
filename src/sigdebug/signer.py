"""
ECDSA secp256k1 signing over canonical JSON payloads.

The signing input is the SHA-256 digest of the canonical UTF-8 bytes produced
by :func:`sigdebug.canonical.canonicalize`. Signatures are DER-encoded and
normalised to low-S form so that each signature has a single encoding.

Provides:
- sign(payload, private_key_hex): one-shot signing
- Signer(private_key_hex): reusable signer bound to one key
"""

from __future__ import annotations

import hashlib
import logging

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from pydantic import BaseModel, ConfigDict, Field

from .canonical import canonicalize
from .did import key_did
from .keys import (
    CURVE,
    CURVE_ORDER,
    encode_public_key,
    load_private_key,
    private_key_to_hex,
)
from .settings import SigDebugSettings, get_settings

__all__ = ["SignatureResult", "Signer", "sign"]

logger = logging.getLogger(__name__)


class SignatureResult(BaseModel):
    """Immutable output of a signing operation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    signature: str = Field(
        ...,
        min_length=2,
        description="DER-encoded ECDSA (r, s) pair as lowercase hex.",
    )
    public_key: str = Field(
        ...,
        description="Public key derived from the signing private key.",
    )
    payload: str = Field(
        ...,
        description="Canonical JSON text that was signed.",
    )
    digest: str = Field(
        ...,
        min_length=64,
        max_length=64,
        description="SHA-256 hex digest of the canonical payload bytes.",
    )


def _low_s(der_signature: bytes) -> bytes:
    r, s = decode_dss_signature(der_signature)
    if s > CURVE_ORDER // 2:
        s = CURVE_ORDER - s
    return encode_dss_signature(r, s)


def _sign_with(
    private_key: ec.EllipticCurvePrivateKey,
    payload: object,
    *,
    compressed: bool,
) -> SignatureResult:
    # Canonicalize before touching the key so a bad payload leaves no signature.
    data = canonicalize(payload)
    text = data.decode("utf-8")

    der_signature = _low_s(private_key.sign(data, ec.ECDSA(hashes.SHA256())))
    result = SignatureResult(
        signature=der_signature.hex(),
        public_key=encode_public_key(private_key.public_key(), compressed=compressed),
        payload=text,
        digest=hashlib.sha256(data).hexdigest(),
    )
    logger.debug(
        "Signed payload digest %s... with key %s...",
        result.digest[:16],
        result.public_key[:16],
    )
    return result


def sign(
    payload: object,
    private_key_hex: str,
    *,
    settings: SigDebugSettings | None = None,
) -> SignatureResult:
    """Sign ``payload`` with ``private_key_hex``.

    Args:
        payload: Any JSON-representable value.
        private_key_hex: 64-character hex scalar in ``[1, n-1]``.
        settings: Optional pre-instantiated settings.

    Returns:
        The DER signature, the derived public key and the canonical payload.

    Raises:
        InvalidKeyError: If the private key is invalid. Raised before any
            cryptographic work.
        EncodingError: If the payload cannot be canonicalized.
    """
    settings = settings or get_settings()
    private_key = load_private_key(private_key_hex)
    return _sign_with(
        private_key, payload, compressed=settings.compressed_public_keys
    )


class Signer:
    """
    Signing abstraction bound to a single secp256k1 key.

    Args:
    ----
        private_key_hex: Optional 64-character hex scalar. When ``None``, a
            random key is generated if ``ephemeral=True``; otherwise a
            :class:`ValueError` is raised.
        ephemeral: If ``True``, allows generating an ephemeral key for
            debugging sessions. Defaults to ``False``.
        settings: Optional pre-instantiated settings.

    Attributes:
    ----------
        algorithm: Always ``"ecdsa-secp256k1-sha256"``.
        public_key: Hex encoding of the public key.

    """

    algorithm = "ecdsa-secp256k1-sha256"

    def __init__(
        self,
        private_key_hex: str | None = None,
        ephemeral: bool = False,
        *,
        settings: SigDebugSettings | None = None,
    ) -> None:
        """Initialize the Signer with a private key."""
        self._settings = settings or get_settings()
        if private_key_hex is None:
            if not ephemeral:
                raise ValueError(
                    "private_key_hex is required. "
                    "Provide a key, or set ephemeral=True for a throwaway key."
                )
            self._priv = ec.generate_private_key(CURVE)
        else:
            self._priv = load_private_key(private_key_hex)
        self.public_key = encode_public_key(
            self._priv.public_key(),
            compressed=self._settings.compressed_public_keys,
        )

    @property
    def private_key_hex(self) -> str:
        """Hex scalar of the bound key, for exporting ephemeral keys."""
        return private_key_to_hex(self._priv)

    @property
    def did(self) -> str:
        """Display identifier derived from the public key."""
        return key_did(self.public_key, prefix_chars=self._settings.did_prefix_chars)

    def sign(self, payload: object) -> SignatureResult:
        """Canonicalize and sign ``payload`` with the bound key."""
        return _sign_with(
            self._priv, payload, compressed=self._settings.compressed_public_keys
        )
