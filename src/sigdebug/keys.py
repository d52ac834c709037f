"""secp256k1 key management: generation, derivation and validation."""

from __future__ import annotations

import logging

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .did import key_did
from .errors import InvalidKeyError, InvalidPublicKeyError
from .settings import SigDebugSettings, get_settings

__all__ = [
    "CURVE",
    "CURVE_ORDER",
    "HEX_DIGITS",
    "PRIVATE_KEY_HEX_LENGTH",
    "KeyPair",
    "generate",
    "derive_public_key",
    "derive_key_pair",
    "validate_private_key",
    "load_private_key",
    "load_public_key",
    "encode_public_key",
    "private_key_to_hex",
]

logger = logging.getLogger(__name__)

CURVE = ec.SECP256K1()
CURVE_ORDER = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)
PRIVATE_KEY_HEX_LENGTH = 64

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_COMPRESSED_POINT_BYTES = 33
_UNCOMPRESSED_POINT_BYTES = 65


def _parse_private_scalar(private_key_hex: object) -> int:
    """Return the scalar encoded by ``private_key_hex``.

    Raises:
        InvalidKeyError: If the input is not 64 hex characters or the scalar
            falls outside ``[1, n-1]``.
    """
    if not isinstance(private_key_hex, str):
        raise InvalidKeyError(
            "Invalid private key format. Expected 64-character hex string."
        )
    if len(private_key_hex) != PRIVATE_KEY_HEX_LENGTH or not HEX_DIGITS.issuperset(
        private_key_hex
    ):
        raise InvalidKeyError(
            "Invalid private key format. Expected 64-character hex string."
        )
    scalar = int(private_key_hex, 16)
    if not 1 <= scalar < CURVE_ORDER:
        raise InvalidKeyError("Private key scalar is outside the secp256k1 group order.")
    return scalar


def private_key_to_hex(private_key: ec.EllipticCurvePrivateKey) -> str:
    return private_key.private_numbers().private_value.to_bytes(32, "big").hex()


def encode_public_key(public_key: ec.EllipticCurvePublicKey, *, compressed: bool) -> str:
    """Return the X9.62 point encoding of ``public_key`` as lowercase hex."""
    point_format = (
        serialization.PublicFormat.CompressedPoint
        if compressed
        else serialization.PublicFormat.UncompressedPoint
    )
    return public_key.public_bytes(serialization.Encoding.X962, point_format).hex()


def load_private_key(private_key_hex: str) -> ec.EllipticCurvePrivateKey:
    """Return a ``cryptography`` private key for a validated hex scalar."""
    return ec.derive_private_key(_parse_private_scalar(private_key_hex), CURVE)


def load_public_key(public_key_hex: str) -> ec.EllipticCurvePublicKey:
    """Decode a compressed or uncompressed secp256k1 point.

    Args:
        public_key_hex: Hex-encoded X9.62 point. A ``0x`` prefix is tolerated.

    Returns:
        The parsed public key.

    Raises:
        InvalidPublicKeyError: If the hex is malformed, has the wrong length,
            or does not describe a point on the curve.
    """
    if not isinstance(public_key_hex, str) or not public_key_hex:
        raise InvalidPublicKeyError("Public key must be a non-empty hex string")
    candidate = public_key_hex.strip()
    if candidate[:2] in ("0x", "0X"):
        candidate = candidate[2:]
    if not HEX_DIGITS.issuperset(candidate):
        raise InvalidPublicKeyError("Public key contains non-hex characters")
    try:
        raw = bytes.fromhex(candidate)
    except ValueError as exc:
        raise InvalidPublicKeyError(f"Public key is not valid hex: {exc}") from exc
    if len(raw) not in (_COMPRESSED_POINT_BYTES, _UNCOMPRESSED_POINT_BYTES):
        raise InvalidPublicKeyError(
            f"Public key must be {_COMPRESSED_POINT_BYTES} or "
            f"{_UNCOMPRESSED_POINT_BYTES} bytes, got {len(raw)}"
        )
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, raw)
    except ValueError as exc:
        raise InvalidPublicKeyError(f"Public key is not a valid curve point: {exc}") from exc


def validate_private_key(private_key_hex: object) -> bool:
    """Return ``True`` when ``private_key_hex`` encodes a usable scalar.

    Never raises: wrong length, non-hex characters, zero and scalars at or
    above the curve order all yield ``False``.
    """
    try:
        _parse_private_scalar(private_key_hex)
    except InvalidKeyError:
        return False
    return True


def derive_public_key(
    private_key_hex: str,
    *,
    compressed: bool | None = None,
    settings: SigDebugSettings | None = None,
) -> str:
    """Derive the public key hex for ``private_key_hex``.

    Args:
        private_key_hex: 64-character hex scalar.
        compressed: Force the point encoding. When ``None`` the configured
            ``public_key_format`` decides.
        settings: Optional pre-instantiated settings.

    Returns:
        Lowercase hex of the encoded public point.

    Raises:
        InvalidKeyError: If the private key is malformed or out of range.
    """
    if compressed is None:
        compressed = (settings or get_settings()).compressed_public_keys
    private_key = load_private_key(private_key_hex)
    return encode_public_key(private_key.public_key(), compressed=compressed)


def _same_point(left_hex: str, right_hex: str) -> bool:
    left = encode_public_key(load_public_key(left_hex), compressed=False)
    right = encode_public_key(load_public_key(right_hex), compressed=False)
    return left == right


class KeyPair(BaseModel):
    """Immutable secp256k1 key pair whose public half matches its private half."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    private_key: str = Field(
        ...,
        description="Private scalar as 64 lowercase hex characters.",
    )
    public_key: str = Field(
        ...,
        description="Hex-encoded X9.62 public point (compressed or uncompressed).",
    )
    did_prefix_chars: int = Field(
        default=32,
        gt=0,
        exclude=True,
        description="Public key characters embedded in the display DID.",
    )

    @field_validator("private_key", mode="before")
    @classmethod
    def _check_private_key(cls, value: object) -> str:
        _parse_private_scalar(value)
        return str(value).lower()

    @field_validator("public_key", mode="before")
    @classmethod
    def _check_public_key(cls, value: object) -> str:
        if not isinstance(value, str):
            raise InvalidPublicKeyError("Public key must be a hex string")
        load_public_key(value)
        candidate = value.strip().lower()
        return candidate[2:] if candidate.startswith("0x") else candidate

    @model_validator(mode="after")
    def _check_correspondence(self) -> "KeyPair":
        derived = derive_public_key(self.private_key, compressed=False)
        if not _same_point(derived, self.public_key):
            raise ValueError("Public key does not correspond to the private key")
        return self

    @property
    def did(self) -> str:
        """Display identifier derived from the public key."""
        return key_did(self.public_key, prefix_chars=self.did_prefix_chars)


def derive_key_pair(
    private_key_hex: str, *, settings: SigDebugSettings | None = None
) -> KeyPair:
    """Build a :class:`KeyPair` from a caller-supplied private key.

    Raises:
        InvalidKeyError: If the private key is malformed or out of range.
    """
    settings = settings or get_settings()
    public_key = derive_public_key(private_key_hex, settings=settings)
    return KeyPair(
        private_key=private_key_hex,
        public_key=public_key,
        did_prefix_chars=settings.did_prefix_chars,
    )


def generate(*, settings: SigDebugSettings | None = None) -> KeyPair:
    """Generate a fresh key pair from the OpenSSL CSPRNG.

    The scalar is drawn uniformly from ``[1, n-1]`` by
    :func:`cryptography.hazmat.primitives.asymmetric.ec.generate_private_key`.
    """
    settings = settings or get_settings()
    private_key = ec.generate_private_key(CURVE)
    pair = KeyPair(
        private_key=private_key_to_hex(private_key),
        public_key=encode_public_key(
            private_key.public_key(), compressed=settings.compressed_public_keys
        ),
        did_prefix_chars=settings.did_prefix_chars,
    )
    logger.debug("Generated key pair %s", pair.did)
    return pair
