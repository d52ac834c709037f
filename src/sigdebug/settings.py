"""Environment-backed settings primitives for :mod:`sigdebug`."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["PublicKeyFormat", "SigDebugSettings", "get_settings"]

PublicKeyFormat = Literal["uncompressed", "compressed"]

_DEFAULT_PUBLIC_KEY_FORMAT: PublicKeyFormat = "uncompressed"
_DEFAULT_HASH_PREVIEW_CHARS = 32
_DEFAULT_KEY_PREVIEW_CHARS = 16
_DEFAULT_DID_PREFIX_CHARS = 32


class SigDebugSettings(BaseSettings):
    """Expose environment-derived configuration knobs for the debugger.

    All lookups of ``SIGDEBUG_*`` variables go through this class. Malformed
    values never abort start-up; they fall back to the inline defaults.

    Attributes:
        public_key_format: Point encoding used for emitted public keys.
            ``uncompressed`` yields 65-byte keys, ``compressed`` 33-byte keys.
        hash_preview_chars: Number of digest characters shown in the
            canonicalization step of a verification trace.
        key_preview_chars: Number of public key characters shown in the
            parsing step of a verification trace.
        did_prefix_chars: Number of public key characters embedded in the
            display DID of a key pair.
    """

    public_key_format: PublicKeyFormat = Field(
        default=_DEFAULT_PUBLIC_KEY_FORMAT, alias="SIGDEBUG_PUBLIC_KEY_FORMAT"
    )
    hash_preview_chars: int = Field(
        default=_DEFAULT_HASH_PREVIEW_CHARS, alias="SIGDEBUG_HASH_PREVIEW_CHARS"
    )
    key_preview_chars: int = Field(
        default=_DEFAULT_KEY_PREVIEW_CHARS, alias="SIGDEBUG_KEY_PREVIEW_CHARS"
    )
    did_prefix_chars: int = Field(
        default=_DEFAULT_DID_PREFIX_CHARS, alias="SIGDEBUG_DID_PREFIX_CHARS"
    )

    model_config = SettingsConfigDict(
        env_file=None, extra="ignore", populate_by_name=True
    )

    @field_validator("public_key_format", mode="before")
    @classmethod
    def _parse_public_key_format(cls, value: object) -> str:
        """Normalise the point encoding name, tolerating unknown values.

        Args:
            value: Raw environment value.

        Returns:
            ``"compressed"`` or ``"uncompressed"``.
        """

        if isinstance(value, str) and value.strip().lower() in (
            "compressed",
            "uncompressed",
        ):
            return value.strip().lower()
        return _DEFAULT_PUBLIC_KEY_FORMAT

    @field_validator(
        "hash_preview_chars",
        "key_preview_chars",
        "did_prefix_chars",
        mode="before",
    )
    @classmethod
    def _parse_preview_length(cls, value: object, info: ValidationInfo) -> int:
        """Parse positive integer fields while tolerating malformed input."""

        defaults = {
            "hash_preview_chars": _DEFAULT_HASH_PREVIEW_CHARS,
            "key_preview_chars": _DEFAULT_KEY_PREVIEW_CHARS,
            "did_prefix_chars": _DEFAULT_DID_PREFIX_CHARS,
        }
        default = defaults[info.field_name or "hash_preview_chars"]
        parsed: int | None = None
        if isinstance(value, bool):
            parsed = None
        elif isinstance(value, int):
            parsed = value
        elif isinstance(value, float) and value.is_integer():
            parsed = int(value)
        elif isinstance(value, str):
            try:
                parsed = int(value.strip())
            except ValueError:
                parsed = None
        if parsed is None or parsed <= 0:
            return default
        return parsed

    @property
    def compressed_public_keys(self) -> bool:
        """Return ``True`` when public keys are emitted in compressed form."""

        return self.public_key_format == "compressed"


def get_settings() -> SigDebugSettings:
    """Return a :class:`SigDebugSettings` instance.

    Returns:
        Settings parsed from environment variables.
    """

    return SigDebugSettings()
