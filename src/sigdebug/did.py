"""DID string helpers for display and input checking.

These helpers only inspect identifier strings. Resolving a DID to a public key
is left to the caller, which hands the key to the verifier directly.
"""

from __future__ import annotations

import re
import secrets

from pydantic import BaseModel, ConfigDict

__all__ = [
    "DIDValidation",
    "validate_did",
    "validate_did_with_error",
    "format_did",
    "extract_address_from_did",
    "generate_did",
    "key_did",
]

DID_ETHR_PREFIX = "did:ethr:"
_DID_ETHR_PATTERN = re.compile(r"^did:ethr:0x[a-fA-F0-9]{40}$")
_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


class DIDValidation(BaseModel):
    """Outcome of :func:`validate_did_with_error`."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    error: str | None = None


def validate_did(did: object) -> bool:
    """Return ``True`` if ``did`` is a ``did:ethr:`` identifier."""
    if not did or not isinstance(did, str):
        return False
    return bool(_DID_ETHR_PATTERN.match(did.strip()))


def validate_did_with_error(did: object) -> DIDValidation:
    """Validate ``did`` and explain the first rule it breaks."""
    if not did or not isinstance(did, str):
        return DIDValidation(is_valid=False, error="DID is required")

    trimmed = did.strip()
    if not trimmed:
        return DIDValidation(is_valid=False, error="DID cannot be empty")
    if not trimmed.startswith(DID_ETHR_PREFIX):
        return DIDValidation(is_valid=False, error='DID must start with "did:ethr:"')
    if not trimmed.startswith(f"{DID_ETHR_PREFIX}0x"):
        return DIDValidation(
            is_valid=False,
            error='DID must contain Ethereum address starting with "0x"',
        )

    address = trimmed[len(DID_ETHR_PREFIX) :]
    if len(address) != 42:
        return DIDValidation(
            is_valid=False,
            error="Ethereum address must be 42 characters (0x + 40 hex chars)",
        )
    if not _ADDRESS_PATTERN.match(address):
        return DIDValidation(
            is_valid=False,
            error="Invalid Ethereum address format (must be hex characters)",
        )
    return DIDValidation(is_valid=True)


def format_did(did: str, prefix_length: int = 15, suffix_length: int = 8) -> str:
    """Shorten the middle of ``did`` for display."""
    if not did or len(did) <= prefix_length + suffix_length:
        return did
    return f"{did[:prefix_length]}...{did[len(did) - suffix_length :]}"


def extract_address_from_did(did: str) -> str | None:
    """Return the Ethereum address inside a valid ``did:ethr:`` identifier."""
    if not validate_did(did):
        return None
    return did.strip()[len(DID_ETHR_PREFIX) :]


def generate_did() -> str:
    """Return a random ``did:ethr:`` identifier for demo agents."""
    return f"{DID_ETHR_PREFIX}0x{secrets.token_hex(20)}"


def key_did(public_key_hex: str, prefix_chars: int = 32) -> str:
    """Return the truncated ``did:key:`` label shown next to a key pair."""
    return f"did:key:{public_key_hex[:prefix_chars]}..."
