"""Tests for step-annotated signature verification."""

from __future__ import annotations

import logging

import pytest
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from sigdebug.errors import SignatureDecodeError
from sigdebug.keys import CURVE_ORDER, derive_public_key
from sigdebug.settings import SigDebugSettings
from sigdebug.signer import sign
from sigdebug.verifier import decode_signature, verify

STEP_TITLES = [
    "Input Validation",
    "Public Key Parsing",
    "Payload Canonicalization",
    "ECDSA Signature Verification",
    "Final Validation",
]


def test_successful_verification_has_five_success_steps(private_key: str) -> None:
    payload = {"amount": 100, "currency": "USDC", "meta": {"run": "r-1"}}
    signed = sign(payload, private_key)

    result = verify(payload, signed.signature, signed.public_key)

    assert result.is_valid
    assert result.error is None
    assert not result.fatal
    assert [step.title for step in result.steps] == STEP_TITLES
    assert [step.step for step in result.steps] == [1, 2, 3, 4, 5]
    assert all(step.status == "success" for step in result.steps)
    assert result.steps[0].details == "All inputs present and valid"
    assert result.steps[3].details == "Signature verification succeeded"
    assert result.final_step is not None and result.final_step.status == "success"


def test_key_order_independent_round_trip(private_key: str) -> None:
    public_key = derive_public_key(private_key)
    first = sign({"b": 2, "a": 1}, private_key)
    second = sign({"a": 1, "b": 2}, private_key)

    assert first.payload == second.payload
    assert verify({"a": 1, "b": 2}, first.signature, public_key).is_valid
    assert verify({"b": 2, "a": 1}, second.signature, public_key).is_valid


def test_compressed_public_key_verifies(private_key: str) -> None:
    signed = sign({"x": 1}, private_key)
    compressed = derive_public_key(private_key, compressed=True)
    assert verify({"x": 1}, signed.signature, compressed).is_valid


def test_canonicalization_step_shows_hash_preview(private_key: str) -> None:
    signed = sign({"x": 1}, private_key)
    result = verify({"x": 1}, signed.signature, signed.public_key)
    assert result.steps[2].details == f"Payload hash: {signed.digest[:32]}..."

    short = verify(
        {"x": 1},
        signed.signature,
        signed.public_key,
        settings=SigDebugSettings(hash_preview_chars=8, key_preview_chars=4),
    )
    assert short.steps[2].details == f"Payload hash: {signed.digest[:8]}..."
    assert short.steps[1].details == f"Public key parsed successfully ({signed.public_key[:4]}...)"


@pytest.mark.parametrize(
    "tampered",
    [
        {"amount": 101, "to": "agent-b"},
        {"amount": 100, "to": "agent-c"},
        {"amount": 100},
        {"amount": 100, "to": "agent-b", "extra": True},
    ],
)
def test_tampered_payload_is_rejected_without_error(private_key: str, tampered: dict) -> None:
    signed = sign({"amount": 100, "to": "agent-b"}, private_key)

    result = verify(tampered, signed.signature, signed.public_key)

    assert result.is_valid is False
    assert result.error is None
    assert len(result.steps) == 5
    assert result.steps[3].status == "error"
    assert result.steps[3].details == "Signature does not match payload"
    assert result.steps[4].status == "error"


def test_wrong_public_key_is_rejected(private_key: str, other_private_key: str) -> None:
    signed = sign({"a": 1}, private_key)
    result = verify({"a": 1}, signed.signature, derive_public_key(other_private_key))
    assert result.is_valid is False
    assert result.steps[3].status == "error"


@pytest.mark.parametrize(
    ("payload", "signature", "public_key"),
    [
        (None, "3006020101020101", "02" + "11" * 32),
        ({"a": 1}, "", "02" + "11" * 32),
        ({"a": 1}, "3006020101020101", ""),
        ({"a": 1}, None, "02" + "11" * 32),
    ],
)
def test_missing_inputs_stop_at_step_one(payload: object, signature: object, public_key: object) -> None:
    result = verify(payload, signature, public_key)  # type: ignore[arg-type]

    assert result.is_valid is False
    assert result.error == "Missing required parameters"
    assert len(result.steps) == 1
    assert result.steps[0].status == "error"


@pytest.mark.parametrize("public_key", ["zz", "04" + "00" * 64, "1234", "02" + "ff" * 32])
def test_malformed_public_key_stops_at_step_two(private_key: str, public_key: str) -> None:
    signed = sign({"a": 1}, private_key)

    result = verify({"a": 1}, signed.signature, public_key)

    assert result.is_valid is False
    assert result.fatal
    assert result.error == "Invalid public key format"
    assert len(result.steps) == 2
    assert result.steps[1].status == "error"
    assert result.steps[1].details


def test_unserialisable_payload_stops_at_step_three(private_key: str) -> None:
    signed = sign({"a": 1}, private_key)

    result = verify({"a": {1, 2}}, signed.signature, signed.public_key)

    assert result.error == "Payload is not JSON-serializable"
    assert len(result.steps) == 3
    assert result.steps[2].status == "error"


@pytest.mark.parametrize("signature", ["not-hex", "abc", "deadbeef", "3006020101"])
def test_malformed_signature_is_non_fatal(private_key: str, signature: str) -> None:
    public_key = derive_public_key(private_key)

    result = verify({"a": 1}, signature, public_key)

    assert result.is_valid is False
    assert result.error is None
    assert len(result.steps) == 5
    assert result.steps[3].status == "error"
    assert "Signature is not valid" in (result.steps[3].details or "")
    assert result.steps[4].status == "error"


def test_high_s_signature_still_verifies(private_key: str) -> None:
    signed = sign({"a": 1}, private_key)
    r, s = decode_signature(signed.signature)
    high_s = encode_dss_signature(r, CURVE_ORDER - s).hex()

    assert verify({"a": 1}, high_s, signed.public_key).is_valid


def test_decode_signature_rejects_garbage() -> None:
    with pytest.raises(SignatureDecodeError):
        decode_signature("zz")
    with pytest.raises(SignatureDecodeError):
        decode_signature("deadbeef")


def test_result_serialises_for_display(private_key: str) -> None:
    signed = sign({"a": 1}, private_key)
    dumped = verify({"a": 1}, signed.signature, signed.public_key).model_dump(mode="json")

    assert dumped["is_valid"] is True
    assert dumped["error"] is None
    assert dumped["steps"][0] == {
        "step": 1,
        "title": "Input Validation",
        "description": "Validating signature and public key format",
        "status": "success",
        "details": "All inputs present and valid",
    }


def test_fatal_errors_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="sigdebug.verifier"):
        verify({"a": 1}, "3006020101020101", "zz")
    assert "Verification aborted at step 2" in caplog.text


def test_oversized_integer_stops_at_step_three(private_key: str) -> None:
    signed = sign({"a": 1}, private_key)

    result = verify({"a": 10**5000}, signed.signature, signed.public_key)

    assert result.is_valid is False
    assert result.error == "Payload is not JSON-serializable"
    assert len(result.steps) == 3
    assert result.steps[2].status == "error"


def test_deeply_nested_payload_stops_at_step_three(private_key: str) -> None:
    signed = sign({"a": 1}, private_key)
    nested: list[object] = []
    for _ in range(5000):
        nested = [nested]

    result = verify(nested, signed.signature, signed.public_key)

    assert result.error == "Payload is not JSON-serializable"
    assert len(result.steps) == 3
    assert "too deep" in (result.steps[2].details or "")


def test_public_key_with_embedded_space_is_rejected(private_key: str) -> None:
    signed = sign({"a": 1}, private_key)
    spaced = signed.public_key[:10] + " " + signed.public_key[10:]

    result = verify({"a": 1}, signed.signature, spaced)

    assert result.error == "Invalid public key format"
    assert len(result.steps) == 2
    assert result.steps[1].details == "Public key contains non-hex characters"


def test_signature_with_embedded_space_is_rejected(private_key: str) -> None:
    signed = sign({"a": 1}, private_key)
    spaced = signed.signature[:10] + " " + signed.signature[10:]

    result = verify({"a": 1}, spaced, signed.public_key)

    assert result.is_valid is False
    assert result.error is None
    assert len(result.steps) == 5
    assert "non-hex characters" in (result.steps[3].details or "")
