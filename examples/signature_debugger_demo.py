#!/usr/bin/env python3
"""
Signature Debugger Example

This example demonstrates:
- Generating a secp256k1 key pair
- Signing an X402 request payload
- Verifying it and printing the step trace
- Detecting a tampered payload
"""

from sigdebug.keys import generate
from sigdebug.signer import sign
from sigdebug.verifier import verify


def print_trace(result):
    """Print each verification step on its own line."""
    for step in result.steps:
        print(f"  [{step.status:>7}] {step.step}. {step.title}: {step.details}")
    print(f"  valid={result.is_valid} error={result.error}")


def main():
    """Run the signature debugger demo."""
    pair = generate()
    print(f"Agent identity: {pair.did}")

    payload = {
        "agent_id": "analyst-01",
        "request": {"amount": "25.00", "currency": "USDC", "memo": "market data"},
        "nonce": 7,
    }
    signed = sign(payload, pair.private_key)
    print(f"Canonical payload: {signed.payload}")
    print(f"Signature: {signed.signature[:32]}...")

    print("\nVerifying original payload")
    print_trace(verify(payload, signed.signature, pair.public_key))

    tampered = dict(payload, nonce=8)
    print("\nVerifying tampered payload")
    print_trace(verify(tampered, signed.signature, pair.public_key))


if __name__ == "__main__":
    main()
