"""Export the JSON Schemas of the signing and verification results."""

from __future__ import annotations

import json
from pathlib import Path

from sigdebug.signer import SignatureResult
from sigdebug.verifier import VerificationResult


def main() -> None:
    """Write the JSON Schemas for the public result models to the repository root."""

    output_dir = Path(__file__).resolve().parent.parent
    for model, name in (
        (SignatureResult, "signature_result_schema.json"),
        (VerificationResult, "verification_result_schema.json"),
    ):
        schema = model.model_json_schema()
        (output_dir / name).write_text(json.dumps(schema, indent=2), encoding="utf-8")


if __name__ == "__main__":
    main()
