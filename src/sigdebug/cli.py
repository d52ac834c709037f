"""Command-line utilities for sigdebug."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .errors import SigDebugError
from .keys import derive_public_key, generate
from .signer import sign
from .verifier import verify


def _read_stdin() -> str | None:
    """Read JSON payload from stdin if available."""
    try:
        if sys.stdin and not sys.stdin.isatty():
            return sys.stdin.read()
    except IOError as e:
        print(f"Error reading stdin: {e}", file=sys.stderr)
    return None


def _load_payload(path: str | None, stdin_payload: str | None) -> object:
    """Load a JSON payload from file or stdin."""
    if path:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    if stdin_payload:
        return json.loads(stdin_payload)
    raise ValueError("No input provided. Use --input or pipe JSON via stdin.")


def _emit(data: object) -> None:
    print(json.dumps(data, separators=(",", ":")))


def _cmd_keygen(args: argparse.Namespace) -> int:
    pair = generate()
    _emit(
        {
            "private_key": pair.private_key,
            "public_key": pair.public_key,
            "did": pair.did,
        }
    )
    return 0


def _cmd_derive(args: argparse.Namespace) -> int:
    _emit({"public_key": derive_public_key(args.private_key)})
    return 0


def _cmd_sign(args: argparse.Namespace) -> int:
    payload = _load_payload(args.input, _read_stdin())
    _emit(sign(payload, args.key).model_dump(mode="json"))
    return 0


def _cmd_verify(args: argparse.Namespace) -> int:
    payload = _load_payload(args.input, _read_stdin())
    result = verify(payload, args.signature, args.public_key)
    if not args.quiet:
        _emit(result.model_dump(mode="json"))
    return 0 if result.is_valid else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigdebug",
        description="Generate keys, sign and verify canonical JSON with secp256k1.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging on stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    keygen = sub.add_parser("keygen", help="Generate a fresh key pair.")
    keygen.set_defaults(handler=_cmd_keygen)

    derive = sub.add_parser("derive", help="Derive the public key of a private key.")
    derive.add_argument("private_key", help="64-character hex private key.")
    derive.set_defaults(handler=_cmd_derive)

    sign_cmd = sub.add_parser("sign", help="Sign a JSON payload.")
    sign_cmd.add_argument("--key", "-k", required=True, help="Private key hex.")
    sign_cmd.add_argument(
        "--input",
        "-i",
        help="Path to JSON payload file. If omitted, reads from stdin.",
    )
    sign_cmd.set_defaults(handler=_cmd_sign)

    verify_cmd = sub.add_parser(
        "verify", help="Verify a signature and print the step trace."
    )
    verify_cmd.add_argument("--signature", "-s", required=True, help="DER signature hex.")
    verify_cmd.add_argument("--public-key", "-k", required=True, help="Public key hex.")
    verify_cmd.add_argument(
        "--input",
        "-i",
        help="Path to JSON payload file. If omitted, reads from stdin.",
    )
    verify_cmd.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Quiet mode: suppress output, just return exit code.",
    )
    verify_cmd.set_defaults(handler=_cmd_verify)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the sigdebug command line."""
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:  # pragma: no cover - controlled via tests
        exit_code = int(exc.code) if isinstance(exc.code, int) else 1
        return 0 if exit_code == 0 else 1

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        return int(args.handler(args))
    except (SigDebugError, ValueError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
