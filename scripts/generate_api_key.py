"""Generate a shared secret for the X-API-KEY header."""

from __future__ import annotations

import argparse
import secrets


def generate_api_key(length: int = 32) -> str:
    if length < 16:
        raise ValueError("API keys must use at least 16 random bytes")
    return secrets.token_urlsafe(length)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a user API key")
    parser.add_argument(
        "--length",
        type=int,
        default=32,
        help="Number of random bytes to encode (default: 32)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(list(argv) if argv is not None else None)

    try:
        api_key = generate_api_key(args.length)
    except ValueError as exc:
        print(f"Failed to generate API key: {exc}")
        return 1

    print("Generated API key:")
    print(api_key)
    print("\nExport it as USER_API_KEY before starting the service.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
