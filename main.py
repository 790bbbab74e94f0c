"""Command-line interface for the user management service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import Sequence

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Run `pip install -e .` to install dependencies."
    ) from exc

from userapi.config import Settings, load_settings
from userapi.request_logging import configure_logging
from userapi.security import API_KEY_HEADER

logger = logging.getLogger("userapi.main")

_DEFAULT_SERVICE_URL = "http://127.0.0.1:8000"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User management service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the API")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port for the API (default: 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Restart the server when code changes")

    list_parser = subparsers.add_parser("list-users", help="List users stored by a running service")
    list_parser.add_argument(
        "--service-url",
        default=None,
        help=f"Base URL of a running service (default: {_DEFAULT_SERVICE_URL})",
    )
    list_parser.add_argument(
        "--api-key",
        default=None,
        help="API key to send; defaults to the configured USER_API_KEY",
    )

    subparsers.add_parser("check-config", help="Print the resolved configuration")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "list-users", "check-config"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(settings: Settings, *, host: str, port: int, reload: bool) -> None:
    import uvicorn

    from userapi.api import create_app

    logger.info("Starting user API on http://%s:%s (environment=%s)", host, port, settings.environment)
    if reload:
        uvicorn.run(
            "userapi:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level=settings.log_level.lower(),
        )
        return

    uvicorn.run(create_app(settings=settings), host=host, port=port, log_level=settings.log_level.lower())


def _list_users(settings: Settings, *, service_url: str | None, api_key: str | None) -> int:
    base_url = (service_url or os.getenv("USER_API_URL") or _DEFAULT_SERVICE_URL).rstrip("/")
    key = api_key or settings.api_key
    if not key:
        print("No API key available. Pass --api-key or set USER_API_KEY.")
        return 1

    try:
        response = httpx.get(f"{base_url}/api/users", headers={API_KEY_HEADER: key}, timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Failed to contact user service: {exc}")
        return 1

    if response.status_code == 401:
        print("Authentication failed. Verify the configured API key.")
        return 1
    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return 1

    try:
        users = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return 1

    if not users:
        print("No users are currently registered.")
        return 0

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':<36}  {'Name':<24}  {'Email':<32}  {'Age':>3}")
    print("-" * 100)
    for user in users:
        print(f"{user['id']:<36}  {user['name']:<24}  {user['email']:<32}  {user['age']:>3}")
    return 0


def _check_config(settings: Settings) -> int:
    print(f"Environment:   {settings.environment}")
    print(f"Log level:     {settings.log_level}")
    print(f"API key:       {settings.masked_api_key()}")
    print(f"Docs enabled:  {settings.docs_enabled}")
    print(f"Seed users:    {len(settings.seed_users) if settings.seed_enabled else 'disabled'}")
    if not settings.api_key_configured:
        print("No API key is configured; protected requests will fail with 500.")
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)

    if args.command == "serve":
        _serve(settings, host=args.host, port=args.port, reload=args.reload)
        return 0
    if args.command == "list-users":
        return _list_users(settings, service_url=args.service_url, api_key=args.api_key)
    if args.command == "check-config":
        return _check_config(settings)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
