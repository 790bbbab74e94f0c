"""Configuration management for the user management service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

from .models import UserPayload
from .validation import parse_user_payload, validate_user_payload

logger = logging.getLogger("userapi.config")

DEVELOPMENT_API_KEY = "dev-key-change-me"

DEFAULT_SEED_USERS: Tuple[UserPayload, ...] = (
    UserPayload(name="Ada Lovelace", email="ada@example.com", age=28),
    UserPayload(name="Alan Turing", email="alan@example.com", age=41),
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    api_key: Optional[str] = None
    environment: str = "development"
    log_level: str = "INFO"
    docs_enabled: bool = True
    seed_enabled: bool = True
    seed_users: Tuple[UserPayload, ...] = field(default=DEFAULT_SEED_USERS)

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def masked_api_key(self) -> str:
        if not self.api_key_configured:
            return "<not configured>"
        assert self.api_key is not None
        if len(self.api_key) <= 4:
            return "*" * len(self.api_key)
        return self.api_key[:4] + "*" * (len(self.api_key) - 4)


def _env_flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value {value!r}")


def _coerce_flag(value: object, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _env_flag(value, False)
    raise ValueError(f"Configuration value {name!r} must be a boolean")


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the YAML configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "service.yaml").resolve(strict=False)
    return candidate


def _parse_seed_users(raw: object) -> Tuple[UserPayload, ...]:
    if not isinstance(raw, list):
        raise ValueError("'seed_users' must be a list of {name, email, age} entries")

    users = []
    seen = set()
    for index, item in enumerate(raw):
        errors = validate_user_payload(item)
        if errors is not None:
            details = "; ".join(f"{key}: {', '.join(messages)}" for key, messages in errors.items())
            raise ValueError(f"Invalid seed user at index {index}: {details}")
        payload = parse_user_payload(item)
        if payload.email in seen:
            raise ValueError(f"Duplicate seed user email {payload.email!r}")
        seen.add(payload.email)
        users.append(payload)
    return tuple(users)


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Read the YAML configuration file, returning an empty mapping if it is absent."""
    if not config_path.exists():
        return {}

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Configuration file {config_path} is not valid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping at the top level")
    return raw


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    *,
    config_path: Optional[Path] = None,
) -> Settings:
    """Build :class:`Settings` from the YAML file overlaid with environment variables."""
    if env is None:
        env = os.environ

    path = config_path or resolve_config_path(env.get("USER_API_CONFIG"))
    data = load_config_file(path)

    environment = str(env.get("USER_API_ENV") or data.get("environment") or "development").strip().lower()
    log_level = str(env.get("USER_API_LOG_LEVEL") or data.get("log_level") or "INFO").upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log level {log_level!r}; expected one of {', '.join(_LOG_LEVELS)}")

    api_key = env.get("USER_API_KEY")
    if api_key is None and data.get("api_key") is not None:
        api_key = str(data["api_key"])
    if api_key is None and environment == "development":
        logger.warning("No API key configured; using the development default key")
        api_key = DEVELOPMENT_API_KEY

    # Docs default to on only in development.
    docs_enabled = _coerce_flag(data.get("docs_enabled", environment == "development"), "docs_enabled")
    docs_enabled = _env_flag(env.get("USER_API_DOCS"), docs_enabled)

    seed_enabled = _coerce_flag(data.get("seed", True), "seed")
    seed_enabled = _env_flag(env.get("USER_API_SEED"), seed_enabled)

    seed_users = DEFAULT_SEED_USERS
    if "seed_users" in data:
        seed_users = _parse_seed_users(data["seed_users"])

    return Settings(
        api_key=api_key,
        environment=environment,
        log_level=log_level,
        docs_enabled=docs_enabled,
        seed_enabled=seed_enabled,
        seed_users=seed_users,
    )


__all__ = [
    "DEFAULT_SEED_USERS",
    "DEVELOPMENT_API_KEY",
    "Settings",
    "load_config_file",
    "load_settings",
    "resolve_config_path",
]
