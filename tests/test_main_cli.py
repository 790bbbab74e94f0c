from __future__ import annotations

import httpx
import pytest

import main
from main import _check_config, _list_users, _parse_args
from userapi.config import Settings


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "0.0.0.0", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "0.0.0.0"
    assert args.port == 8080
    assert args.reload is False


def test_list_users_subcommand_options() -> None:
    args = _parse_args(["list-users", "--service-url", "http://svc:9000", "--api-key", "k"])
    assert args.command == "list-users"
    assert args.service_url == "http://svc:9000"
    assert args.api_key == "k"


def test_check_config_subcommand_available() -> None:
    args = _parse_args(["check-config"])
    assert args.command == "check-config"


def test_check_config_fails_without_key(capsys: pytest.CaptureFixture[str]) -> None:
    assert _check_config(Settings(api_key=None)) == 1
    assert "No API key is configured" in capsys.readouterr().out

    assert _check_config(Settings(api_key="configured-key")) == 0
    assert "conf**********" in capsys.readouterr().out


def test_list_users_prints_table(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    captured = {}

    def fake_get(url, headers, timeout):
        captured.update({"url": url, "headers": headers})
        return httpx.Response(
            200,
            json=[{"id": "1234", "name": "Ada Lovelace", "email": "ada@example.com", "age": 28}],
        )

    monkeypatch.setattr(main.httpx, "get", fake_get)

    result = _list_users(Settings(api_key="secret"), service_url="http://svc:9000/", api_key=None)

    assert result == 0
    assert captured["url"] == "http://svc:9000/api/users"
    assert captured["headers"] == {"X-API-KEY": "secret"}
    output = capsys.readouterr().out
    assert "1 user(s) found" in output
    assert "ada@example.com" in output


def test_list_users_reports_authentication_failure(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(main.httpx, "get", lambda url, headers, timeout: httpx.Response(401, text="nope"))

    result = _list_users(Settings(api_key="secret"), service_url=None, api_key="wrong")

    assert result == 1
    assert "Authentication failed" in capsys.readouterr().out


def test_list_users_requires_a_key(capsys: pytest.CaptureFixture[str]) -> None:
    assert _list_users(Settings(api_key=None), service_url=None, api_key=None) == 1
    assert "No API key available" in capsys.readouterr().out
