"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from userapi.api import create_app
from userapi.config import Settings
from userapi.store import UserStore

API_KEY = "tests-api-key"


@pytest.fixture()
def store() -> UserStore:
    return UserStore()


@pytest.fixture()
def settings() -> Settings:
    return Settings(api_key=API_KEY, environment="test", seed_enabled=False)


@pytest.fixture()
def client(settings: Settings, store: UserStore):
    app = create_app(settings=settings, store=store)
    with TestClient(app, headers={"X-API-KEY": API_KEY}) as test_client:
        yield test_client


@pytest.fixture()
def anonymous_client(settings: Settings, store: UserStore):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as test_client:
        yield test_client
