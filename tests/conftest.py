"""Shared fixtures: settings, a recording display sink and env isolation."""

import os
from pathlib import Path
from typing import List
from zoneinfo import ZoneInfo

import pytest

from graphdash.config import Settings


REQUIRED_ENV = {
    "CLIENT_ID": "client-id",
    "CLIENT_SECRET": "client-secret-value",
    "TENANT_ID": "tenant-id",
    "ORGANISER_EMAIL": "organiser@example.com",
    "ROOM_EMAIL": "room1@example.com",
    "ENDPOINT": "https://hooks.example.com/webhook",
    "PORT": "8080",
}

OPTIONAL_ENV = ["WEBHOOK_HOST", "LOCAL_TIMEZONE", "LOG_LEVEL", "LOG_FILE", "ENV_FILE"]


class RecordingSink:
    def __init__(self) -> None:
        self.writes: List[str] = []
        self.clears = 0

    def write(self, text: str) -> None:
        self.writes.append(text)

    def clear(self) -> None:
        self.clears += 1
        self.writes.clear()

    @property
    def text(self) -> str:
        return "\n".join(self.writes)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clean_env(monkeypatch, tmp_path: Path):
    """Empty the relevant env vars and run from a directory without .env files."""
    # load_dotenv writes into os.environ; keep those writes inside the test
    monkeypatch.setattr(os, "environ", os.environ.copy())
    for name in list(REQUIRED_ENV) + OPTIONAL_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def full_env(clean_env, monkeypatch):
    for name, value in REQUIRED_ENV.items():
        monkeypatch.setenv(name, value)
    return clean_env


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        client_id="client-id",
        client_secret="client-secret-value",
        tenant_id="tenant-id",
        organiser_email="organiser@example.com",
        room_email="room1@example.com",
        endpoint="https://hooks.example.com/webhook",
        port=8080,
        webhook_host="127.0.0.1",
        local_timezone=ZoneInfo("UTC"),
        env_file=str(tmp_path / ".env"),
        log_level="INFO",
        log_file=str(tmp_path / "graphdash.log"),
    )
