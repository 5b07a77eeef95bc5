from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    tenant_id: str
    organiser_email: str
    room_email: str
    endpoint: str
    port: int
    webhook_host: str
    local_timezone: ZoneInfo
    env_file: str
    log_level: str
    log_file: str


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        raise ValueError(f"Missing required env var: {name}")
    return value.strip()


def _get_int(name: str, default: int | None = None) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        if default is None:
            raise ValueError(f"Missing required env var: {name}")
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {value!r}") from None


def _get_str(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value or default


def _get_timezone(name: str, default: str) -> ZoneInfo:
    value = _get_str(name, default)
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone for {name}: {value!r}") from None


def load_settings() -> Settings:
    # .env.local takes precedence over .env; the process environment beats both
    load_dotenv(".env.local", override=False)
    load_dotenv(".env", override=False)

    client_id = _require_env("CLIENT_ID")
    client_secret = _require_env("CLIENT_SECRET")
    tenant_id = _require_env("TENANT_ID")
    organiser_email = _require_env("ORGANISER_EMAIL")
    room_email = _require_env("ROOM_EMAIL")
    endpoint = _require_env("ENDPOINT")
    port = _get_int("PORT")

    webhook_host = _get_str("WEBHOOK_HOST", "0.0.0.0")
    local_timezone = _get_timezone("LOCAL_TIMEZONE", "UTC")
    env_file = _get_str("ENV_FILE", ".env")

    log_level = _get_str("LOG_LEVEL", "INFO").upper()
    log_file = _get_str("LOG_FILE", "graphdash.log")

    return Settings(
        client_id=client_id,
        client_secret=client_secret,
        tenant_id=tenant_id,
        organiser_email=organiser_email,
        room_email=room_email,
        endpoint=endpoint,
        port=port,
        webhook_host=webhook_host,
        local_timezone=local_timezone,
        env_file=env_file,
        log_level=log_level,
        log_file=log_file,
    )
