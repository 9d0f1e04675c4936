"""Load settings and env configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from hackathon_recs.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = ROOT_DIR / "data"
EXPORTS_DIR: Path = ROOT_DIR / "exports"
# One store file per browser session.
SESSIONS_DIR: Path = DATA_DIR / "sessions"


@dataclass
class Settings:
    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 15.0
    max_attempts: int = 3
    countdown_refresh_seconds: int = 60


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)
        return {}
    return data


def load_settings(path: Path | None = None) -> Settings:
    """Settings from ``config/settings.yaml``, overridden by env vars."""
    data = _read_yaml(path or SETTINGS_PATH)
    api = data.get("api", {}) or {}
    display = data.get("display", {}) or {}

    settings = Settings()
    settings.api_base_url = str(api.get("base_url", settings.api_base_url))
    settings.request_timeout = float(api.get("timeout", settings.request_timeout))
    settings.max_attempts = int(api.get("max_attempts", settings.max_attempts))
    settings.countdown_refresh_seconds = int(
        display.get("countdown_refresh_seconds", settings.countdown_refresh_seconds)
    )

    if get_env("API_BASE_URL"):
        settings.api_base_url = get_env("API_BASE_URL")
    if get_env("REQUEST_TIMEOUT"):
        try:
            settings.request_timeout = float(get_env("REQUEST_TIMEOUT"))
        except ValueError:
            log.warning("REQUEST_TIMEOUT=%r is not a number — keeping %.1fs",
                        get_env("REQUEST_TIMEOUT"), settings.request_timeout)

    settings.api_base_url = settings.api_base_url.rstrip("/")
    return settings


def ensure_dirs() -> None:
    for d in (DATA_DIR, SESSIONS_DIR, EXPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)
