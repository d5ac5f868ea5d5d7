"""Environment-sourced runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from config.portal import DEFAULT_BASE_URL, LOGIN_PATH, PAGE_LOAD_TIMEOUT_MS, SEARCH_PATH
from genesis_comps.exceptions import ConfigurationError

REQUIRED_ENV_VARS = ("PROPELIO_EMAIL", "PROPELIO_PASSWORD")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    # HEADLESS=new still means headless
    return value == "new" or default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(slots=True)
class GenesisSettings:
    email: str
    password: str
    base_url: str = DEFAULT_BASE_URL
    headless: bool = True
    slow_mo: int = 20
    timeout_ms: int = PAGE_LOAD_TIMEOUT_MS
    viewport: dict[str, int] = field(default_factory=lambda: {"width": 1280, "height": 720})
    executable_path: str | None = None
    session_path: Path = Path("session.json")
    output_dir: Path = Path("property_data")
    block_resources: bool = True
    delay_scale: float = 1.0

    @property
    def login_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{LOGIN_PATH}"

    @property
    def search_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{SEARCH_PATH}"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "GenesisSettings":
        """Build settings from the environment (and ``.env``).

        Missing credentials are a startup failure, not a per-job error.
        """
        if load_env_file:
            load_dotenv()

        missing = [key for key in REQUIRED_ENV_VARS if not os.getenv(key)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        return cls(
            email=os.environ["PROPELIO_EMAIL"],
            password=os.environ["PROPELIO_PASSWORD"],
            base_url=os.getenv("GENESIS_BASE_URL", DEFAULT_BASE_URL),
            headless=_env_bool("HEADLESS", True),
            slow_mo=_env_int("SLOW_MO", 20),
            timeout_ms=_env_int("TIMEOUT", PAGE_LOAD_TIMEOUT_MS),
            viewport={
                "width": _env_int("VIEWPORT_WIDTH", 1280),
                "height": _env_int("VIEWPORT_HEIGHT", 720),
            },
            executable_path=os.getenv("CHROME_PATH") or None,
            session_path=Path(os.getenv("SESSION_PATH", "session.json")),
            output_dir=Path(os.getenv("OUTPUT_DIR", "property_data")),
            block_resources=_env_bool("BLOCK_RESOURCES", True),
            delay_scale=_env_float("DELAY_SCALE", 1.0),
        )
