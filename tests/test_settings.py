from pathlib import Path

import pytest

from genesis_comps.exceptions import ConfigurationError
from genesis_comps.settings import GenesisSettings

ENV_KEYS = (
    "PROPELIO_EMAIL",
    "PROPELIO_PASSWORD",
    "GENESIS_BASE_URL",
    "HEADLESS",
    "SLOW_MO",
    "TIMEOUT",
    "SESSION_PATH",
    "OUTPUT_DIR",
    "DELAY_SCALE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize("present", [(), ("PROPELIO_EMAIL",), ("PROPELIO_PASSWORD",)])
def test_missing_credentials_fail_at_startup(monkeypatch, present):
    for key in present:
        monkeypatch.setenv(key, "x")

    with pytest.raises(ConfigurationError) as excinfo:
        GenesisSettings.from_env(load_env_file=False)

    for key in ("PROPELIO_EMAIL", "PROPELIO_PASSWORD"):
        assert (key in str(excinfo.value)) is (key not in present)


def test_empty_credential_counts_as_missing(monkeypatch):
    monkeypatch.setenv("PROPELIO_EMAIL", "agent@example.com")
    monkeypatch.setenv("PROPELIO_PASSWORD", "")

    with pytest.raises(ConfigurationError, match="PROPELIO_PASSWORD"):
        GenesisSettings.from_env(load_env_file=False)


def test_defaults_and_overrides(monkeypatch):
    monkeypatch.setenv("PROPELIO_EMAIL", "agent@example.com")
    monkeypatch.setenv("PROPELIO_PASSWORD", "s3cret")
    monkeypatch.setenv("HEADLESS", "false")
    monkeypatch.setenv("SESSION_PATH", "/tmp/genesis/session.json")

    settings = GenesisSettings.from_env(load_env_file=False)

    assert settings.email == "agent@example.com"
    assert settings.headless is False
    assert settings.session_path == Path("/tmp/genesis/session.json")
    assert settings.login_url.endswith("/login")
    assert settings.search_url.endswith("/search/")


def test_non_numeric_timeout_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("PROPELIO_EMAIL", "agent@example.com")
    monkeypatch.setenv("PROPELIO_PASSWORD", "s3cret")
    monkeypatch.setenv("TIMEOUT", "soon")

    with pytest.raises(ConfigurationError, match="TIMEOUT"):
        GenesisSettings.from_env(load_env_file=False)
