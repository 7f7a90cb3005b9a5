from __future__ import annotations

import pytest

from storage_provisioner import config


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, "load_dotenv", lambda **_: None)
    for key in config.ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)
    config._load_settings_cached.cache_clear()
    yield
    config._load_settings_cached.cache_clear()


def test_defaults_without_appliance(caplog) -> None:
    settings = config.load_settings()

    assert settings.appliance.base_url is None
    assert settings.appliance.default_pool == "tank"
    assert settings.appliance.verify_tls is True
    assert settings.appliance.timeout_seconds is None
    assert settings.appliance.is_configured is False
    assert "provisioning requests will be refused" in caplog.text


def test_appliance_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APPLIANCE_URL", "HTTPS://nas.example.edu/")
    monkeypatch.setenv("APPLIANCE_API_TOKEN", "tok")
    monkeypatch.setenv("DEFAULT_POOL_NAME", "archive")
    monkeypatch.setenv("APPLIANCE_VERIFY_TLS", "no")
    monkeypatch.setenv("APPLIANCE_TIMEOUT_SECONDS", "12.5")

    settings = config.load_settings()

    assert settings.appliance.base_url == "https://nas.example.edu"
    assert settings.appliance.api_token == "tok"
    assert settings.appliance.default_pool == "archive"
    assert settings.appliance.verify_tls is False
    assert settings.appliance.timeout_seconds == 12.5
    assert settings.appliance.is_configured is True


def test_token_not_in_repr(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APPLIANCE_API_TOKEN", "very-secret-token")
    settings = config.load_settings()
    assert "very-secret-token" not in repr(settings)


def test_blank_pool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_POOL_NAME", "  ")
    assert config.load_settings().appliance.default_pool == "tank"


def test_invalid_appliance_url_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APPLIANCE_URL", "nas.example.edu")
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        config.load_settings()


def test_invalid_port_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROVISIONER_PORT", "80")
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        config.load_settings()


def test_env_int_invalid_value_returns_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_INT_INVALID", "not_a_number")
    assert config._env_int("TEST_INT_INVALID", 42) == 42


def test_env_optional_float_invalid_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_FLOAT_INVALID", "soon")
    assert config._env_optional_float("TEST_FLOAT_INVALID") is None


def test_relative_sqlite_path_resolved_under_project_root(monkeypatch) -> None:
    monkeypatch.setenv("SQLITE_PATH", "./data/x.sqlite")
    settings = config.load_settings()
    assert settings.storage.sqlite_path == str(config._project_root() / "data" / "x.sqlite")


def test_settings_are_cached() -> None:
    assert config.load_settings() is config.load_settings()
