import pytest

from weatherwise.config import Settings, get_settings, parse_provider_priority


def test_get_settings_defaults(monkeypatch) -> None:
    for name in (
        "PROVIDER_PRIORITY",
        "LIVE_PROVIDER_PRIORITY",
        "REQUEST_TIMEOUT_SECONDS",
        "METEOMATICS_USERNAME",
        "OPENWEATHER_API_KEY",
        "GEMINI_API_KEY",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.provider_priority == Settings.provider_priority
    assert settings.request_timeout_seconds == 8.0
    assert settings.meteomatics_username is None
    assert settings.gemini_api_key is None
    assert settings.log_level == "INFO"


def test_get_settings_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("PROVIDER_PRIORITY", "Open_Meteo, nasa_power")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "120")
    monkeypatch.setenv("NASA_POWER_START_YEAR", "1950")
    monkeypatch.setenv("METEOMATICS_HISTORY_YEARS", "not-a-number")
    monkeypatch.setenv("OPENWEATHER_API_KEY", "owm-key")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.provider_priority == ("open_meteo", "nasa_power")
    assert settings.request_timeout_seconds == 30.0
    assert settings.nasa_power_start_year == 1981
    assert settings.meteomatics_history_years == 5
    assert settings.openweather_api_key == "owm-key"
    assert settings.log_level == "DEBUG"


def test_unknown_provider_is_rejected(monkeypatch) -> None:
    with pytest.raises(ValueError, match="Unknown weather provider"):
        parse_provider_priority("nasa_power,accuweather")

    monkeypatch.setenv("LIVE_PROVIDER_PRIORITY", "darksky")
    with pytest.raises(ValueError):
        get_settings()


def test_empty_priority_parses_to_nothing() -> None:
    assert parse_provider_priority("") == ()
    assert parse_provider_priority(" , ") == ()
