import asyncio

import httpx
import pytest

from weatherwise.config import Settings
from weatherwise.errors import AllProvidersFailedError, ProviderError
from weatherwise.services.models import DateSpec, Location, RawSample
from weatherwise.services.orchestrator import WeatherService, get_weather_summary


PARIS = Location(48.8566, 2.3522)
JUNE_15 = DateSpec(month=6, day=15)


class _FakeProvider:
    def __init__(self, name: str, samples: list[RawSample] | None = None, error: str | None = None) -> None:
        self.name = name
        self.samples = samples or []
        self.error = error
        self.calls = 0

    async def fetch_raw_samples(self, location: Location, date_spec: DateSpec) -> list[RawSample]:
        self.calls += 1
        if self.error is not None:
            raise ProviderError(self.name, self.error, status_code=500)
        return self.samples


def _samples(*temperatures: float) -> list[RawSample]:
    return [RawSample(temperature_c=t, humidity_pct=60.0, rainfall_mm=1.0, wind_speed_ms=3.0) for t in temperatures]


def test_first_provider_success_stops_the_chain() -> None:
    first = _FakeProvider("NASA POWER", samples=_samples(20.0, 22.0))
    second = _FakeProvider("Meteomatics API", samples=_samples(30.0))

    summary = asyncio.run(get_weather_summary(PARIS, JUNE_15, [first, second]))

    assert summary.data_source == "NASA POWER"
    assert summary.avg_temperature == 21.0
    assert first.calls == 1
    assert second.calls == 0


def test_falls_back_after_provider_error() -> None:
    failing = _FakeProvider("NASA POWER", error="HTTP 500 from upstream")
    backup = _FakeProvider("Meteomatics API", samples=_samples(18.0))

    summary = asyncio.run(get_weather_summary(PARIS, JUNE_15, [failing, backup]))

    assert summary.data_source == "Meteomatics API"
    assert summary.sample_count == 1
    assert failing.calls == 1


def test_empty_sample_list_counts_as_failure() -> None:
    empty = _FakeProvider("NASA POWER")
    backup = _FakeProvider("Open-Meteo", samples=_samples(25.0))

    summary = asyncio.run(get_weather_summary(PARIS, JUNE_15, [empty, backup]))

    assert summary.data_source == "Open-Meteo"


def test_samples_missing_a_quantity_fall_through_to_next_provider() -> None:
    no_wind = _FakeProvider(
        "Open-Meteo",
        samples=[RawSample(temperature_c=21.0, humidity_pct=55.0, rainfall_mm=0.0, wind_speed_ms=None)],
    )
    backup = _FakeProvider("OpenWeatherMap", samples=_samples(19.0))

    summary = asyncio.run(get_weather_summary(PARIS, JUNE_15, [no_wind, backup]))

    assert summary.data_source == "OpenWeatherMap"
    assert summary.avg_temperature == 19.0
    assert backup.calls == 1


def test_unusable_samples_are_reported_when_every_provider_fails() -> None:
    no_wind = _FakeProvider(
        "Open-Meteo",
        samples=[RawSample(temperature_c=21.0, humidity_pct=55.0, rainfall_mm=0.0, wind_speed_ms=None)],
    )

    with pytest.raises(AllProvidersFailedError) as exc_info:
        asyncio.run(get_weather_summary(PARIS, JUNE_15, [no_wind]))

    assert exc_info.value.errors[0].provider == "Open-Meteo"
    assert "wind_speed_ms" in exc_info.value.errors[0].reason


def test_all_failures_raise_with_every_error() -> None:
    providers = [
        _FakeProvider("NASA POWER", error="HTTP 500 from upstream"),
        _FakeProvider("Meteomatics API"),
        _FakeProvider("Open-Meteo", error="request failed: ConnectTimeout"),
    ]

    with pytest.raises(AllProvidersFailedError) as exc_info:
        asyncio.run(get_weather_summary(PARIS, JUNE_15, providers))

    errors = exc_info.value.errors
    assert [error.provider for error in errors] == ["NASA POWER", "Meteomatics API", "Open-Meteo"]
    assert errors[1].reason == "No data available for the specified date"
    assert "All weather providers failed" in exc_info.value.message
    assert all(provider.calls == 1 for provider in providers)


def test_no_providers_raises() -> None:
    with pytest.raises(AllProvidersFailedError, match="no providers configured"):
        asyncio.run(get_weather_summary(PARIS, JUNE_15, []))


def test_weather_service_orders_providers_by_date_type() -> None:
    async def run() -> tuple[list[str], list[str], list[str]]:
        async with httpx.AsyncClient() as client:
            service = WeatherService(settings=Settings(), http_client=client)
            return (
                [provider.key for provider in service.providers_for(None)],
                [provider.key for provider in service.providers_for("past")],
                [provider.key for provider in service.providers_for("current")],
            )

    default_order, past_order, live_order = asyncio.run(run())

    assert default_order == ["nasa_power", "meteomatics", "open_meteo", "openweathermap"]
    assert past_order == default_order
    assert live_order == ["open_meteo", "openweathermap", "nasa_power", "meteomatics"]


def test_weather_service_respects_configured_priority() -> None:
    settings = Settings(provider_priority=("open_meteo",))

    async def run() -> list[str]:
        async with httpx.AsyncClient() as client:
            service = WeatherService(settings=settings, http_client=client)
            return [provider.key for provider in service.providers_for("future")]

    assert asyncio.run(run()) == ["open_meteo"]
