from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

import httpx

from weatherwise.config import Settings
from weatherwise.errors import ProviderError
from weatherwise.services.models import DateSpec, Location, RawSample


logger = logging.getLogger(__name__)

NASA_POWER_PARAMETERS = ("T2M", "RH2M", "PRECTOTCORR", "WS2M")
METEOMATICS_PARAMETERS = ("t_2m:C", "relative_humidity_2m:p", "precip_1h:mm", "wind_speed_10m:ms")
METEOMATICS_SENTINELS = {-999.0, -666.0}


@dataclass
class WeatherProvider:
    """Base for upstream weather APIs; subclasses translate a location/date into samples."""

    settings: Settings
    http_client: httpx.AsyncClient

    key = "base"
    name = "Unknown provider"
    historical = False

    async def fetch_raw_samples(self, location: Location, date_spec: DateSpec) -> list[RawSample]:
        raise NotImplementedError

    async def _get_json(
        self,
        *,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        auth: httpx.Auth | tuple[str, str] | None = None,
    ) -> Any:
        try:
            if auth is None:
                response = await self.http_client.get(url, params=params, headers=headers)
            else:
                response = await self.http_client.get(url, params=params, headers=headers, auth=auth)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise ProviderError(self.name, f"HTTP {status_code} from upstream", status_code=status_code) from exc
        except httpx.RequestError as exc:
            raise ProviderError(self.name, f"request failed: {exc.__class__.__name__}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(self.name, "unparseable response body", status_code=response.status_code) from exc


class NasaPowerProvider(WeatherProvider):
    key = "nasa_power"
    name = "NASA POWER"
    historical = True

    async def fetch_raw_samples(self, location: Location, date_spec: DateSpec) -> list[RawSample]:
        payload = await self._get_json(
            url=self.settings.nasa_power_daily_url,
            params={
                "parameters": ",".join(NASA_POWER_PARAMETERS),
                "community": "RE",
                "latitude": location.latitude,
                "longitude": location.longitude,
                "start": f"{self.settings.nasa_power_start_year}0101",
                "end": f"{self.settings.nasa_power_end_year}1231",
                "format": "JSON",
            },
        )
        return _parse_nasa_power_samples(payload, date_spec=date_spec, provider=self.name)


class MeteomaticsProvider(WeatherProvider):
    key = "meteomatics"
    name = "Meteomatics API"
    historical = True

    async def fetch_raw_samples(self, location: Location, date_spec: DateSpec) -> list[RawSample]:
        auth, headers = self._credentials()
        current_year = datetime.now(tz=timezone.utc).year
        years = [current_year - offset for offset in range(1, self.settings.meteomatics_history_years + 1)]

        samples: list[RawSample] = []
        last_error: ProviderError | None = None
        for year in years:
            try:
                target = date(year, date_spec.month, date_spec.day)
            except ValueError:
                continue

            url = (
                f"{self.settings.meteomatics_base_url}/{target.isoformat()}T12:00:00Z/"
                f"{','.join(METEOMATICS_PARAMETERS)}/{location.latitude},{location.longitude}/json"
            )
            try:
                payload = await self._get_json(url=url, headers=headers, auth=auth)
            except ProviderError as exc:
                logger.warning("Meteomatics request for %s failed: %s", target.isoformat(), exc.reason)
                last_error = exc
                continue

            sample = _parse_meteomatics_sample(payload)
            if sample is not None:
                samples.append(sample)

        if not samples and last_error is not None:
            raise last_error
        return samples

    def _credentials(self) -> tuple[tuple[str, str] | None, dict[str, str] | None]:
        username = self.settings.meteomatics_username
        password = self.settings.meteomatics_password
        if username and password:
            return (username, password), None
        token = self.settings.meteomatics_access_token
        if token:
            return None, {"Authorization": f"Bearer {token}"}
        raise ProviderError(self.name, "credentials not configured")


class OpenMeteoProvider(WeatherProvider):
    key = "open_meteo"
    name = "Open-Meteo"

    async def fetch_raw_samples(self, location: Location, date_spec: DateSpec) -> list[RawSample]:
        payload = await self._get_json(
            url=f"{self.settings.open_meteo_base_url}/forecast",
            params={
                "latitude": location.latitude,
                "longitude": location.longitude,
                "current": "temperature_2m,relative_humidity_2m,precipitation,wind_speed_10m",
                "wind_speed_unit": "ms",
                "timezone": "auto",
            },
        )
        current = payload.get("current") if isinstance(payload, dict) else None
        if not isinstance(current, dict):
            raise ProviderError(self.name, "response is missing the current block")

        sample = RawSample(
            temperature_c=_as_float(current.get("temperature_2m")),
            humidity_pct=_as_float(current.get("relative_humidity_2m")),
            rainfall_mm=_as_float(current.get("precipitation")),
            wind_speed_ms=_as_float(current.get("wind_speed_10m")),
        )
        return [] if sample.is_empty() else [sample]


class OpenWeatherMapProvider(WeatherProvider):
    key = "openweathermap"
    name = "OpenWeatherMap"

    async def fetch_raw_samples(self, location: Location, date_spec: DateSpec) -> list[RawSample]:
        api_key = self.settings.openweather_api_key
        if not api_key:
            raise ProviderError(self.name, "API key not configured")

        payload = await self._get_json(
            url=self.settings.openweathermap_url,
            params={
                "lat": location.latitude,
                "lon": location.longitude,
                "appid": api_key,
                "units": "metric",
            },
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("main"), dict):
            raise ProviderError(self.name, "response is missing the main block")

        main = payload["main"]
        wind = payload.get("wind") if isinstance(payload.get("wind"), dict) else {}
        rain = payload.get("rain") if isinstance(payload.get("rain"), dict) else {}
        rainfall = _as_float(rain.get("1h"))
        if rainfall is None:
            rainfall = _as_float(rain.get("3h"))

        sample = RawSample(
            temperature_c=_as_float(main.get("temp")),
            humidity_pct=_as_float(main.get("humidity")),
            rainfall_mm=rainfall if rainfall is not None else 0.0,
            wind_speed_ms=_as_float(wind.get("speed")),
        )
        return [sample]


PROVIDER_CLASSES: dict[str, type[WeatherProvider]] = {
    provider_cls.key: provider_cls
    for provider_cls in (NasaPowerProvider, MeteomaticsProvider, OpenMeteoProvider, OpenWeatherMapProvider)
}


def build_providers(settings: Settings, http_client: httpx.AsyncClient) -> dict[str, WeatherProvider]:
    return {key: provider_cls(settings=settings, http_client=http_client) for key, provider_cls in PROVIDER_CLASSES.items()}


def _parse_nasa_power_samples(payload: Any, *, date_spec: DateSpec, provider: str) -> list[RawSample]:
    parameter_block = payload.get("properties", {}).get("parameter") if isinstance(payload, dict) else None
    if not isinstance(parameter_block, dict):
        raise ProviderError(provider, "invalid NASA POWER response")

    temperature = parameter_block.get("T2M") or {}
    humidity = parameter_block.get("RH2M") or {}
    rainfall = parameter_block.get("PRECTOTCORR") or {}
    wind_speed = parameter_block.get("WS2M") or {}

    samples: list[RawSample] = []
    for stamp in sorted(temperature.keys()):
        stamp_date = _parse_nasa_date(stamp)
        if stamp_date is None or (stamp_date.month, stamp_date.day) != (date_spec.month, date_spec.day):
            continue
        sample = RawSample(
            temperature_c=_valid_nasa_value(temperature.get(stamp)),
            humidity_pct=_valid_nasa_value(humidity.get(stamp)),
            rainfall_mm=_valid_nasa_value(rainfall.get(stamp)),
            wind_speed_ms=_valid_nasa_value(wind_speed.get(stamp)),
        )
        if not sample.is_empty():
            samples.append(sample)
    return samples


def _parse_meteomatics_sample(payload: Any) -> RawSample | None:
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        return None

    values: dict[str, float | None] = {}
    for entry in payload["data"]:
        if not isinstance(entry, dict):
            continue
        try:
            raw_value = entry["coordinates"][0]["dates"][0]["value"]
        except (KeyError, IndexError, TypeError):
            continue
        parsed = _as_float(raw_value)
        values[entry.get("parameter")] = None if parsed in METEOMATICS_SENTINELS else parsed

    sample = RawSample(
        temperature_c=values.get("t_2m:C"),
        humidity_pct=values.get("relative_humidity_2m:p"),
        rainfall_mm=values.get("precip_1h:mm"),
        wind_speed_ms=values.get("wind_speed_10m:ms"),
    )
    return None if sample.is_empty() else sample


def _parse_nasa_date(stamp: object) -> date | None:
    if not isinstance(stamp, str) or len(stamp) != 8 or not stamp.isdigit():
        return None
    try:
        return datetime.strptime(stamp, "%Y%m%d").date()
    except ValueError:
        return None


def _valid_nasa_value(value: object) -> float | None:
    parsed = _as_float(value)
    if parsed is None:
        return None
    if parsed <= -998.0:
        return None
    return parsed


def _as_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
