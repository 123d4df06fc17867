from __future__ import annotations

from datetime import datetime, timezone
from statistics import mean

from weatherwise.errors import NoDataError
from weatherwise.services.models import DateSpec, Location, RawSample, WeatherSummary


EXTREME_HEAT_THRESHOLD_C = 35.0
HEAVY_RAIN_THRESHOLD_MM = 20.0


def aggregate(samples: list[RawSample], data_source: str = "unknown") -> WeatherSummary:
    """
    Reduce per-year (or single live) samples to averages and extreme-event probabilities.
    Each field is averaged over the samples that report it; a single sample gives 0/100 probabilities.
    """
    if not samples:
        raise NoDataError("No weather samples available to aggregate.")

    temperatures = _present_values(samples, "temperature_c")
    humidity = _present_values(samples, "humidity_pct")
    rainfall = _present_values(samples, "rainfall_mm")
    wind_speed = _present_values(samples, "wind_speed_ms")

    extreme_heat = _share_above(temperatures, EXTREME_HEAT_THRESHOLD_C)
    heavy_rain = _share_above(rainfall, HEAVY_RAIN_THRESHOLD_MM)

    return WeatherSummary(
        avg_temperature=_round1(mean(temperatures)),
        avg_humidity=_round1(mean(humidity)),
        avg_rainfall=_round1(mean(rainfall)),
        avg_wind_speed=_round1(mean(wind_speed)),
        extreme_heat_probability=_round1(extreme_heat),
        heavy_rain_probability=_round1(heavy_rain),
        min_temperature=_round1(min(temperatures)),
        max_temperature=_round1(max(temperatures)),
        data_source=data_source,
        sample_count=len(samples),
    )


def summary_to_payload(
    summary: WeatherSummary,
    *,
    location: Location,
    date_spec: DateSpec,
    timestamp: datetime | None = None,
) -> dict:
    stamp = timestamp or datetime.now(tz=timezone.utc)
    return {
        "latitude": location.latitude,
        "longitude": location.longitude,
        "month": date_spec.month,
        "day": date_spec.day,
        "avg_temperature": summary.avg_temperature,
        "avg_humidity": summary.avg_humidity,
        "avg_rainfall": summary.avg_rainfall,
        "avg_wind_speed": summary.avg_wind_speed,
        "extreme_heat_probability": summary.extreme_heat_probability,
        "heavy_rain_probability": summary.heavy_rain_probability,
        "temperature_range": {
            "min": summary.min_temperature,
            "max": summary.max_temperature,
        },
        "data_points": summary.sample_count,
        "data_source": summary.data_source,
        "timestamp": stamp.isoformat(),
    }


def summary_from_payload(payload: dict) -> WeatherSummary:
    temperature_range = payload.get("temperature_range") or {}
    avg_temperature = _round1(float(payload["avg_temperature"]))
    return WeatherSummary(
        avg_temperature=avg_temperature,
        avg_humidity=_round1(float(payload["avg_humidity"])),
        avg_rainfall=_round1(float(payload["avg_rainfall"])),
        avg_wind_speed=_round1(float(payload["avg_wind_speed"])),
        extreme_heat_probability=_round1(float(payload["extreme_heat_probability"])),
        heavy_rain_probability=_round1(float(payload["heavy_rain_probability"])),
        min_temperature=_round1(float(temperature_range.get("min", avg_temperature))),
        max_temperature=_round1(float(temperature_range.get("max", avg_temperature))),
        data_source=str(payload.get("data_source") or "unknown"),
        sample_count=int(payload.get("data_points") or 0),
    )


def _present_values(samples: list[RawSample], field_name: str) -> list[float]:
    values = [getattr(sample, field_name) for sample in samples]
    present = [float(value) for value in values if value is not None]
    if not present:
        raise NoDataError(f"No usable '{field_name}' values in {len(samples)} weather sample(s).")
    return present


def _share_above(values: list[float], threshold: float) -> float:
    return 100.0 * sum(1 for value in values if value > threshold) / len(values)


def _round1(value: float) -> float:
    return round(value, 1)
