from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Literal

from weatherwise.errors import ValidationError


DateType = Literal["current", "past", "future"]


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    name: str | None = None

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise ValidationError("Invalid latitude: must be between -90 and 90")
        if not -180 <= self.longitude <= 180:
            raise ValidationError("Invalid longitude: must be between -180 and 180")

    @property
    def label(self) -> str:
        return self.name or f"{self.latitude:.4f}, {self.longitude:.4f}"


@dataclass(frozen=True)
class DateSpec:
    month: int
    day: int
    year: int | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError("Invalid month: must be between 1 and 12")
        if not 1 <= self.day <= 31:
            raise ValidationError("Invalid day: must be between 1 and 31")


@dataclass(frozen=True)
class RawSample:
    # None marks a provider "missing data" sentinel for that quantity.
    temperature_c: float | None
    humidity_pct: float | None
    rainfall_mm: float | None
    wind_speed_ms: float | None

    def is_empty(self) -> bool:
        return (
            self.temperature_c is None
            and self.humidity_pct is None
            and self.rainfall_mm is None
            and self.wind_speed_ms is None
        )


@dataclass(frozen=True)
class WeatherSummary:
    avg_temperature: float
    avg_humidity: float
    avg_rainfall: float
    avg_wind_speed: float
    extreme_heat_probability: float
    heavy_rain_probability: float
    min_temperature: float
    max_temperature: float
    data_source: str
    sample_count: int


@dataclass(frozen=True)
class AdviceBucket:
    key: str
    emoji: str
    title: str
    description: str
    severity_rank: int
    packing_list: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        payload = {
            "key": self.key,
            "emoji": self.emoji,
            "title": self.title,
            "description": self.description,
            "severity_rank": self.severity_rank,
        }
        if self.packing_list:
            payload["packing_list"] = list(self.packing_list)
        return payload


def infer_date_type(date_spec: DateSpec, today: date) -> DateType:
    year = date_spec.year or today.year
    try:
        target = date(year, date_spec.month, date_spec.day)
    except ValueError:
        return "future" if (date_spec.month, date_spec.day) > (today.month, today.day) else "past"
    if target == today:
        return "current"
    return "past" if target < today else "future"
