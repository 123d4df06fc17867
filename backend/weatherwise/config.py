from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path


KNOWN_PROVIDERS = ("nasa_power", "meteomatics", "open_meteo", "openweathermap")


@dataclass(frozen=True)
class Settings:
    app_name: str = "WeatherWise API"
    app_version: str = "1.0.0"
    nasa_power_daily_url: str = "https://power.larc.nasa.gov/api/temporal/daily/point"
    nasa_power_start_year: int = 2000
    nasa_power_end_year: int = datetime.now(tz=timezone.utc).year - 1
    meteomatics_base_url: str = "https://api.meteomatics.com"
    meteomatics_username: str | None = None
    meteomatics_password: str | None = None
    meteomatics_access_token: str | None = None
    meteomatics_history_years: int = 5
    open_meteo_base_url: str = "https://api.open-meteo.com/v1"
    openweathermap_url: str = "https://api.openweathermap.org/data/2.5/weather"
    openweather_api_key: str | None = None
    nominatim_search_url: str = "https://nominatim.openstreetmap.org/search"
    provider_priority: tuple[str, ...] = ("nasa_power", "meteomatics", "open_meteo", "openweathermap")
    live_provider_priority: tuple[str, ...] = ("open_meteo", "openweathermap", "nasa_power", "meteomatics")
    ai_chat_completions_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"
    ai_model: str = "gemini-2.5-flash"
    gemini_api_key: str | None = None
    planner_database_path: str = str((Path(__file__).resolve().parents[1] / "data" / "weatherwise.db").as_posix())
    request_timeout_seconds: float = 8.0
    log_level: str = "INFO"
    frontend_origins: tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")


def get_settings() -> Settings:
    origins_raw = os.getenv("FRONTEND_ORIGINS", "").strip()
    priority_raw = os.getenv("PROVIDER_PRIORITY", "").strip()
    live_priority_raw = os.getenv("LIVE_PROVIDER_PRIORITY", "").strip()
    timeout_raw = os.getenv("REQUEST_TIMEOUT_SECONDS", "").strip()
    start_year_raw = os.getenv("NASA_POWER_START_YEAR", "").strip()
    history_years_raw = os.getenv("METEOMATICS_HISTORY_YEARS", "").strip()
    database_path_raw = os.getenv("PLANNER_DATABASE_PATH", "").strip()

    parsed_origins = tuple(item.strip() for item in origins_raw.split(",") if item.strip())

    try:
        timeout_seconds = float(timeout_raw) if timeout_raw else 8.0
    except ValueError:
        timeout_seconds = 8.0

    try:
        start_year = int(start_year_raw) if start_year_raw else 2000
    except ValueError:
        start_year = 2000

    try:
        history_years = int(history_years_raw) if history_years_raw else 5
    except ValueError:
        history_years = 5

    return Settings(
        frontend_origins=parsed_origins or Settings.frontend_origins,
        provider_priority=parse_provider_priority(priority_raw) or Settings.provider_priority,
        live_provider_priority=parse_provider_priority(live_priority_raw) or Settings.live_provider_priority,
        request_timeout_seconds=min(30.0, max(1.0, timeout_seconds)),
        nasa_power_start_year=max(1981, start_year),
        meteomatics_username=os.getenv("METEOMATICS_USERNAME") or None,
        meteomatics_password=os.getenv("METEOMATICS_PASSWORD") or None,
        meteomatics_access_token=os.getenv("METEOMATICS_ACCESS_TOKEN") or None,
        meteomatics_history_years=min(20, max(1, history_years)),
        openweather_api_key=os.getenv("OPENWEATHER_API_KEY") or None,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        ai_model=os.getenv("AI_MODEL", "").strip() or Settings.ai_model,
        planner_database_path=database_path_raw or Settings.planner_database_path,
        log_level=os.getenv("LOG_LEVEL", "").strip().upper() or Settings.log_level,
    )


def parse_provider_priority(raw: str) -> tuple[str, ...]:
    keys = tuple(item.strip().lower() for item in raw.split(",") if item.strip())
    unknown = [key for key in keys if key not in KNOWN_PROVIDERS]
    if unknown:
        raise ValueError(f"Unknown weather provider(s) {unknown}. Use any of: {list(KNOWN_PROVIDERS)}.")
    return keys
