from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path


SAVED_LOCATIONS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS saved_locations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    created_at_utc TEXT NOT NULL,
    UNIQUE (user_id, latitude, longitude)
);
"""

EVENTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    location_name TEXT NOT NULL,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    event_date TEXT NOT NULL,
    event_time TEXT,
    weather_json TEXT NOT NULL,
    advice_json TEXT NOT NULL,
    created_at_utc TEXT NOT NULL
);
"""

TRIPS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS trips (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    location_name TEXT NOT NULL,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    weather_json TEXT NOT NULL,
    advice_json TEXT NOT NULL,
    created_at_utc TEXT NOT NULL
);
"""


class DuplicateRecordError(Exception):
    pass


@dataclass
class PlannerStore:
    """SQLite persistence for per-user saved locations, events and trips."""

    database_path: str

    def __post_init__(self) -> None:
        self._db_path = Path(self.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def list_locations(self, user_id: str) -> list[dict]:
        return self._select_rows(
            "SELECT id, name, latitude, longitude, created_at_utc FROM saved_locations WHERE user_id = ? ORDER BY id",
            (user_id,),
        )

    def add_location(self, *, user_id: str, name: str, latitude: float, longitude: float) -> dict:
        created_at = _utc_now()
        try:
            with sqlite3.connect(self._db_path) as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO saved_locations (user_id, name, latitude, longitude, created_at_utc)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, name, latitude, longitude, created_at),
                )
                conn.commit()
                row_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise DuplicateRecordError("This location is already saved.") from exc
        return {"id": row_id, "name": name, "latitude": latitude, "longitude": longitude, "created_at_utc": created_at}

    def delete_location(self, *, user_id: str, record_id: int) -> bool:
        return self._delete("saved_locations", user_id=user_id, record_id=record_id)

    def list_events(self, user_id: str) -> list[dict]:
        rows = self._select_rows(
            """
            SELECT id, name, location_name, latitude, longitude, event_date, event_time,
                   weather_json, advice_json, created_at_utc
            FROM events WHERE user_id = ? ORDER BY event_date, id
            """,
            (user_id,),
        )
        return [_decode_json_columns(row) for row in rows]

    def add_event(
        self,
        *,
        user_id: str,
        name: str,
        location_name: str,
        latitude: float,
        longitude: float,
        event_date: str,
        event_time: str | None,
        weather: dict,
        advice: dict,
    ) -> dict:
        created_at = _utc_now()
        with sqlite3.connect(self._db_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO events (
                    user_id, name, location_name, latitude, longitude, event_date,
                    event_time, weather_json, advice_json, created_at_utc
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    name,
                    location_name,
                    latitude,
                    longitude,
                    event_date,
                    event_time,
                    json.dumps(weather),
                    json.dumps(advice),
                    created_at,
                ),
            )
            conn.commit()
            row_id = cursor.lastrowid
        return {
            "id": row_id,
            "name": name,
            "location_name": location_name,
            "latitude": latitude,
            "longitude": longitude,
            "event_date": event_date,
            "event_time": event_time,
            "weather": weather,
            "advice": advice,
            "created_at_utc": created_at,
        }

    def delete_event(self, *, user_id: str, record_id: int) -> bool:
        return self._delete("events", user_id=user_id, record_id=record_id)

    def list_trips(self, user_id: str) -> list[dict]:
        rows = self._select_rows(
            """
            SELECT id, title, location_name, latitude, longitude, start_date, end_date,
                   weather_json, advice_json, created_at_utc
            FROM trips WHERE user_id = ? ORDER BY start_date, id
            """,
            (user_id,),
        )
        return [_decode_json_columns(row) for row in rows]

    def add_trip(
        self,
        *,
        user_id: str,
        title: str,
        location_name: str,
        latitude: float,
        longitude: float,
        start_date: str,
        end_date: str,
        weather: dict,
        advice: dict,
    ) -> dict:
        created_at = _utc_now()
        with sqlite3.connect(self._db_path) as conn:
            cursor = conn.execute(
                """
                INSERT INTO trips (
                    user_id, title, location_name, latitude, longitude, start_date,
                    end_date, weather_json, advice_json, created_at_utc
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    title,
                    location_name,
                    latitude,
                    longitude,
                    start_date,
                    end_date,
                    json.dumps(weather),
                    json.dumps(advice),
                    created_at,
                ),
            )
            conn.commit()
            row_id = cursor.lastrowid
        return {
            "id": row_id,
            "title": title,
            "location_name": location_name,
            "latitude": latitude,
            "longitude": longitude,
            "start_date": start_date,
            "end_date": end_date,
            "weather": weather,
            "advice": advice,
            "created_at_utc": created_at,
        }

    def delete_trip(self, *, user_id: str, record_id: int) -> bool:
        return self._delete("trips", user_id=user_id, record_id=record_id)

    def _init_database(self) -> None:
        with sqlite3.connect(self._db_path) as conn:
            conn.execute(SAVED_LOCATIONS_TABLE_SQL)
            conn.execute(EVENTS_TABLE_SQL)
            conn.execute(TRIPS_TABLE_SQL)
            conn.commit()

    def _select_rows(self, query: str, params: tuple) -> list[dict]:
        with sqlite3.connect(self._db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def _delete(self, table: str, *, user_id: str, record_id: int) -> bool:
        with sqlite3.connect(self._db_path) as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ? AND user_id = ?", (record_id, user_id))
            conn.commit()
            return cursor.rowcount > 0


def _decode_json_columns(row: dict) -> dict:
    decoded = dict(row)
    decoded["weather"] = json.loads(decoded.pop("weather_json"))
    decoded["advice"] = json.loads(decoded.pop("advice_json"))
    return decoded


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()
