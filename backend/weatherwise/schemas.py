from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from weatherwise.services.advice import AdviceContext


class WeatherQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    latitude: float
    longitude: float
    month: int
    day: int
    year: int | None = Field(default=None, description="Calendar year, used to infer the date type.")
    date_type: Literal["current", "past", "future"] | None = Field(default=None, alias="dateType")


class AdviceQuery(WeatherQuery):
    context: AdviceContext = AdviceContext.DASHBOARD


class RecommendationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    latitude: float
    longitude: float
    date: dt.date
    event_name: str | None = Field(default=None, max_length=120)


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(min_length=1, max_length=4000)


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(min_length=1, max_length=50)


class SavedLocationCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(default=None, max_length=200)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class EventCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1, max_length=120)
    location: SavedLocationCreate
    event_date: dt.date
    event_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")


class TripCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, max_length=120)
    destination: SavedLocationCreate
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def validate_date_range(self) -> "TripCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date.")
        return self
