from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from weatherwise.config import get_settings
from weatherwise.errors import WeatherServiceError
from weatherwise.schemas import (
    AdviceQuery,
    ChatRequest,
    EventCreate,
    RecommendationRequest,
    SavedLocationCreate,
    TripCreate,
    WeatherQuery,
)
from weatherwise.services.advice import (
    AdviceContext,
    classify,
    date_specific_advice,
    describe_conditions,
    event_suitability_score,
    travel_tips,
    wind_strength,
)
from weatherwise.services.aggregator import summary_to_payload
from weatherwise.services.geocoder import PlaceSearchClient
from weatherwise.services.models import DateSpec, Location, infer_date_type
from weatherwise.services.orchestrator import WeatherService
from weatherwise.services.planner_store import DuplicateRecordError, PlannerStore
from weatherwise.services.recommender import RecommendationClient


settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

http_client = httpx.AsyncClient(timeout=settings.request_timeout_seconds)
weather_service = WeatherService(settings=settings, http_client=http_client)
recommendation_client = RecommendationClient(settings=settings, http_client=http_client)
place_search = PlaceSearchClient(settings=settings, http_client=http_client)
planner_store = PlannerStore(database_path=settings.planner_database_path)

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await http_client.aclose()


@app.exception_handler(WeatherServiceError)
async def weather_service_error_handler(request: Request, exc: WeatherServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_body(_validation_message(exc)))


@app.get("/api/health")
async def health() -> dict:
    return {
        "status": "ok",
        "service": settings.app_name,
        "providers": list(settings.provider_priority),
        "timestamp_utc": datetime.now(tz=timezone.utc).isoformat(),
    }


@app.post("/api/weather")
async def weather_summary(payload: WeatherQuery) -> dict:
    location, date_spec = _query_to_domain(payload)
    summary = await weather_service.summary(location, date_spec, payload.date_type)
    return summary_to_payload(summary, location=location, date_spec=date_spec)


@app.post("/api/weather/advice")
async def weather_advice(payload: AdviceQuery) -> dict:
    location, date_spec = _query_to_domain(payload)
    date_type = payload.date_type or infer_date_type(date_spec, today=_utc_today())
    summary = await weather_service.summary(location, date_spec, date_type)

    return {
        "weather": summary_to_payload(summary, location=location, date_spec=date_spec),
        "context": payload.context.value,
        "advice": classify(summary, payload.context).to_dict(),
        "condition": describe_conditions(summary, date_type),
        "date_advice": date_specific_advice(summary, date_type),
        "travel_tips": travel_tips(summary),
        "suitability_score": event_suitability_score(summary),
    }


@app.post("/api/recommendation")
async def weather_recommendation(payload: RecommendationRequest) -> dict:
    location = Location(latitude=payload.latitude, longitude=payload.longitude)
    date_spec = DateSpec(month=payload.date.month, day=payload.date.day, year=payload.date.year)
    date_type = infer_date_type(date_spec, today=_utc_today())

    summary = await weather_service.summary(location, date_spec, date_type)
    recommendation = await recommendation_client.recommend(summary, event_name=payload.event_name)

    return {
        **summary_to_payload(summary, location=location, date_spec=date_spec),
        "date": payload.date.isoformat(),
        "wind_strength": wind_strength(summary.avg_wind_speed),
        "advice": classify(summary, AdviceContext.EVENT).to_dict(),
        "recommendation": recommendation,
    }


@app.post("/api/chat")
async def chat(payload: ChatRequest) -> dict:
    reply = await recommendation_client.chat([message.model_dump() for message in payload.messages])
    return {"reply": reply}


@app.get("/api/geocode")
async def geocode(query: str = Query(min_length=2, max_length=120)) -> dict:
    try:
        results = await place_search.search(query=query)
    except (httpx.HTTPError, ValueError) as exc:
        raise HTTPException(status_code=502, detail=f"Geocoding provider error: {exc}") from exc
    return {"results": results}


@app.get("/api/locations")
async def list_saved_locations(x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    return {"locations": await asyncio.to_thread(planner_store.list_locations, user_id)}


@app.post("/api/locations", status_code=201)
async def save_location(payload: SavedLocationCreate, x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    location = Location(latitude=payload.latitude, longitude=payload.longitude, name=payload.name)
    try:
        return await asyncio.to_thread(
            lambda: planner_store.add_location(
                user_id=user_id,
                name=location.label,
                latitude=location.latitude,
                longitude=location.longitude,
            )
        )
    except DuplicateRecordError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.delete("/api/locations/{record_id}")
async def delete_saved_location(record_id: int, x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    deleted = await asyncio.to_thread(lambda: planner_store.delete_location(user_id=user_id, record_id=record_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Saved location not found.")
    return {"deleted": record_id}


@app.get("/api/events")
async def list_events(x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    return {"events": await asyncio.to_thread(planner_store.list_events, user_id)}


@app.post("/api/events", status_code=201)
async def create_event(payload: EventCreate, x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    location = Location(
        latitude=payload.location.latitude,
        longitude=payload.location.longitude,
        name=payload.location.name,
    )
    date_spec = DateSpec(month=payload.event_date.month, day=payload.event_date.day, year=payload.event_date.year)

    summary = await weather_service.summary(location, date_spec)
    advice = classify(summary, AdviceContext.EVENT).to_dict()
    advice["suitability_score"] = event_suitability_score(summary)

    return await asyncio.to_thread(
        lambda: planner_store.add_event(
            user_id=user_id,
            name=payload.name,
            location_name=location.label,
            latitude=location.latitude,
            longitude=location.longitude,
            event_date=payload.event_date.isoformat(),
            event_time=payload.event_time,
            weather=summary_to_payload(summary, location=location, date_spec=date_spec),
            advice=advice,
        )
    )


@app.delete("/api/events/{record_id}")
async def delete_event(record_id: int, x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    deleted = await asyncio.to_thread(lambda: planner_store.delete_event(user_id=user_id, record_id=record_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found.")
    return {"deleted": record_id}


@app.get("/api/trips")
async def list_trips(x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    return {"trips": await asyncio.to_thread(planner_store.list_trips, user_id)}


@app.post("/api/trips", status_code=201)
async def create_trip(payload: TripCreate, x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    location = Location(
        latitude=payload.destination.latitude,
        longitude=payload.destination.longitude,
        name=payload.destination.name,
    )
    date_spec = DateSpec(month=payload.start_date.month, day=payload.start_date.day, year=payload.start_date.year)

    summary = await weather_service.summary(location, date_spec)
    advice = classify(summary, AdviceContext.TRAVEL).to_dict()
    advice["travel_tips"] = travel_tips(summary)

    return await asyncio.to_thread(
        lambda: planner_store.add_trip(
            user_id=user_id,
            title=payload.title,
            location_name=location.label,
            latitude=location.latitude,
            longitude=location.longitude,
            start_date=payload.start_date.isoformat(),
            end_date=payload.end_date.isoformat(),
            weather=summary_to_payload(summary, location=location, date_spec=date_spec),
            advice=advice,
        )
    )


@app.delete("/api/trips/{record_id}")
async def delete_trip(record_id: int, x_user_id: str | None = Header(default=None)) -> dict:
    user_id = _require_user(x_user_id)
    deleted = await asyncio.to_thread(lambda: planner_store.delete_trip(user_id=user_id, record_id=record_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Trip not found.")
    return {"deleted": record_id}


def _query_to_domain(payload: WeatherQuery) -> tuple[Location, DateSpec]:
    location = Location(latitude=payload.latitude, longitude=payload.longitude)
    date_spec = DateSpec(month=payload.month, day=payload.day, year=payload.year)
    return location, date_spec


def _require_user(user_id: str | None) -> str:
    # Identity comes from the upstream session provider as X-User-Id.
    if user_id is None or not user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required. Please sign in.")
    return user_id.strip()


def _utc_today():
    return datetime.now(tz=timezone.utc).date()


def _error_body(message: str) -> dict:
    return {"error": message, "timestamp": datetime.now(tz=timezone.utc).isoformat()}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"Invalid {location}: {message}" if location else f"Invalid request: {message}"
