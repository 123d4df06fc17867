import asyncio
import json
from dataclasses import replace

import httpx
import pytest
from fastapi.testclient import TestClient

from weatherwise import main as main_module
from weatherwise.config import Settings
from weatherwise.errors import RecommendationError, RecommendationUnavailableError, ValidationError
from weatherwise.services.models import WeatherSummary
from weatherwise.services.recommender import RecommendationClient, describe_weather


SUMMARY = WeatherSummary(
    avg_temperature=22.5,
    avg_humidity=64.0,
    avg_rainfall=3.2,
    avg_wind_speed=18.0,
    extreme_heat_probability=0.0,
    heavy_rain_probability=12.0,
    min_temperature=16.1,
    max_temperature=28.4,
    data_source="Meteomatics API",
    sample_count=5,
)


class _FakeWeatherService:
    async def summary(self, location, date_spec, date_type=None):  # noqa: ANN001, ANN201
        return SUMMARY


class _FakeRecommendationClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.seen: list = []

    async def recommend(self, summary, event_name=None):  # noqa: ANN001, ANN201
        self.seen.append((summary, event_name))
        if self.error is not None:
            raise self.error
        return "No, rain is unlikely. Bring light layers for the evening."

    async def chat(self, messages):  # noqa: ANN001, ANN201
        self.seen.append(messages)
        if self.error is not None:
            raise self.error
        return "Pack an umbrella just in case."


def _completion_client(handler, api_key: str | None = "gemini-key") -> RecommendationClient:  # noqa: ANN001
    settings = replace(Settings(), gemini_api_key=api_key)
    return RecommendationClient(settings=settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_recommendation_route_returns_weather_and_text(monkeypatch) -> None:
    fake_recommender = _FakeRecommendationClient()
    monkeypatch.setattr(main_module, "weather_service", _FakeWeatherService())
    monkeypatch.setattr(main_module, "recommendation_client", fake_recommender)
    client = TestClient(main_module.app)

    response = client.post(
        "/api/recommendation",
        json={"latitude": 48.8566, "longitude": 2.3522, "date": "2027-06-15", "event_name": "Garden party"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["recommendation"].startswith("No, rain is unlikely")
    assert payload["date"] == "2027-06-15"
    assert payload["wind_strength"] == "moderate"
    assert payload["avg_temperature"] == 22.5
    assert payload["advice"]["key"] == "windy"
    assert fake_recommender.seen[0][1] == "Garden party"


def test_recommendation_route_maps_unconfigured_service_to_503(monkeypatch) -> None:
    monkeypatch.setattr(main_module, "weather_service", _FakeWeatherService())
    monkeypatch.setattr(
        main_module,
        "recommendation_client",
        _FakeRecommendationClient(error=RecommendationUnavailableError("Text generation service is not configured.")),
    )
    client = TestClient(main_module.app)

    response = client.post("/api/recommendation", json={"latitude": 48.8566, "longitude": 2.3522, "date": "2027-06-15"})

    assert response.status_code == 503
    assert response.json()["error"] == "Text generation service is not configured."


def test_chat_route_returns_reply(monkeypatch) -> None:
    fake_recommender = _FakeRecommendationClient()
    monkeypatch.setattr(main_module, "recommendation_client", fake_recommender)
    client = TestClient(main_module.app)

    response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Will it rain in Lyon?"}]})

    assert response.status_code == 200
    assert response.json() == {"reply": "Pack an umbrella just in case."}
    assert fake_recommender.seen[0] == [{"role": "user", "content": "Will it rain in Lyon?"}]


def test_chat_route_rejects_empty_conversation() -> None:
    client = TestClient(main_module.app)

    response = client.post("/api/chat", json={"messages": []})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid messages")


def test_chat_route_rejects_conversation_not_ending_with_user(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    monkeypatch.setattr(main_module, "recommendation_client", _completion_client(handler))
    client = TestClient(main_module.app)

    response = client.post("/api/chat", json={"messages": [{"role": "assistant", "content": "hi"}]})

    assert response.status_code == 400
    assert response.json()["error"] == "The last chat message must come from the user."


def test_describe_weather_mentions_every_quantity() -> None:
    description = describe_weather(SUMMARY)

    assert "Temperature: 22.5°C" in description
    assert "Heavy rain probability: 12.0%" in description
    assert "Wind: moderate (18.0 m/s)" in description


def test_recommendation_client_posts_chat_completion() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  Yes, bring a shelter.  "}}]})

    text = asyncio.run(_completion_client(handler).recommend(SUMMARY, event_name="Street festival"))

    assert text == "Yes, bring a shelter."
    assert captured["auth"] == "Bearer gemini-key"
    assert captured["body"]["model"] == "gemini-2.5-flash"
    assert captured["body"]["messages"][0]["role"] == "system"
    assert 'the event "Street festival"' in captured["body"]["messages"][1]["content"]


def test_recommendation_client_without_key_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(RecommendationUnavailableError):
        asyncio.run(_completion_client(handler, api_key=None).recommend(SUMMARY))


def test_recommendation_client_wraps_upstream_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "overloaded"})

    with pytest.raises(RecommendationError, match="500"):
        asyncio.run(_completion_client(handler).recommend(SUMMARY))


def test_chat_requires_last_message_from_user() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    messages = [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello!"}]
    with pytest.raises(ValidationError, match="last chat message"):
        asyncio.run(_completion_client(handler).chat(messages))


def test_chat_uses_caller_system_prompt() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "Sure."}}]})

    messages = [{"role": "system", "content": "Answer in French."}, {"role": "user", "content": "Météo demain ?"}]
    reply = asyncio.run(_completion_client(handler).chat(messages))

    assert reply == "Sure."
    assert captured["body"]["messages"] == [
        {"role": "system", "content": "Answer in French."},
        {"role": "user", "content": "Météo demain ?"},
    ]
