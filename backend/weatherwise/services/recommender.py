from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from weatherwise.config import Settings
from weatherwise.errors import RecommendationError, RecommendationUnavailableError, ValidationError
from weatherwise.services.advice import wind_strength
from weatherwise.services.models import WeatherSummary


logger = logging.getLogger(__name__)

EVENT_ADVISOR_SYSTEM_PROMPT = (
    "You are a friendly weather assistant. Give a SHORT and CLEAR recommendation "
    "(2-3 sentences maximum) about holding an outdoor event (parade, festival, wedding) "
    "given the weather. Use a warm, reassuring tone. Always start with \"Yes\" or \"No\" "
    "to answer the question \"Will it rain?\", then give practical advice."
)

EVENT_ADVISOR_USER_TEMPLATE = (
    "Here is the expected weather: {description}. "
    "Is it a good idea to hold {event} outdoors that day? "
    "Should I plan umbrellas or a shelter?"
)

CHAT_SYSTEM_PROMPT = (
    "You are WeatherWise, a weather assistant. Answer questions about weather, climate, "
    "packing and planning outdoor activities. Keep answers concise."
)


def describe_weather(summary: WeatherSummary) -> str:
    return (
        f"Temperature: {summary.avg_temperature}°C "
        f"(min: {summary.min_temperature}°C, max: {summary.max_temperature}°C), "
        f"Rainfall: {summary.avg_rainfall}mm, "
        f"Heavy rain probability: {summary.heavy_rain_probability}%, "
        f"Humidity: {summary.avg_humidity}%, "
        f"Wind: {wind_strength(summary.avg_wind_speed)} ({summary.avg_wind_speed} m/s)"
    )


@dataclass
class RecommendationClient:
    settings: Settings
    http_client: httpx.AsyncClient

    async def recommend(self, summary: WeatherSummary, event_name: str | None = None) -> str:
        event = f'the event "{event_name}"' if event_name else "an outdoor parade"
        messages = [
            {"role": "system", "content": EVENT_ADVISOR_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": EVENT_ADVISOR_USER_TEMPLATE.format(description=describe_weather(summary), event=event),
            },
        ]
        return await self._complete(messages)

    async def chat(self, messages: list[dict[str, str]]) -> str:
        conversation = [message for message in messages if message.get("role") in {"user", "assistant"}]
        if not conversation or conversation[-1].get("role") != "user":
            raise ValidationError("The last chat message must come from the user.")

        system = next((message for message in messages if message.get("role") == "system"), None)
        system_prompt = system["content"] if system else CHAT_SYSTEM_PROMPT
        return await self._complete([{"role": "system", "content": system_prompt}, *conversation])

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        api_key = self.settings.gemini_api_key
        if not api_key:
            raise RecommendationUnavailableError("Text generation service is not configured (GEMINI_API_KEY).")

        try:
            response = await self.http_client.post(
                self.settings.ai_chat_completions_url,
                headers={"Authorization": f"Bearer {api_key}"},
                json={"model": self.settings.ai_model, "messages": messages, "max_tokens": 1000},
                timeout=max(20.0, self.settings.request_timeout_seconds),
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Text generation service returned HTTP %s", exc.response.status_code)
            raise RecommendationError(f"Text generation service error: {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            logger.error("Text generation request failed: %s", exc)
            raise RecommendationError("Text generation service is unreachable.") from exc
        except ValueError as exc:
            raise RecommendationError("Text generation service returned an unparseable body.") from exc

        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise RecommendationError("Text generation service returned no choices.") from exc
        return str(content).strip()
