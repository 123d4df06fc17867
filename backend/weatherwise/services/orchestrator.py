from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import httpx

from weatherwise.config import Settings
from weatherwise.errors import AllProvidersFailedError, NoDataError, ProviderError
from weatherwise.services.aggregator import aggregate
from weatherwise.services.models import DateSpec, DateType, Location, WeatherSummary
from weatherwise.services.providers import WeatherProvider, build_providers


logger = logging.getLogger(__name__)


async def get_weather_summary(
    location: Location,
    date_spec: DateSpec,
    providers: Sequence[WeatherProvider],
) -> WeatherSummary:
    """
    Try providers strictly in order, one attempt each, and summarise the first provider whose samples aggregate.
    Raises AllProvidersFailedError carrying every underlying ProviderError when none succeeds.
    """
    errors: list[ProviderError] = []
    for provider in providers:
        try:
            samples = await provider.fetch_raw_samples(location, date_spec)
        except ProviderError as exc:
            logger.warning("Weather provider %s failed: %s", provider.name, exc.reason)
            errors.append(exc)
            continue

        if not samples:
            logger.warning("Weather provider %s returned no samples for %02d-%02d", provider.name, date_spec.month, date_spec.day)
            errors.append(ProviderError(provider.name, "No data available for the specified date"))
            continue

        try:
            summary = aggregate(samples, data_source=provider.name)
        except NoDataError as exc:
            logger.warning("Weather provider %s returned unusable samples: %s", provider.name, exc.message)
            errors.append(ProviderError(provider.name, exc.message))
            continue

        logger.info("Using %s with %d sample(s) for %s", provider.name, len(samples), location.label)
        return summary

    failure = AllProvidersFailedError(errors)
    logger.error("%s", failure.message)
    raise failure


@dataclass
class WeatherService:
    settings: Settings
    http_client: httpx.AsyncClient
    _providers: dict[str, WeatherProvider] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._providers = build_providers(self.settings, self.http_client)

    def providers_for(self, date_type: DateType | None) -> list[WeatherProvider]:
        priority = self.settings.live_provider_priority if date_type == "current" else self.settings.provider_priority
        return [self._providers[key] for key in priority if key in self._providers]

    async def summary(
        self, location: Location, date_spec: DateSpec, date_type: DateType | None = None
    ) -> WeatherSummary:
        return await get_weather_summary(location, date_spec, self.providers_for(date_type))
