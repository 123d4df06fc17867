from __future__ import annotations

from dataclasses import dataclass

import httpx

from weatherwise.config import Settings


@dataclass
class PlaceSearchClient:
    settings: Settings
    http_client: httpx.AsyncClient

    async def search(self, query: str, limit: int = 5) -> list[dict]:
        query = query.strip()
        if not query:
            return []

        response = await self.http_client.get(
            self.settings.nominatim_search_url,
            params={"q": query, "format": "jsonv2", "limit": limit, "addressdetails": 1},
            headers={"User-Agent": f"{self.settings.app_name}/{self.settings.app_version}"},
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list):
            return []

        mapped_results: list[dict] = []
        for item in payload:
            if not isinstance(item, dict):
                continue

            address = item.get("address", {}) if isinstance(item.get("address"), dict) else {}
            try:
                latitude = float(item.get("lat"))
                longitude = float(item.get("lon"))
            except (TypeError, ValueError):
                continue

            name = (
                item.get("name")
                or address.get("city")
                or address.get("town")
                or address.get("village")
                or address.get("state")
                or item.get("display_name")
            )
            mapped_results.append(
                {
                    "name": name,
                    "display_name": item.get("display_name"),
                    "country": address.get("country"),
                    "admin1": address.get("state") or address.get("region"),
                    "latitude": latitude,
                    "longitude": longitude,
                }
            )
        return mapped_results
