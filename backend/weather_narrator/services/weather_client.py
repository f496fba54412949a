from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from weather_narrator.config import Settings
from weather_narrator.errors import UpstreamDataError


logger = logging.getLogger("weather_narrator.weather_client")


@dataclass
class WeatherClient:
    settings: Settings
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=self.settings.request_timeout_seconds,
            transport=self.transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_forecast(self, *, latitude: float, longitude: float) -> dict:
        """Current, hourly and daily forecast plus alerts for one point."""
        payload = await self._get_json(
            url=self.settings.openweather_url,
            params={
                "lat": latitude,
                "lon": longitude,
                "appid": self.settings.api_key,
                "units": self.settings.units,
                "exclude": "minutely",
            },
        )
        if not isinstance(payload, dict):
            raise UpstreamDataError("There was a problem getting weather data: unexpected response shape")
        return payload

    async def _get_json(self, *, url: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning("Weather provider returned HTTP %s", status_code)
            raise UpstreamDataError(
                f"There was a problem getting weather data: received non-200 status code ({status_code})"
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("Weather provider request failed: %s", exc)
            raise UpstreamDataError(f"There was a problem getting weather data: {exc}") from exc
        except ValueError as exc:
            logger.warning("Weather provider sent a body that is not JSON")
            raise UpstreamDataError("There was a problem getting weather data: invalid JSON") from exc
