"""
Hazard Feed Service

Pulls live readings for the risk aggregator:
- current weather and 5-day forecast from the OpenWeatherMap API
- recent earthquakes from the USGS FDSN event service (GeoJSON)
"""

import logging
from datetime import datetime, timedelta
from typing import List, Dict, Any, Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from config import get_settings
from schemas.common import GeoPoint
from schemas.risk import RiskObservation, SeismicEvent

logger = logging.getLogger(__name__)


class HazardFeedService:
    """Stateless client for the external hazard feeds."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        settings = get_settings()
        self.api_key = settings.weather_api_key
        self.weather_url = settings.weather_api_url
        self.seismic_url = settings.seismic_api_url
        self.lookback_days = settings.seismic_lookback_days
        self.timeout = settings.external_api_timeout_seconds
        self.transport = transport

    async def get_current_weather(self, lat: float, lon: float) -> Dict[str, Any]:
        """
        Current conditions in the units the risk rules use:
          - wind_speed_ms, rainfall_mm_h, temperature_c, description
        """
        data = await self._weather_request("weather", {"lat": str(lat), "lon": str(lon), "units": "metric"})

        main = data.get("main", {})
        wind = data.get("wind", {})
        rain = data.get("rain", {})
        weather_info = data.get("weather", [{}])[0]

        return {
            "wind_speed_ms": wind.get("speed", 0) or 0,
            "rainfall_mm_h": rain.get("1h", 0) or 0,
            "temperature_c": main.get("temp"),
            "description": weather_info.get("description", ""),
        }

    async def count_thunderstorm_forecasts(self, lat: float, lon: float) -> int:
        """Number of 3-hour forecast windows flagged as thunderstorms."""
        data = await self._weather_request("forecast", {"lat": str(lat), "lon": str(lon), "units": "metric"})
        return sum(
            1 for item in data.get("list", [])
            if (item.get("weather") or [{}])[0].get("main") == "Thunderstorm"
        )

    async def get_recent_earthquakes(
        self,
        lat: float,
        lon: float,
        radius_km: float,
    ) -> List[SeismicEvent]:
        """Earthquakes within `radius_km` over the configured lookback window."""
        start = (datetime.utcnow() - timedelta(days=self.lookback_days)).strftime("%Y-%m-%d")
        params = {
            "format": "geojson",
            "latitude": str(lat),
            "longitude": str(lon),
            "maxradiuskm": str(radius_km),
            "starttime": start,
        }
        data = await self._make_request(f"{self.seismic_url}/query", params)

        events = []
        for feature in data.get("features", []):
            props = feature.get("properties", {})
            coords = feature.get("geometry", {}).get("coordinates", [])
            if props.get("mag") is None or len(coords) < 2:
                continue
            events.append(SeismicEvent(
                magnitude=max(0.0, props["mag"]),
                lng=coords[0],
                lat=coords[1],
                depth_km=coords[2] if len(coords) > 2 else None,
                occurred_at=(
                    datetime.utcfromtimestamp(props["time"] / 1000) if props.get("time") else None
                ),
                place=props.get("place"),
            ))
        return events

    async def collect_observation(self, location: GeoPoint, radius_km: float) -> RiskObservation:
        """Gather every available reading. Weather is skipped when no API key is set."""
        observation = RiskObservation()

        if self.api_key:
            current = await self.get_current_weather(location.lat, location.lng)
            observation.wind_speed_ms = current["wind_speed_ms"]
            observation.rainfall_mm_h = current["rainfall_mm_h"]
            observation.temperature_c = current["temperature_c"]
            observation.thunderstorm_forecasts = await self.count_thunderstorm_forecasts(
                location.lat, location.lng
            )
        else:
            logger.warning("OpenWeatherMap API key not configured; weather readings skipped")

        observation.earthquakes = await self.get_recent_earthquakes(
            location.lat, location.lng, radius_km
        )
        return observation

    async def _weather_request(self, endpoint: str, params: Dict[str, str]) -> Dict[str, Any]:
        """Make an authenticated GET request to the OpenWeatherMap API."""
        if not self.api_key:
            raise ValueError("OpenWeatherMap API key is not configured")

        params["appid"] = self.api_key
        data = await self._make_request(f"{self.weather_url}/{endpoint}", params)

        if data.get("cod") and str(data["cod"]) not in ("200",):
            error_msg = data.get("message", "Unknown error")
            logger.error(f"OpenWeatherMap API error: {error_msg}")
            raise ValueError(f"OpenWeatherMap API error: {error_msg}")

        return data

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True,
    )
    async def _make_request(self, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()
