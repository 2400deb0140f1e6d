"""Network tools: Open-Meteo weather lookup and a generic HTTP GET.

``http_get`` fetches any http or https URL it is given; there is no host allowlist.
Other schemes, ``file:`` included, are refused.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Protocol
from urllib import error, parse, request

from tool_agent.tools.base import Tool, ToolResult, failure, string_params

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
ALLOWED_SCHEMES = ("http", "https")

WEATHER_CODES: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Foggy",
    51: "Light drizzle",
    61: "Light rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Light snow",
    73: "Moderate snow",
    75: "Heavy snow",
    80: "Rain showers",
    95: "Thunderstorm",
}


@dataclass(frozen=True)
class FetchResponse:
    status: int
    text: str


class Fetcher(Protocol):
    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        max_bytes: int | None = None,
    ) -> FetchResponse: ...


class UrllibFetcher:
    """HTTP GET over urllib, run off the event loop.

    ``max_bytes`` caps how much of the body is read; ``None`` reads it all.
    """

    def __init__(self, *, timeout_s: float = 10.0, user_agent: str = "tool-agent/0.1") -> None:
        self.timeout_s = timeout_s
        self.user_agent = user_agent

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        max_bytes: int | None = None,
    ) -> FetchResponse:
        return await asyncio.to_thread(self._get, with_query(url, params), max_bytes)

    def _get(self, url: str, max_bytes: int | None) -> FetchResponse:
        scheme = url_scheme(url)
        if scheme not in ALLOWED_SCHEMES:
            raise ValueError(f"Unsupported URL scheme: {scheme or '(none)'}")
        req = request.Request(url=url, method="GET", headers={"User-Agent": self.user_agent})
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                body = _read(response, max_bytes).decode("utf-8", errors="replace")
                return FetchResponse(status=response.status, text=body)
        except error.HTTPError as exc:
            body = _read(exc, max_bytes).decode("utf-8", errors="replace")
            return FetchResponse(status=exc.code, text=body)


def _read(response: Any, max_bytes: int | None) -> bytes:
    return response.read() if max_bytes is None else response.read(max_bytes)


def url_scheme(url: str) -> str:
    return parse.urlsplit(url).scheme.lower()


def with_query(url: str, params: dict[str, Any] | None) -> str:
    if not params:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{parse.urlencode(params)}"


def build_weather_tool(fetcher: Fetcher) -> Tool:
    async def get_weather(params: dict[str, Any]) -> ToolResult:
        try:
            geo = await _get_json(
                fetcher,
                GEOCODING_URL,
                {"name": params["city"], "count": 1, "language": "en", "format": "json"},
            )
            matches = geo.get("results") or []
            if not matches:
                return failure("City not found")

            place = matches[0]
            forecast = await _get_json(
                fetcher,
                FORECAST_URL,
                {
                    "latitude": place["latitude"],
                    "longitude": place["longitude"],
                    "current": "temperature_2m,relative_humidity_2m,weather_code,wind_speed_10m",
                    "temperature_unit": "celsius",
                    "wind_speed_unit": "kmh",
                },
            )
            current = forecast["current"]
        except (OSError, KeyError, ValueError) as exc:
            return failure(str(exc) or type(exc).__name__)

        return {
            "success": True,
            "weather": {
                "city": f"{place.get('name')}, {place.get('country')}",
                "temperature": current.get("temperature_2m"),
                "condition": WEATHER_CODES.get(current.get("weather_code"), "Unknown"),
                "humidity": current.get("relative_humidity_2m"),
                "windSpeed": current.get("wind_speed_10m"),
            },
        }

    return Tool(
        name="get_weather",
        description="Get current weather for a city",
        parameters=string_params(city="City name to get weather for"),
        execute=get_weather,
    )


def build_http_get_tool(fetcher: Fetcher, *, max_chars: int = 1000) -> Tool:
    async def http_get(params: dict[str, Any]) -> ToolResult:
        url = params["url"]
        scheme = url_scheme(url)
        if scheme not in ALLOWED_SCHEMES:
            return failure(f"Unsupported URL scheme: {scheme or '(none)'}")
        try:
            # UTF-8 needs at most four bytes per character.
            response = await fetcher.get(url, max_bytes=max_chars * 4)
        except (OSError, ValueError) as exc:
            return failure(str(exc))
        return {"success": True, "status": response.status, "data": response.text[:max_chars]}

    return Tool(
        name="http_get",
        description="Make an HTTP GET request to a URL",
        parameters=string_params(url="URL to fetch"),
        execute=http_get,
    )


async def _get_json(fetcher: Fetcher, url: str, params: dict[str, Any]) -> dict[str, Any]:
    response = await fetcher.get(url, params)
    if response.status >= 400:
        raise ValueError(f"{url} returned status {response.status}")
    parsed = json.loads(response.text)
    if not isinstance(parsed, dict):
        raise ValueError(f"{url} returned unsupported JSON shape: {type(parsed)!r}")
    return parsed
