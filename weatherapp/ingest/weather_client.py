"""Weatherstack current-conditions client with failure classification."""

import json
import logging
import os
import time
from collections.abc import Callable

import httpx

from weatherapp.config.defaults import (
    ACCESS_KEY_ENV,
    DEFAULT_TIMEOUT_SECONDS,
    WEATHERSTACK_BASE_URL,
)
from weatherapp.models.errors import (
    ErrorKind,
    WeatherClientError,
    WeatherLookupError,
    message_for,
)
from weatherapp.models.weather import WeatherSnapshot

logger = logging.getLogger(__name__)

CURRENT_ENDPOINT = "/current"


class WeatherClient:
    """Fetches the current weather for one city per call.

    No retries: a failed lookup is reported and the caller decides whether
    to ask again.
    """

    def __init__(
        self,
        access_key: str | None = None,
        base_url: str = WEATHERSTACK_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.access_key = access_key or os.environ.get(ACCESS_KEY_ENV, "")
        if not self.access_key:
            raise WeatherClientError(f"{ACCESS_KEY_ENV} not set")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._clock = clock

    def fetch_weather(self, city: str) -> WeatherSnapshot:
        """Fetch current conditions for ``city``.

        Raises WeatherLookupError for every failure, classified by
        classify_failure.
        """
        url = f"{self.base_url}{CURRENT_ENDPOINT}"
        params = {"access_key": self.access_key, "query": city}
        headers = {"Accept": "application/json"}

        logger.info("Fetching current weather for %r", city)
        try:
            deadline = self._clock() + self.timeout
            with httpx.stream(
                "GET", url, params=params, headers=headers, timeout=self.timeout
            ) as resp:
                resp.raise_for_status()
                body = self._read_body(resp, deadline)
            data = json.loads(body)
            _raise_for_api_error(data)
            snapshot = parse_snapshot(data)
        except Exception as e:
            err = classify_failure(e, city)
            # The request URL carries the access key; never log it.
            logger.warning(
                "Weather lookup for %r failed: %s (%s)",
                city, err.kind, type(e).__name__,
            )
            if err is e:
                raise
            raise err from e

        logger.info(
            "Weather for %s, %s: %.1f°C",
            snapshot.location_name, snapshot.country, snapshot.temperature,
        )
        return snapshot

    def _read_body(self, resp: httpx.Response, deadline: float) -> bytes:
        """Read the body, failing once the whole request passes ``timeout``.

        httpx applies ``timeout`` per connect/read/write phase; a body that
        trickles in chunk by chunk would otherwise never time out.
        """
        chunks = []
        for chunk in resp.iter_bytes():
            if self._clock() > deadline:
                raise httpx.ReadTimeout(
                    f"Response not complete within {self.timeout:.0f}s",
                    request=resp.request,
                )
            chunks.append(chunk)
        return b"".join(chunks)


def _raise_for_api_error(data: dict) -> None:
    """Weatherstack reports logical failures with HTTP 200 and an error object."""
    error = data.get("error") if isinstance(data, dict) else None
    # An empty error object still marks a failed request.
    if error is not None:
        info = error.get("info") if isinstance(error, dict) else None
        raise WeatherLookupError(
            ErrorKind.API_ERROR, message_for(ErrorKind.API_ERROR, detail=info)
        )


def parse_snapshot(data: dict) -> WeatherSnapshot:
    """Build a snapshot from a /current response body.

    Missing location/current keys raise KeyError (classified as unexpected).
    """
    location = data["location"]
    current = data["current"]
    descriptions = current.get("weather_descriptions") or [""]
    icons = current.get("weather_icons") or [""]
    return WeatherSnapshot(
        location_name=location["name"],
        country=location.get("country", ""),
        temperature=float(current["temperature"]),
        humidity=float(current["humidity"]),
        feels_like=float(current["feelslike"]),
        description=descriptions[0],
        icon_url=icons[0],
    )


def classify_failure(exc: BaseException, city: str) -> WeatherLookupError:
    """Map any exception raised during a lookup to one error kind."""
    if isinstance(exc, WeatherLookupError):
        return exc

    if isinstance(exc, httpx.TimeoutException):
        kind = ErrorKind.TIMEOUT
    elif isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 404:
            kind = ErrorKind.NOT_FOUND
        elif status == 401:
            kind = ErrorKind.UNAUTHORIZED
        else:
            kind = ErrorKind.OTHER
        return WeatherLookupError(kind, message_for(kind, city=city), status)
    elif isinstance(
        exc, (httpx.NetworkError, httpx.UnsupportedProtocol, httpx.InvalidURL)
    ):
        # Sent without a response, or the request could not be built.
        kind = ErrorKind.NO_RESPONSE
    elif isinstance(exc, httpx.HTTPError):
        kind = ErrorKind.OTHER
    else:
        kind = ErrorKind.UNEXPECTED

    return WeatherLookupError(kind, message_for(kind, city=city))
