"""Weather lookup error taxonomy and user-facing messages."""

from enum import StrEnum


class ErrorKind(StrEnum):
    API_ERROR = "API_ERROR"
    TIMEOUT = "TIMEOUT"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    NO_RESPONSE = "NO_RESPONSE"
    OTHER = "OTHER"
    UNEXPECTED = "UNEXPECTED"


API_ERROR_FALLBACK = "Failed to fetch weather data"

_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.TIMEOUT: (
        "Request timed out. Please check your internet connection and try again."
    ),
    ErrorKind.NOT_FOUND: (
        'We couldn\'t find weather data for "{city}". '
        "Please check the city name and try again."
    ),
    ErrorKind.UNAUTHORIZED: "API key is invalid. Please contact support.",
    ErrorKind.NO_RESPONSE: (
        "Failed to make the request. Please check your internet connection."
    ),
    ErrorKind.OTHER: (
        "An error occurred while fetching weather data. Please try again later."
    ),
    ErrorKind.UNEXPECTED: "An unexpected error occurred. Please try again later.",
}


def message_for(kind: ErrorKind, city: str = "", detail: str | None = None) -> str:
    """User-facing message for an error kind.

    API errors carry the provider's own text in ``detail``.
    """
    if kind == ErrorKind.API_ERROR:
        return detail or API_ERROR_FALLBACK
    return _MESSAGES[kind].format(city=city)


class WeatherLookupError(Exception):
    """A failed weather lookup, already classified for display."""

    def __init__(self, kind: ErrorKind, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


class WeatherClientError(Exception):
    """Raised when the weather client is misconfigured."""
