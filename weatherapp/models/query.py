"""Query lifecycle models."""

from dataclasses import dataclass
from enum import StrEnum

from weatherapp.models.errors import ErrorKind
from weatherapp.models.weather import WeatherSnapshot


class QueryStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class QueryState:
    status: QueryStatus = QueryStatus.IDLE
    snapshot: WeatherSnapshot | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    city: str | None = None
    request_id: int = 0

    @property
    def loading(self) -> bool:
        return self.status == QueryStatus.LOADING
