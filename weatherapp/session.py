"""Query session: the search, display and bookmark flow for one user.

State machine per lookup::

    IDLE -> LOADING -> SUCCESS | FAILURE -> (next submit) LOADING ...

Overlapping lookups (a search racing a favorite click, or two web
requests) are resolved by request id: only the most recently started
lookup may change the visible state. Older results are dropped.
"""

import logging
import threading
from dataclasses import replace
from pathlib import Path

from weatherapp.config.schema import AppConfig
from weatherapp.ingest.weather_client import WeatherClient
from weatherapp.models.common import FavoriteId
from weatherapp.models.errors import WeatherLookupError
from weatherapp.models.query import QueryState, QueryStatus
from weatherapp.models.weather import FavoriteCity, WeatherSnapshot
from weatherapp.storage.database import connect, run_migrations
from weatherapp.storage.favorites_store import FavoritesStore

logger = logging.getLogger(__name__)


class WeatherSession:
    def __init__(self, client: WeatherClient, favorites: FavoritesStore):
        self.client = client
        self.favorites = favorites
        self._state = QueryState()
        self._last_request_id = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> QueryState:
        return self._state

    # --- Query form ---

    def submit(self, raw_city: str) -> QueryState | None:
        """Look up a city typed by the user.

        Blank input and submits made while a lookup is in flight are
        ignored and return None; the current state is left as is.
        """
        city = raw_city.strip()
        if not city:
            return None
        # Checked and set under one lock hold, so two racing submits
        # cannot both get through.
        request_id = self._begin(city, reject_if_loading=True)
        if request_id is None:
            logger.debug("Ignoring submit for %r while loading", city)
            return None
        return self._run(request_id, city)

    def fetch(self, city: str) -> QueryState:
        """Run one lookup and return the resulting state."""
        return self._run(self._begin(city), city)

    def _run(self, request_id: int, city: str) -> QueryState:
        try:
            snapshot = self.client.fetch_weather(city)
        except WeatherLookupError as e:
            self._fail(request_id, e)
        else:
            self._succeed(request_id, snapshot)
        return self._state

    # --- Favorites ---

    def open_favorite(self, fav_id: FavoriteId) -> QueryState | None:
        """Look up a bookmarked city. Returns None if the id is unknown."""
        fav = self.favorites.get(fav_id)
        if fav is None:
            return None
        return self.fetch(fav.name)

    def add_favorite(self) -> FavoriteCity | None:
        """Bookmark the city currently on display."""
        with self._lock:
            return self.favorites.add(self._state.snapshot)

    def remove_favorite(self, fav_id: FavoriteId) -> bool:
        with self._lock:
            return self.favorites.remove(fav_id)

    def list_favorites(self) -> list[FavoriteCity]:
        return self.favorites.list_all()

    # --- Transitions ---

    def _begin(self, city: str, reject_if_loading: bool = False) -> int | None:
        with self._lock:
            if reject_if_loading and self._state.loading:
                return None
            self._last_request_id += 1
            request_id = self._last_request_id
            # The previous snapshot stays visible while loading.
            self._state = replace(
                self._state,
                status=QueryStatus.LOADING,
                error=None,
                error_kind=None,
                city=city,
                request_id=request_id,
            )
        return request_id

    def _succeed(self, request_id: int, snapshot: WeatherSnapshot) -> None:
        with self._lock:
            if self._is_stale(request_id):
                return
            self._state = replace(
                self._state,
                status=QueryStatus.SUCCESS,
                snapshot=snapshot,
                error=None,
                error_kind=None,
            )

    def _fail(self, request_id: int, err: WeatherLookupError) -> None:
        with self._lock:
            if self._is_stale(request_id):
                return
            self._state = replace(
                self._state,
                status=QueryStatus.FAILURE,
                snapshot=None,
                error=err.message,
                error_kind=err.kind,
            )

    def _is_stale(self, request_id: int) -> bool:
        if request_id != self._last_request_id:
            logger.debug(
                "Discarding result of request %d, superseded by %d",
                request_id, self._last_request_id,
            )
            return True
        return False


def build_session(
    config: AppConfig,
    db_path: str | Path | None = None,
    check_same_thread: bool = True,
) -> WeatherSession:
    """Wire a session from config: database, favorites and client."""
    client = WeatherClient(
        access_key=config.weather.access_key or None,
        base_url=config.weather.base_url,
        timeout=config.weather.timeout_seconds,
    )
    conn = connect(db_path or config.storage.db_path, check_same_thread=check_same_thread)
    run_migrations(conn)
    favorites = FavoritesStore(conn, key=config.storage.favorites_key)
    favorites.load()
    return WeatherSession(client, favorites)
