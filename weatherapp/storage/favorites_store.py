"""Favorites store: ordered, name-unique city bookmarks persisted as one JSON value."""

import json
import logging
import sqlite3
from collections.abc import Callable, Iterator
from dataclasses import asdict

from pydantic import TypeAdapter, ValidationError

from weatherapp.config.defaults import DEFAULT_FAVORITES_KEY
from weatherapp.models.common import FavoriteId, epoch_millis
from weatherapp.models.weather import FavoriteCity, WeatherSnapshot
from weatherapp.storage import kv_repo

logger = logging.getLogger(__name__)

_FAVORITES_ADAPTER = TypeAdapter(list[FavoriteCity])

CORRUPT_SUFFIX = ".corrupt"


class FavoritesStore:
    """In-memory favorites list mirrored to the key-value store.

    Every mutation rewrites the whole list under one key. Call load() once
    at startup.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        key: str = DEFAULT_FAVORITES_KEY,
        clock: Callable[[], int] = epoch_millis,
    ):
        self.conn = conn
        self.key = key
        self._clock = clock
        self._favorites: list[FavoriteCity] = []

    def load(self) -> list[FavoriteCity]:
        """Initialize from storage.

        Absent data yields an empty list. Unreadable data also yields an
        empty list; the raw value is kept under ``<key>.corrupt``.
        """
        raw = kv_repo.get_value(self.conn, self.key)
        if raw is None:
            self._favorites = []
            return self.list_all()

        try:
            stored = _FAVORITES_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Stored favorites under %r are unreadable, starting empty "
                "(%d validation errors); raw value kept under %r",
                self.key, e.error_count(), self.key + CORRUPT_SUFFIX,
            )
            kv_repo.set_value(self.conn, self.key + CORRUPT_SUFFIX, raw)
            self._favorites = []
            return self.list_all()

        seen: set[str] = set()
        self._favorites = []
        for fav in stored:
            if fav.name in seen:
                logger.warning("Dropping duplicate stored favorite %r", fav.name)
                continue
            seen.add(fav.name)
            self._favorites.append(fav)

        logger.debug("Loaded %d favorites", len(self._favorites))
        return self.list_all()

    def save(self) -> None:
        """Write the full list to storage."""
        self._write(self._favorites)

    def _write(self, favorites: list[FavoriteCity]) -> None:
        payload = json.dumps([asdict(f) for f in favorites])
        kv_repo.set_value(self.conn, self.key, payload)

    def add(self, snapshot: WeatherSnapshot | None) -> FavoriteCity | None:
        """Bookmark the snapshot's city.

        Returns the new favorite, or None when there is no snapshot or the
        city is already a favorite.
        """
        if snapshot is None or self.has_name(snapshot.location_name):
            return None

        fav = FavoriteCity(id=self._next_id(), name=snapshot.location_name)
        # Memory changes only once the write has gone through.
        updated = [*self._favorites, fav]
        self._write(updated)
        self._favorites = updated
        logger.info("Added favorite %s (%s)", fav.name, fav.id)
        return fav

    def remove(self, fav_id: FavoriteId) -> bool:
        """Remove a favorite by id. Returns False if no such favorite."""
        remaining = [f for f in self._favorites if f.id != fav_id]
        if len(remaining) == len(self._favorites):
            return False
        self._write(remaining)
        self._favorites = remaining
        logger.info("Removed favorite %s", fav_id)
        return True

    def get(self, fav_id: FavoriteId) -> FavoriteCity | None:
        for fav in self._favorites:
            if fav.id == fav_id:
                return fav
        return None

    def has_name(self, name: str) -> bool:
        return any(f.name == name for f in self._favorites)

    def list_all(self) -> list[FavoriteCity]:
        """Favorites in insertion order."""
        return list(self._favorites)

    def __iter__(self) -> Iterator[FavoriteCity]:
        return iter(self.list_all())

    def __len__(self) -> int:
        return len(self._favorites)

    def _next_id(self) -> FavoriteId:
        # Millisecond timestamp, bumped past any id already taken.
        taken = {f.id for f in self._favorites}
        candidate = self._clock()
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)
