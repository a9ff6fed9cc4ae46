"""Tests for the favorites store and its persistence."""

import json
import sqlite3
from dataclasses import replace
from itertools import count

import pytest

from weatherapp.models.weather import FavoriteCity, WeatherSnapshot
from weatherapp.storage import kv_repo
from weatherapp.storage.favorites_store import FavoritesStore


def _fixed_clock(start: int = 1_760_000_000_000):
    ticks = count(start)
    return lambda: next(ticks)


class TestLoad:
    def test_absent_key_is_empty(self, db: sqlite3.Connection):
        store = FavoritesStore(db)
        assert store.load() == []
        assert len(store) == 0

    def test_loads_stored_list_in_order(self, db: sqlite3.Connection):
        kv_repo.set_value(
            db, "favorites",
            json.dumps([{"id": "2", "name": "Oslo"}, {"id": "1", "name": "Lima"}]),
        )
        store = FavoritesStore(db)
        assert store.load() == [
            FavoriteCity(id="2", name="Oslo"),
            FavoriteCity(id="1", name="Lima"),
        ]

    def test_malformed_json_fails_open(self, db: sqlite3.Connection):
        kv_repo.set_value(db, "favorites", "{not json")
        store = FavoritesStore(db)
        assert store.load() == []
        assert kv_repo.get_value(db, "favorites.corrupt") == "{not json"

    def test_wrong_shape_fails_open(self, db: sqlite3.Connection):
        kv_repo.set_value(db, "favorites", json.dumps({"id": "1", "name": "Oslo"}))
        store = FavoritesStore(db)
        assert store.load() == []

    def test_missing_field_fails_open(self, db: sqlite3.Connection):
        kv_repo.set_value(db, "favorites", json.dumps([{"id": "1"}]))
        store = FavoritesStore(db)
        assert store.load() == []

    def test_corrupt_value_survives_until_next_save(self, db: sqlite3.Connection):
        kv_repo.set_value(db, "favorites", "garbage")
        store = FavoritesStore(db)
        store.load()
        assert kv_repo.get_value(db, "favorites") == "garbage"

    def test_duplicate_stored_names_keep_first(self, db: sqlite3.Connection):
        kv_repo.set_value(
            db, "favorites",
            json.dumps([
                {"id": "1", "name": "Oslo"},
                {"id": "2", "name": "Oslo"},
                {"id": "3", "name": "Lima"},
            ]),
        )
        store = FavoritesStore(db)
        assert [f.id for f in store.load()] == ["1", "3"]

    def test_custom_key(self, db: sqlite3.Connection):
        kv_repo.set_value(db, "favs:alt", json.dumps([{"id": "9", "name": "Rome"}]))
        store = FavoritesStore(db, key="favs:alt")
        assert [f.name for f in store.load()] == ["Rome"]


class TestAdd:
    def test_add_appends_and_persists(
        self, db: sqlite3.Connection, paris_snapshot: WeatherSnapshot
    ):
        store = FavoritesStore(db, clock=_fixed_clock(1000))
        store.load()
        fav = store.add(paris_snapshot)
        assert fav == FavoriteCity(id="1000", name="Paris")
        stored = json.loads(kv_repo.get_value(db, "favorites"))
        assert stored == [{"id": "1000", "name": "Paris"}]

    def test_add_same_snapshot_twice(
        self, store: FavoritesStore, paris_snapshot: WeatherSnapshot
    ):
        first = store.add(paris_snapshot)
        second = store.add(paris_snapshot)
        assert first is not None
        assert second is None
        assert [f.name for f in store.list_all()] == ["Paris"]

    def test_add_repeatedly_never_grows(
        self, store: FavoritesStore, paris_snapshot: WeatherSnapshot
    ):
        for _ in range(5):
            store.add(paris_snapshot)
        assert len(store) == 1

    def test_add_none_is_noop(self, store: FavoritesStore, db: sqlite3.Connection):
        assert store.add(None) is None
        assert len(store) == 0
        assert kv_repo.get_value(db, "favorites") is None

    def test_insertion_order(self, store: FavoritesStore, paris_snapshot: WeatherSnapshot):
        for name in ["Paris", "Oslo", "Lima"]:
            store.add(replace(paris_snapshot, location_name=name))
        assert [f.name for f in store] == ["Paris", "Oslo", "Lima"]

    def test_ids_unique_with_frozen_clock(
        self, db: sqlite3.Connection, paris_snapshot: WeatherSnapshot
    ):
        store = FavoritesStore(db, clock=lambda: 5000)
        store.load()
        a = store.add(paris_snapshot)
        b = store.add(replace(paris_snapshot, location_name="Oslo"))
        c = store.add(replace(paris_snapshot, location_name="Lima"))
        assert [a.id, b.id, c.id] == ["5000", "5001", "5002"]

    def test_failed_write_leaves_list_unchanged(
        self, store: FavoritesStore, paris_snapshot: WeatherSnapshot, monkeypatch
    ):
        oslo = store.add(replace(paris_snapshot, location_name="Oslo"))

        def locked(*args, **kwargs):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(kv_repo, "set_value", locked)
        with pytest.raises(sqlite3.OperationalError):
            store.add(paris_snapshot)
        assert store.list_all() == [oslo]
        assert not store.has_name("Paris")


class TestRemove:
    def test_remove_existing(self, store: FavoritesStore, paris_snapshot: WeatherSnapshot):
        fav = store.add(paris_snapshot)
        assert store.remove(fav.id) is True
        assert store.list_all() == []

    def test_remove_twice_second_is_noop(
        self, store: FavoritesStore, paris_snapshot: WeatherSnapshot
    ):
        fav = store.add(paris_snapshot)
        oslo = store.add(replace(paris_snapshot, location_name="Oslo"))
        assert store.remove(fav.id) is True
        assert store.remove(fav.id) is False
        assert store.list_all() == [oslo]

    def test_remove_unknown(self, store: FavoritesStore):
        assert store.remove("does-not-exist") is False

    def test_remove_persists(
        self, db: sqlite3.Connection, store: FavoritesStore, paris_snapshot: WeatherSnapshot
    ):
        fav = store.add(paris_snapshot)
        store.remove(fav.id)
        assert json.loads(kv_repo.get_value(db, "favorites")) == []

    def test_name_can_be_readded_after_removal(
        self, store: FavoritesStore, paris_snapshot: WeatherSnapshot
    ):
        fav = store.add(paris_snapshot)
        store.remove(fav.id)
        assert store.add(paris_snapshot) is not None

    def test_failed_write_keeps_favorite(
        self, db: sqlite3.Connection, store: FavoritesStore,
        paris_snapshot: WeatherSnapshot, monkeypatch,
    ):
        fav = store.add(paris_snapshot)

        def locked(*args, **kwargs):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(kv_repo, "set_value", locked)
        with pytest.raises(sqlite3.OperationalError):
            store.remove(fav.id)
        assert store.list_all() == [fav]
        assert json.loads(kv_repo.get_value(db, "favorites")) == [
            {"id": fav.id, "name": "Paris"}
        ]


class TestPersistence:
    def test_save_then_load_preserves_order(
        self, db: sqlite3.Connection, paris_snapshot: WeatherSnapshot
    ):
        store = FavoritesStore(db, clock=_fixed_clock())
        store.load()
        for name in ["Paris", "Oslo", "Lima", "Zürich"]:
            store.add(replace(paris_snapshot, location_name=name))

        reloaded = FavoritesStore(db)
        assert reloaded.load() == store.list_all()

    def test_list_all_returns_copy(self, store: FavoritesStore, paris_snapshot: WeatherSnapshot):
        store.add(paris_snapshot)
        listing = store.list_all()
        listing.clear()
        assert len(store) == 1

    def test_get(self, store: FavoritesStore, paris_snapshot: WeatherSnapshot):
        fav = store.add(paris_snapshot)
        assert store.get(fav.id) == fav
        assert store.get("missing") is None
