"""CLI entry point for the weather lookup tool."""

import argparse
import json
import logging

from weatherapp.config.defaults import DEFAULT_CONFIG_PATH
from weatherapp.config.loader import (
    get_config_value,
    load_config,
    redacted,
    redacted_json,
)
from weatherapp.config.schema import AppConfig
from weatherapp.models.errors import WeatherClientError
from weatherapp.models.query import QueryState, QueryStatus
from weatherapp.reporting.formatters import (
    favorite_to_dict,
    format_favorites_text,
    format_snapshot_text,
    state_to_dict,
)
from weatherapp.session import WeatherSession, build_session
from weatherapp.storage.database import connect, run_migrations
from weatherapp.storage.favorites_store import FavoritesStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherapp",
        description="Current weather lookup with favorite cities",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG_PATH, help="Config YAML path"
    )
    parser.add_argument("--db", default=None, help="SQLite DB path (overrides config)")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # lookup
    lookup_p = sub.add_parser("lookup", help="Show current weather for a city")
    lookup_p.add_argument("city", help="City name")
    lookup_p.add_argument("--json", action="store_true", help="JSON output")
    lookup_p.add_argument(
        "--save", action="store_true", help="Add the city to favorites"
    )

    # favorites list / remove / open
    fav_p = sub.add_parser("favorites", help="Favorite cities")
    fav_sub = fav_p.add_subparsers(dest="favorites_command")
    fav_sub.add_parser("list", help="List favorite cities")
    rm_p = fav_sub.add_parser("remove", help="Remove a favorite by id")
    rm_p.add_argument("id", help="Favorite id")
    open_p = fav_sub.add_parser("open", help="Show weather for a favorite")
    open_p.add_argument("id", help="Favorite id")
    open_p.add_argument("--json", action="store_true", help="JSON output")

    # config show / config get
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    get_p = config_sub.add_parser("get", help="Print one config value")
    get_p.add_argument("key", help="Dotted key, e.g. weather.timeout_seconds")

    # serve
    serve_p = sub.add_parser("serve", help="Run the web app")
    serve_p.add_argument("--host", default=None, help="Bind address")
    serve_p.add_argument("--port", type=int, default=None, help="Bind port")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config = load_config(args.config)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.logging.level.value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "lookup":
        return _cmd_lookup(config, args)
    elif args.command == "favorites":
        return _cmd_favorites(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    elif args.command == "serve":
        return _cmd_serve(config, args)
    else:
        parser.print_help()
        return 1


def _session(config: AppConfig, args) -> WeatherSession | None:
    try:
        return build_session(config, args.db)
    except WeatherClientError as e:
        print(f"Error: {e}")
        return None


def _print_state(state: QueryState, as_json: bool) -> int:
    if as_json:
        print(json.dumps(state_to_dict(state), indent=2, ensure_ascii=False))
    elif state.snapshot is not None:
        print(format_snapshot_text(state.snapshot))
    else:
        print(f"Error: {state.error}")
    return 0 if state.status == QueryStatus.SUCCESS else 1


def _cmd_lookup(config: AppConfig, args) -> int:
    session = _session(config, args)
    if session is None:
        return 1
    state = session.submit(args.city)
    if state is None:
        print("Error: enter a city name")
        return 1

    rc = _print_state(state, args.json)
    if rc == 0 and args.save:
        fav = session.add_favorite()
        if fav is not None:
            print(f"Saved {fav.name} to favorites ({fav.id})")
        else:
            print(f"{state.snapshot.location_name} is already a favorite")
    return rc


def _cmd_favorites(config: AppConfig, args) -> int:
    if args.favorites_command == "open":
        session = _session(config, args)
        if session is None:
            return 1
        state = session.open_favorite(args.id)
        if state is None:
            print(f"Error: no favorite with id {args.id}")
            return 1
        return _print_state(state, args.json)

    # list / remove need storage only, no credential
    conn = connect(args.db or config.storage.db_path)
    run_migrations(conn)
    store = FavoritesStore(conn, key=config.storage.favorites_key)
    store.load()
    try:
        if args.favorites_command == "list":
            print(format_favorites_text(store.list_all()))
            return 0
        elif args.favorites_command == "remove":
            fav = store.get(args.id)
            if fav is None or not store.remove(args.id):
                print(f"Error: no favorite with id {args.id}")
                return 1
            print(f"Removed {json.dumps(favorite_to_dict(fav), ensure_ascii=False)}")
            return 0
        else:
            print("Use: favorites list | favorites remove ID | favorites open ID")
            return 1
    finally:
        conn.close()


def _cmd_config(config: AppConfig, args) -> int:
    if args.config_command == "show":
        print(redacted_json(config))
        return 0
    elif args.config_command == "get":
        try:
            value = get_config_value(redacted(config), args.key)
        except KeyError as e:
            print(f"Error: {e}")
            return 1
        print(value)
        return 0
    print("Use: config show | config get KEY")
    return 1


def _cmd_serve(config: AppConfig, args) -> int:
    import uvicorn

    from weatherapp import dashboard

    try:
        session = build_session(config, args.db, check_same_thread=False)
    except WeatherClientError as e:
        print(f"Error: {e}")
        return 1
    dashboard.configure(session)
    uvicorn.run(
        dashboard.app,
        host=args.host or config.server.host,
        port=args.port or config.server.port,
    )
    return 0
