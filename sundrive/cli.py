"""CLI entry point for the Sundrive companion."""

import argparse
import json
import logging
import sqlite3
import sys

from sundrive.config.loader import (
    config_hash,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from sundrive.config.schema import CompanionConfig
from sundrive.device.channel import DeviceChannel, JsonLinesChannel, MemoryChannel
from sundrive.encoding.time_encoder import encode_time
from sundrive.encoding.timezone import normalize_timezone, resolve_timezone
from sundrive.ingest.location import (
    FixedLocationProvider,
    LocationProvider,
    build_location_provider,
)
from sundrive.ingest.sunrise_sunset_client import SunriseSunsetClient
from sundrive.models.common import Coordinates
from sundrive.models.refresh import RefreshState
from sundrive.pipeline.companion import Companion
from sundrive.pipeline.refresh_flow import RefreshContext, RefreshFlow
from sundrive.storage.cache_store import CacheStore
from sundrive.storage.database import connect, run_migrations

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "sundrive.yaml"
DEFAULT_DB = "data/sundrive.db"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sundrive",
        description="Sundrive watchface companion: twilight times for the watch",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite cache DB path")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    sub.add_parser("serve", help="Handle JSON-lines watch messages on stdin/stdout")

    # refresh
    refresh_p = sub.add_parser("refresh", help="Run one refresh cycle")
    refresh_p.add_argument("--tz", default=None, help="Timezone identifier (default UTC)")
    refresh_p.add_argument("--lat", type=float, default=None, help="Latitude override")
    refresh_p.add_argument("--lng", type=float, default=None, help="Longitude override")

    # encode
    encode_p = sub.add_parser("encode", help="Encode a time-of-day as minutes")
    encode_p.add_argument("time", help='e.g. "6:11:35 AM"')

    # cache show
    cache_p = sub.add_parser("cache", help="Cache operations")
    cache_sub = cache_p.add_subparsers(dest="cache_command")
    show_p = cache_sub.add_parser("show", help="Display the cached entry")
    show_p.add_argument("--tz", default=None, help="Also check validity for this timezone")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = load_config(args.config)
    logger.debug("Loaded config %s (hash %s)", args.config, config_hash(config))

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "refresh":
        return _cmd_refresh(config, args)
    elif args.command == "encode":
        return _cmd_encode(args)
    elif args.command == "cache":
        return _cmd_cache(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _open_store(config: CompanionConfig, db_path: str) -> tuple[sqlite3.Connection, CacheStore]:
    conn = connect(db_path)
    run_migrations(conn)
    store = CacheStore(
        conn,
        key=config.cache.key,
        max_coordinate_delta=config.cache.max_coordinate_delta,
    )
    return conn, store


def _build_flow(
    config: CompanionConfig,
    store: CacheStore,
    channel: DeviceChannel,
    location_provider: LocationProvider | None = None,
) -> RefreshFlow:
    return RefreshFlow(
        config,
        RefreshContext(cache_store=store),
        location_provider or build_location_provider(config.location),
        SunriseSunsetClient(
            base_url=config.source.base_url,
            timeout=config.source.timeout_seconds,
        ),
        channel,
    )


def _cmd_serve(config, args) -> int:
    conn, store = _open_store(config, args.db)
    channel = JsonLinesChannel(sys.stdin, sys.stdout)
    companion = Companion(config, _build_flow(config, store, channel), channel)
    try:
        companion.handle_ready()
        refreshes = companion.serve()
    finally:
        conn.close()
    logger.info("Channel closed after %d refreshes", refreshes)
    return 0


def _cmd_refresh(config, args) -> int:
    conn, store = _open_store(config, args.db)
    channel = MemoryChannel()
    provider = None
    if args.lat is not None and args.lng is not None:
        provider = FixedLocationProvider(Coordinates(args.lat, args.lng))
    companion = Companion(config, _build_flow(config, store, channel, provider), channel)
    try:
        tzid = normalize_timezone(resolve_timezone(args.tz))
        outcome = companion.handle_message({"timezone_string": tzid})
    finally:
        conn.close()

    if outcome is None or outcome.state == RefreshState.ABORTED:
        print("Refresh aborted: " + "; ".join(outcome.errors if outcome else []))
        return 1
    coords = outcome.coordinates
    if coords is not None:
        print(
            f"Location: {coords.latitude}, {coords.longitude} ({outcome.location_source}) "
            f"| tz: {outcome.tzid} | cache hit: {outcome.cache_hit}"
        )
    print(json.dumps(outcome.payload, indent=2))
    return 0


def _cmd_encode(args) -> int:
    print(encode_time(args.time))
    return 0


def _cmd_cache(config, args) -> int:
    if args.cache_command != "show":
        print("Use: cache show [--tz TZID]")
        return 1
    conn, store = _open_store(config, args.db)
    try:
        entry = store.get()
        if entry is None:
            print("Cache: empty")
            return 0
        print(entry.to_json())
        if args.tz:
            tzid = normalize_timezone(args.tz)
            valid = store.is_valid(entry, entry.coordinates, tzid)
            print(f"Valid today for {tzid}: {valid}")
    finally:
        conn.close()
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            save_config(new_config, args.config)
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1
