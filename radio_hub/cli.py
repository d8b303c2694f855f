"""
Command-line interface for Radio Hub

This module provides the CLI entry point:
- Fetch and list stations per source
- Resolve stream URLs and show now-playing data for cached stations
- Serve the JSON API with background station refresh

Usage:
    python -m radio_hub.cli --help
"""

import argparse
import logging
import signal
import sys

from radio_hub.commands import RadioCommands, CommandError
from radio_hub.logging_setup import setup_logging
from radio_hub.models import RadioSource
from radio_hub.service import StationService
from radio_hub.settings import SettingsStore, DEFAULT_SETTINGS_FILE

logger = logging.getLogger(__name__)


def build_commands(store):
    """Create service and command layer from a settings store, hydrated from cache"""
    service = StationService(settings=store.settings)
    commands = RadioCommands(service, store)
    commands.hydrate()
    return commands


def _print_stations(stations):
    for station in stations:
        extra = f" ({station.listeners} listeners)" if station.listeners is not None else ""
        print(f"  {station.id:<24} {station.name}{extra}")


def _lookup(commands, station_id):
    station = commands.find_station_by_id(station_id)
    if station is None:
        print(f"[FAIL] Station not found in cache: {station_id}")
        print("Run --fetch <source> first")
    return station


def cmd_fetch(args, commands):
    """Discover stations for a source and cache them

    Usage: --fetch amg|ru101
    """
    print(f"[INFO] Fetching stations from {args.fetch}...")
    try:
        stations = commands.fetch_stations(args.fetch)
    except CommandError as e:
        print(f"[FAIL] {e}")
        return 1

    _print_stations(stations)
    print(f"\n[OK] {len(stations)} stations cached")
    return 0


def cmd_list(args, commands):
    """List cached stations for a source

    Usage: --list amg|ru101
    """
    try:
        stations = commands.get_cached_stations(args.list)
    except CommandError as e:
        print(f"[FAIL] {e}")
        return 1

    if not stations:
        print(f"[INFO] No cached stations for {args.list}")
        return 0

    _print_stations(stations)
    print(f"\nTotal: {len(stations)} stations")
    return 0


def cmd_stream(args, commands):
    """Resolve a playable stream URL

    Usage: --stream <station_id>
    """
    station = _lookup(commands, args.stream)
    if station is None:
        return 1

    try:
        url = commands.resolve_stream_url(station)
    except CommandError as e:
        print(f"[FAIL] {e}")
        return 1

    print(url)
    return 0


def cmd_now_playing(args, commands):
    """Show now-playing data

    Usage: --now-playing <station_id>
    """
    station = _lookup(commands, args.now_playing)
    if station is None:
        return 1

    try:
        station = commands.refresh_metadata(station)
    except CommandError as e:
        print(f"[FAIL] {e}")
        return 1

    print(f"Station:  {station.name}")
    print(f"Artist:   {station.current_artist or '-'}")
    print(f"Track:    {station.current_track or '-'}")
    if station.listeners is not None:
        print(f"Listeners: {station.listeners}")
    if station.artwork_url:
        print(f"Artwork:  {station.artwork_url}")
    return 0


def cmd_serve(args, commands, settings):
    """Run the JSON API with background station refresh

    Usage: --serve [--host HOST] [--port PORT]
    """
    from radio_hub.gui import run_app
    from radio_hub.scheduler import RefreshScheduler

    gui_settings = settings.get('gui', {})
    host = args.host or gui_settings.get('host', '127.0.0.1')
    port = args.port or gui_settings.get('port', 5000)
    debug = gui_settings.get('debug', False)
    interval = settings.get('scheduler', {}).get('refresh_interval_minutes', 60)

    def refresh_all():
        for source in RadioSource:
            try:
                commands.fetch_stations(source.value)
            except CommandError as e:
                logger.warning(f"Background refresh of {source.value} failed: {e}")

    scheduler = RefreshScheduler(refresh_all, interval_minutes=interval)
    scheduler.start()

    def signal_handler(sig, frame):
        logger.info("Shutdown requested")
        scheduler.shutdown(wait=False)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        run_app(commands, host=host, port=port, debug=debug)
    finally:
        if scheduler.scheduler.running:
            scheduler.shutdown(wait=False)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='radio_hub',
        description='Radio Hub - AMG Radio and 101.ru station aggregator'
    )
    parser.add_argument('--settings', metavar='FILE', default=DEFAULT_SETTINGS_FILE,
                        help=f'Settings file (default: {DEFAULT_SETTINGS_FILE})')
    parser.add_argument('--fetch', metavar='SOURCE',
                        help='Fetch and cache stations for a source (amg, ru101)')
    parser.add_argument('--list', metavar='SOURCE',
                        help='List cached stations for a source')
    parser.add_argument('--stream', metavar='STATION_ID',
                        help='Resolve a playable stream URL for a cached station')
    parser.add_argument('--now-playing', metavar='STATION_ID',
                        help='Show now-playing data for a cached station')
    parser.add_argument('--serve', action='store_true',
                        help='Run the JSON API with background refresh')
    parser.add_argument('--host', metavar='HOST',
                        help='API host (default: from settings or 127.0.0.1)')
    parser.add_argument('--port', type=int, metavar='PORT',
                        help='API port (default: from settings or 5000)')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    store = SettingsStore(args.settings)
    settings = store.settings
    setup_logging(settings)

    commands = build_commands(store)

    if args.fetch:
        return cmd_fetch(args, commands)
    elif args.list:
        return cmd_list(args, commands)
    elif args.stream:
        return cmd_stream(args, commands)
    elif args.now_playing:
        return cmd_now_playing(args, commands)
    elif args.serve:
        return cmd_serve(args, commands, settings)
    else:
        parser.print_help()
        return 0


if __name__ == '__main__':
    sys.exit(main())
