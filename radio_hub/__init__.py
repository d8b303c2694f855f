"""
Radio Hub - Package Architecture

Aggregates live radio stations and now-playing data from two providers
that offer no stable public API:
- AMG Radio (volna.top): WordPress REST listing, static fallback list
- 101.ru: server-rendered HTML pages plus a cookie-gated JSON API

Package Structure:
------------------
radio_hub/
├── __init__.py           # Package initialization (this file)
├── models.py             # Station record, RadioSource tags, id scheme
├── errors.py             # Error taxonomy
├── locks.py              # Reader/writer lock
├── sources/              # Provider implementations
│   ├── base.py           # BaseSource contract
│   ├── amg.py            # AMG Radio
│   └── ru101.py          # 101.ru
├── service.py            # StationService (cache + dispatch)
├── settings.py           # JSON settings store (cache, favorites, config)
├── commands.py           # User-facing command layer
├── scheduler.py          # APScheduler background refresh
├── logging_setup.py      # Logging configuration
├── gui/                  # Flask JSON API
└── cli.py                # Command-line interface

Architecture Principles:
-----------------------
1. One Station shape for every provider - quirks stay inside sources/
2. Cache slots are replaced, never merged
3. Listing degrades (static list, skipped pages) instead of failing
4. Stream and metadata calls fail loudly - they are per-action and retryable

Usage:
------
# Fetch and cache a provider's stations
python -m radio_hub.cli --fetch ru101

# Resolve a stream / show now playing for a cached station
python -m radio_hub.cli --stream ru101_100
python -m radio_hub.cli --now-playing amg_ruwave

# Run the JSON API with background refresh
python -m radio_hub.cli --serve
"""

__version__ = "0.3.0"
__author__ = "Radio Hub Team"

from .models import RadioSource, Station, make_station_id
from .errors import (
    RadioHubError,
    SourceUnavailable,
    NoStreamAvailable,
    MetadataUnavailable,
    MalformedEntity,
)
from .service import StationService


def get_version():
    """Get the running version"""
    return __version__


__all__ = [
    "RadioSource",
    "Station",
    "make_station_id",
    "StationService",
    "RadioHubError",
    "SourceUnavailable",
    "NoStreamAvailable",
    "MetadataUnavailable",
    "MalformedEntity",
    "__version__",
]
