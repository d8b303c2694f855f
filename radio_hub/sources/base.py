"""
Base class for station sources

Every provider implements the same three operations:
- discover(): full, deduplicated, name-sorted station list
- resolve_stream_url(station): a URL that is playable right now
- refresh_metadata(station): update now-playing fields in place

Providers own their HTTP session and convert transport failures into the
errors in radio_hub.errors. Nothing provider-specific leaks past this
interface.
"""

import logging
from abc import ABC, abstractmethod

import requests

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_TIMEOUT = 15


def sort_by_name(stations):
    """Sort stations by name (case-sensitive, as provided)"""
    return sorted(stations, key=lambda s: s.name)


def dedupe_by_id(stations):
    """Drop stations whose id was already seen (first occurrence wins)"""
    seen = set()
    unique = []
    for station in stations:
        if station.id in seen:
            logger.debug(f"Skipping duplicate station: {station.id}")
            continue
        seen.add(station.id)
        unique.append(station)
    return unique


class BaseSource(ABC):
    """Station provider contract

    Attributes:
        source: RadioSource this provider serves
        display_name: Human-readable provider name
        session: requests.Session used for all calls
        timeout: Timeout in seconds for API calls
    """

    source = None
    display_name = ''

    def __init__(self, session=None, timeout=DEFAULT_TIMEOUT):
        self.session = session if session is not None else self._build_session()
        self.timeout = timeout

    @staticmethod
    def _build_session():
        session = requests.Session()
        session.headers.update({'User-Agent': USER_AGENT})
        return session

    def owns_station(self, station):
        """Check whether a station belongs to this provider"""
        if station.source == self.source:
            return True
        return station.id.startswith(f"{self.source.value}_")

    @abstractmethod
    def discover(self):
        """Fetch the current station list

        Returns:
            List of Station, deduplicated by id and sorted by name

        Raises:
            SourceUnavailable: Only if no degrade path is left
        """

    @abstractmethod
    def resolve_stream_url(self, station):
        """Return a stream URL that can be played right now

        Raises:
            NoStreamAvailable: If the provider offers no eligible stream
        """

    @abstractmethod
    def refresh_metadata(self, station):
        """Update now-playing fields of station in place

        Raises:
            MetadataUnavailable: On endpoint failure or missing station key
        """
