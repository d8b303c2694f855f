"""
Command layer for Radio Hub

The surface used by the CLI and the JSON API. It wires the station
service to the settings store and turns every failure into a CommandError
with a message that can be shown to the user directly.

Provider failures (listing, stream, metadata) are transient; their
messages tell the user to try again.
"""

import logging

from radio_hub.errors import RadioHubError, SourceUnavailable, NoStreamAvailable, MetadataUnavailable
from radio_hub.models import RadioSource

logger = logging.getLogger(__name__)

RETRY_HINT = 'Please try again later.'


class CommandError(Exception):
    """A command failed; str(error) is the user-facing message

    Attributes:
        transient: True if retrying may succeed
    """

    def __init__(self, message, transient=False):
        super().__init__(message)
        self.transient = transient


def _parse_source(source_tag):
    try:
        return RadioSource.from_tag(source_tag)
    except ValueError as e:
        raise CommandError(str(e)) from e


def _provider_error(action, error):
    transient = isinstance(error, (SourceUnavailable, NoStreamAvailable, MetadataUnavailable))
    message = f"{action}: {error}"
    if transient:
        message = f"{message}. {RETRY_HINT}"
    return CommandError(message, transient=transient)


class RadioCommands:
    """User-facing operations

    Args:
        service: StationService
        store: SettingsStore used for cached stations and favorites
    """

    def __init__(self, service, store):
        self.service = service
        self.store = store

    def hydrate(self):
        """Load saved station lists into the service cache (cold start)

        Returns:
            Number of stations loaded
        """
        total = 0
        for source in RadioSource:
            stations = self.store.load_cached_stations(source.value)
            if stations:
                self.service.load_cache(source, stations)
                total += len(stations)
        logger.info(f"Hydrated station cache with {total} saved stations")
        return total

    def list_sources(self):
        return [
            {'tag': provider.source.value, 'name': provider.display_name}
            for provider in self.service.sources
        ]

    def fetch_stations(self, source_tag):
        """Discover stations for a source and persist them

        Raises:
            CommandError: Unknown source or discovery failure
        """
        source = _parse_source(source_tag)
        try:
            stations = self.service.fetch(source)
        except RadioHubError as e:
            logger.error(f"Station fetch failed for {source.value}: {e}")
            raise _provider_error("Failed to load stations", e) from e

        if not self.store.save_cached_stations(source.value, stations):
            logger.warning(f"Could not persist {len(stations)} stations for {source.value}")
        return stations

    def get_cached_stations(self, source_tag):
        source = _parse_source(source_tag)
        cached = self.service.get_cached(source)
        if cached is not None:
            return cached
        return self.store.load_cached_stations(source.value)

    def get_all_cached_stations(self):
        """Every cached station across sources, sorted by name"""
        return sorted(self.service.get_all_cached(), key=lambda s: s.name)

    def resolve_stream_url(self, station):
        try:
            return self.service.resolve_stream_url(station)
        except RadioHubError as e:
            logger.warning(f"Stream resolution failed for {station.id}: {e}")
            raise _provider_error("Failed to get stream", e) from e

    def refresh_metadata(self, station):
        """Refresh now-playing data

        Returns:
            A refreshed copy of station (the argument is left untouched)
        """
        refreshed = station.copy()
        try:
            self.service.refresh_metadata(refreshed)
        except RadioHubError as e:
            logger.debug(f"Metadata refresh failed for {station.id}: {e}")
            raise _provider_error("Failed to update metadata", e) from e
        return refreshed

    def find_station_by_id(self, station_id):
        return self.service.find_by_id(station_id)

    # ==================== FAVORITES ====================

    def get_favorites(self):
        return self.store.get_favorites()

    def toggle_favorite(self, station):
        return self.store.toggle_favorite(station)

    def is_favorite(self, station_id):
        return self.store.is_favorite(station_id)
