"""
Station service for Radio Hub

Single entry point over all sources:
- fetch(source): live discovery, replaces that source's cache slot
- load_cache(source, stations): cold-start hydration from saved settings
- resolve_stream_url / refresh_metadata: delegated to the owning source,
  the cache is not touched (both are time-sensitive)
- find_by_id: scan across every cached source

The cache holds one list per source and is never merged: a successful
discovery fully replaces the slot. Callers always get copies.
"""

import logging

from radio_hub.locks import RWLock
from radio_hub.models import RadioSource
from radio_hub.sources import AmgSource, Ru101Source

logger = logging.getLogger(__name__)


def build_sources(settings=None):
    """Create source instances configured from the 'sources' settings section

    Args:
        settings: Settings dict (optional)

    Returns:
        (AmgSource, Ru101Source)
    """
    sources_config = (settings or {}).get('sources', {})
    ru101_config = sources_config.get('ru101', {})

    amg = AmgSource(
        timeout=sources_config.get('amg_timeout_seconds', 10),
        media_timeout=sources_config.get('media_timeout_seconds', 30),
    )
    ru101 = Ru101Source(
        timeout=sources_config.get('timeout_seconds', 15),
        max_group=ru101_config.get('max_group', 38),
        batch_size=ru101_config.get('batch_size', 5),
    )
    return amg, ru101


class StationService:
    """Aggregates station sources behind one interface

    Args:
        settings: Settings dict used to configure default sources
        amg_source: AMG provider (built from settings if omitted)
        ru101_source: 101.ru provider (built from settings if omitted)
    """

    def __init__(self, settings=None, amg_source=None, ru101_source=None):
        if amg_source is None or ru101_source is None:
            default_amg, default_ru101 = build_sources(settings)
            amg_source = amg_source or default_amg
            ru101_source = ru101_source or default_ru101

        self.amg_source = amg_source
        self.ru101_source = ru101_source
        self._cache = {}
        self._cache_lock = RWLock()

    def get_source(self, source):
        """Provider instance for a RadioSource"""
        if source is RadioSource.AMG:
            return self.amg_source
        if source is RadioSource.RU101:
            return self.ru101_source
        raise ValueError(f"Unsupported source: {source}")

    @property
    def sources(self):
        return [self.amg_source, self.ru101_source]

    # ==================== CACHE ====================

    def fetch(self, source):
        """Discover stations and replace the cache slot for source

        Returns:
            List of Station copies

        Raises:
            SourceUnavailable: If the provider has nothing to fall back to
        """
        stations = self.get_source(source).discover()

        with self._cache_lock.write_locked():
            self._cache[source] = [s.copy() for s in stations]

        logger.info(f"Cached {len(stations)} stations for {source.value}")
        return [s.copy() for s in stations]

    def load_cache(self, source, stations):
        """Replace the cache slot for source with previously saved stations

        Stations the source does not own are dropped.
        """
        provider = self.get_source(source)
        owned = [s.copy() for s in stations if provider.owns_station(s)]
        if len(owned) != len(stations):
            logger.warning(f"Dropped {len(stations) - len(owned)} saved stations not owned by {source.value}")

        with self._cache_lock.write_locked():
            self._cache[source] = owned
        logger.debug(f"Loaded {len(owned)} cached stations for {source.value}")

    def get_cached(self, source):
        """Cached stations for one source, or None if never loaded"""
        with self._cache_lock.read_locked():
            stations = self._cache.get(source)
            if stations is None:
                return None
            return [s.copy() for s in stations]

    def get_all_cached(self):
        with self._cache_lock.read_locked():
            return [s.copy() for stations in self._cache.values() for s in stations]

    def find_by_id(self, station_id):
        """Find a cached station by id

        Returns:
            Station copy, or None if not cached
        """
        with self._cache_lock.read_locked():
            for stations in self._cache.values():
                for station in stations:
                    if station.id == station_id:
                        return station.copy()
        return None

    # ==================== DELEGATION ====================

    def resolve_stream_url(self, station):
        return self.get_source(station.source).resolve_stream_url(station)

    def refresh_metadata(self, station):
        self.get_source(station.source).refresh_metadata(station)
