"""
AMG Radio source (volna.top)

Discovery uses the site's WordPress REST API:
- /wp-json/wp/v2/station lists stations (title, slug, stream meta)
- /wp-json/wp/v2/media/<id> resolves the station logo

Now-playing data comes from the metadata server at info.volna.top, keyed
by a "metadata key" that is derived from the stream URLs, not from the
public slug. Stream URLs never expire, so resolution is a passthrough.

If the REST API is down or returns nothing usable, discovery returns
KNOWN_STATIONS instead of failing.
"""

import logging
import re
import time
from datetime import datetime, timedelta, timezone

import requests
from bs4 import BeautifulSoup

from radio_hub.errors import SourceUnavailable, NoStreamAvailable, MetadataUnavailable, MalformedEntity
from radio_hub.models import RadioSource, Station
from radio_hub.sources.base import BaseSource, sort_by_name, dedupe_by_id

logger = logging.getLogger(__name__)

STATIONS_API_URL = 'https://ru.volna.top/wp-json/wp/v2/station'
MEDIA_API_URL = 'https://ru.volna.top/wp-json/wp/v2/media/{media_id}'
TRACK_API_URL = 'https://info.volna.top/tag/{key}.json'

DEFAULT_NAME = 'Unknown station'

# Metadata server reports times in Moscow time
MSK = timezone(timedelta(hours=3))

# (slug, name, stream URL, logo)
KNOWN_STATIONS = [
    ('ruwave', 'Русская Волна', 'https://ruwave.amgradio.ru/ruwave', 'https://volna.top/logoradio/ruwave.svg'),
    ('hypefm', 'ХАЙП FM', 'https://hfm.amgradio.ru/HypeFM', 'https://volna.top/logoradio/hypefm.svg'),
    ('remixfm', 'Remix FM', 'https://remix.amgradio.ru/Remix', 'https://volna.top/logoradio/remixfm.svg'),
    ('escapefm', 'Escape FM', 'https://escape.amgradio.ru/Escape', 'https://volna.top/logoradio/escapefm.svg'),
    ('rusrock', 'Русский Рок', 'https://rock.amgradio.ru/RusRock', 'https://volna.top/logoradio/rusrock.svg'),
    ('jazzfm', 'Jazz FM', 'https://jazz.amgradio.ru/Jazz', 'https://volna.top/logoradio/jazzfm.svg'),
    ('classicfm', 'Classic FM', 'https://classic.amgradio.ru/Classic', 'https://volna.top/logoradio/classicfm.svg'),
    ('popfm', 'Pop FM', 'https://pop.amgradio.ru/Pop', 'https://volna.top/logoradio/popfm.svg'),
]

ARTWORK_FIELDS = ('artwork_url', 'artwork_url_p', 'artwork_url_w', 'artwork_url_w_p')


def normalize_meta_key(value):
    """Keep ASCII letters, digits and underscore, lowercased

    Examples:
        "RuWave" -> "ruwave"
        "hype-fm" -> "hypefm"
    """
    if not value:
        return ''
    return re.sub(r'[^A-Za-z0-9_]', '', value).lower()


def _last_path_segment(url):
    """Last path segment of a URL with query and fragment removed"""
    without_query = url.split('?', 1)[0]
    without_fragment = without_query.split('#', 1)[0]
    return without_fragment.rsplit('/', 1)[-1]


def slug_from_hls_url(hls_url):
    """Derive a metadata key from an HLS manifest URL

    "https://x.example/path/RuWave.m3u8?q=1" -> "ruwave"

    Returns:
        Normalized key, or None if the URL has no usable last segment
    """
    if not hls_url:
        return None
    segment = _last_path_segment(hls_url)
    if segment.endswith('.m3u8'):
        segment = segment[:-len('.m3u8')]
    if not segment:
        return None
    return normalize_meta_key(segment)


def slug_from_stream_url(stream_url):
    """Derive a metadata key from the last segment of a plain stream URL"""
    if not stream_url:
        return None
    segment = _last_path_segment(stream_url)
    if not segment:
        return None
    return normalize_meta_key(segment)


def derive_meta_key(stream_hls=None, slug=None, stream_url=None):
    """Metadata key for an AMG station

    Priority:
    1. Last segment of the HLS manifest URL
    2. The provider's own slug
    3. Last segment of the plain stream URL

    Each candidate is normalized with normalize_meta_key(). A candidate that
    normalizes to an empty string does not stop the chain.
    """
    for candidate in (
        slug_from_hls_url(stream_hls),
        normalize_meta_key(slug) if slug else None,
        slug_from_stream_url(stream_url),
    ):
        if candidate:
            return candidate
    return None


def parse_msk_datetime_ms(value):
    """Parse "YYYY-MM-DD HH:MM:SS" in Moscow time to epoch milliseconds"""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.strptime(value.strip(), '%Y-%m-%d %H:%M:%S')
    except ValueError:
        return None
    return int(parsed.replace(tzinfo=MSK).timestamp() * 1000)


def _as_int(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_str(value):
    """Non-empty string or None (list-valued WordPress meta counts as missing)"""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class AmgSource(BaseSource):
    """AMG Radio provider

    Args:
        session: requests.Session (a browser-like one is built if omitted)
        timeout: Timeout for listing and metadata calls (default: 10s)
        media_timeout: Timeout for logo media lookups (default: 30s)
    """

    source = RadioSource.AMG
    display_name = 'AMG Radio'

    def __init__(self, session=None, timeout=10, media_timeout=30):
        super().__init__(session=session, timeout=timeout)
        self.media_timeout = media_timeout

    @staticmethod
    def known_stations():
        """Fixed list of known-good AMG stations (degrade-to-static data)"""
        stations = []
        for slug, name, stream_url, logo in KNOWN_STATIONS:
            station = Station.new_amg(slug, name, stream_url)
            station.logo = logo
            station.artwork_url = logo
            stations.append(station)
        return sort_by_name(stations)

    def discover(self):
        try:
            entries = self._fetch_listing()
        except SourceUnavailable as e:
            logger.warning(f"AMG API unavailable ({e}), using known stations")
            return self.known_stations()

        stations = []
        for entry in entries:
            try:
                station = self._parse_entry(entry)
            except MalformedEntity as e:
                logger.debug(f"Skipping AMG entry: {e}")
                continue

            media_id = _as_int(entry.get('featured_media'))
            if media_id:
                logo = self._fetch_media_url(media_id)
                if logo:
                    station.logo = logo
                    if not station.artwork_url:
                        station.artwork_url = logo

            stations.append(station)

        stations = dedupe_by_id(stations)
        if not stations:
            logger.warning("AMG API returned no usable stations, using known stations")
            return self.known_stations()

        logger.info(f"AMG: loaded {len(stations)} stations")
        return sort_by_name(stations)

    def _fetch_listing(self):
        """Fetch the raw station list from the REST API

        Raises:
            SourceUnavailable: Network error, non-2xx status or bad payload
        """
        try:
            response = self.session.get(
                STATIONS_API_URL,
                params={'per_page': 100},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise SourceUnavailable(f"AMG station list request failed: {e}") from e
        except ValueError as e:
            raise SourceUnavailable(f"AMG station list is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise SourceUnavailable("AMG station list has unexpected format")

        return data

    def _parse_entry(self, entry):
        """Build a Station from one REST API entry

        Raises:
            MalformedEntity: If the entry has no title/meta, no stream or no key
        """
        if not isinstance(entry, dict):
            raise MalformedEntity("entry is not an object")

        title = entry.get('title')
        meta = entry.get('meta')
        rendered = title.get('rendered') if isinstance(title, dict) else None
        if rendered is None or not isinstance(meta, dict):
            raise MalformedEntity(f"entry {entry.get('id')} has no title or meta")

        name = BeautifulSoup(str(rendered), 'html.parser').get_text(strip=True) or DEFAULT_NAME
        slug = _as_str(entry.get('slug'))

        stream_hls = _as_str(meta.get('stream_hls'))
        stream_url = _as_str(meta.get('stream_url')) or stream_hls or ''
        if not stream_url:
            raise MalformedEntity(f"'{name}' has no stream URL")

        meta_key = derive_meta_key(stream_hls=stream_hls, slug=slug, stream_url=stream_url)
        internal_id = meta_key or slug
        if not internal_id:
            raise MalformedEntity(f"'{name}' has no usable slug")

        station = Station.new_amg(internal_id, name, stream_url)
        station.stream_hls = stream_hls
        station.meta_key = meta_key

        for field_name in ARTWORK_FIELDS:
            value = _as_str(meta.get(field_name))
            if value:
                setattr(station, field_name, value)

        return station

    def _fetch_media_url(self, media_id):
        """Resolve a WordPress media id to its source URL (None on failure)"""
        url = MEDIA_API_URL.format(media_id=media_id)
        try:
            response = self.session.get(url, timeout=self.media_timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.debug(f"AMG media {media_id} lookup failed: {e}")
            return None

        if not isinstance(data, dict):
            return None
        return _as_str(data.get('source_url'))

    def resolve_stream_url(self, station):
        # AMG streams need no token
        url = station.stream_url or station.stream_hls
        if not url:
            raise NoStreamAvailable(f"Station '{station.name}' has no stream URL")
        return url

    def refresh_metadata(self, station):
        key = station.meta_key or station.station_slug
        if not key:
            raise MetadataUnavailable(f"Station '{station.name}' has no metadata key")

        url = TRACK_API_URL.format(key=key)
        try:
            response = self.session.get(
                url,
                params={'l': int(time.time() * 1000)},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise MetadataUnavailable(f"AMG metadata request failed: {e}") from e
        except ValueError as e:
            raise MetadataUnavailable(f"AMG metadata is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise MetadataUnavailable("AMG metadata has unexpected format")

        title = _as_str(data.get('title'))
        if title:
            station.current_track = title
        artist = _as_str(data.get('artist'))
        if artist:
            station.current_artist = artist

        for listeners_key in ('now_listener', 'now_listeners', 'listeners'):
            listeners = _as_int(data.get(listeners_key))
            if listeners is not None:
                station.listeners = listeners
                break

        artwork = _as_str(data.get('artwork_url'))
        if artwork:
            station.artwork_url = artwork
            # Artwork refines branding, never replaces a discovered logo
            if not station.logo:
                station.logo = artwork

        stop_at_ms = parse_msk_datetime_ms(data.get('stop_now'))
        if stop_at_ms is not None:
            station.stop_at_ms = stop_at_ms

        logger.debug(f"AMG metadata for {station.id}: {station.current_artist} - {station.current_track}")
