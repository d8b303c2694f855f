"""
101.ru source

101.ru has no listing API. Stations only appear in server-rendered HTML
spread over the "group" pages (/radio-top/group/1 .. /38). Streams and
now-playing data come from an undocumented JSON API that wants the
srvr101 session cookie handed out by the landing page.

Discovery:
1. Ensure a session cookie (failure only affects stream resolution)
2. Fetch group pages in batches of 5 concurrent requests
3. Parse station cards (.grid__item); if no page has cards, fall back to
   scanning bare /radio/channel/<id>/ links
4. Dedupe by channel id (first occurrence wins), sort by name

A failed page is skipped. If every page fails the result is empty.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import requests
from bs4 import BeautifulSoup

from radio_hub.errors import NoStreamAvailable, MetadataUnavailable, MalformedEntity
from radio_hub.locks import RWLock
from radio_hub.models import RadioSource, Station
from radio_hub.sources.base import BaseSource, DEFAULT_TIMEOUT, sort_by_name

logger = logging.getLogger(__name__)

BASE_URL = 'https://101.ru'
GROUP_URL = BASE_URL + '/radio-top/group/{group_id}'
SERVERS_API_URL = BASE_URL + '/api/channel/getListServersChannel/{channel_id}'
TRACK_API_URL = BASE_URL + '/api/channel/getTrackOnAir/{channel_id}'

SESSION_COOKIE = 'srvr101'

# Site name used as default alt/title text; never a station name
BRAND_NAME = '101.ru'

MAX_GROUP = 38
BATCH_SIZE = 5

CHANNEL_LINK_SELECTOR = "a[href*='/radio/channel/']"

HTML_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Referer': BASE_URL + '/',
}
API_HEADERS = {
    'Referer': BASE_URL + '/',
}

# Largest cover first
COVER_FIELDS = ('cover400', 'cover300', 'cover200', 'coverHTTP')


def parse_channel_id(href):
    """Extract the numeric channel id from a /radio/channel/<id>/ link

    Raises:
        MalformedEntity: If the last path segment is not a number
    """
    segment = (href or '').rstrip('/').rsplit('/', 1)[-1]
    if not segment.isdigit():
        raise MalformedEntity(f"no channel id in link: {href!r}")
    return int(segment)


def absolutize_logo(logo):
    """Make a logo URL absolute against https://101.ru

    "/covers/x.png" -> "https://101.ru/covers/x.png"
    "//cdn.101.ru/x.png" -> "https://cdn.101.ru/x.png"
    Absolute URLs are returned unchanged.
    """
    if not logo:
        return logo
    if logo.startswith('//'):
        return 'https:' + logo
    if logo.startswith('/'):
        return BASE_URL + logo
    return logo


def _clean_name(text):
    """Return stripped text unless it is empty or the site's brand name"""
    if text is None:
        return None
    text = text.strip()
    if not text or text == BRAND_NAME:
        return None
    return text


def _first_srcset_url(srcset):
    # "a.webp 1x, b.webp 2x" -> "a.webp"
    first = srcset.split(',', 1)[0].strip()
    return first.split()[0] if first else None


def extract_name(item):
    """Station name from a card

    Priority: broadcastDisplayName microdata, .grid__title, img alt.
    Brand-name and empty candidates are rejected.
    """
    element = item.select_one("[itemprop='name broadcastDisplayName']")
    name = _clean_name(element.get_text()) if element else None
    if name:
        return name

    element = item.select_one('.grid__title')
    name = _clean_name(element.get_text()) if element else None
    if name:
        return name

    element = item.select_one('img[alt]')
    name = _clean_name(element.get('alt')) if element else None
    if name:
        return name

    return None


def extract_logo(item):
    """Logo URL from a card (as found, not yet absolutized)

    Priority: microdata image link, lazy-loaded cover img (data-src, then
    src), responsive <source data-srcset>.
    """
    element = item.select_one("link[itemprop='image logo']")
    if element and element.get('href'):
        return element['href']

    element = item.select_one('img.grid__cover-avatar')
    if element:
        src = element.get('data-src') or element.get('src')
        if src:
            return src

    element = item.select_one('source[data-srcset]')
    if element and element.get('data-srcset'):
        return _first_srcset_url(element['data-srcset'])

    return None


def parse_station_cards(html):
    """Parse station cards (.grid__item) from a group page

    Items without a channel link, a numeric id or a usable name are skipped.

    Returns:
        List of Station (may contain ids repeated on the same page)
    """
    soup = BeautifulSoup(html, 'html.parser')
    stations = []

    for item in soup.select('.grid__item'):
        try:
            link = item.select_one(CHANNEL_LINK_SELECTOR)
            if link is None:
                raise MalformedEntity("card has no channel link")
            channel_id = parse_channel_id(link.get('href'))

            name = extract_name(item)
            if not name or len(name) < 2:
                raise MalformedEntity(f"channel {channel_id} has no usable name")
        except MalformedEntity as e:
            logger.debug(f"Skipping 101.ru card: {e}")
            continue

        station = Station.new_ru101(channel_id, name)
        station.logo = absolutize_logo(extract_logo(item))
        stations.append(station)

    return stations


def parse_channel_links(html):
    """Fallback parser: any channel link, link text as the name"""
    soup = BeautifulSoup(html, 'html.parser')
    stations = []

    for link in soup.select(CHANNEL_LINK_SELECTOR):
        try:
            channel_id = parse_channel_id(link.get('href'))
        except MalformedEntity as e:
            logger.debug(f"Skipping 101.ru link: {e}")
            continue

        name = _clean_name(link.get_text())
        if not name or len(name) < 2:
            continue

        stations.append(Station.new_ru101(channel_id, name))

    return stations


def select_stream_server(servers):
    """Pick the best server from a getListServersChannel result

    HTTPS-capable servers win, highest quality first (earliest on ties).
    Without any HTTPS server the first entry is used.

    Entries that are not objects are ignored.

    Returns:
        The chosen server dict, or None if there is nothing to choose
    """
    if not isinstance(servers, list):
        return None

    servers = [s for s in servers if isinstance(s, dict)]
    if not servers:
        return None

    https_servers = [s for s in servers if 'https' in str(s.get('protocols', '')).lower()]
    if https_servers:
        return max(https_servers, key=lambda s: _quality(s))
    return servers[0]


def _quality(server):
    try:
        return int(server.get('quality') or 0)
    except (TypeError, ValueError):
        return 0


def _as_dict(value):
    return value if isinstance(value, dict) else {}


def _first_text(mapping, keys):
    for key in keys:
        value = mapping.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class Ru101Source(BaseSource):
    """101.ru provider

    Args:
        session: requests.Session (a browser-like one is built if omitted)
        timeout: Timeout for every request (default: 15s)
        max_group: Highest group page to crawl (default: 38)
        batch_size: Concurrent page fetches per batch (default: 5)
    """

    source = RadioSource.RU101
    display_name = '101.ru'

    def __init__(self, session=None, timeout=DEFAULT_TIMEOUT, max_group=MAX_GROUP, batch_size=BATCH_SIZE):
        super().__init__(session=session, timeout=timeout)
        self.max_group = max_group
        self.batch_size = max(1, batch_size)
        self._cookie = None
        self._cookie_lock = RWLock()
        self._session_init_lock = threading.Lock()

    # ==================== SESSION ====================

    @property
    def session_cookie(self):
        with self._cookie_lock.read_locked():
            return self._cookie

    def has_session(self):
        return self.session_cookie is not None

    def ensure_session(self):
        """Make sure a session cookie is stored (idempotent)

        Only the first caller that finds no cookie requests the landing page;
        concurrent callers wait for it and then see its result.

        Returns:
            True if a session cookie is available

        Raises:
            requests.exceptions.RequestException: If the landing page request fails
        """
        if self.has_session():
            return True

        with self._session_init_lock:
            if self.has_session():
                return True

            self.session.get(BASE_URL + '/', headers=HTML_HEADERS, timeout=self.timeout)
            # The jar also holds cookies set on redirect hops
            value = self.session.cookies.get(SESSION_COOKIE)
            if value:
                with self._cookie_lock.write_locked():
                    self._cookie = f"{SESSION_COOKIE}={value}"
                logger.debug("101.ru session cookie obtained")
                return True

            logger.warning("101.ru landing page did not set a session cookie")
            return False

    # ==================== DISCOVERY ====================

    def discover(self):
        try:
            self.ensure_session()
        except requests.exceptions.RequestException as e:
            logger.warning(f"101.ru session init failed, crawling without it: {e}")

        pages = self._fetch_group_pages()
        logger.debug(f"101.ru: fetched {len(pages)}/{self.max_group} group pages")

        stations = self._collect(pages, parse_station_cards)
        if not stations and pages:
            logger.info("101.ru: no station cards found, falling back to channel links")
            stations = self._collect(pages, parse_channel_links)

        logger.info(f"101.ru: loaded {len(stations)} unique stations")
        return sort_by_name(stations)

    def _fetch_group_pages(self):
        """Fetch all group pages in sequential batches of concurrent requests

        Returns:
            List of page HTML strings in group order (failed pages omitted)
        """
        group_ids = list(range(1, self.max_group + 1))
        pages = []

        with ThreadPoolExecutor(max_workers=self.batch_size, thread_name_prefix='ru101-crawl') as executor:
            for start in range(0, len(group_ids), self.batch_size):
                batch = group_ids[start:start + self.batch_size]
                futures = [executor.submit(self._fetch_group_page, group_id) for group_id in batch]
                # Whole batch completes before the next one is submitted
                for future in futures:
                    html = future.result()
                    if html is not None:
                        pages.append(html)

        return pages

    def _fetch_group_page(self, group_id):
        """Fetch one group page, None on any failure"""
        url = GROUP_URL.format(group_id=group_id)
        try:
            response = self.session.get(url, headers=HTML_HEADERS, timeout=self.timeout)
            response.raise_for_status()
            return response.text
        except requests.exceptions.RequestException as e:
            logger.debug(f"101.ru group {group_id} skipped: {e}")
            return None

    @staticmethod
    def _collect(pages, parser):
        """Parse pages in order, keeping the first station per channel id"""
        seen_ids = set()
        stations = []
        for html in pages:
            for station in parser(html):
                if station.channel_id in seen_ids:
                    continue
                seen_ids.add(station.channel_id)
                stations.append(station)
        return stations

    # ==================== STREAM ====================

    def resolve_stream_url(self, station):
        if station.channel_id is None:
            raise NoStreamAvailable(f"Station '{station.name}' has no 101.ru channel id")

        try:
            has_session = self.ensure_session()
        except requests.exceptions.RequestException as e:
            raise NoStreamAvailable(f"Could not open 101.ru session: {e}") from e
        if not has_session:
            raise NoStreamAvailable("101.ru did not issue a session cookie")

        url = SERVERS_API_URL.format(channel_id=station.channel_id)
        try:
            response = self.session.get(url, headers=API_HEADERS, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise NoStreamAvailable(f"101.ru stream request failed: {e}") from e
        except ValueError as e:
            raise NoStreamAvailable(f"101.ru stream list is not valid JSON: {e}") from e

        if not isinstance(data, dict) or data.get('status') != 1:
            raise NoStreamAvailable(f"101.ru reported no streams for channel {station.channel_id}")

        server = select_stream_server(data.get('result'))
        if not server or not _first_text(server, ('urlStream',)):
            raise NoStreamAvailable(f"No suitable stream for channel {station.channel_id}")

        logger.debug(
            f"101.ru channel {station.channel_id}: {server.get('protocols')} "
            f"quality {server.get('quality')}"
        )
        return server['urlStream']

    # ==================== METADATA ====================

    def refresh_metadata(self, station):
        if station.channel_id is None:
            raise MetadataUnavailable(f"Station '{station.name}' has no 101.ru channel id")

        url = TRACK_API_URL.format(channel_id=station.channel_id)
        try:
            response = self.session.get(url, headers=API_HEADERS, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise MetadataUnavailable(f"101.ru metadata request failed: {e}") from e
        except ValueError as e:
            raise MetadataUnavailable(f"101.ru metadata is not valid JSON: {e}") from e

        # HTTP 200 alone is not success; the payload must say so too
        if not isinstance(data, dict) or data.get('status') != 1:
            raise MetadataUnavailable(f"101.ru has no metadata for channel {station.channel_id}")

        result = data.get('result')
        if not isinstance(result, dict):
            raise MetadataUnavailable(f"101.ru metadata for channel {station.channel_id} has unexpected format")

        short = _as_dict(result.get('short'))
        track = _first_text(short, ('titleTrack',))
        if track:
            station.current_track = track
        artist = _first_text(short, ('titleExecutor',))
        if artist:
            station.current_artist = artist

        cover = short.get('cover')
        if isinstance(cover, dict):
            cover_url = _first_text(cover, COVER_FIELDS)
            if cover_url:
                station.artwork_url = cover_url

        stat = _as_dict(result.get('stat'))
        finish = stat.get('finishSong')
        if isinstance(finish, (int, float)) and not isinstance(finish, bool):
            station.stop_at_ms = int(finish) * 1000

        listeners = stat.get('listenAllUsers')
        if isinstance(listeners, int) and not isinstance(listeners, bool):
            station.listeners = listeners

        logger.debug(f"101.ru metadata for {station.id}: {station.current_artist} - {station.current_track}")
