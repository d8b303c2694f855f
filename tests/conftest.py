"""
Pytest configuration and fixtures for Radio Hub tests

Provides HTTP doubles (FakeSession/FakeResponse) so provider code runs
against canned payloads, plus settings store and service fixtures.
"""

import sys
import threading
import time
from pathlib import Path

import pytest
import requests
from requests.cookies import RequestsCookieJar

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from radio_hub.models import Station
from radio_hub.settings import SettingsStore
from radio_hub.sources.base import BaseSource

_NO_JSON = object()


class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, status_code=200, json_data=_NO_JSON, text='', headers=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._json is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """requests.Session double routing by URL (query params ignored)

    A route value may be a FakeResponse, an exception instance (raised),
    or a callable taking (url, kwargs) and returning either.
    Unknown URLs raise ConnectionError. A "name=value" Set-Cookie header
    on a returned response is stored in the cookie jar.

    Attributes:
        calls: List of (url, kwargs) in call order
        cookies: RequestsCookieJar, as on requests.Session
        max_in_flight: Highest number of concurrent get() calls observed
    """

    def __init__(self, routes=None, delay=0):
        self.routes = dict(routes or {})
        self.delay = delay
        self.cookies = RequestsCookieJar()
        self.calls = []
        self.max_in_flight = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    def get(self, url, **kwargs):
        with self._lock:
            self.calls.append((url, kwargs))
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            result = self.routes.get(url)
            if callable(result) and not isinstance(result, FakeResponse):
                result = result(url, kwargs)
            if result is None:
                raise requests.exceptions.ConnectionError(f"No route for {url}")
            if isinstance(result, Exception):
                raise result
            set_cookie = result.headers.get('Set-Cookie')
            if set_cookie and '=' in set_cookie:
                name, value = set_cookie.split(';', 1)[0].split('=', 1)
                self.cookies.set(name.strip(), value.strip())
            return result
        finally:
            with self._lock:
                self._in_flight -= 1

    def calls_to(self, url):
        return [c for c in self.calls if c[0] == url]


@pytest.fixture
def settings_path(tmp_path):
    """Path for a throwaway settings file"""
    return str(tmp_path / 'radio_hub_settings.json')


@pytest.fixture
def store(settings_path):
    return SettingsStore(settings_path)


@pytest.fixture
def amg_station():
    station = Station.new_amg('ruwave', 'Русская Волна', 'https://ruwave.amgradio.ru/ruwave')
    station.logo = 'https://volna.top/logoradio/ruwave.svg'
    return station


@pytest.fixture
def ru101_station():
    return Station.new_ru101(100, 'Rock FM')


class StubSource(BaseSource):
    """Provider double returning canned station lists in order"""

    def __init__(self, source, results=None, stream_url='https://stream.example/live'):
        super().__init__(session=FakeSession())
        self.source = source
        self.display_name = source.value.upper()
        self.results = list(results or [])
        self.stream_url = stream_url
        self.discover_calls = 0
        self.resolved = []
        self.refreshed = []

    def discover(self):
        self.discover_calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return [s.copy() for s in result]

    def resolve_stream_url(self, station):
        self.resolved.append(station.id)
        if isinstance(self.stream_url, Exception):
            raise self.stream_url
        return self.stream_url

    def refresh_metadata(self, station):
        self.refreshed.append(station.id)
        station.current_track = 'Song'
        station.current_artist = 'Artist'


@pytest.fixture
def make_stub():
    return StubSource


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
