"""
Station model for Radio Hub

One provider-agnostic record describes a station from any source:
- Identity: "<source tag>_<provider internal id>" (e.g. "amg_ruwave", "ru101_100")
- Playback: direct stream URL plus optional HLS manifest
- Now playing: track/artist/listeners, filled in by a metadata refresh
- Provider-specific extras (AMG slug and artwork, 101.ru channel id)

Stations are plain values. They are rebuilt on every discovery and copied
whenever they cross the service boundary.
"""

import copy
import logging
from dataclasses import dataclass, asdict, fields
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

# AMG metadata server base (used for bulk "radio.json" lookups)
AMG_META_SERVER = 'https://info.volna.top/radio.json'


class RadioSource(Enum):
    """Station providers. The value is the tag used in ids and settings."""

    AMG = 'amg'
    RU101 = 'ru101'

    @classmethod
    def from_tag(cls, tag):
        """Parse a provider tag

        Args:
            tag: 'amg' or 'ru101' (case-insensitive)

        Returns:
            RadioSource

        Raises:
            ValueError: If tag is not a known provider
        """
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            known = ', '.join(s.value for s in cls)
            raise ValueError(f"Unknown source: {tag}. Available sources: {known}") from None


def make_station_id(source, internal_id):
    """Build a station id from its source and provider-internal id"""
    return f"{source.value}_{internal_id}"


@dataclass
class Station:
    """Normalized radio station"""

    id: str
    name: str
    source: RadioSource
    stream_url: str = ''
    stream_hls: Optional[str] = None
    logo: Optional[str] = None
    current_track: Optional[str] = None
    current_artist: Optional[str] = None

    # AMG
    station_slug: Optional[str] = None
    artwork_url: Optional[str] = None
    artwork_url_p: Optional[str] = None
    artwork_url_w: Optional[str] = None
    artwork_url_w_p: Optional[str] = None
    meta_server: Optional[str] = None
    meta_key: Optional[str] = None

    # 101.ru
    channel_id: Optional[int] = None
    category: Optional[str] = None

    # Shared
    listeners: Optional[int] = None
    stop_at_ms: Optional[int] = None

    @classmethod
    def new_amg(cls, slug, name, stream_url):
        """Create an AMG station keyed by its metadata slug"""
        return cls(
            id=make_station_id(RadioSource.AMG, slug),
            name=name,
            source=RadioSource.AMG,
            stream_url=stream_url,
            station_slug=slug,
            meta_server=AMG_META_SERVER,
            meta_key=slug,
        )

    @classmethod
    def new_ru101(cls, channel_id, name, stream_url=''):
        """Create a 101.ru station keyed by its numeric channel id"""
        return cls(
            id=make_station_id(RadioSource.RU101, channel_id),
            name=name,
            source=RadioSource.RU101,
            stream_url=stream_url,
            channel_id=int(channel_id),
        )

    @property
    def internal_id(self):
        """Provider-internal id (the id without its source prefix)"""
        prefix = f"{self.source.value}_"
        if self.id.startswith(prefix):
            return self.id[len(prefix):]
        return self.id

    def copy(self):
        return copy.copy(self)

    def to_dict(self):
        """Serialize to a JSON-friendly dict (source as its tag)"""
        data = asdict(self)
        data['source'] = self.source.value
        return data

    @classmethod
    def from_dict(cls, data):
        """Build a Station from a dict produced by to_dict()

        Unknown keys are ignored, missing optional fields default to None.

        Raises:
            ValueError: If id, name or source is missing or invalid
        """
        if not isinstance(data, dict):
            raise ValueError(f"Station data must be an object, got {type(data).__name__}")

        for required in ('id', 'name', 'source'):
            if not data.get(required):
                raise ValueError(f"Station data is missing '{required}'")

        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values['source'] = RadioSource.from_tag(data['source'])
        values['stream_url'] = values.get('stream_url') or ''

        if values.get('channel_id') is not None:
            values['channel_id'] = int(values['channel_id'])

        return cls(**values)
