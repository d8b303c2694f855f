"""
Settings store for Radio Hub

Everything persistent lives in one JSON file (radio_hub_settings.json):
- cached_stations: last discovered stations per source tag
- favorite_stations: user favorites (full station records)
- logging / sources / scheduler / gui: configuration sections

A missing or unreadable file yields defaults; callers never see a
half-loaded store.
"""

import copy
import json
import logging
import os
import threading

from radio_hub.models import Station

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = 'radio_hub_settings.json'

DEFAULT_SETTINGS = {
    'logging': {
        'file': 'radio_hub.log',
        'console_level': 'INFO',
        'file_level': 'ERROR',
    },
    'sources': {
        'timeout_seconds': 15,
        'amg_timeout_seconds': 10,
        'media_timeout_seconds': 30,
        'ru101': {
            'max_group': 38,
            'batch_size': 5,
        },
    },
    'scheduler': {
        'refresh_interval_minutes': 60,
    },
    'gui': {
        'host': '127.0.0.1',
        'port': 5000,
        'debug': False,
    },
    'cached_stations': {},
    'favorite_stations': [],
}


def _stations_from_dicts(items):
    """Rebuild stations, skipping records that no longer parse"""
    stations = []
    for item in items or []:
        try:
            stations.append(Station.from_dict(item))
        except (ValueError, TypeError) as e:
            logger.warning(f"Ignoring invalid saved station: {e}")
    return stations


class SettingsStore:
    """JSON-file backed settings

    Args:
        path: Settings file path (default: radio_hub_settings.json)
    """

    def __init__(self, path=DEFAULT_SETTINGS_FILE):
        self.path = path
        self._lock = threading.Lock()
        self._data = self.load()

    @property
    def settings(self):
        """Copy of the whole settings dict"""
        with self._lock:
            return copy.deepcopy(self._data)

    def load(self):
        """Read settings from disk, merged over DEFAULT_SETTINGS

        Returns:
            Settings dict (defaults if the file is missing or invalid)
        """
        data = copy.deepcopy(DEFAULT_SETTINGS)

        if not os.path.exists(self.path):
            return data

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading settings from {self.path}: {e}")
            return data

        if not isinstance(loaded, dict):
            logger.error(f"Settings file {self.path} does not contain an object, using defaults")
            return data

        for key, value in loaded.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key].update(value)
            else:
                data[key] = value

        return data

    def save(self):
        """Write settings to disk

        Returns:
            True if saved successfully, False otherwise
        """
        with self._lock:
            snapshot = copy.deepcopy(self._data)

        try:
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(snapshot, f, indent=2, ensure_ascii=False)
            logger.debug(f"Settings saved to {self.path}")
            return True
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
            return False

    # ==================== STATION CACHE ====================

    def load_cached_stations(self, source_tag):
        with self._lock:
            items = copy.deepcopy(self._data.get('cached_stations', {}).get(source_tag, []))
        return _stations_from_dicts(items)

    def save_cached_stations(self, source_tag, stations):
        with self._lock:
            self._data.setdefault('cached_stations', {})[source_tag] = [s.to_dict() for s in stations]
        return self.save()

    # ==================== FAVORITES ====================

    def get_favorites(self):
        with self._lock:
            items = copy.deepcopy(self._data.get('favorite_stations', []))
        return _stations_from_dicts(items)

    def is_favorite(self, station_id):
        with self._lock:
            return any(item.get('id') == station_id for item in self._data.get('favorite_stations', []))

    def toggle_favorite(self, station):
        """Add or remove a station from favorites

        Returns:
            True if the station is a favorite after the call
        """
        with self._lock:
            favorites = self._data.setdefault('favorite_stations', [])
            remaining = [item for item in favorites if item.get('id') != station.id]
            if len(remaining) != len(favorites):
                self._data['favorite_stations'] = remaining
                is_favorite = False
            else:
                favorites.append(station.to_dict())
                is_favorite = True

        self.save()
        return is_favorite
