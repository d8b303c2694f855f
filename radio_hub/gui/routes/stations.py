"""
Station routes for Radio Hub

JSON endpoints over RadioCommands. Errors come back as {'error': message}:
400 for bad input, 404 for unknown stations, 503 for provider failures
that are worth retrying.
"""

import logging
from flask import Blueprint, jsonify, request, current_app

from radio_hub.commands import CommandError
from radio_hub.models import Station

logger = logging.getLogger(__name__)

stations_bp = Blueprint('stations', __name__)


def get_commands():
    """Get RadioCommands instance from Flask app config"""
    return current_app.config.get('commands')


def _error_response(error):
    status = 503 if error.transient else 400
    return jsonify({'error': str(error)}), status


def _station_from_request():
    """Parse the station JSON body

    Returns:
        (Station, None) or (None, error response)
    """
    data = request.get_json(silent=True)
    if isinstance(data, dict) and isinstance(data.get('station'), dict):
        data = data['station']

    try:
        return Station.from_dict(data), None
    except (ValueError, TypeError) as e:
        return None, (jsonify({'error': f"Invalid station: {e}"}), 400)


def _serialize(stations):
    return {
        'items': [s.to_dict() for s in stations],
        'count': len(stations)
    }


@stations_bp.route('/api/sources')
def api_sources():
    """Available station sources"""
    return jsonify({'items': get_commands().list_sources()})


@stations_bp.route('/api/stations')
def api_all_cached_stations():
    """Cached stations from every source"""
    return jsonify(_serialize(get_commands().get_all_cached_stations()))


@stations_bp.route('/api/stations/<source_tag>')
def api_cached_stations(source_tag):
    """Cached stations for a source (no network access)"""
    try:
        stations = get_commands().get_cached_stations(source_tag)
    except CommandError as e:
        return _error_response(e)
    return jsonify(_serialize(stations))


@stations_bp.route('/api/stations/<source_tag>/fetch', methods=['POST'])
def api_fetch_stations(source_tag):
    """Discover stations for a source and refresh the cache"""
    try:
        stations = get_commands().fetch_stations(source_tag)
    except CommandError as e:
        return _error_response(e)
    return jsonify(_serialize(stations))


@stations_bp.route('/api/station/<station_id>')
def api_station_detail(station_id):
    station = get_commands().find_station_by_id(station_id)
    if station is None:
        return jsonify({'error': f"Station not found: {station_id}"}), 404
    return jsonify({'station': station.to_dict()})


@stations_bp.route('/api/stream-url', methods=['POST'])
def api_stream_url():
    """Resolve a playable stream URL for the posted station"""
    station, error = _station_from_request()
    if error:
        return error

    try:
        url = get_commands().resolve_stream_url(station)
    except CommandError as e:
        return _error_response(e)
    return jsonify({'url': url})


@stations_bp.route('/api/metadata', methods=['POST'])
def api_metadata():
    """Refresh now-playing data for the posted station"""
    station, error = _station_from_request()
    if error:
        return error

    try:
        refreshed = get_commands().refresh_metadata(station)
    except CommandError as e:
        return _error_response(e)
    return jsonify({'station': refreshed.to_dict()})


# ==================== FAVORITES ====================

@stations_bp.route('/api/favorites')
def api_favorites():
    return jsonify(_serialize(get_commands().get_favorites()))


@stations_bp.route('/api/favorites/toggle', methods=['POST'])
def api_toggle_favorite():
    station, error = _station_from_request()
    if error:
        return error

    is_favorite = get_commands().toggle_favorite(station)
    return jsonify({'station_id': station.id, 'is_favorite': is_favorite})
