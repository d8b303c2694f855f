"""
JSON API tests (Flask test client)
"""

import pytest

from radio_hub.commands import RadioCommands
from radio_hub.errors import NoStreamAvailable, SourceUnavailable
from radio_hub.gui import create_app
from radio_hub.models import RadioSource, Station
from radio_hub.service import StationService


@pytest.fixture
def commands(store, make_stub):
    amg = make_stub(RadioSource.AMG, [[Station.new_amg('pop', 'Pop FM', 'https://x/pop')],
                                      SourceUnavailable('HTTP 500')])
    ru101 = make_stub(RadioSource.RU101, [[Station.new_ru101(1, 'One')]])
    return RadioCommands(StationService(amg_source=amg, ru101_source=ru101), store)


@pytest.fixture
def client(commands):
    app = create_app(commands)
    app.config['TESTING'] = True
    return app.test_client()


@pytest.mark.unit
class TestStationEndpoints:

    def test_sources(self, client):
        response = client.get('/api/sources')
        assert response.status_code == 200
        assert [s['tag'] for s in response.get_json()['items']] == ['amg', 'ru101']

    def test_cached_empty(self, client):
        response = client.get('/api/stations/amg')
        assert response.status_code == 200
        assert response.get_json() == {'items': [], 'count': 0}

    def test_fetch_then_cached(self, client):
        response = client.post('/api/stations/amg/fetch')
        assert response.status_code == 200
        assert response.get_json()['count'] == 1

        data = client.get('/api/stations/amg').get_json()
        assert data['items'][0]['id'] == 'amg_pop'
        assert data['items'][0]['source'] == 'amg'

    def test_fetch_failure_is_503(self, client):
        client.post('/api/stations/amg/fetch')
        response = client.post('/api/stations/amg/fetch')
        assert response.status_code == 503
        assert 'Failed to load stations' in response.get_json()['error']

    def test_unknown_source_is_400(self, client):
        response = client.get('/api/stations/spotify')
        assert response.status_code == 400

    def test_station_detail(self, client):
        client.post('/api/stations/ru101/fetch')
        response = client.get('/api/station/ru101_1')
        assert response.get_json()['station']['name'] == 'One'

        assert client.get('/api/station/ru101_999').status_code == 404


@pytest.mark.unit
class TestStreamAndMetadataEndpoints:

    def test_stream_url(self, client, ru101_station):
        response = client.post('/api/stream-url', json={'station': ru101_station.to_dict()})
        assert response.status_code == 200
        assert response.get_json() == {'url': 'https://stream.example/live'}

    def test_stream_url_failure(self, client, commands, ru101_station):
        commands.service.ru101_source.stream_url = NoStreamAvailable('no servers')
        response = client.post('/api/stream-url', json=ru101_station.to_dict())
        assert response.status_code == 503
        assert 'Failed to get stream' in response.get_json()['error']

    def test_invalid_station_body(self, client):
        response = client.post('/api/stream-url', json={'name': 'no id'})
        assert response.status_code == 400
        assert client.post('/api/metadata', data='nope').status_code == 400

    def test_metadata(self, client, amg_station):
        response = client.post('/api/metadata', json=amg_station.to_dict())
        station = response.get_json()['station']
        assert station['current_track'] == 'Song'
        assert station['current_artist'] == 'Artist'


@pytest.mark.unit
def test_favorites_toggle(client, amg_station):
    response = client.post('/api/favorites/toggle', json=amg_station.to_dict())
    assert response.get_json() == {'station_id': 'amg_ruwave', 'is_favorite': True}

    favorites = client.get('/api/favorites').get_json()
    assert favorites['count'] == 1

    response = client.post('/api/favorites/toggle', json=amg_station.to_dict())
    assert response.get_json()['is_favorite'] is False


@pytest.mark.unit
def test_all_cached_stations(client):
    client.post('/api/stations/ru101/fetch')
    client.post('/api/stations/amg/fetch')

    data = client.get('/api/stations').get_json()

    assert data['count'] == 2
    assert [s['name'] for s in data['items']] == ['One', 'Pop FM']


@pytest.mark.unit
def test_station_keys_keep_field_order(client):
    client.post('/api/stations/ru101/fetch')
    body = client.get('/api/station/ru101_1').get_data(as_text=True)
    assert body.index('"id"') < body.index('"channel_id"')
