"""
Station model tests
"""

import pytest

from radio_hub.models import RadioSource, Station, make_station_id, AMG_META_SERVER


@pytest.mark.unit
class TestStationIdentity:

    def test_amg_id(self):
        station = Station.new_amg('ruwave', 'Русская Волна', 'https://ruwave.amgradio.ru/ruwave')
        assert station.id == 'amg_ruwave'
        assert station.source is RadioSource.AMG
        assert station.meta_key == 'ruwave'
        assert station.station_slug == 'ruwave'
        assert station.meta_server == AMG_META_SERVER

    def test_ru101_id(self):
        station = Station.new_ru101(100, 'Rock FM')
        assert station.id == 'ru101_100'
        assert station.channel_id == 100
        assert station.stream_url == ''

    def test_id_reconstructible_from_source_and_internal_id(self):
        for station in (Station.new_amg('hypefm', 'ХАЙП FM', 'https://x'), Station.new_ru101(42, 'X')):
            assert make_station_id(station.source, station.internal_id) == station.id

    def test_internal_id(self):
        assert Station.new_ru101(7, 'Seven').internal_id == '7'
        assert Station.new_amg('jazzfm', 'Jazz FM', 'https://x').internal_id == 'jazzfm'

    def test_from_tag(self):
        assert RadioSource.from_tag('AMG') is RadioSource.AMG
        assert RadioSource.from_tag(' ru101 ') is RadioSource.RU101

    def test_from_tag_unknown(self):
        with pytest.raises(ValueError, match='Unknown source'):
            RadioSource.from_tag('spotify')


@pytest.mark.unit
class TestStationSerialization:

    def test_to_dict_uses_tag(self):
        data = Station.new_ru101(100, 'Rock FM').to_dict()
        assert data['source'] == 'ru101'
        assert data['channel_id'] == 100

    def test_round_trip(self):
        station = Station.new_amg('ruwave', 'Русская Волна', 'https://x')
        station.listeners = 12
        restored = Station.from_dict(station.to_dict())
        assert restored == station

    def test_from_dict_ignores_unknown_keys(self):
        station = Station.from_dict({
            'id': 'ru101_5', 'name': 'Five', 'source': 'ru101',
            'channel_id': '5', 'bitrate': 128
        })
        assert station.channel_id == 5
        assert station.logo is None

    def test_from_dict_requires_identity(self):
        with pytest.raises(ValueError):
            Station.from_dict({'name': 'No id', 'source': 'amg'})
        with pytest.raises(ValueError):
            Station.from_dict(None)

    def test_copy_is_independent(self):
        station = Station.new_ru101(1, 'One')
        clone = station.copy()
        clone.current_track = 'Changed'
        assert station.current_track is None
