"""
RadioCommands tests

Error translation into user-facing messages, persistence of fetched
stations and cold-start hydration.
"""

import pytest

from radio_hub.commands import RadioCommands, CommandError, RETRY_HINT
from radio_hub.errors import SourceUnavailable, NoStreamAvailable, MetadataUnavailable
from radio_hub.models import RadioSource, Station
from radio_hub.service import StationService
from radio_hub.settings import SettingsStore


def make_commands(store, make_stub, amg_results=None, ru101_results=None, stream_url='https://stream/live'):
    amg = make_stub(RadioSource.AMG, amg_results or [[Station.new_amg('pop', 'Pop FM', 'https://x/pop')]])
    ru101 = make_stub(RadioSource.RU101, ru101_results or [[Station.new_ru101(1, 'One')]],
                      stream_url=stream_url)
    service = StationService(amg_source=amg, ru101_source=ru101)
    return RadioCommands(service, store)


@pytest.mark.unit
class TestFetch:

    def test_fetch_persists(self, store, settings_path, make_stub):
        commands = make_commands(store, make_stub)

        stations = commands.fetch_stations('amg')

        assert [s.id for s in stations] == ['amg_pop']
        assert [s.id for s in SettingsStore(settings_path).load_cached_stations('amg')] == ['amg_pop']

    def test_unknown_source(self, store, make_stub):
        commands = make_commands(store, make_stub)
        with pytest.raises(CommandError) as excinfo:
            commands.fetch_stations('spotify')
        assert 'Unknown source' in str(excinfo.value)
        assert not excinfo.value.transient

    def test_source_failure_message(self, store, make_stub):
        commands = make_commands(store, make_stub, amg_results=[SourceUnavailable('HTTP 500')])
        with pytest.raises(CommandError) as excinfo:
            commands.fetch_stations('amg')

        message = str(excinfo.value)
        assert message.startswith('Failed to load stations: HTTP 500')
        assert message.endswith(RETRY_HINT)
        assert excinfo.value.transient

    def test_cached_prefers_service_then_store(self, store, make_stub, ru101_station):
        store.save_cached_stations('ru101', [ru101_station])
        commands = make_commands(store, make_stub)

        assert [s.id for s in commands.get_cached_stations('ru101')] == ['ru101_100']

        commands.fetch_stations('ru101')
        assert [s.id for s in commands.get_cached_stations('ru101')] == ['ru101_1']

    def test_hydrate(self, store, make_stub, amg_station, ru101_station):
        store.save_cached_stations('amg', [amg_station])
        store.save_cached_stations('ru101', [ru101_station])
        commands = make_commands(store, make_stub)

        assert commands.hydrate() == 2
        assert commands.find_station_by_id('amg_ruwave').name == 'Русская Волна'

    def test_list_sources(self, store, make_stub):
        commands = make_commands(store, make_stub)
        assert [s['tag'] for s in commands.list_sources()] == ['amg', 'ru101']


@pytest.mark.unit
class TestStreamAndMetadata:

    def test_stream(self, store, make_stub, ru101_station):
        commands = make_commands(store, make_stub)
        assert commands.resolve_stream_url(ru101_station) == 'https://stream/live'

    def test_stream_failure_message(self, store, make_stub, ru101_station):
        commands = make_commands(store, make_stub, stream_url=NoStreamAvailable('no servers'))
        with pytest.raises(CommandError) as excinfo:
            commands.resolve_stream_url(ru101_station)
        assert str(excinfo.value) == f"Failed to get stream: no servers. {RETRY_HINT}"

    def test_metadata_returns_copy(self, store, make_stub, ru101_station):
        commands = make_commands(store, make_stub)

        refreshed = commands.refresh_metadata(ru101_station)

        assert refreshed.current_track == 'Song'
        assert refreshed.current_artist == 'Artist'
        assert ru101_station.current_track is None

    def test_metadata_failure_message(self, store, make_stub, ru101_station):
        commands = make_commands(store, make_stub)
        commands.service.ru101_source.refresh_metadata = _raise(MetadataUnavailable('status 0'))

        with pytest.raises(CommandError) as excinfo:
            commands.refresh_metadata(ru101_station)
        assert str(excinfo.value).startswith('Failed to update metadata: status 0')
        assert excinfo.value.transient


@pytest.mark.unit
def test_favorites_passthrough(store, make_stub, amg_station):
    commands = make_commands(store, make_stub)
    assert commands.toggle_favorite(amg_station) is True
    assert commands.is_favorite('amg_ruwave')
    assert [s.id for s in commands.get_favorites()] == ['amg_ruwave']


def _raise(error):
    def raiser(*args, **kwargs):
        raise error
    return raiser


@pytest.mark.unit
def test_all_cached_sorted_by_name(store, make_stub):
    commands = make_commands(store, make_stub)
    commands.fetch_stations('amg')
    commands.fetch_stations('ru101')

    assert [s.name for s in commands.get_all_cached_stations()] == ['One', 'Pop FM']
