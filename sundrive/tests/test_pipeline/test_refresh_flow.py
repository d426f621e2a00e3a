"""Tests for the refresh flow with mocked location and twilight source."""

import sqlite3
from unittest.mock import MagicMock

import pytest

from sundrive.config.schema import CompanionConfig
from sundrive.device.channel import MemoryChannel
from sundrive.ingest.location import LocationError, LocationProvider
from sundrive.ingest.sunrise_sunset_client import SunriseSunsetClient, TwilightSourceError
from sundrive.models.common import Coordinates
from sundrive.models.refresh import LocationSource, RefreshState
from sundrive.pipeline.refresh_flow import RefreshContext, RefreshFlow
from sundrive.storage.cache_store import CacheStore

TODAY = "2026-10-18"
TOMORROW = "2026-10-19"
TZ = "Etc/GMT+1"
HERE = Coordinates(41.65, -0.88)

ZARAGOZA_ENCODED = {
    "sunrise": 448,
    "sunset": 1011,
    "civil_twilight_begin": 418,
    "civil_twilight_end": 1041,
    "nautical_twilight_begin": 385,
    "nautical_twilight_end": 1074,
    "astronomical_twilight_begin": 353,
    "astronomical_twilight_end": 1106,
}


def _fail_on_insert(sql, *params):
    """Reads find an empty table; writes fail like a full disk."""
    if sql.startswith("INSERT"):
        raise sqlite3.OperationalError("database or disk is full")
    cursor = MagicMock(spec=sqlite3.Cursor)
    cursor.fetchone.return_value = None
    return cursor


@pytest.fixture
def location() -> MagicMock:
    provider = MagicMock(spec=LocationProvider)
    provider.locate.return_value = HERE
    return provider


@pytest.fixture
def source(zaragoza_dataset) -> MagicMock:
    client = MagicMock(spec=SunriseSunsetClient)
    client.get_twilight.return_value = zaragoza_dataset
    return client


@pytest.fixture
def channel() -> MemoryChannel:
    return MemoryChannel()


@pytest.fixture
def flow(cache_store: CacheStore, location, source, channel) -> RefreshFlow:
    return RefreshFlow(
        CompanionConfig(), RefreshContext(cache_store=cache_store), location, source, channel
    )


class TestFirstRefresh:
    def test_fetches_caches_and_delivers(self, flow, source, channel, cache_store):
        outcome = flow.run(TZ, today=TODAY, now=0.0)

        source.get_twilight.assert_called_once_with(HERE, TZ)
        assert outcome.state == RefreshState.DELIVER
        assert outcome.source_queried is True
        assert outcome.cache_hit is False
        assert outcome.delivered is True
        assert channel.sent == [ZARAGOZA_ENCODED]

        entry = cache_store.get()
        assert entry is not None
        assert (entry.date, entry.latitude, entry.longitude, entry.tzid) == (
            TODAY, 41.65, -0.88, TZ,
        )

    def test_location_timeout_uses_fallback(self, flow, location, source, cache_store):
        location.locate.side_effect = LocationError("timed out", reason="timeout")

        outcome = flow.run(TZ, today=TODAY, now=0.0)

        assert outcome.location_source == LocationSource.FALLBACK
        assert outcome.coordinates == Coordinates(41.65606, -0.87734)
        source.get_twilight.assert_called_once_with(Coordinates(41.65606, -0.87734), TZ)
        entry = cache_store.get()
        assert (entry.latitude, entry.longitude) == (41.66, -0.88)
        assert outcome.delivered is True

    def test_location_timeout_uses_fallback_for_cache_lookup(
        self, flow, location, source, cache_store, zaragoza_dataset
    ):
        cache_store.put(Coordinates(41.66, -0.88), TZ, zaragoza_dataset, today=TODAY)
        location.locate.side_effect = LocationError("denied", reason="denied")

        outcome = flow.run(TZ, today=TODAY, now=0.0)

        assert outcome.cache_hit is True
        source.get_twilight.assert_not_called()

    def test_location_timeout_passed_to_provider(self, flow, location):
        flow.run(TZ, today=TODAY, now=0.0)
        location.locate.assert_called_once_with(15.0)


class TestCachedRefresh:
    def test_same_day_uses_cache(self, flow, source, channel):
        flow.run(TZ, today=TODAY, now=0.0)
        outcome = flow.run(TZ, today=TODAY, now=1000.0)

        assert source.get_twilight.call_count == 1
        assert outcome.cache_hit is True
        assert outcome.source_queried is False
        assert channel.sent == [ZARAGOZA_ENCODED, ZARAGOZA_ENCODED]

    def test_next_day_refetches(self, flow, source):
        flow.run(TZ, today=TODAY, now=0.0)
        outcome = flow.run(TZ, today=TOMORROW, now=1000.0)

        assert source.get_twilight.call_count == 2
        assert outcome.cache_hit is False

    def test_timezone_change_refetches(self, flow, source):
        flow.run(TZ, today=TODAY, now=0.0)
        flow.run("Europe/Madrid", today=TODAY, now=1000.0)
        assert source.get_twilight.call_count == 2

    def test_moved_refetches(self, flow, location, source):
        flow.run(TZ, today=TODAY, now=0.0)
        location.locate.return_value = Coordinates(41.80, -0.88)
        flow.run(TZ, today=TODAY, now=1000.0)
        assert source.get_twilight.call_count == 2


class TestRecentPosition:
    def test_recent_position_reused(self, flow, location):
        flow.run(TZ, today=TODAY, now=0.0)
        outcome = flow.run(TZ, today=TODAY, now=30.0)

        assert location.locate.call_count == 1
        assert outcome.location_source == LocationSource.RECENT

    def test_old_position_relocated(self, flow, location):
        flow.run(TZ, today=TODAY, now=0.0)
        outcome = flow.run(TZ, today=TODAY, now=61.0)

        assert location.locate.call_count == 2
        assert outcome.location_source == LocationSource.PROVIDER

    def test_fallback_not_remembered(self, flow, location):
        location.locate.side_effect = LocationError("timed out", reason="timeout")
        flow.run(TZ, today=TODAY, now=0.0)
        assert flow.context.last_position is None


class TestFailures:
    def test_fetch_failure_aborts_without_delivery(self, flow, source, channel, cache_store):
        source.get_twilight.side_effect = TwilightSourceError("HTTP 500", 500)

        outcome = flow.run(TZ, today=TODAY, now=0.0)

        assert outcome.state == RefreshState.ABORTED
        assert outcome.delivered is False
        assert outcome.payload is None
        assert channel.sent == []
        assert cache_store.get() is None
        assert source.get_twilight.call_count == 1

    def test_fetch_failure_does_not_deliver_stale_cache(
        self, flow, source, channel, cache_store, zaragoza_dataset
    ):
        cache_store.put(HERE, TZ, zaragoza_dataset, today="2026-10-17")
        source.get_twilight.side_effect = TwilightSourceError("bad status", 200, "INVALID_REQUEST")

        outcome = flow.run(TZ, today=TODAY, now=0.0)

        assert outcome.state == RefreshState.ABORTED
        assert channel.sent == []

    def test_delivery_failure_logged_not_retried(
        self, cache_store, location, source, zaragoza_dataset
    ):
        channel = MemoryChannel(reject=True)
        flow = RefreshFlow(
            CompanionConfig(), RefreshContext(cache_store=cache_store), location, source, channel
        )

        outcome = flow.run(TZ, today=TODAY, now=0.0)

        assert outcome.state == RefreshState.DELIVER
        assert outcome.delivered is False
        assert outcome.payload == ZARAGOZA_ENCODED
        # Data is still cached for the next cycle
        assert cache_store.get().data == zaragoza_dataset

    def test_cache_write_failure_still_delivers(self, location, source, channel):
        conn = MagicMock(spec=sqlite3.Connection)
        conn.execute.side_effect = _fail_on_insert
        store = CacheStore(conn)
        flow = RefreshFlow(
            CompanionConfig(), RefreshContext(cache_store=store), location, source, channel
        )

        outcome = flow.run(TZ, today=TODAY, now=0.0)

        assert outcome.delivered is True
        assert channel.sent == [ZARAGOZA_ENCODED]
        assert outcome.source_queried is True
        assert any("INSERT" in c.args[0] for c in conn.execute.call_args_list)
