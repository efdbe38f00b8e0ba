"""
Tests for feed synchronization and the staleness policy.
"""

import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from podhub.database import TranscriptionState
from podhub.services import ChannelService
from podhub.sync import FeedSyncEngine

from .conftest import add_episode, make_item


@pytest.fixture
def engine(test_db, feed_parser):
    return FeedSyncEngine(test_db, feed_parser)


class TestNeedsSync:
    """Tests for the staleness decision."""

    def test_refresh_forces_sync(self, engine, test_db):
        test_db.mark_channel_synced("test")
        channel = test_db.get_channel("test")
        assert engine.needs_sync(channel, episode_count=10, refresh=True) is True

    def test_empty_channel_needs_sync(self, engine, test_db):
        test_db.mark_channel_synced("test")
        channel = test_db.get_channel("test")
        assert engine.needs_sync(channel, episode_count=0) is True

    def test_never_synced_is_stale(self, engine, test_db):
        channel = test_db.get_channel("test")
        assert channel.last_synced_at is None
        assert engine.needs_sync(channel, episode_count=5) is True

    def test_recent_sync_is_fresh(self, engine, test_db):
        test_db.mark_channel_synced("test", datetime.now() - timedelta(minutes=10))
        channel = test_db.get_channel("test")
        assert engine.needs_sync(channel, episode_count=5) is False

    def test_old_sync_is_stale(self, engine, test_db):
        test_db.mark_channel_synced("test", datetime.now() - timedelta(hours=2))
        channel = test_db.get_channel("test")
        assert engine.needs_sync(channel, episode_count=5) is True

    def test_custom_window(self, test_db, feed_parser):
        engine = FeedSyncEngine(test_db, feed_parser, stale_after=timedelta(minutes=5))
        test_db.mark_channel_synced("test", datetime.now() - timedelta(minutes=10))
        channel = test_db.get_channel("test")
        assert engine.needs_sync(channel, episode_count=5) is True


class TestSync:
    """Tests for reconciling a feed into the store."""

    def test_first_sync_inserts_all_items(self, engine, test_db, feed_parser):
        feed_parser.items = [make_item(n) for n in range(60, 0, -1)]

        result = engine.sync(test_db.get_channel("test"))

        assert result.ok
        assert result.new_count == 60
        assert test_db.count_episodes("test") == 60

    def test_resync_is_idempotent(self, engine, test_db, feed_parser):
        feed_parser.items = [make_item(3), make_item(2), make_item(1)]
        channel = test_db.get_channel("test")

        engine.sync(channel)
        result = engine.sync(channel)

        assert result.new_count == 0
        assert result.updated_count == 3
        assert test_db.count_episodes("test") == 3

    def test_resync_caps_items_when_channel_has_episodes(self, engine, test_db, feed_parser):
        add_episode(test_db, "existing")
        feed_parser.items = [make_item(n) for n in range(60, 0, -1)]

        result = engine.sync(test_db.get_channel("test"))

        assert result.new_count == 50
        # Oldest ten items in the feed were not processed
        assert test_db.get_episode("ep-10") is None
        assert test_db.get_episode("ep-11") is not None

    def test_upsert_preserves_pipeline_fields(self, engine, test_db, feed_parser):
        feed_parser.items = [make_item(1)]
        channel = test_db.get_channel("test")
        engine.sync(channel)

        test_db.set_cached_audio_path("ep-1", "/tmp/ep-1.mp3")
        test_db.complete_transcription("ep-1", "1\n00:00 --> 00:01\nhi", force=True)
        test_db.update_summary("ep-1", "A summary")

        feed_parser.items = [make_item(1, title="Renamed", enclosure_url="https://cdn.example.com/new.mp3")]
        engine.sync(channel)

        episode = test_db.get_episode("ep-1")
        assert episode.title == "Renamed"
        assert episode.audio_url == "https://cdn.example.com/new.mp3"
        assert episode.cached_audio_path == "/tmp/ep-1.mp3"
        assert episode.transcript.startswith("1\n")
        assert episode.summary == "A summary"
        assert episode.transcription_state == TranscriptionState.COMPLETED

    def test_missing_enclosure_and_date(self, engine, test_db, feed_parser):
        feed_parser.items = [make_item(1, enclosure_url=None, published=None)]

        engine.sync(test_db.get_channel("test"))

        episode = test_db.get_episode("ep-1")
        assert episode.audio_url == ""
        assert episode.published_at is not None

    @pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
    def test_undated_item_uses_utc(self, engine, test_db, feed_parser, monkeypatch):
        monkeypatch.setenv("TZ", "JST-9")
        time.tzset()
        try:
            feed_parser.items = [make_item(1, published=None)]
            engine.sync(test_db.get_channel("test"))
        finally:
            monkeypatch.undo()
            time.tzset()

        utc_now = datetime.now(timezone.utc).replace(tzinfo=None)
        published = test_db.get_episode("ep-1").published_at
        assert abs(published - utc_now) < timedelta(minutes=5)

    def test_guid_falls_back_to_link(self, engine, test_db, feed_parser):
        feed_parser.items = [
            make_item(1, guid="", link="https://example.com/only-link"),
            make_item(2, guid="", link=None),
        ]

        result = engine.sync(test_db.get_channel("test"))

        assert result.new_count == 1
        assert test_db.get_episode("https://example.com/only-link") is not None

    def test_success_marks_synced_even_without_new_items(self, engine, test_db, feed_parser):
        feed_parser.items = []

        result = engine.sync(test_db.get_channel("test"))

        assert result.ok
        assert result.new_count == 0
        assert test_db.get_channel("test").last_synced_at is not None

    def test_fetch_failure_leaves_store_untouched(self, engine, test_db, feed_parser):
        add_episode(test_db, "cached")
        synced_at = datetime.now() - timedelta(hours=3)
        test_db.mark_channel_synced("test", synced_at)
        feed_parser.error = httpx.ConnectError("boom")

        result = engine.sync(test_db.get_channel("test"))

        assert not result.ok
        assert "boom" in result.error
        assert test_db.count_episodes("test") == 1
        last = test_db.get_channel("test").last_synced_at
        assert abs((last - synced_at).total_seconds()) < 1


class TestListEpisodes:
    """Tests for listing with self-healing cache paths."""

    def test_newest_first(self, engine, test_db):
        add_episode(test_db, "old", published_at=datetime(2023, 1, 1))
        add_episode(test_db, "new", published_at=datetime(2024, 6, 1))

        episodes = engine.list_episodes("test")

        assert [e.guid for e in episodes] == ["new", "old"]

    def test_clears_missing_cache_path(self, engine, test_db, temp_media_dir):
        add_episode(test_db, "gone")
        add_episode(test_db, "present")
        present = temp_media_dir / "present.mp3"
        present.write_bytes(b"audio")
        test_db.set_cached_audio_path("gone", str(temp_media_dir / "gone.mp3"))
        test_db.set_cached_audio_path("present", str(present))

        episodes = {e.guid: e for e in engine.list_episodes("test")}

        assert episodes["gone"].cached_audio_path is None
        assert test_db.get_episode("gone").cached_audio_path is None
        assert episodes["present"].cached_audio_path == str(present)


class TestChannelService:
    """Tests for the staleness policy as applied per request."""

    def test_fresh_channel_is_served_from_store(self, engine, test_db, feed_parser):
        feed_parser.items = [make_item(1)]
        service = ChannelService(test_db, engine)

        service.get_episodes("test")
        service.get_episodes("test")

        assert feed_parser.fetch_count == 1

    def test_refresh_refetches(self, engine, test_db, feed_parser):
        feed_parser.items = [make_item(1)]
        service = ChannelService(test_db, engine)

        service.get_episodes("test")
        service.get_episodes("test", refresh=True)

        assert feed_parser.fetch_count == 2

    def test_stale_cache_served_when_fetch_fails(self, engine, test_db, feed_parser):
        add_episode(test_db, "cached")
        feed_parser.error = httpx.ConnectError("offline")
        service = ChannelService(test_db, engine)

        episodes = service.get_episodes("test", refresh=True)

        assert [e.guid for e in episodes] == ["cached"]

    def test_two_hour_old_sync_fetches_once(self, engine, test_db, feed_parser):
        add_episode(test_db, "cached")
        test_db.mark_channel_synced("test", datetime.now() - timedelta(hours=2))
        feed_parser.items = [make_item(1)]
        service = ChannelService(test_db, engine)

        service.get_episodes("test")

        assert feed_parser.fetch_count == 1

    def test_ten_minute_old_sync_does_not_fetch(self, engine, test_db, feed_parser):
        add_episode(test_db, "cached")
        test_db.mark_channel_synced("test", datetime.now() - timedelta(minutes=10))
        service = ChannelService(test_db, engine)

        episodes = service.get_episodes("test")

        assert feed_parser.fetch_count == 0
        assert [e.guid for e in episodes] == ["cached"]
