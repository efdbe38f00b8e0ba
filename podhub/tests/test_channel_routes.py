"""
Tests for channel and episode listing endpoints.
"""

import httpx

from .conftest import add_episode, make_item


class TestListChannels:
    def test_lists_channels(self, client):
        response = client.get("/api/channels")

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data] == ["test"]
        assert data[0]["rss"] == "https://feeds.example.com/test.xml"
        assert data[0]["author"] == "Tester"


class TestListEpisodes:
    """Tests for GET /api/channels/{id}/episodes."""

    def test_first_request_syncs(self, client, components):
        components.feed_parser.items = [make_item(2), make_item(1)]

        response = client.get("/api/channels/test/episodes")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [e["guid"] for e in data["episodes"]] == ["ep-2", "ep-1"]
        episode = data["episodes"][0]
        assert episode["audioUrl"] == "https://cdn.example.com/ep2.mp3"
        assert episode["duration"] == "00:30:00"
        assert episode["transcription_status"] == "none"
        assert components.feed_parser.urls == ["https://feeds.example.com/test.xml"]

    def test_fresh_cache_skips_fetch(self, client, components):
        components.feed_parser.items = [make_item(1)]

        client.get("/api/channels/test/episodes")
        client.get("/api/channels/test/episodes")

        assert components.feed_parser.fetch_count == 1

    def test_refresh_param_forces_fetch(self, client, components):
        components.feed_parser.items = [make_item(1)]

        client.get("/api/channels/test/episodes")
        client.get("/api/channels/test/episodes?refresh=true")

        assert components.feed_parser.fetch_count == 2

    def test_feed_failure_serves_cache(self, client, components):
        add_episode(components.db, "cached")
        components.feed_parser.error = httpx.ConnectTimeout("slow")

        response = client.get("/api/channels/test/episodes?refresh=true")

        assert response.status_code == 200
        assert [e["guid"] for e in response.json()["episodes"]] == ["cached"]

    def test_listing_heals_missing_cache(self, client, components, temp_media_dir):
        add_episode(components.db, "ep-1")
        components.db.mark_channel_synced("test")
        components.db.set_cached_audio_path("ep-1", str(temp_media_dir / "ep-1.mp3"))

        response = client.get("/api/channels/test/episodes")

        assert response.json()["episodes"][0]["local_audio_path"] is None
        assert components.db.get_episode("ep-1").cached_audio_path is None

    def test_unknown_channel(self, client, components):
        response = client.get("/api/channels/nope/episodes")

        assert response.status_code == 404
        assert components.feed_parser.fetch_count == 0
