"""
Tests for the summary endpoint.
"""

from podhub.config import Config

from .conftest import SAMPLE_SRT, add_episode


class TestSummaryRoute:
    """Tests for POST /api/summary."""

    def test_generates_then_caches(self, client, components):
        add_episode(components.db, "ep-1")
        components.provider.queue_response("Hosts talk about feeds.")
        payload = {"guid": "ep-1", "srtContent": SAMPLE_SRT, "apiKey": "sk-test"}

        first = client.post("/api/summary", json=payload)
        second = client.post("/api/summary", json=payload)

        assert first.status_code == 200
        assert first.json() == {"success": True, "summary": "Hosts talk about feeds.", "cached": False}
        assert second.json() == {"success": True, "summary": "Hosts talk about feeds.", "cached": True}
        assert len(components.provider.calls) == 1

    def test_missing_transcript(self, client, components):
        add_episode(components.db, "ep-1")

        response = client.post("/api/summary", json={"guid": "ep-1", "apiKey": "sk-test"})

        assert response.status_code == 400
        assert components.provider.calls == []

    def test_no_api_key(self, client, components, monkeypatch):
        monkeypatch.setattr(Config, "OPENAI_API_KEY", "")
        add_episode(components.db, "ep-1")

        response = client.post("/api/summary", json={"guid": "ep-1", "srtContent": SAMPLE_SRT})

        assert response.status_code == 503

    def test_provider_failure(self, client, components):
        add_episode(components.db, "ep-1")
        components.provider.error = RuntimeError("upstream 500")

        response = client.post(
            "/api/summary",
            json={"guid": "ep-1", "srtContent": SAMPLE_SRT, "apiKey": "sk-test"},
        )

        assert response.status_code == 502
        assert components.db.get_episode("ep-1").summary is None
