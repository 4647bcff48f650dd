"""Tests for the FastAPI server endpoints.

HOW: Requests go through FastAPI's TestClient; no network is involved.
"""

import pytest
from fastapi.testclient import TestClient

from quill_captions import __version__
from quill_captions.server.app import app


@pytest.fixture
def client():
    return TestClient(app)


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}


# ---------------------------------------------------------------------------
# POST /captions/pages
# ---------------------------------------------------------------------------


class TestCreatePages:

    def test_reference_scenario(self, client, e2e_srt):
        resp = client.post("/captions/pages", json={"srt": e2e_srt})
        assert resp.status_code == 200
        body = resp.json()
        assert body["captions"] == [
            {"text": "hello world", "startMs": 0, "endMs": 1200},
            {"text": "goodbye", "startMs": 1400, "endMs": 2000},
        ]
        assert body["pages"] == [
            {
                "tokens": [
                    {"text": "hello", "fromMs": 0, "toMs": 600},
                    {"text": "world", "fromMs": 600, "toMs": 1200},
                ],
                "startMs": 0,
                "durationMs": 1200,
            },
            {
                "tokens": [{"text": "goodbye", "fromMs": 1400, "toMs": 2000}],
                "startMs": 1400,
                "durationMs": 600,
            },
        ]

    def test_tunables(self, client, e2e_srt):
        resp = client.post(
            "/captions/pages",
            json={"srt": e2e_srt, "gap_threshold_ms": 500, "split_words": False},
        )
        assert resp.status_code == 200
        pages = resp.json()["pages"]
        assert len(pages) == 1
        assert [t["text"] for t in pages[0]["tokens"]] == ["hello world", "goodbye"]

    def test_blank_srt(self, client):
        resp = client.post("/captions/pages", json={"srt": "   "})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "SRT payload missing."

    def test_malformed_srt(self, client):
        resp = client.post("/captions/pages", json={"srt": "1\n00:00:99,000 --> 00:00:01,000\nhi\n"})
        assert resp.status_code == 422
        assert resp.json()["detail"].startswith("Block 1:")

    def test_invalid_tunable(self, client, e2e_srt):
        resp = client.post("/captions/pages", json={"srt": e2e_srt, "max_tokens": 0})
        assert resp.status_code == 422

    def test_missing_body_field(self, client):
        resp = client.post("/captions/pages", json={})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# POST /captions/active
# ---------------------------------------------------------------------------


class TestResolveActive:

    PAGES = [
        {
            "tokens": [
                {"text": "hello", "fromMs": 0, "toMs": 600},
                {"text": "world", "fromMs": 600, "toMs": 1200},
            ],
            "startMs": 0,
            "durationMs": 1200,
        },
    ]

    def test_active(self, client):
        resp = client.post("/captions/active", json={"pages": self.PAGES, "time_ms": 300})
        assert resp.status_code == 200
        active = resp.json()["active"]
        assert active["pageIndex"] == 0
        assert active["tokenIndex"] == 0
        assert active["progress"] == [0.5, 0.0]

    def test_inactive(self, client):
        resp = client.post("/captions/active", json={"pages": self.PAGES, "time_ms": 1201})
        assert resp.status_code == 200
        assert resp.json() == {"active": None}

    def test_invalid_pages(self, client):
        pages = [dict(self.PAGES[0], durationMs=100)]
        resp = client.post("/captions/active", json={"pages": pages, "time_ms": 0})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# POST /transcriptions/srt
# ---------------------------------------------------------------------------


class TestCreateSrt:

    def test_list(self, client, whisper_items):
        resp = client.post("/transcriptions/srt", json={"transcription": whisper_items})
        assert resp.status_code == 200
        assert resp.json()["srt"].startswith("1\n00:00:00,000 --> 00:00:00,400\nHello\n")

    def test_keyed_object(self, client, whisper_items, whisper_items_keyed):
        listed = client.post("/transcriptions/srt", json={"transcription": whisper_items})
        keyed = client.post("/transcriptions/srt", json={"transcription": whisper_items_keyed})
        assert keyed.json() == listed.json()

    def test_empty(self, client):
        resp = client.post("/transcriptions/srt", json={"transcription": []})
        assert resp.status_code == 422
        assert "no usable segments" in resp.json()["detail"]
