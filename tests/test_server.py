# Copyright (c) Syntropy Systems
"""Tests for the query protocol server and client."""

from __future__ import annotations

import time
from pathlib import Path

import httpx
import pytest
from conftest import EMPTY_PAGE_HTML, FIXED_TIME, TRANSCRIPT_HTML, FakeScheduler, transcript_table
from fastapi.testclient import TestClient

from gradewatch import __version__
from gradewatch.client import GradewatchClient, GradewatchClientError
from gradewatch.config import GradewatchConfig
from gradewatch.controller import AsyncioScheduler, StatsController
from gradewatch.dom import Page
from gradewatch.models.api import GET_STATS_MESSAGE, StatsResponse
from gradewatch.server import create_app
from gradewatch.sources import FileWatcher


def _client(markup: str) -> tuple[TestClient, StatsController]:
    controller = StatsController(Page(markup), FakeScheduler(), clock=lambda: FIXED_TIME)
    return TestClient(create_app(controller)), controller


class TestServer:
    """Tests for the FastAPI app."""

    def test_health(self):
        """Test the health endpoint reports controller state."""
        client, _ = _client(TRANSCRIPT_HTML)
        with client:
            response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "state": "attached", "version": __version__}

    def test_stats_message(self):
        """Test the get-stats message returns the snapshot."""
        client, _ = _client(TRANSCRIPT_HTML)
        with client:
            response = client.post("/api/v1/messages", json={"type": GET_STATS_MESSAGE})

        assert response.status_code == 200
        data = response.json()
        assert data["hasTable"] is True
        assert data["stats"]["includedCourses"] == 1
        assert data["stats"]["weightedAverage"] == 5.0
        assert [s["reason"] for s in data["stats"]["skipped"]] == ["passFail", "missingCredits"]

    def test_stats_without_table(self):
        """Test hasTable is false and stats null without a table."""
        client, controller = _client(EMPTY_PAGE_HTML)
        with client:
            response = client.get("/api/v1/stats")
        assert response.json() == {"stats": None, "hasTable": False}
        assert controller.state.value == "searching"

    def test_unknown_message_type(self):
        """Test that other message types are rejected."""
        client, _ = _client(TRANSCRIPT_HTML)
        with client:
            response = client.post("/api/v1/messages", json={"type": "ping"})
        assert response.status_code == 400
        assert "Unsupported message type" in response.json()["detail"]

    def test_message_without_type(self):
        """Test that a message with no type tag is rejected."""
        client, _ = _client(TRANSCRIPT_HTML)
        with client:
            response = client.post("/api/v1/messages", json={})
        assert response.status_code == 400


class TestGradewatchClient:
    """Tests for the HTTP client."""

    def test_get_stats(self):
        """Test the client parses a stats response."""
        payload = StatsResponse(stats=None, has_table=True).model_dump(mode="json", by_alias=True)

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/messages"
            return httpx.Response(200, json=payload)

        with GradewatchClient("http://gradewatch.test", transport=httpx.MockTransport(handler)) as client:
            response = client.get_stats()

        assert response.has_table is True
        assert response.stats is None

    def test_server_error_detail(self):
        """Test that error details from the server are surfaced."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"detail": "Unsupported message type: x"})

        with GradewatchClient("http://gradewatch.test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(GradewatchClientError, match="Unsupported message type"):
                client.get_stats()

    def test_connection_error(self):
        """Test that transport failures raise GradewatchClientError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with GradewatchClient("http://gradewatch.test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(GradewatchClientError, match="Connection error"):
                client.health()


class TestFileFollowing:
    """Tests for the app following a transcript file."""

    def test_rewritten_file_updates_served_stats(self, temp_dir: Path):
        """Test that the lifespan task applies file changes to served stats."""
        path = temp_dir / "transcript.html"
        path.write_text(TRANSCRIPT_HTML, encoding="utf-8")
        watcher = FileWatcher(path)
        page = Page(watcher.read())
        controller = StatsController(
            page,
            AsyncioScheduler(),
            GradewatchConfig(debounce_interval=0.01, reattach_on_detach=True),
            clock=lambda: FIXED_TIME,
        )
        app = create_app(controller, page=page, watcher=watcher, poll_interval=0.01)

        with TestClient(app) as client:
            assert client.get("/api/v1/stats").json()["stats"]["totalCourses"] == 3

            path.write_text(
                "<html><body>" + transcript_table(("MVE045", "", "7,5", "4")) + "</body></html>",
                encoding="utf-8",
            )
            deadline = time.monotonic() + 2.0
            data = client.get("/api/v1/stats").json()
            while data["stats"]["totalCourses"] != 1 and time.monotonic() < deadline:
                time.sleep(0.02)
                data = client.get("/api/v1/stats").json()

        assert data["hasTable"] is True
        assert data["stats"]["totalCourses"] == 1
        assert data["stats"]["weightedAverage"] == 4.0
