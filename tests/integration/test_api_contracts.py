"""
API Contract Tests
==================

Tests for the HTTP surface: status codes, media types, caching headers and
response bodies of every endpoint.
"""

import time
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from vocab_wallpaper.api.main import create_app
from vocab_wallpaper.models.schemas import GenerationTrigger

from tests.utils.assertions import assert_no_cache_headers, assert_valid_png
from tests.utils.mocks import make_png

pytestmark = pytest.mark.integration


def wait_for(condition: Callable[[], bool], timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not met before timeout")
        time.sleep(0.02)


@pytest.fixture
def app(test_settings, generation_service):
    return create_app(settings=test_settings, service=generation_service)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


class TestRootEndpoint:

    def test_root_info(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Vocabulary Wallpaper"
        assert data["version"] == "1.0.0"
        assert data["endpoints"]["daily_wallpaper"] == "GET /daily.png"

    def test_request_id_header(self, client):
        response = client.get("/")
        assert len(response.headers["x-request-id"]) == 36


class TestDailyWallpaperEndpoint:

    def test_missing_wallpaper_returns_404_and_generates(self, client, generation_service, store):
        response = client.get("/daily.png")

        assert response.status_code == 404
        assert response.text == "Image not found. Generating..."
        assert response.headers["content-type"].startswith("text/plain")

        wait_for(store.exists)
        wait_for(lambda: generation_service.last_outcome is not None)
        assert generation_service.last_outcome.trigger == GenerationTrigger.REQUEST_MISS

    def test_existing_wallpaper_served(self, client, store):
        png = make_png("#123456")
        store.path.write_bytes(png)

        response = client.get("/daily.png")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content == png
        assert_no_cache_headers(response)

    def test_served_wallpaper_does_not_trigger_generation(self, client, store, compositor):
        store.path.write_bytes(make_png())

        client.get("/daily.png")

        assert compositor.captured_html == []

    def test_repeated_requests_serve_latest(self, client, store):
        store.path.write_bytes(make_png("#000000"))
        first = client.get("/daily.png").content
        store.path.write_bytes(make_png("#ffffff"))
        second = client.get("/daily.png").content

        assert first != second
        assert_valid_png(second)


class TestHealthEndpoint:

    def test_degraded_without_wallpaper(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["artifact_present"] is False
        assert data["scheduler_running"] is False
        assert data["next_run_at"] is None
        assert data["last_outcome"] is None

    def test_healthy_with_wallpaper(self, client, store):
        store.path.write_bytes(make_png())

        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["artifact_present"] is True
        assert data["version"] == "1.0.0"


class TestPublicFiles:

    def test_public_directory_served(self, client, test_settings):
        (test_settings.public_dir / "notes.txt").write_text("hello")

        response = client.get("/public/notes.txt")

        assert response.status_code == 200
        assert response.text == "hello"

    def test_public_missing_file(self, client):
        assert client.get("/public/missing.png").status_code == 404
