"""Shared pytest fixtures."""
import httpx
import pytest

from episode_sync.mock_server import MOCK_CLIENT_ID, MOCK_CLIENT_SECRET, create_app
from episode_sync.tasks.auth import Credentials

BASE_URL = "http://testserver"


@pytest.fixture
def raw_episode():
    """Factory for catalog API episode dicts."""
    def make(n: int = 1, **overrides) -> dict:
        entry = {
            "id": f"ep{n}",
            "name": f"(S1-E{n}) Episode {n}",
            "description": f"Description of <i>episode</i> {n}",
            "html_description": f"<p>Description of <i>episode</i> {n}</p>",
            "release_date": f"2024-03-{n:02d}",
            "duration_ms": 1000 * n,
            "external_urls": {"spotify": f"https://open.spotify.com/episode/ep{n}"},
        }
        entry.update(overrides)
        return entry
    return make


@pytest.fixture
def mock_app():
    """Mock Spotify server with the default five episodes."""
    return create_app()


@pytest.fixture
def http_client(mock_app):
    """httpx client that talks to mock_app in-process."""
    with httpx.Client(transport=httpx.WSGITransport(app=mock_app), base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def credentials():
    return Credentials(client_id=MOCK_CLIENT_ID, client_secret=MOCK_CLIENT_SECRET)
