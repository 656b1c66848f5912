"""pytest tests for the token exchange and paginated episode fetch, against the mock server."""
import httpx
import pytest

from episode_sync.errors import AuthenticationError, ConfigurationError, FetchError
from episode_sync.mock_server import MOCK_TOKEN, create_app, generate_episodes
from episode_sync.tasks.auth import Credentials, basic_auth_header, load_credentials, request_access_token
from episode_sync.tasks.catalog import fetch_all_episodes

BASE_URL = "http://testserver"
TOKEN_URL = f"{BASE_URL}/api/token"


def episodes_url(limit: int = 50) -> str:
    return f"{BASE_URL}/v1/shows/mockshow/episodes?limit={limit}&market=TW"


def client_for(app) -> httpx.Client:
    return httpx.Client(transport=httpx.WSGITransport(app=app), base_url=BASE_URL)


class TestAccessToken:

    def test_basic_auth_header(self):
        header = basic_auth_header(Credentials(client_id="id", client_secret="secret"))
        assert header == "Basic aWQ6c2VjcmV0"

    def test_token_exchange(self, http_client, credentials, mock_app):
        assert request_access_token(http_client, credentials, TOKEN_URL) == MOCK_TOKEN
        assert mock_app.config["REQUESTS"] == [("POST", "/api/token")]

    def test_rejected_credentials(self, http_client):
        bad = Credentials(client_id="mock-client", client_secret="wrong")
        with pytest.raises(AuthenticationError, match="Invalid client secret"):
            request_access_token(http_client, bad, TOKEN_URL)

    def test_error_without_description(self, credentials):
        def handler(request):
            return httpx.Response(500, text="oops")

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(AuthenticationError, match="HTTP 500"):
                request_access_token(client, credentials, TOKEN_URL)

    def test_unreachable_token_endpoint(self, credentials):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(AuthenticationError, match="connection refused") as excinfo:
                request_access_token(client, credentials, TOKEN_URL)
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    def test_secret_not_in_repr(self, credentials):
        assert "mock-secret" not in repr(credentials)


class TestLoadCredentials:

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "abc")
        monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "xyz")
        creds = load_credentials()
        assert creds.client_id == "abc"
        assert creds.client_secret.get_secret_value() == "xyz"

    @pytest.mark.parametrize("client_id, secret", [("", "xyz"), ("abc", ""), ("", ""), ("  ", "xyz")])
    def test_missing(self, monkeypatch, client_id, secret):
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", client_id)
        monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", secret)
        with pytest.raises(ConfigurationError, match="Missing Spotify credentials"):
            load_credentials()

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
        monkeypatch.delenv("SPOTIFY_CLIENT_SECRET", raising=False)
        with pytest.raises(ConfigurationError, match="SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET"):
            load_credentials()


class TestFetchAllEpisodes:

    def test_single_page(self):
        """A null next link on the first page means exactly one request."""
        app = create_app(generate_episodes(3))
        with client_for(app) as client:
            episodes = fetch_all_episodes(client, MOCK_TOKEN, episodes_url())

        assert episodes == generate_episodes(3)
        assert len(app.config["REQUESTS"]) == 1

    def test_follows_next_links(self):
        app = create_app(generate_episodes(7))
        with client_for(app) as client:
            episodes = fetch_all_episodes(client, MOCK_TOKEN, episodes_url(limit=3))

        assert [ep["id"] for ep in episodes] == [ep["id"] for ep in generate_episodes(7)]
        assert len(app.config["REQUESTS"]) == 3

    def test_empty_show(self):
        app = create_app([])
        with client_for(app) as client:
            assert fetch_all_episodes(client, MOCK_TOKEN, episodes_url()) == []

    def test_bad_token(self, http_client):
        with pytest.raises(FetchError, match="Invalid access token"):
            fetch_all_episodes(http_client, "nope", episodes_url())

    def test_failure_on_later_page_discards_everything(self):
        app = create_app(generate_episodes(6), fail_after_pages=1)
        with client_for(app) as client:
            with pytest.raises(FetchError, match="Server error"):
                fetch_all_episodes(client, MOCK_TOKEN, episodes_url(limit=2))
        assert len(app.config["REQUESTS"]) == 2

    def test_error_without_message(self):
        def handler(request):
            return httpx.Response(502, text="<html>Bad gateway</html>")

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(FetchError, match="Unknown error"):
                fetch_all_episodes(client, MOCK_TOKEN, episodes_url())

    def test_connection_lost_on_later_page(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            if len(calls) > 1:
                raise httpx.ReadError("connection reset", request=request)
            return httpx.Response(200, json={"items": [{"id": "a"}], "next": episodes_url() + "&offset=1"})

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(FetchError, match="connection reset"):
                fetch_all_episodes(client, MOCK_TOKEN, episodes_url())
        assert len(calls) == 2

    def test_malformed_page(self):
        def handler(request):
            return httpx.Response(200, json={"next": None})

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(FetchError, match="no item list"):
                fetch_all_episodes(client, MOCK_TOKEN, episodes_url())

    def test_sends_bearer_token(self):
        seen = []

        def handler(request):
            seen.append(request.headers["Authorization"])
            return httpx.Response(200, json={"items": [], "next": None})

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            fetch_all_episodes(client, "tok", episodes_url())
        assert seen == ["Bearer tok"]
