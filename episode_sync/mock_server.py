#!/usr/bin/env python3
"""Mock Spotify server for testing the episode sync.

Provides a client-credentials token endpoint and a paginated episode listing
shaped like the Spotify Web API.

Usage:
    python -m episode_sync.mock_server

Endpoints:
    POST /api/token                          - Token for the mock client id/secret
    GET  /v1/shows/<show_id>/episodes        - Episode pages (limit/offset/market)
"""
import base64

from flask import Flask, jsonify, request

HOST = "localhost"
PORT = 5099

MOCK_CLIENT_ID = "mock-client"
MOCK_CLIENT_SECRET = "mock-secret"
MOCK_TOKEN = "mock-access-token"
MOCK_SHOW_ID = "mockshow"


def generate_episodes(count: int = 5) -> list[dict]:
    """Generate mock episodes, newest first like the real API."""
    titles = {
        1: "#1 - Welcome To The Show",
        2: "(S1-E2) Little Nature Explorer",
        3: "S1-EP3 <Rainy> Days",
        4: "Field Trip Special",
        5: "(S2-E1) Back To School",
    }
    episodes = []
    for n in range(count, 0, -1):
        title = titles.get(n, f"(S2-E{n - 4}) Mock Episode {n}")
        episodes.append({
            "id": f"mock{n:04d}",
            "name": title,
            "description": f"Mock episode {n}. <b>Show notes</b> for testing the episode sync.",
            "html_description": f"<p>Mock episode {n}. <b>Show notes</b> for testing the episode sync.</p>",
            "release_date": f"2025-01-{n:02d}",
            "duration_ms": 60000 * n,
            "external_urls": {"spotify": f"https://open.spotify.com/episode/mock{n:04d}"},
        })
    return episodes


def create_app(episodes: list[dict] | None = None,
               client_id: str = MOCK_CLIENT_ID,
               client_secret: str = MOCK_CLIENT_SECRET,
               fail_after_pages: int | None = None) -> Flask:
    """
    Build a mock server.

    Args:
        episodes: Episodes served for every show id (default: generate_episodes())
        client_id: Client id accepted by the token endpoint
        client_secret: Client secret accepted by the token endpoint
        fail_after_pages: Answer page requests after this many with a 500

    Every request is appended to ``app.config["REQUESTS"]`` as (method, path).
    """
    app = Flask(__name__)
    app.config["EPISODES"] = generate_episodes() if episodes is None else episodes
    app.config["REQUESTS"] = []
    expected_auth = "Basic " + base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()

    @app.before_request
    def record_request():
        app.config["REQUESTS"].append((request.method, request.path))

    @app.route("/api/token", methods=["POST"])
    def token():
        """Return a bearer token for the expected credentials."""
        if request.form.get("grant_type") != "client_credentials":
            return jsonify(error="unsupported_grant_type",
                           error_description="grant_type must be client_credentials"), 400
        if request.headers.get("Authorization") != expected_auth:
            return jsonify(error="invalid_client", error_description="Invalid client secret"), 400
        return jsonify(access_token=MOCK_TOKEN, token_type="Bearer", expires_in=3600)

    @app.route("/v1/shows/<show_id>/episodes")
    def episodes_page(show_id: str):
        """Return one page of episodes with a next link until the list runs out."""
        if request.headers.get("Authorization") != f"Bearer {MOCK_TOKEN}":
            return jsonify(error={"status": 401, "message": "Invalid access token"}), 401

        page_requests = sum(1 for _, path in app.config["REQUESTS"] if path == request.path)
        if fail_after_pages is not None and page_requests > fail_after_pages:
            return jsonify(error={"status": 500, "message": "Server error"}), 500

        limit = request.args.get("limit", 20, type=int)
        offset = request.args.get("offset", 0, type=int)
        market = request.args.get("market", "US")
        items = app.config["EPISODES"][offset:offset + limit]

        next_url = None
        if offset + limit < len(app.config["EPISODES"]):
            next_url = (f"{request.host_url}v1/shows/{show_id}/episodes"
                        f"?offset={offset + limit}&limit={limit}&market={market}")

        return jsonify(
            href=request.url,
            items=items,
            limit=limit,
            offset=offset,
            next=next_url,
            total=len(app.config["EPISODES"]),
        )

    return app


app = create_app()


if __name__ == "__main__":
    print(f"Starting mock server on http://{HOST}:{PORT}")
    print(f"Token endpoint: POST http://{HOST}:{PORT}/api/token")
    print(f"Episodes: GET http://{HOST}:{PORT}/v1/shows/{MOCK_SHOW_ID}/episodes")
    app.run(host=HOST, port=PORT, debug=True)
