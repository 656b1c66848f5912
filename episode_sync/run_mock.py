#!/usr/bin/env python3
"""Run the episode sync against the mock server.

Usage:
    python -m episode_sync.run_mock

This script:
1. Removes the snapshot from any previous mock run
2. Starts the mock server in a background thread
3. Runs the sync flow against it, twice, to show the merge with a prior snapshot
4. Shuts down with the process (the server thread is a daemon)

Output: data/mock-episodes.json
"""
import threading
import time

from loguru import logger as log

from episode_sync.constants import PROJECT_ROOT
from episode_sync.flows.sync import sync_episodes
from episode_sync.mock_server import (
    HOST,
    MOCK_CLIENT_ID,
    MOCK_CLIENT_SECRET,
    MOCK_SHOW_ID,
    PORT,
    app as mock_app
)
from episode_sync.models.show import Show
from episode_sync.tasks.auth import Credentials
from episode_sync.utils.logging import configure_console

# Defined here rather than in models, so production never sees it
MOCK_SHOW = Show(
    name="mock",
    show_id=MOCK_SHOW_ID,
    market="TW",
    output_path=PROJECT_ROOT / "data" / "mock-episodes.json",
    token_url=f"http://{HOST}:{PORT}/api/token",
    api_base_url=f"http://{HOST}:{PORT}/v1",
    page_size=2,
    merge_policy="carry-over",
)

MOCK_CREDENTIALS = Credentials(client_id=MOCK_CLIENT_ID, client_secret=MOCK_CLIENT_SECRET)


def run_mock_server():
    """Run the mock server in a background thread."""
    # Disable Flask's reloader and debugger for background thread
    mock_app.run(host=HOST, port=PORT, debug=False, use_reloader=False)


if __name__ == "__main__":
    configure_console()

    if MOCK_SHOW.output_path.exists():
        log.info(f"Cleaning up {MOCK_SHOW.output_path}")
        MOCK_SHOW.output_path.unlink()

    server_thread = threading.Thread(target=run_mock_server, daemon=True)
    server_thread.start()

    # Give the server a moment to start
    time.sleep(1)
    log.info(f"Mock server running on http://{HOST}:{PORT}")

    for attempt in (1, 2):
        log.info(f"Mock sync run {attempt}")
        summary = sync_episodes(MOCK_SHOW, MOCK_CREDENTIALS)
        log.info(f"Run {attempt}: {summary}")

    log.success(f"Mock sync complete, snapshot at {MOCK_SHOW.output_path}")
