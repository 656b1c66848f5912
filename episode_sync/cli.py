#!/usr/bin/env python3
"""
Run the episode sync.

Reads SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET from the environment or a
.env file, fetches every episode of the show and updates the JSON snapshot.
Runs directly without a Prefect server.
"""
import argparse
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger as log

# Constants are read from the environment at import time
load_dotenv()

from episode_sync.errors import ConfigurationError, SyncError
from episode_sync.flows.sync import sync_episodes
from episode_sync.models.show import get_default_show
from episode_sync.tasks.auth import load_credentials
from episode_sync.tasks.snapshot import CARRY_OVER, MERGE_POLICIES
from episode_sync.title_parsing import CONVENTIONS, get_convention
from episode_sync.utils.logging import configure_console


def build_parser():
    p = argparse.ArgumentParser(
        prog="episode-sync",
        description="Fetch a show's episodes from Spotify and update the JSON episode snapshot."
    )
    p.add_argument("--show-id", default=None, help="Spotify show id (default: SPOTIFY_SHOW_ID)")
    p.add_argument("--market", default=None, help="Market/country code for the catalog (default: SPOTIFY_MARKET)")
    p.add_argument("--output", type=Path, default=None, help="Snapshot JSON file (default: EPISODES_OUTPUT_PATH)")
    p.add_argument("--titles", choices=sorted(CONVENTIONS), default=None,
                   help="Title numbering convention (default: TITLE_CONVENTION)")
    p.add_argument("--policy", choices=MERGE_POLICIES, default=None,
                   help="How to merge with the previous snapshot (default: MERGE_POLICY)")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                   help="Console log level")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    configure_console(args.log_level)

    show = get_default_show()
    overrides = {
        'show_id': args.show_id,
        'market': args.market,
        'output_path': args.output,
        'title_convention': args.titles,
        'merge_policy': args.policy,
    }
    show = replace(show, **{k: v for k, v in overrides.items() if v is not None})

    try:
        # Settings can also come from the environment, so check them before any I/O
        get_convention(show.title_convention)
        if show.merge_policy not in MERGE_POLICIES:
            raise ConfigurationError(f"Unknown merge policy {show.merge_policy!r}")
        credentials = load_credentials()
        log.info(f"Fetching episodes from Spotify for show {show.show_id}")
        log.info("=" * 60)
        summary = sync_episodes(show, credentials)
    except SyncError as e:
        log.error(f"{type(e).__name__}: {e}")
        return 1

    log.info("=" * 60)
    log.info("Summary:")
    log.info(f"   Total episodes: {summary.total}")
    log.info(f"   New since last run: {summary.new_episodes}")
    if show.merge_policy == CARRY_OVER:
        log.info(f"   Need {', '.join(show.carry_over_fields)} info: {summary.missing_curated}")
    log.info(f"   Need season/episode parsing: {summary.missing_numbering}")

    if summary.missing_curated:
        log.warning(f"Remember to manually add {', '.join(show.carry_over_fields)} "
                    f"for each episode in {summary.output_path}")
    if summary.missing_numbering:
        log.warning("Some episodes could not parse season/episode from title. "
                    f"Check the title format against the '{show.title_convention}' convention.")

    log.success(f"Saved to: {summary.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
