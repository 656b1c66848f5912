"""Sync flow: fetch the catalog, normalize, merge with the snapshot, save."""
from dataclasses import dataclass
from pathlib import Path

from prefect import flow

from episode_sync.models.show import Show
from episode_sync.tasks.auth import Credentials, get_access_token
from episode_sync.tasks.catalog import fetch_show_episodes
from episode_sync.tasks.normalize import normalize_episodes
from episode_sync.tasks.snapshot import (
    CARRY_OVER,
    load_previous_snapshot,
    merge_snapshot,
    save_snapshot
)
from episode_sync.utils.logging import get_logger


@dataclass
class SyncSummary:
    """Counts reported at the end of a run."""
    total: int
    missing_numbering: int
    missing_curated: int
    new_episodes: int
    dropped_episodes: int
    output_path: Path


@flow(
    name="sync-episodes",
    flow_run_name="{show.name}",
    log_prints=True
)
def sync_episodes(show: Show, credentials: Credentials) -> SyncSummary:
    """
    Sync one show's episodes into its JSON snapshot.

    Workflow:
    1. Exchange client credentials for an access token
    2. Fetch every page of the show's episodes
    3. Normalize records and infer season/episode from titles
    4. Merge with the previous snapshot
    5. Save the merged snapshot

    Any failure in steps 1-2 aborts the run before the snapshot is touched.

    Args:
        show: Show configuration
        credentials: Catalog API client credentials

    Returns:
        SyncSummary for the run
    """
    log = get_logger()
    log.info(f"Syncing episodes for {show.name} ({show.show_id})")

    access_token = get_access_token(show, credentials)
    raw_episodes = fetch_show_episodes(show, access_token)
    episodes = normalize_episodes(raw_episodes, show.title_convention)

    prior = load_previous_snapshot(show.output_path)
    result = merge_snapshot(episodes, prior, show.merge_policy, show.carry_over_fields)
    saved_path = save_snapshot(result.episodes, show.output_path)

    missing_curated = 0
    if show.merge_policy == CARRY_OVER:
        missing_curated = sum(
            1 for ep in result.episodes
            if any(not ep.curated.get(name) for name in show.carry_over_fields)
        )

    summary = SyncSummary(
        total=len(result.episodes),
        missing_numbering=sum(1 for ep in result.episodes if not ep.has_numbering),
        missing_curated=missing_curated,
        new_episodes=len(result.new_ids),
        dropped_episodes=len(result.dropped_ids),
        output_path=saved_path,
    )
    log.info(f"Completed sync for {show.name}: {summary.total} episodes, "
             f"{summary.new_episodes} new")
    return summary
