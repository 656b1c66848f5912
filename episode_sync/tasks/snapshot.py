"""Prefect tasks for reading, merging and writing the episode snapshot."""
import json
from dataclasses import dataclass, field, replace
from pathlib import Path

from prefect import task
from prefect.cache_policies import NO_CACHE

from episode_sync.constants import CARRY_OVER_FIELDS
from episode_sync.errors import ConfigurationError
from episode_sync.models.episode import Episode
from episode_sync.utils.logging import get_logger

CARRY_OVER = 'carry-over'
REPLACE = 'replace'
MERGE_POLICIES = (CARRY_OVER, REPLACE)


@dataclass
class MergeResult:
    episodes: list[Episode]
    new_ids: list[str] = field(default_factory=list)  # In the fresh list but not the prior one
    dropped_ids: list[str] = field(default_factory=list)  # In the prior list but not the fresh one


def _dedupe(episodes: list[Episode], log) -> list[Episode]:
    """Keep the first record for each sourceId."""
    seen = set()
    unique = []
    for ep in episodes:
        if ep.source_id in seen:
            log.warning(f"Duplicate episode {ep.source_id} ({ep.title!r}), keeping the first")
            continue
        seen.add(ep.source_id)
        unique.append(ep)
    return unique


def merge_episodes(fresh: list[Episode], prior: list[Episode], policy: str,
                   carry_over_fields: tuple[str, ...] = CARRY_OVER_FIELDS, log=None) -> MergeResult:
    """
    Reconcile freshly fetched episodes with the previous snapshot.

    carry-over: every curated field of the prior record with the same sourceId
    is copied onto the fresh one. Each of ``carry_over_fields`` is always
    present, as None when there is no value to carry. Output keeps the fresh
    (API) order. Prior episodes that are no longer in the fresh list are
    dropped.

    replace: the prior snapshot only feeds the new-episode count. Output is the
    fresh list sorted newest first by releaseDate, ties in fresh order.

    Raises:
        ConfigurationError: If the policy is unknown
    """
    log = log or get_logger()
    if policy not in MERGE_POLICIES:
        raise ConfigurationError(
            f"Unknown merge policy {policy!r}, expected one of: {', '.join(MERGE_POLICIES)}"
        )

    fresh = _dedupe(fresh, log)
    prior_by_id = {}
    for ep in prior:
        prior_by_id.setdefault(ep.source_id, ep)
    fresh_ids = {ep.source_id for ep in fresh}

    new_ids = [ep.source_id for ep in fresh if ep.source_id not in prior_by_id]
    dropped_ids = [source_id for source_id in prior_by_id if source_id not in fresh_ids]

    if policy == CARRY_OVER:
        merged = []
        for ep in fresh:
            existing = prior_by_id.get(ep.source_id)
            curated = dict(ep.curated)
            if existing:
                curated.update(existing.curated)
            for name in carry_over_fields:
                curated.setdefault(name, None)
            merged.append(replace(ep, curated=curated))
        if dropped_ids:
            log.warning(f"{len(dropped_ids)} episodes in the previous snapshot are no longer "
                        f"in the catalog and were dropped: {dropped_ids}")
    else:
        # sorted() is stable with reverse=True, so equal dates keep fresh order
        merged = sorted(fresh, key=lambda ep: ep.release_date, reverse=True)

    log.info(f"Merged {len(merged)} episodes ({policy}): {len(new_ids)} new since the last snapshot")
    return MergeResult(merged, new_ids, dropped_ids)


def load_snapshot(path: Path, log=None) -> list[Episode]:
    """
    Read the previous snapshot.

    A missing, unreadable or malformed file means there is no prior data; it
    is logged and an empty list is returned.
    """
    log = log or get_logger()
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as fh:
            data = json.load(fh)
    except FileNotFoundError:
        log.info(f"No existing data found at {path}, creating new file")
        return []
    except (OSError, ValueError) as e:
        log.info(f"Existing data at {path} could not be read ({e}), starting over")
        return []

    if not isinstance(data, list):
        log.info(f"Existing data at {path} is not an episode list, starting over")
        return []

    try:
        episodes = [Episode.from_dict(entry) for entry in data]
    except (AttributeError, KeyError, TypeError) as e:
        log.info(f"Existing data at {path} has malformed entries ({e}), starting over")
        return []

    log.info(f"Found existing data with {len(episodes)} episodes")
    return episodes


def write_snapshot(episodes: list[Episode], path: Path) -> Path:
    """
    Write the snapshot as pretty-printed JSON, replacing any existing file.

    The data goes to a temporary sibling first and is renamed into place, so
    an interrupted write leaves the previous snapshot intact.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(path.name + '.tmp')

    try:
        with open(temp_path, 'w', encoding='utf-8') as fh:
            json.dump([ep.to_dict() for ep in episodes], fh, indent=2, ensure_ascii=False)
            fh.write('\n')
        temp_path.replace(path)
    except (OSError, TypeError):
        if temp_path.exists():
            temp_path.unlink()
        raise
    return path


@task(
    name="load-previous-snapshot",
    cache_policy=NO_CACHE,
    log_prints=True
)
def load_previous_snapshot(path: Path) -> list[Episode]:
    """Task wrapper for load_snapshot."""
    return load_snapshot(path)


@task(
    name="merge-snapshot",
    cache_policy=NO_CACHE,
    log_prints=True
)
def merge_snapshot(fresh: list[Episode], prior: list[Episode], policy: str,
                   carry_over_fields: tuple[str, ...]) -> MergeResult:
    """Task wrapper for merge_episodes."""
    return merge_episodes(fresh, prior, policy, carry_over_fields)


@task(
    name="save-snapshot",
    cache_policy=NO_CACHE,
    log_prints=True
)
def save_snapshot(episodes: list[Episode], path: Path) -> Path:
    """
    Save the merged episode list.

    Args:
        episodes: Episodes in their final order
        path: Snapshot file, parent directories are created as needed

    Returns:
        Path the snapshot was written to
    """
    log = get_logger()
    saved = write_snapshot(episodes, path)
    log.info(f"Saved {len(episodes)} episodes to: {saved}")
    return saved
