"""Prefect tasks for turning raw catalog records into Episode records."""
import re

from prefect import task

from episode_sync.constants import DESCRIPTION_SHORT_LENGTH, ELLIPSIS
from episode_sync.models.episode import Episode
from episode_sync.title_parsing import TitleConvention, get_convention
from episode_sync.utils.logging import get_logger

TAG_PATTERN = re.compile(r'<[^>]*>')


def short_description(description: str) -> str:
    """Strip markup, cut to the display length and mark the cut."""
    # The ellipsis is appended even when nothing was cut; the site expects it
    return TAG_PATTERN.sub('', description or '')[:DESCRIPTION_SHORT_LENGTH] + ELLIPSIS


def _text(value) -> str:
    return value if isinstance(value, str) else ''


def normalize_episode(raw: dict, convention: TitleConvention) -> Episode:
    """
    Map one raw catalog episode onto an Episode.

    Never raises: missing or mistyped keys become empty values, and a title with no
    recognizable numbering leaves season and episode unset.
    """
    title = _text(raw.get('name'))
    description = _text(raw.get('description'))
    season, episode = convention.parse(title)
    urls = raw.get('external_urls') or {}
    duration = raw.get('duration_ms')

    return Episode(
        source_id=_text(raw.get('id')),
        title=title,
        description=description,
        description_short=short_description(description),
        season=season,
        episode=episode,
        release_date=_text(raw.get('release_date')),
        duration_ms=duration if isinstance(duration, int) and not isinstance(duration, bool) else 0,
        spotify_url=_text(urls.get('spotify')) if isinstance(urls, dict) else '',
    )


@task(
    name="normalize-episodes",
    log_prints=True
)
def normalize_episodes(raw_episodes: list[dict], convention_name: str) -> list[Episode]:
    """
    Normalize a fetched episode list, keeping API order.

    Args:
        raw_episodes: Raw episode dicts from the catalog API
        convention_name: Title convention used to infer season/episode

    Returns:
        List of Episode records
    """
    log = get_logger()
    convention = get_convention(convention_name)

    episodes = [normalize_episode(raw, convention) for raw in raw_episodes]

    unnumbered = [ep for ep in episodes if not ep.has_numbering]
    for ep in unnumbered:
        log.debug(f"No season/episode in title: {ep.title!r}")
    log.info(f"Normalized {len(episodes)} episodes with {convention.name} titles, "
             f"{len(unnumbered)} without season/episode")
    return episodes
