"""Prefect tasks for fetching a show's episodes from the catalog API."""
import httpx
from prefect import task
from prefect.cache_policies import NO_CACHE

from episode_sync.constants import HTTP_USER_AGENT
from episode_sync.errors import FetchError
from episode_sync.models.show import Show
from episode_sync.utils.logging import get_logger


def _error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of an error body, if there is one."""
    try:
        data = response.json()
    except ValueError:
        return 'Unknown error'
    error = data.get('error') if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get('message'):
        return error['message']
    return 'Unknown error'


def fetch_all_episodes(client: httpx.Client, access_token: str, first_url: str, log=None) -> list[dict]:
    """
    Walk the paginated episode listing until the server stops returning a next link.

    Args:
        client: HTTP client to send the requests with
        access_token: Bearer token for the catalog API
        first_url: URL of the first page
        log: Logger for per-page progress (defaults to get_logger())

    Returns:
        Raw episode dicts in the order the API returned them

    Raises:
        FetchError: If any page request fails; nothing fetched so far is returned
    """
    log = log or get_logger()
    headers = {'Authorization': f'Bearer {access_token}'}
    episodes = []
    next_url = first_url

    while next_url:
        try:
            response = client.get(next_url, headers=headers)
        except httpx.HTTPError as e:
            log.error(f"Error fetching episodes: {e}")
            raise FetchError(f"Failed to fetch episodes: {e}") from e
        if not response.is_success:
            log.error(f"Error fetching episodes: {response.status_code} {response.reason_phrase}")
            raise FetchError(f"Failed to fetch episodes: {_error_message(response)}")

        try:
            data = response.json()
        except ValueError:
            raise FetchError(f"Failed to fetch episodes: {next_url} did not return JSON") from None
        if not isinstance(data, dict) or not isinstance(data.get('items'), list):
            raise FetchError(f"Failed to fetch episodes: {next_url} returned no item list")

        # Unavailable episodes come back as null entries
        episodes.extend(item for item in data['items'] if item is not None)
        next_url = data.get('next')

        log.info(f"Fetched {len(episodes)} episodes...")

    return episodes


@task(
    name="fetch-show-episodes",
    cache_policy=NO_CACHE,
    log_prints=True
)
def fetch_show_episodes(show: Show, access_token: str) -> list[dict]:
    """
    Fetch every episode of a show.

    Args:
        show: Show configuration
        access_token: Bearer token for the catalog API

    Returns:
        List of raw episode dicts, newest first as the API orders them
    """
    log = get_logger()
    log.info(f"Fetching episodes for {show.name}: {show.episodes_url}")

    with httpx.Client(headers={'User-Agent': HTTP_USER_AGENT}, timeout=None) as client:
        episodes = fetch_all_episodes(client, access_token, show.episodes_url, log=log)

    log.info(f"Total episodes fetched for {show.name}: {len(episodes)}")
    return episodes
