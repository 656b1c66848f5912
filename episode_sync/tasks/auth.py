"""Prefect tasks for obtaining a catalog API access token."""
import base64
from os import getenv

import httpx
from prefect import task
from prefect.cache_policies import NO_CACHE
from pydantic import BaseModel, SecretStr

from episode_sync.constants import CLIENT_ID_VAR, CLIENT_SECRET_VAR, HTTP_USER_AGENT
from episode_sync.errors import AuthenticationError, ConfigurationError
from episode_sync.models.show import Show
from episode_sync.utils.logging import get_logger


class Credentials(BaseModel):
    """Client credentials; the secret is masked in logs and flow run parameters."""
    client_id: str
    client_secret: SecretStr


def load_credentials() -> Credentials:
    """
    Read the client credentials from the environment.

    Returns:
        Credentials with both values set

    Raises:
        ConfigurationError: If either variable is missing or empty
    """
    client_id = getenv(CLIENT_ID_VAR, '').strip()
    client_secret = getenv(CLIENT_SECRET_VAR, '').strip()

    missing = [name for name, value in ((CLIENT_ID_VAR, client_id), (CLIENT_SECRET_VAR, client_secret))
               if not value]
    if missing:
        raise ConfigurationError(
            f"Missing Spotify credentials: {', '.join(missing)}. "
            f"Set {CLIENT_ID_VAR} and {CLIENT_SECRET_VAR} in the environment or in a .env file, e.g.\n"
            f"  {CLIENT_ID_VAR}=xxx {CLIENT_SECRET_VAR}=yyy episode-sync"
        )
    return Credentials(client_id=client_id, client_secret=client_secret)


def basic_auth_header(credentials: Credentials) -> str:
    pair = f"{credentials.client_id}:{credentials.client_secret.get_secret_value()}".encode()
    return 'Basic ' + base64.b64encode(pair).decode()


def request_access_token(client: httpx.Client, credentials: Credentials, token_url: str) -> str:
    """
    Exchange client credentials for a bearer token.

    Args:
        client: HTTP client to send the request with
        credentials: Client id and secret
        token_url: Token endpoint

    Returns:
        The access token string

    Raises:
        AuthenticationError: If the token endpoint rejects the request or cannot be reached
    """
    try:
        response = client.post(
            token_url,
            headers={'Authorization': basic_auth_header(credentials)},
            data={'grant_type': 'client_credentials'},
        )
    except httpx.HTTPError as e:
        raise AuthenticationError(f"Failed to get access token: {e}") from e

    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    if not response.is_success:
        reason = data.get('error_description') or data.get('error') or f"HTTP {response.status_code}"
        raise AuthenticationError(f"Failed to get access token: {reason}")

    token = data.get('access_token')
    if not token:
        raise AuthenticationError("Failed to get access token: response had no access_token")
    return token


@task(
    name="get-access-token",
    cache_policy=NO_CACHE,
    log_prints=True
)
def get_access_token(show: Show, credentials: Credentials) -> str:
    """
    Get an access token for the catalog API.

    Args:
        show: Show configuration (supplies the token endpoint)
        credentials: Client id and secret

    Returns:
        Bearer token string
    """
    log = get_logger()
    log.info(f"Getting access token from {show.token_url}")

    with httpx.Client(headers={'User-Agent': HTTP_USER_AGENT}, timeout=None) as client:
        token = request_access_token(client, credentials, show.token_url)

    log.info("Access token obtained")
    return token
