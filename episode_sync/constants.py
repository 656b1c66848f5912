from os import getenv
from pathlib import Path

# Show to sync (the id from the open.spotify.com/show/<id> URL)
SHOW_NAME = getenv('SHOW_NAME', 'show')
SHOW_ID = getenv('SPOTIFY_SHOW_ID', '2r2drOqJuUMAY2ubsHS9E7')
MARKET = getenv('SPOTIFY_MARKET', 'TW')

# Catalog API
TOKEN_URL = getenv('SPOTIFY_TOKEN_URL', 'https://accounts.spotify.com/api/token')
API_BASE_URL = getenv('SPOTIFY_API_BASE_URL', 'https://api.spotify.com/v1')
PAGE_SIZE = 50

# Credentials are read at startup, never at import
CLIENT_ID_VAR = 'SPOTIFY_CLIENT_ID'
CLIENT_SECRET_VAR = 'SPOTIFY_CLIENT_SECRET'

# Snapshot consumed by the static site
PROJECT_ROOT = Path(__file__).parent.parent
OUTPUT_PATH = Path(getenv('EPISODES_OUTPUT_PATH', str(PROJECT_ROOT / 'data' / 'episodes.json')))

# Title numbering and merge behaviour
TITLE_CONVENTION = getenv('TITLE_CONVENTION', 'dashed')
MERGE_POLICY = getenv('MERGE_POLICY', 'replace')
CARRY_OVER_FIELDS = ('school',)

DESCRIPTION_SHORT_LENGTH = 100
ELLIPSIS = '...'

# HTTP User Agent
HTTP_USER_AGENT = getenv('HTTP_USER_AGENT', 'episode-sync')
