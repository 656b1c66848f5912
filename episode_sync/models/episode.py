"""Episode record as stored in the JSON snapshot."""
from dataclasses import dataclass, field
from typing import Any


# JSON key -> attribute name, in the order fields are written
FIELD_NAMES = {
    'sourceId': 'source_id',
    'title': 'title',
    'description': 'description',
    'descriptionShort': 'description_short',
    'season': 'season',
    'episode': 'episode',
    'releaseDate': 'release_date',
    'durationMs': 'duration_ms',
    'spotifyUrl': 'spotify_url',
}

# Key used by the first generation of the snapshot file
LEGACY_ID_KEY = 'spotifyId'


@dataclass
class Episode:
    """One podcast episode, normalized from the catalog API."""
    source_id: str
    title: str = ''
    description: str = ''
    description_short: str = ''
    season: int | None = None
    episode: int | None = None
    release_date: str = ''
    duration_ms: int = 0
    spotify_url: str = ''
    # Hand-maintained fields with no source in the API, e.g. "school"
    curated: dict[str, Any] = field(default_factory=dict)

    @property
    def has_numbering(self) -> bool:
        return self.season is not None and self.episode is not None

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys the site reads."""
        data = {key: getattr(self, attr) for key, attr in FIELD_NAMES.items()}
        for key, value in self.curated.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Episode':
        """
        Build an Episode from a snapshot entry.

        Accepts the legacy ``spotifyId`` key in place of ``sourceId``. Keys that
        are not part of the record are kept in ``curated`` so a read/write
        cycle does not lose hand-edited data.

        Raises:
            KeyError: If the entry has no identifier at all
            TypeError: If the identifier is not a string
        """
        values = {attr: data[key] for key, attr in FIELD_NAMES.items() if key in data}
        if 'source_id' not in values:
            values['source_id'] = data[LEGACY_ID_KEY]
        if not isinstance(values['source_id'], str):
            raise TypeError(f"episode id must be a string, got {values['source_id']!r}")
        curated = {key: value for key, value in data.items()
                   if key not in FIELD_NAMES and key != LEGACY_ID_KEY}
        return cls(curated=curated, **values)
