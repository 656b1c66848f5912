"""
Season/episode numbering from episode titles.

The show's titles carry their numbering as free text, and the convention has
changed over the years. Each convention is an ordered cascade of patterns:
the first pattern that matches wins, so more specific patterns come before
looser ones that could match a substring of them.

    classic:  "S5E10 - Title", "Season 5 Episode 10: Title", "EP10 Title"
    dashed:   "(S5-E10) Title", "S5-EP10 Title", "S5E10 Title", "#3 - Title"
"""
import re
from dataclasses import dataclass
from typing import NamedTuple

from episode_sync.errors import ConfigurationError


class SeasonEpisode(NamedTuple):
    season: int | None
    episode: int | None


UNNUMBERED = SeasonEpisode(None, None)


@dataclass(frozen=True)
class TitlePattern:
    """
    One step of a cascade.

    With ``default_season`` unset the pattern captures (season, episode);
    otherwise it captures only the episode and the season is fixed.
    """
    regex: re.Pattern
    default_season: int | None = None

    def match(self, title: str) -> SeasonEpisode | None:
        m = self.regex.search(title)
        if not m:
            return None
        if self.default_season is not None:
            return SeasonEpisode(self.default_season, int(m.group(1)))
        return SeasonEpisode(int(m.group(1)), int(m.group(2)))


@dataclass(frozen=True)
class TitleConvention:
    name: str
    patterns: tuple[TitlePattern, ...]

    def parse(self, title: str) -> SeasonEpisode:
        for pattern in self.patterns:
            found = pattern.match(title)
            if found:
                return found
        return UNNUMBERED


CLASSIC = TitleConvention('classic', (
    # S5E10, S5 E10
    TitlePattern(re.compile(r'S(\d+)\s*E(\d+)', re.IGNORECASE)),
    # Season 5 Episode 10
    TitlePattern(re.compile(r'Season\s*(\d+)\s*Episode\s*(\d+)', re.IGNORECASE)),
    # EP10, Ep.10 - no season token, assume the first
    TitlePattern(re.compile(r'EP\.?\s*(\d+)', re.IGNORECASE), default_season=1),
))

DASHED = TitleConvention('dashed', (
    # (S5-E10), (S5-EP10)
    TitlePattern(re.compile(r'\(S(\d+)-EP?(\d+)\)', re.IGNORECASE)),
    # S5-E10, S5-EP10
    TitlePattern(re.compile(r'S(\d+)-EP?(\d+)', re.IGNORECASE)),
    # S5E10, for titles that went back to the old style
    TitlePattern(re.compile(r'S(\d+)E(\d+)', re.IGNORECASE)),
    # "#3 - Intro" at the start of the title
    TitlePattern(re.compile(r'^#(\d+)\s*-'), default_season=1),
))

CONVENTIONS = {convention.name: convention for convention in (CLASSIC, DASHED)}


def get_convention(name: str) -> TitleConvention:
    """
    Look up a title convention by name.

    Raises:
        ConfigurationError: If no convention has that name
    """
    try:
        return CONVENTIONS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown title convention {name!r}, expected one of: {', '.join(CONVENTIONS)}"
        ) from None


def parse_season_episode(title: str, convention: TitleConvention | str = DASHED) -> SeasonEpisode:
    """
    Extract (season, episode) from an episode title.

    Args:
        title: Episode title string
        convention: A TitleConvention or the name of a registered one

    Returns:
        SeasonEpisode, with both fields None for unnumbered episodes
    """
    if isinstance(convention, str):
        convention = get_convention(convention)
    return convention.parse(title or '')
