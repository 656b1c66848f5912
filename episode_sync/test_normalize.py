"""pytest tests for normalizing catalog records into Episodes."""
import re

import pytest

from episode_sync.constants import DESCRIPTION_SHORT_LENGTH, ELLIPSIS
from episode_sync.models.episode import Episode
from episode_sync.tasks.normalize import normalize_episode, normalize_episodes, short_description
from episode_sync.title_parsing import CLASSIC, DASHED


def test_normalize_copies_fields(raw_episode):
    ep = normalize_episode(raw_episode(4, name="(S5-E10) Little Nature Explorer"), DASHED)

    assert ep == Episode(
        source_id="ep4",
        title="(S5-E10) Little Nature Explorer",
        description="Description of <i>episode</i> 4",
        description_short="Description of episode 4...",
        season=5,
        episode=10,
        release_date="2024-03-04",
        duration_ms=4000,
        spotify_url="https://open.spotify.com/episode/ep4",
    )


def test_normalize_uses_given_convention(raw_episode):
    raw = raw_episode(name="Season 2 Episode 3: Old Times")
    assert normalize_episode(raw, DASHED).has_numbering is False
    ep = normalize_episode(raw, CLASSIC)
    assert (ep.season, ep.episode) == (2, 3)


def test_unnumbered_title_is_not_an_error(raw_episode):
    ep = normalize_episode(raw_episode(name="Field Trip Special"), DASHED)
    assert ep.season is None
    assert ep.episode is None


@pytest.mark.parametrize("raw", [
    {},
    {"id": "x", "name": None, "description": None, "external_urls": None},
    {"id": "x", "external_urls": "not a dict", "duration_ms": None},
    {"id": 7, "name": 42, "description": ["<b>x</b>"], "release_date": 2024,
     "duration_ms": "long", "external_urls": {"spotify": None}},
])
def test_normalize_is_total(raw):
    """Incomplete records still normalize."""
    ep = normalize_episode(raw, DASHED)
    assert ep.description_short == ELLIPSIS
    assert ep.spotify_url == ""
    assert ep.duration_ms == 0
    assert not ep.has_numbering


class TestShortDescription:

    def test_strips_tags(self):
        assert short_description("<p>Hello <a href='x'>world</a></p>") == "Hello world..."

    def test_truncates(self):
        text = "a" * 500
        short = short_description(text)
        assert short == "a" * DESCRIPTION_SHORT_LENGTH + ELLIPSIS

    def test_ellipsis_added_to_short_text(self):
        assert short_description("Short") == "Short..."

    def test_bounded_and_tag_free(self):
        text = "<div>" + "word <b>bold</b> " * 40 + "</div>"
        short = short_description(text)
        assert len(short) <= DESCRIPTION_SHORT_LENGTH + len(ELLIPSIS)
        assert not re.search(r"<[^>]*>", short)


def test_normalize_episodes_task_keeps_order(raw_episode):
    raws = [raw_episode(3), raw_episode(1, name="No numbers here"), raw_episode(2)]
    episodes = normalize_episodes.fn(raws, "dashed")

    assert [ep.source_id for ep in episodes] == ["ep3", "ep1", "ep2"]
    assert [ep.episode for ep in episodes] == [3, None, 2]
