"""Tests for the timeline sampler."""

import pytest

from lyricsync.core.components.timeline.sampler import TimelineSampler
from lyricsync.core.models import BackgroundAsset, BackgroundSpec, LyricLine


@pytest.fixture
def spec():
    return BackgroundSpec.from_urls(
        "cover.jpg",
        [BackgroundAsset("one.jpg", 2.0, 6.0), BackgroundAsset("two.jpg", 8.0, 10.0)],
        duration=12.0,
    )


def test_sample_inside_line(lines, spec):
    sampler = TimelineSampler(lines, spec)
    state = sampler.sample(3.0)
    assert state.time == 3.0
    assert state.previous is None
    assert state.current.text == "first"
    assert state.next.text == "second"
    assert state.progress == pytest.approx(0.5)
    assert state.active_background.url == "one.jpg"


def test_sample_outside_lines_has_no_progress(lines, spec):
    sampler = TimelineSampler(lines, spec)
    assert sampler.sample(1.0).progress is None
    assert sampler.sample(7.0).progress is None
    assert sampler.sample(11.0).progress is None


def test_sample_uses_first_asset_in_uncovered_gap(lines, spec):
    sampler = TimelineSampler(lines, spec)
    assert sampler.sample(7.0).active_background.url == "one.jpg"
    assert sampler.sample(9.0).active_background.url == "two.jpg"


def test_sample_without_assets_uses_fallback(lines):
    sampler = TimelineSampler(lines, BackgroundSpec.from_urls("cover.jpg"))
    assert sampler.sample(3.0).active_background.url == "cover.jpg"


def test_silent_intro_is_filtered(lines_with_intro, spec):
    sampler = TimelineSampler(lines_with_intro, spec)
    assert [l.text for l in sampler.lines] == ["first", "second", "third"]
    state = sampler.sample(1.0)
    assert state.current is None
    assert state.next.text == "first"


def test_results_do_not_depend_on_call_order(lines, spec):
    times = [0.0, 2.0, 3.3, 4.0, 6.0, 7.1, 8.0, 9.9, 10.0, 13.0]
    forward = [TimelineSampler(lines, spec).sample(t) for t in times]
    sampler = TimelineSampler(lines, spec)
    backward = [sampler.sample(t) for t in reversed(times)]
    assert forward == list(reversed(backward))
    # Same sampler, repeated queries
    assert sampler.sample(3.3) == sampler.sample(3.3)


def test_sampler_is_callable(lines, spec):
    sampler = TimelineSampler(lines, spec)
    assert sampler(5.0) == sampler.sample(5.0)
