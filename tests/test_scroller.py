from __future__ import annotations

import pytest

from steelclock.widgets.scroller import ScrollerConfig, TextScroller


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _scroller(**kwargs) -> TextScroller:
    return TextScroller(ScrollerConfig(**kwargs), clock=FakeClock())


def test_content_that_fits_never_scrolls() -> None:
    scroller = _scroller(speed=100)

    assert scroller.update(40, 50, now=5.0) == 0.0
    assert scroller.positions(3, 40, 50) == [3]


def test_continuous_wraps_at_content_plus_gap() -> None:
    scroller = _scroller(speed=10, gap=10)

    assert scroller.update(100, 50, now=1.0) == pytest.approx(10.0)
    assert scroller.update(100, 50, now=12.0) == pytest.approx(10.0)


def test_continuous_draws_two_copies() -> None:
    scroller = _scroller(speed=10, gap=10)
    scroller.update(100, 50, now=1.0)

    assert scroller.positions(0, 100, 50) == [-10, 100]


def test_continuous_right_moves_backwards() -> None:
    scroller = _scroller(speed=10, gap=10, direction="right")

    assert scroller.update(100, 50, now=1.0) == pytest.approx(-10.0)
    assert scroller.positions(0, 100, 50) == [10, -100]


def test_bounce_reverses_and_pauses() -> None:
    scroller = _scroller(speed=10, mode="bounce", pause_ms=500)

    assert scroller.update(60, 50, now=2.0) == pytest.approx(10.0)
    assert scroller.is_paused(now=2.3)
    assert scroller.update(60, 50, now=2.3) == pytest.approx(10.0)
    assert scroller.update(60, 50, now=3.0) == pytest.approx(3.0)


def test_bounce_returns_to_start() -> None:
    scroller = _scroller(speed=10, mode="bounce", pause_ms=0)
    scroller.update(60, 50, now=2.0)

    assert scroller.update(60, 50, now=4.0) == 0.0


def test_pause_ends_resets_to_start() -> None:
    scroller = _scroller(speed=10, mode="pause_ends", pause_ms=500)

    assert scroller.update(60, 50, now=1.5) == 0.0
    assert scroller.update(60, 50, now=1.8) == 0.0
    assert scroller.update(60, 50, now=2.5) == pytest.approx(7.0)


def test_zero_speed_holds_still() -> None:
    scroller = _scroller(speed=0)

    assert scroller.update(100, 50, now=10.0) == 0.0


def test_reset() -> None:
    scroller = _scroller(speed=10)
    scroller.update(100, 50, now=3.0)

    scroller.reset()

    assert scroller.offset == 0.0


@pytest.mark.parametrize("kwargs", [{"mode": "wobble"}, {"direction": "diagonal"}, {"speed": -1}])
def test_invalid_config(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        ScrollerConfig(**kwargs)


def test_from_properties() -> None:
    config = ScrollerConfig.from_properties({"speed": 5, "mode": "bounce", "direction": "up", "gap": 4})

    assert config.speed == 5.0
    assert config.mode == "bounce"
    assert config.horizontal is False
    assert config.gap == 4
