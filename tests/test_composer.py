from __future__ import annotations

from dataclasses import dataclass

from steelclock.config import WidgetGeometry
from steelclock.rendering.composer import compose_frame, order_widgets
from steelclock.rendering.encoder import encode_frame
from steelclock.rendering.surface import OFF, ON, Surface


@dataclass
class FakeWidget:
    name: str
    geometry: WidgetGeometry
    fill: int | None
    transparent: int | None = None
    fail: bool = False
    renders: int = 0

    def render(self) -> Surface | None:
        self.renders += 1
        if self.fail:
            raise RuntimeError("boom")
        if self.fill is None:
            return None
        return Surface(self.geometry.w, self.geometry.h, fill=self.fill, transparent=self.transparent)


def _geometry(x: int, y: int, w: int, h: int, z: int = 0) -> WidgetGeometry:
    return WidgetGeometry(x=x, y=y, w=w, h=h, z_order=z)


def test_empty_widget_list_gives_blank_frame() -> None:
    frame = compose_frame([], (128, 40))

    assert frame.size == (128, 40)
    assert frame.count_on() == 0
    assert encode_frame(frame) == bytes(640)


def test_z_order_paints_higher_on_top() -> None:
    back = FakeWidget("a", _geometry(0, 0, 128, 40, z=0), fill=OFF)
    front = FakeWidget("b", _geometry(5, 5, 10, 10, z=1), fill=ON)

    frame = compose_frame([front, back], (128, 40))

    assert frame.count_on() == 100
    assert all(frame.get_pixel(x, y) == ON for x in range(5, 15) for y in range(5, 15))


def test_ties_keep_configuration_order() -> None:
    first = FakeWidget("first", _geometry(0, 0, 4, 4), fill=ON)
    second = FakeWidget("second", _geometry(0, 0, 4, 4), fill=OFF)

    assert [w.name for w in order_widgets([first, second])] == ["first", "second"]
    assert compose_frame([first, second], (8, 8)).count_on() == 0


def test_hidden_widget_leaves_frame_untouched() -> None:
    base = FakeWidget("base", _geometry(0, 0, 20, 20), fill=ON)
    hidden = FakeWidget("hidden", _geometry(0, 0, 10, 10, z=5), fill=None)

    with_hidden = compose_frame([base, hidden], (20, 20))
    without = compose_frame([base], (20, 20))

    assert with_hidden == without


def test_transparent_widget_reveals_lower_widget() -> None:
    base = FakeWidget("base", _geometry(0, 0, 10, 10), fill=ON)
    overlay = FakeWidget("overlay", _geometry(0, 0, 10, 10, z=1), fill=OFF, transparent=OFF)

    assert compose_frame([base, overlay], (10, 10)).count_on() == 100


def test_failing_widget_is_skipped() -> None:
    ok = FakeWidget("ok", _geometry(0, 0, 2, 2), fill=ON)
    broken = FakeWidget("broken", _geometry(4, 4, 2, 2, z=1), fill=ON, fail=True)

    frame = compose_frame([ok, broken], (8, 8))

    assert frame.count_on() == 4
    assert broken.renders == 1


def test_widget_past_edge_is_clipped() -> None:
    edge = FakeWidget("edge", _geometry(127, 0, 10, 40), fill=ON)

    frame = compose_frame([edge], (128, 40))

    assert frame.count_on() == 40


def test_compose_is_deterministic() -> None:
    widgets = [
        FakeWidget("a", _geometry(0, 0, 50, 20), fill=ON),
        FakeWidget("b", _geometry(30, 10, 50, 20, z=1), fill=OFF),
    ]

    assert compose_frame(widgets, (128, 40)).tobytes() == compose_frame(widgets, (128, 40)).tobytes()
