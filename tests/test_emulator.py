from __future__ import annotations

from PIL import Image

from steelclock.rendering.emulator import FramePreviewWriter, save_frame, surface_to_image
from steelclock.rendering.surface import ON, Surface


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_surface_to_image_scales_and_thresholds() -> None:
    surface = Surface(4, 2)
    surface.set_pixel(0, 0, ON)
    surface.set_pixel(1, 0, 100)

    image = surface_to_image(surface, scale=2)

    assert image.size == (8, 4)
    assert image.getpixel((0, 0)) == 255
    assert image.getpixel((1, 1)) == 255
    assert image.getpixel((2, 0)) == 0


def test_save_frame_writes_png(tmp_path) -> None:
    path = tmp_path / "nested" / "frame.png"

    save_frame(Surface(128, 40), str(path))

    with Image.open(path) as image:
        assert image.size == (512, 160)


def test_preview_writer_throttles(tmp_path) -> None:
    clock = FakeClock()
    writer = FramePreviewWriter(str(tmp_path / "live.png"), min_interval=1.0, clock=clock)
    frame = Surface(128, 40)

    assert writer(frame) is True
    clock.now = 0.5
    assert writer(frame) is False
    clock.now = 1.2
    assert writer(frame) is True
