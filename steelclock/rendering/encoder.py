"""Pack monochrome frames into the engine's screen payload."""

from __future__ import annotations

import numpy as np

from steelclock.rendering.surface import OFF, ON, Surface

FRAME_WIDTH = 128
FRAME_HEIGHT = 40
PAYLOAD_SIZE = FRAME_WIDTH * FRAME_HEIGHT // 8
THRESHOLD = 128


class EncodeSizeError(ValueError):
    """Raised when a frame does not match the 128x40 device resolution."""


def encode_frame(frame: Surface, threshold: int = THRESHOLD) -> bytes:
    """Encode a 128x40 frame into 640 bytes, MSB is the leftmost pixel."""
    if frame.size != (FRAME_WIDTH, FRAME_HEIGHT):
        raise EncodeSizeError(
            f"Frame must be {FRAME_WIDTH}x{FRAME_HEIGHT}, got {frame.width}x{frame.height}"
        )
    packed = np.packbits(frame.pixels >= threshold, axis=1)
    payload = packed.tobytes()
    if len(payload) != PAYLOAD_SIZE:
        raise EncodeSizeError(f"Encoded payload is {len(payload)} bytes, expected {PAYLOAD_SIZE}")
    return payload


def decode_frame(payload: bytes) -> Surface:
    """Expand a 640-byte payload back into a 0/255 surface."""
    if len(payload) != PAYLOAD_SIZE:
        raise EncodeSizeError(f"Payload must be {PAYLOAD_SIZE} bytes, got {len(payload)}")
    packed = np.frombuffer(payload, dtype=np.uint8).reshape(FRAME_HEIGHT, FRAME_WIDTH // 8)
    bits = np.unpackbits(packed, axis=1)
    frame = Surface(FRAME_WIDTH, FRAME_HEIGHT)
    frame.pixels[...] = np.where(bits == 1, ON, OFF)
    return frame


def blank_payload() -> bytes:
    return bytes(PAYLOAD_SIZE)


__all__ = [
    "EncodeSizeError",
    "FRAME_HEIGHT",
    "FRAME_WIDTH",
    "PAYLOAD_SIZE",
    "THRESHOLD",
    "blank_payload",
    "decode_frame",
    "encode_frame",
]
