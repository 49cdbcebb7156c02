"""Procedurally generated source code typed out line by line."""

from __future__ import annotations

from collections import deque
import random
import time

from steelclock.config import WidgetConfig
from steelclock.rendering.fonts import get_font
from steelclock.rendering.surface import ON, Surface
from steelclock.rendering.text import CHAR_GAP, draw_text_clipped
from steelclock.widgets.base import Clock, Widget

STYLE_C = "c"
STYLE_ASM = "asm"
CODE_STYLES = (STYLE_C, STYLE_ASM)

DEFAULT_CHARS_PER_UPDATE = 2
DEFAULT_CURSOR_BLINK_MS = 500
INDENT = "  "

C_VARS = ("ptr", "buf", "data", "idx", "cnt", "tmp", "node", "head", "len", "ret", "src", "dst", "key", "mask")
C_TYPES = ("int", "char", "uint8_t", "uint32_t", "size_t", "bool")
C_FUNCS = ("init", "parse", "encode", "decode", "read", "write", "send", "recv", "check", "sync", "reset")
C_COMMENTS = ("check status", "validate input", "handle error", "update state", "parse header")

ASM_REGS = ("eax", "ebx", "ecx", "edx", "esi", "edi", "r8", "r9")
ASM_OPS = ("mov", "add", "sub", "xor", "and", "or", "cmp", "test", "shl", "shr")
ASM_JUMPS = ("jmp", "je", "jne", "jg", "jl", "jz", "jnz")


class CodeGenerator:
    """Endless stream of plausible C or assembly lines."""

    def __init__(self, style: str = STYLE_C, seed: int | None = None) -> None:
        if style not in CODE_STYLES:
            raise ValueError(f"Unknown code style '{style}' (valid: {', '.join(CODE_STYLES)})")
        self._style = style
        self._rng = random.Random(seed)
        self._depth = 0
        self._label = 0

    def next_line(self) -> str:
        if self._style == STYLE_ASM:
            return self._asm_line()
        return self._c_line()

    def _c_line(self) -> str:
        rng = self._rng
        if self._depth == 0:
            self._depth = 1
            return f"{rng.choice(C_TYPES)} {rng.choice(C_FUNCS)}_{rng.choice(C_VARS)}({rng.choice(C_TYPES)} *{rng.choice(C_VARS)}) {{"
        roll = rng.random()
        if roll < 0.12 and self._depth < 3:
            self._depth += 1
            return f"{INDENT * (self._depth - 1)}if ({rng.choice(C_VARS)} != {rng.randint(0, 255)}) {{"
        if roll < 0.25:
            self._depth -= 1
            return f"{INDENT * self._depth}}}"
        indent = INDENT * self._depth
        if roll < 0.35:
            return f"{indent}/* {rng.choice(C_COMMENTS)} */"
        if roll < 0.55:
            return f"{indent}{rng.choice(C_VARS)} = {rng.choice(C_FUNCS)}({rng.choice(C_VARS)});"
        return f"{indent}{rng.choice(C_VARS)} {rng.choice(('+=', '-=', '^=', '|='))} 0x{rng.randint(0, 0xFF):02x};"

    def _asm_line(self) -> str:
        rng = self._rng
        roll = rng.random()
        if roll < 0.1:
            self._label += 1
            return f".L{self._label}:"
        if roll < 0.25:
            return f"  {rng.choice(ASM_JUMPS)} .L{rng.randint(1, max(1, self._label))}"
        if roll < 0.6:
            return f"  {rng.choice(ASM_OPS)} {rng.choice(ASM_REGS)}, {rng.choice(ASM_REGS)}"
        return f"  {rng.choice(ASM_OPS)} {rng.choice(ASM_REGS)}, 0x{rng.randint(0, 0xFFFF):x}"


class HackerCodeWidget(Widget):
    """Types generated code with a blinking block cursor.

    Properties: ``style`` (c, asm), ``chars_per_update``, ``seed``,
    ``font``, ``show_cursor`` and ``cursor_blink_ms``.
    """

    def __init__(self, config: WidgetConfig, clock: Clock = time.monotonic) -> None:
        super().__init__(config, clock)
        properties = config.properties
        seed = properties.get("seed")
        self._generator = CodeGenerator(str(properties.get("style", STYLE_C)), None if seed is None else int(seed))
        self._font = get_font(properties.get("font"))
        self._chars_per_update = max(1, int(properties.get("chars_per_update", DEFAULT_CHARS_PER_UPDATE)))
        self._show_cursor = bool(properties.get("show_cursor", True))
        self._blink_seconds = int(properties.get("cursor_blink_ms", DEFAULT_CURSOR_BLINK_MS)) / 1000.0
        self._line_height = self._font.glyph_height + CHAR_GAP
        rows = max(1, (self.content_area.height + CHAR_GAP) // self._line_height)
        self._done: deque[str] = deque(maxlen=rows)
        self._target = self._generator.next_line()
        self._typed = 0

    @property
    def visible_lines(self) -> list[str]:
        """Completed lines plus the partially typed one, oldest first."""
        lines = list(self._done) + [self._target[: self._typed]]
        return lines[-(self._done.maxlen or 1) :]

    def update(self) -> None:
        remaining = self._chars_per_update
        while remaining > 0:
            step = min(remaining, len(self._target) - self._typed)
            self._typed += step
            remaining -= step
            if self._typed >= len(self._target):
                self._done.append(self._target)
                self._target = self._generator.next_line()
                self._typed = 0
                break

    def render(self) -> Surface | None:
        if self.should_hide():
            return None
        canvas = self.create_canvas()
        area = self.content_area
        clip = (area.x, area.y, area.width, area.height)
        lines = self.visible_lines
        for index, line in enumerate(lines):
            y = area.y + index * self._line_height
            width = draw_text_clipped(canvas, line, area.x, y, self._font, clip)
            if index == len(lines) - 1 and self._cursor_visible():
                cursor_x = area.x + width + (CHAR_GAP if width else 0)
                canvas.set_clip(*clip)
                canvas.fill_rect(cursor_x, y, self._font.glyph_width, self._font.glyph_height, ON)
                canvas.reset_clip()
        self.apply_border(canvas)
        return canvas

    def _cursor_visible(self) -> bool:
        if not self._show_cursor:
            return False
        if self._blink_seconds <= 0:
            return True
        return int(self._clock() / self._blink_seconds) % 2 == 0


__all__ = ["CodeGenerator", "HackerCodeWidget"]
