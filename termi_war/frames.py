"""Render descriptors for the shell.

A ``RenderFrame`` says what to draw (background fill plus positioned text
runs); it never touches pygame. ``FrameBuilder`` turns a ``ShellSnapshot``
into a frame using the palette and layout it was constructed with.
"""

from __future__ import annotations

from dataclasses import dataclass

from .clock import Clock, blink_on
from .shell_core import PLACEHOLDER_STATES, GameState, ShellSnapshot

RGB = tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class Palette:
    foreground: RGB = (51, 255, 51)
    dim: RGB = (0, 100, 0)
    background: RGB = (0, 5, 0)


@dataclass(frozen=True, slots=True)
class FrameLayout:
    margin_x: int = 20
    margin_y: int = 20
    line_height: int = 30
    modes_x: int = 30
    modes_y: int = 100
    mode_spacing: int = 200
    prompt_x: int = 30
    prompt_y: int = 200
    cursor_blink_ms: int = 500


@dataclass(frozen=True, slots=True)
class DrawText:
    text: str
    x: int
    y: int
    color: RGB


@dataclass(frozen=True, slots=True)
class RenderFrame:
    background: RGB
    draws: tuple[DrawText, ...]

    def texts(self) -> list[str]:
        return [d.text for d in self.draws]


MENU_HEADER = "CHOOSE MODE:"
PATH_PROMPT = "ENTER TARGET DIRECTORY: "
CURSOR = "_"


class FrameBuilder:
    def __init__(self, *, clock: Clock, palette: Palette | None = None, layout: FrameLayout | None = None) -> None:
        self._clock = clock
        self._palette = palette or Palette()
        self._layout = layout or FrameLayout()

    @property
    def palette(self) -> Palette:
        return self._palette

    @property
    def layout(self) -> FrameLayout:
        return self._layout

    def build(self, snap: ShellSnapshot) -> RenderFrame:
        if snap.state is GameState.BOOTING:
            draws = self._boot_draws(snap)
        elif snap.state is GameState.MENU:
            draws = self._menu_draws(snap)
        else:
            assert snap.state in PLACEHOLDER_STATES
            draws = []
        return RenderFrame(background=self._palette.background, draws=tuple(draws))

    def cursor_visible(self) -> bool:
        return blink_on(self._clock, self._layout.cursor_blink_ms)

    def _boot_draws(self, snap: ShellSnapshot) -> list[DrawText]:
        lo = self._layout
        return [
            DrawText(line, lo.margin_x, lo.margin_y + i * lo.line_height, self._palette.foreground)
            for i, line in enumerate(snap.boot_lines)
        ]

    def _menu_draws(self, snap: ShellSnapshot) -> list[DrawText]:
        lo = self._layout
        pal = self._palette
        draws = [DrawText(MENU_HEADER, lo.margin_x, lo.margin_y, pal.foreground)]

        x = lo.modes_x
        for mode in snap.modes:
            if mode is snap.current_mode:
                label = f"[ {mode.display_name} ]"
                color = pal.foreground
            else:
                label = f"  {mode.display_name}  "
                color = pal.dim
            draws.append(DrawText(label, x, lo.modes_y, color))
            x += lo.mode_spacing

        if snap.input_active:
            prompt = PATH_PROMPT + snap.input_buffer
            if self.cursor_visible():
                prompt += CURSOR
            draws.append(DrawText(prompt, lo.prompt_x, lo.prompt_y, pal.foreground))
        return draws
