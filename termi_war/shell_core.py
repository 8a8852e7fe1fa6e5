"""Deterministic core of the Termi-War shell.

The shell is a small state machine: a timed boot sequence, a mode-selection
menu with a target-directory prompt, and placeholder states for the game
itself. It has no dependency on pygame; time comes from an injected
``Clock`` and input arrives as one ``KeyState`` per frame, so the whole flow
can be driven headlessly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from .clock import Clock, elapsed_s
from .filesystem import FilesystemTask, TaskDispatcher, dispatch_in_background, noop_filesystem_init

if TYPE_CHECKING:
    from .frames import FrameBuilder, RenderFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BootLine:
    text: str
    delay_ms: int  # wait after the previous reveal


BOOT_SEQUENCE: tuple[BootLine, ...] = (
    BootLine("TERMI WAR V1.0.0", 500),
    BootLine("CORE-OS LOADING....", 850),
    BootLine("INITALIZING GRAPHICS DRIVERS.....", 400),
    BootLine("GRAPHICS: OK", 400),
    BootLine("INITALIZING CPU......", 500),
    BootLine("CPU: OK", 400),
    BootLine("MOUNTING FILESYSTEM...", 600),
    BootLine("SCANNING FOR NODES...", 1000),
    BootLine("WARNING: DESTRUCTION MODE DETECTED IN KERNEL", 500),
)

BOOT_HOLD_S = 2.0
MODE_DEBOUNCE_S = 1.0

# Absorbs float error when summed frame times land exactly on a delay.
_EPS = 1e-9


class Mode(str, Enum):
    SAFE = "SAFE"
    DESTRUCTION = "DESTRUCTION"
    DANGER = "DANGER"

    @property
    def display_name(self) -> str:
        return self.value

    def next(self) -> "Mode":
        order = list(Mode)
        return order[(order.index(self) + 1) % len(order)]

    def previous(self) -> "Mode":
        order = list(Mode)
        return order[(order.index(self) - 1) % len(order)]


class GameState(str, Enum):
    BOOTING = "booting"
    MENU = "menu"
    FS_INIT = "fs_init"
    PLAYING = "playing"
    WON = "won"
    LOOSE = "loose"


# States that exist in the flow but have no transitions or content yet.
PLACEHOLDER_STATES = frozenset({GameState.FS_INIT, GameState.PLAYING, GameState.WON, GameState.LOOSE})


@dataclass(frozen=True, slots=True)
class KeyState:
    """One poll of the keyboard.

    Direction, Enter and Backspace are level-triggered (True while held).
    ``typed`` holds the printable characters entered since the last poll.
    """

    left: bool = False
    right: bool = False
    enter: bool = False
    backspace: bool = False
    typed: str = ""


@dataclass(frozen=True, slots=True)
class ShellSnapshot:
    """View model for the frame builder (pure data)."""

    state: GameState
    boot_lines: tuple[str, ...]
    modes: tuple[Mode, ...]
    current_mode: Mode
    input_active: bool
    input_buffer: str
    final_path: str


class ScreenController:
    """Owns the shell state machine.

    - Single caller: ``advance`` is invoked once per rendered frame.
    - Timing decisions are sampled (``elapsed >= delay``), never scheduled.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        frame_builder: FrameBuilder,
        filesystem_task: FilesystemTask = noop_filesystem_init,
        dispatcher: TaskDispatcher = dispatch_in_background,
        boot_sequence: Sequence[BootLine] = BOOT_SEQUENCE,
        boot_hold_s: float = BOOT_HOLD_S,
        debounce_s: float = MODE_DEBOUNCE_S,
    ) -> None:
        if boot_hold_s < 0.0:
            raise ValueError("boot_hold_s must be >= 0")
        if debounce_s < 0.0:
            raise ValueError("debounce_s must be >= 0")
        if any(line.delay_ms < 0 for line in boot_sequence):
            raise ValueError("boot line delays must be >= 0")

        self._clock = clock
        self._frames = frame_builder
        self._filesystem_task = filesystem_task
        self._dispatcher = dispatcher
        self._boot_sequence = tuple(boot_sequence)
        self._boot_hold_s = float(boot_hold_s)
        self._debounce_s = float(debounce_s)

        self._state = GameState.BOOTING
        self._boot_index = 0
        self._visible_boot_lines: list[str] = []

        self._current_mode = Mode.SAFE
        self._input_active = False
        self._input_buffer = ""
        self._final_path = ""

        now = self._clock.now()
        self._last_update_s = now
        self._last_input_s = now

        # Enter counts only on the frame it goes down.
        self._enter_down = False

        self._handlers: dict[GameState, Callable[[KeyState], None]] = {
            GameState.BOOTING: self._advance_booting,
            GameState.MENU: self._advance_menu,
            GameState.FS_INIT: self._advance_placeholder,
            GameState.PLAYING: self._advance_placeholder,
            GameState.WON: self._advance_placeholder,
            GameState.LOOSE: self._advance_placeholder,
        }

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def boot_index(self) -> int:
        return self._boot_index

    @property
    def visible_boot_lines(self) -> list[str]:
        return list(self._visible_boot_lines)

    @property
    def current_mode(self) -> Mode:
        return self._current_mode

    @property
    def input_active(self) -> bool:
        return self._input_active

    @property
    def input_buffer(self) -> str:
        return self._input_buffer

    @property
    def final_path(self) -> str:
        return self._final_path

    def advance(self, keys: KeyState) -> RenderFrame:
        """Step the state machine once and describe the resulting frame."""
        enter_pressed = keys.enter and not self._enter_down
        self._enter_down = keys.enter
        self._handlers[self._state](replace(keys, enter=enter_pressed))
        return self._frames.build(self.snapshot())

    def snapshot(self) -> ShellSnapshot:
        return ShellSnapshot(
            state=self._state,
            boot_lines=tuple(self._visible_boot_lines),
            modes=tuple(Mode),
            current_mode=self._current_mode,
            input_active=self._input_active,
            input_buffer=self._input_buffer,
            final_path=self._final_path,
        )

    def _advance_booting(self, keys: KeyState) -> None:
        now = self._clock.now()
        elapsed = elapsed_s(self._clock, self._last_update_s)

        if self._boot_index < len(self._boot_sequence):
            line = self._boot_sequence[self._boot_index]
            if elapsed >= line.delay_ms / 1000.0 - _EPS:
                self._visible_boot_lines.append(line.text)
                self._boot_index += 1
                self._last_update_s = now
                logger.debug("Boot line %d: %s", self._boot_index, line.text)
            return

        if elapsed >= self._boot_hold_s - _EPS:
            self._visible_boot_lines = []
            self._transition(GameState.MENU)

    def _advance_menu(self, keys: KeyState) -> None:
        if not self._input_active:
            self._select_mode(keys)
            return

        typed = "".join(ch for ch in keys.typed if ch.isprintable())
        self._input_buffer += typed

        if keys.backspace and self._input_buffer:
            self._input_buffer = self._input_buffer[:-1]

        if keys.enter:
            self._commit_path()

    def _select_mode(self, keys: KeyState) -> None:
        if keys.right and self._debounce_elapsed():
            self._last_input_s = self._clock.now()
            self._current_mode = self._current_mode.next()
            logger.debug("Mode -> %s", self._current_mode.display_name)
        if keys.left and self._debounce_elapsed():
            self._last_input_s = self._clock.now()
            self._current_mode = self._current_mode.previous()
            logger.debug("Mode -> %s", self._current_mode.display_name)
        if keys.enter:
            self._input_active = True
            logger.info("Mode confirmed: %s", self._current_mode.display_name)

    def _debounce_elapsed(self) -> bool:
        return elapsed_s(self._clock, self._last_input_s) >= self._debounce_s - _EPS

    def _commit_path(self) -> None:
        self._final_path = self._input_buffer
        logger.info("Target directory committed: %r", self._final_path)
        self._dispatcher(self._filesystem_task)
        self._transition(GameState.FS_INIT)

    def _advance_placeholder(self, keys: KeyState) -> None:
        # FS_INIT, PLAYING, WON and LOOSE have no exit condition yet.
        return

    def _transition(self, state: GameState) -> None:
        logger.info("State %s -> %s", self._state.value, state.value)
        self._state = state
