"""Pygame host for the Termi-War shell.

The window shows a fixed 1920x1080 logical canvas scaled to whatever size
the user drags it to. Each frame the keyboard state is polled into a
``KeyState``, the ``ScreenController`` advances, and the returned
``RenderFrame`` is drawn onto the canvas.

State, timing and layout decisions live in termi_war/* (core modules).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

import pygame

from .clock import Clock, RealClock
from .config import DEFAULT_FONT_FILE, ShellConfig
from .filesystem import FilesystemTask, TaskDispatcher, dispatch_in_background, noop_filesystem_init
from .frames import FrameBuilder, RenderFrame
from .shell_core import KeyState, ScreenController

logger = logging.getLogger(__name__)

_ENTER_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER)
_TRACKED_KEYS = (pygame.K_LEFT, pygame.K_RIGHT, pygame.K_BACKSPACE, *_ENTER_KEYS)


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


class KeyboardCollector:
    """Turns pygame key events into one level-triggered ``KeyState`` per frame.

    A key counts as down for a poll if it is held at poll time or was pressed
    at any point since the previous poll, so taps shorter than a frame are
    not lost.
    """

    def __init__(self) -> None:
        self._held: set[int] = set()
        self._pressed: set[int] = set()
        self._typed: list[str] = []

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key in _TRACKED_KEYS:
                self._held.add(event.key)
                self._pressed.add(event.key)
        elif event.type == pygame.KEYUP:
            self._held.discard(event.key)
        elif event.type == pygame.TEXTINPUT:
            # Arrows, Enter and Backspace never arrive as text input.
            self._typed.append(event.text)
        elif event.type == pygame.WINDOWFOCUSLOST:
            self._held.clear()

    def poll(self) -> KeyState:
        down = self._held | self._pressed
        keys = KeyState(
            left=pygame.K_LEFT in down,
            right=pygame.K_RIGHT in down,
            enter=any(k in down for k in _ENTER_KEYS),
            backspace=pygame.K_BACKSPACE in down,
            typed="".join(self._typed),
        )
        self._pressed.clear()
        self._typed.clear()
        return keys


class PygameFrameRenderer:
    def __init__(self, canvas: pygame.Surface, font: pygame.font.Font) -> None:
        self._canvas = canvas
        self._font = font

    @property
    def canvas(self) -> pygame.Surface:
        return self._canvas

    def draw(self, frame: RenderFrame) -> None:
        self._canvas.fill(frame.background)
        for d in frame.draws:
            if not d.text:
                continue
            self._canvas.blit(self._font.render(d.text, True, d.color), (d.x, d.y))

    def present(self, window: pygame.Surface) -> None:
        if window.get_size() == self._canvas.get_size():
            window.blit(self._canvas, (0, 0))
        else:
            window.blit(pygame.transform.scale(self._canvas, window.get_size()), (0, 0))


class App:
    def __init__(
        self,
        *,
        window: pygame.Surface,
        renderer: PygameFrameRenderer,
        controller: ScreenController,
    ) -> None:
        self._window = window
        self._renderer = renderer
        self._controller = controller
        self._keyboard = KeyboardCollector()
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def controller(self) -> ScreenController:
        return self._controller

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if event.type == pygame.VIDEORESIZE:
            self._window = pygame.display.get_surface()
            return
        self._keyboard.handle_event(event)

    def step(self) -> None:
        frame = self._controller.advance(self._keyboard.poll())
        self._renderer.draw(frame)
        self._renderer.present(self._window)


def load_font(config: ShellConfig) -> pygame.font.Font:
    """Load the terminal face. Failure here is fatal; nothing has started yet."""
    path = config.resolve_font_path()
    if path is None:
        if os.environ.get("SDL_VIDEODRIVER", "").strip().lower() != "dummy":
            logger.critical("Terminal font %s not found and TERMIWAR_FONT_PATH is unset", DEFAULT_FONT_FILE)
            raise SystemExit(1)
        # Headless runs (CI, tests) have no font bundled.
        logger.warning("No terminal font configured; using the pygame default face")
        return pygame.font.Font(None, config.font_size)
    try:
        font = pygame.font.Font(str(path), config.font_size)
    except (OSError, pygame.error):
        logger.exception("Could not load font %s", path)
        raise SystemExit(1)
    logger.info("Loaded font %s at %dpx", path, config.font_size)
    return font


def build_app(
    config: ShellConfig,
    *,
    clock: Clock,
    filesystem_task: FilesystemTask = noop_filesystem_init,
    dispatcher: TaskDispatcher = dispatch_in_background,
) -> App:
    """Open the window and wire the controller to it. Call after ``pygame.init()``."""
    pygame.display.set_caption(config.title)
    window = pygame.display.set_mode(config.canvas_size, pygame.RESIZABLE)
    canvas = pygame.Surface(config.canvas_size)
    font = load_font(config)
    pygame.key.start_text_input()

    frames = FrameBuilder(clock=clock, palette=config.palette(), layout=config.layout())
    controller = ScreenController(
        clock=clock,
        frame_builder=frames,
        filesystem_task=filesystem_task,
        dispatcher=dispatcher,
        boot_hold_s=config.boot_hold_s,
        debounce_s=config.debounce_s,
    )
    return App(window=window, renderer=PygameFrameRenderer(canvas, font), controller=controller)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: ShellConfig | None = None,
    clock: Clock | None = None,
    filesystem_task: FilesystemTask = noop_filesystem_init,
    dispatcher: TaskDispatcher = dispatch_in_background,
) -> int:
    config = config or ShellConfig.load()

    pygame.init()
    try:
        app = build_app(
            config,
            clock=clock or RealClock(),
            filesystem_task=filesystem_task,
            dispatcher=dispatcher,
        )
        fps = pygame.time.Clock()
        logger.info("%s started (%dx%d canvas)", config.title, *config.canvas_size)

        frame = 0
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.step()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            fps.tick(config.target_fps)
    finally:
        pygame.quit()

    logger.info("%s stopped", config.title)
    return 0
