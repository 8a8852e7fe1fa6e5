from __future__ import annotations

from dataclasses import dataclass

import pytest

from termi_war.filesystem import dispatch_inline
from termi_war.frames import FrameBuilder
from termi_war.shell_core import BOOT_SEQUENCE, BootLine, GameState, KeyState, Mode, ScreenController


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


IDLE = KeyState()


def _make(clock: FakeClock, **kwargs) -> ScreenController:
    return ScreenController(clock=clock, frame_builder=FrameBuilder(clock=clock), dispatcher=dispatch_inline, **kwargs)


def _boot_to_menu(clock: FakeClock, shell: ScreenController) -> None:
    for line in BOOT_SEQUENCE:
        clock.advance(line.delay_ms / 1000.0)
        shell.advance(IDLE)
    clock.advance(2.0)
    shell.advance(IDLE)
    assert shell.state is GameState.MENU


def _tap_enter(shell: ScreenController) -> None:
    shell.advance(KeyState(enter=True))
    shell.advance(IDLE)


def test_starts_booting_with_nothing_shown() -> None:
    shell = _make(FakeClock())
    assert shell.state is GameState.BOOTING
    assert shell.boot_index == 0
    assert shell.visible_boot_lines == []
    assert shell.current_mode is Mode.SAFE
    assert shell.input_active is False


def test_boot_lines_revealed_only_after_their_delay() -> None:
    clock = FakeClock()
    shell = _make(clock)
    texts = [line.text for line in BOOT_SEQUENCE]

    for i, line in enumerate(BOOT_SEQUENCE):
        clock.advance(line.delay_ms / 1000.0 - 0.001)
        shell.advance(IDLE)
        assert shell.boot_index == i
        assert shell.visible_boot_lines == texts[:i]

        clock.advance(0.001)
        shell.advance(IDLE)
        assert shell.boot_index == i + 1
        assert shell.visible_boot_lines == texts[: i + 1]


def test_boot_reveals_at_most_one_line_per_advance() -> None:
    clock = FakeClock()
    shell = _make(clock)

    clock.advance(30.0)
    shell.advance(IDLE)
    assert shell.visible_boot_lines == [BOOT_SEQUENCE[0].text]

    shell.advance(IDLE)
    assert shell.boot_index == 1

    clock.advance(30.0)
    shell.advance(IDLE)
    assert shell.visible_boot_lines == [BOOT_SEQUENCE[0].text, BOOT_SEQUENCE[1].text]


def test_boot_completion_waits_two_seconds_then_clears() -> None:
    clock = FakeClock()
    shell = _make(clock)
    for line in BOOT_SEQUENCE:
        clock.advance(line.delay_ms / 1000.0)
        shell.advance(IDLE)
    assert shell.boot_index == len(BOOT_SEQUENCE)

    clock.advance(1.999)
    shell.advance(IDLE)
    assert shell.state is GameState.BOOTING
    assert len(shell.visible_boot_lines) == len(BOOT_SEQUENCE)

    clock.advance(0.001)
    frame = shell.advance(IDLE)
    assert shell.state is GameState.MENU
    assert shell.visible_boot_lines == []
    assert "CHOOSE MODE:" in frame.texts()


def test_custom_boot_sequence_and_hold() -> None:
    clock = FakeClock()
    shell = _make(clock, boot_sequence=[BootLine("ONE", 0), BootLine("TWO", 100)], boot_hold_s=0.5)

    shell.advance(IDLE)
    assert shell.visible_boot_lines == ["ONE"]
    clock.advance(0.1)
    shell.advance(IDLE)
    clock.advance(0.5)
    shell.advance(IDLE)
    assert shell.state is GameState.MENU


def test_mode_cycling_wraps_both_ways() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)

    seen = []
    for _ in range(3):
        shell.advance(KeyState(right=True))
        seen.append(shell.current_mode)
        clock.advance(1.0)
    assert seen == [Mode.DESTRUCTION, Mode.DANGER, Mode.SAFE]

    shell.advance(KeyState(left=True))
    assert shell.current_mode is Mode.DANGER


def test_held_direction_changes_mode_at_most_once_per_second() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)

    shell.advance(KeyState(right=True))
    assert shell.current_mode is Mode.DESTRUCTION

    for _ in range(9):
        clock.advance(0.1)
        shell.advance(KeyState(right=True))
    assert shell.current_mode is Mode.DESTRUCTION

    clock.advance(0.1)
    shell.advance(KeyState(right=True))
    assert shell.current_mode is Mode.DANGER


def test_right_and_left_in_same_poll_apply_one_change() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)

    shell.advance(KeyState(left=True, right=True))
    assert shell.current_mode is Mode.DESTRUCTION


def test_enter_confirms_mode_and_freezes_selection() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)

    shell.advance(KeyState(right=True))
    _tap_enter(shell)
    assert shell.input_active is True
    assert shell.state is GameState.MENU

    clock.advance(5.0)
    shell.advance(KeyState(right=True))
    assert shell.current_mode is Mode.DESTRUCTION


def test_typing_before_confirmation_is_ignored() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)

    shell.advance(KeyState(typed="abc"))
    assert shell.input_buffer == ""


def test_backspace_on_empty_buffer_is_noop() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)
    _tap_enter(shell)

    shell.advance(KeyState(backspace=True))
    shell.advance(KeyState(backspace=True))
    assert shell.input_buffer == ""
    assert shell.state is GameState.MENU


def test_held_backspace_deletes_every_frame() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)
    _tap_enter(shell)

    shell.advance(KeyState(typed="abc"))
    shell.advance(KeyState(backspace=True))
    shell.advance(KeyState(backspace=True))
    assert shell.input_buffer == "a"


def test_control_characters_are_dropped() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)
    _tap_enter(shell)

    shell.advance(KeyState(typed="a\tb\x7f\r"))
    assert shell.input_buffer == "ab"


def test_commit_captures_path_and_dispatches_once() -> None:
    clock = FakeClock()
    calls: list[int] = []
    shell = _make(clock, filesystem_task=lambda: calls.append(1))
    _boot_to_menu(clock, shell)
    _tap_enter(shell)

    shell.advance(KeyState(typed="games/"))
    shell.advance(KeyState(typed="world1"))
    shell.advance(KeyState(enter=True))

    assert shell.final_path == "games/world1"
    assert shell.state is GameState.FS_INIT
    assert calls == [1]

    for _ in range(3):
        _tap_enter(shell)
    assert shell.state is GameState.FS_INIT
    assert calls == [1]


def test_held_enter_does_not_confirm_and_commit_together() -> None:
    clock = FakeClock()
    calls: list[int] = []
    shell = _make(clock, filesystem_task=lambda: calls.append(1))
    _boot_to_menu(clock, shell)

    for _ in range(5):
        shell.advance(KeyState(enter=True))
    assert shell.input_active is True
    assert shell.state is GameState.MENU
    assert calls == []


def test_placeholder_states_hold_and_render_background_only() -> None:
    clock = FakeClock()
    shell = _make(clock)
    _boot_to_menu(clock, shell)
    _tap_enter(shell)
    shell.advance(KeyState(enter=True))
    assert shell.state is GameState.FS_INIT

    for keys in (IDLE, KeyState(right=True), KeyState(typed="x"), KeyState(backspace=True)):
        clock.advance(10.0)
        frame = shell.advance(keys)
        assert shell.state is GameState.FS_INIT
        assert frame.draws == ()
        assert frame.background == (0, 5, 0)


def test_rejects_negative_timings() -> None:
    clock = FakeClock()
    with pytest.raises(ValueError):
        _make(clock, boot_hold_s=-1.0)
    with pytest.raises(ValueError):
        _make(clock, debounce_s=-0.5)
    with pytest.raises(ValueError):
        _make(clock, boot_sequence=[BootLine("BAD", -1)])
