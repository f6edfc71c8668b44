"""Toolkit-neutral key notifications consumed by the edit controller."""

from __future__ import annotations

from dataclasses import dataclass

KEY_SHIFT = "Shift"
KEY_CONTROL = "Control"
KEY_HOME = "Home"
KEY_END = "End"
KEY_CAPS_LOCK = "CapsLock"
KEY_LEFT = "ArrowLeft"
KEY_RIGHT = "ArrowRight"
KEY_DELETE = "Delete"
KEY_BACKSPACE = "Backspace"
KEY_TAB = "Tab"

# Keys that bypass the pattern/strict gate and never arm the wait latch.
NAV_KEYS = frozenset(
    {
        KEY_SHIFT,
        KEY_CONTROL,
        KEY_HOME,
        KEY_END,
        KEY_CAPS_LOCK,
        KEY_LEFT,
        KEY_RIGHT,
        KEY_DELETE,
        KEY_BACKSPACE,
        KEY_TAB,
    }
)

PASTE_KEYS = frozenset({"v", "V"})
CUT_KEYS = frozenset({"x", "X"})
SELECT_COPY_KEYS = frozenset({"a", "A", "c", "C"})
CTRL_FN_KEYS = SELECT_COPY_KEYS | PASTE_KEYS | CUT_KEYS


@dataclass(frozen=True)
class KeyEvent:
    """A single key press or release delivered to a bound field."""

    key: str
    ctrl: bool = False
    shift: bool = False
    cancelable: bool = True

    @property
    def is_navigation(self) -> bool:
        return self.key in NAV_KEYS

    @property
    def has_modifier(self) -> bool:
        return self.ctrl or self.shift


__all__ = [
    "CTRL_FN_KEYS",
    "CUT_KEYS",
    "KEY_BACKSPACE",
    "KEY_CAPS_LOCK",
    "KEY_CONTROL",
    "KEY_DELETE",
    "KEY_END",
    "KEY_HOME",
    "KEY_LEFT",
    "KEY_RIGHT",
    "KEY_SHIFT",
    "KEY_TAB",
    "KeyEvent",
    "NAV_KEYS",
    "PASTE_KEYS",
    "SELECT_COPY_KEYS",
]
