"""PyQt6 ``QLineEdit`` adapter for the input mask binding registry."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from PyQt6.QtCore import QEvent, QObject, Qt
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import QLineEdit

from input_mask import keys
from input_mask.field_access import KeyListener
from input_mask.keys import KeyEvent

_LOGGER = logging.getLogger("InputMask.Qt")

_PROPERTY_PREFIX = "inputMask_"

QT_KEY_MAP: Dict[Qt.Key, str] = {
    Qt.Key.Key_Backspace: keys.KEY_BACKSPACE,
    Qt.Key.Key_Delete: keys.KEY_DELETE,
    Qt.Key.Key_Tab: keys.KEY_TAB,
    Qt.Key.Key_Backtab: keys.KEY_TAB,
    Qt.Key.Key_Left: keys.KEY_LEFT,
    Qt.Key.Key_Right: keys.KEY_RIGHT,
    Qt.Key.Key_Home: keys.KEY_HOME,
    Qt.Key.Key_End: keys.KEY_END,
    Qt.Key.Key_CapsLock: keys.KEY_CAPS_LOCK,
    Qt.Key.Key_Shift: keys.KEY_SHIFT,
    Qt.Key.Key_Control: keys.KEY_CONTROL,
}


def key_event_from_qt(event: QKeyEvent) -> KeyEvent:
    """Translate a ``QKeyEvent`` into the toolkit-neutral key notification."""

    modifiers = event.modifiers()
    ctrl = bool(modifiers & Qt.KeyboardModifier.ControlModifier)
    shift = bool(modifiers & Qt.KeyboardModifier.ShiftModifier)
    try:
        qt_key = Qt.Key(event.key())
    except ValueError:
        qt_key = None

    if qt_key is Qt.Key.Key_Backtab:
        shift = True
    if qt_key in QT_KEY_MAP:
        key = QT_KEY_MAP[qt_key]
    elif ctrl and Qt.Key.Key_A.value <= event.key() <= Qt.Key.Key_Z.value:
        key = chr(event.key()).lower()
    else:
        text = event.text()
        key = text if text and text.isprintable() else (qt_key.name if qt_key is not None else "")
    return KeyEvent(key=key, ctrl=ctrl, shift=shift)


class _KeyEventFilter(QObject):
    def __init__(self, on_key_down: KeyListener, on_key_up: KeyListener, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._on_key_down = on_key_down
        self._on_key_up = on_key_up

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt API
        etype = event.type()
        if etype == QEvent.Type.KeyPress and isinstance(event, QKeyEvent):
            return bool(self._on_key_down(key_event_from_qt(event)))
        if etype == QEvent.Type.KeyRelease and isinstance(event, QKeyEvent):
            if event.isAutoRepeat():
                return False
            return bool(self._on_key_up(key_event_from_qt(event)))
        return False


class QtLineEditField:
    """Exposes a ``QLineEdit`` through the field handle capability.

    Binding attributes are stored as dynamic Qt properties so they travel
    with the widget rather than with this wrapper.
    """

    def __init__(self, line_edit: QLineEdit, *, pattern: Optional[str] = None) -> None:
        self.line_edit = line_edit
        self._filter: Optional[_KeyEventFilter] = None
        if pattern is not None and self.get_attribute("pattern") is None:
            self.set_attribute("pattern", pattern)

    def get_text(self) -> str:
        return self.line_edit.text()

    def set_text(self, text: str) -> None:
        self.line_edit.setText(text)

    def get_caret(self) -> Optional[int]:
        try:
            return int(self.line_edit.cursorPosition())
        except RuntimeError:
            # Underlying C++ object already deleted.
            return None

    def set_caret(self, offset: int) -> None:
        try:
            self.line_edit.setCursorPosition(offset)
        except RuntimeError as exc:
            _LOGGER.debug("Unable to move line edit caret: %s", exc)

    def selection_length(self) -> int:
        if not self.line_edit.hasSelectedText():
            return 0
        return len(self.line_edit.selectedText())

    def get_attribute(self, name: str) -> Optional[str]:
        value = self.line_edit.property(_PROPERTY_PREFIX + name)
        if value is None and name == "placeholder":
            value = self.line_edit.placeholderText() or None
        return None if value is None else str(value)

    def set_attribute(self, name: str, value: Optional[str]) -> None:
        self.line_edit.setProperty(_PROPERTY_PREFIX + name, value)

    def add_key_listeners(self, on_key_down: KeyListener, on_key_up: KeyListener) -> None:
        self.remove_key_listeners()
        self._filter = _KeyEventFilter(on_key_down, on_key_up, self.line_edit)
        self.line_edit.installEventFilter(self._filter)

    def remove_key_listeners(self) -> None:
        if self._filter is None:
            return
        try:
            self.line_edit.removeEventFilter(self._filter)
        except RuntimeError:
            pass
        self._filter = None


class QtObjectNameLocator:
    """Resolves ``objectName`` selectors to line edits below a parent widget."""

    def __init__(self, parent: QObject) -> None:
        self.parent = parent
        self._handles: Dict[int, QtLineEditField] = {}

    def resolve(self, selector: str) -> list[QtLineEditField]:
        handles = []
        for line_edit in self.parent.findChildren(QLineEdit, selector):
            key = id(line_edit)
            handle = self._handles.get(key)
            if handle is None:
                handle = QtLineEditField(line_edit)
                self._handles[key] = handle
            handles.append(handle)
        return handles


__all__ = ["QT_KEY_MAP", "QtLineEditField", "QtObjectNameLocator", "key_event_from_qt"]
