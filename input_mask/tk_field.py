"""tkinter ``Entry`` adapter for the input mask binding registry."""

from __future__ import annotations

import logging
import tkinter as tk
from typing import Dict, List, Mapping, Optional, Sequence

from input_mask import keys
from input_mask.field_access import KeyListener
from input_mask.keys import KeyEvent

_LOGGER = logging.getLogger("InputMask.Tk")

_ATTRIBUTES_ATTR = "_input_mask_attributes"

SHIFT_MASK = 0x0001
CONTROL_MASK = 0x0004

# Tk keysyms that map onto the toolkit-neutral key names.
KEYSYM_MAP: Dict[str, str] = {
    "BackSpace": keys.KEY_BACKSPACE,
    "Delete": keys.KEY_DELETE,
    "KP_Delete": keys.KEY_DELETE,
    "Tab": keys.KEY_TAB,
    "ISO_Left_Tab": keys.KEY_TAB,
    "Left": keys.KEY_LEFT,
    "KP_Left": keys.KEY_LEFT,
    "Right": keys.KEY_RIGHT,
    "KP_Right": keys.KEY_RIGHT,
    "Home": keys.KEY_HOME,
    "KP_Home": keys.KEY_HOME,
    "End": keys.KEY_END,
    "KP_End": keys.KEY_END,
    "Caps_Lock": keys.KEY_CAPS_LOCK,
    "Shift_L": keys.KEY_SHIFT,
    "Shift_R": keys.KEY_SHIFT,
    "Control_L": keys.KEY_CONTROL,
    "Control_R": keys.KEY_CONTROL,
}


def key_event_from_tk(event: object) -> KeyEvent:
    """Translate a Tk ``<KeyPress>``/``<KeyRelease>`` event."""

    keysym = getattr(event, "keysym", "") or ""
    char = getattr(event, "char", "") or ""
    state = getattr(event, "state", 0) or 0
    if not isinstance(state, int):
        # Tk reports the state as a string for some synthetic events.
        state = 0
    ctrl = bool(state & CONTROL_MASK)
    shift = bool(state & SHIFT_MASK) or keysym == "ISO_Left_Tab"

    if keysym in KEYSYM_MAP:
        key = KEYSYM_MAP[keysym]
    elif ctrl and len(keysym) == 1:
        key = keysym
    elif char and char.isprintable():
        key = char
    else:
        key = keysym
    return KeyEvent(key=key, ctrl=ctrl, shift=shift)


class TkEntryField:
    """Exposes a ``tk.Entry`` through the field handle capability."""

    def __init__(
        self,
        entry: tk.Entry,
        *,
        placeholder: Optional[str] = None,
        pattern: Optional[str] = None,
    ) -> None:
        self.entry = entry
        attributes = self._attributes()
        if placeholder is not None:
            attributes.setdefault("placeholder", placeholder)
        if pattern is not None:
            attributes.setdefault("pattern", pattern)
        self._bindings: List[tuple[str, str]] = []

    def _attributes(self) -> Dict[str, str]:
        attributes = getattr(self.entry, _ATTRIBUTES_ATTR, None)
        if attributes is None:
            attributes = {}
            setattr(self.entry, _ATTRIBUTES_ATTR, attributes)
        return attributes

    def get_text(self) -> str:
        return self.entry.get()

    def set_text(self, text: str) -> None:
        try:
            self.entry.delete(0, tk.END)
            self.entry.insert(0, text)
        except tk.TclError as exc:
            _LOGGER.debug("Unable to write entry text: %s", exc)

    def get_caret(self) -> Optional[int]:
        try:
            return int(self.entry.index(tk.INSERT))
        except (tk.TclError, TypeError, ValueError):
            return None

    def set_caret(self, offset: int) -> None:
        try:
            self.entry.selection_clear()
            self.entry.icursor(offset)
        except tk.TclError as exc:
            _LOGGER.debug("Unable to move entry caret: %s", exc)

    def selection_length(self) -> int:
        try:
            if not self.entry.selection_present():
                return 0
            return int(self.entry.index(tk.SEL_LAST)) - int(self.entry.index(tk.SEL_FIRST))
        except tk.TclError:
            return 0

    def get_attribute(self, name: str) -> Optional[str]:
        return self._attributes().get(name)

    def set_attribute(self, name: str, value: Optional[str]) -> None:
        attributes = self._attributes()
        if value is None:
            attributes.pop(name, None)
        else:
            attributes[name] = value

    def add_key_listeners(self, on_key_down: KeyListener, on_key_up: KeyListener) -> None:
        def _key_down(event: object) -> Optional[str]:
            return "break" if on_key_down(key_event_from_tk(event)) else None

        def _key_up(event: object) -> Optional[str]:
            return "break" if on_key_up(key_event_from_tk(event)) else None

        for sequence, callback in (("<KeyPress>", _key_down), ("<KeyRelease>", _key_up)):
            funcid = self.entry.bind(sequence, callback, add="+")
            self._bindings.append((sequence, funcid))

    def remove_key_listeners(self) -> None:
        for sequence, funcid in self._bindings:
            try:
                self.entry.unbind(sequence, funcid)
            except tk.TclError:
                # Widget already destroyed; nothing left to unbind.
                pass
        self._bindings.clear()


class TkWidgetLocator:
    """Resolves Tk widget path names (``.form.phone``) to entry handles."""

    def __init__(
        self,
        root: tk.Misc,
        *,
        attributes: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> None:
        self.root = root
        self._attributes = dict(attributes or {})
        self._handles: Dict[str, TkEntryField] = {}

    def resolve(self, selector: str) -> Sequence[TkEntryField]:
        handle = self._handles.get(selector)
        if handle is not None:
            return [handle]
        try:
            widget = self.root.nametowidget(selector)
        except KeyError:
            _LOGGER.debug("No Tk widget found for selector '%s'", selector)
            return []
        if not isinstance(widget, tk.Entry):
            _LOGGER.warning("Selector '%s' resolved to %s, not an Entry; skipping", selector, type(widget).__name__)
            return []
        extra = self._attributes.get(selector, {})
        handle = TkEntryField(widget, placeholder=extra.get("placeholder"), pattern=extra.get("pattern"))
        self._handles[selector] = handle
        return [handle]


__all__ = ["KEYSYM_MAP", "TkEntryField", "TkWidgetLocator", "key_event_from_tk"]
