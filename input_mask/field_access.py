"""Capabilities the binding registry needs from a toolkit text field."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from input_mask import keys
from input_mask.keys import KeyEvent

# Listeners return True when the field's default handling must be suppressed.
KeyListener = Callable[[KeyEvent], bool]


class FieldHandle(Protocol):
    def get_text(self) -> str: ...

    def set_text(self, text: str) -> None: ...

    def get_caret(self) -> Optional[int]: ...

    def set_caret(self, offset: int) -> None: ...

    def selection_length(self) -> int: ...

    def get_attribute(self, name: str) -> Optional[str]: ...

    def set_attribute(self, name: str, value: Optional[str]) -> None: ...

    def add_key_listeners(self, on_key_down: KeyListener, on_key_up: KeyListener) -> None: ...

    def remove_key_listeners(self) -> None: ...


class FieldLocator(Protocol):
    def resolve(self, selector: str) -> Sequence[FieldHandle]: ...


class InMemoryField:
    """Headless field used for scripted input and tests.

    ``press`` replays the toolkit's default behaviour for printable keys,
    Backspace, Delete and the arrow keys whenever the listeners do not
    suppress it.
    """

    def __init__(
        self,
        text: str = "",
        *,
        caret: Optional[int] = None,
        attributes: Optional[Mapping[str, str]] = None,
        caret_supported: bool = True,
    ) -> None:
        self.text = text
        self.caret = len(text) if caret is None else caret
        self.selection: tuple[int, int] = (self.caret, self.caret)
        self.attributes: Dict[str, str] = dict(attributes or {})
        self.caret_supported = caret_supported
        self._on_key_down: Optional[KeyListener] = None
        self._on_key_up: Optional[KeyListener] = None

    def get_text(self) -> str:
        return self.text

    def set_text(self, text: str) -> None:
        self.text = text
        self.caret = min(self.caret, len(text))
        self.selection = (self.caret, self.caret)

    def get_caret(self) -> Optional[int]:
        if not self.caret_supported:
            return None
        return self.caret

    def set_caret(self, offset: int) -> None:
        self.caret = max(0, min(offset, len(self.text)))
        self.selection = (self.caret, self.caret)

    def select(self, start: int, end: int) -> None:
        self.selection = (start, end)
        self.caret = end

    def selection_length(self) -> int:
        start, end = self.selection
        return abs(end - start)

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: Optional[str]) -> None:
        if value is None:
            self.attributes.pop(name, None)
        else:
            self.attributes[name] = value

    def add_key_listeners(self, on_key_down: KeyListener, on_key_up: KeyListener) -> None:
        self._on_key_down = on_key_down
        self._on_key_up = on_key_up

    def remove_key_listeners(self) -> None:
        self._on_key_down = None
        self._on_key_up = None

    @property
    def has_listeners(self) -> bool:
        return self._on_key_down is not None

    def press(self, key: str, *, ctrl: bool = False, shift: bool = False) -> bool:
        """Deliver a full key-down/key-up cycle. Returns True when suppressed."""

        event = KeyEvent(key=key, ctrl=ctrl, shift=shift)
        suppressed = bool(self._on_key_down(event)) if self._on_key_down else False
        if not suppressed:
            self._apply_default(event)
        if self._on_key_up:
            self._on_key_up(event)
        return suppressed

    def type_text(self, text: str) -> None:
        for ch in text:
            self.press(ch)

    def paste(self, clipboard: str) -> bool:
        """Simulate Ctrl+V with ``clipboard`` as the pasted content."""

        event = KeyEvent(key="v", ctrl=True)
        suppressed = bool(self._on_key_down(event)) if self._on_key_down else False
        if not suppressed:
            start, end = sorted(self.selection)
            self.text = self.text[:start] + clipboard + self.text[end:]
            self.set_caret(start + len(clipboard))
        if self._on_key_up:
            self._on_key_up(event)
        return suppressed

    def _apply_default(self, event: KeyEvent) -> None:
        start, end = sorted(self.selection)
        key = event.key
        if event.ctrl:
            return
        if key == keys.KEY_BACKSPACE:
            if start != end:
                self.text = self.text[:start] + self.text[end:]
                self.set_caret(start)
            elif start > 0:
                self.text = self.text[: start - 1] + self.text[start:]
                self.set_caret(start - 1)
        elif key == keys.KEY_DELETE:
            if start != end:
                self.text = self.text[:start] + self.text[end:]
            else:
                self.text = self.text[:start] + self.text[start + 1:]
            self.set_caret(start)
        elif key == keys.KEY_LEFT:
            self.set_caret(self.caret - 1)
        elif key == keys.KEY_RIGHT:
            self.set_caret(self.caret + 1)
        elif key == keys.KEY_HOME:
            self.set_caret(0)
        elif key == keys.KEY_END:
            self.set_caret(len(self.text))
        elif len(key) == 1:
            self.text = self.text[:start] + key + self.text[end:]
            self.set_caret(start + 1)


class StaticFieldLocator:
    """Resolves selectors from a fixed mapping of selector to fields."""

    def __init__(self, fields: Optional[Mapping[str, Iterable[FieldHandle]]] = None) -> None:
        self._fields: Dict[str, List[FieldHandle]] = {
            selector: list(handles) for selector, handles in (fields or {}).items()
        }

    def add(self, selector: str, *handles: FieldHandle) -> None:
        self._fields.setdefault(selector, []).extend(handles)

    def resolve(self, selector: str) -> Sequence[FieldHandle]:
        return list(self._fields.get(selector, ()))


__all__ = ["FieldHandle", "FieldLocator", "InMemoryField", "KeyListener", "StaticFieldLocator"]
