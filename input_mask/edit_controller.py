from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from input_mask.keys import (
    CTRL_FN_KEYS,
    CUT_KEYS,
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_TAB,
    NAV_KEYS,
    PASTE_KEYS,
    KeyEvent,
)
from input_mask.mask_engine import FieldMaskConfig, reformat

_LOGGER = logging.getLogger("InputMask.Controller")


@dataclass(frozen=True)
class FieldState:
    """Per-field state owned by the binding registry."""

    config: FieldMaskConfig
    wait: bool = False
    # Display text when key-down let the pending key through; None once it was rejected.
    pending_text: Optional[str] = None


@dataclass(frozen=True)
class FieldSnapshot:
    """What the field looked like when the key notification arrived."""

    text: str
    caret: Optional[int] = None
    selection_length: int = 0

    @property
    def has_selection(self) -> bool:
        return self.selection_length >= 1


@dataclass(frozen=True)
class EditAction:
    """Writes the registry should apply to the field, plus the suppress verdict."""

    suppress: bool = False
    text: Optional[str] = None
    caret: Optional[int] = None

    @property
    def is_noop(self) -> bool:
        return not self.suppress and self.text is None and self.caret is None


NO_ACTION = EditAction()
SUPPRESS = EditAction(suppress=True)

Transition = Tuple[FieldState, EditAction]


def separator_run_before(config: FieldMaskConfig, caret: int) -> int:
    """Return the start of the separator run that ends right before ``caret``."""

    start = min(caret, len(config.mask))
    while start > 0 and config.is_separator(start - 1):
        start -= 1
    return start


def separator_run_after(config: FieldMaskConfig, position: int) -> int:
    """Return the first non-separator position at or after ``position``."""

    end = max(position, 0)
    while end < len(config.mask) and config.is_separator(end):
        end += 1
    return end


class EditController:
    """Key-down/key-up state machine for a masked field.

    Both phases are pure: they take the field state, the key notification and
    a snapshot of the field and return the next state with the action to apply.
    """

    def key_down(self, state: FieldState, event: KeyEvent, snapshot: FieldSnapshot) -> Transition:
        if state.wait:
            return state, SUPPRESS

        config = state.config
        key = event.key
        suppress = False

        if not event.has_modifier and key not in NAV_KEYS:
            if not config.accepts(key):
                suppress = True
            if (
                config.strict
                and config.mask
                and len(snapshot.text) >= len(config.mask)
                and not snapshot.has_selection
            ):
                suppress = True

        if suppress:
            return replace(state, wait=key not in NAV_KEYS, pending_text=None), SUPPRESS
        next_state = replace(state, wait=key not in NAV_KEYS, pending_text=snapshot.text)

        caret = snapshot.caret
        if caret is None or not event.cancelable or not config.mask:
            return next_state, NO_ACTION
        caret = max(0, min(caret, len(snapshot.text)))

        if key == KEY_BACKSPACE and config.is_separator(caret - 1):
            return next_state, self._backspace_over_run(config, snapshot.text, caret)
        if key == KEY_DELETE and config.is_separator(caret):
            return next_state, self._delete_over_run(config, snapshot.text, caret)
        if key == KEY_LEFT and config.is_separator(caret - 1):
            target = separator_run_before(config, caret)
            return next_state, EditAction(suppress=True, caret=target)
        if key == KEY_RIGHT and caret < len(snapshot.text) and config.is_separator(caret + 1):
            target = min(separator_run_after(config, caret + 1), len(snapshot.text))
            return next_state, EditAction(suppress=True, caret=target)
        return next_state, NO_ACTION

    def key_up(self, state: FieldState, event: KeyEvent, snapshot: FieldSnapshot) -> Transition:
        config = state.config
        key = event.key
        next_state = replace(state, wait=False, pending_text=None)

        if event.ctrl and key in CTRL_FN_KEYS:
            if key in PASTE_KEYS or key in CUT_KEYS:
                text = reformat(config, snapshot.text)
                return next_state, EditAction(text=text, caret=len(text))
            return next_state, NO_ACTION

        if event.shift and key == KEY_TAB:
            return next_state, NO_ACTION

        if key in NAV_KEYS or snapshot.caret is None:
            return next_state, NO_ACTION

        # Rejected keys and keys that left the text alone must not touch the display.
        if state.pending_text is None or snapshot.text == state.pending_text:
            return next_state, NO_ACTION

        text = snapshot.text
        caret = max(0, min(snapshot.caret, len(text)))
        if caret < len(text):
            formatted = reformat(config, text)
            _LOGGER.debug("Reformatting field text %r -> %r (caret=%d)", text, formatted, caret)
            text = formatted
            caret = len(text)
        else:
            lead_end = separator_run_after(config, 0)
            fits = not config.strict or len(text) + lead_end <= len(config.mask)
            if lead_end and fits and not text.startswith(config.mask[:lead_end]):
                text = config.mask[:lead_end] + text
                caret += lead_end

        run_end = separator_run_after(config, caret)
        if caret == len(text) and run_end > caret:
            text = text + config.mask[caret:run_end]
            caret = run_end

        if text == snapshot.text and caret == snapshot.caret:
            return next_state, NO_ACTION
        return next_state, EditAction(text=text, caret=caret)

    def _backspace_over_run(self, config: FieldMaskConfig, text: str, caret: int) -> EditAction:
        run_start = separator_run_before(config, caret)
        delete_from = max(run_start - 1, 0)
        remaining = text[:delete_from] + text[caret:]
        formatted = reformat(config, remaining)
        # The caret stays where the deleted character was, so the next digit
        # typed replaces it. That is the run start whenever the run ends the text.
        return EditAction(suppress=True, text=formatted, caret=min(delete_from, len(formatted)))

    def _delete_over_run(self, config: FieldMaskConfig, text: str, caret: int) -> EditAction:
        run_end = separator_run_after(config, caret)
        remaining = text[:caret] + text[run_end + 1:]
        formatted = reformat(config, remaining)
        return EditAction(suppress=True, text=formatted, caret=min(caret, len(formatted)))


__all__ = [
    "EditAction",
    "EditController",
    "FieldSnapshot",
    "FieldState",
    "NO_ACTION",
    "SUPPRESS",
    "separator_run_after",
    "separator_run_before",
]
