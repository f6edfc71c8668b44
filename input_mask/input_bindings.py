"""Binding registry that attaches masks to fields and dispatches their key events."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from input_mask.edit_controller import EditAction, EditController, FieldSnapshot, FieldState
from input_mask.field_access import FieldHandle, FieldLocator
from input_mask.keys import KeyEvent
from input_mask.logging_utils import configure_logging, debug_enabled_from_env
from input_mask.mask_engine import (
    DEFAULT_FILL_SYMBOL,
    FieldMaskConfig,
    build_field_config,
    coerce_bool,
    mask_string,
    unmask_string,
)

PLUGIN_NAME = "InputMaskPlugin"
PLUGIN_ATTRIBUTE = "plugin"
DEFAULT_CONFIG_PATH = Path(__file__).with_name("input_mask.json")

# Default layout that can be extended by the user later on.
DEFAULT_CONFIG: Dict[str, Any] = {
    "mask_symbol": DEFAULT_FILL_SYMBOL,
    "autoinit": True,
    "inputs": {
        "phone": {"mask": "(___) ___-____", "pattern": "[0-9]", "strict": True},
    },
}

_LOGGER = logging.getLogger("InputMask.Bindings")


@dataclass
class MaskBindingConfig:
    """Selector to mask mapping plus the settings shared by every field."""

    inputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    mask_symbol: str = DEFAULT_FILL_SYMBOL
    autoinit: bool = True
    debug: Optional[bool] = None
    log_dir: Optional[Path] = None
    source_path: Optional[Path] = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], *, source_path: Optional[Path] = None) -> "MaskBindingConfig":
        inputs_raw = payload.get("inputs") or {}
        if not isinstance(inputs_raw, Mapping):
            raise ValueError(f"'inputs' must be an object mapping selectors to masks, got {type(inputs_raw).__name__}")
        inputs: Dict[str, Dict[str, Any]] = {}
        for selector, spec in inputs_raw.items():
            if spec is None:
                spec = {}
            if not isinstance(spec, Mapping):
                raise ValueError(f"Mask definition for selector '{selector}' must be an object")
            inputs[str(selector)] = dict(spec)

        mask_symbol = payload.get("mask_symbol") or DEFAULT_FILL_SYMBOL
        debug_raw = payload.get("debug")
        log_dir: Optional[Path] = None
        if payload.get("log_dir"):
            log_dir = Path(str(payload["log_dir"])).expanduser()
            # Relative directories are taken relative to the config file.
            if source_path is not None and not log_dir.is_absolute():
                log_dir = source_path.parent / log_dir
        return cls(
            inputs=inputs,
            mask_symbol=str(mask_symbol),
            autoinit=coerce_bool(payload.get("autoinit"), True),
            debug=None if debug_raw is None else coerce_bool(debug_raw, False),
            log_dir=log_dir,
            source_path=source_path,
        )

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "MaskBindingConfig":
        """Load config from disk, creating the default file if missing."""

        path = path or DEFAULT_CONFIG_PATH
        if not path.exists():
            path.write_text(json.dumps(DEFAULT_CONFIG, indent=2), encoding="utf-8")

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Mask configuration file {path} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"Mask configuration file {path} must contain a JSON object")
        return cls.from_mapping(payload, source_path=path)


@dataclass
class _BoundField:
    handle: FieldHandle
    state: FieldState
    selector: str


class InputMask:
    """Attaches masks to the fields a locator resolves and drives their edits."""

    name = PLUGIN_NAME

    def __init__(
        self,
        config: MaskBindingConfig,
        locator: FieldLocator,
        *,
        controller: Optional[EditController] = None,
    ) -> None:
        self.config = config
        self.locator = locator
        self.controller = controller or EditController()
        self._fields: Dict[int, _BoundField] = {}
        debug = config.debug if config.debug is not None else debug_enabled_from_env()
        if debug or config.log_dir is not None:
            configure_logging(debug_enabled=debug, log_dir=config.log_dir)
        if config.autoinit:
            self.initialize_bindings()

    def initialize_bindings(self) -> int:
        """Bind every resolvable field that is not already bound. Returns the count."""

        bound = 0
        for selector, spec in self.config.inputs.items():
            for handle in self.locator.resolve(selector):
                if handle.get_attribute(PLUGIN_ATTRIBUTE) == self.name:
                    _LOGGER.debug("Field for selector '%s' is already bound; skipping", selector)
                    continue
                self._bind_field(selector, spec, handle)
                bound += 1
        if bound:
            _LOGGER.debug("Bound %d field(s) across %d selector(s)", bound, len(self.config.inputs))
        return bound

    def _bind_field(self, selector: str, spec: Mapping[str, Any], handle: FieldHandle) -> None:
        config = build_field_config(
            spec,
            placeholder=handle.get_attribute("placeholder"),
            pattern_attr=handle.get_attribute("pattern"),
            fill_symbol=self.config.mask_symbol,
        )
        for name, value in config.as_attributes().items():
            handle.set_attribute(name, value)
        handle.set_attribute(PLUGIN_ATTRIBUTE, self.name)

        self._fields[id(handle)] = _BoundField(handle=handle, state=FieldState(config=config), selector=selector)
        handle.add_key_listeners(
            lambda event, h=handle: self._on_key_down(h, event),
            lambda event, h=handle: self._on_key_up(h, event),
        )

    def unbind_all(self) -> None:
        """Detach listeners and binding markers from every bound field."""

        for entry in list(self._fields.values()):
            try:
                entry.handle.remove_key_listeners()
            except Exception as exc:
                # Some handles cannot unbind once their widget is gone.
                _LOGGER.debug("Failed to remove key listeners for '%s': %s", entry.selector, exc)
            entry.handle.set_attribute(PLUGIN_ATTRIBUTE, None)
        self._fields.clear()

    def is_bound(self, handle: FieldHandle) -> bool:
        return id(handle) in self._fields

    def bound_fields(self) -> List[FieldHandle]:
        return [entry.handle for entry in self._fields.values()]

    def field_state(self, handle: FieldHandle) -> FieldState:
        return self._entry(handle).state

    def field_config(self, handle: FieldHandle) -> FieldMaskConfig:
        """Return the mask settings of ``handle``.

        A handle this registry did not bind itself, but whose widget carries
        the binding marker (a fresh adapter around an already bound widget),
        is resolved from the attributes stored on the widget.
        """

        entry = self._fields.get(id(handle))
        if entry is not None:
            return entry.state.config
        if handle.get_attribute(PLUGIN_ATTRIBUTE) != self.name:
            raise ValueError("Field is not bound to this input mask")
        return build_field_config(
            {
                "mask": handle.get_attribute("mask"),
                "pattern": handle.get_attribute("pattern"),
                "strict": handle.get_attribute("strict"),
            },
            fill_symbol=self.config.mask_symbol,
        )

    def extract_logical_value(self, handle: FieldHandle) -> str:
        """Return the user's content of ``handle`` with the mask separators removed."""

        config = self.field_config(handle)
        return unmask_string(config.mask, config.matcher, config.strict, handle.get_text())

    def mask_value(self, handle: FieldHandle, logical_value: str) -> str:
        config = self.field_config(handle)
        return mask_string(config.mask, config.fill_symbol, config.strict, logical_value)

    def set_logical_value(self, handle: FieldHandle, logical_value: str) -> str:
        """Write the masked form of ``logical_value`` and park the caret at the end."""

        masked = self.mask_value(handle, logical_value)
        self._apply(handle, EditAction(text=masked, caret=len(masked)))
        return masked

    def _entry(self, handle: FieldHandle) -> _BoundField:
        try:
            return self._fields[id(handle)]
        except KeyError as exc:
            raise ValueError("Field is not bound to this input mask") from exc

    def _snapshot(self, handle: FieldHandle) -> FieldSnapshot:
        try:
            caret = handle.get_caret()
        except Exception as exc:
            _LOGGER.debug("Caret lookup failed; falling back to pattern filtering only: %s", exc)
            caret = None
        try:
            selection = handle.selection_length()
        except Exception:
            selection = 0
        return FieldSnapshot(text=handle.get_text(), caret=caret, selection_length=selection)

    def _on_key_down(self, handle: FieldHandle, event: KeyEvent) -> bool:
        entry = self._fields.get(id(handle))
        if entry is None:
            return False
        entry.state, action = self.controller.key_down(entry.state, event, self._snapshot(handle))
        self._apply(handle, action)
        return action.suppress and event.cancelable

    def _on_key_up(self, handle: FieldHandle, event: KeyEvent) -> bool:
        entry = self._fields.get(id(handle))
        if entry is None:
            return False
        entry.state, action = self.controller.key_up(entry.state, event, self._snapshot(handle))
        self._apply(handle, action)
        return False

    @staticmethod
    def _apply(handle: FieldHandle, action: EditAction) -> None:
        if action.text is not None:
            handle.set_text(action.text)
        if action.caret is not None:
            handle.set_caret(action.caret)


__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_PATH",
    "InputMask",
    "MaskBindingConfig",
    "PLUGIN_ATTRIBUTE",
    "PLUGIN_NAME",
]
