from .edit_controller import EditAction, EditController, FieldSnapshot, FieldState
from .field_access import FieldHandle, FieldLocator, InMemoryField, StaticFieldLocator
from .input_bindings import InputMask, MaskBindingConfig
from .keys import NAV_KEYS, KeyEvent
from .mask_engine import (
    FieldMaskConfig,
    MaskConfigError,
    get_default_data,
    mask_string,
    unmask_string,
)

__all__ = [
    "EditAction",
    "EditController",
    "FieldHandle",
    "FieldLocator",
    "FieldMaskConfig",
    "FieldSnapshot",
    "FieldState",
    "InMemoryField",
    "InputMask",
    "KeyEvent",
    "MaskBindingConfig",
    "MaskConfigError",
    "NAV_KEYS",
    "StaticFieldLocator",
    "get_default_data",
    "mask_string",
    "unmask_string",
]
