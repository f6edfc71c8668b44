from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from input_mask.field_access import InMemoryField, StaticFieldLocator
from input_mask.input_bindings import (
    DEFAULT_CONFIG,
    PLUGIN_ATTRIBUTE,
    PLUGIN_NAME,
    InputMask,
    MaskBindingConfig,
)
from input_mask.mask_engine import MaskConfigError

PHONE = "(___) ___-____"


def _bind(*fields: InMemoryField, **spec) -> InputMask:
    spec.setdefault("mask", PHONE)
    spec.setdefault("pattern", "[0-9]")
    config = MaskBindingConfig(inputs={"phone": spec})
    return InputMask(config, StaticFieldLocator({"phone": fields}))


def test_autoinit_binds_fields_and_writes_attributes():
    field = InMemoryField()
    masker = _bind(field)

    assert masker.is_bound(field)
    assert field.has_listeners
    assert field.attributes == {
        "mask": PHONE,
        "pattern": "[0-9]",
        "strict": "true",
        PLUGIN_ATTRIBUTE: PLUGIN_NAME,
    }


def test_autoinit_false_is_honoured():
    field = InMemoryField()
    config = MaskBindingConfig(inputs={"phone": {"mask": PHONE}}, autoinit=False)
    masker = InputMask(config, StaticFieldLocator({"phone": [field]}))

    assert not masker.is_bound(field)
    assert masker.initialize_bindings() == 1
    assert masker.is_bound(field)


def test_initialize_bindings_is_idempotent(caplog: pytest.LogCaptureFixture):
    field = InMemoryField()
    masker = _bind(field)

    with caplog.at_level(logging.DEBUG, logger="InputMask.Bindings"):
        assert masker.initialize_bindings() == 0
    assert any("already bound" in record.getMessage() for record in caplog.records)


def test_second_instance_skips_fields_owned_by_first():
    field = InMemoryField()
    _bind(field)
    other = _bind(field, mask="__-__")

    assert not other.is_bound(field)
    assert field.get_attribute("mask") == PHONE


def test_placeholder_and_pattern_attributes_are_fallbacks():
    field = InMemoryField(attributes={"placeholder": "__/__", "pattern": "[0-9]"})
    config = MaskBindingConfig(inputs={"date": {}})
    masker = InputMask(config, StaticFieldLocator({"date": [field]}))

    field_config = masker.field_config(field)
    assert field_config.mask == "__/__"
    assert field_config.pattern == "[0-9]"


def test_missing_mask_degrades_to_pass_through():
    field = InMemoryField()
    config = MaskBindingConfig(inputs={"free": {"pattern": "[a-z]"}})
    masker = InputMask(config, StaticFieldLocator({"free": [field]}))

    field.type_text("ab1c")
    assert field.text == "abc"
    assert masker.extract_logical_value(field) == "abc"


def test_invalid_pattern_raises_at_bind_time():
    field = InMemoryField()
    with pytest.raises(MaskConfigError):
        _bind(field, pattern="[0-9")


def test_typing_builds_masked_phone_number():
    field = InMemoryField()
    masker = _bind(field)

    field.type_text("5551234567")

    assert field.text == "(555) 123-4567"
    assert field.caret == len(field.text)
    assert masker.extract_logical_value(field) == "5551234567"


def test_typing_rejects_non_matching_and_overflow_keys():
    field = InMemoryField()
    _bind(field)

    field.type_text("55a5x1234567")
    assert field.text == "(555) 123-4567"
    assert field.press("8") is True
    assert field.text == "(555) 123-4567"


def test_wait_latch_is_cleared_after_each_keystroke():
    field = InMemoryField()
    masker = _bind(field)

    field.press("5")
    assert masker.field_state(field).wait is False


def test_backspace_over_separator_run_via_field():
    field = InMemoryField()
    _bind(field)
    field.type_text("5551")
    assert field.text == "(555) 1"

    field.press("Backspace")
    assert field.text == "(555) "
    field.press("Backspace")

    assert field.text == "(55"
    assert field.caret == 3


def test_arrow_keys_skip_separators():
    field = InMemoryField()
    _bind(field)
    field.type_text("555123")
    assert field.text == "(555) 123-"
    field.set_caret(6)

    field.press("ArrowLeft")
    assert field.caret == 4
    field.set_caret(3)
    field.press("ArrowRight")
    assert field.caret == 6
    assert field.text == "(555) 123-"


def test_paste_reformats_whole_field():
    field = InMemoryField()
    masker = _bind(field)

    field.paste("555-123 4567")

    assert field.text == "(555) 123-4567"
    assert field.caret == 14
    assert masker.extract_logical_value(field) == "5551234567"


def test_caret_unavailable_falls_back_to_pattern_filtering():
    field = InMemoryField(caret_supported=False)
    _bind(field)

    assert field.press("a") is True
    assert field.press("5") is False
    assert field.text == "5"


def test_set_logical_value_and_mask_value():
    field = InMemoryField()
    masker = _bind(field)

    assert masker.mask_value(field, "555") == "(555"
    assert masker.set_logical_value(field, "5551234567") == "(555) 123-4567"
    assert field.text == "(555) 123-4567"
    assert field.caret == 14


def test_unbind_all_removes_listeners_and_marker():
    field = InMemoryField()
    masker = _bind(field)

    masker.unbind_all()

    assert not field.has_listeners
    assert field.get_attribute(PLUGIN_ATTRIBUTE) is None
    assert masker.bound_fields() == []
    assert masker.initialize_bindings() == 1


def test_unbound_field_lookup_raises():
    masker = _bind()
    with pytest.raises(ValueError):
        masker.extract_logical_value(InMemoryField())


def test_load_creates_default_file(tmp_path: Path):
    path = tmp_path / "input_mask.json"
    config = MaskBindingConfig.load(path)

    assert path.exists()
    assert json.loads(path.read_text()) == DEFAULT_CONFIG
    assert config.mask_symbol == "_"
    assert config.autoinit is True
    assert config.inputs["phone"]["mask"] == PHONE
    assert config.source_path == path


def test_load_honours_explicit_false_values(tmp_path: Path):
    path = tmp_path / "input_mask.json"
    path.write_text(
        json.dumps(
            {
                "mask_symbol": "#",
                "autoinit": False,
                "inputs": {"zip": {"mask": "#####-####", "strict": False}},
            }
        )
    )
    config = MaskBindingConfig.load(path)

    assert config.autoinit is False
    assert config.mask_symbol == "#"

    field = InMemoryField()
    masker = InputMask(config, StaticFieldLocator({"zip": [field]}))
    masker.initialize_bindings()
    assert masker.field_config(field).strict is False
    assert field.get_attribute("strict") == "false"


def test_load_rejects_invalid_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ValueError, match="not valid JSON"):
        MaskBindingConfig.load(path)


def test_from_mapping_rejects_bad_inputs():
    with pytest.raises(ValueError):
        MaskBindingConfig.from_mapping({"inputs": ["phone"]})
    with pytest.raises(ValueError):
        MaskBindingConfig.from_mapping({"inputs": {"phone": "(___)"}})


def test_selection_overwrite_at_full_length():
    field = InMemoryField()
    locator = StaticFieldLocator()
    locator.add("phone", field)
    masker = InputMask(MaskBindingConfig(inputs={"phone": {"mask": PHONE, "pattern": "[0-9]"}}), locator)
    masker.set_logical_value(field, "5551234567")

    field.select(10, 14)
    assert field.press("8") is False

    assert field.text == "(555) 123-8"
    assert masker.extract_logical_value(field) == "5551238"


def test_placeholder_mask_with_default_pattern_types_cleanly():
    field = InMemoryField(attributes={"placeholder": PHONE})
    masker = InputMask(MaskBindingConfig(inputs={"phone": {}}), StaticFieldLocator({"phone": [field]}))
    assert masker.field_config(field).pattern == "."

    field.type_text("5551")
    assert field.text == "(555) 1"

    field.type_text("234567")
    assert field.text == "(555) 123-4567"
    assert field.press("8") is True
    assert field.text == "(555) 123-4567"


def test_ignored_keys_do_not_rewrite_match_any_field():
    field = InMemoryField(attributes={"placeholder": "(___)"})
    InputMask(MaskBindingConfig(inputs={"short": {}}), StaticFieldLocator({"short": [field]}))

    field.press("1")
    assert field.text == "(1"
    for _ in range(3):
        field.press("Escape")
    assert field.text == "(1"
    assert field.caret == 2


def test_rejected_key_mid_text_leaves_display_and_caret_unchanged():
    field = InMemoryField()
    masker = _bind(field)
    masker.set_logical_value(field, "555")
    field.set_caret(1)

    assert field.press("a") is True

    assert field.text == "(555"
    assert field.caret == 1


def test_non_strict_field_accepts_overflow_while_typing():
    field = InMemoryField()
    masker = _bind(field, strict=False)

    field.type_text("55512345678")

    assert field.text == "(555) 123-45678"
    assert masker.extract_logical_value(field) == "55512345678"


def test_backspace_keeps_caret_where_the_digit_was_removed():
    field = InMemoryField()
    _bind(field)
    field.type_text("555123")
    field.set_caret(6)

    field.press("Backspace")

    assert field.text == "(551) 23"
    assert field.caret == 3
    field.press("9")
    assert field.text == "(559) 123-"
