"""Pure helpers that convert between masked display strings and logical values."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

DEFAULT_MASK = ""
DEFAULT_PATTERN = "."
DEFAULT_STRICT = True
DEFAULT_FILL_SYMBOL = "_"

_TRUE_TOKENS = {"1", "true", "yes", "on"}
_FALSE_TOKENS = {"0", "false", "no", "off", ""}

PatternLike = Union[str, re.Pattern[str]]


class MaskConfigError(ValueError):
    """Raised when a field mask configuration cannot be used."""


def compile_pattern(pattern: PatternLike) -> re.Pattern[str]:
    """Return a compiled character-class pattern, failing fast on bad input."""

    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except (re.error, TypeError) as exc:
        raise MaskConfigError(f"Invalid mask pattern {pattern!r}: {exc}") from exc


def coerce_bool(raw: object, fallback: bool) -> bool:
    """Coerce booleans stored as attribute strings; ``None`` yields the fallback."""

    if raw is None:
        return fallback
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw)
    token = str(raw).strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return fallback


def get_default_data(data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a copy of ``data`` with the missing mask properties filled in.

    Only absent or ``None`` values are replaced. An explicit ``False`` for
    ``strict`` survives, as does an explicit empty mask.
    """

    normalized: Dict[str, Any] = dict(data or {})
    if normalized.get("mask") is None:
        normalized["mask"] = DEFAULT_MASK
    if not normalized.get("pattern"):
        normalized["pattern"] = DEFAULT_PATTERN
    normalized["strict"] = coerce_bool(normalized.get("strict"), DEFAULT_STRICT)
    return normalized


@dataclass(frozen=True)
class FieldMaskConfig:
    """Mask settings attached to a single field for its whole lifetime."""

    mask: str = DEFAULT_MASK
    pattern: str = DEFAULT_PATTERN
    strict: bool = DEFAULT_STRICT
    fill_symbol: str = DEFAULT_FILL_SYMBOL
    _matcher: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.fill_symbol or len(self.fill_symbol) != 1:
            raise MaskConfigError(f"Fill symbol must be a single character, got {self.fill_symbol!r}")
        object.__setattr__(self, "_matcher", compile_pattern(self.pattern))

    @property
    def matcher(self) -> re.Pattern[str]:
        return self._matcher

    def accepts(self, key: str) -> bool:
        return self._matcher.search(key) is not None

    def is_separator(self, index: int) -> bool:
        """True when ``index`` is a literal separator position of the template."""

        return 0 <= index < len(self.mask) and self.mask[index] != self.fill_symbol

    def as_attributes(self) -> Dict[str, str]:
        return {
            "mask": self.mask,
            "pattern": self.pattern,
            "strict": "true" if self.strict else "false",
        }


def build_field_config(
    explicit: Optional[Mapping[str, Any]],
    *,
    placeholder: Optional[str] = None,
    pattern_attr: Optional[str] = None,
    fill_symbol: str = DEFAULT_FILL_SYMBOL,
) -> FieldMaskConfig:
    """Resolve the effective config for one field.

    Explicit configuration wins, then the field's own placeholder/pattern
    attributes, then the defaults.
    """

    raw = dict(explicit or {})
    if not raw.get("mask") and placeholder:
        raw["mask"] = placeholder
    if not raw.get("pattern") and pattern_attr:
        raw["pattern"] = pattern_attr
    data = get_default_data(raw)
    return FieldMaskConfig(
        mask=str(data["mask"]),
        pattern=str(data["pattern"]),
        strict=bool(data["strict"]),
        fill_symbol=fill_symbol,
    )


def mask_string(template: str, fill_symbol: str, strict: bool, logical_value: str) -> str:
    """Interleave ``logical_value`` into the placeholder positions of ``template``.

    Separators that trail the last consumed character are not emitted. In
    non-strict mode input that overflows the placeholders is appended as is.
    """

    if not template:
        return logical_value

    offset = 0
    if not strict:
        offset = sum(1 for ch in template if ch != fill_symbol)

    mask_count = 0
    head = 0
    output = []
    for i in range(max(len(logical_value), len(template)) + offset):
        if (strict and i >= len(template)) or i >= len(logical_value) + mask_count:
            break
        if i < len(template) and template[i] != fill_symbol:
            output.append(template[i])
            mask_count += 1
            continue
        if head < len(logical_value):
            output.append(logical_value[head])
        else:
            output.append(fill_symbol)
            mask_count += 1
        head += 1
    return "".join(output)


def unmask_string(template: str, pattern: PatternLike, strict: bool, display: str) -> str:
    """Strip the template separators from ``display``, keeping the user's content."""

    matcher = compile_pattern(pattern)
    if not template:
        return "".join(ch for ch in display if matcher.search(ch))

    output = [ch for ch in display[: len(template)] if matcher.search(ch)]
    if not strict:
        output.append(display[len(template):])
    return "".join(output)


def reformat(config: FieldMaskConfig, display: str) -> str:
    """Return the canonical masked form of ``display`` for ``config``."""

    logical = unmask_string(config.mask, config.matcher, config.strict, display)
    return mask_string(config.mask, config.fill_symbol, config.strict, logical)


__all__ = [
    "DEFAULT_FILL_SYMBOL",
    "DEFAULT_MASK",
    "DEFAULT_PATTERN",
    "DEFAULT_STRICT",
    "FieldMaskConfig",
    "MaskConfigError",
    "build_field_config",
    "coerce_bool",
    "compile_pattern",
    "get_default_data",
    "mask_string",
    "reformat",
    "unmask_string",
]
