"""
EditorConfig property values and their tri-state model.

Every known property is stored in one of three states:
- `Unspecified`: the key was absent, or its value could not be parsed
- `Cleared`: the value was the literal `unset`
- `Value(x)`: a successfully parsed value

`Unspecified` and `Cleared` behave differently during the cascade: the first
inherits whatever earlier sections set, the second erases it.

Usage:
    from ecparse.properties import PropertySet, decode_property

    props = PropertySet().with_property("indent_size", decode_property("indent_size", "4"))
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Unspecified:
    """Nothing was said about this property. Inherit from earlier sections."""


@dataclass(frozen=True)
class Cleared:
    """The property was explicitly set to `unset`. Erase earlier values."""


@dataclass(frozen=True)
class Value(Generic[T]):
    """An explicitly set, successfully parsed property value."""

    value: T


UNSPECIFIED = Unspecified()
CLEARED = Cleared()

TriState = Union[Unspecified, Cleared, Value[T]]


class IndentStyle(str, Enum):
    """Indentation character."""

    tab = "tab"
    space = "space"


class EndOfLine(str, Enum):
    """Line break representation."""

    lf = "lf"
    cr = "cr"
    crlf = "crlf"


class Charset(str, Enum):
    """File character set. Use of `utf-8-bom` is discouraged."""

    latin1 = "latin1"
    utf_8 = "utf-8"
    utf_8_bom = "utf-8-bom"
    utf_16be = "utf-16be"
    utf_16le = "utf-16le"


@dataclass(frozen=True)
class Number:
    """A maximum line length in columns."""

    columns: int

    def __str__(self) -> str:
        return str(self.columns)


@dataclass(frozen=True)
class Off:
    """No maximum line length."""

    def __str__(self) -> str:
        return "off"


OFF = Off()

MaxLineLength = Union[Number, Off]

# The literal that clears a property. Values are case-insensitive.
UNSET_TOKEN = "unset"

# Whole numbers only: optional `+`, ASCII digits. Python's int() would also take
# underscores, surrounding whitespace and Unicode digits.
_UINT_RE = re.compile(r"\+?[0-9]+", re.ASCII)


# === Decoders ===


def _is_unset(raw: str) -> bool:
    return raw.lower() == UNSET_TOKEN


def decode_bool(raw: str) -> TriState[bool]:
    """Decode `true`, `false` or `unset`."""
    token = raw.lower()
    if token == "true":
        return Value(True)
    if token == "false":
        return Value(False)
    if token == UNSET_TOKEN:
        return CLEARED
    return UNSPECIFIED


def decode_uint(raw: str) -> TriState[int]:
    """Decode a non-negative decimal integer or `unset`."""
    if _UINT_RE.fullmatch(raw):
        return Value(int(raw))
    if _is_unset(raw):
        return CLEARED
    return UNSPECIFIED


def decode_max_line_length(raw: str) -> TriState[MaxLineLength]:
    """Decode `off`, a column count, or `unset`."""
    if raw.lower() == "off":
        return Value(OFF)
    if _UINT_RE.fullmatch(raw):
        return Value(Number(int(raw)))
    if _is_unset(raw):
        return CLEARED
    return UNSPECIFIED


_E = TypeVar("_E", bound=Enum)


def _enum_decoder(enum_cls: type[_E]) -> Callable[[str], TriState[_E]]:
    """Build a case-insensitive decoder for a string enum."""
    by_token = {member.value: member for member in enum_cls}

    def decode(raw: str) -> TriState[_E]:
        token = raw.lower()
        if token in by_token:
            return Value(by_token[token])
        if token == UNSET_TOKEN:
            return CLEARED
        return UNSPECIFIED

    decode.__name__ = f"decode_{enum_cls.__name__.lower()}"
    return decode


decode_indent_style = _enum_decoder(IndentStyle)
decode_end_of_line = _enum_decoder(EndOfLine)
decode_charset = _enum_decoder(Charset)


# Known keys, in the order of the `PropertySet` fields.
PROPERTY_DECODERS: dict[str, Callable[[str], TriState[Any]]] = {
    "indent_style": decode_indent_style,
    "indent_size": decode_uint,
    "tab_width": decode_uint,
    "end_of_line": decode_end_of_line,
    "charset": decode_charset,
    "trim_trailing_whitespace": decode_bool,
    "insert_final_newline": decode_bool,
    "max_line_length": decode_max_line_length,
}

KNOWN_KEYS = frozenset(PROPERTY_DECODERS)


def decode_property(key: str, raw: str) -> TriState[Any]:
    """
    Decode a raw value token for a known key. Unknown keys and unrecognized
    tokens give `UNSPECIFIED`; this never raises.
    """
    decoder = PROPERTY_DECODERS.get(key)
    if decoder is None:
        return UNSPECIFIED
    return decoder(raw)


# === Property set ===


@dataclass(frozen=True)
class PropertySet:
    """
    The 8 known EditorConfig properties, each in its own tri-state slot.

    Instances are immutable; `with_property()` and `override()` return new sets.
    """

    indent_style: TriState[IndentStyle] = UNSPECIFIED
    """Set to tab or space to use hard tabs or soft tabs."""

    indent_size: TriState[int] = UNSPECIFIED
    """Columns per indentation level and width of soft tabs."""

    tab_width: TriState[int] = UNSPECIFIED
    """Columns used to represent a tab character. Defaults to `indent_size`."""

    end_of_line: TriState[EndOfLine] = UNSPECIFIED
    """How line breaks are represented."""

    charset: TriState[Charset] = UNSPECIFIED
    """Character set of the file."""

    trim_trailing_whitespace: TriState[bool] = UNSPECIFIED
    """Remove whitespace preceding newlines when saving."""

    insert_final_newline: TriState[bool] = UNSPECIFIED
    """Ensure the file ends with a newline when saving."""

    max_line_length: TriState[MaxLineLength] = UNSPECIFIED
    """Line length limit. Not part of the core EditorConfig spec, but widely used."""

    def with_property(self, key: str, state: TriState[Any]) -> PropertySet:
        """Return a copy with one slot replaced. `key` must be a known key."""
        if key not in KNOWN_KEYS:
            raise KeyError(f"Unknown EditorConfig property: {key}")
        return replace(self, **{key: state})

    def override(self, other: PropertySet) -> PropertySet:
        """
        Apply `other` on top of this set, slot by slot:
        `Value` replaces, `Cleared` resets to `Unspecified`, `Unspecified` keeps ours.
        """
        changes: dict[str, TriState[Any]] = {}
        for f in fields(self):
            state = getattr(other, f.name)
            if isinstance(state, Value):
                changes[f.name] = state
            elif isinstance(state, Cleared):
                changes[f.name] = UNSPECIFIED
        if not changes:
            return self
        return replace(self, **changes)

    def get(self, key: str) -> Any:
        """Return the plain value of a slot, or `None` unless it holds a `Value`."""
        state = getattr(self, key)
        return state.value if isinstance(state, Value) else None

    def is_empty(self) -> bool:
        """True if every slot is `Unspecified`."""
        return all(isinstance(getattr(self, f.name), Unspecified) for f in fields(self))

    def effective_tab_width(self) -> int | None:
        """`tab_width` if set, otherwise `indent_size`."""
        tab_width = self.get("tab_width")
        return tab_width if tab_width is not None else self.get("indent_size")

    def effective_indent_size(self) -> int | None:
        """`indent_size` if set, otherwise the tab width when indenting with tabs."""
        indent_size = self.get("indent_size")
        if indent_size is not None:
            return indent_size
        if self.get("indent_style") is IndentStyle.tab:
            return self.get("tab_width")
        return None

    def as_dict(self) -> dict[str, str]:
        """Explicitly set slots as canonical EditorConfig value tokens."""
        result: dict[str, str] = {}
        for f in fields(self):
            value = self.get(f.name)
            if value is None:
                continue
            if isinstance(value, bool):
                result[f.name] = "true" if value else "false"
            elif isinstance(value, Enum):
                result[f.name] = value.value
            else:
                result[f.name] = str(value)
        return result
