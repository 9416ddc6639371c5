"""
EditorConfig document model and line parser.

EditorConfig files are in an INI-like format, read one line at a time. Each
line is trimmed, then treated as blank, comment (`;` or `#`), section header
(`[glob]`), or key/value pair (`key = value`). Before the first header only
`root = true` is recognized.

The parser never fails. Unknown keys, unparsable values and malformed headers
degrade to "no information"; what was skipped is reported in
`ParseResult.warnings` for callers that want diagnostics.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace

from ecparse.globs import GlobMatcher, compile_section_glob
from ecparse.properties import (
    KNOWN_KEYS,
    PropertySet,
    TriState,
    Unspecified,
    decode_property,
)
from ecparse.resolver import matching_sections, resolve_properties

logger = logging.getLogger(__name__)

_BOM = "\ufeff"
_COMMENT_CHARS = (";", "#")


@dataclass(frozen=True)
class ParseOptions:
    """
    Compatibility switches for the line parser. The defaults follow the
    EditorConfig property table.
    """

    legacy_tab_width: bool = False
    """Store `tab_width` values in the `indent_size` slot, as older parsers did."""

    lowercase_keys: bool = False
    """Match property keys case-insensitively (`Indent_Size` is `indent_size`)."""

    def __post_init__(self) -> None:
        for name in ("legacy_tab_width", "lowercase_keys"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"ParseOptions.{name} must be a bool: {getattr(self, name)!r}")


DEFAULT_PARSE_OPTIONS = ParseOptions()


@dataclass(frozen=True)
class Section:
    """
    One `[glob]` section: its raw name, compiled matcher, and properties.
    Sections with the same name stay separate; file order decides the cascade.
    """

    name: str
    matcher: GlobMatcher
    properties: PropertySet = field(default_factory=PropertySet)

    def matches(self, path: str) -> bool:
        """True if this section applies to a normalized path."""
        return self.matcher.matches(path)


@dataclass(frozen=True)
class EditorConfig:
    """
    A parsed EditorConfig document. Immutable, so one instance can be shared and
    resolved from many threads.
    """

    root: bool = False
    """True if `root = true` was declared: callers stop looking in parent directories."""

    sections: tuple[Section, ...] = ()
    """Sections in file order."""

    base_directory: str | None = None
    """Directory the section globs are relative to, for absolute-path queries."""

    @classmethod
    def parse(cls, source_text: str, options: ParseOptions | None = None) -> EditorConfig:
        """Parse EditorConfig text. Never raises."""
        return parse_editorconfig(source_text, options).config

    def with_base_directory(self, path: str | os.PathLike[str] | None) -> EditorConfig:
        """Return a copy whose absolute-path queries are taken relative to `path`."""
        return replace(self, base_directory=os.fspath(path) if path is not None else None)

    def resolve(self, path: str | os.PathLike[str]) -> PropertySet:
        """Effective properties for `path` after cascading all matching sections."""
        return resolve_properties(self, path)

    def matching_sections(self, path: str | os.PathLike[str]) -> list[Section]:
        """Sections that apply to `path`, in file order."""
        return matching_sections(self, path)


@dataclass
class ParseResult:
    """
    A parsed document plus notes about input that was skipped. Warnings are
    informational only: the document is the same whether or not they are read.
    """

    config: EditorConfig
    """The parsed document."""

    warnings: list[str] = field(default_factory=list)
    """One human-readable message per ignored or degraded line."""


@dataclass
class _PendingSection:
    """A section still collecting key/value pairs."""

    name: str
    line: int
    states: dict[str, TriState[object]] = field(default_factory=dict)


def parse_editorconfig(source_text: str, options: ParseOptions | None = None) -> ParseResult:
    """
    Parse EditorConfig text into a document and a list of warnings.
    """
    options = options or DEFAULT_PARSE_OPTIONS
    warnings: list[str] = []

    def warn(lineno: int, msg: str) -> None:
        message = f"line {lineno}: {msg}"
        logger.debug("%s", message)
        warnings.append(message)

    if source_text.startswith(_BOM):
        source_text = source_text[len(_BOM) :]

    root = False
    preamble = True
    pending: list[_PendingSection] = []

    for lineno, raw_line in enumerate(source_text.split("\n"), start=1):
        line = raw_line.strip()
        if not line or line.startswith(_COMMENT_CHARS):
            continue

        # Section header. Any line starting with `[` ends the preamble.
        if line.startswith("["):
            preamble = False
            if line.endswith("]"):
                pending.append(_PendingSection(name=line[1:-1], line=lineno))
            else:
                warn(lineno, f"ignored section header without closing bracket: {line!r}")
            continue

        key, sep, value = line.partition("=")
        if not sep:
            warn(lineno, f"ignored line without '=': {line!r}")
            continue
        key = key.rstrip()
        value = value.lstrip()

        if preamble:
            if key == "root":
                if value.lower() == "true":
                    root = True
            else:
                warn(lineno, f"ignored {key!r} outside of any section")
            continue

        if not pending:
            warn(lineno, f"ignored {key!r} outside of any section")
            continue

        if options.lowercase_keys:
            key = key.lower()
        if options.legacy_tab_width and key == "tab_width":
            key = "indent_size"
        if key not in KNOWN_KEYS:
            warn(lineno, f"ignored unknown key {key!r}")
            continue

        state = decode_property(key, value)
        if isinstance(state, Unspecified):
            warn(lineno, f"unrecognized value {value!r} for {key!r}")
        # Last occurrence within a section wins, even when unparsable.
        pending[-1].states[key] = state

    sections: list[Section] = []
    for p in pending:
        matcher = compile_section_glob(p.name)
        if matcher.is_inert:
            warn(p.line, f"section [{p.name}] has an invalid glob and will never match")
        sections.append(Section(name=p.name, matcher=matcher, properties=PropertySet(**p.states)))

    config = EditorConfig(root=root, sections=tuple(sections))
    logger.debug("Parsed %d sections (root=%s, %d warnings)", len(sections), root, len(warnings))
    return ParseResult(config=config, warnings=warnings)
