"""
Parse EditorConfig text and resolve the effective properties for a path.

Pure and in-memory: reading `.editorconfig` files and walking parent
directories (stopping at `root = true`) is left to the caller.

Usage::

    from ecparse import EditorConfig

    config = EditorConfig.parse(text).with_base_directory("/project")
    props = config.resolve("/project/src/main.ts")
    props.indent_size  # Value(value=4), CLEARED or UNSPECIFIED
"""

import logging

from ecparse.globs import GlobError, GlobMatcher, compile_glob, compile_section_glob
from ecparse.parser import (
    EditorConfig,
    ParseOptions,
    ParseResult,
    Section,
    parse_editorconfig,
)
from ecparse.paths import normalize_path
from ecparse.properties import (
    CLEARED,
    OFF,
    UNSPECIFIED,
    Charset,
    Cleared,
    EndOfLine,
    IndentStyle,
    MaxLineLength,
    Number,
    Off,
    PropertySet,
    TriState,
    Unspecified,
    Value,
    decode_property,
)
from ecparse.resolver import resolve_properties

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CLEARED",
    "OFF",
    "UNSPECIFIED",
    "Charset",
    "Cleared",
    "EditorConfig",
    "EndOfLine",
    "GlobError",
    "GlobMatcher",
    "IndentStyle",
    "MaxLineLength",
    "Number",
    "Off",
    "ParseOptions",
    "ParseResult",
    "PropertySet",
    "Section",
    "TriState",
    "Unspecified",
    "Value",
    "compile_glob",
    "compile_section_glob",
    "decode_property",
    "normalize_path",
    "parse_editorconfig",
    "resolve_properties",
]
