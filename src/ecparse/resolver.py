"""
Cascading resolution of EditorConfig properties for a path.

Every section whose glob matches the path is applied in file order. For each
property independently, a later explicit value wins and `unset` clears
whatever came before; sections that say nothing about a property leave it
alone.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from ecparse.paths import normalize_path
from ecparse.properties import PropertySet

if TYPE_CHECKING:
    from ecparse.parser import EditorConfig, Section


def resolve_properties(config: EditorConfig, path: str | os.PathLike[str]) -> PropertySet:
    """
    Fold the properties of every section matching `path` into one set.
    Pure: the document is only read, and each call returns a new set.
    """
    result = PropertySet()
    for section in matching_sections(config, path):
        result = result.override(section.properties)
    return result


def matching_sections(config: EditorConfig, path: str | os.PathLike[str]) -> list[Section]:
    """Sections of `config` whose globs match `path`, in file order."""
    target = normalize_path(path, config.base_directory)
    return [section for section in config.sections if section.matches(target)]
