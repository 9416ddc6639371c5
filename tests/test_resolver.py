"""Tests for cascading property resolution."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from ecparse import (
    OFF,
    UNSPECIFIED,
    Charset,
    EditorConfig,
    EndOfLine,
    IndentStyle,
    Number,
    PropertySet,
    Value,
    resolve_properties,
)

posix_only = pytest.mark.skipif(os.sep != "/", reason="POSIX absolute paths")

SCENARIO = """
[*]
charset = utf-8
insert_final_newline = true
end_of_line = lf
indent_style = space
indent_size = 2
max_line_length = 80

[*.foo]
charset = latin1
insert_final_newline = false
end_of_line = crlf
indent_style = tab
indent_size = 4
max_line_length = 100

[*.{ts,tsx,js,jsx,mts,cts}]
indent_size = 8
max_line_length = 120

[*.rs]
max_line_length = 140

[**/__snapshots__/**]
max_line_length = 160
"""

STAR_PROPS = PropertySet(
    charset=Value(Charset.utf_8),
    insert_final_newline=Value(True),
    end_of_line=Value(EndOfLine.lf),
    indent_style=Value(IndentStyle.space),
    indent_size=Value(2),
    max_line_length=Value(Number(80)),
)


@pytest.fixture
def config() -> EditorConfig:
    return EditorConfig.parse(SCENARIO)


class TestScenario:
    """End-to-end resolution over a realistic document."""

    def test_root_path_gets_star_section(self, config: EditorConfig) -> None:
        assert config.resolve("/") == STAR_PROPS

    def test_foo_overrides_everything(self, config: EditorConfig) -> None:
        assert config.resolve("file.foo") == PropertySet(
            charset=Value(Charset.latin1),
            insert_final_newline=Value(False),
            end_of_line=Value(EndOfLine.crlf),
            indent_style=Value(IndentStyle.tab),
            indent_size=Value(4),
            max_line_length=Value(Number(100)),
        )

    def test_ts_overrides_some(self, config: EditorConfig) -> None:
        expected = STAR_PROPS.override(
            PropertySet(indent_size=Value(8), max_line_length=Value(Number(120)))
        )
        assert config.resolve("file.ts") == expected
        assert expected.charset == Value(Charset.utf_8)

    def test_rs(self, config: EditorConfig) -> None:
        assert config.resolve("file.rs") == STAR_PROPS.override(
            PropertySet(max_line_length=Value(Number(140)))
        )

    def test_snapshots(self, config: EditorConfig) -> None:
        assert config.resolve("dir/__snapshots__/file") == STAR_PROPS.override(
            PropertySet(max_line_length=Value(Number(160)))
        )

    def test_nested_ts_file(self, config: EditorConfig) -> None:
        assert config.resolve("src/app/file.tsx").indent_size == Value(8)

    def test_matching_sections(self, config: EditorConfig) -> None:
        names = [s.name for s in config.matching_sections("dir/__snapshots__/a.ts")]
        assert names == ["*", "*.{ts,tsx,js,jsx,mts,cts}", "**/__snapshots__/**"]


def test_override_ordering() -> None:
    config = EditorConfig.parse("[*]\nindent_size = 2\n[*.foo]\nindent_size = 4\n")
    assert config.resolve("a.foo").indent_size == Value(4)
    assert config.resolve("a.bar").indent_size == Value(2)


def test_later_section_wins_regardless_of_specificity() -> None:
    config = EditorConfig.parse("[*.foo]\nindent_size = 4\n[*]\nindent_size = 2\n")
    assert config.resolve("a.foo").indent_size == Value(2)


def test_explicit_clear() -> None:
    config = EditorConfig.parse(
        "[*]\nindent_size = 2\ncharset = utf-8\n[*.md]\nindent_size = unset\n"
    )
    props = config.resolve("README.md")
    assert props.indent_size == UNSPECIFIED
    assert props.charset == Value(Charset.utf_8)


def test_value_after_clear() -> None:
    config = EditorConfig.parse(
        "[*]\nindent_size = 2\n[*.md]\nindent_size = unset\n[docs/*.md]\nindent_size = 3\n"
    )
    assert config.resolve("docs/a.md").indent_size == Value(3)
    assert config.resolve("a.md").indent_size == UNSPECIFIED


def test_unparsable_value_inherits() -> None:
    config = EditorConfig.parse("[*]\nmax_line_length = 80\n[*.md]\nmax_line_length = wide\n")
    assert config.resolve("a.md").max_line_length == Value(Number(80))


def test_max_line_length_off_overrides_number() -> None:
    config = EditorConfig.parse("[*]\nmax_line_length = 80\n[*.md]\nmax_line_length = off\n")
    assert config.resolve("a.md").max_line_length == Value(OFF)


def test_no_match_gives_empty_set() -> None:
    config = EditorConfig.parse("[*.py]\nindent_size = 4\n")
    props = config.resolve("main.rs")
    assert props == PropertySet()
    assert props.is_empty()


def test_empty_document() -> None:
    assert EditorConfig.parse("").resolve("anything.txt").is_empty()


def test_inert_section_never_matches() -> None:
    text = "[*]\nindent_size = 2\n[" + "{" * 2000 + "}" * 2000 + "]\nindent_size = 9\n"
    config = EditorConfig.parse(text)
    assert len(config.sections) == 2
    assert config.sections[1].matcher.is_inert
    assert config.resolve("x").indent_size == Value(2)


def test_resolve_is_idempotent_and_pure(config: EditorConfig) -> None:
    before = config
    first = config.resolve("file.ts")
    second = config.resolve("file.ts")
    assert first == second
    assert config == before
    assert config.sections[0].properties == STAR_PROPS


def test_resolve_properties_function(config: EditorConfig) -> None:
    assert resolve_properties(config, "file.rs") == config.resolve("file.rs")


class TestBaseDirectory:
    """Absolute-path queries against a base directory."""

    def test_with_base_directory_returns_new_value(self) -> None:
        config = EditorConfig.parse("[*.ts]\nindent_size = 4\n")
        based = config.with_base_directory("/project")
        assert config.base_directory is None
        assert based.base_directory == "/project"
        assert based.sections == config.sections
        assert based.with_base_directory(None).base_directory is None

    @posix_only
    def test_absolute_and_relative_agree(self) -> None:
        config = EditorConfig.parse("[*.ts]\nindent_size = 4\n").with_base_directory("/project")
        assert config.resolve("/project/file.ts") == config.resolve("file.ts")
        assert config.resolve("file.ts").indent_size == Value(4)

    @posix_only
    def test_outside_base_matches_unmodified_path(self) -> None:
        config = EditorConfig.parse("[*.ts]\nindent_size = 4\n").with_base_directory("/project")
        assert config.resolve("/other/file.ts").indent_size == Value(4)

    @posix_only
    def test_anchored_section_needs_base(self) -> None:
        text = "[src/*.ts]\nindent_size = 4\n"
        config = EditorConfig.parse(text)
        assert config.resolve("/project/src/a.ts").indent_size == UNSPECIFIED
        based = config.with_base_directory("/project")
        assert based.resolve("/project/src/a.ts").indent_size == Value(4)
        assert based.resolve("/project/lib/src/a.ts").indent_size == UNSPECIFIED

    @posix_only
    def test_base_directory_itself(self) -> None:
        text = "[*]\nindent_size = 2\n[src/*]\nindent_size = 4\n"
        config = EditorConfig.parse(text).with_base_directory("/project")
        assert config.resolve("/project").indent_size == Value(2)
        assert [s.name for s in config.matching_sections("/project")] == ["*"]


def test_concurrent_resolution(config: EditorConfig) -> None:
    paths = ["file.ts", "file.foo", "file.rs", "dir/__snapshots__/file", "/"] * 40
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(config.resolve, paths))
    assert results == [config.resolve(p) for p in paths]
