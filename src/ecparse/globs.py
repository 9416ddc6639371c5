"""
EditorConfig glob patterns.

Section names follow the EditorConfig glob dialect, which differs from shell
and gitignore globbing:

- `*`             matches any characters except `/`
- `**`            matches any characters, including `/`
- `?`             matches one character except `/`
- `[seq]`         matches one character in seq (ranges like `a-z` allowed)
- `[!seq]`        matches one character not in seq (never `/`)
- `{s1,s2,s3}`    matches any of the comma-separated sub-patterns
- `{n1..n2}`      matches an integer between n1 and n2 inclusive
- `\\x`           matches `x` literally

Numeric ranges compare as integers, so `{1..10}` matches `7`, `07` and `+7`.

A pattern is parsed into a small syntax tree, compiled to a nondeterministic
automaton, and matched by tracking the set of reachable states one character
at a time. There is no backtracking: matching costs at most
(pattern size x path length) whatever the pattern, so a hostile
`.editorconfig` can't stall resolution.

Section names without a `/` match at any depth, as if prefixed by `**/`;
names containing a `/` are anchored to the directory of the config file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Union

logger = logging.getLogger(__name__)

_NUMERIC_RANGE_RE = re.compile(r"([+-]?[0-9]+)\.\.([+-]?[0-9]+)", re.ASCII)


class GlobError(ValueError):
    """A pattern that cannot be compiled to a matcher."""


# === Syntax tree ===


@dataclass(frozen=True)
class CharClass:
    """
    Matches exactly one character. `/` only matches when `allow_slash` is set,
    so wildcards and bracket expressions never cross directories.
    """

    chars: frozenset[str] = frozenset()
    ranges: tuple[tuple[str, str], ...] = ()
    negate: bool = False
    allow_slash: bool = False

    def matches(self, ch: str) -> bool:
        if ch == "/" and not self.allow_slash:
            return False
        hit = ch in self.chars or any(lo <= ch <= hi for lo, hi in self.ranges)
        return hit != self.negate


@dataclass(frozen=True)
class Seq:
    """Items matched one after another."""

    items: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Alt:
    """Any one of the options."""

    options: tuple[Node, ...]


@dataclass(frozen=True)
class Star:
    """Zero or more characters, each matching `item`."""

    item: CharClass


Node = Union[CharClass, Seq, Alt, Star]

ANY_CHAR = CharClass(negate=True, allow_slash=True)
SEGMENT_CHAR = CharClass(negate=True)
EMPTY = Seq()


def literal(text: str) -> Node:
    """Match `text` exactly."""
    if len(text) == 1:
        return CharClass(chars=frozenset(text), allow_slash=True)
    return Seq(tuple(CharClass(chars=frozenset(c), allow_slash=True) for c in text))


def optional(node: Node) -> Alt:
    return Alt((EMPTY, node))


_SLASH = literal("/")
# `**/` at the start: any number of directories, including none.
_LEADING_DOUBLE_STAR = optional(Seq((Star(ANY_CHAR), _SLASH)))
# `/**/` also matches a single `/`.
_INNER_DOUBLE_STAR = Alt((_SLASH, Seq((_SLASH, Star(ANY_CHAR), _SLASH))))


# === Matcher ===


class _State:
    """
    One automaton state: either consumes a character matching `test` and moves
    to `next`, or moves without input along `eps` edges.
    """

    __slots__ = ("eps", "next", "test")

    def __init__(self, test: CharClass | None = None, next: _State | None = None) -> None:
        self.test = test
        self.next = next
        self.eps: list[_State] = []


class _Automaton:
    """A compiled glob. Read-only once built, so safe to share between threads."""

    def __init__(self, node: Node) -> None:
        self.start = _State()
        self.accept = _build(node, self.start)

    def fullmatch(self, path: str) -> bool:
        current = _closure([self.start])
        for ch in path:
            stepped = [
                s.next
                for s in current
                if s.test is not None and s.next is not None and s.test.matches(ch)
            ]
            if not stepped:
                return False
            current = _closure(stepped)
        return self.accept in current


def _build(node: Node, entry: _State) -> _State:
    """Wire `node` into the automaton after `entry`. Returns its exit state."""
    if isinstance(node, CharClass):
        out = _State()
        entry.eps.append(_State(test=node, next=out))
        return out
    if isinstance(node, Seq):
        current = entry
        for item in node.items:
            current = _build(item, current)
        return current
    if isinstance(node, Alt):
        out = _State()
        for option in node.options:
            branch = _State()
            entry.eps.append(branch)
            _build(option, branch).eps.append(out)
        return out
    loop = _State()
    entry.eps.append(loop)
    loop.eps.append(_State(test=node.item, next=loop))
    return loop


def _closure(states: list[_State]) -> set[_State]:
    """All states reachable from `states` without consuming input."""
    seen: set[_State] = set()
    stack = list(states)
    while stack:
        state = stack.pop()
        if state in seen:
            continue
        seen.add(state)
        stack.extend(state.eps)
    return seen


@dataclass(frozen=True)
class GlobMatcher:
    """
    A compiled glob. An inert matcher never matches anything.
    """

    pattern: str
    automaton: _Automaton | None = field(default=None, compare=False, repr=False)

    @classmethod
    def inert(cls, pattern: str) -> GlobMatcher:
        """A matcher for a pattern that could not be compiled."""
        return cls(pattern=pattern, automaton=None)

    @property
    def is_inert(self) -> bool:
        return self.automaton is None

    def matches(self, path: str) -> bool:
        """True if the whole of `path` (with `/` separators) matches the pattern."""
        if self.automaton is None:
            return False
        return self.automaton.fullmatch(path)


def compile_glob(pattern: str) -> GlobMatcher:
    """
    Compile a glob against the full path, with no implicit anchoring.
    Raises `GlobError` if the pattern can't be compiled.
    """
    try:
        return GlobMatcher(pattern=pattern, automaton=_Automaton(parse_glob(pattern)))
    except RecursionError as e:
        raise GlobError(f"Glob is nested too deeply: {pattern!r}") from e


def anchored_glob(name: str) -> str:
    """The glob a section name stands for, after EditorConfig anchoring."""
    if "/" in name:
        return name[1:] if name.startswith("/") else name
    return "**/" + name


def compile_section_glob(name: str) -> GlobMatcher:
    """
    Compile a section name using EditorConfig anchoring rules. Never raises:
    a name that can't be compiled gives an inert matcher.
    """
    glob = anchored_glob(name)
    try:
        return compile_glob(glob)
    except GlobError as e:
        logger.debug("Section [%s] will never match: %s", name, e)
        return GlobMatcher.inert(glob)


# === Parsing ===


def parse_glob(pattern: str) -> Node:
    """Parse an EditorConfig glob into a syntax tree."""
    return _GlobParser(pattern).parse()


class _GlobParser:
    """Single-pass parser over one pattern (or one brace alternative)."""

    def __init__(self, pattern: str) -> None:
        self.pat = pattern
        self.n = len(pattern)

    def parse(self) -> Seq:
        pat, n = self.pat, self.n
        items: list[Node] = []
        i = 0
        if pat.startswith("**/"):
            items.append(_LEADING_DOUBLE_STAR)
            i = 3
        while i < n:
            c = pat[i]
            if c == "\\":
                if i + 1 < n:
                    items.append(literal(pat[i + 1]))
                    i += 2
                else:
                    items.append(literal(c))
                    i += 1
            elif c == "*":
                j = i
                while j < n and pat[j] == "*":
                    j += 1
                items.append(Star(ANY_CHAR if j - i > 1 else SEGMENT_CHAR))
                i = j
            elif c == "?":
                items.append(SEGMENT_CHAR)
                i += 1
            elif c == "/":
                if pat.startswith("/**/", i):
                    items.append(_INNER_DOUBLE_STAR)
                    i += 4
                else:
                    items.append(_SLASH)
                    i += 1
            elif c == "[":
                node, i = self._bracket(i)
                items.append(node)
            elif c == "{":
                node, i = self._brace(i)
                items.append(node)
            else:
                items.append(literal(c))
                i += 1
        return Seq(tuple(items))

    def _bracket(self, start: int) -> tuple[Node, int]:
        """Parse `[...]` starting at `start`. Returns (node, next index)."""
        pat, n = self.pat, self.n
        i = start + 1
        negate = i < n and pat[i] in "!^"
        if negate:
            i += 1
        # Find the closing bracket. A `]` right after the opening is a member.
        j = i
        if j < n and pat[j] == "]":
            j += 1
        while j < n and pat[j] != "]":
            if pat[j] == "\\":
                j += 1
            if j < n and pat[j] == "/":
                # Character classes never span directories, escaped or not.
                return literal("["), start + 1
            j += 1
        if j >= n:
            return literal("["), start + 1

        chars, ranges = _class_members(pat[i:j])
        return CharClass(chars=chars, ranges=ranges, negate=negate), j + 1

    def _brace(self, start: int) -> tuple[Node, int]:
        """Parse `{...}` starting at `start`. Returns (node, next index)."""
        end = _matching_brace(self.pat, start)
        if end is None:
            return literal("{"), start + 1

        inner = self.pat[start + 1 : end]
        alternatives = _split_alternatives(inner)
        if len(alternatives) == 1:
            num_range = _NUMERIC_RANGE_RE.fullmatch(inner)
            if num_range:
                lo, hi = int(num_range.group(1)), int(num_range.group(2))
                return numeric_range(min(lo, hi), max(lo, hi)), end + 1
            # No comma: the braces are literal, the contents are still a glob.
            return Seq((literal("{"), _GlobParser(inner).parse(), literal("}"))), end + 1

        return Alt(tuple(_GlobParser(alt).parse() for alt in alternatives)), end + 1


def _class_members(body: str) -> tuple[frozenset[str], tuple[tuple[str, str], ...]]:
    """Single characters and `a-z` ranges of a bracket expression body."""
    # (char, is_range_dash) pairs; an escaped `-` is a plain member.
    chars: list[tuple[str, bool]] = []
    i = 0
    while i < len(body):
        if body[i] == "\\" and i + 1 < len(body):
            chars.append((body[i + 1], False))
            i += 2
        else:
            chars.append((body[i], body[i] == "-"))
            i += 1

    singles: set[str] = set()
    ranges: list[tuple[str, str]] = []
    k = 0
    while k < len(chars):
        # `a-z` range, when `-` is neither first nor last.
        if k + 2 < len(chars) and chars[k + 1][1]:
            lo, hi = chars[k][0], chars[k + 2][0]
            if lo <= hi:
                ranges.append((lo, hi))
            k += 3
        else:
            singles.add(chars[k][0])
            k += 1
    return frozenset(singles), tuple(ranges)


def _matching_brace(pat: str, start: int) -> int | None:
    """Index of the `}` closing the `{` at `start`, or `None` if unbalanced."""
    depth = 0
    i = start
    while i < len(pat):
        c = pat[i]
        if c == "\\":
            i += 2
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def _split_alternatives(inner: str) -> list[str]:
    """Split brace contents on top-level, unescaped commas."""
    parts: list[str] = []
    depth = 0
    current_start = 0
    i = 0
    while i < len(inner):
        c = inner[i]
        if c == "\\":
            i += 2
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
        elif c == "," and depth == 0:
            parts.append(inner[current_start:i])
            current_start = i + 1
        i += 1
    parts.append(inner[current_start:])
    return parts


# === Numeric ranges ===

_ZEROS = Star(CharClass(chars=frozenset("0")))


def numeric_range(lo: int, hi: int) -> Node:
    """
    Match the decimal integers from `lo` to `hi` inclusive, with an optional
    sign and any number of leading zeros.
    """
    if lo > hi:
        raise ValueError(f"Empty range: {lo}..{hi}")
    branches: list[Node] = []
    if lo < 0:
        neg_lo = 1 if hi >= 0 else -hi
        branches.append(Seq((literal("-"), _ZEROS, _uint_range(neg_lo, -lo))))
    if hi >= 0:
        branches.append(Seq((optional(literal("+")), _ZEROS, _uint_range(max(lo, 0), hi))))
        if lo <= 0:
            # Negative zero.
            branches.append(Seq((literal("-0"), _ZEROS)))
    return Alt(tuple(branches))


def _uint_range(lo: int, hi: int) -> Alt:
    """`lo..hi` with 0 <= lo <= hi, no sign or padding."""
    parts: list[Node] = []
    start = lo
    for stop in _split_to_ranges(lo, hi):
        parts.append(_same_length_range(str(start), str(stop)))
        start = stop + 1
    return Alt(tuple(parts))


def _split_to_ranges(lo: int, hi: int) -> list[int]:
    """
    Upper bounds of the subranges of `lo..hi` that each have the shape
    prefix + one digit range + any trailing digits (e.g. 12-19, 20-99, 100-299).
    """
    stops = {hi}

    nines = 1
    stop = _fill_nines(lo, nines)
    while lo <= stop < hi:
        stops.add(stop)
        nines += 1
        stop = _fill_nines(lo, nines)

    zeros = 1
    stop = _clear_zeros(hi + 1, zeros) - 1
    while lo < stop <= hi:
        stops.add(stop)
        zeros += 1
        stop = _clear_zeros(hi + 1, zeros) - 1

    return sorted(stops)


def _fill_nines(n: int, count: int) -> int:
    digits = str(n)
    return int(digits[:-count] + "9" * count) if count < len(digits) else int("9" * count)


def _clear_zeros(n: int, count: int) -> int:
    return n - n % 10**count


def _same_length_range(start: str, stop: str) -> Seq:
    return Seq(tuple(CharClass(ranges=((a, b),)) for a, b in zip(start, stop)))
