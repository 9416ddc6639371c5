"""Path normalization for section matching."""

from __future__ import annotations

import os
from pathlib import PurePath


def normalize_path(
    path: str | os.PathLike[str], base_dir: str | os.PathLike[str] | None = None
) -> str:
    """
    Rewrite a queried path into the form section globs are written against.

    An absolute path under `base_dir` becomes relative to it, compared by whole
    path components (`/project` is not a prefix of `/projects/a.md`). Absolute
    paths outside `base_dir` and all relative paths are kept as is. The base
    directory itself becomes the empty path. Separators are always `/`.
    """
    raw = os.fspath(path)
    if base_dir is None or not os.path.isabs(raw):
        return _to_posix(raw)
    try:
        relative = PurePath(raw).relative_to(PurePath(base_dir)).as_posix()
    except ValueError:
        # Not under the base directory.
        return _to_posix(raw)
    return "" if relative == "." else relative


def _to_posix(raw: str) -> str:
    if os.sep != "/":
        return raw.replace(os.sep, "/")
    return raw
