"""Recursive file-tree copy with Ant-style glob filtering.

This is the single copy primitive used for every skeleton pass.  Files are
selected with include/exclude globs, optionally renamed, and either copied
byte-for-byte or passed through a text transformation.

Glob syntax follows Apache Ant:

* ``*`` matches within one path segment and ``?`` matches one character;
* ``**`` matches any number of segments, so ``**/*.png`` matches PNGs at
  any depth while ``build.gradle`` only matches at the root;
* a pattern ending in ``/`` is treated as ``<pattern>**``.

Text is read and written as UTF-8 with ``surrogateescape`` and without
newline translation, so bytes that are not valid UTF-8 and ``\\r\\n`` line
endings survive a transformation unchanged.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Callable, Iterable, Iterator
from functools import lru_cache
from pathlib import Path

from appforge.errors import SkeletonIOFailure

TextTransform = Callable[[str], str]

# Subset of Ant's default excludes: VCS metadata and editor droppings.
DEFAULT_EXCLUDES: tuple[str, ...] = (
    "**/*~",
    "**/#*#",
    "**/.#*",
    "**/._*",
    "**/.DS_Store",
    "**/.git/**",
    "**/.gitattributes",
    "**/.gitignore",
    "**/.gitmodules",
    "**/.hg/**",
    "**/.hgignore",
    "**/.svn/**",
    "**/CVS/**",
)


# ---------------------------------------------------------------------------
# Glob matching
# ---------------------------------------------------------------------------


@lru_cache(maxsize=512)
def _compile_glob(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    pattern = pattern.replace("\\", "/").lstrip("/")
    if pattern.endswith("/"):
        pattern += "**"

    out: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1

    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile("".join(out) + r"\Z", flags)


def matches_any(relative: str, patterns: Iterable[str], *, case_sensitive: bool = True) -> bool:
    """Return ``True`` if the ``/``-separated *relative* path matches a glob."""
    return any(
        _compile_glob(p, case_sensitive).match(relative) is not None for p in patterns
    )


def iter_files(
    root: Path,
    *,
    includes: Iterable[str] | None = None,
    excludes: Iterable[str] = (),
    case_sensitive: bool = True,
    use_default_excludes: bool = True,
) -> Iterator[tuple[Path, str]]:
    """Yield ``(path, relative_posix_path)`` for every selected file under *root*.

    Files are yielded in sorted order.  With ``includes=None`` every file is a
    candidate.
    """
    include_list = list(includes) if includes is not None else None
    exclude_list = list(excludes)
    if use_default_excludes:
        exclude_list.extend(DEFAULT_EXCLUDES)

    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(root).as_posix()
        if include_list is not None and not matches_any(
            relative, include_list, case_sensitive=case_sensitive
        ):
            continue
        if matches_any(relative, exclude_list, case_sensitive=case_sensitive):
            continue
        yield path, relative


# ---------------------------------------------------------------------------
# Copy
# ---------------------------------------------------------------------------


def copy_tree(
    source: Path,
    target: Path,
    *,
    includes: Iterable[str] | None = None,
    excludes: Iterable[str] = (),
    case_sensitive: bool = True,
    transform_content: TextTransform | None = None,
    transform_name: TextTransform | None = None,
    use_default_excludes: bool = True,
) -> list[Path]:
    """Copy the selected files from *source* into *target*.

    Existing files in *target* are overwritten.

    Args:
        source: Root of the tree to copy.
        target: Destination root; created if missing.
        includes: Globs a file must match to be copied (``None`` = all).
        excludes: Globs that veto a file even if it is included.
        case_sensitive: Whether glob matching is case-sensitive.
        transform_content: Text rewrite applied to each file's content.
            ``None`` copies the bytes verbatim.
        transform_name: Rewrite applied to each file's relative path.
        use_default_excludes: Also apply :data:`DEFAULT_EXCLUDES`.

    Returns:
        The written destination paths, in copy order.

    Raises:
        SkeletonIOFailure: If any file cannot be read or written.
    """
    written: list[Path] = []
    try:
        selected = list(
            iter_files(
                source,
                includes=includes,
                excludes=excludes,
                case_sensitive=case_sensitive,
                use_default_excludes=use_default_excludes,
            )
        )
        for path, relative in selected:
            dest_relative = transform_name(relative) if transform_name else relative
            dest = target / dest_relative
            dest.parent.mkdir(parents=True, exist_ok=True)
            if transform_content is None:
                shutil.copy(path, dest)
            else:
                write_text_exact(dest, transform_content(read_text_exact(path)))
                shutil.copymode(path, dest)
            written.append(dest)
    except OSError as exc:
        raise SkeletonIOFailure(
            f"Cannot copy skeleton from {source} to {target}: {exc}", str(source)
        ) from exc
    return written


# ---------------------------------------------------------------------------
# Text I/O
# ---------------------------------------------------------------------------


def read_text_exact(path: Path) -> str:
    """Read UTF-8 text without newline translation; bad bytes are escaped."""
    with path.open("r", encoding="utf-8", errors="surrogateescape", newline="") as fh:
        return fh.read()


def write_text_exact(path: Path, content: str) -> None:
    """Inverse of :func:`read_text_exact`."""
    with path.open("w", encoding="utf-8", errors="surrogateescape", newline="") as fh:
        fh.write(content)
