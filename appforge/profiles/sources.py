"""Skeleton sources -- where a profile's or feature's template tree lives.

A skeleton is either a plain directory on disk or a subtree packaged inside a
zip/jar archive.  Both variants expose the same two operations: materialise
the tree as a local directory for the duration of a ``with`` block, and read
a single file's text without materialising anything.
"""

from __future__ import annotations

import tempfile
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path, PurePosixPath

from appforge.errors import SkeletonIOFailure


class SkeletonSource(ABC):
    """A skeleton tree that can be overlaid onto a target directory."""

    @abstractmethod
    def materialize(self) -> AbstractContextManager[Path | None]:
        """Context manager yielding the local skeleton root.

        Yields ``None`` when the source has no skeleton at all.
        """

    @abstractmethod
    def read_text(self, relative: str) -> str | None:
        """Return the text of ``relative`` inside the skeleton, or ``None``.

        Decoding matches the skeleton copy: UTF-8 with ``surrogateescape``
        and no newline translation, so the bytes round-trip unchanged.
        """

    @abstractmethod
    def describe(self) -> str:
        """Human-readable location used in diagnostics."""


class DirectorySkeletonSource(SkeletonSource):
    """A skeleton stored as an ordinary directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    @contextmanager
    def materialize(self) -> Iterator[Path | None]:
        yield self.root if self.root.is_dir() else None

    def read_text(self, relative: str) -> str | None:
        path = self.root / relative
        if not path.is_file():
            return None
        try:
            with path.open("r", encoding="utf-8", errors="surrogateescape", newline="") as fh:
                return fh.read()
        except OSError as exc:
            raise SkeletonIOFailure(f"Cannot read {path}: {exc}", str(self.root)) from exc

    def describe(self) -> str:
        return str(self.root)

    def __repr__(self) -> str:
        return f"DirectorySkeletonSource({str(self.root)!r})"


class ArchiveSkeletonSource(SkeletonSource):
    """A skeleton packaged under ``member_prefix`` inside a zip or jar file.

    :meth:`materialize` extracts the whole archive into a scratch directory
    that is removed when the ``with`` block exits, whether normally or via an
    exception.
    """

    def __init__(self, archive: str | Path, member_prefix: str) -> None:
        self.archive = Path(archive)
        self.member_prefix = member_prefix.strip("/")

    @contextmanager
    def materialize(self) -> Iterator[Path | None]:
        with tempfile.TemporaryDirectory(prefix="appforge-skeleton-") as scratch:
            try:
                with zipfile.ZipFile(self.archive) as zf:
                    zf.extractall(scratch)
            except (OSError, zipfile.BadZipFile) as exc:
                raise SkeletonIOFailure(
                    f"Cannot extract skeleton from {self.archive}: {exc}",
                    str(self.archive),
                ) from exc
            root = Path(scratch) / self.member_prefix
            yield root if root.is_dir() else None

    def read_text(self, relative: str) -> str | None:
        member = str(PurePosixPath(self.member_prefix) / relative)
        try:
            with zipfile.ZipFile(self.archive) as zf:
                if member not in zf.namelist():
                    return None
                return zf.read(member).decode("utf-8", errors="surrogateescape")
        except (OSError, zipfile.BadZipFile) as exc:
            raise SkeletonIOFailure(
                f"Cannot read {member} from {self.archive}: {exc}",
                str(self.archive),
            ) from exc

    def describe(self) -> str:
        return f"{self.archive}!/{self.member_prefix}"

    def __repr__(self) -> str:
        return f"ArchiveSkeletonSource({str(self.archive)!r}, {self.member_prefix!r})"
