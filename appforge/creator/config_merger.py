"""Grow the application configuration file one YAML document at a time.

Each overlay may ship its own ``application.yml`` fragment.  Copying a
skeleton overwrites the file, so the merger snapshots the text before the
pass and, afterwards, rebuilds the file as the previous documents followed by
the new one.  The result is a multi-document file, oldest first, with the
most specific overlay last.
"""

from __future__ import annotations

from pathlib import Path

from appforge.creator.filetree import read_text_exact, write_text_exact
from appforge.errors import SkeletonIOFailure

DOCUMENT_SEPARATOR = "---"


def join_documents(earlier: str, later: str) -> str:
    """Return *earlier* and *later* as consecutive YAML documents.

    A leading separator is added when *earlier* does not already start with
    one.
    """
    parts: list[str] = []
    if not earlier.startswith(DOCUMENT_SEPARATOR):
        parts.append(f"{DOCUMENT_SEPARATOR}\n")
    parts.append(earlier)
    parts.append(f"\n{DOCUMENT_SEPARATOR}\n")
    parts.append(later)
    return "".join(parts)


def merge_documents(previous: str | None, current: str) -> str | None:
    """Combine the pre-overlay text with the post-overlay text.

    Returns:
        The merged text, or ``None`` when nothing needs rewriting: there was
        no previous content or the overlay did not change it.
    """
    if not previous or previous == current:
        return None
    return join_documents(previous, current)


class ConfigMerger:
    """Tracks one configuration file across successive overlay passes."""

    def __init__(self, config_file: Path) -> None:
        self.config_file = config_file

    def capture(self) -> str | None:
        """Snapshot the file's text before an overlay pass."""
        if not self.config_file.is_file():
            return None
        return self._read()

    def merge_after_overlay(self, previous: str | None) -> bool:
        """Re-append *previous* ahead of whatever the overlay wrote.

        Returns:
            ``True`` if the file was rewritten.
        """
        if not self.config_file.is_file():
            return False
        merged = merge_documents(previous, self._read())
        if merged is None:
            return False
        self._write(merged)
        return True

    def append_fragment(self, fragment: str | None) -> bool:
        """Append a feature's configuration fragment as a new document.

        Nothing happens unless both the configuration file and the fragment
        exist.

        Returns:
            ``True`` if the file was rewritten.
        """
        if fragment is None or not self.config_file.is_file():
            return False
        current = self._read()
        self._write(join_documents(current, fragment))
        return True

    def _read(self) -> str:
        try:
            return read_text_exact(self.config_file)
        except OSError as exc:
            raise SkeletonIOFailure(
                f"Cannot read {self.config_file}: {exc}", str(self.config_file)
            ) from exc

    def _write(self, content: str) -> None:
        try:
            write_text_exact(self.config_file, content)
        except OSError as exc:
            raise SkeletonIOFailure(
                f"Cannot write {self.config_file}: {exc}", str(self.config_file)
            ) from exc
