"""Overlay profile and feature skeletons onto the target directory.

Each overlay pass copies one skeleton into the project:

1. the ignore file at the skeleton root is copied first, verbatim;
2. the text pass copies every non-binary file, substituting ``@key@``
   tokens in both content and file names;
3. the binary pass copies binary files byte-for-byte, substituting tokens
   in file names only;
4. the build descriptor is copied if the project has none yet, concatenated
   onto the existing one when the participating profile is in the selected
   profile's merge list, and otherwise dropped;
5. the wrapper launcher script is marked executable.

A file goes through exactly one of the two copy passes, decided only by its
extension.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from appforge.config import Config
from appforge.creator.filetree import copy_tree
from appforge.creator.variables import VariableContext
from appforge.errors import SkeletonIOFailure
from appforge.profiles.models import Feature, Profile
from appforge.profiles.sources import SkeletonSource
from appforge.utils import ensure_dir, make_executable


class SkeletonMaterializer:
    """Copies skeleton trees into a single target directory.

    Args:
        config: Supplies the fixed file names and binary extensions.
        target: Root of the project being generated.
        variables: Tokens substituted into text content and file names.
    """

    def __init__(self, config: Config, target: Path, variables: VariableContext) -> None:
        self.config = config
        self.target = target
        self.variables = variables

    # -- Public API --------------------------------------------------------

    def overlay_profile(self, profile: Profile, participant: Profile) -> list[Path]:
        """Overlay *participant*'s skeleton, using *profile*'s policies.

        *profile* is the profile the user selected; *participant* is one
        entry of its chain (possibly *profile* itself).  Skeleton excludes and
        the build-descriptor merge list always come from *profile*.
        """
        merge_build = participant.name in profile.build_merge_profile_names
        return self._overlay(
            participant.skeleton,
            profile.configuration.skeleton_excludes,
            merge_build=merge_build,
        )

    def overlay_feature(self, profile: Profile, feature: Feature) -> list[Path]:
        """Overlay a feature's skeleton.

        The application configuration file is never copied from a feature;
        its fragment is appended by the config merger instead.
        """
        excludes = [*profile.configuration.skeleton_excludes, self.config.application_config]
        return self._overlay(feature.skeleton, excludes, merge_build=False)

    # -- Overlay pass ------------------------------------------------------

    def _overlay(
        self,
        source: SkeletonSource,
        excludes: list[str],
        *,
        merge_build: bool,
    ) -> list[Path]:
        written: list[Path] = []
        with source.materialize() as skeleton_dir:
            if skeleton_dir is None:
                return written
            try:
                ensure_dir(self.target)
            except OSError as exc:
                raise SkeletonIOFailure(
                    f"Cannot create {self.target}: {exc}", source.describe()
                ) from exc

            self._copy_ignore_file(skeleton_dir)

            descriptor = self.config.build_descriptor
            binary = self.config.binary_patterns
            written += copy_tree(
                skeleton_dir,
                self.target,
                excludes=[*excludes, f"**/{self.config.filler_marker}", descriptor, *binary],
                case_sensitive=False,
                transform_content=self.variables.substitute,
                transform_name=self.variables.substitute,
            )
            written += copy_tree(
                skeleton_dir,
                self.target,
                includes=binary,
                excludes=[*excludes, descriptor],
                case_sensitive=False,
                transform_name=self.variables.substitute,
            )
            self._copy_build_descriptor(skeleton_dir, merge_build=merge_build)

        self._mark_wrapper_executable()
        return written

    def _copy_ignore_file(self, skeleton_dir: Path) -> None:
        source = skeleton_dir / self.config.ignore_file
        if not source.is_file():
            return
        try:
            shutil.copyfile(source, self.target / self.config.ignore_file)
        except OSError as exc:
            raise SkeletonIOFailure(f"Cannot copy {source}: {exc}", str(skeleton_dir)) from exc

    def _copy_build_descriptor(self, skeleton_dir: Path, *, merge_build: bool) -> None:
        source = skeleton_dir / self.config.build_descriptor
        dest = self.target / self.config.build_descriptor
        if not source.is_file():
            return
        try:
            if not dest.exists():
                shutil.copyfile(source, dest)
            elif merge_build:
                _concatenate_into(dest, source)
        except OSError as exc:
            raise SkeletonIOFailure(
                f"Cannot write build descriptor {dest}: {exc}", str(skeleton_dir)
            ) from exc

    def _mark_wrapper_executable(self) -> None:
        wrapper = self.target / self.config.wrapper_script
        if wrapper.is_file():
            make_executable(wrapper)


def _concatenate_into(dest: Path, addition: Path) -> None:
    """Rewrite *dest* as its current bytes followed by *addition*'s bytes.

    The existing file is moved aside under a fresh temporary name, so no
    skeleton file can collide with it, and only discarded after the new file
    has been written.  A newline is inserted if the existing content does
    not end with one.
    """
    with tempfile.NamedTemporaryFile(
        dir=dest.parent, prefix=".concat-", suffix=dest.suffix, delete=False
    ) as scratch:
        moved = Path(scratch.name)
    os.replace(dest, moved)
    existing = moved.read_bytes()
    if existing and not existing.endswith(b"\n"):
        existing += b"\n"
    dest.write_bytes(existing + addition.read_bytes())
    moved.unlink()
