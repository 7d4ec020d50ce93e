"""Profile repositories -- resolve profiles by name and order their chain.

Two layouts are understood by :class:`FileSystemProfileRepository`:

* a directory profile, ``<root>/<name>/profile.yml`` with the skeleton in
  ``<root>/<name>/skeleton`` and features in ``<root>/<name>/features/<f>``;
* a packaged profile, ``<root>/<name>.zip`` (or ``.jar``) holding the same
  layout under ``META-INF/appforge-profile/``.

Descriptor format (``profile.yml``)::

    description: Web application profile
    extends: [base]
    build:
      plugins: [war]
      merge: [base]
    dependencies:
      compile: ["org.example:core:1.0"]
      build: ["org.example:gradle-plugin:1.0"]
    skeleton:
      excludes: ["**/*.tmp"]
    features:
      defaults: [json]

Features carry a ``feature.yml`` with ``description``, ``dependencies`` and
``build.plugins``.
"""

from __future__ import annotations

import zipfile
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Any

import yaml
from pydantic import ValidationError

from appforge.errors import InvalidProfile, ProfileNotFound
from appforge.profiles.models import (
    Dependency,
    Feature,
    Profile,
    ProfileConfiguration,
    SkeletonSettings,
)
from appforge.profiles.sources import (
    ArchiveSkeletonSource,
    DirectorySkeletonSource,
    SkeletonSource,
)

DEFAULT_PROFILE_NAME = "web"
PROFILE_DESCRIPTOR = "profile.yml"
FEATURE_DESCRIPTOR = "feature.yml"
ARCHIVE_SUFFIXES = (".zip", ".jar")


# ---------------------------------------------------------------------------
# Abstract repository
# ---------------------------------------------------------------------------


class ProfileRepository(ABC):
    """Resolves profiles by name."""

    DEFAULT_PROFILE_NAME = DEFAULT_PROFILE_NAME

    @abstractmethod
    def get_profile(self, name: str) -> Profile | None:
        """Return the named profile, or ``None`` if it does not exist."""

    def get_profile_and_dependencies(self, profile: Profile) -> list[Profile]:
        """Return *profile* and every profile it extends, parents first.

        The order is a depth-first topological sort: each profile appears
        exactly once and only after all of the profiles it extends.  The
        requested profile is always last.

        Raises:
            ProfileNotFound: If an ``extends`` entry cannot be resolved.
        """
        ordered: list[Profile] = []
        visited: set[str] = set()
        self._visit(profile, ordered, visited)
        return ordered

    def _visit(self, profile: Profile, ordered: list[Profile], visited: set[str]) -> None:
        if profile.name in visited:
            return
        visited.add(profile.name)
        for parent_name in profile.extends:
            parent = self.get_profile(parent_name)
            if parent is None:
                raise ProfileNotFound(parent_name)
            self._visit(parent, ordered, visited)
        ordered.append(profile)


# ---------------------------------------------------------------------------
# File-system repository
# ---------------------------------------------------------------------------


class FileSystemProfileRepository(ProfileRepository):
    """Loads profiles from directories and archives below *root*.

    Loaded profiles are cached by name.  Inherited dependencies, build
    plugins and features are folded into each profile at load time.
    """

    def __init__(
        self,
        root: str | Path,
        archive_root: str = "META-INF/appforge-profile",
    ) -> None:
        self.root = Path(root)
        self.archive_root = archive_root.strip("/")
        self._cache: dict[str, Profile] = {}
        self._loading: set[str] = set()

    # -- Public API --------------------------------------------------------

    def get_profile(self, name: str) -> Profile | None:
        if name in self._cache:
            return self._cache[name]

        profile_dir = self.root / name
        if (profile_dir / PROFILE_DESCRIPTOR).is_file():
            loader = _DirectoryLayout(profile_dir)
        else:
            archive = self._find_archive(name)
            if archive is None:
                return None
            loader = _ArchiveLayout(archive, self.archive_root)

        if name in self._loading:
            raise InvalidProfile(name, "circular 'extends' declaration")
        self._loading.add(name)
        try:
            profile = self._build_profile(name, loader)
        finally:
            self._loading.discard(name)

        self._cache[name] = profile
        return profile

    def list_profile_names(self) -> list[str]:
        """Return the names of every profile found under the root."""
        if not self.root.is_dir():
            return []
        names: set[str] = set()
        for entry in self.root.iterdir():
            if entry.is_dir() and (entry / PROFILE_DESCRIPTOR).is_file():
                names.add(entry.name)
            elif entry.is_file() and entry.suffix.lower() in ARCHIVE_SUFFIXES:
                names.add(entry.stem)
        return sorted(names)

    # -- Loading -----------------------------------------------------------

    def _find_archive(self, name: str) -> Path | None:
        for suffix in ARCHIVE_SUFFIXES:
            candidate = self.root / f"{name}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    def _build_profile(self, name: str, layout: "_Layout") -> Profile:
        data = _parse_descriptor(name, layout.read(PROFILE_DESCRIPTOR))

        extends = _as_list(name, "extends", data.get("extends"))
        parents: list[Profile] = []
        for parent_name in extends:
            parent = self.get_profile(parent_name)
            if parent is None:
                raise ProfileNotFound(parent_name)
            parents.append(parent)

        build = _section(name, data, "build")
        own_features = [
            self._build_feature(name, feature_name, layout)
            for feature_name in layout.feature_names()
        ]
        feature_settings = _section(name, data, "features")
        default_names = _as_list(name, "features.defaults", feature_settings.get("defaults"))

        inherited_deps = [d for p in parents for d in p.dependencies]
        inherited_plugins = [pl for p in parents for pl in p.build_plugins]
        features = _merge_features([f for p in parents for f in p.features], own_features)
        if not default_names:
            default_names = [n for p in parents for n in p.default_feature_names]

        try:
            return Profile(
                name=name,
                description=str(data.get("description") or ""),
                extends=extends,
                skeleton=layout.skeleton(),
                dependencies=[
                    *inherited_deps,
                    *_parse_dependencies(name, data.get("dependencies")),
                ],
                build_plugins=[
                    *inherited_plugins,
                    *_as_list(name, "build.plugins", build.get("plugins")),
                ],
                build_merge_profile_names=_as_list(name, "build.merge", build.get("merge")),
                configuration=ProfileConfiguration(
                    skeleton=SkeletonSettings(
                        excludes=_as_list(
                            name,
                            "skeleton.excludes",
                            _section(name, data, "skeleton").get("excludes"),
                        )
                    )
                ),
                features=features,
                default_feature_names=default_names,
            )
        except (ValidationError, ValueError) as exc:
            raise InvalidProfile(name, str(exc)) from exc

    def _build_feature(self, profile_name: str, feature_name: str, layout: "_Layout") -> Feature:
        raw = layout.read(f"features/{feature_name}/{FEATURE_DESCRIPTOR}")
        data = _parse_descriptor(profile_name, raw) if raw is not None else {}
        build = _section(profile_name, data, "build")
        try:
            return Feature(
                name=feature_name,
                description=str(data.get("description") or ""),
                skeleton=layout.skeleton(f"features/{feature_name}"),
                dependencies=_parse_dependencies(profile_name, data.get("dependencies")),
                build_plugins=_as_list(profile_name, "build.plugins", build.get("plugins")),
            )
        except (ValidationError, ValueError) as exc:
            raise InvalidProfile(profile_name, f"feature {feature_name}: {exc}") from exc


# ---------------------------------------------------------------------------
# Layouts
# ---------------------------------------------------------------------------


class _Layout(ABC):
    @abstractmethod
    def read(self, relative: str) -> str | None: ...

    @abstractmethod
    def feature_names(self) -> list[str]: ...

    @abstractmethod
    def skeleton(self, base: str = "") -> SkeletonSource: ...


class _DirectoryLayout(_Layout):
    def __init__(self, root: Path) -> None:
        self.root = root

    def read(self, relative: str) -> str | None:
        path = self.root / relative
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InvalidProfile(self.root.name, f"cannot read {relative}: {exc}") from exc

    def feature_names(self) -> list[str]:
        features_dir = self.root / "features"
        if not features_dir.is_dir():
            return []
        return sorted(p.name for p in features_dir.iterdir() if p.is_dir())

    def skeleton(self, base: str = "") -> SkeletonSource:
        root = self.root / base if base else self.root
        return DirectorySkeletonSource(root / "skeleton")


class _ArchiveLayout(_Layout):
    def __init__(self, archive: Path, archive_root: str) -> None:
        self.archive = archive
        self.prefix = PurePosixPath(archive_root)
        try:
            with zipfile.ZipFile(archive) as zf:
                self._names = zf.namelist()
        except (OSError, zipfile.BadZipFile) as exc:
            raise InvalidProfile(archive.stem, f"unreadable archive: {exc}") from exc

    def read(self, relative: str) -> str | None:
        member = str(self.prefix / relative)
        if member not in self._names:
            return None
        try:
            with zipfile.ZipFile(self.archive) as zf:
                return zf.read(member).decode("utf-8")
        except (OSError, zipfile.BadZipFile, UnicodeDecodeError) as exc:
            raise InvalidProfile(self.archive.stem, f"cannot read {relative}: {exc}") from exc

    def feature_names(self) -> list[str]:
        features_prefix = f"{self.prefix}/features/"
        names = {
            n[len(features_prefix):].split("/", 1)[0]
            for n in self._names
            if n.startswith(features_prefix) and "/" in n[len(features_prefix):]
        }
        return sorted(n for n in names if n)

    def skeleton(self, base: str = "") -> SkeletonSource:
        prefix = self.prefix / base if base else self.prefix
        return ArchiveSkeletonSource(self.archive, str(prefix / "skeleton"))


# ---------------------------------------------------------------------------
# Descriptor helpers
# ---------------------------------------------------------------------------


def _parse_descriptor(name: str, raw: str | None) -> dict[str, Any]:
    if raw is None:
        raise InvalidProfile(name, f"missing {PROFILE_DESCRIPTOR}")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise InvalidProfile(name, f"malformed YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidProfile(name, "descriptor must be a mapping")
    return data


def _as_list(name: str, key: str, value: Any) -> list[str]:
    """Normalise a comma-separated string or a YAML list to a list of strings.

    Raises:
        InvalidProfile: If *value* is any other kind of scalar or a mapping.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if not isinstance(value, list):
        raise InvalidProfile(name, f"'{key}' must be a string or list")
    return [str(v) for v in value]


def _parse_dependencies(name: str, value: Any) -> list[Dependency]:
    """Parse a ``{scope: [coords, ...]}`` mapping, preserving order."""
    if not value:
        return []
    if not isinstance(value, dict):
        raise ValueError("dependencies must map a scope to a list of coordinates")
    deps: list[Dependency] = []
    for scope, coords_list in value.items():
        for coords in _as_list(name, f"dependencies.{scope}", coords_list):
            deps.append(Dependency.parse(coords, scope=str(scope)))
    return deps


def _merge_features(inherited: list[Feature], own: list[Feature]) -> list[Feature]:
    """Inherited features followed by the profile's own; own ones win by name."""
    own_names = {f.name for f in own}
    merged: list[Feature] = []
    seen: set[str] = set()
    for feature in inherited:
        if feature.name in own_names or feature.name in seen:
            continue
        seen.add(feature.name)
        merged.append(feature)
    return merged + own


def _section(name: str, data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise InvalidProfile(name, f"'{key}' must be a mapping")
    return value
