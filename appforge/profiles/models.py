"""Pydantic models describing profiles, features and their dependencies.

These are read-only inputs supplied by a
:class:`~appforge.profiles.repository.ProfileRepository`.  Every model is
frozen so the creation pipeline can aggregate their lists without mutating
profile-owned data.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from appforge.profiles.sources import SkeletonSource

BUILD_SCOPE = "build"
BOM_MARKER = "BOM"


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


class Dependency(BaseModel):
    """A build dependency declared by a profile or a feature."""

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: str = Field(default="", description="Empty or BOM-marked means unpinned")
    scope: str = Field(default="compile", min_length=1)

    @classmethod
    def parse(cls, coords: str, scope: str = "compile") -> "Dependency":
        """Parse ``group:artifact[:version]`` into a ``Dependency``.

        Raises:
            ValueError: If *coords* has fewer than two or more than three
                segments.
        """
        parts = [p.strip() for p in coords.strip().split(":")]
        if len(parts) not in (2, 3) or not all(parts[:2]):
            raise ValueError(f"Invalid dependency coordinates: {coords!r}")
        version = parts[2] if len(parts) == 3 else ""
        return cls(group_id=parts[0], artifact_id=parts[1], version=version, scope=scope)

    @property
    def is_build(self) -> bool:
        """``True`` for build-script classpath dependencies."""
        return self.scope == BUILD_SCOPE

    @property
    def resolved_version(self) -> str:
        """The version with the BOM marker (and any dangling separator) removed."""
        return self.version.replace(BOM_MARKER, "").rstrip(".-")

    @property
    def coordinates(self) -> str:
        """``group:artifact:version``, or ``group:artifact`` when unpinned."""
        version = self.resolved_version
        if version:
            return f"{self.group_id}:{self.artifact_id}:{version}"
        return f"{self.group_id}:{self.artifact_id}"


# ---------------------------------------------------------------------------
# Profile configuration
# ---------------------------------------------------------------------------


class SkeletonSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    excludes: list[str] = Field(default_factory=list)


class ProfileConfiguration(BaseModel):
    """The subset of a profile's nested configuration read during creation."""

    model_config = ConfigDict(frozen=True)

    skeleton: SkeletonSettings = Field(default_factory=SkeletonSettings)

    @property
    def skeleton_excludes(self) -> list[str]:
        return list(self.skeleton.excludes)


# ---------------------------------------------------------------------------
# Feature / Profile
# ---------------------------------------------------------------------------


class Feature(BaseModel):
    """An optional add-on contributing a skeleton fragment and dependencies."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    skeleton: SkeletonSource
    dependencies: list[Dependency] = Field(default_factory=list)
    build_plugins: list[str] = Field(default_factory=list)


class Profile(BaseModel):
    """A named, composable project blueprint.

    ``dependencies``, ``build_plugins`` and ``features`` already include
    everything inherited from the profiles listed in ``extends``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    extends: list[str] = Field(default_factory=list)
    skeleton: SkeletonSource
    dependencies: list[Dependency] = Field(default_factory=list)
    build_plugins: list[str] = Field(default_factory=list)
    build_merge_profile_names: list[str] = Field(
        default_factory=list,
        description="Profiles whose build descriptor is concatenated, not dropped",
    )
    configuration: ProfileConfiguration = Field(default_factory=ProfileConfiguration)
    features: list[Feature] = Field(default_factory=list)
    default_feature_names: list[str] = Field(default_factory=list)

    def get_feature(self, name: str) -> Feature | None:
        for feature in self.features:
            if feature.name == name:
                return feature
        return None

    @property
    def default_features(self) -> list[Feature]:
        """Features named in ``default_feature_names``, in that order."""
        found = (self.get_feature(name) for name in self.default_feature_names)
        return [f for f in found if f is not None]

    def select_features(self, names: list[str]) -> tuple[list[Feature], list[str]]:
        """Pick the features named in *names*.

        Returns:
            A ``(features, unknown_names)`` tuple.  ``features`` keeps the
            profile's declaration order; ``unknown_names`` keeps the request
            order.
        """
        wanted = set(names)
        selected = [f for f in self.features if f.name in wanted]
        known = {f.name for f in self.features}
        unknown = [n for n in names if n not in known]
        return selected, unknown
