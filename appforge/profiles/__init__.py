"""Profiles -- reusable, inheritable project blueprints.

Quick usage::

    from appforge.profiles import FileSystemProfileRepository

    repository = FileSystemProfileRepository("./profiles")
    profile = repository.get_profile("web")
    chain = repository.get_profile_and_dependencies(profile)
"""

from appforge.profiles.models import (
    Dependency,
    Feature,
    Profile,
    ProfileConfiguration,
    SkeletonSettings,
)
from appforge.profiles.repository import FileSystemProfileRepository, ProfileRepository
from appforge.profiles.sources import (
    ArchiveSkeletonSource,
    DirectorySkeletonSource,
    SkeletonSource,
)

__all__ = [
    "ArchiveSkeletonSource",
    "Dependency",
    "DirectorySkeletonSource",
    "Feature",
    "FileSystemProfileRepository",
    "Profile",
    "ProfileConfiguration",
    "ProfileRepository",
    "SkeletonSettings",
    "SkeletonSource",
]
