"""Exceptions raised while creating an application.

Every user-facing failure derives from :class:`AppForgeError`; the command
layer reports those and turns them into a failed result.
:class:`ConfigurationUnset` is a programming error and is deliberately kept
outside that hierarchy so it is never reported as a user mistake.
"""

from __future__ import annotations


class AppForgeError(Exception):
    """Base class for failures reported to the user."""


class ProfileNotFound(AppForgeError):
    """Raised when a profile name cannot be resolved by the repository."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot find profile {name}")


class InvalidProfile(AppForgeError):
    """Raised when a profile descriptor cannot be read or parsed."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Profile {name} is invalid: {reason}")


class MissingTarget(AppForgeError):
    """Raised when neither an application name nor ``--inplace`` is given."""

    def __init__(self) -> None:
        super().__init__(
            "Specify an application name or use --inplace to create an "
            "application in the current directory"
        )


class InvalidPackageName(AppForgeError):
    """Raised when no legal dotted package name can be used for an app."""

    def __init__(self, app_name: str, package: str | None = None) -> None:
        self.app_name = app_name
        self.package = package
        super().__init__(
            f"Cannot create a valid package name for [{app_name}]. "
            "Please specify a name that is also a valid Java package."
        )


class SkeletonIOFailure(AppForgeError):
    """Raised when a skeleton cannot be extracted or copied."""

    def __init__(self, message: str, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class ConfigurationUnset(RuntimeError):
    """Raised when a required collaborator was never configured."""

    def __init__(self, property_name: str) -> None:
        self.property_name = property_name
        super().__init__(f"Property '{property_name}' must be set")
