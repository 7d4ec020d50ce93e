"""AppForge -- materialises new projects from inheritable profiles.

A profile bundles a skeleton file tree, dependency and build-plugin
declarations, and a merge policy.  Profiles may extend other profiles and may
offer optional features.  ``create-app`` overlays every participating skeleton
onto a fresh target directory, substitutes project identifiers, merges the
application configuration document by document, and renders the build
descriptor.

Quick usage::

    from appforge import Config, CreateAppCommand, CreateAppRequest
    from appforge.profiles import FileSystemProfileRepository

    config = Config(profiles_dir=Path("./profiles"))
    repository = FileSystemProfileRepository(config.profiles_dir)
    command = CreateAppCommand(config, repository)
    command.handle(CreateAppRequest(app_name="com.example.demo"))
"""

from appforge.config import Config
from appforge.creator.command import CreateAppCommand, CreateAppRequest

__all__ = [
    "Config",
    "CreateAppCommand",
    "CreateAppRequest",
]
