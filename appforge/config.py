"""AppForge configuration.

Centralised, typed configuration for ``create-app``.  All settings use a
Pydantic v2 model so they are validated at construction time and can be read
from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_BINARY_EXTENSIONS: list[str] = [
    "png",
    "gif",
    "jpg",
    "jpeg",
    "ico",
    "icns",
    "pdf",
    "zip",
    "jar",
    "class",
]


class Config(BaseModel):
    """Global AppForge configuration.

    Instances are typically created once by the CLI entry point and then
    passed to :class:`~appforge.creator.command.CreateAppCommand` and the
    profile repository.
    """

    profiles_dir: Path = Field(default=Path("./profiles"))
    default_profile: str = Field(default="web", min_length=1)
    binary_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BINARY_EXTENSIONS),
        description="File extensions copied verbatim, never token-substituted",
    )

    # Fixed locations inside the generated project.
    application_config: str = Field(default="app/conf/application.yml")
    build_descriptor: str = Field(default="build.gradle")
    wrapper_script: str = Field(default="gradlew")
    ignore_file: str = Field(default=".gitignore")
    filler_marker: str = Field(default=".gitkeep")

    # Directory holding profile.yml and skeleton/ inside packaged profiles.
    archive_root: str = Field(default="META-INF/appforge-profile")

    @field_validator("binary_extensions")
    @classmethod
    def _normalise_extensions(cls, value: list[str]) -> list[str]:
        cleaned = [ext.strip().lstrip(".").lower() for ext in value]
        return [ext for ext in cleaned if ext]

    # ------------------------------------------------------------------
    # Derived values (read-only properties)
    # ------------------------------------------------------------------

    @property
    def binary_patterns(self) -> list[str]:
        """Glob patterns matching every binary file, at any depth."""
        return [f"**/*.{ext}" for ext in self.binary_extensions]

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            APPFORGE_PROFILES_DIR, APPFORGE_DEFAULT_PROFILE,
            APPFORGE_BINARY_EXTENSIONS (comma separated).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_PROFILES_DIR"):
            kwargs["profiles_dir"] = Path(os.environ["APPFORGE_PROFILES_DIR"])
        if os.environ.get("APPFORGE_DEFAULT_PROFILE"):
            kwargs["default_profile"] = os.environ["APPFORGE_DEFAULT_PROFILE"]
        if os.environ.get("APPFORGE_BINARY_EXTENSIONS"):
            raw = os.environ["APPFORGE_BINARY_EXTENSIONS"]
            kwargs["binary_extensions"] = [e for e in raw.split(",") if e.strip()]
        return cls(**kwargs)
