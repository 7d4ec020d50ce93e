"""Shared pytest fixtures for the AppForge test suite.

Provides reusable fixtures for:
- Building directory-backed and archive-backed profiles under ``tmp_path``
- A standard two-level profile chain (``base`` <- ``web``) with features
- A workspace directory that new applications are created in
"""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from appforge.config import Config
from appforge.profiles.repository import FileSystemProfileRepository

SkeletonFiles = dict[str, str | bytes]

# Contains a token on purpose: binary files must come through untouched.
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR@APPNAME@\x00\xff\xfe"

BUILD_GRADLE = (
    "buildscript {\n"
    "    dependencies {\n"
    "@buildDependencies@\n"
    "    }\n"
    "}\n"
    "@buildPlugins@\n"
    "dependencies {\n"
    "@dependencies@\n"
    "}\n"
)


def _write_files(root: Path, files: SkeletonFiles) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def profiles_root(tmp_path: Path) -> Path:
    """Empty directory acting as a profile repository root."""
    root = tmp_path / "profiles"
    root.mkdir()
    return root


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Directory in which applications are created."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def config(profiles_root: Path) -> Config:
    return Config(profiles_dir=profiles_root)


@pytest.fixture
def repository(profiles_root: Path) -> FileSystemProfileRepository:
    return FileSystemProfileRepository(profiles_root)


# ---------------------------------------------------------------------------
# Profile builders
# ---------------------------------------------------------------------------


@pytest.fixture
def make_profile(profiles_root: Path) -> Callable[..., Path]:
    """Factory writing a directory profile.

    Usage::

        make_profile("web", {"extends": "base"}, {"README.md": "..."},
                     features={"json": ({"build": {...}}, {"a.txt": "..."})})
    """

    def _make(
        name: str,
        descriptor: dict[str, Any] | None = None,
        skeleton: SkeletonFiles | None = None,
        *,
        features: dict[str, tuple[dict[str, Any], SkeletonFiles]] | None = None,
    ) -> Path:
        profile_dir = profiles_root / name
        profile_dir.mkdir(parents=True, exist_ok=True)
        (profile_dir / "profile.yml").write_text(
            yaml.safe_dump(descriptor or {}, sort_keys=False), encoding="utf-8"
        )
        if skeleton is not None:
            (profile_dir / "skeleton").mkdir(exist_ok=True)
            _write_files(profile_dir / "skeleton", skeleton)
        for feature_name, (feature_descriptor, feature_skeleton) in (features or {}).items():
            feature_dir = profile_dir / "features" / feature_name
            feature_dir.mkdir(parents=True)
            (feature_dir / "feature.yml").write_text(
                yaml.safe_dump(feature_descriptor, sort_keys=False), encoding="utf-8"
            )
            _write_files(feature_dir / "skeleton", feature_skeleton)
        return profile_dir

    return _make


@pytest.fixture
def make_archive_profile(profiles_root: Path) -> Callable[..., Path]:
    """Factory writing a packaged (``.zip``) profile."""

    def _make(
        name: str,
        descriptor: dict[str, Any] | None = None,
        skeleton: SkeletonFiles | None = None,
        *,
        archive_root: str = "META-INF/appforge-profile",
        suffix: str = ".zip",
    ) -> Path:
        archive = profiles_root / f"{name}{suffix}"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr(
                f"{archive_root}/profile.yml",
                yaml.safe_dump(descriptor or {}, sort_keys=False),
            )
            for relative, content in (skeleton or {}).items():
                zf.writestr(f"{archive_root}/skeleton/{relative}", content)
        return archive

    return _make


@pytest.fixture
def standard_profiles(make_profile: Callable[..., Path]) -> dict[str, Path]:
    """A ``base`` profile extended by ``web``, which offers two features."""
    base = make_profile(
        "base",
        {
            "description": "Base profile",
            "build": {"plugins": ["eclipse"]},
            "dependencies": {
                "compile": ["org.example:base-core:1.0"],
                "build": ["org.example:gradle-plugin:2.0"],
            },
        },
        {
            ".gitignore": "build/\n",
            "gradlew": "#!/bin/sh\necho @APPNAME@\n",
            "build.gradle": BUILD_GRADLE,
            "app/conf/application.yml": "app:\n    name: '@appforge.app.name@'\n",
            "src/main/@appforge.codegen.defaultPackage.path@/Application.java": (
                "package @appforge.codegen.defaultPackage@;\n"
                "class @appforge.codegen.projectClassName@ {}\n"
            ),
            "assets/logo.png": PNG_BYTES,
            "src/.gitkeep": "",
        },
    )
    web = make_profile(
        "web",
        {
            "description": "Web profile",
            "extends": ["base"],
            "build": {"plugins": ["war", "eclipse"], "merge": ["web"]},
            "dependencies": {
                "compile": ["org.example:base-core:1.0", "org.example:web:BOM"],
            },
            "skeleton": {"excludes": ["**/*.tmp"]},
            "features": {"defaults": ["json"]},
        },
        {
            "build.gradle": "// web additions\n",
            "app/conf/application.yml": "server:\n    port: 8080\n",
            "notes.tmp": "excluded\n",
            "views/index.html": "<h1>@appforge.codegen.projectNaturalName@</h1>\n",
        },
        features={
            "json": (
                {
                    "description": "JSON views",
                    "dependencies": {"compile": ["org.example:json:3.0"]},
                    "build": {"plugins": ["json-views"]},
                },
                {
                    "app/conf/application.yml": "json:\n    pretty: true\n",
                    "src/json/@APPNAME@.json": "{}\n",
                },
            ),
            "security": (
                {"dependencies": {"compile": ["org.example:security:1.0"]}},
                {"app/conf/application.yml": "security:\n    enabled: true\n"},
            ),
        },
    )
    return {"base": base, "web": web}
