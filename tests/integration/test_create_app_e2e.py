"""End-to-end tests: create an application from a two-level profile chain.

Runs the full pipeline against real profile directories and archives on
disk and inspects the generated tree.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from appforge.creator.command import CreateAppCommand, CreateAppRequest

pytestmark = pytest.mark.integration

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR@APPNAME@\x00\xff\xfe"


@pytest.fixture
def created(config, repository, workspace, standard_profiles) -> Path:
    command = CreateAppCommand(config, repository, working_dir=workspace)
    assert command.handle(CreateAppRequest(app_name="com.example.demo-app")) is True
    return workspace / "demo-app"


class TestGeneratedTree:
    def test_application_config_documents(self, created: Path):
        text = (created / "app" / "conf" / "application.yml").read_text()
        assert list(yaml.safe_load_all(text)) == [
            {"app": {"name": "demo-app"}},
            {"server": {"port": 8080}},
            {"json": {"pretty": True}},
        ]

    def test_build_descriptor(self, created: Path):
        descriptor = (created / "build.gradle").read_text()

        assert 'classpath "org.example:gradle-plugin:2.0"' in descriptor
        plugins = [line for line in descriptor.splitlines() if line.startswith("apply plugin")]
        assert plugins == [
            'apply plugin:"eclipse"',
            'apply plugin:"war"',
            'apply plugin:"json-views"',
        ]
        compile_lines = [line.strip() for line in descriptor.splitlines() if "compile" in line]
        assert compile_lines == [
            'compile "org.example:base-core:1.0"',
            'compile "org.example:web"',
            'compile "org.example:json:3.0"',
        ]
        assert descriptor.endswith("// web additions\n")
        assert "@" not in descriptor

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_wrapper_is_executable_and_substituted(self, created: Path):
        wrapper = created / "gradlew"
        assert os.access(wrapper, os.X_OK)
        assert "echo demo-app" in wrapper.read_text()

    def test_sources_land_in_package_directory(self, created: Path):
        source = (created / "src" / "main" / "com" / "example" / "Application.java").read_text()
        assert "package com.example;" in source
        assert "class DemoApp {}" in source

    def test_binary_is_byte_identical(self, created: Path):
        assert (created / "assets" / "logo.png").read_bytes() == PNG_BYTES

    def test_ignore_file_copied(self, created: Path):
        assert (created / ".gitignore").read_text() == "build/\n"

    def test_filler_and_excluded_files_absent(self, created: Path):
        assert not (created / "src" / ".gitkeep").exists()
        assert not (created / "notes.tmp").exists()

    def test_child_and_feature_files(self, created: Path):
        assert (created / "views" / "index.html").read_text() == "<h1>Demo App</h1>\n"
        assert (created / "src" / "json" / "demo-app.json").is_file()


class TestPackagedProfile:
    def test_archive_extends_directory_profile(
        self, config, repository, workspace, standard_profiles, make_archive_profile
    ):
        make_archive_profile(
            "rest",
            {
                "extends": ["base"],
                "build": {"plugins": ["rest"]},
                "dependencies": {"runtime": ["org.example:rest:1.0"]},
            },
            {
                "app/conf/application.yml": "rest:\n    root: /@APPNAME@\n",
                "docs/@appforge.codegen.projectName@.md": "# @appforge.codegen.projectNaturalName@\n",
            },
        )
        command = CreateAppCommand(config, repository, working_dir=workspace)

        target = command.create(CreateAppRequest(app_name="shopFront", profile="rest"))

        assert target.directory == (workspace / "shopFront").absolute()
        assert list(yaml.safe_load_all(target.application_config_path.read_text())) == [
            {"app": {"name": "shopFront"}},
            {"rest": {"root": "/shopFront"}},
        ]
        assert (target.directory / "docs" / "shop-front.md").read_text() == "# Shop Front\n"
        descriptor = target.build_descriptor_path.read_text()
        assert 'runtime "org.example:rest:1.0"' in descriptor
        assert 'apply plugin:"rest"' in descriptor


class TestFailures:
    def test_invalid_package_leaves_workspace_empty(
        self, config, repository, workspace, standard_profiles
    ):
        command = CreateAppCommand(config, repository, working_dir=workspace)
        assert command.handle(CreateAppRequest(app_name="9lives")) is False
        assert list(workspace.iterdir()) == []
