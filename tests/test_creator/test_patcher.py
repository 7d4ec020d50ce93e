"""Tests for BuildDescriptorPatcher."""

from __future__ import annotations

from pathlib import Path

import pytest

from appforge.config import Config
from appforge.creator.dependencies import BuildBlocks
from appforge.creator.identifiers import derive_identifiers
from appforge.creator.patcher import BuildDescriptorPatcher
from appforge.creator.variables import build_variables
from appforge.errors import SkeletonIOFailure

pytestmark = pytest.mark.unit


@pytest.fixture
def blocks() -> BuildBlocks:
    return BuildBlocks(
        dependencies='    compile "g:a:1"',
        build_dependencies='        classpath "g:p:2"',
        build_plugins='apply plugin:"war"',
    )


@pytest.fixture
def variables():
    return build_variables(derive_identifiers("com.example.demo"), "web", tool_version="1.0")


@pytest.fixture
def patcher() -> BuildDescriptorPatcher:
    return BuildDescriptorPatcher(Config())


class TestPatch:
    def test_build_descriptor_blocks(self, tmp_path: Path, patcher, blocks, variables):
        descriptor = tmp_path / "build.gradle"
        descriptor.write_text(
            "buildscript {\n@buildDependencies@\n}\n@buildPlugins@\n"
            "dependencies {\n@dependencies@\n}\n"
        )

        changed = patcher.patch(tmp_path, blocks, variables)

        assert changed == [descriptor]
        assert descriptor.read_text() == (
            'buildscript {\n        classpath "g:p:2"\n}\napply plugin:"war"\n'
            'dependencies {\n    compile "g:a:1"\n}\n'
        )

    def test_repeated_plugin_token_is_replaced_everywhere(
        self, tmp_path: Path, patcher, blocks, variables
    ):
        descriptor = tmp_path / "build.gradle"
        descriptor.write_text("@buildPlugins@\n@buildPlugins@\n")

        patcher.patch(tmp_path, blocks, variables)

        assert descriptor.read_text() == 'apply plugin:"war"\napply plugin:"war"\n'

    def test_variables_in_any_text_file(self, tmp_path: Path, patcher, blocks, variables):
        nested = tmp_path / "docs" / "README.md"
        nested.parent.mkdir()
        nested.write_text("@APPNAME@ in @appforge.app.group@\r\n")

        patcher.patch(tmp_path, blocks, variables)

        assert nested.read_bytes() == b"demo in com.example\r\n"

    def test_unchanged_files_are_not_rewritten(self, tmp_path: Path, patcher, blocks, variables):
        plain = tmp_path / "plain.txt"
        plain.write_text("nothing to see\n")

        assert patcher.patch(tmp_path, blocks, variables) == []

    def test_binary_files_are_untouched(self, tmp_path: Path, patcher, blocks, variables):
        payload = b"\x89PNG@APPNAME@@dependencies@\xff"
        image = tmp_path / "img" / "LOGO.PNG"
        image.parent.mkdir()
        image.write_bytes(payload)

        patcher.patch(tmp_path, blocks, variables)

        assert image.read_bytes() == payload

    def test_vcs_metadata_is_skipped(self, tmp_path: Path, patcher, blocks, variables):
        git_file = tmp_path / ".git" / "description"
        git_file.parent.mkdir()
        git_file.write_text("@APPNAME@\n")
        ignore = tmp_path / ".gitignore"
        ignore.write_text("@APPNAME@\n")

        patcher.patch(tmp_path, blocks, variables)

        assert git_file.read_text() == "@APPNAME@\n"
        assert ignore.read_text() == "@APPNAME@\n"

    def test_inserted_values_are_not_rescanned(self, tmp_path: Path, patcher, variables):
        tricky = BuildBlocks(dependencies="@APPNAME@", build_dependencies="", build_plugins="")
        descriptor = tmp_path / "build.gradle"
        descriptor.write_text("@dependencies@ @APPNAME@")

        patcher.patch(tmp_path, tricky, variables)

        assert descriptor.read_text() == "@APPNAME@ demo"

    def test_io_error_is_wrapped(self, tmp_path: Path, patcher, blocks, variables, monkeypatch):
        (tmp_path / "build.gradle").write_text("@dependencies@")

        def _boom(path: Path, content: str) -> None:
            raise PermissionError("read-only")

        monkeypatch.setattr("appforge.creator.patcher.write_text_exact", _boom)

        with pytest.raises(SkeletonIOFailure):
            patcher.patch(tmp_path, blocks, variables)


class TestTokenContext:
    def test_contains_variables_and_blocks(self, blocks, variables):
        context = BuildDescriptorPatcher.token_context(blocks, variables)

        assert context["buildPlugins"] == 'apply plugin:"war"'
        assert context["dependencies"] == '    compile "g:a:1"'
        assert context["buildDependencies"] == '        classpath "g:p:2"'
        assert context["APPNAME"] == "demo"
        assert "buildPlugins" not in variables
