"""Final token-replacement pass over the generated project.

Replaces the three build-block tokens and every ``@variable@`` token in
every text file below the target directory.  Binary files are skipped so
their bytes are never altered, and so are the default excludes of
:mod:`appforge.creator.filetree` (VCS metadata, ``.gitignore``).
"""

from __future__ import annotations

from pathlib import Path

from appforge.config import Config
from appforge.creator.dependencies import BuildBlocks
from appforge.creator.filetree import iter_files, read_text_exact, write_text_exact
from appforge.creator.variables import VariableContext
from appforge.errors import SkeletonIOFailure

PLUGINS_TOKEN = "buildPlugins"
DEPENDENCIES_TOKEN = "dependencies"
BUILD_DEPENDENCIES_TOKEN = "buildDependencies"


class BuildDescriptorPatcher:
    """Substitutes build blocks and variables throughout a project tree."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def patch(self, target: Path, blocks: BuildBlocks, variables: VariableContext) -> list[Path]:
        """Rewrite every text file under *target* whose content changes.

        The three block tokens are independent substitutions.  Variable
        values and block text are inserted literally and not rescanned.

        Returns:
            The files that were rewritten.

        Raises:
            SkeletonIOFailure: If a file cannot be read or written.
        """
        context = self.token_context(blocks, variables)
        changed: list[Path] = []
        try:
            for path, _relative in iter_files(
                target,
                excludes=self.config.binary_patterns,
                case_sensitive=False,
                use_default_excludes=True,
            ):
                original = read_text_exact(path)
                patched = context.substitute(original)
                if patched != original:
                    write_text_exact(path, patched)
                    changed.append(path)
        except OSError as exc:
            raise SkeletonIOFailure(f"Cannot patch {target}: {exc}", str(target)) from exc
        return changed

    @staticmethod
    def token_context(blocks: BuildBlocks, variables: VariableContext) -> VariableContext:
        """The variables plus the three build-block tokens."""
        return variables.with_values(
            {
                PLUGINS_TOKEN: blocks.build_plugins,
                DEPENDENCIES_TOKEN: blocks.dependencies,
                BUILD_DEPENDENCIES_TOKEN: blocks.build_dependencies,
            }
        )
