"""The template-variable context used to substitute ``@key@`` tokens.

A :class:`VariableContext` is built once per ``create-app`` invocation from
the derived project identifiers, the selected profile and the tool's own
version.  It is an ordered, read-only mapping; the order only matters for
diagnostic output.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from importlib.metadata import PackageNotFoundError, version

from appforge.creator.identifiers import ProjectIdentifiers

DISTRIBUTION_NAME = "appforge"
FALLBACK_VERSION = "0.0.0.BUILD-SNAPSHOT"

TOKEN_DELIMITER = "@"


class VariableContext(Mapping[str, str]):
    """Ordered mapping from variable name to its resolved value."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = {}
        for key, value in (values or {}).items():
            if not key or TOKEN_DELIMITER in key:
                raise ValueError(f"Invalid variable name: {key!r}")
            self._values[key] = str(value)
        self._pattern: re.Pattern[str] | None = None

    # -- Mapping protocol --------------------------------------------------

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableContext({self._values!r})"

    # -- Substitution ------------------------------------------------------

    def with_values(self, extra: Mapping[str, str]) -> "VariableContext":
        """Return a new context with *extra* added after the existing keys."""
        return VariableContext({**self._values, **extra})

    def substitute(self, text: str) -> str:
        """Replace every ``@key@`` token for a known key in a single pass.

        Replacement values are never rescanned, so a value that itself
        contains a token is inserted literally.  Unknown ``@...@`` sequences
        are left untouched.
        """
        if not self._values or TOKEN_DELIMITER not in text:
            return text
        pattern = self._token_pattern()
        return pattern.sub(lambda m: self._values[m.group(1)], text)

    def _token_pattern(self) -> re.Pattern[str]:
        if self._pattern is None:
            # Longest keys first so "a.b.path" wins over "a.b".
            keys = sorted(self._values, key=len, reverse=True)
            alternation = "|".join(re.escape(k) for k in keys)
            self._pattern = re.compile(
                f"{re.escape(TOKEN_DELIMITER)}({alternation}){re.escape(TOKEN_DELIMITER)}"
            )
        return self._pattern


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def build_variables(
    identifiers: ProjectIdentifiers,
    profile_name: str,
    tool_version: str | None = None,
) -> VariableContext:
    """Assemble the variable map for a new project.

    Args:
        identifiers: Output of
            :func:`~appforge.creator.identifiers.derive_identifiers`.
        profile_name: Name of the profile the user selected.
        tool_version: Version string written into templates.  Defaults to
            :func:`resolve_tool_version`.
    """
    return VariableContext(
        {
            "APPNAME": identifiers.app_name,
            "appforge.codegen.defaultPackage": identifiers.group_name,
            "appforge.codegen.defaultPackage.path": identifiers.package_path,
            "appforge.codegen.projectClassName": identifiers.project_class_name,
            "appforge.codegen.projectNaturalName": identifiers.project_natural_name,
            "appforge.codegen.projectName": identifiers.project_script_name,
            "appforge.profile": profile_name,
            "appforge.version": tool_version or resolve_tool_version(),
            "appforge.app.name": identifiers.app_name,
            "appforge.app.group": identifiers.group_name,
        }
    )


def resolve_tool_version() -> str:
    """Return the installed AppForge version, or a placeholder snapshot."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return FALLBACK_VERSION
