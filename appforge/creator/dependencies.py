"""Aggregate dependency and build-plugin declarations into build-file blocks.

The selected profile and every selected feature contribute dependencies and
plugins.  They are partitioned by scope, rendered to Gradle-style lines,
de-duplicated in first-seen order and joined into three text blocks that the
build descriptor patcher drops into the generated project.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict

from appforge.profiles.models import Dependency, Feature, Profile

DEPENDENCY_INDENT = "    "
BUILD_DEPENDENCY_INDENT = "        "
CLASSPATH_KEYWORD = "classpath"


class BuildBlocks(BaseModel):
    """Rendered text for the three build-descriptor tokens."""

    model_config = ConfigDict(frozen=True)

    dependencies: str = ""
    build_dependencies: str = ""
    build_plugins: str = ""


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_dependency(dep: Dependency) -> str:
    """``    compile "group:artifact:version"``."""
    return f'{DEPENDENCY_INDENT}{dep.scope} "{dep.coordinates}"'


def render_build_dependency(dep: Dependency) -> str:
    """``        classpath "group:artifact:version"``."""
    return f'{BUILD_DEPENDENCY_INDENT}{CLASSPATH_KEYWORD} "{dep.coordinates}"'


def render_plugin(name: str) -> str:
    return f'apply plugin:"{name}"'


def unique_in_order(lines: Iterable[str]) -> list[str]:
    """Drop exact duplicates, keeping the first occurrence of each line."""
    return list(dict.fromkeys(lines))


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def aggregate_dependencies(
    dependencies: Sequence[Dependency],
    build_plugins: Sequence[str],
    *,
    line_separator: str = "\n",
) -> BuildBlocks:
    """Partition, render and de-duplicate already-ordered declarations."""
    regular = unique_in_order(render_dependency(d) for d in dependencies if not d.is_build)
    build = unique_in_order(render_build_dependency(d) for d in dependencies if d.is_build)
    plugins = unique_in_order(render_plugin(name) for name in build_plugins)
    return BuildBlocks(
        dependencies=line_separator.join(regular),
        build_dependencies=line_separator.join(build),
        build_plugins=line_separator.join(plugins),
    )


def aggregate_build_blocks(
    profile: Profile,
    features: Sequence[Feature],
    *,
    line_separator: str = "\n",
) -> BuildBlocks:
    """Collect the profile's declarations followed by each feature's.

    Features contribute in selection order, after the profile.  Neither the
    profile nor the features are modified.
    """
    dependencies = list(profile.dependencies)
    plugins = list(profile.build_plugins)
    for feature in features:
        dependencies.extend(feature.dependencies)
        plugins.extend(feature.build_plugins)
    return aggregate_dependencies(dependencies, plugins, line_separator=line_separator)
