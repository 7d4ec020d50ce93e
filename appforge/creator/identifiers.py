"""Derive an application's name, package and naming variants.

The user supplies at most one free-text token (``my-app`` or
``com.example.my-app``) plus an in-place flag.  From that we work out the
application name, its group/package, and the class-, natural- and
script-style spellings used inside skeleton templates.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from appforge.errors import InvalidPackageName, MissingTarget


class ProjectIdentifiers(BaseModel):
    """Every name derived from the user's application-name token."""

    model_config = ConfigDict(frozen=True)

    app_name: str
    group_name: str
    project_class_name: str
    project_natural_name: str
    project_script_name: str

    @property
    def package_path(self) -> str:
        """The group package as a ``/``-delimited directory path."""
        return self.group_name.replace(".", "/")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def derive_identifiers(
    token: str | None,
    *,
    in_place: bool = False,
    current_dir_name: str | None = None,
) -> ProjectIdentifiers:
    """Work out the application and package names for ``create-app``.

    Args:
        token: The raw application-name argument, optionally dotted
            (``"group.app"``).  May be ``None`` when *in_place* is set.
        in_place: Create the application in the current directory.
        current_dir_name: Name of the current directory; required when
            *in_place* is set.

    Returns:
        The derived :class:`ProjectIdentifiers`.

    Raises:
        MissingTarget: If no token is given and *in_place* is not set.
        InvalidPackageName: If the derived or supplied package is not a legal
            dotted identifier.
    """
    token = (token or "").strip() or None

    if in_place:
        if not current_dir_name:
            raise MissingTarget()
        app_name = current_dir_name
        if token:
            group_name = _require_valid_package(app_name, token)
        else:
            group_name = create_valid_package_name(app_name)
    else:
        if token is None:
            raise MissingTarget()
        parts = token.split(".")
        if len(parts) == 1:
            app_name = token
            group_name = create_valid_package_name(app_name)
        else:
            app_name = parts[-1]
            if not app_name:
                raise MissingTarget()
            group_name = _require_valid_package(app_name, ".".join(parts[:-1]))

    class_name = class_name_from_script(app_name)
    natural_name = natural_name_of(class_name)
    return ProjectIdentifiers(
        app_name=app_name,
        group_name=group_name,
        project_class_name=class_name,
        project_natural_name=natural_name,
        project_script_name=script_name_of(class_name),
    )


def create_valid_package_name(app_name: str) -> str:
    """Derive a dotted package from an application name.

    The name is split on runs of ``-``; each segment is lower-cased and
    stripped of characters that cannot appear in an identifier, and the
    segments are joined with ``.``.

    Examples::

        create_valid_package_name("foo-bar")  -> "foo.bar"
        create_valid_package_name("FooBar")   -> "foobar"

    Raises:
        InvalidPackageName: If the result is not a legal package.
    """
    segments = re.split(r"-+", app_name)
    # Trailing empty segments are dropped, leading ones are kept (and fail).
    while len(segments) > 1 and not segments[-1]:
        segments.pop()
    cleaned = [
        "".join(ch for ch in segment.lower() if _is_identifier_part(ch))
        for segment in segments
    ]
    package = ".".join(cleaned)
    if not is_valid_package(package):
        raise InvalidPackageName(app_name, package)
    return package


def is_valid_package(name: str) -> bool:
    """Return ``True`` if *name* is a legal dotted package identifier."""
    if not name or not name.strip():
        return False
    return all(is_valid_identifier(part) for part in name.split("."))


def is_valid_identifier(name: str) -> bool:
    if not name:
        return False
    if not _is_identifier_start(name[0]):
        return False
    return all(_is_identifier_part(ch) for ch in name)


# ---------------------------------------------------------------------------
# Naming variants
# ---------------------------------------------------------------------------


def class_name_from_script(name: str) -> str:
    """``foo-bar`` -> ``FooBar``; ``fooBar`` -> ``FooBar``."""
    if not name:
        return name
    if "-" not in name:
        return name[0].upper() + name[1:]
    return "".join(tok[0].upper() + tok[1:] for tok in name.split("-") if tok)


def natural_name_of(name: str) -> str:
    """Split a camel-case name into capitalised words.

    Examples::

        natural_name_of("FooBar")     -> "Foo Bar"
        natural_name_of("URLHelper")  -> "URL Helper"
    """
    if not name:
        return name
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", " ", name)
    words = spaced.split()
    return " ".join(w[0].upper() + w[1:] for w in words)


def script_name_of(name: str) -> str:
    """``FooBar`` -> ``foo-bar``."""
    return re.sub(r"\s+", "-", natural_name_of(name)).lower()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


def _require_valid_package(app_name: str, package: str) -> str:
    if not is_valid_package(package):
        raise InvalidPackageName(app_name, package)
    return package
