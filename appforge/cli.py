"""AppForge command-line entry point.

Usage::

    appforge create-app com.example.demo --profile web --features json,security
    appforge create-app --inplace
    appforge list-profiles --profiles-dir ./profiles
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from appforge.config import Config
from appforge.creator.command import CreateAppCommand, CreateAppRequest
from appforge.profiles.repository import FileSystemProfileRepository
from appforge.utils import console, print_warning


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appforge",
        description="AppForge -- create projects from inheritable profiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  appforge create-app my-app\n"
            "  appforge create-app com.example.my-app --profile web --features json\n"
            "  appforge create-app --inplace\n"
        ),
    )
    parser.add_argument(
        "--profiles-dir",
        default=None,
        help="Directory containing profiles (default: $APPFORGE_PROFILES_DIR or ./profiles)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser(CreateAppCommand.NAME, help="Creates an application")
    create.add_argument(
        "name",
        nargs="?",
        default=None,
        help="The name of the application to create, optionally prefixed by its group",
    )
    create.add_argument(
        "--inplace",
        action="store_true",
        help="Create the application in the current directory",
    )
    create.add_argument("--profile", default=None, help="The profile to use")
    create.add_argument("--features", default=None, help="Comma-separated features to use")
    create.add_argument(
        "--verbose", "-v", action="store_true", help="Print the resolved template variables"
    )

    subparsers.add_parser("list-profiles", help="Lists the available profiles")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``appforge`` and ``python -m appforge``."""
    args = build_parser().parse_args(argv)

    config = Config.from_env()
    if args.profiles_dir:
        config = config.model_copy(update={"profiles_dir": Path(args.profiles_dir)})
    repository = FileSystemProfileRepository(config.profiles_dir, config.archive_root)

    if args.command == "list-profiles":
        names = repository.list_profile_names()
        if not names:
            print_warning(f"No profiles found in {config.profiles_dir}")
        for name in names:
            console.print(name, markup=False)
        return

    request = CreateAppRequest(
        app_name=args.name,
        in_place=args.inplace,
        profile=args.profile,
        features=args.features,
        verbose=args.verbose,
    )
    command = CreateAppCommand(config, repository)
    if not command.handle(request):
        sys.exit(1)


if __name__ == "__main__":
    main()
