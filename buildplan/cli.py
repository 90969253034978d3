"""Command-line entry point: print the build plan for a directory as JSON."""

import argparse
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from buildplan import __version__
from buildplan.core.config import Settings
from buildplan.core.logging import configure_structlog
from buildplan.core.update_check import RELEASES_URL, check_for_update
from buildplan.detector import Detector, ManifestError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildplan",
        description="Detect how to install, build and run a project.",
    )
    parser.add_argument("path", nargs="?", default=".", help="project directory (default: .)")
    parser.add_argument("--debug", action="store_true", help="verbose logging to stderr")
    parser.add_argument(
        "--no-update-check",
        action="store_true",
        help="skip checking for a newer buildplan release",
    )
    parser.add_argument("--version", action="version", version=f"buildplan {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_structlog(debug=args.debug)

    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    try:
        plan = Detector(args.path, env=settings.to_env()).detect()
    except ManifestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if plan is None:
        print(f"No supported project detected in {args.path}", file=sys.stderr)
        return 1

    print(plan.to_json(indent=2))

    if not args.no_update_check:
        latest = check_for_update(f"v{__version__}")
        if latest:
            print(
                f"A new version of buildplan is available: {latest} (current: v{__version__})\n"
                f"Download: {RELEASES_URL}",
                file=sys.stderr,
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
