"""
Command-line interface for ai-changelog.

This module is responsible for argument parsing, building the run
configuration, and mapping failures to exit codes. The actual work is
delegated to the pipeline module.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import git_adapter
from .config import Config, load_config
from .errors import ChangelogError
from .hooks import install_pre_push_hook
from .logging_utils import configure_logging
from .pipeline import run_changelog

LOG = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-changelog",
        description=(
            "Describe the commits between a base branch and HEAD with a "
            "language model and write the result to a markdown changelog."
        ),
        epilog=(
            "Environment: GEMINI_API_KEY (required), GEMINI_MODEL, "
            "CHANGELOG_TICKET_URL, CHANGELOG_PLATFORM, CHANGELOG_AUTO_INCREMENT=0 "
            "to keep the current version, BREAKING_OK=1 to allow breaking changes."
        ),
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generated changelog without writing any files.",
    )
    parser.add_argument(
        "--base",
        metavar="REF",
        help="Base reference to compare HEAD against (skips branch selection).",
    )
    parser.add_argument(
        "--range",
        dest="range_",
        metavar="A..B",
        help="Explicit git range to describe.",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="PATH",
        help=(
            "Output file (default: .changelog-next.md). A file named "
            "CHANGELOG.md is updated in place."
        ),
    )
    parser.add_argument(
        "--no-fetch",
        dest="fetch",
        action="store_false",
        help="Do not fetch the remote before showing the branch selector.",
    )
    parser.add_argument(
        "--no-bump",
        dest="auto_increment",
        action="store_false",
        help=(
            "Reuse the newest version in the changelog instead of bumping "
            "its patch number (also CHANGELOG_AUTO_INCREMENT=0)."
        ),
    )
    parser.add_argument(
        "--install-hook",
        action="store_true",
        help="Install a git pre-push hook that runs ai-changelog, then exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be specified multiple times).",
    )

    return parser


def build_config(args: argparse.Namespace) -> Config:
    """
    Combine parsed arguments with repository metadata.
    """

    repo_root = git_adapter.get_repo_root() or "."
    remotes = git_adapter.list_remotes()
    remote = "origin" if "origin" in remotes or not remotes else remotes[0]
    remote_url = git_adapter.get_remote_url(remote) if remotes else ""

    return load_config(
        repo_root=Path(repo_root),
        remote_url=remote_url or None,
        remote=remote,
        range_=args.range_,
        base=args.base,
        output=args.output,
        dry_run=args.dry_run,
        fetch=args.fetch,
        verbosity=args.verbose,
        auto_increment=args.auto_increment,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    configure_logging(verbosity=args.verbose)

    try:
        config = build_config(args)
        if args.install_hook:
            hook = install_pre_push_hook(config.ai)
            print(f"Git pre-push hook installed: {hook}")
            print("Bypass with: git push --no-verify")
            return 0
        run_changelog(config)
    except KeyboardInterrupt:
        return 130
    except ChangelogError as exc:
        LOG.debug("Run failed", exc_info=True)
        print(f"ai-changelog: error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
