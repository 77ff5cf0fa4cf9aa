"""Shared CLI flags (--project-root, --config, --debug, -v) and logging setup."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from nostr_bindings_tooling.config import BuildContext, make_context


def path_resolver(s: str) -> Path:
    """Resolve a path argument to an absolute Path."""
    return Path(s).resolve()


def add_common_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument(
        "--project-root",
        type=path_resolver,
        default=Path.cwd(),
        help="Workspace root holding Cargo.toml and bindings/ (default: cwd)",
    )
    ap.add_argument(
        "--config",
        type=path_resolver,
        default=None,
        help="Layout YAML (default: <project-root>/nostr-bindings.yaml if present)",
    )
    ap.add_argument("--debug", action="store_true", help="Debug profile instead of release")
    ap.add_argument(
        "-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug logs"
    )


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def context_from_args(args: argparse.Namespace) -> BuildContext:
    return make_context(args.project_root, config_path=args.config, release=not args.debug)
