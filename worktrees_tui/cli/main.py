"""worktrees-tui command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from worktrees_tui import __version__
from worktrees_tui.config import DashboardConfig, load_dashboard_config
from worktrees_tui.core.errors import HostEnvironmentError
from worktrees_tui.core.tmux_panes import require_tmux
from worktrees_tui.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="worktrees-tui",
        description="Dashboard for git working trees and Claude Code sessions in tmux",
    )
    parser.add_argument("--root", default=None, help="Repository whose working trees are listed (default: .)")
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        metavar="MS",
        help="Base refresh interval in milliseconds; 0 disables periodic polling",
    )
    parser.add_argument("--sort", choices=("recent", "branch"), default=None, help="Initial sort mode")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yml")
    parser.add_argument("--log-level", default=None, help="Log level (default: WORKTREES_TUI_LOG_LEVEL or INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> DashboardConfig:
    return load_dashboard_config(
        args.config,
        root=args.root,
        refresh_interval_ms=args.interval,
        sort_mode=args.sort,
    )


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)

    try:
        require_tmux()
    except HostEnvironmentError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    log_path = setup_logging(args.log_level)

    try:
        config = resolve_config(args)
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        sys.exit(1)

    logger.info("Starting worktrees-tui %s (root=%s, log=%s)", __version__, config.root, log_path)

    # Textual is imported late so --help and the tmux check stay fast.
    from worktrees_tui.cli.tui.app import DashboardApp

    DashboardApp.from_config(config).run()


if __name__ == "__main__":
    main()
