"""worktrees-tui: tmux dashboard for git working trees and Claude Code sessions."""

__version__ = "0.3.0"
