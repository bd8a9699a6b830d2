"""Dashboard configuration.

The config is loaded once by the CLI and handed to each component explicitly:

    config = load_dashboard_config(path, refresh_interval_ms=500)
    app = DashboardApp.from_config(config)
"""

from worktrees_tui.config.loader import load_config, load_dashboard_config
from worktrees_tui.config.schema import DashboardConfig, HooksConfig

__all__ = ["DashboardConfig", "HooksConfig", "load_config", "load_dashboard_config"]
