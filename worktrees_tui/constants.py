"""Constants used across worktrees-tui.

Internal policy values (not user-configurable) live here; anything a user may
tune belongs in ``worktrees_tui.config.schema``.
"""

# Polling floors (milliseconds)
SYNC_COUNTERS_MIN_INTERVAL_MS = 2000  # ahead/behind + status are the costliest calls
SESSIONS_MIN_INTERVAL_MS = 1000

# Freshness windows (seconds)
PLUGIN_STATE_MAX_AGE_S = 120
TRANSCRIPT_MAX_AGE_S = 300

# Transcript summaries
SUMMARY_MAX_LENGTH = 50
SUMMARY_ELLIPSIS = "…"

# Pane geometry
PANE_MIN_WIDTH = 3
PANE_MIN_WIDTH_TOLERANCE = 2

# Branches always pinned to the top of the tree list
PINNED_BRANCHES = ("main", "master")

# Process signatures for the assistant
ASSISTANT_BINARIES = ("claude",)
ASSISTANT_PACKAGE_MARKERS = (
    "@anthropic-ai/claude-code",
    "claude-code/cli.js",
)

# Transcript markup that never counts as a real user message
COMMAND_ENVELOPE_MARKERS = (
    "<command-name>",
    "<command-message>",
    "<command-args>",
    "<local-command-stdout>",
    "<local-command-stderr>",
    "<local-command-caveat>",
)
CAVEAT_PREFIX = "Caveat:"
