"""Engine exceptions.

Almost nothing in the engine raises: external-tool failures degrade to empty
results. The exceptions here cover conditions that must stop startup.
"""


class HostEnvironmentError(RuntimeError):
    """Required host environment is missing (e.g. not running inside tmux)."""
