from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from worktrees_tui.constants import ASSISTANT_BINARIES, PANE_MIN_WIDTH
from worktrees_tui.paths import DEFAULT_PLUGIN_STATE_DIR, DEFAULT_PROJECTS_DIR


class HooksConfig(BaseModel):
    """Shell commands run around worktree creation/removal."""

    model_config = ConfigDict(extra="allow", frozen=True)
    before_add: Optional[str] = None
    after_add: Optional[str] = None
    before_remove: Optional[str] = None
    after_remove: Optional[str] = None


class DashboardConfig(BaseModel):
    """Resolved dashboard configuration.

    Built once at startup (YAML file merged with CLI flags) and passed by
    reference into every engine component.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    root: str = "."
    refresh_interval_ms: int = Field(default=1000, ge=0)
    sort_mode: Literal["recent", "branch"] = "recent"
    flash_interval_ms: int = Field(default=500, gt=0)
    flash_duration_ms: int = Field(default=10000, ge=0)  # 0 = flash forever
    pane_min_width: int = Field(default=PANE_MIN_WIDTH, ge=1)
    assistant_binaries: tuple[str, ...] = ASSISTANT_BINARIES
    state_dir: str = str(DEFAULT_PLUGIN_STATE_DIR)
    projects_dir: str = str(DEFAULT_PROJECTS_DIR)
    tmux_binary: str = "tmux"
    hooks: HooksConfig = HooksConfig()

    @field_validator("assistant_binaries")
    @classmethod
    def validate_binaries(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(name.strip() for name in v if name and name.strip())
        if not cleaned:
            raise ValueError("assistant_binaries must name at least one binary")
        return cleaned
