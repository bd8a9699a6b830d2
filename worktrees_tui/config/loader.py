import logging
import os
from pathlib import Path
from typing import Any, Optional, Type, TypeVar

import yaml
from pydantic import BaseModel

from worktrees_tui.config.schema import DashboardConfig
from worktrees_tui.paths import DEFAULT_CONFIG_PATH

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand ``$VAR`` and ``~`` in string values."""
    if isinstance(value, str):
        return os.path.expanduser(os.path.expandvars(value))
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    return value


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))

    for field_name in type(model).model_fields:
        field_value = getattr(model, field_name)
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)


def load_config(path: Path, model_class: Type[T]) -> T:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to the YAML file.
        model_class: The Pydantic model class to use for validation.

    Returns:
        The validated configuration model (defaults when the file is missing
        or unreadable).
    """
    if not path.exists():
        return model_class()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to read config file %s: %s", path, e)
        return model_class()

    if not isinstance(raw, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return model_class()

    model = model_class.model_validate(_expand_env_vars(raw))
    _warn_unknown_keys(model, "root", path)
    return model


def load_dashboard_config(path: Optional[Path] = None, **overrides: Any) -> DashboardConfig:
    """Load the dashboard config and apply CLI overrides (``None`` values are ignored)."""
    config = load_config(path or DEFAULT_CONFIG_PATH, DashboardConfig)
    update = {key: value for key, value in overrides.items() if value is not None}
    if not update:
        return config
    # Re-validate so overrides go through the same field constraints.
    return DashboardConfig.model_validate({**config.model_dump(), **update})
