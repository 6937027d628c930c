"""CLI settings for pacscan.

Optional YAML settings supply defaults for the command line:

    # .pacscan/settings.yaml
    include_parents: true

Scope priority (most specific wins):
1. project (./.pacscan/settings.yaml)
2. global (~/.pacscan/settings.yaml)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

logger = logging.getLogger(__name__)


class PacscanSettings(BaseModel):
    """Validated settings. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    include_parents: bool = Field(False, description="Climb to the outermost owning package before scanning")


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        return cls(
            global_settings=Path.home() / ".pacscan" / "settings.yaml",
            project_settings=Path.cwd() / ".pacscan" / "settings.yaml",
        )


def load_settings(paths: SettingsPaths | None = None) -> PacscanSettings:
    """Load and merge settings from all scopes.

    Raises:
        yaml.YAMLError: If a settings file is not valid YAML
        pydantic.ValidationError: If the merged settings are invalid
    """
    paths = paths or SettingsPaths.default()
    merged: dict[str, Any] = {}

    for path in [paths.global_settings, paths.project_settings]:
        if not path.exists():
            continue
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
        logger.debug(f"Loaded settings from {path}")
        merged.update(content)

    return PacscanSettings.model_validate(merged)
