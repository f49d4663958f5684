"""Render settings loaded from pipegen.yaml"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_NAME = "pipegen.yaml"


class RenderSettings(BaseModel):
    """Settings shared by the renderer and the formatter"""

    indent_spaces: int = Field(default=4, ge=0)
    build_retention: int = Field(default=200, ge=1)  # rendered as numToKeepStr
    disable_concurrent_builds: bool = True
    format: bool = True

    model_config = {"extra": "ignore"}

    @classmethod
    def load(cls, path: Path | str | None) -> "RenderSettings":
        """Load settings from yaml file, defaults when the file is missing"""
        if path is None:
            return cls()
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        # settings may live at the top level or under a "render" key
        if isinstance(data, dict) and isinstance(data.get("render"), dict):
            data = data["render"]
        return cls.model_validate(data)
