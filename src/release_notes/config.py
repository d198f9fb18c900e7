"""Runtime configuration for the release notes generator.

Settings come from three places, in increasing order of precedence:
1. Defaults declared on NotesConfig
2. An optional YAML file (``--config``)
3. Command-line flags

The GitHub token additionally falls back to the GITHUB_TOKEN environment
variable, so unauthenticated runs (limited to 60 requests an hour) only
happen when nothing provides one.

Example YAML:

    manifest_path: go/go.mod
    exclusion_marker: "[no-release-notes]"
    dependencies:
      - dolthub/go-mysql-server
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

DEFAULT_EXCLUSION_MARKER = "[no-release-notes]"


class NotesConfig(BaseModel):
    """Validated settings for one run."""

    token: str = Field(default_factory=lambda: os.environ.get("GITHUB_TOKEN", ""))
    api_url: str = "https://api.github.com"
    per_page: int = Field(100, ge=1, le=100)
    timeout: float = Field(30.0, gt=0)
    exclusion_marker: str = Field(DEFAULT_EXCLUSION_MARKER, min_length=1)
    manifest_path: str = "go/go.mod"
    workdir: Path = Path(".")
    clone_url: str = "git@github.com:{repo}.git"
    dependencies: list[str] = Field(default_factory=list)

    def with_overrides(self, **overrides: Any) -> NotesConfig:
        """Return a copy with every non-empty override applied."""
        update = {k: v for k, v in overrides.items() if v not in (None, "", [])}
        if not update:
            return self
        return self.model_validate({**self.model_dump(), **update})


def load_config(path: str | Path | None) -> NotesConfig:
    """Load and validate a YAML config file.

    Args:
        path: Path to the YAML file, or None for defaults only.

    Returns:
        A validated NotesConfig. Returns defaults if the file doesn't exist.

    Raises:
        ValueError: If the YAML content is invalid or fails validation.
    """
    if path is None:
        return NotesConfig()

    config_path = Path(path)
    if not config_path.exists():
        return NotesConfig()

    try:
        raw = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: expected a mapping")

    try:
        return NotesConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid config in {path}: {exc}") from exc
