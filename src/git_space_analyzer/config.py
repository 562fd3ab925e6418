"""Configuration management for Git Space Analyzer."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_BYTES = 1024 * 1024
DEFAULT_MAX_RESULTS = 100
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024


class AnalysisConfig(BaseModel):
    """Immutable settings for one analysis run.

    Built once at the boundary (CLI or embedding caller) and handed by
    value to every component.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    threshold: int = Field(
        default=DEFAULT_THRESHOLD_BYTES,
        ge=0,
        description="Minimum blob size in bytes (inclusive)",
    )
    max_results: int = Field(
        default=DEFAULT_MAX_RESULTS,
        ge=1,
        description="Maximum number of large files to report",
    )
    include_branches: Optional[List[str]] = Field(
        default=None,
        description="Branches to summarize (None means all branches)",
    )
    # Accepted for interface compatibility; not applied to the blob scan
    exclude_patterns: List[str] = Field(
        default=[".git/**", "node_modules/**"],
        description="Glob patterns of paths to exclude",
    )
    analyze_history: bool = Field(
        default=True, description="Include historical analysis"
    )
    max_output_bytes: int = Field(
        default=DEFAULT_MAX_OUTPUT_BYTES,
        gt=0,
        description="Maximum output retained from a single git query",
    )
    git_timeout: Optional[float] = Field(
        default=None, gt=0, description="Timeout in seconds for each git call"
    )
    remote_name: str = Field(
        default="origin",
        min_length=1,
        description="Remote whose HEAD names the primary branch",
    )

    @field_validator("include_branches", "exclude_patterns", mode="before")
    @classmethod
    def split_comma_lists(cls, v: Any) -> Any:
        """Accept comma-separated strings and drop blank entries."""
        if v is None:
            return v
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, (list, tuple)):
            return [str(item).strip() for item in v if str(item).strip()]
        return v

    @field_validator("include_branches")
    @classmethod
    def empty_branch_list_means_all(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return v or None

    @property
    def remote_prefix(self) -> str:
        return f"{self.remote_name}/"


class ConfigManager:
    """Loads analysis settings from a repository and merges overrides."""

    CONFIG_FILENAME = ".git-space-analyzer.json"

    def __init__(self, repository_path: Path):
        self.repository_path = Path(repository_path)
        self.config_path = self.repository_path / self.CONFIG_FILENAME

    def _load_file(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load config from {self.config_path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {self.config_path} must contain a JSON object"
            )
        logger.debug(f"Loaded configuration file {self.config_path}")
        return data

    def load(
        self, defaults: Optional[Dict[str, Any]] = None, **overrides: Any
    ) -> AnalysisConfig:
        """Build the effective configuration.

        Precedence is model defaults, then the caller's defaults, then the
        repository config file, then the given overrides. Overrides whose
        value is None are ignored.

        Raises:
            ConfigurationError: If the file or the merged values are invalid
        """
        data: Dict[str, Any] = dict(defaults or {})
        data.update(self._load_file())
        data.update({key: value for key, value in overrides.items() if value is not None})

        try:
            return AnalysisConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid analysis configuration: {e}") from e
