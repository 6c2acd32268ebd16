"""Configuration models for pr-leaderboard."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    Field,
    NonNegativeInt,
    ValidationError,
    field_validator,
    model_validator,
)

from pr_leaderboard.exceptions import ConfigError

# GitHub search returns at most 100 items per page.
MAX_PAGE_SIZE = 100


def normalize_label(name: str) -> str:
    """Lowercase a label and strip all whitespace and hyphens."""
    return "".join(ch for ch in name.lower() if not ch.isspace() and ch != "-")


class ScoringConfig(BaseModel):
    """Label point table and the one-time bonus."""
    label_points: dict[str, NonNegativeInt] = Field(default_factory=lambda: {
        "level1": 3,
        "level2": 7,
        "level3": 10,
    })
    bonus_label: str = "postman"
    bonus_amount: int = Field(default=500, ge=0)

    @field_validator("label_points")
    @classmethod
    def _normalize_keys(cls, value: dict[str, int]) -> dict[str, int]:
        normalized: dict[str, int] = {}
        for label, points in value.items():
            key = normalize_label(label)
            if key in normalized:
                msg = f"label_points has more than one entry for {key!r} (from {label!r})"
                raise ValueError(msg)
            normalized[key] = points
        return normalized

    def points_for(self, label: str) -> int:
        """Points awarded for *label*; unmatched labels are worth 0."""
        return self.label_points.get(normalize_label(label), 0)

    def is_bonus_label(self, label: str) -> bool:
        return label.lower() == self.bonus_label.lower()


class SearchConfig(BaseModel):
    """Search query parameters."""
    identifying_labels: list[str] = Field(default_factory=lambda: [
        "gssoc25",
        "GSSoC'25",
        "gssoc 25",
    ])
    closed_from: date = date(2025, 7, 15)
    closed_to: date = date(2025, 10, 20)
    page_size: int = Field(default=MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @model_validator(mode="after")
    def _check_window(self) -> SearchConfig:
        if self.closed_from > self.closed_to:
            msg = f"closed_from {self.closed_from} is after closed_to {self.closed_to}"
            raise ValueError(msg)
        if not self.identifying_labels:
            raise ValueError("identifying_labels must not be empty")
        return self


class RateLimitConfig(BaseModel):
    """Fixed delays (seconds) that keep the run under the search rate limit."""
    request_delay: float = Field(default=1.0, ge=0.0)
    repo_delay: float = Field(default=3.0, ge=0.0)
    timeout: float = 30.0


class ProjectsConfig(BaseModel):
    """Where the participating project list comes from."""
    source: str = "./projects.json"
    link_field: str = "project_link"


class OutputConfig(BaseModel):
    """Leaderboard artifact settings."""
    path: str = "leaderboard.json"
    cutoff_note: str = "No new PRs merged after 20th Oct 2025 11:59 p.m will be counted"


class LeaderboardConfig(BaseModel):
    """Top-level configuration composing all sub-configs."""
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    projects: ProjectsConfig = Field(default_factory=ProjectsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    # An empty section (`search:` with no value) means defaults for that section.
    return {section: value for section, value in yaml_data.items() if value is not None}


def load_config(path: str | Path | None = None) -> LeaderboardConfig:
    """Load configuration from YAML file, environment variables, and defaults.

    Priority (highest to lowest):
    1. Environment variables (PR_LEADERBOARD_*)
    2. YAML config file
    3. Defaults
    """
    config_data: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if config_path.is_file():
            config_data = _read_yaml(config_path)
    else:
        for default_path in [".pr-leaderboard.yml", ".pr-leaderboard.yaml"]:
            p = Path(default_path)
            if p.is_file():
                config_data = _read_yaml(p)
                break

    env_mapping = {
        "PR_LEADERBOARD_REQUEST_DELAY": ("rate_limit", "request_delay", float),
        "PR_LEADERBOARD_REPO_DELAY": ("rate_limit", "repo_delay", float),
        "PR_LEADERBOARD_BONUS_AMOUNT": ("scoring", "bonus_amount", int),
        "PR_LEADERBOARD_PROJECTS": ("projects", "source", str),
        "PR_LEADERBOARD_OUTPUT": ("output", "path", str),
        "PR_LEADERBOARD_CLOSED_FROM": ("search", "closed_from", str),
        "PR_LEADERBOARD_CLOSED_TO": ("search", "closed_to", str),
    }

    for env_var, (section, key, type_fn) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            if config_data.get(section) is None:
                config_data[section] = {}
            elif not isinstance(config_data[section], dict):
                raise ConfigError(f"Config section {section!r} must be a mapping")
            try:
                config_data[section][key] = type_fn(value)
            except ValueError as exc:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}") from exc

    try:
        return LeaderboardConfig(**config_data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
