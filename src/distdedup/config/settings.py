"""Layered run configuration for duplicate detection.

Sources, lowest precedence first:

1. ``config/default.yaml``
2. ``config/<environment>.yaml``
3. ``DISTDEDUP_SETTINGS__SECTION__KEY=value`` variables (values parsed as YAML)
4. ``DISTDEDUP_*`` variables for top-level fields
5. keyword arguments, e.g. CLI ``--override`` values
"""

from __future__ import annotations

import os
from functools import lru_cache, reduce
from pathlib import Path
from typing import Any, Dict, Iterable, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .policies import Policies

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"
ENV_OVERRIDE_PREFIX = "DISTDEDUP_SETTINGS__"


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Return *base* updated with *override*, merging nested mappings key by key."""

    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def merge_all(layers: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    return reduce(deep_merge, layers, {})


def nested_from_path(path: Iterable[str], value: Any) -> Dict[str, Any]:
    """Build ``{"a": {"b": value}}`` from ``["a", "b"]``."""

    nested = value
    for key in reversed(list(path)):
        nested = {key: nested}
    return nested


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _env_layer(environ: Mapping[str, str]) -> Dict[str, Any]:
    layers = [
        nested_from_path(key[len(ENV_OVERRIDE_PREFIX):].lower().split("__"), yaml.safe_load(raw))
        for key, raw in sorted(environ.items())
        if key.startswith(ENV_OVERRIDE_PREFIX)
    ]
    return merge_all(layers)


def load_layered_config(config_dir: Path, environment: str) -> Dict[str, Any]:
    """Combine the YAML files and environment overrides for *environment*."""

    return merge_all(
        [
            _read_yaml(config_dir / "default.yaml"),
            _read_yaml(config_dir / f"{environment}.yaml"),
            _env_layer(os.environ),
        ]
    )


class PathsConfig(BaseModel):
    """Where run outputs and log files go; relative paths anchor at the project root."""

    output_dir: Path = Field(default=Path("output"))
    logs_dir: Path = Field(default=Path("logs"))

    @field_validator("output_dir", "logs_dir")
    @classmethod
    def _anchor(cls, value: Path) -> Path:
        value = value.expanduser()
        return value if value.is_absolute() else PROJECT_ROOT / value


class Settings(BaseSettings):
    """Resolved configuration for one invocation."""

    model_config = SettingsConfigDict(
        env_prefix="DISTDEDUP_",
        validate_assignment=True,
        extra="ignore",
    )

    environment: Literal["development", "testing", "production"] = "development"
    config_dir: Path = DEFAULT_CONFIG_DIR
    paths: PathsConfig = Field(default_factory=PathsConfig)
    policies: Policies = Field(default_factory=Policies)

    @model_validator(mode="before")
    @classmethod
    def _layer_sources(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        explicit = {key: value for key, value in values.items() if value is not None}
        for key, value in explicit.items():
            if isinstance(value, BaseModel):
                explicit[key] = value.model_dump()
        environment = explicit.get("environment") or os.getenv("DISTDEDUP_ENV", "development")
        config_dir = Path(explicit.get("config_dir") or DEFAULT_CONFIG_DIR)
        layered = load_layered_config(config_dir, environment)
        return deep_merge(layered, {**explicit, "environment": environment})

    @property
    def policy_version(self) -> str:
        return self.policies.policy_version

    @property
    def log_file(self) -> Path:
        return self.paths.logs_dir / "distdedup.log"

    def default_output_path(self, dataset: str | Path) -> Path:
        """Duplicate pairs file used when a run names no explicit destination."""

        return self.paths.output_dir / f"{Path(dataset).stem}.duplicates.tsv"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""

    return Settings()


__all__ = [
    "Settings",
    "PathsConfig",
    "get_settings",
    "deep_merge",
    "merge_all",
    "nested_from_path",
    "load_layered_config",
]
