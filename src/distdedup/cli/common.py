"""State and rendering helpers shared by the CLI command modules."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping
from uuid import uuid4

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel

from distdedup.config.settings import Settings, merge_all, nested_from_path
from distdedup.utils.logging import get_logger

console = Console()
_LOGGER = get_logger(module=__name__)


class CLIError(RuntimeError):
    """User-facing failure rendered without a traceback."""


@dataclass(slots=True)
class CLIState:
    """Resolved settings and run identity stored on ``typer.Context.obj``."""

    settings: Settings
    run_id: str
    verbose: bool

    @property
    def environment(self) -> str:
        return self.settings.environment


def parse_override(argument: str) -> Dict[str, Any]:
    """Turn ``policies.partitioning.nodes=4`` into a nested mapping.

    Values are parsed as YAML scalars, the same way ``DISTDEDUP_SETTINGS__``
    variables are, so ``4`` becomes an int and ``[a, b]`` a list.
    """

    dotted, separator, raw = argument.partition("=")
    keys = [key.strip() for key in dotted.split(".") if key.strip()]
    if not separator or not keys:
        raise typer.BadParameter(f"Expected dotted.key=value, got '{argument}'")
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        value = raw
    return nested_from_path(keys, value)


def merge_overrides(overrides: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Combine parsed overrides; later arguments win on conflicting keys."""

    return merge_all(overrides)


def configure_state(
    ctx: typer.Context,
    *,
    environment: str | None,
    overrides: Iterable[Mapping[str, Any]],
    run_id: str | None,
    verbose: bool,
) -> CLIState:
    """Resolve settings for this invocation and attach them to *ctx*."""

    payload = merge_overrides(overrides)
    if environment:
        payload["environment"] = environment
    try:
        settings = Settings(**payload)
    except ValidationError as exc:
        _LOGGER.error("Invalid configuration", errors=exc.error_count())
        raise CLIError(f"Invalid configuration: {exc}") from exc

    state = CLIState(settings=settings, run_id=run_id or f"cli-{uuid4().hex[:8]}", verbose=verbose)
    ctx.obj = state
    return state


def get_state(ctx: typer.Context) -> CLIState:
    if not isinstance(ctx.obj, CLIState):
        raise CLIError("CLI context is not initialised")
    return ctx.obj


def render_panel(title: str, content: Mapping[str, Any]) -> None:
    console.print(Panel(JSON.from_data(content, default=str), title=title, border_style="cyan"))


def existing_path(path: str | Path) -> Path:
    """Resolve *path* and fail with a CLI error when it does not exist."""

    target = Path(path).expanduser().resolve()
    if not target.exists():
        raise CLIError(f"Path does not exist: {target}")
    return target


def output_path(path: str | Path) -> Path:
    return Path(path).expanduser().resolve()
