"""Configuration inspection commands."""

from __future__ import annotations

import typer
import yaml

from .common import CLIError, console, get_state, render_panel


app = typer.Typer(
    add_completion=False,
    help="Inspect the resolved configuration.",
    no_args_is_help=True,
)


def _config_command(
    ctx: typer.Context,
    *,
    output_format: str = typer.Option("json", "--format", "-f", help="Output format (json or yaml)."),
) -> None:
    state = get_state(ctx)
    payload = state.settings.model_dump(mode="json")
    if output_format == "json":
        render_panel("Resolved Settings", payload)
    elif output_format == "yaml":
        console.print(yaml.safe_dump(payload, sort_keys=False))
    else:
        raise CLIError("--format must be either 'json' or 'yaml'")


app.command("config")(_config_command)
