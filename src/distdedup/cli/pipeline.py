"""Partition planning and duplicate detection commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from distdedup.entities.core import DedupError, Partitioning
from distdedup.pipeline.bruteforce.io import write_partitioning
from distdedup.pipeline.bruteforce.main import deduplicate_dataset
from distdedup.pipeline.bruteforce.partitioning import plan_partitioning

from .common import CLIError, console, existing_path, get_state, output_path, render_panel


app = typer.Typer(
    add_completion=False,
    help="Plan comparison partitionings and run parallel brute-force duplicate detection.",
    no_args_is_help=True,
)


def _partitioning_table(partitioning: Partitioning) -> Table:
    table = Table(title="Partitioning")
    table.add_column("Node", justify="right")
    table.add_column("First", justify="right")
    table.add_column("Last", justify="right")
    table.add_column("Records", justify="right")
    table.add_column("Comparisons", justify="right")
    for bucket, workload in zip(partitioning.buckets, partitioning.workloads()):
        table.add_row(
            str(bucket.node_id),
            str(bucket.first),
            str(bucket.last),
            str(len(bucket)),
            str(workload),
        )
    return table


def _plan_command(
    ctx: typer.Context,
    *,
    records: int = typer.Option(..., "--records", "-m", help="Number of records in the dataset."),
    nodes: Optional[int] = typer.Option(
        None,
        "--nodes",
        "-n",
        help="Number of simulated nodes; defaults to the configured value.",
        show_default=False,
    ),
    destination_path: Optional[Path] = typer.Option(
        None,
        "--output",
        help="Optional JSON destination for the partitioning.",
        show_default=False,
    ),
) -> None:
    state = get_state(ctx)
    node_count = nodes if nodes is not None else state.settings.policies.partitioning.nodes
    try:
        partitioning = plan_partitioning(records, node_count)
    except DedupError as exc:
        raise CLIError(str(exc)) from exc

    console.print(_partitioning_table(partitioning))
    console.print(f"Average comparisons per node: {partitioning.average_comparisons}")
    console.print(f"Buckets: {len(partitioning)} (requested nodes: {node_count})")
    if destination_path is not None:
        destination = write_partitioning(partitioning, output_path(destination_path))
        console.print(f"[green]Partitioning written[/green] -> {destination}")


def _run_command(
    ctx: typer.Context,
    dataset: Path = typer.Argument(..., help="Delimited dataset file with a header row."),
    *,
    nodes: Optional[int] = typer.Option(
        None,
        "--nodes",
        "-n",
        help="Number of simulated nodes; defaults to the configured value.",
        show_default=False,
    ),
    gold_standard: Optional[Path] = typer.Option(
        None,
        "--gold",
        "-g",
        help="Known duplicate pairs used to report precision and recall.",
        show_default=False,
    ),
    destination_path: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Destination TSV for duplicate pairs; defaults to <paths.output_dir>/<dataset>.duplicates.tsv.",
        show_default=False,
    ),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold",
        "-t",
        min=0.0,
        max=1.0,
        help="Override the configured similarity threshold.",
        show_default=False,
    ),
) -> None:
    state = get_state(ctx)
    dataset_resolved = existing_path(dataset)
    gold_resolved = existing_path(gold_standard) if gold_standard else None
    output_resolved = (
        output_path(destination_path)
        if destination_path is not None
        else state.settings.default_output_path(dataset_resolved)
    )
    if threshold is not None:
        state.settings.policies.similarity.threshold = threshold

    try:
        with console.status("Comparing all record pairs..."):
            result, evaluation = deduplicate_dataset(
                dataset_resolved,
                nodes=nodes,
                gold_standard_path=gold_resolved,
                output_path=output_resolved,
                settings=state.settings,
            )
    except DedupError as exc:
        raise CLIError(str(exc)) from exc

    if state.verbose:
        console.print(_partitioning_table(result.partitioning))
    render_panel("Run Summary", result.stats)
    if evaluation is not None:
        render_panel("Evaluation", evaluation.summary())
    console.print(f"[green]Duplicates found:[/green] {len(result.duplicates)}")
    console.print(f"Duplicates written -> {output_resolved}")


app.command("plan")(_plan_command)
app.command("run")(_run_command)
