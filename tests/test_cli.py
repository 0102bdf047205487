"""End-to-end smoke tests for the Typer-based distdedup CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from distdedup.cli.common import merge_overrides, parse_override
from distdedup.cli.main import app


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_env(tmp_path: Path) -> dict[str, str]:
    return {
        "DISTDEDUP_SETTINGS__PATHS__OUTPUT_DIR": str(tmp_path / "output"),
        "DISTDEDUP_SETTINGS__PATHS__LOGS_DIR": str(tmp_path / "logs"),
    }


@pytest.fixture()
def dataset(tmp_path: Path) -> Path:
    path = tmp_path / "records.tsv"
    path.write_text(
        "id\ttitle\tauthors\n"
        "1\tNear Duplicate Detection\tDoe, A.\n"
        "2\tStream Processing Systems\tRoe, B.\n"
        "3\tNear-Duplicate Detection\tDoe, A.\n",
        encoding="utf-8",
    )
    return path


def test_parse_override_builds_nested_mapping() -> None:
    assert parse_override("policies.partitioning.nodes=4") == {"policies": {"partitioning": {"nodes": 4}}}
    assert parse_override("environment=testing") == {"environment": "testing"}


def test_merge_overrides_is_deep() -> None:
    merged = merge_overrides(
        [
            parse_override("policies.partitioning.nodes=4"),
            parse_override("policies.similarity.threshold=0.5"),
        ]
    )

    assert merged == {"policies": {"partitioning": {"nodes": 4}, "similarity": {"threshold": 0.5}}}


def test_plan_command_prints_buckets(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["pipeline", "plan", "--records", "10", "--nodes", "3"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "Average comparisons per node: 15" in result.output
    assert "Buckets: 3" in result.output


def test_plan_command_uses_configured_nodes(runner: CliRunner, cli_env: dict[str, str], tmp_path: Path) -> None:
    output = tmp_path / "plan.json"

    result = runner.invoke(
        app,
        ["-o", "policies.partitioning.nodes=1", "pipeline", "plan", "-m", "5", "--output", str(output)],
        env=cli_env,
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["node_count"] == 1
    assert len(payload["buckets"]) == 1


def test_plan_command_rejects_zero_nodes(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["pipeline", "plan", "--records", "10", "--nodes", "0"], env=cli_env)

    assert result.exit_code != 0


def test_run_command_reports_duplicates(
    runner: CliRunner, cli_env: dict[str, str], dataset: Path, tmp_path: Path
) -> None:
    output = tmp_path / "out" / "dupes.tsv"

    result = runner.invoke(
        app,
        [
            "pipeline",
            "run",
            str(dataset),
            "--nodes",
            "2",
            "--threshold",
            "0.9",
            "--output",
            str(output),
        ],
        env=cli_env,
    )

    assert result.exit_code == 0, result.output
    assert "Duplicates found: 1" in result.output
    assert output.read_text(encoding="utf-8").splitlines() == ["id1\tid2", "1\t3"]


def test_run_command_missing_dataset(runner: CliRunner, cli_env: dict[str, str], tmp_path: Path) -> None:
    result = runner.invoke(app, ["pipeline", "run", str(tmp_path / "missing.tsv")], env=cli_env)

    assert result.exit_code != 0


def test_config_command_renders_settings(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(
        app,
        ["-o", "policies.partitioning.nodes=7", "manage", "config", "--format", "yaml"],
        env=cli_env,
    )

    assert result.exit_code == 0, result.output
    assert "nodes: 7" in result.output


def test_run_command_defaults_output_under_output_dir(
    runner: CliRunner, cli_env: dict[str, str], dataset: Path, tmp_path: Path
) -> None:
    result = runner.invoke(app, ["pipeline", "run", str(dataset), "-t", "0.9"], env=cli_env)

    assert result.exit_code == 0, result.output
    written = tmp_path / "output" / "records.duplicates.tsv"
    assert written.read_text(encoding="utf-8").splitlines() == ["id1\tid2", "1\t3"]
    assert written.with_suffix(".metadata.json").exists()


def test_plan_single_node_keeps_every_record_in_one_bucket(runner: CliRunner, cli_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["pipeline", "plan", "-m", "6", "-n", "1"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "Buckets: 1 (requested nodes: 1)" in result.output
