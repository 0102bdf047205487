"""Entry points for the parallel brute-force duplicate detection pipeline."""

from __future__ import annotations

import argparse
from pathlib import Path

from distdedup.config.settings import Settings, get_settings
from distdedup.evaluation.evaluator import Evaluation, Evaluator
from distdedup.oracles.base import SimilarityOracle
from distdedup.oracles.fields import FieldSimilarityOracle
from distdedup.utils.logging import get_logger, log_timing, logging_context

from .coordinator import BruteForceResult, ParallelBruteForce
from .io import (
    generate_run_metadata,
    load_records,
    write_duplicates,
    write_metadata,
    write_partitioning,
)


_LOGGER = get_logger(module=__name__)


def _cleanup_outputs(paths: list[tuple[Path, str]]) -> None:
    """Remove partially written outputs when a downstream step fails."""

    for output_path, label in paths:
        try:
            output_path.unlink()
        except FileNotFoundError:
            continue
        except OSError as cleanup_err:
            _LOGGER.warning(
                "Failed to clean up output after error",
                target=label,
                destination=str(output_path),
                error=str(cleanup_err),
            )


def deduplicate_dataset(
    dataset_path: str | Path,
    *,
    nodes: int | None = None,
    gold_standard_path: str | Path | None = None,
    output_path: str | Path | None = None,
    oracle: SimilarityOracle | None = None,
    settings: Settings | None = None,
) -> tuple[BruteForceResult, Evaluation | None]:
    """Load a dataset, find all duplicates across simulated nodes and report them.

    When ``output_path`` is given the duplicate pairs are written there as TSV,
    alongside ``.partitioning.json`` and ``.metadata.json`` siblings.
    """

    cfg = settings or get_settings()
    policies = cfg.policies
    with log_timing("load_records", logger_=_LOGGER):
        records = load_records(
            dataset_path,
            delimiter=policies.dataset.delimiter,
            id_field=policies.dataset.id_field,
        )
    resolved_oracle = oracle or FieldSimilarityOracle.from_policies(
        policies.dataset, policies.similarity
    )

    coordinator = ParallelBruteForce.from_settings(
        records, resolved_oracle, settings=cfg, nodes=nodes
    )
    with logging_context(run_id=Path(dataset_path).stem):
        result = coordinator.process()

    evaluation: Evaluation | None = None
    if gold_standard_path is not None:
        evaluator = Evaluator.from_file(gold_standard_path, policy=policies.evaluation)
        evaluation = evaluator.evaluate(result.duplicates)

    if output_path is None:
        return result, evaluation

    destination = Path(output_path).expanduser().resolve()
    partitioning_target = destination.with_suffix(".partitioning.json")
    metadata_target = destination.with_suffix(".metadata.json")
    written: list[tuple[Path, str]] = []
    try:
        written.append((write_duplicates(result.duplicates, destination), "duplicates"))
        written.append((write_partitioning(result.partitioning, partitioning_target), "partitioning"))
        config_snapshot = {
            "policy_version": policies.policy_version,
            "partitioning": policies.partitioning.model_dump(mode="json"),
            "execution": policies.execution.model_dump(mode="json"),
            "similarity": policies.similarity.model_dump(mode="json"),
            "oracle": repr(resolved_oracle),
        }
        metadata = generate_run_metadata(
            result.stats,
            config_snapshot,
            evaluation.summary() if evaluation is not None else None,
        )
        written.append((write_metadata(metadata, metadata_target), "metadata"))
    except OSError as exc:
        _LOGGER.exception(
            "Failed to write run outputs",
            destination=str(destination),
            error=str(exc),
        )
        _cleanup_outputs(written)
        raise

    _LOGGER.info(
        "Run outputs written",
        duplicates_path=str(destination),
        partitioning_path=str(partitioning_target),
        metadata_path=str(metadata_target),
    )
    return result, evaluation


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run parallel brute-force duplicate detection.")
    parser.add_argument("dataset", help="Delimited dataset file with a header row")
    parser.add_argument("--nodes", "-n", type=int, default=None, help="Number of simulated nodes")
    parser.add_argument("--gold-standard", dest="gold_standard", help="Known duplicate pairs file")
    parser.add_argument("--output", dest="output", help="Destination TSV for duplicate pairs")
    return parser


def main(argv: list[str] | None = None) -> None:  # pragma: no cover - CLI adaptor
    parser = _build_parser()
    args = parser.parse_args(argv)
    deduplicate_dataset(
        args.dataset,
        nodes=args.nodes,
        gold_standard_path=args.gold_standard,
        output_path=args.output,
    )


__all__ = ["deduplicate_dataset", "main"]
