"""Input/output helpers for brute-force duplicate detection runs."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Callable, Dict, Iterable, List, TextIO, Tuple

import polars as pl

from distdedup.entities.core import (
    DEFAULT_ID_FIELD,
    ConfigurationError,
    DuplicatePair,
    Partitioning,
)
from distdedup.utils.helpers import ensure_directory
from distdedup.utils.logging import get_logger


_LOGGER = get_logger(module=__name__)


def load_records(
    path: str | Path,
    *,
    delimiter: str = "\t",
    id_field: str = DEFAULT_ID_FIELD,
) -> Tuple[Dict[str, Any], ...]:
    """Read a delimited file with a header row into an ordered record set.

    Every column is read as text; empty cells become ``None``. File order is
    the comparison order.
    """

    source = Path(path)
    frame = pl.read_csv(source, separator=delimiter, infer_schema_length=0)
    if id_field not in frame.columns:
        raise ConfigurationError(
            f"Dataset {source} has no identifier column '{id_field}'; columns: {', '.join(frame.columns)}"
        )
    records = tuple(frame.to_dicts())
    _LOGGER.info("Loaded records", path=str(source), count=len(records), columns=len(frame.columns))
    return records


def _atomic_write(destination: str | Path, writer: Callable[[TextIO], None]) -> Path:
    """Write using a temporary file before atomically replacing the destination."""

    path = Path(destination).expanduser()
    ensure_directory(path.parent)

    tmp_path: Path | None = None
    tmp_handle = NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        newline="",
    )
    try:
        tmp_path = Path(tmp_handle.name)
        try:
            writer(tmp_handle)
            tmp_handle.flush()
            os.fsync(tmp_handle.fileno())
        finally:
            tmp_handle.close()
        os.replace(tmp_path, path)
    except Exception:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except FileNotFoundError:  # pragma: no cover - race during cleanup
                pass
        raise
    return path


def write_duplicates(
    duplicates: Iterable[DuplicatePair],
    destination: str | Path,
    *,
    delimiter: str = "\t",
) -> Path:
    """Write duplicate pairs as ``id1<delim>id2`` rows in sorted order."""

    ordered: List[DuplicatePair] = sorted(duplicates)

    def _writer(handle: TextIO) -> None:
        handle.write(f"id1{delimiter}id2\n")
        for pair in ordered:
            handle.write(f"{pair.low_id}{delimiter}{pair.high_id}\n")

    return _atomic_write(destination, _writer)


def partitioning_payload(partitioning: Partitioning) -> Dict[str, Any]:
    """JSON-ready description of a partitioning."""

    return {
        "record_count": partitioning.record_count,
        "node_count": partitioning.node_count,
        "average_comparisons": partitioning.average_comparisons,
        "buckets": [
            {
                "node_id": bucket.node_id,
                "first_index": bucket.first,
                "last_index": bucket.last,
                "size": len(bucket),
                "comparisons": bucket.workload(partitioning.record_count),
            }
            for bucket in partitioning
        ],
    }


def write_partitioning(partitioning: Partitioning, destination: str | Path) -> Path:
    """Persist a partitioning summary to JSON."""

    payload = partitioning_payload(partitioning)

    def _writer(handle: TextIO) -> None:
        handle.write(json.dumps(payload, indent=2, sort_keys=True) + "\n")

    return _atomic_write(destination, _writer)


def generate_run_metadata(
    stats: Dict[str, Any],
    config_used: Dict[str, Any],
    evaluation: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """Create metadata payload describing a run."""

    payload: Dict[str, Any] = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "stats": stats,
        "config": config_used,
    }
    if evaluation is not None:
        payload["evaluation"] = evaluation
    return payload


def write_metadata(payload: Dict[str, Any], destination: str | Path) -> Path:
    """Write metadata payload to JSON."""

    def _writer(handle: TextIO) -> None:
        handle.write(json.dumps(payload, indent=2, sort_keys=True, default=str) + "\n")

    return _atomic_write(destination, _writer)


__all__ = [
    "load_records",
    "write_duplicates",
    "partitioning_payload",
    "write_partitioning",
    "generate_run_metadata",
    "write_metadata",
]
