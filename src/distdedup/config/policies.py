"""Policy configuration primitives for brute-force duplicate detection."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping

from pydantic import BaseModel, Field, model_validator


class PartitioningPolicy(BaseModel):
    """How the comparison workload is split across simulated nodes."""

    nodes: int = Field(
        default=16,
        ge=1,
        description="Target number of nodes the triangular comparison space is spread across.",
    )


class ExecutionPolicy(BaseModel):
    """Controls for the concurrent fan-out of node workers."""

    executor: Literal["thread", "process"] = Field(
        default="thread",
        description="Pool type used to run node workers; process pools require picklable oracles.",
    )
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Upper bound on concurrently running workers. None runs one slot per bucket.",
    )


class DatasetPolicy(BaseModel):
    """Layout of the delimited dataset file."""

    id_field: str = Field(default="id", min_length=1)
    delimiter: str = Field(default="\t", min_length=1, max_length=1)
    compared_fields: List[str] = Field(
        default_factory=lambda: ["title", "authors"],
        description="Record fields fed to the reference similarity oracle.",
    )


class SimilarityPolicy(BaseModel):
    """Reference oracle scoring parameters."""

    threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    method: Literal["jaro_winkler", "token_jaccard"] = Field(default="jaro_winkler")
    weights: Dict[str, float] = Field(
        default_factory=dict,
        description="Per-field weights; fields without an entry weigh 1.0.",
    )

    @model_validator(mode="after")
    def _validate_weights(self) -> "SimilarityPolicy":
        negative = sorted(field for field, weight in self.weights.items() if weight < 0.0)
        if negative:
            raise ValueError(f"similarity weights must be non-negative: {', '.join(negative)}")
        return self


class EvaluationPolicy(BaseModel):
    """Layout of the gold standard file of known duplicate pairs."""

    delimiter: str = Field(default="\t", min_length=1, max_length=1)
    left_column: str = Field(default="id1", min_length=1)
    right_column: str = Field(default="id2", min_length=1)


class Policies(BaseModel):
    """Root policy container."""

    policy_version: str = Field(default="2024-06-01")
    partitioning: PartitioningPolicy = Field(default_factory=PartitioningPolicy)
    execution: ExecutionPolicy = Field(default_factory=ExecutionPolicy)
    dataset: DatasetPolicy = Field(default_factory=DatasetPolicy)
    similarity: SimilarityPolicy = Field(default_factory=SimilarityPolicy)
    evaluation: EvaluationPolicy = Field(default_factory=EvaluationPolicy)


def load_policies(data: Mapping[str, Any] | None) -> Policies:
    """Validate a raw mapping into :class:`Policies`."""

    return Policies.model_validate(dict(data or {}))


__all__ = [
    "PartitioningPolicy",
    "ExecutionPolicy",
    "DatasetPolicy",
    "SimilarityPolicy",
    "EvaluationPolicy",
    "Policies",
    "load_policies",
]
