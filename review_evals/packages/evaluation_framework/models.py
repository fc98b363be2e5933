"""
Data models for the evaluation framework.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, NewType, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Type aliases to enforce type safety
DocumentId = NewType('DocumentId', str)
QueryText = NewType('QueryText', str)

# One slot per retrieved result: the expected id on a hit, MISS otherwise
HitVector = List[str]
MISS = ""


class LabeledQuery(BaseModel):
    """Question bound to the one document that should answer it."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question: QueryText = Field(description="Natural-language question text")
    expected_id: DocumentId = Field(
        validation_alias=AliasChoices("expected_id", "expectedId", "chunkId", "chunk_id"),
        description="Id of the review the question was generated from")
    answer: Optional[str] = Field(default=None, description="Reference answer, unused by scoring")

    @field_validator("expected_id", mode="before")
    def coerce_expected_id(cls, v):
        return str(v) if isinstance(v, int) else v


class RetrievedResult(BaseModel):
    """Single search hit. Only `id` matters for scoring, other fields ride along."""
    model_config = ConfigDict(extra="allow")

    id: DocumentId = Field(description="Review document id")

    @field_validator("id", mode="before")
    def coerce_id(cls, v):
        # Stores hand back ints or ObjectIds
        return v if isinstance(v, str) else str(v)


@dataclass(frozen=True)
class DepthRunResult:
    """Aggregate metrics for one retrieval depth."""
    depth: int
    precision: float
    recall: float
    queries: int = 0
    total_retrievals: int = 0
    true_positives: int = 0
    soft_failures: int = 0


@dataclass
class SweepConfig:
    """Configuration for a depth sweep run."""
    timestamp: datetime
    index: str
    depths: List[int]
    concurrency: int
    query_timeout: float
    dataset_size: int
    name: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SweepReport:
    """Container for a finished sweep."""
    results: List[DepthRunResult]
    config: SweepConfig
