"""
Configuration management for retrieval sweep settings and command-line arguments.
"""

import argparse
from typing import Annotated, List, Optional, Sequence

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_DEPTHS = [2, 5, 10, 15]


class Config(BaseSettings):
    # Sweep settings read EVAL_<FIELD>; credentials keep their plain names
    model_config = SettingsConfigDict(env_prefix="EVAL_", populate_by_name=True)

    concurrency: int = Field(10, description="Maximum number of searches in flight per depth pass")
    query_timeout: float = Field(
        5.0, description="Seconds to wait for a single search before counting it as empty")
    depths: Annotated[List[int], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_DEPTHS),
        description="Retrieval depths to evaluate, e.g. '2,5,10,15'")
    dataset_path: str = Field("synthetic_evals.json", description="Labeled query set, JSON array or JSONL")
    dataset_limit: Optional[int] = Field(None, description="Only use the first N labeled queries")
    parallel_depths: bool = Field(True, description="Run all depth passes concurrently")
    runs_dir: str = Field("evaluation/runs", description="Where saved runs live")
    name: Optional[str] = Field(None, description="Run name (default: timestamp)")
    save: bool = Field(False, description="Save the run under runs_dir")
    show_progress: bool = Field(True, description="Show per-depth progress bars")
    log_level: str = Field('INFO', validation_alias="LOG_LEVEL", description="Logging level",
                           examples=["CRITICAL", "FATAL", "ERROR", "WARNING", "INFO", "DEBUG"])
    MONGODB_DATABASE_NAME: str = Field(default="product-reviews", validation_alias="MONGODB_DATABASE_NAME",
                                       description="MongoDB database name")
    MONGODB_COLLECTION_NAME: str = Field(default="reviews", validation_alias="MONGODB_COLLECTION_NAME",
                                         description="MongoDB collection name")
    MONGODB_VECTOR_INDEX: str = Field(default="default_vector", validation_alias="MONGODB_VECTOR_INDEX",
                                      description="Atlas vector search index over review embeddings")
    MONGODB_USERNAME: str = Field(validation_alias="MONGODB_USERNAME", description="Mongodb user")
    MONGODB_PASSWORD: str = Field(validation_alias="MONGODB_PASSWORD", description="Mongodb password")
    MONGODB_URI: str = Field(
        validation_alias="MONGODB_URI",
        description="Mongodb uri. Example: mongodb+srv://@product-reviews.example.mongodb.net/?appName=product-reviews")
    OPENAI_API_KEY: str = Field(validation_alias="OPENAI_API_KEY",
                                description="OpenAI API key for query embeddings")
    EMBEDDING_MODEL: str = Field(default="text-embedding-3-small", validation_alias="EMBEDDING_MODEL",
                                 description="Must match the model used to embed the reviews")
    EMBEDDING_DIMENSIONS: int = Field(default=512, validation_alias="EMBEDDING_DIMENSIONS",
                                      description="Embedding vector size")

    @field_validator("depths", mode="before")
    def split_depths(cls, v):
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @field_validator("depths")
    def check_depths(cls, v):
        if not v:
            raise ValueError("At least one depth is required")
        if any(k < 1 for k in v):
            raise ValueError(f"Depths must be positive, got {v}")
        return v

    @field_validator("concurrency")
    def check_concurrency(cls, v):
        if v < 1:
            raise ValueError(f"Concurrency must be at least 1, got {v}")
        return v

    @field_validator("query_timeout")
    def check_timeout(cls, v):
        if v <= 0:
            raise ValueError(f"Query timeout must be positive, got {v}")
        return v

    @field_validator("dataset_limit")
    def check_dataset_limit(cls, v):
        if v is not None and v < 0:
            raise ValueError(f"Dataset limit cannot be negative, got {v}")
        return v


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments. Unset options stay None so env/defaults apply."""
    parser = argparse.ArgumentParser(description="Evaluate review search retrieval across depths")

    parser.add_argument("--name", help="Run name (default: timestamp)")
    parser.add_argument(
        "--save",
        action="store_true",
        default=None,
        help="Save the run results (default: False)"
    )
    parser.add_argument(
        "--depths",
        help="Comma separated retrieval depths (default: 2,5,10,15, env: EVAL_DEPTHS)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Maximum searches in flight per depth (env: EVAL_CONCURRENCY)",
    )
    parser.add_argument(
        "--query-timeout",
        type=float,
        help="Per-search timeout in seconds (env: EVAL_QUERY_TIMEOUT)",
    )
    parser.add_argument(
        "--dataset-path",
        help="Labeled query set file (env: EVAL_DATASET_PATH)",
    )
    parser.add_argument(
        "--dataset-limit",
        type=int,
        help="Only evaluate the first N labeled queries (env: EVAL_DATASET_LIMIT)",
    )
    parser.add_argument(
        "--sequential",
        dest="parallel_depths",
        action="store_false",
        default=None,
        help="Run depth passes one after another",
    )
    parser.add_argument(
        "--no-progress",
        dest="show_progress",
        action="store_false",
        default=None,
        help="Hide progress bars",
    )
    parser.add_argument("--runs-dir", help="Directory for saved runs (env: EVAL_RUNS_DIR)")
    parser.add_argument("--log-level", help="Logging level")

    return parser.parse_args(argv)


def get_config(argv: Optional[Sequence[str]] = None) -> Config:
    args = parse_args(argv)
    # Only include CLI values that are actually set
    cli_overrides = {k: v for k, v in vars(args).items() if v is not None}
    return Config(**cli_overrides)
