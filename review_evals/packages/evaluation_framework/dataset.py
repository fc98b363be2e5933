"""
Labeled query set: synthetic questions bound to the review they came from.
"""

import json
import logging
from pathlib import Path
from typing import Iterator, List, Optional

from pydantic import ValidationError

from .models import LabeledQuery

logger = logging.getLogger(__name__)


class LabeledQuerySet:
    """Ground truth: questions + expected document ids, in a fixed order."""

    def __init__(self, queries: List[LabeledQuery]):
        """Initialize query set with labeled queries."""
        logger.info(f"Initializing labeled query set with {len(queries)} queries")
        self._queries = list(queries)
        self._validate()
        logger.info("Labeled query set initialized successfully")

    def _validate(self) -> None:
        """Validate query set integrity."""
        logger.info("Validating labeled query set")

        if len(self._queries) == 0:
            logger.warning("Labeled query set is empty, recall and precision will be 0")
            return

        # Same question labeled with the same review twice would double count
        seen = set()
        duplicates = []
        for query in self._queries:
            key = (query.question, query.expected_id)
            if key in seen:
                duplicates.append(query)
            seen.add(key)

        if duplicates:
            duplicate_list = "\n".join(f"  - {q.question} -> {q.expected_id}" for q in duplicates)
            raise ValueError(f"Duplicate labeled queries found:\n{duplicate_list}")

        logger.info("Labeled query set validation complete")

    @classmethod
    def from_json(cls, path: str, limit: Optional[int] = None) -> "LabeledQuerySet":
        """Load a query set from a JSON array or a JSONL file.

        Each record needs `question` and an expected id (`expected_id`, `expectedId`
        or `chunkId`). `limit` keeps only the first N records.
        """
        logger.info(f"Loading labeled query set from {path}")

        path_obj = Path(path)
        if not path_obj.exists():
            raise FileNotFoundError(f"Labeled query set file not found: {path}")

        raw_records = cls._read_records(path_obj)
        if limit is not None:
            raw_records = raw_records[:limit]

        queries: List[LabeledQuery] = []
        for record_num, data in enumerate(raw_records, 1):
            try:
                queries.append(LabeledQuery.model_validate(data))
            except ValidationError as e:
                raise ValueError(
                    f"Error parsing record {record_num} in {path}: {e}"
                ) from e

        logger.info(f"Loaded {len(queries)} labeled queries from {path}")
        return cls(queries)

    @staticmethod
    def _read_records(path: Path) -> List[dict]:
        """Read raw records, detecting JSON array vs. JSONL by the first character."""
        text = path.read_text(encoding='utf-8')

        if text.lstrip().startswith('['):
            try:
                return json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError(f"Error parsing JSON array in {path}: {e}") from e

        records = []
        for line_num, line in enumerate(text.splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ValueError(f"Error parsing line {line_num} in {path}: {e}") from e
        return records

    def get_queries(self) -> List[LabeledQuery]:
        """Get all queries in load order."""
        return self._queries

    def __len__(self) -> int:
        return len(self._queries)

    def __iter__(self) -> Iterator[LabeledQuery]:
        return iter(self._queries)
