"""
Evaluation script for the review search index.

Runs the labeled questions against the index at every configured depth, logs the
precision/recall table, optionally saves the run and compares it with a baseline.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from review_evals.config import Config, get_config
from review_evals.packages.embedding_service import OpenAIEmbeddingService
from review_evals.packages.evaluation_framework import (
    DepthRunResult,
    DepthSweepScorer,
    LabeledQuerySet,
    SearchIndex,
    SweepConfig,
    SweepReport,
    compare_reports,
    load_report,
    log_summary,
    save_report,
)
from review_evals.packages.mongodb_client import MongoDBClient
from review_evals.packages.review_search_service import MongoReviewSearchIndex

logger = logging.getLogger(__name__)

BASELINE_NAME = "best_run"

# Load .env.local from project root (must run from project root)
env_local_path = Path('.env.local')
if env_local_path.exists():
    load_dotenv(env_local_path)
    logger.info("Loaded .env.local for local development")
else:
    logger.info("No .env.local file found")


def generate_run_name() -> str:
    """Generate timestamp-based run name."""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"run_{timestamp}"


def search_pool_size(config: Config) -> int:
    """Threads needed so no admitted search waits for a free worker."""
    passes = len(config.depths) if config.parallel_depths else 1
    return config.concurrency * passes


def build_search_index(config: Config) -> SearchIndex:
    """Wire the MongoDB review index with the OpenAI embedding service."""
    logger.info("Building MongoDB review search index")

    # Store calls give up around the same time the sweep stops waiting for them
    timeout_ms = max(1, int(config.query_timeout * 1000))

    mongodb_client_factory = MongoDBClient(
        username=config.MONGODB_USERNAME,
        password=config.MONGODB_PASSWORD,
        uri=config.MONGODB_URI,
        timeout_ms=timeout_ms,
        appname="review-retrieval-evals",
    )
    mongo_client = mongodb_client_factory.get_client()

    embedding_service = OpenAIEmbeddingService(
        api_key=config.OPENAI_API_KEY,
        model=config.EMBEDDING_MODEL,
        dimensions=config.EMBEDDING_DIMENSIONS,
        timeout=config.query_timeout
    )

    return MongoReviewSearchIndex(
        mongo_client=mongo_client,
        database_name=config.MONGODB_DATABASE_NAME,
        collection_name=config.MONGODB_COLLECTION_NAME,
        embedding_service=embedding_service,
        vector_index_name=config.MONGODB_VECTOR_INDEX,
        max_workers=search_pool_size(config)
    )


def run_sweep(config: Config, query_set: LabeledQuerySet, index: SearchIndex) -> List[DepthRunResult]:
    """Score the index over the query set at every configured depth."""
    scorer = DepthSweepScorer(
        index=index,
        depths=config.depths,
        concurrency=config.concurrency,
        timeout=config.query_timeout,
        parallel_depths=config.parallel_depths,
        show_progress=config.show_progress
    )
    return scorer.run_sync(query_set)


def compare_with_baseline(report: SweepReport, runs_dir: str) -> None:
    """Compare a saved run with the baseline run if there is one."""
    if not (Path(runs_dir) / BASELINE_NAME / "metrics.json").exists():
        logger.warning("No baseline found. Set this as baseline:")
        logger.warning(f"   cp -r {runs_dir}/{report.config.name} {runs_dir}/{BASELINE_NAME}")
        return

    baseline = load_report(BASELINE_NAME, runs_dir)
    compare_reports(baseline, report)


def run(argv: Optional[Sequence[str]] = None, index: Optional[SearchIndex] = None) -> SweepReport:
    """Main coordinator function."""
    config = get_config(argv)
    logging.getLogger().setLevel(config.log_level)
    logger.info("Starting retrieval sweep")

    run_name = config.name or generate_run_name()

    query_set = LabeledQuerySet.from_json(config.dataset_path, limit=config.dataset_limit)

    owns_index = index is None
    if owns_index:
        index = build_search_index(config)

    try:
        results = run_sweep(config, query_set, index)
    finally:
        if owns_index:
            index.close()

    report = SweepReport(
        results=results,
        config=SweepConfig(
            timestamp=datetime.now(timezone.utc),
            index=index.name,
            depths=config.depths,
            concurrency=config.concurrency,
            query_timeout=config.query_timeout,
            dataset_size=len(query_set),
            name=run_name,
            metadata={"dataset_path": config.dataset_path},
        )
    )

    log_summary(results, run_name)

    if config.save:
        save_report(run_name, report, config.runs_dir)
        logger.info(f"Saved to: {config.runs_dir}/{run_name}/")
        compare_with_baseline(report, config.runs_dir)
    else:
        logger.info("Skipping save (use --save to save results)")

    logger.info("Retrieval sweep complete")
    return report


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    # Suppress chatty client logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    run()


if __name__ == "__main__":
    main()
