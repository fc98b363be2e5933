"""
Reporting for depth sweeps: records, text table, and saved runs.
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .models import DepthRunResult, SweepConfig, SweepReport

logger = logging.getLogger(__name__)

DEFAULT_RUNS_DIR = "evaluation/runs"


def to_records(results: Sequence[DepthRunResult]) -> List[Dict[str, Any]]:
    """One {depth, precision, recall} record per result, values untouched."""
    return [
        {"depth": r.depth, "precision": r.precision, "recall": r.recall}
        for r in results
    ]


def render_table(results: Sequence[DepthRunResult]) -> str:
    """Render results as a fixed-width table keyed by depth."""
    lines = [
        f"{'depth':>6} {'precision':>10} {'recall':>10} {'hits':>8} {'returned':>9} {'failed':>7}",
        "-" * 55,
    ]
    for r in results:
        lines.append(
            f"{r.depth:>6} {r.precision:>10.4f} {r.recall:>10.4f} "
            f"{r.true_positives:>8} {r.total_retrievals:>9} {r.soft_failures:>7}")
    return "\n".join(lines)


def log_summary(results: Sequence[DepthRunResult], name: str = "") -> None:
    """Log the results table."""
    logger.info("=" * 80)
    logger.info(f"RETRIEVAL SWEEP: {name}" if name else "RETRIEVAL SWEEP")
    logger.info("=" * 80)
    for line in render_table(results).splitlines():
        logger.info(line)
    logger.info("=" * 80)


def save_report(name: str, report: SweepReport, runs_dir: str = DEFAULT_RUNS_DIR) -> Path:
    """Save sweep metrics and config to `runs_dir/name`."""
    logger.info(f"Saving report: {name}")

    run_dir = Path(runs_dir) / name
    run_dir.mkdir(parents=True, exist_ok=True)

    metrics_path = run_dir / "metrics.json"
    with open(metrics_path, 'w', encoding='utf-8') as f:
        json.dump([asdict(r) for r in report.results], f, indent=2)
    logger.info(f"Saved metrics to {metrics_path}")

    config = report.config
    config_path = run_dir / "config.json"
    config_dict = {
        "timestamp": config.timestamp.isoformat(),
        "index": config.index,
        "depths": config.depths,
        "concurrency": config.concurrency,
        "query_timeout": config.query_timeout,
        "dataset_size": config.dataset_size,
        "metadata": config.metadata
    }
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config_dict, f, indent=2)
    logger.info(f"Saved config to {config_path}")

    logger.info(f"Report {name} saved successfully")
    return run_dir


def load_report(name: str, runs_dir: str = DEFAULT_RUNS_DIR) -> SweepReport:
    """Load a saved sweep from `runs_dir/name`."""
    logger.info(f"Loading report: {name}")

    run_dir = Path(runs_dir) / name
    if not run_dir.exists():
        raise FileNotFoundError(f"Report directory not found: {run_dir}")

    with open(run_dir / "metrics.json", 'r', encoding='utf-8') as f:
        results = [DepthRunResult(**record) for record in json.load(f)]

    with open(run_dir / "config.json", 'r', encoding='utf-8') as f:
        config_dict = json.load(f)

    config = SweepConfig(
        timestamp=datetime.fromisoformat(config_dict["timestamp"]),
        index=config_dict["index"],
        depths=config_dict["depths"],
        concurrency=config_dict["concurrency"],
        query_timeout=config_dict["query_timeout"],
        dataset_size=config_dict["dataset_size"],
        name=name,  # Use directory name as report name
        metadata=config_dict.get("metadata", {})
    )

    logger.info(f"Report {name} loaded successfully")
    return SweepReport(results=results, config=config)


def compare_reports(baseline: SweepReport, current: SweepReport) -> List[Dict[str, Any]]:
    """Log per-depth precision/recall deltas for depths present in both reports."""
    logger.info(f"Comparing reports: {baseline.config.name} vs {current.config.name}")

    baseline_by_depth = {r.depth: r for r in baseline.results}
    deltas = []

    logger.info("=" * 80)
    logger.info(f"{'Metric':<20} {'Base':>10} {'Current':>10} {'Delta':>12}")
    logger.info("-" * 80)

    for r in current.results:
        base = baseline_by_depth.get(r.depth)
        if base is None:
            logger.info(f"k={r.depth} not in baseline, skipping")
            continue

        delta = {
            "depth": r.depth,
            "precision_delta": r.precision - base.precision,
            "recall_delta": r.recall - base.recall,
        }
        deltas.append(delta)

        logger.info(f"{'Precision@' + str(r.depth):<20} {base.precision:>10.3f} "
                    f"{r.precision:>10.3f} {delta['precision_delta']:>+12.3f}")
        logger.info(f"{'Recall@' + str(r.depth):<20} {base.recall:>10.3f} "
                    f"{r.recall:>10.3f} {delta['recall_delta']:>+12.3f}")

    logger.info("=" * 80)
    return deltas
