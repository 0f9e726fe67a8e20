"""Main entry point for the planning core command line."""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

import structlog
import yaml

from planning_core.analysis.dependency_graph import DependencyGraph
from planning_core.errors import PlanningCoreError
from planning_core.estimation.calibrator import EstimationCalibrator
from planning_core.estimation.store import JsonFileEstimationStore
from planning_core.evaluation.evaluator import CalibrationEvaluator
from planning_core.evaluation.generator import WorkItemGenerator
from planning_core.models.work_item import WorkItem
from planning_core.utils.config import get_default_config, load_config
from planning_core.utils.logging import configure_logging

log = structlog.get_logger()


def load_work_items(items_path: str):
    """Load work items from a YAML or JSON file (a list, or a mapping with ``items``)."""
    path = Path(items_path)

    with open(path, 'r') as f:
        if path.suffix.lower() in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if isinstance(data, dict):
        data = data.get('items', [])

    return [WorkItem.from_dict(row) for row in data or []]


def run_analysis(config: dict, items_path: str, detect_implicit: bool, threshold: float = None):
    """Analyze dependencies of the work items in a file."""
    items = load_work_items(items_path)

    graph = DependencyGraph(config=config)
    graph.add_items(items)

    implicit = []
    if detect_implicit:
        implicit = graph.detect_implicit_dependencies(threshold)

    result = graph.analyze()

    print(result.to_human_readable())
    if implicit:
        print(f"\nInferred {len(implicit)} implicit dependencies:")
        for edge in implicit:
            print(f"  {edge.from_id} -> {edge.to_id} ({edge.pattern}, {edge.strength:.2f})")

    results_dir = Path("results")
    results_dir.mkdir(exist_ok=True)

    output = {
        'analysis': result.to_dict(),
        'graph': graph.export_for_visualization(),
    }
    output_path = results_dir / "dependency_analysis.json"
    with open(output_path, 'w') as f:
        json.dump(output, f, indent=2, default=str)

    print(f"\nAnalysis saved to: {output_path}")

    return result


def run_estimate(config: dict, complexity: int, history_path: str = None):
    """Print a calibrated estimate for a complexity score."""
    store = JsonFileEstimationStore(history_path) if history_path else None
    calibrator = EstimationCalibrator(store=store, config=config)

    estimate = calibrator.estimate(complexity)

    print(f"\nComplexity {complexity} ({estimate.band.value} band)")
    print(f"Points: {estimate.points} (range {estimate.range.low}-{estimate.range.high})")
    print(f"Confidence: {estimate.confidence:.2f}")
    print(f"Calibrated: {estimate.calibrated} (factor {estimate.calibration_factor:.2f}, "
          f"{estimate.sample_size} completed items)")
    print(estimate.reasoning)

    return estimate


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Dependency analysis, estimate calibration and confidence scoring"
    )
    parser.add_argument(
        'command',
        choices=['analyze', 'estimate', 'evaluate', 'generate-items'],
        help='Command to run'
    )
    parser.add_argument(
        'items',
        nargs='?',
        help='Work items file (YAML or JSON) for the analyze command'
    )
    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '--implicit',
        action='store_true',
        help='Infer implicit dependencies from item text'
    )
    parser.add_argument(
        '--threshold',
        type=float,
        default=None,
        help='Minimum keyword score for implicit dependencies'
    )
    parser.add_argument(
        '--complexity',
        type=int,
        default=5,
        help='Complexity score 1-10 for the estimate command (default: 5)'
    )
    parser.add_argument(
        '--history',
        type=str,
        default=None,
        help='JSON file holding the estimation history'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default='WARNING',
        help='Log level (default: WARNING)'
    )

    args = parser.parse_args()

    configure_logging(args.log_level)

    config = load_config(args.config) if Path(args.config).exists() else get_default_config()

    try:
        if args.command == 'analyze':
            if not args.items:
                parser.error("analyze requires a work items file")
            run_analysis(config, args.items, args.implicit, args.threshold)
        elif args.command == 'estimate':
            run_estimate(config, args.complexity, args.history)
        elif args.command == 'evaluate':
            CalibrationEvaluator(config).run_evaluation()
        elif args.command == 'generate-items':
            generator = WorkItemGenerator(seed=42, config=config)
            today = datetime.now().replace(hour=9, minute=0, second=0, microsecond=0)
            items, history = generator.generate_stream(today)

            print(f"Generated {len(items)} work items")
            print(f"Generated {len(history)} historical estimates")

            results_dir = Path("results")
            results_dir.mkdir(exist_ok=True)

            with open(results_dir / "generated_items.json", 'w') as f:
                json.dump([item.to_dict() for item in items], f, indent=2)
            with open(results_dir / "generated_history.json", 'w') as f:
                json.dump([record.to_dict() for record in history], f, indent=2)

            print("Items saved to: results/generated_items.json")
            print("History saved to: results/generated_history.json")
    except PlanningCoreError as exc:
        log.error("Invalid input", error=exc.message, **exc.details)
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
