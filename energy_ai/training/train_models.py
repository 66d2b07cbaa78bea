"""
Command-line training entry point.

Runs one training cycle against an in-memory repository, optionally
predicts a single point with the trained model, and prints or writes the
comparison report as JSON.

Usage:
    python -m energy_ai.training.train_models --dataset-size 5000 --seed 42
    python -m energy_ai.training.train_models --predict 25 19 4 --output report.json
"""

import argparse
import asyncio
import json
from typing import Any, Dict, List, Optional

import structlog

from energy_ai.config import configure_logging, get_settings
from energy_ai.data.dataset_generator import DatasetSynthesizer
from energy_ai.repositories.memory_repository import InMemoryDatasetRepository
from energy_ai.training.orchestrator import TrainingOrchestrator

logger = structlog.get_logger()


async def run(
    dataset_size: Optional[int] = None,
    seed: Optional[int] = None,
    predict: Optional[List[float]] = None,
) -> Dict[str, Any]:
    """Train once and return the report, plus a prediction when requested."""
    config = get_settings()
    orchestrator = TrainingOrchestrator(
        InMemoryDatasetRepository(),
        synthesizer=DatasetSynthesizer(
            seed=seed if seed is not None else config.random_seed,
            history_years=config.dataset_history_years,
        ),
        config=config,
    )

    report = await orchestrator.train(dataset_size)
    output: Dict[str, Any] = {"report": report.to_dict()}

    if predict:
        temperature, hour, household = predict
        prediction = orchestrator.predict({
            "temperature": temperature,
            "hour_of_day": int(hour),
            "household_size": int(household),
        })
        output["prediction"] = prediction.to_dict()

    return output


def main(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description='Train energy consumption models on a synthetic corpus'
    )
    parser.add_argument(
        '--dataset-size',
        type=int,
        default=None,
        help='Number of synthetic records (default from DEFAULT_DATASET_SIZE)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible synthesis'
    )
    parser.add_argument(
        '--predict',
        type=float,
        nargs=3,
        metavar=('TEMP', 'HOUR', 'HOUSEHOLD'),
        help='Predict consumption for one point after training'
    )
    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Write the JSON report to this path instead of stdout'
    )

    args = parser.parse_args(argv)

    configure_logging()

    results = asyncio.run(run(args.dataset_size, args.seed, args.predict))

    rendered = json.dumps(results, indent=2, default=str)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(rendered)
        logger.info("report_written", path=args.output)
    else:
        print(rendered)

    return results


if __name__ == "__main__":
    main()
