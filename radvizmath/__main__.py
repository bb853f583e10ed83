"""
Main entry point for RadViz math.

This module reads a CSV dataset, computes an anchor ordering and writes the
chart data (anchors, projected points and search trace) as JSON.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import pandas as pd

from radvizmath.components.config import ConfigManager, read_config_file, to_list
from radvizmath.pipeline import METHODS, RadvizPipeline

logger = logging.getLogger(__name__)


def setup_logging(level: str = 'WARNING') -> None:
    """
    Set up logging.

    Args:
        level: Logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description='RadViz anchor placement')

    parser.add_argument(
        '--input',
        required=True,
        help='CSV file with one row per observation'
    )

    parser.add_argument(
        '--columns',
        help='Comma-separated variables to use as anchors'
    )

    parser.add_argument(
        '--label-column',
        help='Grouping column passed through to the output'
    )

    parser.add_argument(
        '--method',
        default='independent',
        choices=list(METHODS),
        help='Ordering method'
    )

    parser.add_argument(
        '--metric',
        choices=['cosine', 'abs-pearson'],
        help='Similarity metric'
    )

    parser.add_argument(
        '--iterations',
        type=int,
        help='Maximum search rounds'
    )

    parser.add_argument(
        '--samples',
        type=int,
        help='Candidates per search round'
    )

    parser.add_argument(
        '--seed',
        type=int,
        help='Random seed for the search'
    )

    parser.add_argument(
        '--scores',
        help='JSON or YAML file mapping each variable to a score (ranked method)'
    )

    parser.add_argument(
        '--config',
        help='Path to configuration file'
    )

    parser.add_argument(
        '--output',
        help='Output JSON file (defaults to stdout)'
    )

    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (defaults to the logging.level setting)'
    )

    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict:
    """
    Collect configuration overrides from a config file and arguments.

    Args:
        args: Parsed arguments

    Returns:
        Overrides dictionary
    """
    overrides = {}

    if args.config:
        overrides.update(read_config_file(args.config))

    if args.metric:
        overrides.setdefault('similarity', {})['metric'] = args.metric

    optimizer = {}
    if args.iterations is not None:
        optimizer['max-iterations'] = args.iterations
    if args.samples is not None:
        optimizer['samples-per-iteration'] = args.samples
    if args.seed is not None:
        optimizer['seed'] = args.seed
    if optimizer:
        overrides.setdefault('optimizer', {}).update(optimizer)

    if args.log_level:
        overrides.setdefault('logging', {})['level'] = args.log_level.lower()

    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Process exit code
    """
    args = parse_args(argv)

    config = ConfigManager.get_config(build_overrides(args))
    setup_logging(config.get('logging.level', 'warn'))

    data = pd.read_csv(args.input)
    logger.info(f"Loaded {len(data)} rows and {len(data.columns)} columns from {args.input}")

    pipeline = RadvizPipeline(
        data,
        columns=to_list(args.columns),
        label_column=args.label_column,
        config=config
    )
    scores = read_config_file(args.scores) if args.scores else None
    result = pipeline.run(args.method, scores=scores)
    output = result.to_dict(pipeline.data, pipeline.passthrough)
    output['excluded'] = pipeline.excluded

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(output, f, indent=2)
        logger.info(f"Wrote chart data to {args.output}")
    else:
        json.dump(output, sys.stdout, indent=2)
        sys.stdout.write('\n')

    return 0


if __name__ == '__main__':
    sys.exit(main())
