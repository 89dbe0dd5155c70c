#!/usr/bin/env python3
"""
Morphogen - Batch generator

Generate one or more designs and export meshes plus design records.

Usage:
    morphogen --seed 42 --algorithm voronoi_mutation
    morphogen --seed 100 --count 10 --organic-bias 0.8 --format glb
    python -m morphogen.run --seed 7 --complexity 1.0 --density 0.6 -v
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config import Algorithm, Config, EXPORT_FORMATS
from .generator import generate
from .io import DesignRecord, export_mesh, save_design

logger = logging.getLogger(__name__)


def run_seed(
    seed: int,
    complexity: float,
    density: float,
    organic_bias: float,
    algorithm: Optional[Algorithm],
    config: Config
) -> dict:
    """Generate one design, export its mesh and record."""
    complexity, density, organic_bias = config.clamp_parameters(complexity, density, organic_bias)

    result = generate(seed, complexity, density, organic_bias, algorithm)
    record = DesignRecord.from_result(result, name=f"{config.name_prefix}_{seed:06d}")

    mesh_path = export_mesh(result.mesh, config.get_output_path(record.name), name=record.name)
    meta_path = save_design(record, config.get_meta_path(record.name))

    return {
        "name": record.name,
        "algorithm": result.algorithm.value,
        "mesh": str(mesh_path),
        "record": str(meta_path),
        "properties": result.properties.to_dict(),
        "generation_params": result.generation_params,
    }


def run_all(
    seeds: List[int],
    complexity: float,
    density: float,
    organic_bias: float,
    algorithm: Optional[Algorithm],
    config: Config
) -> dict:
    """
    Generate every seed, collecting failures instead of aborting.

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "config": config.to_dict(),
        "algorithm": algorithm.value if algorithm else None,
        "designs": [],
        "errors": []
    }

    for seed in seeds:
        logger.info(f"\n{'='*60}")
        logger.info(f"Seed: {seed}")
        logger.info(f"{'='*60}")
        try:
            summary["designs"].append(
                run_seed(seed, complexity, density, organic_bias, algorithm, config)
            )
        except (OSError, ValueError, ImportError) as e:
            logger.error(f"Seed {seed} failed: {e}")
            summary["errors"].append({"seed": seed, "error": str(e)})

    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Morphogen - Generate procedural structures"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        nargs="+",
        default=[42],
        help="Seed(s) to generate"
    )
    parser.add_argument(
        "--count", "-n",
        type=int,
        default=None,
        help="Generate this many consecutive seeds starting at the first --seed"
    )
    parser.add_argument("--complexity", type=float, default=0.5)
    parser.add_argument("--density", type=float, default=0.5)
    parser.add_argument("--organic-bias", type=float, default=0.5)
    parser.add_argument(
        "--algorithm", "-a",
        default=None,
        help=f"Algorithm ({', '.join(a.slug for a in Algorithm)}); drawn from organic bias if omitted"
    )
    parser.add_argument(
        "--format", "-f",
        choices=EXPORT_FORMATS,
        default=None,
        help="Mesh export format"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="JSON config file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        config = Config.from_json(args.config) if args.config else Config()
    except (OSError, ValueError, TypeError) as e:
        parser.error(f"Invalid config {args.config}: {e}")
    if args.format:
        config.export_format = args.format
    if args.output:
        config.output_dir = args.output

    try:
        algorithm = Algorithm.from_name(args.algorithm) if args.algorithm else None
    except ValueError as e:
        parser.error(str(e))

    seeds = args.seed
    if args.count:
        seeds = [seeds[0] + i for i in range(args.count)]

    logger.info(f"Generating {len(seeds)} designs")
    logger.info(f"Output: {config.output_dir}")

    summary = run_all(
        seeds=seeds,
        complexity=args.complexity,
        density=args.density,
        organic_bias=args.organic_bias,
        algorithm=algorithm,
        config=config
    )

    # Save summary
    summary_path = config.output_dir / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    logger.info(f"\nSummary saved to: {summary_path}")

    n_success = len(summary["designs"])
    n_errors = len(summary["errors"])
    logger.info(f"\n{'='*60}")
    logger.info(f"COMPLETE: {n_success} successful, {n_errors} errors")
    logger.info(f"{'='*60}")

    return 1 if n_errors > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
