#!/usr/bin/env python3
"""
Write a random initial population for a TSPLIB instance.

Usage:
    python3 generate_random_population.py data/five_city.tsp 20 -o data/five_city.pop --seed 7
"""

import argparse
import sys
from pathlib import Path

import numpy as np

project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tsp_ga.data_models import random_population
from tsp_ga.io_utils import load_tsplib_instance, save_population


def main():
    parser = argparse.ArgumentParser(
        description="Generate a random initial population for the TSP GA",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("instance", help="Path to TSPLIB instance file")
    parser.add_argument("count", type=int, help="Number of tours to generate")
    parser.add_argument(
        "-o", "--output",
        help="Output population file (default: <instance>.pop)"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--overwrite", action="store_true",
        help="Overwrite the output file if it exists"
    )
    args = parser.parse_args()

    instance = load_tsplib_instance(args.instance)
    rng = np.random.default_rng(args.seed)
    population = random_population(instance.size, args.count, rng)

    output = Path(args.output) if args.output else Path(args.instance).with_suffix(".pop")
    save_population(population, output, overwrite=args.overwrite)

    print(f"Instance: {instance.name} ({instance.size} nodes)")
    print(f"Wrote {len(population)} tours to {output}")


if __name__ == "__main__":
    main()
