#!/usr/bin/env python3
"""
Generate the results of every visual essay.

This script:
1. Runs each essay to its final frame with a fixed seed
2. Saves snapshots as JSON and a markdown summary table
3. Draws one plot per essay
4. Compiles everything into REPORT.md

Run: python scripts/generate_results.py [--seed N] [--results-dir DIR]
"""

import os
import sys
import argparse
import logging

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from config import FRAMES_PER_RUN, LOG_FORMAT, LOG_LEVEL, RESULTS_DIR


def main():
    """Main entry point for results generation."""
    parser = argparse.ArgumentParser(
        description="Generate results for every visual essay"
    )
    parser.add_argument(
        "--results-dir", "-r",
        default=RESULTS_DIR,
        help="Directory for output results (default: results)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Seed for all essay randomness (default: 42)"
    )
    parser.add_argument(
        "--frame",
        type=int,
        default=FRAMES_PER_RUN,
        help="Animation frame to evaluate at (default: last)"
    )
    parser.add_argument(
        "--skip-plots",
        action="store_true",
        help="Skip plot generation (faster, text-only results)"
    )

    args = parser.parse_args()
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    print("\n" + "=" * 70)
    print("VISUAL ML ESSAYS - RESULTS GENERATOR")
    print("=" * 70)
    print(f"Results directory: {args.results_dir}")
    print(f"Seed: {args.seed}")
    print("=" * 70)

    from integration.batch_evaluation import run_full_evaluation

    evaluation = run_full_evaluation(
        results_dir=args.results_dir,
        seed=args.seed,
        frame=args.frame,
        plots=not args.skip_plots,
    )

    print("\n" + "=" * 70)
    print("RESULTS GENERATION COMPLETE")
    print("=" * 70)

    for name, stats in evaluation.summary.items():
        shown = {k: v for k, v in stats.items() if not isinstance(v, str)}
        print(f"  {name:20s} {shown}")

    print("\nGenerated files:")
    print(f"  {args.results_dir}/")
    print(f"    - REPORT.md          (Combined results)")
    print(f"    - summary.md         (One row per essay)")
    print(f"    - snapshots.json     (Essay state, JSON)")
    if not args.skip_plots:
        print(f"    - plots/<essay>.png")


if __name__ == "__main__":
    main()
