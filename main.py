#!/usr/bin/env python3
"""
Visual ML Essays - Main Entry Point

Runs the algorithm essays headlessly: each essay is brought to a given
animation frame and its displayed statistics are printed.

Usage:
    python main.py                          # Run every essay
    python main.py --essay kmeans           # Run one essay
    python main.py --essay som --frame 40   # SOM after 40 training steps
    python main.py --essay svm --plot svm.png
    python main.py --report results         # Save snapshots + summary
"""

import argparse
import logging
import sys
import os

import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import FRAMES_PER_RUN, LOG_FORMAT, LOG_LEVEL, RunConfig
from integration import ESSAYS, BatchEvaluation, create_essay, advance_essay, plot_snapshot
from ml_engines import InvalidParameter
from src.dataset import DatasetLoadError


def parse_overrides(pairs):
    """Turn ``name=value`` strings into a parameter dict."""
    params = {}
    for pair in pairs or []:
        name, sep, raw = pair.partition('=')
        if not sep:
            raise argparse.ArgumentTypeError(f"expected name=value, got {pair!r}")
        try:
            value = int(raw)
        except ValueError:
            try:
                value = float(raw)
            except ValueError:
                value = raw
        params[name] = value
    return params


def print_summary(name, snapshot):
    """Print the statistics an essay shows next to its plot."""
    print(f"\n--- {name} ---")
    for key, value in snapshot.items():
        if isinstance(value, (int, float, str)) and key != 'essay':
            print(f"  {key}: {value}")
        elif isinstance(value, list) and key in ('votes', 'layer_sizes'):
            print(f"  {key}: {value}")


def run_essay(name, params, seed, frame, plot_path=None):
    """Run one essay to ``frame`` and print its summary."""
    rng = np.random.default_rng(seed)
    essay = create_essay(name, params, rng=rng)
    advance_essay(essay, frame)
    snapshot = essay.snapshot()
    print_summary(name, snapshot)
    if plot_path:
        plot_snapshot(snapshot, plot_path)
        print(f"  Saved plot: {plot_path}")
    return essay


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Visual ML Essays - algorithm engines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py                                  # Run every essay
    python main.py --essay dbscan --set epsilon=0.1 # Override a parameter
    python main.py --essay perceptron --verbose     # Trace every step
        """
    )

    parser.add_argument('--essay', default='all', choices=['all'] + list(ESSAYS),
                        help='Essay to run (default: all)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Seed for all essay randomness')
    parser.add_argument('--frame', type=int, default=FRAMES_PER_RUN,
                        help='Animation frame to show')
    parser.add_argument('--set', dest='overrides', action='append', metavar='NAME=VALUE',
                        help='Override an essay parameter (single essay only)')
    parser.add_argument('--plot', metavar='PATH',
                        help='Save a PNG of the essay (single essay only)')
    parser.add_argument('--report', metavar='DIR',
                        help='Save snapshots, summary and plots to DIR')
    parser.add_argument('--verbose', action='store_true',
                        help='Log engine steps')

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else LOG_LEVEL, format=LOG_FORMAT)

    print("=" * 50)
    print("Visual ML Essays")
    print("=" * 50)

    try:
        overrides = parse_overrides(args.overrides)
        if args.essay == 'all' and (overrides or args.plot):
            parser.error("--set and --plot need a single --essay")

        if args.report:
            names = list(ESSAYS) if args.essay == 'all' else [args.essay]
            config = RunConfig(seed=args.seed, frame=args.frame, results_dir=args.report,
                               overrides={args.essay: overrides} if overrides else {})
            evaluation = BatchEvaluation(config)
            evaluation.run_all(names, plots=True)
            for name, snapshot in evaluation.snapshots.items():
                print_summary(name, snapshot)
            print(f"\nResults saved to {args.report}")
        elif args.essay == 'all':
            for name in ESSAYS:
                run_essay(name, None, args.seed, args.frame)
        else:
            run_essay(args.essay, overrides, args.seed, args.frame, args.plot)
    except (InvalidParameter, argparse.ArgumentTypeError) as e:
        print(f"Invalid parameter: {e}")
        return 2
    except DatasetLoadError as e:
        print(f"Dataset error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
