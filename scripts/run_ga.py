#!/usr/bin/env python3
"""
Genetic Algorithm Schedule Optimization Runner

Command-line interface for optimizing a skill-constrained project schedule
(.def instance) with the genetic algorithm.

Usage:
    python scripts/run_ga.py --instance instances/10_3_5_3.def
    python scripts/run_ga.py --instance instances/10_3_5_3.def --config config/ga/default.yaml

Examples:
    # Run with default configuration
    python scripts/run_ga.py --instance instances/10_3_5_3.def

    # Override specific parameters
    python scripts/run_ga.py --instance instances/10_3_5_3.def \\
        --population-size 50 --max-generations 200 --pairing falloff_cosine

    # Write results somewhere else, without progress output
    python scripts/run_ga.py --instance instances/10_3_5_3.def --output results/run1 --quiet

Press Ctrl-C during a run to stop after the current generation; results
gathered so far are still written.
"""

import argparse
import signal
import sys
from pathlib import Path
import time

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from optimization.ga_config import GAConfig
from optimization.ga_algorithm import GAAlgorithm
from scheduling.def_io import read_def


def display_config_summary(config: GAConfig, instance_path: str):
    """Display configuration summary.

    Args:
        config: GAConfig to display
        instance_path: Path of the loaded instance
    """
    print(f"\n{'='*70}")
    print(f"  GA Configuration: {config.name}")
    print(f"{'='*70}")
    print(f"\nInstance:               {instance_path}")

    print(f"\nPopulation Settings:")
    print(f"  Population Size:      {config.population_size}")
    print(f"  Breeders:             {config.breeder_count} ({config.breeder_fraction*100:.0f}%)")

    print(f"\nGenetic Operators:")
    print(f"  Crossover Rate:       {config.crossover_rate:.2f} ({config.crossover_shape.value})")
    print(f"  Pairing Strategy:     {config.pairing_strategy.value}")
    print(f"  Mutation Rate:        {config.mutation_rate:.3f}")
    print(f"  Selection Method:     {config.selection_method.value}")
    if config.selection_method.value == "tournament":
        print(f"  Tournament Size:      {config.tournament_size}")

    print(f"\nClone Handling:")
    print(f"  Enabled:              {config.clones_enabled}")
    if config.clones_enabled:
        print(f"  Threshold:            {config.clone_threshold}")
        print(f"  Strategy:             {config.clone_strategy.value}")

    print(f"\nFitness Function:")
    print(f"  Time Weight:          {config.time_weight}")
    print(f"  Cost Weight:          {config.cost_weight} (divisor {config.cost_divisor:g})")
    print(f"  Enforce Precedence:   {config.enforce_precedence}")

    print(f"\nConvergence:")
    print(f"  Max Generations:      {config.max_generations}")
    print(f"  Fitness Threshold:    {config.fitness_threshold}")
    print(f"  Early Stop Patience:  {config.early_stopping_patience or 'off'}")

    print(f"\nOutput:")
    print(f"  Results Directory:    {config.results_dir}")
    print(f"  Parallel Workers:     {config.parallel_workers}")
    print(f"{'='*70}\n")


def parse_args(argv=None):
    """Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Run Genetic Algorithm optimization for skill-constrained project schedules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_ga.py --instance instances/10_3_5_3.def
  python scripts/run_ga.py --instance instances/10_3_5_3.def --population-size 50
  python scripts/run_ga.py --instance instances/10_3_5_3.def --clone-strategy elimination
        """
    )

    parser.add_argument(
        '--instance',
        type=str,
        required=True,
        help='Path to the .def problem instance'
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config/ga/default.yaml',
        help='Path to GA configuration file (default: config/ga/default.yaml)'
    )

    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Override results directory'
    )

    # Parameter overrides
    parser.add_argument('--population-size', type=int, default=None, help='Override population size')
    parser.add_argument('--max-generations', type=int, default=None, help='Override maximum generations')
    parser.add_argument('--mutation-rate', type=float, default=None, help='Override per-gene mutation rate')
    parser.add_argument('--crossover-rate', type=float, default=None, help='Override crossover rate')
    parser.add_argument('--pairing', type=str, default=None, help='Override pairing strategy')
    parser.add_argument('--clone-strategy', type=str, default=None, help='Override clone strategy')
    parser.add_argument('--fitness-threshold', type=float, default=None, help='Stop once best fitness <= value')
    parser.add_argument('--parallel-workers', type=int, default=None, help='Override number of parallel workers')
    parser.add_argument('--seed', type=int, default=None, help='Override random seed')

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Append the debug section to result.sol'
    )

    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress verbose output'
    )

    return parser.parse_args(argv)


_OVERRIDES = {
    'population_size': 'population_size',
    'max_generations': 'max_generations',
    'mutation_rate': 'mutation_rate',
    'crossover_rate': 'crossover_rate',
    'pairing': 'pairing_strategy',
    'clone_strategy': 'clone_strategy',
    'fitness_threshold': 'fitness_threshold',
    'parallel_workers': 'parallel_workers',
    'seed': 'seed',
    'output': 'results_dir',
}


def apply_overrides(config: GAConfig, args) -> bool:
    """Apply command-line parameter overrides to config and re-validate.

    Returns:
        True if any override was applied
    """
    applied = False
    for arg_name, field_name in _OVERRIDES.items():
        value = getattr(args, arg_name)
        if value is not None:
            setattr(config, field_name, value)
            applied = True

    if args.debug:
        config.debug_output = True
        applied = True

    config.validate()
    return applied


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    verbose = not args.quiet

    if verbose:
        print("\n" + "="*70)
        print("  Genetic Algorithm Optimization - Project Schedule")
        print("="*70)

    try:
        if verbose:
            print(f"\nLoading configuration from: {args.config}")
        config = GAConfig.from_yaml(args.config)

        if apply_overrides(config, args) and verbose:
            print("Applied command-line parameter overrides")

        if verbose:
            print(f"Loading instance from: {args.instance}")
        instance = read_def(args.instance)

        if verbose:
            display_config_summary(config, args.instance)

        ga = GAAlgorithm(config=config, instance=instance, verbose=verbose)

        def _handle_sigint(signum, frame):
            print("\n⚠️  Interrupt received, stopping after the current generation...")
            ga.request_cancel()

        previous_handler = signal.signal(signal.SIGINT, _handle_sigint)

        start_time = time.time()
        try:
            result = ga.run()
        finally:
            signal.signal(signal.SIGINT, previous_handler)
        elapsed_time = time.time() - start_time

        if verbose:
            print(f"\n{'='*70}")
            print(f"  Final Results")
            print(f"{'='*70}")
            print(f"Best Fitness:        {result.best_fitness:.6f}")
            print(f"Found at Generation: {result.best_generation}")
            print(f"Stopped:             {result.reason.value} after {result.generations_run} generations")
            print(f"Total Time:          {elapsed_time:.1f} seconds")
            print(f"\nResults saved to:    {config.results_dir}")
            print(f"{'='*70}\n")

        print("✅ Optimization completed successfully!\n")
        sys.exit(0)

    except FileNotFoundError as e:
        print(f"\n❌ Error: {e}")
        print("   Please check that the instance and configuration files exist.\n")
        sys.exit(1)

    except ValueError as e:
        print(f"\n❌ Configuration Error: {e}")
        print("   Please check your configuration parameters and instance file.\n")
        sys.exit(1)


if __name__ == '__main__':
    main()
