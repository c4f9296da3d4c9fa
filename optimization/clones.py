"""
Clone Detection and Handling

After crossover and mutation the population tends to collapse onto a few
identical genotypes. Clones are detected by structural equality (identical
resource and priority genes). When the duplicate fraction, measured against
the target population size, exceeds a threshold, one of two strategies runs:

- mutation: re-mutate every duplicate beyond the first of its group at an
  amplified rate, with the wide clone-escape priority perturbation
- elimination: keep only the first (best-ranked) member of every group and
  top the population up with fresh random chromosomes
"""

from collections import OrderedDict
from enum import Enum
from typing import Callable, List, Optional
import numpy as np

from scheduling.chromosome import Chromosome
from scheduling.instance import ProblemInstance
from utils.config import FitnessConfig


_MAX_REFILL_RETRIES = 1000


class CloneStrategy(str, Enum):
    """How over-threshold clone groups are handled."""

    MUTATION = "mutation"
    ELIMINATION = "elimination"


def group_clones(population: List[Chromosome]) -> List[List[Chromosome]]:
    """Group chromosomes by structural equality, in order of first appearance."""
    groups: "OrderedDict[Chromosome, List[Chromosome]]" = OrderedDict()
    for chrom in population:
        groups.setdefault(chrom, []).append(chrom)
    return list(groups.values())


def count_clones(population: List[Chromosome]) -> int:
    """Number of individuals that duplicate an earlier one."""
    return len(population) - len(set(population))


def clone_fraction(population: List[Chromosome], target_size: int) -> float:
    """Duplicate count relative to the target population size."""
    return count_clones(population) / target_size


def mutate_clones(
    population: List[Chromosome],
    instance: ProblemInstance,
    probability: float,
    rng: np.random.Generator,
    escape_sigma: float = 0.5
) -> int:
    """Re-mutate every duplicate beyond the first of each group in place.

    Args:
        population: Population (modified in place)
        instance: Problem instance
        probability: Amplified per-gene mutation probability
        rng: Random number generator
        escape_sigma: Clone-escape priority spread (fraction of n_tasks)

    Returns:
        Number of chromosomes that were re-mutated
    """
    n_mutated = 0
    for group in group_clones(population):
        for clone in group[1:]:
            clone.mutate(
                instance,
                probability=probability,
                rng=rng,
                clone_escape=True,
                escape_sigma=escape_sigma
            )
            n_mutated += 1
    return n_mutated


def eliminate_clones(
    population: List[Chromosome],
    instance: ProblemInstance,
    fitness_config: FitnessConfig,
    target_size: int,
    rng: np.random.Generator,
    evaluate: Optional[Callable[[List[Chromosome]], List[float]]] = None
) -> List[Chromosome]:
    """Drop duplicates, keeping the best-ranked member of each group, then refill.

    Args:
        population: Current population
        instance: Problem instance
        fitness_config: Fitness configuration (used to rank before dedup)
        target_size: Size to top the population back up to
        rng: Random number generator for fresh chromosomes
        evaluate: Population evaluator returning scores parallel to its input
            (e.g. ParallelEvaluator.evaluate_population); serial when None

    Returns:
        New population with no structural duplicates and at least target_size members
    """
    if evaluate is None:
        scores = [c.fitness(instance, fitness_config) for c in population]
    else:
        scores = evaluate(population)
    order = np.argsort(scores, kind='stable')
    ranked = [population[i] for i in order]
    unique = [group[0] for group in group_clones(ranked)]

    seen = set(unique)
    retries = 0
    while len(unique) < target_size:
        fresh = Chromosome.random(instance, rng=rng)
        # Tiny instances may not have target_size distinct genotypes
        if fresh in seen and retries < _MAX_REFILL_RETRIES:
            retries += 1
            continue
        seen.add(fresh)
        unique.append(fresh)

    return unique


def handle_clones(
    population: List[Chromosome],
    instance: ProblemInstance,
    fitness_config: FitnessConfig,
    target_size: int,
    threshold: float,
    strategy: CloneStrategy,
    base_mutation_rate: float,
    mutation_factor: float = 10.0,
    escape_sigma: float = 0.5,
    rng: Optional[np.random.Generator] = None,
    evaluate: Optional[Callable[[List[Chromosome]], List[float]]] = None
) -> List[Chromosome]:
    """Detect clones and apply the configured strategy if above threshold.

    Args:
        population: Current population
        instance: Problem instance
        fitness_config: Fitness configuration
        target_size: Target population size
        threshold: Maximum tolerated clone fraction
        strategy: Clone strategy
        base_mutation_rate: Base per-gene mutation probability
        mutation_factor: Amplification of the base rate for the mutation strategy
        escape_sigma: Clone-escape priority spread
        rng: Random number generator
        evaluate: Population evaluator used to rank before elimination

    Returns:
        The (possibly new) population list

    Raises:
        ValueError: If strategy is unknown
    """
    if rng is None:
        rng = np.random.default_rng()

    try:
        strategy = CloneStrategy(strategy)
    except ValueError:
        raise ValueError(
            f"Unknown clone strategy: '{strategy}'. "
            "Valid options: 'mutation', 'elimination'"
        ) from None

    if clone_fraction(population, target_size) <= threshold:
        return population

    if strategy is CloneStrategy.MUTATION:
        probability = min(1.0, mutation_factor * base_mutation_rate)
        mutate_clones(population, instance, probability, rng, escape_sigma=escape_sigma)
        return population

    return eliminate_clones(
        population, instance, fitness_config, target_size, rng, evaluate=evaluate
    )
