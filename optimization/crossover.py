"""
Pairing Strategies for Genetic Algorithm Crossover

Decides which breeder pairs attempt crossover in a generation. Breeders are
expected in rank order (best first). Every attempt calls
`Chromosome.crossover`, which itself is gated by the crossover rate, so a
pairing contributes zero or one child.

Strategies:
- simple_pairs: disjoint sequential pairs (0,1), (2,3), ...
- equal_opportunity: every ordered pair (i, j), i != j (quadratic cost,
  maximum mixing)
- falloff_linear / falloff_cosine: pairs (i, j), i < j, accepted with a
  probability that decays with rank distance, favoring similar-fitness
  parents while still allowing long-range recombination
"""

from enum import Enum
from typing import List
import math
import numpy as np

from scheduling.chromosome import Chromosome
from scheduling.recombination import CrossoverShape


class PairingStrategy(str, Enum):
    """Which breeder pairs attempt crossover."""

    SIMPLE_PAIRS = "simple_pairs"
    EQUAL_OPPORTUNITY = "equal_opportunity"
    FALLOFF_LINEAR = "falloff_linear"
    FALLOFF_COSINE = "falloff_cosine"


def rank_distance_fraction(i: int, j: int, n: int) -> float:
    """Normalized rank distance for pair (i, j), i < j, among n breeders.

    Equals 1.0 for j = n - 1 and approaches 0 for adjacent ranks near the top.
    """
    return (j - i + 1) / (n - i)


def falloff_probability(i: int, j: int, n: int, cosine: bool = False) -> float:
    """Acceptance probability of pair (i, j) under falloff pairing.

    Linear: 1 - f = (n - j - 1) / (n - i)
    Cosine: cos(f * pi / 2)

    Args:
        i: Rank of the first parent
        j: Rank of the second parent (i < j)
        n: Number of breeders
        cosine: Use the cosine falloff curve

    Returns:
        Probability in [0, 1]
    """
    f = rank_distance_fraction(i, j, n)
    if cosine:
        return max(0.0, math.cos(f * math.pi / 2))
    return 1.0 - f


def _attempt(
    parent_a: Chromosome,
    parent_b: Chromosome,
    crossover_rate: float,
    shape: CrossoverShape,
    rng: np.random.Generator,
    offspring: List[Chromosome]
) -> None:
    child = parent_a.crossover(parent_b, crossover_rate=crossover_rate, shape=shape, rng=rng)
    if child is not None:
        offspring.append(child)


def simple_pairs(
    breeders: List[Chromosome],
    crossover_rate: float,
    shape: CrossoverShape,
    rng: np.random.Generator
) -> List[Chromosome]:
    """Pair breeders (0,1), (2,3), ...; an odd breeder out is skipped."""
    offspring: List[Chromosome] = []
    for i in range(0, len(breeders) - 1, 2):
        _attempt(breeders[i], breeders[i + 1], crossover_rate, shape, rng, offspring)
    return offspring


def equal_opportunity(
    breeders: List[Chromosome],
    crossover_rate: float,
    shape: CrossoverShape,
    rng: np.random.Generator
) -> List[Chromosome]:
    """Every ordered pair (i, j), i != j, attempts crossover."""
    offspring: List[Chromosome] = []
    n = len(breeders)
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            _attempt(breeders[i], breeders[j], crossover_rate, shape, rng, offspring)
    return offspring


def falloff(
    breeders: List[Chromosome],
    crossover_rate: float,
    shape: CrossoverShape,
    rng: np.random.Generator,
    cosine: bool = False
) -> List[Chromosome]:
    """Pairs (i, j), i < j, accepted with rank-distance falloff probability."""
    offspring: List[Chromosome] = []
    n = len(breeders)
    for i in range(n):
        for j in range(i + 1, n):
            if rng.random() < falloff_probability(i, j, n, cosine=cosine):
                _attempt(breeders[i], breeders[j], crossover_rate, shape, rng, offspring)
    return offspring


def falloff_linear(breeders, crossover_rate, shape, rng):
    return falloff(breeders, crossover_rate, shape, rng, cosine=False)


def falloff_cosine(breeders, crossover_rate, shape, rng):
    return falloff(breeders, crossover_rate, shape, rng, cosine=True)


_PAIRINGS = {
    PairingStrategy.SIMPLE_PAIRS: simple_pairs,
    PairingStrategy.EQUAL_OPPORTUNITY: equal_opportunity,
    PairingStrategy.FALLOFF_LINEAR: falloff_linear,
    PairingStrategy.FALLOFF_COSINE: falloff_cosine,
}


def breed(
    breeders: List[Chromosome],
    strategy: PairingStrategy,
    crossover_rate: float,
    shape: CrossoverShape = CrossoverShape.SINGLE_POINT,
    rng: np.random.Generator = None
) -> List[Chromosome]:
    """Produce offspring from breeders with the given pairing strategy.

    Args:
        breeders: Breeding subset of the population, best first
        strategy: Pairing strategy
        crossover_rate: Per-pairing crossover probability
        shape: Recombination shape
        rng: Random number generator

    Returns:
        List of new (unevaluated) children

    Raises:
        ValueError: If strategy is not a PairingStrategy

    Example:
        >>> children = breed(pop[:20], PairingStrategy.EQUAL_OPPORTUNITY, 0.4, rng=rng)
        >>> population.extend(children)
    """
    if rng is None:
        rng = np.random.default_rng()

    try:
        pairing = _PAIRINGS[PairingStrategy(strategy)]
    except ValueError:
        raise ValueError(
            f"Unknown pairing strategy: '{strategy}'. "
            f"Valid options: {[s.value for s in PairingStrategy]}"
        ) from None

    return pairing(breeders, crossover_rate, CrossoverShape(shape), rng)
