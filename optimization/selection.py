"""
Survivor Selection Strategies for Genetic Algorithm

Truncates the enlarged population (parents + offspring) back to its target
size at the end of every generation. Fitness is minimized.

- Ranking: sort ascending by fitness and keep the best N.
- Tournament: run N tournaments, each sampling `tournament_size` individuals
  uniformly WITH replacement, and keep each tournament's best. The same
  individual can win several tournaments; repeated winners are deep-copied
  so the population never holds the same object twice (genes are mutated in
  place later on).

Both strategies return survivors sorted best-first, so the next generation's
breeders are always in rank order.
"""

from enum import Enum
from typing import List
import copy
import numpy as np

from scheduling.chromosome import Chromosome


class SelectionMethod(str, Enum):
    """Survivor selection strategy."""

    RANKING = "ranking"
    TOURNAMENT = "tournament"


def _check_inputs(population: List[Chromosome], fitness_scores: List[float], n_survivors: int) -> None:
    if len(population) == 0:
        raise ValueError("Population is empty")

    if len(population) != len(fitness_scores):
        raise ValueError(
            f"Population size ({len(population)}) does not match fitness scores ({len(fitness_scores)})"
        )

    if n_survivors < 1:
        raise ValueError(f"n_survivors must be at least 1, got {n_survivors}")


def tournament_winner(
    fitness_scores: List[float],
    tournament_size: int,
    rng: np.random.Generator
) -> int:
    """Index of the best of `tournament_size` uniformly sampled individuals (with replacement).

    Args:
        fitness_scores: Fitness values (lower is better)
        tournament_size: Number of contestants
        rng: Random number generator

    Returns:
        Index of the winner
    """
    contestants = rng.integers(0, len(fitness_scores), size=tournament_size)
    best_idx = int(contestants[0])
    for idx in contestants[1:]:
        if fitness_scores[idx] < fitness_scores[best_idx]:
            best_idx = int(idx)
    return best_idx


def ranking_selection(
    population: List[Chromosome],
    fitness_scores: List[float],
    n_survivors: int
) -> List[Chromosome]:
    """Keep the `n_survivors` individuals with the lowest fitness.

    Ties keep their current population order.

    Example:
        >>> survivors = ranking_selection(pop, scores, n_survivors=20)
    """
    _check_inputs(population, fitness_scores, n_survivors)

    order = sorted(range(len(population)), key=lambda idx: fitness_scores[idx])
    return [population[idx] for idx in order[:n_survivors]]


def tournament_selection(
    population: List[Chromosome],
    fitness_scores: List[float],
    n_survivors: int,
    tournament_size: int = 3,
    rng: np.random.Generator = None
) -> List[Chromosome]:
    """Choose `n_survivors` tournament winners, sorted best-first.

    Raises:
        ValueError: If tournament_size < 1 or inputs are inconsistent

    Example:
        >>> rng = np.random.default_rng(42)
        >>> survivors = tournament_selection(pop, scores, 20, tournament_size=3, rng=rng)
    """
    if rng is None:
        rng = np.random.default_rng()

    _check_inputs(population, fitness_scores, n_survivors)

    if tournament_size < 1:
        raise ValueError(f"Tournament size must be at least 1, got {tournament_size}")

    winners = [tournament_winner(fitness_scores, tournament_size, rng) for _ in range(n_survivors)]
    winners.sort(key=lambda idx: fitness_scores[idx])

    survivors = []
    taken = set()
    for idx in winners:
        if idx in taken:
            survivors.append(copy.deepcopy(population[idx]))
        else:
            survivors.append(population[idx])
            taken.add(idx)
    return survivors


def select_survivors(
    population: List[Chromosome],
    fitness_scores: List[float],
    n_survivors: int,
    method: SelectionMethod = SelectionMethod.RANKING,
    tournament_size: int = 3,
    rng: np.random.Generator = None
) -> List[Chromosome]:
    """Truncate the population with the specified selection method.

    Args:
        population: Current (enlarged) population
        fitness_scores: Parallel list of fitness values (lower is better)
        n_survivors: Target population size
        method: Selection method ("ranking" or "tournament")
        tournament_size: Tournament size (if method is tournament)
        rng: Random number generator

    Returns:
        Survivors sorted best-first

    Raises:
        ValueError: If method is unknown
    """
    try:
        method = SelectionMethod(method)
    except ValueError:
        raise ValueError(
            f"Unknown selection method: '{method}'. "
            "Valid options: 'ranking', 'tournament'"
        ) from None

    if method is SelectionMethod.RANKING:
        return ranking_selection(population, fitness_scores, n_survivors)
    return tournament_selection(population, fitness_scores, n_survivors, tournament_size, rng)
