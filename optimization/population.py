"""
Population Management for Genetic Algorithm

Manages the population of schedule chromosomes throughout the GA run.
Provides functionality for:
- Population initialization
- Fitness tracking (minimization)
- Statistical analysis
- Diversity measurement
- Elitism re-insertion

The population grows above its target size during a generation (offspring
are appended) and is truncated back by selection; `size` is the target.
"""

from typing import List, Tuple, Dict
import numpy as np

from scheduling.chromosome import Chromosome
from scheduling.instance import ProblemInstance


class Population:
    """Manages a population of chromosomes for genetic algorithm optimization.

    Attributes:
        size: Target number of individuals
        instance: Problem instance all chromosomes encode
        chromosomes: List of Chromosome objects
        fitness_scores: Parallel list of fitness values (lower is better)
        rng: NumPy random generator for deterministic operations
        generation: Current generation number

    Example:
        >>> pop = Population(instance, size=20, rng=np.random.default_rng(42))
        >>> pop.initialize_random()
        >>> pop.fitness_scores = evaluator.evaluate_population(pop.chromosomes)
        >>> best_chrom, best_fitness = pop.get_best()
    """

    def __init__(
        self,
        instance: ProblemInstance,
        size: int = 20,
        rng: np.random.Generator = None
    ):
        """Initialize population with given parameters.

        Args:
            instance: Problem instance
            size: Target population size (default: 20)
            rng: Random number generator shared with the GA (default: new RNG)

        Raises:
            ValueError: If size <= 0
        """
        if size <= 0:
            raise ValueError(f"Population size must be positive, got {size}")

        self.instance = instance
        self.size = size
        self.rng = rng if rng is not None else np.random.default_rng()

        self.chromosomes: List[Chromosome] = []
        self.fitness_scores: List[float] = []
        self.generation = 0

    def initialize_random(self) -> None:
        """Fill the population with `size` random chromosomes.

        Example:
            >>> pop.initialize_random()
            >>> len(pop.chromosomes)
            20
        """
        self.chromosomes = [
            Chromosome.random(self.instance, rng=self.rng)
            for _ in range(self.size)
        ]
        self.fitness_scores = []
        self.generation = 0

    def get_best(self) -> Tuple[Chromosome, float]:
        """Get the individual with the lowest fitness.

        Returns:
            Tuple of (best_chromosome, best_fitness)
        """
        best_idx = int(np.argmin(self.fitness_scores))
        return self.chromosomes[best_idx], self.fitness_scores[best_idx]

    def get_worst(self) -> Tuple[Chromosome, float]:
        """Get the individual with the highest fitness.

        Returns:
            Tuple of (worst_chromosome, worst_fitness)
        """
        worst_idx = int(np.argmax(self.fitness_scores))
        return self.chromosomes[worst_idx], self.fitness_scores[worst_idx]

    def get_statistics(self) -> Dict[str, float]:
        """Compute fitness statistics for the population.

        Returns:
            Dictionary with keys 'min', 'max', 'mean', 'std', 'median'
        """
        if len(self.fitness_scores) == 0:
            return {'min': 0.0, 'max': 0.0, 'mean': 0.0, 'std': 0.0, 'median': 0.0}

        fitness_array = np.array(self.fitness_scores)

        return {
            'min': float(np.min(fitness_array)),
            'max': float(np.max(fitness_array)),
            'mean': float(np.mean(fitness_array)),
            'std': float(np.std(fitness_array)),
            'median': float(np.median(fitness_array))
        }

    def compute_diversity(self) -> float:
        """Average pairwise normalized Hamming distance over the combined genes.

        Returns:
            Diversity in [0, 1]
            - 0.0: All chromosomes identical
            - 1.0: Every gene differs between every pair
        """
        n = len(self.chromosomes)
        if n < 2:
            return 0.0

        genes = np.array([chrom.genes for chrom in self.chromosomes])
        n_genes = genes.shape[1]

        total_distance = 0.0
        for i in range(n - 1):
            total_distance += float(np.sum(genes[i + 1:] != genes[i]))

        pair_count = n * (n - 1) / 2
        return total_distance / (pair_count * n_genes)

    def replace(self, new_chromosomes: List[Chromosome], fitness_scores: List[float]) -> None:
        """Replace the population after selection.

        Args:
            new_chromosomes: Survivors
            fitness_scores: Their fitness values

        Raises:
            ValueError: If the lists differ in length
        """
        if len(new_chromosomes) != len(fitness_scores):
            raise ValueError(
                f"Chromosome count ({len(new_chromosomes)}) does not match "
                f"fitness count ({len(fitness_scores)})"
            )

        self.chromosomes = new_chromosomes
        self.fitness_scores = list(fitness_scores)
        self.generation += 1

    def contains(self, chromosome: Chromosome) -> bool:
        """True if a structurally equal chromosome is in the population."""
        return any(chrom == chromosome for chrom in self.chromosomes)

    def insert_elite(self, chromosome: Chromosome, fitness: float) -> None:
        """Put the all-time best at the front, dropping the last (worst) individual.

        Assumes the population is sorted best-first, as selection leaves it.
        """
        if len(self.chromosomes) >= self.size:
            self.chromosomes.pop()
            self.fitness_scores.pop()
        self.chromosomes.insert(0, chromosome)
        self.fitness_scores.insert(0, fitness)

    def __len__(self) -> int:
        """Return current number of individuals."""
        return len(self.chromosomes)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Population(size={self.size}, "
            f"current={len(self.chromosomes)}, "
            f"gen={self.generation}, "
            f"tasks={self.instance.n_tasks})"
        )
