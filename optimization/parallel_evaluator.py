"""
Parallel Fitness Evaluator for Genetic Algorithm

Distributes chromosome fitness evaluation across multiple CPU cores using
multiprocessing. Only chromosomes without a valid fitness cache are sent to
the workers; results are written back into each chromosome's cache in the
main process.

The simulation is deterministic and draws no random numbers, so a run gives
identical results for any worker count.
"""

from typing import List, Tuple, Optional, Callable
import multiprocessing as mp

from scheduling.chromosome import Chromosome
from scheduling.instance import ProblemInstance
from scheduling.simulator import simulate
from utils.config import FitnessConfig


def _evaluate_chromosome_worker(
    args: Tuple[int, List[int], List[int], ProblemInstance, FitnessConfig]
) -> Tuple[int, float]:
    """Worker function to evaluate a single chromosome.

    Args:
        args: Tuple of (chromosome_idx, resource_of, priority_of, instance, fitness_config)

    Returns:
        Tuple of (chromosome_idx, fitness)

    Note:
        This function must be at module level (not nested) to be picklable
        by multiprocessing.
    """
    chromosome_idx, resource_of, priority_of, instance, fitness_config = args
    result = simulate(resource_of, priority_of, instance, fitness_config)
    return (chromosome_idx, result.fitness)


class ParallelEvaluator:
    """Parallel chromosome fitness evaluator using multiprocessing.

    Attributes:
        instance: Problem instance shipped to the workers
        fitness_config: Fitness configuration shipped to the workers
        n_workers: Number of parallel worker processes
        verbose: Enable detailed logging

    Example:
        >>> parallel_eval = ParallelEvaluator(instance, FitnessConfig(), n_workers=4)
        >>> fitness_scores = parallel_eval.evaluate_population(population)
    """

    def __init__(
        self,
        instance: ProblemInstance,
        fitness_config: FitnessConfig = None,
        n_workers: int = 4,
        verbose: bool = False
    ):
        """Initialize parallel evaluator.

        Args:
            instance: Problem instance
            fitness_config: Fitness configuration (default: FitnessConfig())
            n_workers: Number of parallel workers (default: 4)
            verbose: Enable detailed logging

        Raises:
            ValueError: If n_workers <= 0
        """
        if n_workers <= 0:
            raise ValueError(f"n_workers must be positive, got {n_workers}")

        self.instance = instance
        self.fitness_config = fitness_config or FitnessConfig()
        self.n_workers = n_workers
        self.verbose = verbose

    def evaluate_population(
        self,
        population: List[Chromosome],
        progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> List[float]:
        """Evaluate fitness for an entire population in parallel.

        Args:
            population: List of chromosomes to evaluate
            progress_callback: Optional callback(completed, total) for progress tracking

        Returns:
            Fitness scores parallel to population
        """
        if len(population) == 0:
            return []

        work_items = [
            (idx, chrom.resource_of, chrom.priority_of, self.instance, self.fitness_config)
            for idx, chrom in enumerate(population)
            if not chrom.is_evaluated
        ]

        if self.verbose:
            print(f"   Evaluating {len(work_items)}/{len(population)} chromosomes "
                  f"on {self.n_workers} workers")

        if work_items:
            with mp.Pool(processes=self.n_workers) as pool:
                for completed, (idx, fitness) in enumerate(
                    pool.imap_unordered(_evaluate_chromosome_worker, work_items),
                    start=1
                ):
                    population[idx].store_fitness(fitness)

                    if progress_callback is not None:
                        progress_callback(completed, len(work_items))

        return [chrom.fitness(self.instance, self.fitness_config) for chrom in population]

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"ParallelEvaluator(n_workers={self.n_workers})"
