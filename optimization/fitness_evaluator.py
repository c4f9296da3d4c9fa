"""
Fitness Evaluator for Genetic Algorithm

Evaluates chromosome fitness by simulating the schedule it encodes and
combining makespan, resource cost and penalty terms into one scalar.

Fitness Formula (lower is better):
    fitness = time_weight × makespan
              + cost_weight × total_cost / cost_divisor
              + penalties

With the default weights the makespan dominates and cost acts as a
tie-breaker between schedules of equal length.
"""

from typing import Dict, List, Tuple, Any

from scheduling.chromosome import Chromosome
from scheduling.instance import ProblemInstance
from scheduling.simulator import simulate
from utils.config import FitnessConfig


class FitnessEvaluator:
    """Evaluate chromosome fitness through schedule simulation.

    Attributes:
        instance: Problem instance (read-only)
        fitness_config: Objective weights, penalties and precedence mode
        verbose: Enable detailed logging

    Example:
        >>> evaluator = FitnessEvaluator(instance, FitnessConfig())
        >>> fitness, metrics = evaluator.evaluate(chromosome)
        >>> print(f"Makespan: {metrics['makespan']}")
    """

    def __init__(
        self,
        instance: ProblemInstance,
        fitness_config: FitnessConfig = None,
        verbose: bool = False
    ):
        """Initialize fitness evaluator.

        Args:
            instance: Problem instance
            fitness_config: Fitness configuration (default: FitnessConfig())
            verbose: Enable detailed logging
        """
        self.instance = instance
        self.fitness_config = fitness_config or FitnessConfig()
        self.verbose = verbose

    def evaluate(self, chromosome: Chromosome) -> Tuple[float, Dict[str, Any]]:
        """Simulate a chromosome and return its fitness with a metrics breakdown.

        The chromosome's fitness cache is filled as a side effect.

        Args:
            chromosome: Chromosome to evaluate

        Returns:
            Tuple of (fitness, metrics) where metrics contains makespan,
            total_cost, penalty, fitness and n_violations

        Raises:
            ValueError: If the chromosome does not fit the instance
        """
        chromosome.validate(self.instance)

        result = simulate(
            chromosome.resource_of,
            chromosome.priority_of,
            self.instance,
            self.fitness_config
        )
        chromosome.store_fitness(result.fitness)

        metrics = {
            'makespan': result.makespan,
            'total_cost': result.total_cost,
            'penalty': result.penalty,
            'fitness': result.fitness,
            'n_violations': len(result.violations)
        }

        if self.verbose:
            print(
                f"  Fitness: {result.fitness:.6f} "
                f"(makespan={result.makespan}, cost={result.total_cost:.1f}, "
                f"penalty={result.penalty:.3f})"
            )

        return result.fitness, metrics

    def evaluate_population(
        self,
        population: List[Chromosome],
        progress_callback=None
    ) -> List[float]:
        """Fitness of every chromosome, reusing valid caches.

        Args:
            population: Chromosomes to evaluate
            progress_callback: Optional callback(completed, total)

        Returns:
            Fitness scores parallel to population
        """
        scores = []
        for completed, chrom in enumerate(population, start=1):
            scores.append(chrom.fitness(self.instance, self.fitness_config))
            if progress_callback is not None:
                progress_callback(completed, len(population))
        return scores

    def __repr__(self) -> str:
        """String representation for debugging."""
        cfg = self.fitness_config
        return (
            f"FitnessEvaluator("
            f"weights=[T:{cfg.time_weight:.2f}, C:{cfg.cost_weight:.2f}/{cfg.cost_divisor:g}], "
            f"enforce_precedence={cfg.enforce_precedence})"
        )
