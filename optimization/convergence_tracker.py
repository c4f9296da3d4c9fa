"""
Convergence Tracker for Genetic Algorithm

Records per-generation fitness statistics and detects stagnation for early
stopping. Fitness is minimized: an improvement is a drop of the best fitness
by more than `min_delta`.
"""

from typing import List, NamedTuple
import numpy as np


class GenerationStats(NamedTuple):
    """Statistics of one generation."""

    generation: int
    min_fitness: float
    max_fitness: float
    mean_fitness: float
    diversity: float


class ConvergenceTracker:
    """Track fitness progression and detect convergence for early stopping.

    Attributes:
        patience: Generations without improvement before stopping (0 = never stop)
        min_delta: Minimum fitness decrease to count as progress
        best_fitness: Best (lowest) fitness observed so far
        best_generation: Generation where best fitness was achieved
        generations_since_improvement: Counter for early stopping
        history: List of GenerationStats

    Example:
        >>> tracker = ConvergenceTracker(patience=10, min_delta=1e-6)
        >>> for gen in range(50):
        ...     if tracker.update(gen, best, worst, mean, diversity):
        ...         break
    """

    def __init__(self, patience: int = 0, min_delta: float = 0.0):
        """Initialize convergence tracker.

        Args:
            patience: Generations without improvement before early stop (0 disables)
            min_delta: Minimum improvement threshold (default: 0.0)

        Raises:
            ValueError: If patience < 0 or min_delta < 0
        """
        if patience < 0:
            raise ValueError(f"patience must be non-negative, got {patience}")
        if min_delta < 0:
            raise ValueError(f"min_delta must be non-negative, got {min_delta}")

        self.patience = patience
        self.min_delta = min_delta

        self.best_fitness: float = np.inf
        self.best_generation: int = 0
        self.generations_since_improvement: int = 0

        self.history: List[GenerationStats] = []

    def update(
        self,
        generation: int,
        min_fitness: float,
        max_fitness: float,
        mean_fitness: float,
        diversity: float = 0.0
    ) -> bool:
        """Record a generation's statistics.

        Args:
            generation: Generation index (0 = initial population)
            min_fitness: Best fitness in the generation
            max_fitness: Worst fitness in the generation
            mean_fitness: Mean fitness across the population
            diversity: Population diversity metric

        Returns:
            True if the early stopping condition is met
        """
        self.history.append(
            GenerationStats(generation, min_fitness, max_fitness, mean_fitness, diversity)
        )

        if self.best_fitness - min_fitness > self.min_delta:
            self.best_fitness = min_fitness
            self.best_generation = generation
            self.generations_since_improvement = 0
        else:
            self.generations_since_improvement += 1

        return self.has_converged()

    def has_converged(self) -> bool:
        """True if no improvement for `patience` generations (never when patience is 0)."""
        if self.patience == 0:
            return False
        return self.generations_since_improvement >= self.patience

    def get_history(self) -> List[GenerationStats]:
        """Copy of the complete history."""
        return self.history.copy()

    def get_improvement_summary(self) -> dict:
        """Summary of fitness improvement over the run.

        Returns:
            Dictionary with best_fitness, best_generation, total_generations,
            improvement_from_start and generations_since_improvement
        """
        if not self.history:
            return {
                'best_fitness': np.inf,
                'best_generation': 0,
                'total_generations': 0,
                'improvement_from_start': 0.0,
                'generations_since_improvement': 0
            }

        first_best = self.history[0].min_fitness

        return {
            'best_fitness': float(self.best_fitness),
            'best_generation': self.best_generation,
            'total_generations': len(self.history),
            'improvement_from_start': float(first_best - self.best_fitness),
            'generations_since_improvement': self.generations_since_improvement
        }

    def reset(self) -> None:
        """Clear history and counters."""
        self.best_fitness = np.inf
        self.best_generation = 0
        self.generations_since_improvement = 0
        self.history = []

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"ConvergenceTracker(patience={self.patience}, "
            f"min_delta={self.min_delta}, "
            f"best_fitness={self.best_fitness:.6f}, "
            f"generations_since_improvement={self.generations_since_improvement})"
        )
