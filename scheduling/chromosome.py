"""
Chromosome Data Structure for Skill-Constrained Project Scheduling

Encodes a complete candidate schedule as two parallel gene sequences:
- resource_of: Which eligible resource performs each task
- priority_of: Ordering key per task in [0, n_tasks) (lower = attempt earlier)

The schedule itself is not stored: the simulator derives start times from the
genes. Fitness is cached on the chromosome and invalidated only by the two
operations that change genes (mutation and child construction).

Gene layout for crossover (combined sequence, length 2 * n_tasks):
    [resource_of[0], ..., resource_of[n-1], priority_of[0], ..., priority_of[n-1]]

Two chromosomes are equal iff both sequences are element-wise equal, which is
what clone detection relies on.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Sequence
import json
import numpy as np

from scheduling.instance import ProblemInstance
from scheduling.recombination import CrossoverShape, recombine
from scheduling.simulator import simulate
from utils.config import FitnessConfig


@dataclass(eq=False)
class Chromosome:
    """Genetic encoding of a task-to-resource assignment with priorities.

    Example:
        >>> rng = np.random.default_rng(42)
        >>> chrom = Chromosome.random(instance, rng=rng)
        >>> fitness = chrom.fitness(instance, FitnessConfig())
        >>> n_changed = chrom.mutate(instance, probability=0.03, rng=rng)
    """

    resource_of: List[int]
    """Assigned resource id per task."""

    priority_of: List[int]
    """Scheduling priority per task (lower value = scheduled earlier)."""

    _fitness: Optional[float] = field(default=None, init=False, repr=False)
    _fitness_valid: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        if len(self.resource_of) != len(self.priority_of):
            raise ValueError(
                f"Gene length mismatch: {len(self.resource_of)} resources vs "
                f"{len(self.priority_of)} priorities"
            )
        self.resource_of = [int(r) for r in self.resource_of]
        self.priority_of = [int(p) for p in self.priority_of]

    @property
    def n_tasks(self) -> int:
        """Number of tasks encoded."""
        return len(self.resource_of)

    @property
    def genes(self) -> List[int]:
        """Combined gene sequence (resource half followed by priority half)."""
        return self.resource_of + self.priority_of

    @property
    def is_evaluated(self) -> bool:
        """True if the cached fitness is valid."""
        return self._fitness_valid

    @classmethod
    def from_genes(cls, genes: Sequence[int]) -> 'Chromosome':
        """Rebuild a chromosome from a combined gene sequence."""
        if len(genes) % 2 != 0:
            raise ValueError(f"Combined gene sequence must have even length, got {len(genes)}")
        n = len(genes) // 2
        return cls(resource_of=list(genes[:n]), priority_of=list(genes[n:]))

    @classmethod
    def random(
        cls,
        instance: ProblemInstance,
        rng: np.random.Generator = None
    ) -> 'Chromosome':
        """Generate a random chromosome for GA initialization.

        Every task receives a uniformly random eligible resource and a
        uniformly random priority in [0, n_tasks).

        Args:
            instance: Problem instance
            rng: Random number generator (default: new RNG)

        Returns:
            Random chromosome satisfying the eligibility invariant
        """
        if rng is None:
            rng = np.random.default_rng()

        n = instance.n_tasks
        resource_of = []
        for task_id in range(n):
            eligible = instance.eligible_resources(task_id)
            resource_of.append(eligible[int(rng.integers(0, len(eligible)))])
        priority_of = [int(p) for p in rng.integers(0, n, size=n)]

        return cls(resource_of=resource_of, priority_of=priority_of)

    def validate(self, instance: ProblemInstance) -> None:
        """Check genes against the instance.

        Raises:
            ValueError: If lengths mismatch, a resource is ineligible, or a
                priority is out of range
        """
        n = instance.n_tasks
        if self.n_tasks != n:
            raise ValueError(f"Chromosome encodes {self.n_tasks} tasks, instance has {n}")

        for task_id, resource_id in enumerate(self.resource_of):
            if not instance.is_eligible(task_id, resource_id):
                raise ValueError(
                    f"Resource {resource_id} is not eligible for task {task_id}"
                )

        for task_id, priority in enumerate(self.priority_of):
            if not 0 <= priority < n:
                raise ValueError(
                    f"Priority of task {task_id} out of range: {priority} (must be in [0, {n}))"
                )

    def fitness(self, instance: ProblemInstance, config: FitnessConfig) -> float:
        """Fitness of this schedule (lower is better), cached until genes change.

        Args:
            instance: Problem instance
            config: Fitness configuration

        Returns:
            Scalar fitness
        """
        if not self._fitness_valid:
            self._fitness = simulate(self.resource_of, self.priority_of, instance, config).fitness
            self._fitness_valid = True
        return self._fitness

    def store_fitness(self, value: float) -> None:
        """Store a fitness computed elsewhere for the current genes (parallel evaluation)."""
        self._fitness = float(value)
        self._fitness_valid = True

    def mutate(
        self,
        instance: ProblemInstance,
        probability: float,
        rng: np.random.Generator = None,
        clone_escape: bool = False,
        escape_sigma: float = 0.5
    ) -> int:
        """Mutate genes in place.

        For every task, independently with `probability`, redraw the resource
        (uniform over eligible resources) and, independently with
        `probability`, redraw the priority. In normal mode the priority is
        uniform in [0, n_tasks); in clone-escape mode it is drawn from a
        Gaussian around the current value with standard deviation
        `escape_sigma * n_tasks`, rounded and clipped to range.

        Args:
            instance: Problem instance
            probability: Per-gene mutation probability
            rng: Random number generator
            clone_escape: Use the wide priority perturbation
            escape_sigma: Spread of the clone-escape perturbation (fraction of n_tasks)

        Returns:
            Number of genes whose value changed
        """
        if rng is None:
            rng = np.random.default_rng()

        n = self.n_tasks
        changed = 0

        for task_id in range(n):
            if rng.random() < probability:
                eligible = instance.eligible_resources(task_id)
                new_resource = eligible[int(rng.integers(0, len(eligible)))]
                if new_resource != self.resource_of[task_id]:
                    self.resource_of[task_id] = new_resource
                    changed += 1

            if rng.random() < probability:
                if clone_escape:
                    drawn = rng.normal(self.priority_of[task_id], escape_sigma * n)
                    new_priority = int(np.clip(round(drawn), 0, n - 1))
                else:
                    new_priority = int(rng.integers(0, n))
                if new_priority != self.priority_of[task_id]:
                    self.priority_of[task_id] = new_priority
                    changed += 1

        if changed:
            self._fitness_valid = False
            self._fitness = None

        return changed

    def crossover(
        self,
        other: 'Chromosome',
        crossover_rate: float = 0.4,
        shape: CrossoverShape = CrossoverShape.SINGLE_POINT,
        rng: np.random.Generator = None
    ) -> Optional['Chromosome']:
        """Attempt to breed one child with another chromosome.

        Args:
            other: Parent B (self is parent A)
            crossover_rate: Probability that this pairing produces a child
            shape: Recombination shape
            rng: Random number generator

        Returns:
            The child (unevaluated), or None if the pairing did not fire

        Raises:
            ValueError: If parents encode different task counts
        """
        if rng is None:
            rng = np.random.default_rng()

        if self.n_tasks != other.n_tasks:
            raise ValueError(
                f"Cannot crossover chromosomes with different task counts: "
                f"{self.n_tasks} vs {other.n_tasks}"
            )

        if rng.random() >= crossover_rate:
            return None

        return Chromosome.from_genes(recombine(shape, self.genes, other.genes, rng))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize chromosome to dictionary for JSON export."""
        result = {
            'resource_of': list(self.resource_of),
            'priority_of': list(self.priority_of),
            'n_tasks': self.n_tasks
        }
        if self._fitness_valid:
            result['fitness'] = self._fitness
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Chromosome':
        """Deserialize chromosome from dictionary (cached fitness is not restored)."""
        return cls(resource_of=data['resource_of'], priority_of=data['priority_of'])

    def to_json(self, filepath: str) -> None:
        """Save chromosome to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_json(cls, filepath: str) -> 'Chromosome':
        """Load chromosome from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chromosome):
            return NotImplemented
        return self.resource_of == other.resource_of and self.priority_of == other.priority_of

    def __hash__(self) -> int:
        return hash((tuple(self.resource_of), tuple(self.priority_of)))

    def __repr__(self) -> str:
        """String representation for debugging."""
        fitness = f"{self._fitness:.6f}" if self._fitness_valid else "n/a"
        return f"Chromosome(tasks={self.n_tasks}, fitness={fitness})"
