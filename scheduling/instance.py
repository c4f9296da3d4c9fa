"""
Problem Instance for skill-constrained project scheduling

Immutable description of resources and tasks, plus the derived lookups every
genetic operator and the simulator need:
- Eligible resources per task (skill pool covers the task's requirements)
- Least-skilled eligible resource per task (used by the skill-mismatch penalty)
- Normalization constants (maximum serial duration, cheapest/most expensive cost)

All lookups are computed once at construction and owned by the instance, so
the instance can be shared read-only across the whole run (and shipped to
worker processes).
"""

from typing import Dict, List, Sequence, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Resource(BaseModel):
    """A resource able to perform tasks.

    Attributes:
        id: Dense 0-based resource id
        cost: Cost per unit of task duration
        skills: Skill pool, skill id -> proficiency level
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    cost: float = Field(ge=0.0)
    skills: Dict[int, int] = Field(default_factory=dict)

    @property
    def skill_sum(self) -> int:
        """Sum of all proficiency levels in the skill pool."""
        return sum(self.skills.values())

    def satisfies(self, requirements: Dict[int, int]) -> bool:
        """Check whether this resource covers every required skill level.

        Args:
            requirements: Skill id -> minimum level

        Returns:
            True if every required skill is present at or above its level
        """
        for skill_id, level in requirements.items():
            if self.skills.get(skill_id, -1) < level:
                return False
        return True


class Task(BaseModel):
    """A task to be scheduled.

    Attributes:
        id: Dense 0-based task id
        duration: Positive duration in time units
        skills: Skill requirements, skill id -> minimum level
        predecessors: Ids of tasks that must complete first
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    duration: int = Field(ge=1)
    skills: Dict[int, int] = Field(default_factory=dict)
    predecessors: Tuple[int, ...] = ()

    @field_validator("predecessors")
    @classmethod
    def validate_predecessors(cls, v, info):
        """Reject self-references."""
        task_id = info.data.get("id")
        if task_id is not None and task_id in v:
            raise ValueError(f"Task {task_id} lists itself as a predecessor")
        return v


class ProblemInstance:
    """Read-only problem data with precomputed eligibility lookups.

    Attributes:
        resources: Resources indexed by id
        tasks: Tasks indexed by id
        time_max: Sum of all task durations (fully serial schedule length)
        min_cost: Project cost if every task ran on the cheapest resource
        max_cost: Project cost if every task ran on the most expensive resource
        cheapest_resource: Id of the cheapest resource

    Raises:
        ValueError: If ids are not dense and 0-based, a predecessor is unknown,
            the precedence graph has a cycle, or a task has no eligible resource

    Example:
        >>> instance = ProblemInstance(resources, tasks)
        >>> instance.eligible_resources(3)
        (0, 2)
    """

    def __init__(self, resources: Sequence[Resource], tasks: Sequence[Task]):
        if len(resources) == 0:
            raise ValueError("Problem instance requires at least one resource")
        if len(tasks) == 0:
            raise ValueError("Problem instance requires at least one task")

        self.resources: List[Resource] = sorted(resources, key=lambda r: r.id)
        self.tasks: List[Task] = sorted(tasks, key=lambda t: t.id)

        self._validate_ids()
        self._validate_precedence()

        # Eligibility cache
        self._eligible: List[Tuple[int, ...]] = []
        self._eligible_sets: List[frozenset] = []
        self._least_skilled: List[int] = []

        for task in self.tasks:
            eligible = tuple(r.id for r in self.resources if r.satisfies(task.skills))
            if not eligible:
                raise ValueError(
                    f"No resource can perform task {task.id} "
                    f"(requires {dict(task.skills)})"
                )
            self._eligible.append(eligible)
            self._eligible_sets.append(frozenset(eligible))
            self._least_skilled.append(
                min(eligible, key=lambda rid: (self.resources[rid].skill_sum, rid))
            )

        # Normalization constants
        self.time_max = sum(t.duration for t in self.tasks)
        cheapest = min(self.resources, key=lambda r: (r.cost, r.id))
        priciest = max(self.resources, key=lambda r: (r.cost, -r.id))
        self.cheapest_resource = cheapest.id
        self.min_cost = self.time_max * cheapest.cost
        self.max_cost = self.time_max * priciest.cost

    def _validate_ids(self) -> None:
        """Ensure resource and task ids are dense, contiguous and 0-based."""
        for idx, resource in enumerate(self.resources):
            if resource.id != idx:
                raise ValueError(
                    f"Resource ids must be contiguous from 0: expected {idx}, got {resource.id}"
                )
        for idx, task in enumerate(self.tasks):
            if task.id != idx:
                raise ValueError(
                    f"Task ids must be contiguous from 0: expected {idx}, got {task.id}"
                )

    def _validate_precedence(self) -> None:
        """Ensure predecessors exist and the precedence graph is acyclic."""
        n = len(self.tasks)
        for task in self.tasks:
            for pred in task.predecessors:
                if not 0 <= pred < n:
                    raise ValueError(
                        f"Task {task.id} references unknown predecessor {pred}"
                    )

        # Kahn's algorithm
        in_degree = [len(set(t.predecessors)) for t in self.tasks]
        successors: List[List[int]] = [[] for _ in range(n)]
        for task in self.tasks:
            for pred in set(task.predecessors):
                successors[pred].append(task.id)

        ready = [tid for tid in range(n) if in_degree[tid] == 0]
        visited = 0
        while ready:
            tid = ready.pop()
            visited += 1
            for succ in successors[tid]:
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    ready.append(succ)

        if visited != n:
            on_cycle = next(tid for tid in range(n) if in_degree[tid] > 0)
            raise ValueError(
                f"Precedence graph contains a cycle involving task {on_cycle}"
            )

    @property
    def n_tasks(self) -> int:
        """Number of tasks."""
        return len(self.tasks)

    @property
    def n_resources(self) -> int:
        """Number of resources."""
        return len(self.resources)

    def eligible_resources(self, task_id: int) -> Tuple[int, ...]:
        """Resources whose skill pool covers the task (never empty)."""
        return self._eligible[task_id]

    def is_eligible(self, task_id: int, resource_id: int) -> bool:
        """Check whether a resource may perform a task."""
        return resource_id in self._eligible_sets[task_id]

    def least_skilled_resource(self, task_id: int) -> int:
        """Eligible resource with the smallest skill-level sum (ties: lowest id)."""
        return self._least_skilled[task_id]

    def summary(self) -> Dict[str, float]:
        """Size and serial-schedule bounds for reports."""
        return {
            'n_tasks': self.n_tasks,
            'n_resources': self.n_resources,
            'time_max': self.time_max,
            'cheapest_resource': self.cheapest_resource,
            'min_cost': self.min_cost,
            'max_cost': self.max_cost,
        }

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"ProblemInstance(tasks={self.n_tasks}, "
            f"resources={self.n_resources}, "
            f"time_max={self.time_max})"
        )
