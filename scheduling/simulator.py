"""
Schedule Simulator (serial schedule generation)

Turns a chromosome's genes into a concrete timed schedule by advancing a
virtual integer clock:

1. Release every resource whose busy-until time has been reached, marking its
   task complete and charging duration x cost.
2. If every resource is busy, jump straight to the earliest release.
3. Otherwise walk the pending tasks by ascending priority (ties by task id)
   and start each one whose assigned resource is free, subject to the
   precedence mode. Soft quality signals are accumulated as penalties.

A task started at tick t with duration d occupies ticks t .. t+d-1 and frees
its resource at tick t+d. The makespan is the last occupied tick.

Fitness:
    fitness = time_weight * makespan
              + cost_weight * total_cost / cost_divisor
              + penalty

The simulation is a pure function of the genes, the instance and the
configuration, so repeated evaluations are bit-identical.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Sequence

from scheduling.instance import ProblemInstance
from utils.config import FitnessConfig


class ScheduledTask(NamedTuple):
    """One row of the simulated timeline (ticks are inclusive)."""

    task_id: int
    resource_id: int
    start: int
    finish: int


class PrecedenceViolation(NamedTuple):
    """A task started before one of its predecessors completed."""

    tick: int
    task_id: int
    predecessor_id: int


@dataclass
class SimulationResult:
    """Outcome of simulating one chromosome.

    Attributes:
        makespan: Last tick during which any task was running
        total_cost: Sum of duration x resource cost over all tasks
        penalty: Accumulated penalty terms
        fitness: Weighted scalar objective (lower is better)
        timeline: Started tasks in start order
        violations: Precedence violations (only when precedence is penalized)
    """

    makespan: int
    total_cost: float
    penalty: float
    fitness: float
    timeline: List[ScheduledTask] = field(default_factory=list)
    violations: List[PrecedenceViolation] = field(default_factory=list)

    def starts_by_tick(self) -> List[List[ScheduledTask]]:
        """Group timeline rows by start tick, in tick order (ticks without starts omitted)."""
        groups: List[List[ScheduledTask]] = []
        for row in self.timeline:
            if groups and groups[-1][0].start == row.start:
                groups[-1].append(row)
            else:
                groups.append([row])
        return groups


def simulate(
    resource_of: Sequence[int],
    priority_of: Sequence[int],
    instance: ProblemInstance,
    config: FitnessConfig
) -> SimulationResult:
    """Simulate task execution for one assignment.

    Args:
        resource_of: Assigned resource per task (must be eligible)
        priority_of: Priority per task
        instance: Problem instance
        config: Fitness configuration (weights, penalties, precedence mode)

    Returns:
        SimulationResult with makespan, cost, penalty, fitness and timeline

    Raises:
        RuntimeError: If no task can ever start again while tasks are pending
    """
    tasks = instance.tasks
    resources = instance.resources
    n_tasks = instance.n_tasks
    n_resources = instance.n_resources

    enforce = config.enforce_precedence
    penalties = config.penalties
    waiting_weight = penalties.waiting_task
    idle_weight = penalties.idle_resource
    skill_weight = penalties.skill_mismatch
    precedence_weight = penalties.precedence_violation

    busy_until = [0] * n_resources
    running = [-1] * n_resources
    n_busy = 0

    completed = [False] * n_tasks
    n_completed = 0

    pending = sorted(range(n_tasks), key=lambda tid: (priority_of[tid], tid))

    tick = 0
    total_cost = 0.0
    penalty = 0.0
    timeline: List[ScheduledTask] = []
    violations: List[PrecedenceViolation] = []

    while n_completed < n_tasks:
        tick += 1

        # Release finished tasks
        for rid in range(n_resources):
            tid = running[rid]
            if tid >= 0 and busy_until[rid] <= tick:
                completed[tid] = True
                n_completed += 1
                total_cost += tasks[tid].duration * resources[rid].cost
                running[rid] = -1
                n_busy -= 1

        # Nothing can start until the earliest release; every ready task
        # waits through each skipped tick
        if n_busy == n_resources:
            next_release = min(busy_until)
            if waiting_weight:
                n_ready = sum(
                    1 for tid in pending
                    if not enforce or all(completed[p] for p in tasks[tid].predecessors)
                )
                penalty += waiting_weight * n_ready * (next_release - tick)
            tick = next_release - 1
            continue

        still_pending = []
        for tid in pending:
            task = tasks[tid]
            rid = resource_of[tid]

            if enforce and not all(completed[p] for p in task.predecessors):
                still_pending.append(tid)
                continue

            if running[rid] >= 0:
                penalty += waiting_weight
                still_pending.append(tid)
                continue

            running[rid] = tid
            busy_until[rid] = tick + task.duration
            n_busy += 1
            timeline.append(ScheduledTask(tid, rid, tick, tick + task.duration - 1))

            if not enforce:
                for pred in task.predecessors:
                    if not completed[pred]:
                        penalty += precedence_weight
                        violations.append(PrecedenceViolation(tick, tid, pred))

            if skill_weight and rid != instance.least_skilled_resource(tid):
                penalty += skill_weight

        pending = still_pending

        if idle_weight and pending and n_busy < n_resources:
            ready = [
                tid for tid in pending
                if not enforce or all(completed[p] for p in tasks[tid].predecessors)
            ]
            for rid in range(n_resources):
                if running[rid] < 0 and any(instance.is_eligible(tid, rid) for tid in ready):
                    penalty += idle_weight

        if pending and n_busy == 0:
            raise RuntimeError(
                f"Schedule deadlocked at tick {tick}: {len(pending)} tasks pending, none runnable"
            )

    makespan = tick - 1
    fitness = (
        config.time_weight * makespan +
        config.cost_weight * total_cost / config.cost_divisor +
        penalty
    )

    return SimulationResult(
        makespan=makespan,
        total_cost=total_cost,
        penalty=penalty,
        fitness=fitness,
        timeline=timeline,
        violations=violations
    )
