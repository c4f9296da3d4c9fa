"""Skill-constrained project scheduling model and simulator."""

from .instance import ProblemInstance, Resource, Task
from .chromosome import Chromosome
from .recombination import CrossoverShape
from .simulator import SimulationResult, ScheduledTask, simulate
from .def_io import read_def, write_solution

__all__ = [
    "ProblemInstance",
    "Resource",
    "Task",
    "Chromosome",
    "CrossoverShape",
    "SimulationResult",
    "ScheduledTask",
    "simulate",
    "read_def",
    "write_solution"
]
