"""Shared fixtures for the scheduling GA test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scheduling.instance import ProblemInstance, Resource, Task
from utils.config import FitnessConfig, PenaltyConfig


SAMPLE_DEF = Path(__file__).parent.parent / "instances" / "10_3_5_3.def"


@pytest.fixture
def literal_instance():
    """Two unskilled resources (cost 1.0 and 2.0) and three tasks, task 1 after task 0."""
    resources = [
        Resource(id=0, cost=1.0),
        Resource(id=1, cost=2.0),
    ]
    tasks = [
        Task(id=0, duration=2),
        Task(id=1, duration=3, predecessors=(0,)),
        Task(id=2, duration=1),
    ]
    return ProblemInstance(resources, tasks)


@pytest.fixture
def zero_penalty_config():
    """Precedence enforced, every penalty disabled."""
    return FitnessConfig(
        enforce_precedence=True,
        penalties=PenaltyConfig(
            precedence_violation=0.0,
            waiting_task=0.0,
            idle_resource=0.0,
            skill_mismatch=0.0
        )
    )


@pytest.fixture
def skilled_instance():
    """Three resources with distinct skill pools and six tasks in a small DAG."""
    resources = [
        Resource(id=0, cost=10.0, skills={0: 2, 1: 1}),
        Resource(id=1, cost=5.0, skills={1: 2, 2: 1}),
        Resource(id=2, cost=8.0, skills={0: 1, 2: 2}),
    ]
    tasks = [
        Task(id=0, duration=3, skills={0: 1}),
        Task(id=1, duration=2, skills={1: 1}),
        Task(id=2, duration=4, skills={2: 2}, predecessors=(0,)),
        Task(id=3, duration=1, skills={0: 2}, predecessors=(0, 1)),
        Task(id=4, duration=2, skills={1: 2}, predecessors=(1,)),
        Task(id=5, duration=3, skills={2: 1}, predecessors=(2, 3, 4)),
    ]
    return ProblemInstance(resources, tasks)


@pytest.fixture
def sample_def_path():
    """Path to the bundled 10-task example instance."""
    return SAMPLE_DEF


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(42)
