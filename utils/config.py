"""Fitness configuration with Pydantic validation.

Holds the knobs the schedule simulator reads: objective weights, the cost
scaling factor, the precedence mode and the penalty weights for the soft
quality signals (precedence violations, waiting tasks, idle resources and
over-qualified assignments).
"""

from pydantic import BaseModel, Field, ConfigDict


class PenaltyConfig(BaseModel):
    """Penalty weights applied by the simulator.

    A weight of 0.0 disables the corresponding penalty entirely (the simulator
    skips the bookkeeping for it).
    """

    model_config = ConfigDict(frozen=True)

    precedence_violation: float = Field(
        default=0.3, ge=0.0,
        description="Added per incomplete predecessor when precedence is not enforced"
    )
    waiting_task: float = Field(
        default=0.0, ge=0.0,
        description="Added per tick a ready task waits on its busy resource"
    )
    idle_resource: float = Field(
        default=0.0, ge=0.0,
        description="Added per tick per free resource that could run a ready task"
    )
    skill_mismatch: float = Field(
        default=0.0, ge=0.0,
        description="Added when a task is not run by its least-skilled eligible resource"
    )


class FitnessConfig(BaseModel):
    """Objective function configuration.

    fitness = time_weight * makespan
              + cost_weight * total_cost / cost_divisor
              + accumulated penalties

    Lower is better. The default cost divisor keeps cost a tie-breaker next to
    the makespan term.
    """

    model_config = ConfigDict(frozen=True)

    time_weight: float = Field(default=1.0, ge=0.0, description="Weight of the makespan term")
    cost_weight: float = Field(default=1.0, ge=0.0, description="Weight of the scaled cost term")
    cost_divisor: float = Field(default=1e5, gt=0.0, description="Divides total cost before weighting")

    enforce_precedence: bool = Field(
        default=True,
        description="Skip tasks with incomplete predecessors instead of penalizing them"
    )

    penalties: PenaltyConfig = Field(default_factory=PenaltyConfig)


def load_fitness_config_from_yaml(path: str) -> FitnessConfig:
    """Load fitness configuration from YAML file.

    Args:
        path: Path to YAML file containing the fitness section

    Returns:
        Validated FitnessConfig object
    """
    import yaml

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    return FitnessConfig(**(data or {}))


def save_fitness_config_to_yaml(config: FitnessConfig, path: str) -> None:
    """Save fitness configuration to YAML file.

    Args:
        config: FitnessConfig object
        path: Output YAML path
    """
    import yaml

    with open(path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
