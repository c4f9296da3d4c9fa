"""
Genetic Algorithm Configuration Management

Provides GAConfig dataclass for loading, validating, and accessing GA parameters
from YAML configuration files. Centralizes all GA hyperparameters with validation
and convenient accessors.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from pathlib import Path
import yaml

from optimization.clones import CloneStrategy
from optimization.crossover import PairingStrategy
from optimization.selection import SelectionMethod
from scheduling.recombination import CrossoverShape
from utils.config import FitnessConfig, PenaltyConfig


def _as_enum(enum_cls, value, key: str):
    """Coerce a string to a strategy enum, naming the key on failure."""
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(
            f"{key} must be one of {[e.value for e in enum_cls]}, got '{value}'"
        ) from None


@dataclass
class GAConfig:
    """Genetic Algorithm configuration loaded from YAML.

    Supports nested configuration structure matching config/ga/default.yaml.
    Strategy fields accept plain strings and are converted to their enums by
    validate().

    Attributes:
        name: Configuration name/identifier
        description: Human-readable description
        version: Configuration version

        # Population
        population_size: Number of individuals kept after selection
        breeder_fraction: Fraction of the (sorted) population used for breeding

        # Genetic operators
        crossover_rate: Probability that one pairing produces a child
        mutation_rate: Per-gene mutation probability
        crossover_shape: Recombination shape ("single_point" or "double_point")
        pairing_strategy: Breeder pairing strategy
        priority_escape_sigma: Clone-escape priority spread (fraction of n_tasks)

        # Clones
        clones_enabled: Run clone detection every generation
        clone_threshold: Tolerated duplicate fraction
        clone_strategy: "mutation" or "elimination"
        clone_mutation_factor: Base mutation rate multiplier for clones

        # Selection
        selection_method: "ranking" or "tournament"
        tournament_size: Tournament size (if using tournament selection)

        # Fitness
        time_weight, cost_weight, cost_divisor: Objective weights
        enforce_precedence: Skip tasks with unmet predecessors
        penalty_*: Penalty weights

        # Evaluation
        parallel_workers: Worker processes for fitness evaluation (1 = serial)

        # Convergence
        max_generations: Generation limit
        fitness_threshold: Stop once best fitness <= threshold (None = off)
        early_stopping_patience: Stop after N stagnant generations (0 = off)
        improvement_threshold: Minimum fitness decrease to count as progress

        # Logging
        logging_verbose: Enable progress output
        log_frequency: Print a summary every N generations

        # Output
        results_dir, save_solution, save_statistics, generate_plots, debug_output

        # Random seed
        seed: Seed for the run's random generator

    Example:
        >>> config = GAConfig.from_yaml('config/ga/default.yaml')
        >>> print(f"Population size: {config.population_size}")
        >>> print(f"Pairing: {config.pairing_strategy.value}")
    """

    # Metadata
    name: str = "ga_default"
    description: str = ""
    version: str = "1.0.0"

    # Population settings
    population_size: int = 20
    breeder_fraction: float = 1.0

    # Genetic operators
    crossover_rate: float = 0.4
    mutation_rate: float = 0.03
    crossover_shape: CrossoverShape = CrossoverShape.SINGLE_POINT
    pairing_strategy: PairingStrategy = PairingStrategy.EQUAL_OPPORTUNITY
    priority_escape_sigma: float = 0.5

    # Clone handling
    clones_enabled: bool = True
    clone_threshold: float = 0.05
    clone_strategy: CloneStrategy = CloneStrategy.MUTATION
    clone_mutation_factor: float = 10.0

    # Selection strategy
    selection_method: SelectionMethod = SelectionMethod.RANKING
    tournament_size: int = 3

    # Fitness function
    time_weight: float = 1.0
    cost_weight: float = 1.0
    cost_divisor: float = 1e5
    enforce_precedence: bool = True
    penalty_precedence_violation: float = 0.3
    penalty_waiting_task: float = 0.0
    penalty_idle_resource: float = 0.0
    penalty_skill_mismatch: float = 0.0

    # Evaluation settings
    parallel_workers: int = 1

    # Convergence & stopping criteria
    max_generations: int = 50
    fitness_threshold: Optional[float] = None
    early_stopping_patience: int = 0
    improvement_threshold: float = 0.0

    # Logging
    logging_verbose: bool = True
    log_frequency: int = 10

    # Output options
    results_dir: str = "results/ga_optimization"
    save_solution: bool = True
    save_statistics: bool = True
    generate_plots: bool = True
    debug_output: bool = False

    # Random seed
    seed: Optional[int] = 42

    # Raw YAML data (for debugging)
    _raw_data: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'GAConfig':
        """Load GA configuration from YAML file.

        Args:
            yaml_path: Path to GA configuration YAML file

        Returns:
            Validated GAConfig instance

        Raises:
            FileNotFoundError: If YAML file not found
            ValueError: If YAML is empty or holds invalid values

        Example:
            >>> config = GAConfig.from_yaml('config/ga/default.yaml')
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"GA config file not found: {yaml_path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None:
            raise ValueError(f"Empty or invalid YAML file: {yaml_path}")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GAConfig':
        """Build a validated config from the nested YAML structure."""
        population = data.get('population', {})
        operators = data.get('operators', {})
        clones = data.get('clones', {})
        selection = data.get('selection', {})
        fitness = data.get('fitness', {})
        penalties = fitness.get('penalties', {})
        convergence = data.get('convergence', {})
        logging_cfg = data.get('logging', {})
        output = data.get('output', {})

        config_kwargs = {
            # Metadata
            'name': data.get('name', 'ga_default'),
            'description': data.get('description', ''),
            'version': data.get('version', '1.0.0'),

            # Population
            'population_size': population.get('size', 20),
            'breeder_fraction': population.get('breeder_fraction', 1.0),

            # Operators
            'crossover_rate': operators.get('crossover_rate', 0.4),
            'mutation_rate': operators.get('mutation_rate', 0.03),
            'crossover_shape': operators.get('crossover_shape', 'single_point'),
            'pairing_strategy': operators.get('pairing', 'equal_opportunity'),
            'priority_escape_sigma': operators.get('priority_escape_sigma', 0.5),

            # Clones
            'clones_enabled': clones.get('enabled', True),
            'clone_threshold': clones.get('threshold', 0.05),
            'clone_strategy': clones.get('strategy', 'mutation'),
            'clone_mutation_factor': clones.get('mutation_factor', 10.0),

            # Selection
            'selection_method': selection.get('method', 'ranking'),
            'tournament_size': selection.get('tournament_size', 3),

            # Fitness
            'time_weight': fitness.get('time_weight', 1.0),
            'cost_weight': fitness.get('cost_weight', 1.0),
            'cost_divisor': fitness.get('cost_divisor', 1e5),
            'enforce_precedence': fitness.get('enforce_precedence', True),
            'penalty_precedence_violation': penalties.get('precedence_violation', 0.3),
            'penalty_waiting_task': penalties.get('waiting_task', 0.0),
            'penalty_idle_resource': penalties.get('idle_resource', 0.0),
            'penalty_skill_mismatch': penalties.get('skill_mismatch', 0.0),

            # Evaluation
            'parallel_workers': data.get('evaluation', {}).get('parallel_workers', 1),

            # Convergence
            'max_generations': convergence.get('max_generations', 50),
            'fitness_threshold': convergence.get('fitness_threshold'),
            'early_stopping_patience': convergence.get('early_stopping_patience', 0),
            'improvement_threshold': convergence.get('improvement_threshold', 0.0),

            # Logging
            'logging_verbose': logging_cfg.get('verbose', True),
            'log_frequency': logging_cfg.get('log_frequency', 10),

            # Output
            'results_dir': output.get('results_dir', 'results/ga_optimization'),
            'save_solution': output.get('save_solution', True),
            'save_statistics': output.get('save_statistics', True),
            'generate_plots': output.get('generate_plots', True),
            'debug_output': output.get('debug_output', False),

            # Seed
            'seed': data.get('seed', 42),

            '_raw_data': data
        }

        config = cls(**config_kwargs)
        config.validate()

        return config

    def validate(self) -> None:
        """Validate configuration parameters and coerce strategy names to enums.

        Raises:
            ValueError: If any parameters are invalid
        """
        # Strategy names
        self.crossover_shape = _as_enum(CrossoverShape, self.crossover_shape, 'crossover_shape')
        self.pairing_strategy = _as_enum(PairingStrategy, self.pairing_strategy, 'pairing')
        self.clone_strategy = _as_enum(CloneStrategy, self.clone_strategy, 'clone strategy')
        self.selection_method = _as_enum(SelectionMethod, self.selection_method, 'selection method')

        # Population validation
        if self.population_size < 2:
            raise ValueError(f"population_size must be at least 2, got {self.population_size}")

        if not 0.0 < self.breeder_fraction <= 1.0:
            raise ValueError(f"breeder_fraction must be in (0,1], got {self.breeder_fraction}")

        # Operators validation
        if not 0.0 <= self.crossover_rate <= 1.0:
            raise ValueError(f"crossover_rate must be in [0,1], got {self.crossover_rate}")

        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ValueError(f"mutation_rate must be in [0,1], got {self.mutation_rate}")

        if self.priority_escape_sigma <= 0:
            raise ValueError(
                f"priority_escape_sigma must be positive, got {self.priority_escape_sigma}"
            )

        # Clone validation
        if not 0.0 <= self.clone_threshold <= 1.0:
            raise ValueError(f"clone threshold must be in [0,1], got {self.clone_threshold}")

        if self.clone_mutation_factor < 1.0:
            raise ValueError(
                f"clone mutation_factor must be at least 1, got {self.clone_mutation_factor}"
            )

        # Selection validation
        if self.tournament_size < 1:
            raise ValueError(f"tournament_size must be at least 1, got {self.tournament_size}")

        # Fitness validation
        if self.time_weight < 0 or self.cost_weight < 0:
            raise ValueError(
                f"Fitness weights must be non-negative, got time={self.time_weight}, "
                f"cost={self.cost_weight}"
            )

        if self.cost_divisor <= 0:
            raise ValueError(f"cost_divisor must be positive, got {self.cost_divisor}")

        for key in ('precedence_violation', 'waiting_task', 'idle_resource', 'skill_mismatch'):
            value = getattr(self, f'penalty_{key}')
            if value < 0:
                raise ValueError(f"penalty {key} must be non-negative, got {value}")

        # Evaluation validation
        if self.parallel_workers <= 0:
            raise ValueError(
                f"parallel_workers must be positive, got {self.parallel_workers}"
            )

        # Convergence validation
        if self.max_generations <= 0:
            raise ValueError(f"max_generations must be positive, got {self.max_generations}")

        if self.early_stopping_patience < 0:
            raise ValueError(
                f"early_stopping_patience must be non-negative, got {self.early_stopping_patience}"
            )

        if self.improvement_threshold < 0:
            raise ValueError(
                f"improvement_threshold must be non-negative, got {self.improvement_threshold}"
            )

        # Logging validation
        if self.log_frequency <= 0:
            raise ValueError(f"log_frequency must be positive, got {self.log_frequency}")

    @property
    def breeder_count(self) -> int:
        """Number of individuals taken from the top of the population for breeding."""
        count = int(self.breeder_fraction * self.population_size)
        return min(max(count, 2), self.population_size)

    def fitness_config(self) -> FitnessConfig:
        """Simulator configuration built from the fitness section."""
        return FitnessConfig(
            time_weight=self.time_weight,
            cost_weight=self.cost_weight,
            cost_divisor=self.cost_divisor,
            enforce_precedence=self.enforce_precedence,
            penalties=PenaltyConfig(
                precedence_violation=self.penalty_precedence_violation,
                waiting_task=self.penalty_waiting_task,
                idle_resource=self.penalty_idle_resource,
                skill_mismatch=self.penalty_skill_mismatch
            )
        )

    def to_params(self) -> Dict[str, Any]:
        """Flat parameter listing for params.txt and the summary report."""
        return {
            'name': self.name,
            'population_size': self.population_size,
            'breeder_fraction': self.breeder_fraction,
            'crossover_rate': self.crossover_rate,
            'mutation_rate': self.mutation_rate,
            'crossover_shape': self.crossover_shape.value,
            'pairing_strategy': self.pairing_strategy.value,
            'priority_escape_sigma': self.priority_escape_sigma,
            'clones_enabled': self.clones_enabled,
            'clone_threshold': self.clone_threshold,
            'clone_strategy': self.clone_strategy.value,
            'clone_mutation_factor': self.clone_mutation_factor,
            'selection_method': self.selection_method.value,
            'tournament_size': self.tournament_size,
            'time_weight': self.time_weight,
            'cost_weight': self.cost_weight,
            'cost_divisor': self.cost_divisor,
            'enforce_precedence': self.enforce_precedence,
            'penalty_precedence_violation': self.penalty_precedence_violation,
            'penalty_waiting_task': self.penalty_waiting_task,
            'penalty_idle_resource': self.penalty_idle_resource,
            'penalty_skill_mismatch': self.penalty_skill_mismatch,
            'parallel_workers': self.parallel_workers,
            'max_generations': self.max_generations,
            'fitness_threshold': self.fitness_threshold,
            'early_stopping_patience': self.early_stopping_patience,
            'improvement_threshold': self.improvement_threshold,
            'seed': self.seed,
        }

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"GAConfig(name='{self.name}', "
            f"pop={self.population_size}, "
            f"breeders={self.breeder_fraction}, "
            f"cx={self.crossover_rate}, "
            f"mut={self.mutation_rate}, "
            f"pairing={getattr(self.pairing_strategy, 'value', self.pairing_strategy)}, "
            f"selection={getattr(self.selection_method, 'value', self.selection_method)}, "
            f"workers={self.parallel_workers}, "
            f"max_gen={self.max_generations})"
        )
