"""
Genetic Algorithm Main Orchestrator

Coordinates the complete GA optimization pipeline: population initialization,
breeding, mutation, clone handling, fitness evaluation, selection, elitism,
termination checks and results management. Provides a tqdm progress display
with live metrics.

Run lifecycle:
    INITIALIZING -> RUNNING -> TERMINATED

All random draws happen in the main process from one seeded generator, so a
run is reproducible for a given seed regardless of the worker count.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List, Callable
import copy
import threading
import numpy as np
from tqdm import tqdm

from optimization.clones import count_clones, handle_clones
from optimization.convergence_tracker import ConvergenceTracker, GenerationStats
from optimization.crossover import breed
from optimization.fitness_evaluator import FitnessEvaluator
from optimization.ga_config import GAConfig
from optimization.parallel_evaluator import ParallelEvaluator
from optimization.population import Population
from optimization.results_manager import ResultsManager
from optimization.selection import select_survivors
from scheduling.chromosome import Chromosome
from scheduling.instance import ProblemInstance


class RunState(str, Enum):
    """Lifecycle state of a GA run."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    TERMINATED = "terminated"


class TerminationReason(str, Enum):
    """Why a GA run stopped."""

    GENERATION_LIMIT = "generation_limit"
    CANCELLED = "cancelled"
    FITNESS_THRESHOLD = "fitness_threshold"
    CONVERGED = "converged"


@dataclass
class RunResult:
    """Outcome of a GA run."""

    best_chromosome: Chromosome
    best_fitness: float
    best_generation: int
    generations_run: int
    reason: TerminationReason
    history: List[GenerationStats] = field(default_factory=list)


class GAAlgorithm:
    """Main Genetic Algorithm orchestrator.

    Attributes:
        config: GAConfig with all hyperparameters
        instance: Problem instance being scheduled
        fitness_config: Simulator configuration derived from config
        population: Population of chromosomes
        evaluator: FitnessEvaluator, or ParallelEvaluator when parallel_workers > 1
        convergence_tracker: ConvergenceTracker for history and early stopping
        results_manager: ResultsManager for output artifacts (None if not saving)
        rng: NumPy random number generator
        state: Current RunState
        best_chromosome: Best chromosome found so far (private copy)
        best_fitness: Best fitness score achieved
        best_generation: Generation where best was found

    Example:
        >>> config = GAConfig.from_yaml('config/ga/default.yaml')
        >>> instance = read_def('instances/10_3_5_3.def')
        >>> ga = GAAlgorithm(config, instance)
        >>> result = ga.run()
        >>> print(result.best_fitness, result.reason.value)
    """

    def __init__(
        self,
        config: GAConfig,
        instance: ProblemInstance,
        verbose: bool = True,
        progress_callback: Optional[Callable[[int, float, float, float], None]] = None,
        on_best_changed: Optional[Callable[[int, Chromosome, float], None]] = None,
        cancel_event: Optional[threading.Event] = None,
        save_results: bool = True
    ):
        """Initialize GA algorithm with configuration.

        Args:
            config: GAConfig with all hyperparameters
            instance: Problem instance to schedule
            verbose: Enable progress display (default: True)
            progress_callback: Called as (generation, min, max, mean) after
                each generation is recorded
            on_best_changed: Called as (generation, chromosome, fitness) when
                the all-time best improves
            cancel_event: Event checked at the top of every generation
            save_results: Write artifacts to config.results_dir at the end of run()
        """
        config.validate()

        self.config = config
        self.instance = instance
        self.verbose = verbose
        self.progress_callback = progress_callback
        self.on_best_changed = on_best_changed
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()

        self.rng = np.random.default_rng(config.seed)
        self.fitness_config = config.fitness_config()

        self.population = Population(instance, size=config.population_size, rng=self.rng)

        if config.parallel_workers > 1:
            self.evaluator = ParallelEvaluator(
                instance, self.fitness_config,
                n_workers=config.parallel_workers
            )
        else:
            self.evaluator = FitnessEvaluator(instance, self.fitness_config)

        self.convergence_tracker = ConvergenceTracker(
            patience=config.early_stopping_patience,
            min_delta=config.improvement_threshold
        )

        self.results_manager = ResultsManager(
            results_dir=config.results_dir,
            run_name=config.name
        ) if save_results else None

        self.state = RunState.INITIALIZING
        self.best_chromosome: Optional[Chromosome] = None
        self.best_fitness: float = np.inf
        self.best_generation: int = 0
        self.current_generation: int = 0
        self._last_clone_count: int = 0

    def request_cancel(self) -> None:
        """Ask the run to stop at the start of the next generation."""
        self.cancel_event.set()

    def run(self) -> RunResult:
        """Run the complete GA optimization.

        Returns:
            RunResult with the best chromosome, its fitness and generation,
            the number of generations evolved, the termination reason and the
            per-generation history
        """
        if self.verbose:
            print(f"\n{'='*70}")
            print(f"  Genetic Algorithm Optimization - {self.config.name}")
            print(f"{'='*70}")
            print(f"Instance: {self.instance.n_tasks} tasks, {self.instance.n_resources} resources")
            print(f"Population: {self.config.population_size} | "
                  f"Breeders: {self.config.breeder_count} | "
                  f"Generations: {self.config.max_generations}")
            print(f"Pairing: {self.config.pairing_strategy.value} | "
                  f"Crossover: {self.config.crossover_shape.value} | "
                  f"Selection: {self.config.selection_method.value} | "
                  f"Workers: {self.config.parallel_workers}")
            print(f"{'='*70}\n")

        self._initialize()

        pbar = tqdm(
            total=self.config.max_generations,
            desc="GA Optimization",
            disable=not self.verbose,
            bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}] {postfix}'
        )
        self._update_progress_display(pbar, 0)

        self.state = RunState.RUNNING
        converged = False
        while True:
            reason = self._termination_reason(converged)
            if reason is not None:
                break

            self.current_generation += 1
            converged = self._evolve_generation(self.current_generation)

            self._update_progress_display(pbar, self.current_generation)
            pbar.update(1)

        pbar.close()
        self.state = RunState.TERMINATED

        result = RunResult(
            best_chromosome=self.best_chromosome,
            best_fitness=self.best_fitness,
            best_generation=self.best_generation,
            generations_run=self.current_generation,
            reason=reason,
            history=self.convergence_tracker.get_history()
        )

        if self.results_manager is not None:
            self._finalize_results(result)

        if self.verbose:
            print(f"\n{'='*70}")
            print(f"  Optimization Complete ({reason.value})")
            print(f"{'='*70}")
            print(f"Best Fitness: {self.best_fitness:.6f} (Generation {self.best_generation})")
            print(f"Generations run: {self.current_generation}")
            print(f"{'='*70}\n")

        return result

    def _initialize(self) -> None:
        """Create, evaluate and record the initial population (generation 0)."""
        self.state = RunState.INITIALIZING
        self.current_generation = 0

        if self.verbose:
            print("Initializing random population...")
        self.population.initialize_random()

        scores = self.evaluator.evaluate_population(self.population.chromosomes)
        order = np.argsort(scores, kind='stable')
        self.population.chromosomes = [self.population.chromosomes[i] for i in order]
        self.population.fitness_scores = [scores[i] for i in order]

        self._record_generation(0)

    def _termination_reason(self, converged: bool) -> Optional[TerminationReason]:
        """Check stopping conditions in priority order."""
        if self.cancel_event.is_set():
            return TerminationReason.CANCELLED
        threshold = self.config.fitness_threshold
        if threshold is not None and self.best_fitness <= threshold:
            return TerminationReason.FITNESS_THRESHOLD
        if converged:
            return TerminationReason.CONVERGED
        if self.current_generation >= self.config.max_generations:
            return TerminationReason.GENERATION_LIMIT
        return None

    def _evolve_generation(self, generation: int) -> bool:
        """Produce, evaluate and select one generation.

        Args:
            generation: Generation number being produced

        Returns:
            True if the convergence tracker signals early stopping
        """
        config = self.config

        breeders = self.population.chromosomes[:config.breeder_count]
        offspring = breed(
            breeders,
            config.pairing_strategy,
            config.crossover_rate,
            shape=config.crossover_shape,
            rng=self.rng
        )
        candidates = self.population.chromosomes + offspring

        for chrom in candidates:
            chrom.mutate(self.instance, config.mutation_rate, rng=self.rng)

        self._last_clone_count = count_clones(candidates)
        if config.clones_enabled:
            candidates = handle_clones(
                candidates,
                self.instance,
                self.fitness_config,
                target_size=config.population_size,
                threshold=config.clone_threshold,
                strategy=config.clone_strategy,
                base_mutation_rate=config.mutation_rate,
                mutation_factor=config.clone_mutation_factor,
                escape_sigma=config.priority_escape_sigma,
                rng=self.rng,
                evaluate=self.evaluator.evaluate_population
            )

        scores = self.evaluator.evaluate_population(candidates)

        survivors = select_survivors(
            candidates,
            scores,
            config.population_size,
            method=config.selection_method,
            tournament_size=config.tournament_size,
            rng=self.rng
        )
        survivor_scores = [chrom.fitness(self.instance, self.fitness_config) for chrom in survivors]
        self.population.replace(survivors, survivor_scores)

        return self._record_generation(generation)

    def _record_generation(self, generation: int) -> bool:
        """Record statistics of the selected population, then update the
        all-time best and apply elitism.

        Returns:
            True if the convergence tracker signals early stopping
        """
        stats = self.population.get_statistics()
        diversity = self.population.compute_diversity()

        should_stop = self.convergence_tracker.update(
            generation=generation,
            min_fitness=stats['min'],
            max_fitness=stats['max'],
            mean_fitness=stats['mean'],
            diversity=diversity
        )

        gen_best, gen_best_fitness = self.population.get_best()

        if gen_best_fitness < self.best_fitness:
            self.best_fitness = gen_best_fitness
            self.best_chromosome = copy.deepcopy(gen_best)
            self.best_generation = generation
            if self.on_best_changed is not None:
                self.on_best_changed(generation, self.best_chromosome, self.best_fitness)
        elif not self.population.contains(self.best_chromosome):
            self.population.insert_elite(copy.deepcopy(self.best_chromosome), self.best_fitness)

        if self.progress_callback is not None:
            self.progress_callback(generation, stats['min'], stats['max'], stats['mean'])

        return should_stop

    def _update_progress_display(self, pbar: tqdm, generation: int) -> None:
        """Update tqdm postfix and print a summary every log_frequency generations.

        Postfix format:
        Gen 34 | Best: 31.000420 | Mean: 33.412000 | Clones: 2
        """
        stats = self.convergence_tracker.history[-1]

        display = (
            f"Gen {generation} | "
            f"Best: {self.best_fitness:.6f} | "
            f"Mean: {stats.mean_fitness:.6f} | "
            f"Clones: {self._last_clone_count}"
        )
        pbar.set_postfix_str(display)

        if self.verbose and generation % self.config.log_frequency == 0:
            pbar.write(f"\n{'─'*70}")
            pbar.write(f"  Generation {generation} Summary (Best found at Gen {self.best_generation})")
            pbar.write(f"{'─'*70}")
            pbar.write(f"  Best Fitness:  {self.best_fitness:.6f}")
            pbar.write(f"  Min / Max:     {stats.min_fitness:.6f} / {stats.max_fitness:.6f}")
            pbar.write(f"  Mean Fitness:  {stats.mean_fitness:.6f}")
            pbar.write(f"  Diversity:     {stats.diversity:.4f}")
            pbar.write(f"{'─'*70}\n")

    def best_metrics(self) -> Dict[str, Any]:
        """Makespan, cost and penalty breakdown of the best chromosome."""
        if self.best_chromosome is None:
            return {}
        evaluator = FitnessEvaluator(self.instance, self.fitness_config)
        _, metrics = evaluator.evaluate(copy.deepcopy(self.best_chromosome))
        return metrics

    def _finalize_results(self, result: RunResult) -> None:
        """Save all final results using ResultsManager."""
        metrics = self.best_metrics()

        paths = self.results_manager.save_all_results(
            best_chromosome=result.best_chromosome,
            best_fitness=result.best_fitness,
            best_generation=result.best_generation,
            generations_run=result.generations_run,
            termination_reason=result.reason.value,
            instance=self.instance,
            fitness_config=self.fitness_config,
            convergence_history=result.history,
            convergence_summary=self.convergence_tracker.get_improvement_summary(),
            best_chromosome_metadata=metrics,
            params=self.config.to_params(),
            save_solution=self.config.save_solution,
            save_statistics=self.config.save_statistics,
            generate_plots=self.config.generate_plots,
            debug_output=self.config.debug_output
        )

        if self.verbose:
            print(f"Results saved to: {self.results_manager.results_dir}")
            for key, path in paths.items():
                if path is not None:
                    print(f"  {key}: {path}")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"GAAlgorithm(config='{self.config.name}', "
            f"tasks={self.instance.n_tasks}, "
            f"population_size={self.config.population_size}, "
            f"max_generations={self.config.max_generations}, "
            f"state={self.state.value}, "
            f"best_fitness={self.best_fitness:.6f})"
        )
