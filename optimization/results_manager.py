"""
Results Manager for Genetic Algorithm

Handles saving GA optimization results: the best chromosome, the replayed
schedule (result.sol), per-generation fitness statistics, the run parameters,
convergence plots and a summary report.

Directory layout:
    results_dir/
        result.sol
        dump.txt
        params.txt
        summary_report.json
        chromosomes/best_chromosome.json
        data/fitness_history.csv
        plots/convergence_plot.png, diversity_plot.png
"""

from pathlib import Path
from typing import List, Dict, Any, Optional, Sequence
import json
import csv
from datetime import datetime

# Matplotlib imports (with Agg backend for headless environments)
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt

from optimization.convergence_tracker import GenerationStats
from scheduling.chromosome import Chromosome
from scheduling.def_io import write_solution
from scheduling.instance import ProblemInstance
from utils.config import FitnessConfig


class ResultsManager:
    """Manage GA optimization results and output artifacts.

    Attributes:
        results_dir: Directory to save all results
        run_name: Name/identifier for this optimization run
        enabled: Whether results saving is enabled

    Example:
        >>> manager = ResultsManager(results_dir="results/ga_run1")
        >>> manager.save_best_chromosome(chromosome, fitness=31.00421, generation=25)
        >>> manager.save_fitness_history(tracker.get_history())
        >>> manager.generate_convergence_plot(tracker.get_history())
    """

    def __init__(
        self,
        results_dir: str = "results/ga_optimization",
        run_name: Optional[str] = None,
        enabled: bool = True
    ):
        """Initialize results manager.

        Args:
            results_dir: Base directory for saving results
            run_name: Name for this run (default: timestamp-based)
            enabled: Enable results saving (default: True)
        """
        self.results_dir = Path(results_dir)
        self.run_name = run_name or f"ga_run_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self.enabled = enabled

        if self.enabled:
            self.results_dir.mkdir(parents=True, exist_ok=True)
            (self.results_dir / "chromosomes").mkdir(exist_ok=True)
            (self.results_dir / "plots").mkdir(exist_ok=True)
            (self.results_dir / "data").mkdir(exist_ok=True)

    def save_best_chromosome(
        self,
        chromosome: Chromosome,
        fitness: float,
        generation: int,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Optional[Path]:
        """Save best chromosome genes with fitness and metadata as JSON.

        Args:
            chromosome: Best chromosome to save
            fitness: Fitness score of best chromosome
            generation: Generation when best was found
            metadata: Additional metadata (makespan, cost, penalty)

        Returns:
            Path to the JSON file, or None if disabled
        """
        if not self.enabled:
            return None

        chromosome_data = {
            'fitness': fitness,
            'generation': generation,
            'timestamp': datetime.now().isoformat(),
            'run_name': self.run_name,
            'chromosome': chromosome.to_dict(),
            'metadata': metadata or {}
        }

        json_path = self.results_dir / "chromosomes" / "best_chromosome.json"
        with open(json_path, 'w') as f:
            json.dump(chromosome_data, f, indent=2)

        return json_path

    def save_solution(
        self,
        chromosome: Chromosome,
        instance: ProblemInstance,
        fitness_config: FitnessConfig,
        debug: bool = False
    ) -> Optional[Path]:
        """Replay the chromosome and write the schedule in solution format.

        Returns:
            Path to result.sol, or None if disabled
        """
        if not self.enabled:
            return None

        return write_solution(
            chromosome, instance, fitness_config,
            self.results_dir / "result.sol",
            debug=debug
        )

    def save_fitness_history(self, history: Sequence[GenerationStats]) -> Optional[Path]:
        """Export fitness history to CSV.

        Args:
            history: Per-generation (generation, min, max, mean, diversity) records

        Returns:
            Path to saved CSV file, or None if disabled
        """
        if not self.enabled:
            return None

        filepath = self.results_dir / "data" / "fitness_history.csv"

        with open(filepath, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['generation', 'min_fitness', 'max_fitness', 'mean_fitness', 'diversity'])

            for gen, best, worst, mean, div in history:
                writer.writerow([gen, f"{best:.6f}", f"{worst:.6f}", f"{mean:.6f}", f"{div:.6f}"])

        return filepath

    def save_dump(self, history: Sequence[GenerationStats]) -> Optional[Path]:
        """Write the fixed-width Min/Max/Avg table, one row per generation."""
        if not self.enabled:
            return None

        lines = [f"{'Min':>14}\t{'Max':>14}\t{'Avg':>14}"]
        for _, best, worst, mean, _ in history:
            lines.append(f"{best:14.10f}\t{worst:14.10f}\t{mean:14.10f}")

        filepath = self.results_dir / "dump.txt"
        filepath.write_text("\n".join(lines) + "\n")
        return filepath

    def save_params(self, params: Dict[str, Any]) -> Optional[Path]:
        """Write the run parameters as 'key: value' lines."""
        if not self.enabled:
            return None

        filepath = self.results_dir / "params.txt"
        filepath.write_text("".join(f"{key}: {value}\n" for key, value in params.items()))
        return filepath

    def generate_convergence_plot(
        self,
        history: Sequence[GenerationStats],
        title: Optional[str] = None,
        save_name: str = "convergence_plot.png"
    ) -> Optional[Path]:
        """Plot min, mean and max fitness over generations.

        Returns:
            Path to saved plot, or None if disabled or history is empty
        """
        if not self.enabled or not history:
            return None

        generations = [h.generation for h in history]
        min_fitness = [h.min_fitness for h in history]
        max_fitness = [h.max_fitness for h in history]
        mean_fitness = [h.mean_fitness for h in history]

        plt.figure(figsize=(10, 6))

        plt.plot(generations, min_fitness, 'b-', linewidth=2, label='Best (min) Fitness', marker='o', markersize=4)
        plt.plot(generations, mean_fitness, 'g--', linewidth=1.5, label='Mean Fitness', alpha=0.7)
        plt.plot(generations, max_fitness, 'r:', linewidth=1, label='Worst (max) Fitness', alpha=0.6)

        plt.xlabel('Generation', fontsize=12)
        plt.ylabel('Fitness (lower is better)', fontsize=12)
        plt.title(title or f'GA Convergence - {self.run_name}', fontsize=14, fontweight='bold')
        plt.legend(loc='upper right', fontsize=10)
        plt.grid(True, alpha=0.3)

        best_gen = min(range(len(min_fitness)), key=lambda i: min_fitness[i])
        plt.axvline(x=generations[best_gen], color='k', linestyle=':', alpha=0.5)

        plt.tight_layout()

        filepath = self.results_dir / "plots" / save_name
        plt.savefig(filepath, dpi=150, bbox_inches='tight')
        plt.close()

        return filepath

    def generate_diversity_plot(
        self,
        history: Sequence[GenerationStats],
        title: Optional[str] = None,
        save_name: str = "diversity_plot.png"
    ) -> Optional[Path]:
        """Plot population diversity over generations.

        Returns:
            Path to saved plot, or None if disabled or history is empty
        """
        if not self.enabled or not history:
            return None

        generations = [h.generation for h in history]
        diversity = [h.diversity for h in history]

        plt.figure(figsize=(10, 6))

        plt.plot(generations, diversity, 'purple', linewidth=2, marker='s', markersize=4)
        plt.fill_between(generations, diversity, alpha=0.3, color='purple')

        plt.xlabel('Generation', fontsize=12)
        plt.ylabel('Population Diversity', fontsize=12)
        plt.title(title or f'Population Diversity - {self.run_name}', fontsize=14, fontweight='bold')
        plt.grid(True, alpha=0.3)
        plt.ylim(0, 1)

        plt.tight_layout()

        filepath = self.results_dir / "plots" / save_name
        plt.savefig(filepath, dpi=150, bbox_inches='tight')
        plt.close()

        return filepath

    def generate_summary_report(
        self,
        best_fitness: float,
        best_generation: int,
        total_generations: int,
        termination_reason: str,
        best_chromosome_metadata: Optional[Dict[str, Any]] = None,
        instance_summary: Optional[Dict[str, Any]] = None,
        convergence_summary: Optional[Dict[str, Any]] = None,
        config: Optional[Dict[str, Any]] = None
    ) -> Optional[Path]:
        """Generate summary report in JSON format.

        Args:
            best_fitness: Best fitness achieved
            best_generation: Generation where best was found
            total_generations: Generations evolved
            termination_reason: Why the run stopped
            best_chromosome_metadata: Makespan/cost/penalty of the best chromosome
            instance_summary: Instance size and serial-schedule bounds
            convergence_summary: Summary from ConvergenceTracker
            config: GA parameters used

        Returns:
            Path to saved summary JSON, or None if disabled
        """
        if not self.enabled:
            return None

        summary = {
            'run_name': self.run_name,
            'timestamp': datetime.now().isoformat(),
            'optimization_summary': {
                'best_fitness': best_fitness,
                'best_generation': best_generation,
                'total_generations': total_generations,
                'termination_reason': termination_reason,
                'improvement_from_start': convergence_summary.get('improvement_from_start', 0.0) if convergence_summary else 0.0
            },
            'instance': instance_summary or {},
            'best_chromosome': best_chromosome_metadata or {},
            'convergence': convergence_summary or {},
            'configuration': config or {}
        }

        filepath = self.results_dir / "summary_report.json"
        with open(filepath, 'w') as f:
            json.dump(summary, f, indent=2, default=str)

        return filepath

    def save_all_results(
        self,
        best_chromosome: Chromosome,
        best_fitness: float,
        best_generation: int,
        generations_run: int,
        termination_reason: str,
        instance: ProblemInstance,
        fitness_config: FitnessConfig,
        convergence_history: List[GenerationStats],
        convergence_summary: Dict[str, Any],
        best_chromosome_metadata: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        save_solution: bool = True,
        save_statistics: bool = True,
        generate_plots: bool = True,
        debug_output: bool = False
    ) -> Dict[str, Optional[Path]]:
        """Save all results in one call.

        Returns:
            Dictionary mapping result types to file paths
        """
        if not self.enabled:
            return {}

        results = {}

        results['best_chromosome'] = self.save_best_chromosome(
            chromosome=best_chromosome,
            fitness=best_fitness,
            generation=best_generation,
            metadata=best_chromosome_metadata
        )

        if save_solution:
            results['solution'] = self.save_solution(
                best_chromosome, instance, fitness_config, debug=debug_output
            )

        if save_statistics:
            results['fitness_history'] = self.save_fitness_history(convergence_history)
            results['dump'] = self.save_dump(convergence_history)
            results['params'] = self.save_params(params or {})

        if generate_plots:
            results['convergence_plot'] = self.generate_convergence_plot(convergence_history)
            results['diversity_plot'] = self.generate_diversity_plot(convergence_history)

        results['summary_report'] = self.generate_summary_report(
            best_fitness=best_fitness,
            best_generation=best_generation,
            total_generations=generations_run,
            termination_reason=termination_reason,
            best_chromosome_metadata=best_chromosome_metadata,
            instance_summary=instance.summary(),
            convergence_summary=convergence_summary,
            config=params
        )

        return results

    def __repr__(self) -> str:
        """String representation for debugging."""
        status = "enabled" if self.enabled else "disabled"
        return (
            f"ResultsManager(results_dir='{self.results_dir}', "
            f"run_name='{self.run_name}', {status})"
        )
