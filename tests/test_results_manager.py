#!/usr/bin/env python3
"""
Unit tests for ResultsManager.

Tests:
- Directory layout and the individual writers
- dump.txt and params.txt formats
- save_all_results honoring the output flags
- Disabled manager writes nothing
"""

import json
import pytest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from optimization.convergence_tracker import GenerationStats
from optimization.results_manager import ResultsManager
from scheduling.chromosome import Chromosome


@pytest.fixture
def history():
    return [
        GenerationStats(0, 7.0, 9.0, 8.0, 0.5),
        GenerationStats(1, 5.00007, 8.5, 6.25, 0.25),
    ]


@pytest.fixture
def best():
    return Chromosome(resource_of=[0, 0, 1], priority_of=[0, 1, 0])


class TestWriters:
    """Test the individual output files."""

    def test_creates_layout(self, tmp_path):
        """Subdirectories are created up front."""
        manager = ResultsManager(results_dir=str(tmp_path / "run"), run_name="t")

        for sub in ("chromosomes", "plots", "data"):
            assert (tmp_path / "run" / sub).is_dir()

    def test_best_chromosome_json(self, tmp_path, best):
        """Best chromosome JSON holds genes, fitness and generation."""
        manager = ResultsManager(results_dir=str(tmp_path), run_name="t")
        path = manager.save_best_chromosome(best, fitness=5.00007, generation=3,
                                            metadata={'makespan': 5})

        data = json.loads(path.read_text())
        assert data['fitness'] == 5.00007
        assert data['generation'] == 3
        assert data['metadata'] == {'makespan': 5}
        assert Chromosome.from_dict(data['chromosome']) == best

    def test_solution_file(self, tmp_path, best, literal_instance, zero_penalty_config):
        """result.sol lists starts per tick with 1-based IDs."""
        manager = ResultsManager(results_dir=str(tmp_path), run_name="t")
        path = manager.save_solution(best, literal_instance, zero_penalty_config)

        lines = path.read_text().splitlines()
        assert path.name == "result.sol"
        assert lines[1] == "1 1-1 2-3"
        assert lines[2] == "3 1-2"

    def test_dump_format(self, tmp_path, history):
        """dump.txt has a Min/Max/Avg header and fixed-width rows."""
        manager = ResultsManager(results_dir=str(tmp_path), run_name="t")
        lines = manager.save_dump(history).read_text().splitlines()

        assert lines[0].split() == ['Min', 'Max', 'Avg']
        assert lines[1] == f"{7.0:14.10f}\t{9.0:14.10f}\t{8.0:14.10f}"
        assert len(lines) == 3

    def test_params_format(self, tmp_path):
        """params.txt has one 'key: value' line per parameter."""
        manager = ResultsManager(results_dir=str(tmp_path), run_name="t")
        path = manager.save_params({'population_size': 20, 'pairing_strategy': 'simple_pairs'})

        assert path.read_text() == "population_size: 20\npairing_strategy: simple_pairs\n"

    def test_fitness_history_csv(self, tmp_path, history):
        """CSV has a header plus one row per generation."""
        manager = ResultsManager(results_dir=str(tmp_path), run_name="t")
        lines = manager.save_fitness_history(history).read_text().splitlines()

        assert lines[0] == "generation,min_fitness,max_fitness,mean_fitness,diversity"
        assert lines[2].startswith("1,5.000070,")

    def test_plots_skip_empty_history(self, tmp_path):
        """No plot is drawn without history."""
        manager = ResultsManager(results_dir=str(tmp_path), run_name="t")
        assert manager.generate_convergence_plot([]) is None


class TestSaveAll:
    """Test save_all_results."""

    def test_all_outputs(self, tmp_path, history, best, literal_instance, zero_penalty_config):
        """Every enabled artifact is written."""
        manager = ResultsManager(results_dir=str(tmp_path), run_name="t")

        paths = manager.save_all_results(
            best_chromosome=best,
            best_fitness=5.00007,
            best_generation=1,
            generations_run=1,
            termination_reason="generation_limit",
            instance=literal_instance,
            fitness_config=zero_penalty_config,
            convergence_history=history,
            convergence_summary={'improvement_from_start': 1.99993},
            params={'seed': 42}
        )

        for key in ('best_chromosome', 'solution', 'fitness_history', 'dump',
                    'params', 'convergence_plot', 'diversity_plot', 'summary_report'):
            assert paths[key].exists(), key

        report = json.loads(paths['summary_report'].read_text())
        assert report['optimization_summary']['termination_reason'] == "generation_limit"
        assert report['configuration'] == {'seed': 42}
        assert report['instance']['time_max'] == 6
        assert report['instance']['min_cost'] == pytest.approx(6.0)
        assert report['instance']['max_cost'] == pytest.approx(12.0)

    def test_flags_respected(self, tmp_path, history, best, literal_instance, zero_penalty_config):
        """Disabled outputs are not written."""
        manager = ResultsManager(results_dir=str(tmp_path), run_name="t")

        paths = manager.save_all_results(
            best_chromosome=best,
            best_fitness=5.00007,
            best_generation=1,
            generations_run=1,
            termination_reason="cancelled",
            instance=literal_instance,
            fitness_config=zero_penalty_config,
            convergence_history=history,
            convergence_summary={},
            save_solution=False,
            save_statistics=False,
            generate_plots=False
        )

        assert set(paths) == {'best_chromosome', 'summary_report'}
        assert not (tmp_path / "result.sol").exists()

    def test_disabled(self, tmp_path, history, best, literal_instance, zero_penalty_config):
        """A disabled manager creates nothing."""
        target = tmp_path / "off"
        manager = ResultsManager(results_dir=str(target), enabled=False)

        paths = manager.save_all_results(
            best_chromosome=best,
            best_fitness=5.0,
            best_generation=0,
            generations_run=0,
            termination_reason="cancelled",
            instance=literal_instance,
            fitness_config=zero_penalty_config,
            convergence_history=history,
            convergence_summary={}
        )

        assert paths == {}
        assert not target.exists()
