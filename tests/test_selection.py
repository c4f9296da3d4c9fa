#!/usr/bin/env python3
"""
Unit tests for survivor selection.

Tests:
- Ranking keeps the N lowest-fitness individuals
- Tournament winners are sorted best-first with no shared objects
- Input validation and method dispatch
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from optimization.selection import (
    SelectionMethod,
    ranking_selection,
    select_survivors,
    tournament_selection,
    tournament_winner,
)
from scheduling.chromosome import Chromosome


@pytest.fixture
def population():
    """Ten distinct chromosomes."""
    return [Chromosome(resource_of=[i], priority_of=[0]) for i in range(10)]


@pytest.fixture
def fitness_scores():
    """Fitness values; index 7 is best, index 2 is worst."""
    return [5.0, 3.0, 9.0, 4.0, 6.0, 8.0, 2.5, 1.0, 7.0, 3.5]


class TestRankingSelection:
    """Test truncation by rank."""

    def test_keeps_lowest(self, population, fitness_scores):
        """The best N survive, sorted ascending."""
        survivors = ranking_selection(population, fitness_scores, 4)
        assert survivors == [population[7], population[6], population[1], population[9]]

    def test_stable_on_ties(self, population):
        """Ties keep population order."""
        survivors = ranking_selection(population, [1.0] * 10, 3)
        assert survivors == population[:3]

    def test_more_survivors_than_population(self, population, fitness_scores):
        """Asking for more than available returns everyone sorted."""
        survivors = ranking_selection(population, fitness_scores, 20)
        assert len(survivors) == 10


class TestTournamentSelection:
    """Test tournament truncation."""

    def test_size_and_order(self, population, fitness_scores, rng):
        """N survivors, sorted best-first."""
        survivors = tournament_selection(population, fitness_scores, 6, tournament_size=3, rng=rng)
        assert len(survivors) == 6

        by_genes = {c: fitness_scores[i] for i, c in enumerate(population)}
        scores = [by_genes[c] for c in survivors]
        assert scores == sorted(scores)

    def test_no_shared_objects(self, population, fitness_scores, rng):
        """Repeated winners are copies, never the same object twice."""
        survivors = tournament_selection(population, fitness_scores, 30, tournament_size=5, rng=rng)
        assert len({id(c) for c in survivors}) == 30

    def test_pressure(self, population, fitness_scores):
        """Large tournaments almost always pick the best."""
        rng = np.random.default_rng(0)
        wins = sum(
            tournament_winner(fitness_scores, 50, rng) == 7
            for _ in range(200)
        )
        assert wins > 190

    def test_size_one_is_uniform(self, fitness_scores):
        """Tournament of one returns a uniformly random index."""
        rng = np.random.default_rng(0)
        winners = {tournament_winner(fitness_scores, 1, rng) for _ in range(500)}
        assert winners == set(range(10))

    def test_deterministic(self, population, fitness_scores):
        """Same seed gives the same survivors."""
        a = tournament_selection(population, fitness_scores, 5, rng=np.random.default_rng(42))
        b = tournament_selection(population, fitness_scores, 5, rng=np.random.default_rng(42))
        assert a == b

    def test_invalid_size(self, population, fitness_scores, rng):
        """Tournament size must be at least 1."""
        with pytest.raises(ValueError, match="Tournament size must be at least 1"):
            tournament_selection(population, fitness_scores, 5, tournament_size=0, rng=rng)


class TestSelectSurvivors:
    """Test dispatch and validation."""

    def test_ranking_dispatch(self, population, fitness_scores):
        """String method names are accepted."""
        survivors = select_survivors(population, fitness_scores, 3, method="ranking")
        assert survivors[0] is population[7]

    def test_tournament_dispatch(self, population, fitness_scores, rng):
        """Tournament method returns the requested count."""
        survivors = select_survivors(
            population, fitness_scores, 4,
            method=SelectionMethod.TOURNAMENT, tournament_size=2, rng=rng
        )
        assert len(survivors) == 4

    def test_unknown_method(self, population, fitness_scores):
        """Unknown methods raise ValueError."""
        with pytest.raises(ValueError, match="Unknown selection method"):
            select_survivors(population, fitness_scores, 3, method="roulette")

    def test_empty_population(self):
        """Selection needs individuals."""
        with pytest.raises(ValueError, match="Population is empty"):
            ranking_selection([], [], 1)

    def test_mismatched_sizes(self, population):
        """Scores must be parallel to the population."""
        with pytest.raises(ValueError, match="does not match"):
            ranking_selection(population, [1.0, 2.0], 1)

    def test_invalid_survivor_count(self, population, fitness_scores):
        """At least one survivor."""
        with pytest.raises(ValueError, match="n_survivors must be at least 1"):
            ranking_selection(population, fitness_scores, 0)
