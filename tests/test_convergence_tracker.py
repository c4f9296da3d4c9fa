#!/usr/bin/env python3
"""
Unit tests for ConvergenceTracker.

Tests:
- History recording
- Improvement detection for minimization
- Early stopping with patience (and patience 0 disabling it)
- Summary and reset
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from optimization.convergence_tracker import ConvergenceTracker, GenerationStats


class TestTrackerBasics:
    """Test construction and history."""

    def test_initial_state(self):
        """A fresh tracker has no history and infinite best."""
        tracker = ConvergenceTracker(patience=5)
        assert tracker.best_fitness == np.inf
        assert tracker.history == []

    def test_invalid_parameters(self):
        """Negative patience or delta are rejected."""
        with pytest.raises(ValueError, match="patience must be non-negative"):
            ConvergenceTracker(patience=-1)
        with pytest.raises(ValueError, match="min_delta must be non-negative"):
            ConvergenceTracker(min_delta=-0.1)

    def test_history_records(self):
        """Each update appends a GenerationStats record."""
        tracker = ConvergenceTracker()
        tracker.update(0, 10.0, 20.0, 15.0, 0.5)
        tracker.update(1, 9.0, 18.0, 12.0, 0.4)

        history = tracker.get_history()
        assert history[1] == GenerationStats(1, 9.0, 18.0, 12.0, 0.4)
        assert history[0].min_fitness == 10.0
        assert len(history) == 2


class TestImprovement:
    """Test improvement detection."""

    def test_lower_is_better(self):
        """A decrease updates the best; an increase does not."""
        tracker = ConvergenceTracker()
        tracker.update(0, 10.0, 20.0, 15.0)
        tracker.update(1, 8.0, 20.0, 15.0)
        tracker.update(2, 9.0, 20.0, 15.0)

        assert tracker.best_fitness == 8.0
        assert tracker.best_generation == 1
        assert tracker.generations_since_improvement == 1

    def test_min_delta(self):
        """Decreases below min_delta do not count."""
        tracker = ConvergenceTracker(min_delta=0.5)
        tracker.update(0, 10.0, 20.0, 15.0)
        tracker.update(1, 9.8, 20.0, 15.0)

        assert tracker.best_fitness == 10.0
        assert tracker.generations_since_improvement == 1


class TestEarlyStopping:
    """Test patience-based stopping."""

    def test_stops_after_patience(self):
        """Stagnation for `patience` generations triggers a stop."""
        tracker = ConvergenceTracker(patience=3)
        assert not tracker.update(0, 5.0, 9.0, 7.0)
        assert not tracker.update(1, 5.0, 9.0, 7.0)
        assert not tracker.update(2, 5.0, 9.0, 7.0)
        assert tracker.update(3, 5.0, 9.0, 7.0)

    def test_improvement_resets_counter(self):
        """Improvement restarts the patience window."""
        tracker = ConvergenceTracker(patience=2)
        tracker.update(0, 5.0, 9.0, 7.0)
        tracker.update(1, 5.0, 9.0, 7.0)
        assert not tracker.update(2, 4.0, 9.0, 7.0)
        assert not tracker.update(3, 4.0, 9.0, 7.0)
        assert tracker.update(4, 4.0, 9.0, 7.0)

    def test_zero_patience_never_stops(self):
        """Patience 0 disables early stopping."""
        tracker = ConvergenceTracker(patience=0)
        for gen in range(50):
            assert not tracker.update(gen, 5.0, 9.0, 7.0)


class TestSummary:
    """Test summaries and reset."""

    def test_summary(self):
        """Improvement from start is first minus best."""
        tracker = ConvergenceTracker()
        tracker.update(0, 10.0, 20.0, 15.0)
        tracker.update(1, 7.5, 20.0, 15.0)

        summary = tracker.get_improvement_summary()
        assert summary['best_fitness'] == 7.5
        assert summary['best_generation'] == 1
        assert summary['total_generations'] == 2
        assert summary['improvement_from_start'] == pytest.approx(2.5)

    def test_empty_summary(self):
        """Empty tracker reports defaults."""
        summary = ConvergenceTracker().get_improvement_summary()
        assert summary['total_generations'] == 0

    def test_reset(self):
        """Reset clears everything."""
        tracker = ConvergenceTracker(patience=2)
        tracker.update(0, 3.0, 4.0, 3.5)
        tracker.reset()

        assert tracker.history == []
        assert tracker.best_fitness == np.inf
        assert tracker.generations_since_improvement == 0
