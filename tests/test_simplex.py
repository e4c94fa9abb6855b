"""Tests for compartment fraction rebalancing."""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from simulation_pages.core.simplex import is_normalized, rebalance


class TestRebalance:
    def test_splits_deviation_equally(self):
        s, i, r = rebalance((0.5, 0.3, 0.2), 0, 0.7)
        assert s == pytest.approx(0.7)
        assert i == pytest.approx(0.2)
        assert r == pytest.approx(0.1)

    def test_edit_middle_fraction(self):
        s, i, r = rebalance((0.6, 0.2, 0.2), 1, 0.0)
        assert i == pytest.approx(0.0, abs=1e-12)
        assert s == pytest.approx(0.7)
        assert r == pytest.approx(0.3)

    def test_deficit_moves_to_other_partner(self):
        s, i, r = rebalance((0.5, 0.5, 0.0), 0, 1.0)
        assert s == pytest.approx(1.0)
        assert i == pytest.approx(0.0, abs=1e-12)
        assert r == pytest.approx(0.0, abs=1e-12)

    def test_requested_value_is_clamped(self):
        s, i, r = rebalance((0.2, 0.3, 0.5), 2, 1.7)
        assert r == pytest.approx(1.0)
        assert is_normalized((s, i, r))

    def test_sum_invariant_over_grid(self):
        grid = np.linspace(0.0, 1.0, 11)
        for s0, i0 in itertools.product(grid, grid):
            if s0 + i0 > 1.0:
                continue
            start = (s0, i0, 1.0 - s0 - i0)
            for edited in range(3):
                for value in (0.0, 0.13, 0.5, 0.99, 1.0):
                    out = rebalance(start, edited, value)
                    assert abs(sum(out) - 1.0) < 1e-9
                    assert min(out) > -1e-9

    @pytest.mark.parametrize("start, edited, value", [
        ((0.5, 0.5, 0.5), 0, 0.5),
        ((0.1, 0.9, 0.9), 0, 0.1),
        ((0.0, 2.0, 0.0), 1, 1.0),
        ((0.0, 0.0, 0.0), 2, 0.0),
    ])
    def test_normalizes_inconsistent_start(self, start, edited, value):
        out = rebalance(start, edited, value)
        assert is_normalized(out)
        assert min(out) >= 0.0

    def test_negative_share_is_redistributed(self):
        s, i, r = rebalance((0.1, 0.9, 0.9), 0, 0.1)
        assert s == pytest.approx(0.0, abs=1e-12)
        assert i == pytest.approx(0.5)
        assert r == pytest.approx(0.5)

    def test_rejects_bad_arity(self):
        with pytest.raises(ValueError):
            rebalance((0.5, 0.5), 0, 0.1)
