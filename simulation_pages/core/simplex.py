"""Rebalancing of three mutually constrained population fractions."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

TOLERANCE = 1e-9


def rebalance(
    values: Sequence[float],
    edited: int,
    new_value: float,
) -> tuple[float, float, float]:
    """Set ``values[edited]`` to *new_value* and keep the triple summing to 1.

    The deviation from the previous value is split equally between the two
    other fractions.  A partner that would drop below zero hands its deficit
    to the remaining one, then any residual rounding error is spread equally
    across all three.  Fractions left negative by that pass are zeroed and the
    triple is rescaled to sum to 1.
    """
    if len(values) != 3:
        raise ValueError("expected exactly three fractions")
    if edited not in (0, 1, 2):
        raise IndexError(edited)

    old = np.asarray(values, dtype=float)
    new = old.copy()
    new[edited] = min(max(float(new_value), 0.0), 1.0)
    delta = new[edited] - old[edited]

    a, b = (i for i in range(3) if i != edited)
    new[a] -= delta / 2.0
    new[b] -= delta / 2.0
    if new[a] < 0.0:
        new[b] += new[a]
        new[a] = 0.0
    elif new[b] < 0.0:
        new[a] += new[b]
        new[b] = 0.0

    new += (1.0 - new.sum()) / 3.0
    if (new < 0.0).any():
        new = np.clip(new, 0.0, None)
        new /= new.sum()
    return float(new[0]), float(new[1]), float(new[2])


def is_normalized(values: Sequence[float], tolerance: float = TOLERANCE) -> bool:
    return abs(float(np.sum(values)) - 1.0) < tolerance
