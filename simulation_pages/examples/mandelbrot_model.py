"""Example model module: a Mandelbrot renderer.

Shows the shape every model module takes.  ``MODELS`` maps a demo slug to a
``(Model, Params)`` pair; ``Params.builder()`` returns the chained-setter
builder and ``Model.draw`` paints onto the surface's Matplotlib figure.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ..core.contracts import ModelBinding


class _Builder:
    def __init__(self, max_iterations: int = 64) -> None:
        self._max_iterations = max_iterations

    def max_iterations(self, value: int) -> _Builder:
        return _Builder(int(value))


class Params:
    @staticmethod
    def builder() -> _Builder:
        return _Builder()


def escape_counts(
    width: int,
    height: int,
    max_iterations: int = 64,
    x_range: tuple[float, float] = (-2.2, 1.0),
    y_range: tuple[float, float] = (-1.2, 1.2),
) -> np.ndarray:
    """Iteration count at which each pixel escapes the radius-2 disc."""
    xs = np.linspace(x_range[0], x_range[1], max(width, 1))
    ys = np.linspace(y_range[0], y_range[1], max(height, 1))
    c = xs[np.newaxis, :] + 1j * ys[:, np.newaxis]
    z = np.zeros_like(c)
    counts = np.full(c.shape, max_iterations, dtype=int)
    alive = np.ones(c.shape, dtype=bool)
    for i in range(max_iterations):
        z[alive] = z[alive] * z[alive] + c[alive]
        escaped = alive & (np.abs(z) > 2.0)
        counts[escaped] = i
        alive &= ~escaped
        if not alive.any():
            break
    return counts


class Model:
    @staticmethod
    def draw(surface: Any, params: _Builder) -> Any:
        counts = escape_counts(surface.width, surface.height, params._max_iterations)
        fig = surface.figure
        fig.clear()
        ax = fig.add_axes((0, 0, 1, 1))
        ax.imshow(counts, cmap="magma", origin="lower", aspect="auto")
        ax.set_axis_off()
        return ax


MODELS = {"example": ModelBinding(Model, Params)}
