"""Fakes for the external model collaborator."""

from __future__ import annotations

from collections import deque
from typing import Any

import pytest

from simulation_pages.core.contracts import ModelBinding
from simulation_pages.rendering.pipeline import StatusPanel


# ── Params builder ───────────────────────────────────────────────────

class FakeBuilder:
    """Chained-setter builder that records every call."""

    def __init__(self, calls: tuple = ()) -> None:
        self.calls = calls

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        def setter(*args: Any) -> FakeBuilder:
            return FakeBuilder(self.calls + ((name, args),))
        return setter

    def as_dict(self) -> dict[str, Any]:
        return {n: a[0] if len(a) == 1 else a for n, a in self.calls}

    @property
    def names(self) -> list[str]:
        return [n for n, _ in self.calls]


class FakeParams:
    @staticmethod
    def builder() -> FakeBuilder:
        return FakeBuilder()


# ── Surfaces ─────────────────────────────────────────────────────────

class FakeSurface:
    def __init__(self, width: int = 600, height: int = 400) -> None:
        self.width = width
        self.height = height
        self.css_width = float(width)
        self.css_height = float(height)
        self.exports = 0

    def to_data_url(self, mime: str = "image/png") -> str:
        self.exports += 1
        return f"data:{mime};base64,frame{self.exports}"


# ── Models ───────────────────────────────────────────────────────────

class RecordingModel:
    """Stateless model remembering its arguments and the status it saw."""

    def __init__(self, status: StatusPanel | None = None, error: Exception | None = None) -> None:
        self.status = status
        self.error = error
        self.calls: list[tuple] = []
        self.status_seen: list[str] = []

    def draw(self, surface: Any, *args: Any) -> Any:
        if self.status is not None:
            self.status_seen.append(self.status.status)
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return ("handle", len(self.calls))

    @property
    def last_params(self) -> FakeBuilder:
        return self.calls[-1][-1]


def maze_path_length(text: str) -> int:
    """Breadth-first distance from S to E; walls are '#'."""
    grid = text.splitlines()
    start = end = None
    for y, row in enumerate(grid):
        for x, ch in enumerate(row):
            if ch == "S":
                start = (x, y)
            elif ch == "E":
                end = (x, y)
    if start is None or end is None:
        raise ValueError("maze needs S and E")

    dist = {start: 0}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        if (x, y) == end:
            return dist[end]
        for nx, ny in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if 0 <= ny < len(grid) and 0 <= nx < len(grid[ny]):
                if grid[ny][nx] != "#" and (nx, ny) not in dist:
                    dist[(nx, ny)] = dist[(x, y)] + 1
                    queue.append((nx, ny))
    raise ValueError("maze has no path")


class MazeInstance:
    def __init__(self, maze: str) -> None:
        self.maze = maze
        self.length = maze_path_length(maze)
        self.drawn: list[int] = []

    def max_step(self) -> int:
        return self.length

    def draw(self, surface: Any, step: int) -> Any:
        self.drawn.append(step)
        return ("step", step)


class MazeModel:
    def __init__(self) -> None:
        self.builds = 0

    def build(self, params: FakeBuilder) -> MazeInstance:
        self.builds += 1
        return MazeInstance(params.as_dict()["maze"])


class CrashingInstance(MazeInstance):
    def max_step(self) -> int:
        raise RuntimeError("solver crashed")


class CrashingMazeModel(MazeModel):
    def build(self, params: FakeBuilder) -> MazeInstance:
        self.builds += 1
        return CrashingInstance(params.as_dict()["maze"])


class FakeClock:
    """Returns seconds, advancing by ``step`` seconds on every read."""

    def __init__(self, step: float = 0.0105) -> None:
        self.now = 100.0
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


# ── Fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def status() -> StatusPanel:
    return StatusPanel()


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_model(status: StatusPanel) -> RecordingModel:
    return RecordingModel(status)


@pytest.fixture
def stateless_binding(recording_model: RecordingModel) -> ModelBinding:
    return ModelBinding(recording_model, FakeParams())


@pytest.fixture
def maze_model() -> MazeModel:
    return MazeModel()


@pytest.fixture
def maze_binding(maze_model: MazeModel) -> ModelBinding:
    return ModelBinding(maze_model, FakeParams())
