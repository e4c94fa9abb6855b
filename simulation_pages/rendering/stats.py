"""Rolling log of render latencies."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any

import pandas as pd


@dataclass(frozen=True)
class RenderSample:
    page: str
    outcome: str
    latency_ms: int


class RenderStats:
    """Keeps the most recent render samples across all pages."""

    def __init__(self, maxlen: int = 200) -> None:
        self._samples: deque[RenderSample] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._samples)

    def record(self, page: str, outcome: str, latency_ms: int) -> None:
        self._samples.append(RenderSample(page, outcome, latency_ms))

    def to_frame(self, page: str | None = None) -> pd.DataFrame:
        rows = [
            {"page": s.page, "outcome": s.outcome, "latency_ms": s.latency_ms}
            for s in self._samples
            if page is None or s.page == page
        ]
        frame = pd.DataFrame(rows, columns=["page", "outcome", "latency_ms"])
        frame.index.name = "render"
        return frame

    def summary(self, page: str | None = None) -> dict[str, Any]:
        frame = self.to_frame(page)
        if frame.empty:
            return {"renders": 0, "mean_ms": 0.0, "max_ms": 0, "failures": 0}
        return {
            "renders": int(len(frame)),
            "mean_ms": float(frame["latency_ms"].mean()),
            "max_ms": int(frame["latency_ms"].max()),
            "failures": int((frame["outcome"] != "success").sum()),
        }
