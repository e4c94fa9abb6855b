"""Form control model shared by the page controller and the web front end."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ControlSpec:
    """Declaration of one input widget on a demo page."""

    name: str
    label: str
    value: str
    widget: str = "number"  # number | select | text | textarea | range
    min: float | None = None
    max: float | None = None
    step: float | str | None = None
    options: tuple[tuple[str, str], ...] = ()


@dataclass
class Control:
    """Live state of a control: its raw text value and current bounds."""

    spec: ControlSpec
    value: str = ""
    max: float | None = None

    @classmethod
    def from_spec(cls, spec: ControlSpec) -> Control:
        return cls(spec=spec, value=spec.value, max=spec.max)

    @property
    def name(self) -> str:
        return self.spec.name


@dataclass
class ControlSet:
    """The controls of one page, keyed by name, in declaration order."""

    controls: dict[str, Control] = field(default_factory=dict)

    @classmethod
    def from_specs(cls, specs: Iterable[ControlSpec]) -> ControlSet:
        return cls({s.name: Control.from_spec(s) for s in specs})

    def __contains__(self, name: object) -> bool:
        return name in self.controls

    def __iter__(self) -> Iterator[Control]:
        return iter(self.controls.values())

    def __getitem__(self, name: str) -> Control:
        return self.controls[name]

    def get(self, name: str) -> str:
        return self.controls[name].value

    def set(self, name: str, raw: Any) -> None:
        if name not in self.controls:
            raise KeyError(f"no control named {name!r}")
        self.controls[name].value = "" if raw is None else str(raw)

    def values(self) -> dict[str, str]:
        """Snapshot of every raw value, read fresh for each render."""
        return {name: c.value for name, c in self.controls.items()}
