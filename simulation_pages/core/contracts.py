"""Interfaces of the external model collaborator.

Models and params builders come from a separately built computational
module.  The controller only relies on the capabilities below, injected as
a :class:`ModelBinding` when a page is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Surface(Protocol):
    width: int
    height: int
    css_width: float
    css_height: float

    def to_data_url(self, mime: str = "image/png") -> str: ...


class ParamsFactory(Protocol):
    """``builder()`` returns a value exposing one chained setter per field."""

    def builder(self) -> Any: ...


class ModelInstance(Protocol):
    def draw(self, surface: Any, step: int) -> Any: ...

    def max_step(self) -> int: ...


@dataclass(frozen=True)
class ModelBinding:
    """A model class (or module-like object) and its params factory.

    Stateless models expose ``draw(surface, [tag,] params)``; stateful ones
    expose ``build(params)`` returning a :class:`ModelInstance`.
    """

    model: Any
    params: ParamsFactory

    @property
    def stateful(self) -> bool:
        return callable(getattr(self.model, "build", None))
