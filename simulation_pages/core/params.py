"""Parameter binding: form control values to immutable parameter records.

A demo declares the fields its model understands as :class:`FieldSpec`
entries.  On every input event the page reads the raw control text, runs it
through :class:`ParameterBinder` and hands the resulting
:class:`ParameterRecord` to the render pipeline, which replays it onto the
external model's chained params builder.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple


class ParameterError(ValueError):
    """Base class for parameter binding errors."""


class UnknownFieldError(ParameterError):
    """A field outside the builder's declared field set was set."""


class MissingFieldError(ParameterError):
    """A declared field was never set before ``build()``."""


class FieldKind(Enum):
    FLOAT = "float"
    INTEGER = "integer"
    ENUM = "enum"
    SEED = "seed"
    TEXT = "text"

    @property
    def numeric(self) -> bool:
        return self in (FieldKind.FLOAT, FieldKind.INTEGER)


def parse_number(raw: Any) -> float:
    """Parse control text as a float; empty or malformed text gives NaN."""
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip() if raw is not None else ""
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def clamp(value: float, low: float | None, high: float | None) -> float:
    if low is not None and value < low:
        return low
    if high is not None and value > high:
        return high
    return value


@dataclass(frozen=True)
class FieldSpec:
    """One named parameter of a model's params builder.

    ``source`` names the form control the raw value comes from; it
    defaults to the field name.  Numeric fields declaring ``low``/``high``
    are clamped rather than rejected.
    """

    name: str
    kind: FieldKind = FieldKind.FLOAT
    source: str | None = None
    low: float | None = None
    high: float | None = None
    default: Any = None

    @property
    def control(self) -> str:
        return self.source or self.name

    @property
    def bounded(self) -> bool:
        return self.low is not None or self.high is not None

    def coerce(self, raw: Any) -> Any:
        if not self.kind.numeric:
            return "" if raw is None else str(raw)

        value = parse_number(raw)
        if self.kind is FieldKind.INTEGER and not math.isfinite(value):
            value = math.nan
        if math.isnan(value):
            value = self._fallback()
        if not math.isnan(value):
            value = clamp(value, self.low, self.high)

        if self.kind is FieldKind.INTEGER:
            return int(value)
        return value

    def _fallback(self) -> float:
        # Integers always fall back to a finite value.
        if self.default is not None:
            return float(self.default)
        if self.low is not None:
            return self.low
        if self.high is not None:
            return self.high
        return 0 if self.kind is FieldKind.INTEGER else math.nan


@dataclass(frozen=True)
class SetterGroup:
    """Several fields (or constants) passed through one builder setter.

    ``SetterGroup("initial_state", fields=("g1", "g2", "g3"))`` turns into
    ``builder.initial_state(g1, g2, g3)``; a group with only ``constants``
    is always applied with those fixed arguments.
    """

    setter: str
    fields: tuple[str, ...] = ()
    constants: tuple[Any, ...] = ()


class ParameterRecord(Mapping[str, Any]):
    """Immutable, ordered mapping of validated field values."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"ParameterRecord({inner})"

    def __hash__(self) -> int:
        return hash(tuple(self._values.items()))

    def apply(self, builder: Any, groups: tuple[SetterGroup, ...] = ()) -> Any:
        """Replay the record onto an external chained-setter builder.

        Returns the terminal builder value, ready to pass to ``draw`` or
        ``build``.
        """
        grouped = {name: g for g in groups for name in g.fields}
        done: set[str] = set()
        for name, value in self._values.items():
            group = grouped.get(name)
            if group is None:
                builder = getattr(builder, name)(value)
            elif group.setter not in done:
                args = [self._values[f] for f in group.fields]
                builder = getattr(builder, group.setter)(*args, *group.constants)
                done.add(group.setter)
        for group in groups:
            if not group.fields:
                builder = getattr(builder, group.setter)(*group.constants)
        return builder


class RecordBuilder:
    """Fluent builder over a fixed field set.

    Each :meth:`set` returns a new builder, so a partially built value can
    be shared without aliasing.  Only :meth:`build` materializes a record.
    """

    def __init__(
        self,
        fields: tuple[FieldSpec, ...],
        values: Mapping[str, Any] | None = None,
    ) -> None:
        self._fields = {f.name: f for f in fields}
        self._values: dict[str, Any] = dict(values or {})

    def set(self, name: str, raw: Any) -> RecordBuilder:
        spec = self._fields.get(name)
        if spec is None:
            raise UnknownFieldError(f"unknown parameter {name!r}")
        values = dict(self._values)
        values[name] = spec.coerce(raw)
        return RecordBuilder(tuple(self._fields.values()), values)

    def build(self) -> ParameterRecord:
        missing = [n for n in self._fields if n not in self._values]
        if missing:
            raise MissingFieldError(f"unset parameters: {', '.join(missing)}")
        return ParameterRecord({n: self._values[n] for n in self._fields})


@dataclass(frozen=True)
class SolverChoice:
    """ODE vs. stochastic solver selection.

    Picking the stochastic solver attaches a seed field, anything else is
    treated as an ODE method name; the record only ever carries one of them.
    """

    control: str = "solver"
    stochastic: str = "ssa"
    seed_field: FieldSpec = field(
        default_factory=lambda: FieldSpec("ssa_seed", FieldKind.SEED, source="seed")
    )
    method_field: FieldSpec = field(
        default_factory=lambda: FieldSpec("solver", FieldKind.ENUM, source="solver")
    )

    def select(self, values: Mapping[str, Any]) -> tuple[str, FieldSpec]:
        if str(values.get(self.control, "")) == self.stochastic:
            return "ssa", self.seed_field
        return "ode", self.method_field


class BoundParameters(NamedTuple):
    record: ParameterRecord
    tag: str | None = None


class ParameterBinder:
    """Reads raw control values and binds them to a :class:`ParameterRecord`."""

    def __init__(
        self,
        fields: tuple[FieldSpec, ...] | list[FieldSpec],
        *,
        solver: SolverChoice | None = None,
        tag_control: str | None = None,
    ) -> None:
        self.fields = tuple(fields)
        self.solver = solver
        self.tag_control = tag_control

    def builder(self, extra: tuple[FieldSpec, ...] = ()) -> RecordBuilder:
        return RecordBuilder(extra + self.fields)

    def controls(self) -> set[str]:
        """Names of every control this binder may read."""
        names = {f.control for f in self.fields}
        if self.solver is not None:
            names |= {
                self.solver.control,
                self.solver.seed_field.control,
                self.solver.method_field.control,
            }
        if self.tag_control is not None:
            names.add(self.tag_control)
        return names

    def bind(self, values: Mapping[str, Any]) -> BoundParameters:
        tag: str | None = None
        extra: tuple[FieldSpec, ...] = ()
        if self.solver is not None:
            tag, branch = self.solver.select(values)
            extra = (branch,)
        elif self.tag_control is not None:
            tag = str(values.get(self.tag_control, ""))

        builder = self.builder(extra)
        for spec in extra + self.fields:
            builder = builder.set(spec.name, values.get(spec.control))
        return BoundParameters(builder.build(), tag)
