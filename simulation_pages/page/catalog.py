"""Declarations of every demo page.

Pages differ only in which controls they show, which params-builder fields
those controls feed, and how the caption reads.  Everything else is shared
by :class:`~simulation_pages.page.controller.PageController`.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable

from ..core.params import FieldKind, FieldSpec, SetterGroup, SolverChoice, parse_number
from ..core.viewport import IMAGE_FLOOR, PLOT_FLOOR
from .controls import ControlSpec

Caption = Callable[[Mapping[str, str]], str]


@dataclass(frozen=True)
class DemoSpec:
    slug: str
    title: str
    section: str
    description: str
    controls: tuple[ControlSpec, ...]
    fields: tuple[FieldSpec, ...]
    caption: Caption
    floor: float | None = PLOT_FLOOR
    surface_size: tuple[int, int] = (600, 400)
    image_backed: bool = False
    solver: SolverChoice | None = None
    tag_control: str | None = None
    groups: tuple[SetterGroup, ...] = ()
    simplex: tuple[str, str, str] | None = None
    structural: tuple[str, ...] = ()
    step_control: str | None = None

    @property
    def stateful(self) -> bool:
        return self.step_control is not None

    @property
    def control_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.controls)


# ═══════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════


def _number(name: str, label: str, value: str, lo: float | None = None,
            hi: float | None = None, step: float | str | None = "any") -> ControlSpec:
    return ControlSpec(name, label, value, "number", lo, hi, step)


def _select(name: str, label: str, value: str, *options: tuple[str, str]) -> ControlSpec:
    return ControlSpec(name, label, value, "select", options=tuple(options))


def _seed(value: str = "42") -> ControlSpec:
    return ControlSpec("seed", "Seed", value, "text")


def _max_time(value: str = "50") -> ControlSpec:
    return _number("max_time", "Max Time", value, 0)


def _f(name: str, source: str | None = None, **kw) -> FieldSpec:
    return FieldSpec(name, FieldKind.FLOAT, source=source, **kw)


def _caption(*pairs: tuple[str, str], sep: str = ", ") -> Caption:
    """Caption echoing raw control values as ``Label: value`` pairs."""
    def render(values: Mapping[str, str]) -> str:
        return sep.join(f"{label}: {values.get(name, '')}" for label, name in pairs)
    return render


_BOUNDARY = _select(
    "boundary_condition", "Boundary Condition", "periodic",
    ("Periodic", "periodic"), ("Constant", "constant"),
)
_ODE_SOLVERS = (
    ("Euler", "euler"), ("Runge-Kutta 4", "rk4"), ("Adaptive RK45", "rk45"),
)
_SOLVER = _select(
    "solver", "Solver", "rk4", *_ODE_SOLVERS, ("Stochastic (SSA)", "ssa"),
)
_PLOT_TYPE = _select(
    "plot_type", "Plot", "time", ("Population over time", "time"), ("Cobweb", "cobweb"),
)


# ═══════════════════════════════════════════════════════════════════════
#  Demo-specific captions
# ═══════════════════════════════════════════════════════════════════════


def _fixed(raw: str) -> str:
    value = parse_number(raw)
    return "NaN" if math.isnan(value) else f"{value:.2f}"


def _sir_caption(values: Mapping[str, str]) -> str:
    return (
        f"Max Time (t): {values['max_time']}, "
        f"Initial Susceptible Pop (S(0)): {_fixed(values['init_susceptible_pop'])}, "
        f"Initial Infected Pop (I(0)): {_fixed(values['init_infected_pop'])}, "
        f"Initial Recovered Pop (R(0)): {_fixed(values['init_recovered_pop'])}\n"
        f"Infection Coefficient (β): {values['infection_coefficient']}, "
        f"Recovery Coefficient (γ): {values['recovery_coefficient']}, "
        f"Birth Rate (μ): {values['birth_rate']}, "
        f"Vaccination Coefficient (p): {values['vaccination_coefficient']}"
    )


def equilibrium_point(carrying_capacity: float, birth_rate: float) -> float:
    """Non-trivial fixed point ``K (1 - 1/r)`` of the discrete logistic map."""
    if birth_rate == 0 or math.isnan(birth_rate) or math.isnan(carrying_capacity):
        return math.nan
    return carrying_capacity * (1.0 - 1.0 / birth_rate)


def _discrete_logistic_caption(values: Mapping[str, str]) -> str:
    eq = equilibrium_point(parse_number(values["carrying_cap"]), parse_number(values["birth_rate"]))
    eq_text = str(round(eq)) if math.isfinite(eq) else "n/a"
    return (
        f"Max Time (t): {values['max_time']}, "
        f"Initial Pop (N(0)): {values['init_pop']}, "
        f"Birth Rate (r): {values['birth_rate']}, "
        f"Carrying Capacity (K): {values['carrying_cap']}, "
        f"Equilibrium Point: {eq_text}"
    )


def _maze_caption(values: Mapping[str, str]) -> str:
    return f"Current Step: {values['step']}"


# ═══════════════════════════════════════════════════════════════════════
#  Demo configurations
# ═══════════════════════════════════════════════════════════════════════

_MAZE0 = "\n".join([
    "###########",
    "#S  #     #",
    "# # # ### #",
    "# #   #   #",
    "# ##### # #",
    "#     # #E#",
    "###########",
])

_DEMO_LIST: list[DemoSpec] = [
    DemoSpec(
        slug="elementary_automaton",
        title="Elementary Cellular Automaton",
        section="Cellular Automata",
        description=(
            "One-dimensional automaton whose update is given by a Wolfram rule "
            "number; rows stack downward as time advances."
        ),
        controls=(
            _number("resolution", "Grid Size", "100", 1, step=1),
            _BOUNDARY,
            _number("rule", "Rule", "90", 0, 255, step=1),
            _max_time("100"),
            _seed(),
        ),
        fields=(
            _f("max_time"),
            FieldSpec("resolution", FieldKind.INTEGER, low=1),
            FieldSpec("boundary", FieldKind.ENUM, source="boundary_condition"),
            FieldSpec("rule", FieldKind.INTEGER, low=0, high=255, default=90),
        ),
        caption=_caption(("Max Time (t)", "max_time"), ("Grid Size", "resolution")),
        surface_size=(600, 600),
    ),
    DemoSpec(
        slug="traffic_jam",
        title="Traffic Jam",
        section="Cellular Automata",
        description="Rule-184 style traffic flow on a ring road with random initial cars.",
        controls=(
            _number("resolution", "Grid Size", "100", 1, step=1),
            _BOUNDARY,
            _number("congestion", "Congestion", "0.4", 0, 1),
            _max_time("100"),
            _seed(),
        ),
        fields=(
            _f("max_time"),
            FieldSpec("resolution", FieldKind.INTEGER, low=1),
            _f("congestion"),
            FieldSpec("boundary", FieldKind.ENUM, source="boundary_condition"),
            FieldSpec("seed", FieldKind.SEED),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Grid Size", "resolution"),
            ("Congestion", "congestion"),
        ),
        floor=IMAGE_FLOOR,
        surface_size=(400, 400),
        image_backed=True,
    ),
    DemoSpec(
        slug="maze_solver",
        title="Maze Solver",
        section="Cellular Automata",
        description=(
            "A flood-fill automaton explores the maze from S until it reaches E, "
            "then traces the shortest path back."
        ),
        controls=(
            ControlSpec("maze", "Maze", _MAZE0, "textarea"),
            ControlSpec("step", "Step", "0", "range", 0, 0, 1),
        ),
        fields=(FieldSpec("maze", FieldKind.TEXT),),
        caption=_maze_caption,
        floor=IMAGE_FLOOR,
        surface_size=(400, 400),
        image_backed=True,
        structural=("maze",),
        step_control="step",
    ),
    DemoSpec(
        slug="continuous_linear_birth_model",
        title="Linear Birth Model (continuous)",
        section="Continuous Dynamical Systems",
        description="Exponential growth where each individual produces offspring at a fixed rate.",
        controls=(
            _max_time("10"),
            _number("init_pop", "Initial Population", "10", 0),
            _number("offsprings", "Offsprings", "2", 0),
            _number("repr_rate", "Reproduction Period", "1", 0),
        ),
        fields=(
            _f("max_time"),
            _f("initial_population", "init_pop"),
            _f("offsprings_per_individual", "offsprings"),
            _f("reproduction_period", "repr_rate"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Initial Pop (N(0))", "init_pop"),
            ("Offsprings (λ)", "offsprings"), ("Reproduction Period (σ)", "repr_rate"),
        ),
    ),
    DemoSpec(
        slug="continuous_logistic_equation",
        title="Logistic Equation (continuous)",
        section="Continuous Dynamical Systems",
        description="Growth limited by a carrying capacity, solved as an ODE.",
        controls=(
            _max_time("20"),
            _number("init_pop", "Initial Population", "10", 0),
            _number("birth_rate", "Birth Rate", "0.5", 0),
            _number("carrying_capacity", "Carrying Capacity", "1000", 0),
        ),
        fields=(
            _f("max_time"),
            _f("initial_population", "init_pop"),
            _f("birth_rate"),
            _f("carrying_capacity"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Initial Pop (N(0))", "init_pop"),
            ("Birth Rate (r)", "birth_rate"), ("Carrying Capacity (K)", "carrying_capacity"),
        ),
    ),
    DemoSpec(
        slug="radioactive_decay",
        title="Radioactive Decay",
        section="Continuous Dynamical Systems",
        description="Exponential decay of a population of unstable nuclei.",
        controls=(
            _max_time("10"),
            _number("init_pop", "Initial Population", "1000", 0),
            _number("decay_rate", "Decay Rate", "0.5", 0),
        ),
        fields=(
            _f("max_time"),
            _f("initial_population", "init_pop"),
            _f("decay_rate"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Initial Pop (N(0))", "init_pop"),
            ("Decay Rate (d)", "decay_rate"),
        ),
    ),
    DemoSpec(
        slug="sir_model_vaccination",
        title="SIR Model with Vaccination",
        section="Continuous Dynamical Systems",
        description=(
            "Susceptible / infected / recovered fractions with births and "
            "vaccination of newborns; the three initial fractions always sum to one."
        ),
        controls=(
            _select("solver", "Solver", "rk4", *_ODE_SOLVERS),
            _max_time("50"),
            _number("init_susceptible_pop", "Initial Susceptible", "0.99", 0, 1, 0.01),
            _number("init_infected_pop", "Initial Infected", "0.01", 0, 1, 0.01),
            _number("init_recovered_pop", "Initial Recovered", "0", 0, 1, 0.01),
            _number("infection_coefficient", "Infection Coefficient", "0.5", 0),
            _number("recovery_coefficient", "Recovery Coefficient", "0.1", 0),
            _number("birth_rate", "Birth Rate", "0.01", 0),
            _number("vaccination_coefficient", "Vaccination Coefficient", "0.2", 0, 1),
        ),
        fields=(
            FieldSpec("solver", FieldKind.ENUM),
            _f("max_time"),
            _f("initial_susceptible_population", "init_susceptible_pop", low=0, high=1),
            _f("initial_infected_population", "init_infected_pop", low=0, high=1),
            _f("initial_recovered_population", "init_recovered_pop", low=0, high=1),
            _f("infection_coefficient"),
            _f("recovery_coefficient"),
            _f("birth_rate"),
            _f("vaccination_coefficient"),
        ),
        caption=_sir_caption,
        simplex=("init_susceptible_pop", "init_infected_pop", "init_recovered_pop"),
    ),
    DemoSpec(
        slug="discrete_linear_birth_model",
        title="Linear Birth Model (discrete)",
        section="Discrete Dynamical Systems",
        description="Generation-by-generation linear growth with a configurable time step.",
        controls=(
            _PLOT_TYPE,
            _max_time("10"),
            _number("step_size", "Time Step", "0.5", 0),
            _number("init_pop", "Initial Population", "10", 0),
            _number("offsprings", "Offsprings", "2", 0),
            _number("repr_rate", "Reproduction Period", "1", 0),
        ),
        fields=(
            _f("max_time"),
            _f("time_step", "step_size"),
            _f("initial_population", "init_pop"),
            _f("offsprings_per_individual", "offsprings"),
            _f("reproduction_period", "repr_rate"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Time Step (Δt)", "step_size"),
            ("Initial Pop (N(0))", "init_pop"), ("Offsprings (λ)", "offsprings"),
            ("Reproduction Period (σ)", "repr_rate"),
        ),
        tag_control="plot_type",
    ),
    DemoSpec(
        slug="discrete_logistic_equation",
        title="Logistic Map",
        section="Discrete Dynamical Systems",
        description="The discrete logistic map, from stable equilibria to chaos.",
        controls=(
            _PLOT_TYPE,
            _max_time("50"),
            _number("init_pop", "Initial Population", "10", 0),
            _number("birth_rate", "Birth Rate", "2.5", 0),
            _number("carrying_cap", "Carrying Capacity", "1000", 0),
        ),
        fields=(
            _f("max_time"),
            _f("initial_population", "init_pop"),
            _f("birth_rate"),
            _f("carrying_capacity", "carrying_cap"),
        ),
        caption=_discrete_logistic_caption,
        tag_control="plot_type",
    ),
    DemoSpec(
        slug="male_female_fish_population",
        title="Male / Female Fish Population",
        section="Discrete Dynamical Systems",
        description="Two-sex population where only females reproduce and males die faster.",
        controls=(
            _max_time("50"),
            _number("init_female_pop", "Initial Female Population", "100", 0),
            _number("init_male_pop", "Initial Male Population", "100", 0),
            _number("birth_rate", "Birth Rate", "1.5", 0),
            _number("male_death_rate", "Male Death Rate", "0.2", 0),
            _number("carrying_cap", "Carrying Capacity", "1000", 0),
        ),
        fields=(
            _f("max_time"),
            _f("initial_female_population", "init_female_pop"),
            _f("initial_male_population", "init_male_pop"),
            _f("birth_rate"),
            _f("male_death_rate"),
            _f("carrying_capacity", "carrying_cap"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Initial Female Pop (F(0))", "init_female_pop"),
            ("Initial Male Pop (M(0))", "init_male_pop"), ("Birth Rate (r)", "birth_rate"),
            ("Male Death Rate (s)", "male_death_rate"), ("Carrying Capacity (K)", "carrying_cap"),
        ),
    ),
    DemoSpec(
        slug="customer_queue",
        title="Customer Queue",
        section="Discrete Event Simulation",
        description="Single-server queue with Poisson arrivals and normally distributed service.",
        controls=(
            _max_time("100"),
            _number("lambda_param", "Arrival Rate", "1", 0),
            _number("mean_param", "Service Mean Time", "0.8", 0),
            _number("std_dev_param", "Service Time StdDev", "0.2", 0),
            _seed(),
        ),
        fields=(
            _f("max_time"),
            _f("customer_arrival_lambda", "lambda_param"),
            _f("customer_served_mean", "mean_param"),
            _f("customer_served_std_dev", "std_dev_param"),
            FieldSpec("simulation_seed", FieldKind.SEED, source="seed"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Arrival Rate", "lambda_param"),
            ("Service Mean Time", "mean_param"), ("Service Time StdDev", "std_dev_param"),
        ),
    ),
    DemoSpec(
        slug="frog_l_e_complexes",
        title="Frog L-E Complexes",
        section="Multiset Rewriting",
        description=(
            "Probabilistic P system for Pelophylax lessonae / esculentus / "
            "ridibundus population complexes."
        ),
        controls=(
            _max_time("50"),
            _number("init_lessonae", "Initial Lessonae", "100", 0, step=1),
            _number("init_hybrid", "Initial Hybrids", "100", 0, step=1),
            _number("init_ridibundus", "Initial Ridibundus", "0", 0, step=1),
            _number("carrying_capacity", "Carrying Capacity", "1000", 0),
            _number("selection_strength", "Selection Strength", "0.5", 0, 1),
            _seed(),
        ),
        fields=(
            _f("max_time"),
            _f("initial_lessonae_pop", "init_lessonae"),
            _f("initial_hybrid_pop", "init_hybrid"),
            _f("initial_ridibundus_pop", "init_ridibundus"),
            _f("carrying_capacity"),
            _f("selection_strength"),
            FieldSpec("simulation_seed", FieldKind.SEED, source="seed"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Init Lessonae", "init_lessonae"),
            ("Init Hybrids", "init_hybrid"), ("Init Ridibundus", "init_ridibundus"),
            ("Carrying Capacity", "carrying_capacity"),
            ("Selection Strength", "selection_strength"),
        ),
    ),
    DemoSpec(
        slug="enzymatic_activity",
        title="Enzymatic Activity",
        section="Stochastic Simulation",
        description="Michaelis-Menten kinetics, integrated as ODEs or sampled with Gillespie's SSA.",
        controls=(
            _SOLVER,
            _max_time("10"),
            _number("init_enzyme", "Initial Enzyme", "100", 0, step=1),
            _number("init_reactant", "Initial Reactant", "500", 0, step=1),
            _seed(),
            _number("binding_coeff", "Binding Coefficient", "0.01", 0),
            _number("unbinding_coeff", "Unbinding Coefficient", "0.1", 0),
            _number("catalysis_coeff", "Catalysis Coefficient", "0.5", 0),
        ),
        fields=(
            _f("max_time"),
            _f("initial_enzyme", "init_enzyme"),
            _f("initial_reactant", "init_reactant"),
            _f("binding_rate", "binding_coeff"),
            _f("unbinding_rate", "unbinding_coeff"),
            _f("catalysis_rate", "catalysis_coeff"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Initial Enzyme (E(0))", "init_enzyme"),
            ("Initial Reactant (S(0))", "init_reactant"),
            ("Binding Coefficient (b)", "binding_coeff"),
            ("Unbinding Coefficient (ub)", "unbinding_coeff"),
            ("Catalysis Coefficient (c)", "catalysis_coeff"),
        ),
        solver=SolverChoice(),
    ),
    DemoSpec(
        slug="lotka_volterra",
        title="Lotka-Volterra",
        section="Stochastic Simulation",
        description="Predator-prey dynamics, deterministic or stochastic.",
        controls=(
            _SOLVER,
            _seed(),
            _number("init_prey_pop", "Initial Prey Population", "100", 0, step=1),
            _number("init_predator_pop", "Initial Predator Population", "20", 0, step=1),
            _number("prey_birth_rate", "Prey Birth Rate", "1", 0),
            _number("predator_death_rate", "Predator Death Rate", "0.5", 0),
            _number("hunting_meetings", "Hunting Meetings", "0.01", 0),
            _number("hunt_offsprings", "Hunt Offsprings", "0.5", 0),
            _max_time("30"),
        ),
        fields=(
            _f("max_time"),
            _f("initial_prey_population", "init_prey_pop"),
            _f("initial_predator_population", "init_predator_pop"),
            _f("prey_birth_rate"),
            _f("predator_death_rate"),
            _f("hunting_meetings"),
            _f("hunt_offsprings"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Initial Prey Pop (F(0))", "init_prey_pop"),
            ("Initial Predator Pop (M(0))", "init_predator_pop"),
            ("Prey Birth Rate (r)", "prey_birth_rate"),
            ("Predator Death Rate (s)", "predator_death_rate"),
            ("Hunting Meetings (a)", "hunting_meetings"),
            ("Hunt Offsprings (b)", "hunt_offsprings"),
        ),
        solver=SolverChoice(),
    ),
    DemoSpec(
        slug="negative_feedback_loop",
        title="Negative Feedback Loop",
        section="Stochastic Simulation",
        description="Three-gene repressilator-style circuit with fixed reaction rates.",
        controls=(
            _SOLVER,
            _seed(),
            _max_time("10"),
            _number("init_g1_pop", "Initial g1", "10", 0, step=1),
            _number("init_g2_pop", "Initial g2", "0", 0, step=1),
            _number("init_g3_pop", "Initial g3", "0", 0, step=1),
        ),
        fields=(
            _f("max_time"),
            _f("initial_g1", "init_g1_pop"),
            _f("initial_g2", "init_g2_pop"),
            _f("initial_g3", "init_g3_pop"),
        ),
        caption=_caption(
            ("Max Time (t)", "max_time"), ("Initial g1", "init_g1_pop"),
            ("Initial g2", "init_g2_pop"), ("Initial g3", "init_g3_pop"),
        ),
        solver=SolverChoice(),
        groups=(
            SetterGroup("initial_state", fields=("initial_g1", "initial_g2", "initial_g3")),
            SetterGroup("production_rates", constants=(10, 10000, 10)),
            SetterGroup("binding_rates", constants=(10, 0.1, 10)),
            SetterGroup("unbinding_rates", constants=(2, 20, 20)),
            SetterGroup("decay_rates", constants=(1, 100, 1)),
        ),
    ),
    DemoSpec(
        slug="example",
        title="Example",
        section="Example",
        description="A Mandelbrot set, to check that models load and draw.",
        controls=(_number("max_iterations", "Max Iterations", "64", 1, 1000, step=1),),
        fields=(FieldSpec("max_iterations", FieldKind.INTEGER, low=1, high=1000, default=64),),
        caption=_caption(("Max Iterations", "max_iterations")),
        floor=None,
    ),
]

DEMOS: dict[str, DemoSpec] = {d.slug: d for d in _DEMO_LIST}
