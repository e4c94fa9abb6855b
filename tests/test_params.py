"""Tests for parameter binding."""

from __future__ import annotations

import math

import pytest

from simulation_pages.core.params import (
    FieldKind, FieldSpec, MissingFieldError, ParameterBinder, ParameterRecord,
    RecordBuilder, SetterGroup, SolverChoice, UnknownFieldError, parse_number,
)

from conftest import FakeBuilder

RULE = FieldSpec("rule", FieldKind.INTEGER, low=0, high=255, default=90)


# ── parse_number ─────────────────────────────────────────────────────

class TestParseNumber:
    def test_plain_numbers(self):
        assert parse_number("10") == 10.0
        assert parse_number(" 2.5 ") == 2.5
        assert parse_number(7) == 7.0

    def test_malformed_is_nan(self):
        assert math.isnan(parse_number("abc"))
        assert math.isnan(parse_number(""))
        assert math.isnan(parse_number(None))


# ── FieldSpec.coerce ─────────────────────────────────────────────────

class TestCoerce:
    @pytest.mark.parametrize("raw, expected", [
        ("300", 255), ("-5", 0), ("0", 0), ("255", 255), ("110", 110), (1000, 255),
    ])
    def test_rule_is_clamped(self, raw, expected):
        assert RULE.coerce(raw) == expected

    def test_rule_clamp_matches_min_max(self):
        for v in range(-300, 600, 7):
            assert RULE.coerce(str(v)) == max(0, min(255, v))

    def test_malformed_bounded_uses_default(self):
        assert RULE.coerce("abc") == 90

    def test_malformed_bounded_without_default_uses_low(self):
        spec = FieldSpec("resolution", FieldKind.INTEGER, low=1)
        assert spec.coerce("") == 1

    def test_malformed_unbounded_float_is_nan(self):
        assert math.isnan(FieldSpec("max_time").coerce("x"))

    def test_integer_truncates(self):
        spec = FieldSpec("resolution", FieldKind.INTEGER)
        assert spec.coerce("12.9") == 12
        assert isinstance(spec.coerce("12.9"), int)

    @pytest.mark.parametrize("raw", ["1e999", "-1e999", "inf", "nan"])
    def test_non_finite_integer_falls_back(self, raw):
        spec = FieldSpec("resolution", FieldKind.INTEGER, low=1)
        value = spec.coerce(raw)
        assert value == 1
        assert isinstance(value, int)

    def test_non_finite_integer_uses_default(self):
        assert RULE.coerce("1e999") == 90

    def test_unbounded_integer_never_infinite(self):
        value = FieldSpec("steps", FieldKind.INTEGER).coerce("1e999")
        assert value == 0
        assert isinstance(value, int)

    def test_strings_pass_through(self):
        assert FieldSpec("boundary", FieldKind.ENUM).coerce("periodic") == "periodic"
        assert FieldSpec("seed", FieldKind.SEED).coerce(42) == "42"
        assert FieldSpec("maze", FieldKind.TEXT).coerce("S.#\n..E") == "S.#\n..E"

    def test_enum_not_validated(self):
        assert FieldSpec("boundary", FieldKind.ENUM).coerce("no-such") == "no-such"

    def test_control_defaults_to_name(self):
        assert FieldSpec("rule").control == "rule"
        assert FieldSpec("initial_population", source="init_pop").control == "init_pop"


# ── RecordBuilder / ParameterRecord ──────────────────────────────────

class TestRecordBuilder:
    def test_build_complete(self):
        fields = (FieldSpec("max_time"), RULE)
        record = RecordBuilder(fields).set("max_time", "10").set("rule", "300").build()
        assert dict(record) == {"max_time": 10.0, "rule": 255}

    def test_unknown_field_rejected(self):
        with pytest.raises(UnknownFieldError):
            RecordBuilder((RULE,)).set("colour", "red")

    def test_missing_field_rejected(self):
        with pytest.raises(MissingFieldError):
            RecordBuilder((FieldSpec("max_time"), RULE)).set("rule", "1").build()

    def test_builder_is_a_value(self):
        base = RecordBuilder((RULE,))
        a = base.set("rule", "1")
        b = base.set("rule", "2")
        assert a.build()["rule"] == 1
        assert b.build()["rule"] == 2
        with pytest.raises(MissingFieldError):
            base.build()

    def test_record_is_immutable(self):
        record = ParameterRecord({"rule": 3})
        with pytest.raises(TypeError):
            record["rule"] = 4  # type: ignore[index]

    def test_record_preserves_declaration_order(self):
        fields = (FieldSpec("b"), FieldSpec("a"))
        record = RecordBuilder(fields).set("a", "1").set("b", "2").build()
        assert list(record) == ["b", "a"]


class TestApply:
    def test_one_setter_per_field(self):
        record = ParameterRecord({"max_time": 10.0, "rule": 30})
        builder = record.apply(FakeBuilder())
        assert builder.calls == (("max_time", (10.0,)), ("rule", (30,)))

    def test_groups_and_constants(self):
        record = ParameterRecord({"max_time": 5.0, "g1": 1.0, "g2": 2.0, "g3": 3.0})
        groups = (
            SetterGroup("initial_state", fields=("g1", "g2", "g3")),
            SetterGroup("production_rates", constants=(10, 10000, 10)),
        )
        builder = record.apply(FakeBuilder(), groups)
        assert builder.calls == (
            ("max_time", (5.0,)),
            ("initial_state", (1.0, 2.0, 3.0)),
            ("production_rates", (10, 10000, 10)),
        )


# ── ParameterBinder ──────────────────────────────────────────────────

class TestParameterBinder:
    def test_exact_field_set(self):
        binder = ParameterBinder((FieldSpec("max_time"), RULE))
        bound = binder.bind({"max_time": "10", "rule": "30", "seed": "ignored"})
        assert set(bound.record) == {"max_time", "rule"}
        assert bound.tag is None

    def test_missing_control_still_binds_every_field(self):
        binder = ParameterBinder((FieldSpec("max_time"), RULE))
        record = binder.bind({}).record
        assert set(record) == {"max_time", "rule"}
        assert record["rule"] == 90

    def test_ssa_branch_attaches_seed(self):
        binder = ParameterBinder((FieldSpec("max_time"),), solver=SolverChoice())
        bound = binder.bind({"solver": "ssa", "seed": "abc", "max_time": "3"})
        assert bound.tag == "ssa"
        assert dict(bound.record) == {"ssa_seed": "abc", "max_time": 3.0}

    def test_ode_branch_attaches_method(self):
        binder = ParameterBinder((FieldSpec("max_time"),), solver=SolverChoice())
        bound = binder.bind({"solver": "rk4", "seed": "abc", "max_time": "3"})
        assert bound.tag == "ode"
        assert dict(bound.record) == {"solver": "rk4", "max_time": 3.0}
        assert "ssa_seed" not in bound.record

    def test_tag_control(self):
        binder = ParameterBinder((FieldSpec("max_time"),), tag_control="plot_type")
        bound = binder.bind({"plot_type": "cobweb", "max_time": "3"})
        assert bound.tag == "cobweb"
        assert "plot_type" not in bound.record

    def test_controls(self):
        binder = ParameterBinder(
            (FieldSpec("initial_population", source="init_pop"),), solver=SolverChoice(),
        )
        assert binder.controls() == {"init_pop", "solver", "seed"}
