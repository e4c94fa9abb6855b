"""Tests for the render pipeline and render statistics."""

from __future__ import annotations

import pytest

from simulation_pages.core.contracts import ModelBinding
from simulation_pages.core.params import ParameterError, ParameterRecord
from simulation_pages.core.surface import ImageElement
from simulation_pages.rendering.pipeline import (
    IN_PROGRESS, RenderOutcome, RenderPipeline,
)
from simulation_pages.rendering.stats import RenderStats

from conftest import CrashingMazeModel, FakeParams, RecordingModel

RECORD = ParameterRecord({"max_time": 10.0, "rule": 30})


def _pipeline(model, surface, status, clock, **kw) -> RenderPipeline:
    return RenderPipeline(ModelBinding(model, FakeParams()), surface, status, clock=clock, **kw)


class TestRender:
    def test_status_in_progress_during_model_call(self, recording_model, surface, status, clock):
        result = _pipeline(recording_model, surface, status, clock).render(RECORD, caption="cap")
        assert recording_model.status_seen == [IN_PROGRESS]
        assert result.ok
        assert status.status == f"Rendered in {result.latency_ms}ms"
        assert status.caption == "cap"

    def test_latency_is_ceiling_of_elapsed_ms(self, recording_model, surface, status, clock):
        result = _pipeline(recording_model, surface, status, clock).render(RECORD)
        assert result.latency_ms == 11
        assert status.status == "Rendered in 11ms"

    def test_params_replayed_onto_builder(self, recording_model, surface, status, clock):
        _pipeline(recording_model, surface, status, clock).render(RECORD)
        assert recording_model.last_params.as_dict() == {"max_time": 10.0, "rule": 30}
        assert len(recording_model.calls[-1]) == 1

    def test_tag_passed_before_params(self, recording_model, surface, status, clock):
        _pipeline(recording_model, surface, status, clock).render(RECORD, tag="ssa")
        args = recording_model.calls[-1]
        assert args[0] == "ssa"
        assert args[1].names == ["max_time", "rule"]

    def test_handle_returned(self, recording_model, surface, status, clock):
        result = _pipeline(recording_model, surface, status, clock).render(RECORD)
        assert result.handle == ("handle", 1)

    def test_image_backed_copies_snapshot(self, recording_model, surface, status, clock):
        image = ImageElement()
        p = _pipeline(recording_model, surface, status, clock, image=image)
        p.render(RECORD)
        assert image.src == "data:image/png;base64,frame1"
        p.render(RECORD)
        assert image.src == "data:image/png;base64,frame2"

    def test_direct_canvas_does_not_export(self, recording_model, surface, status, clock):
        _pipeline(recording_model, surface, status, clock).render(RECORD)
        assert surface.exports == 0


class TestRenderFailures:
    def test_invalid_parameters(self, surface, status, clock):
        model = RecordingModel(error=ValueError("max_time must be positive"))
        result = _pipeline(model, surface, status, clock).render(RECORD)
        assert result.outcome is RenderOutcome.INVALID_PARAMETERS
        assert result.error == "max_time must be positive"
        assert status.status == "Invalid parameters: max_time must be positive"
        assert status.caption == "No output (invalid parameters)"

    def test_render_failure(self, surface, status, clock):
        model = RecordingModel(error=RuntimeError("boom"))
        result = _pipeline(model, surface, status, clock).render(RECORD)
        assert result.outcome is RenderOutcome.RENDER_FAILED
        assert not result.ok
        assert status.status == "Render failed: boom"
        assert status.status != IN_PROGRESS

    def test_failure_does_not_touch_image(self, surface, status, clock):
        image = ImageElement(src="data:old")
        model = RecordingModel(error=RuntimeError("boom"))
        _pipeline(model, surface, status, clock, image=image).render(RECORD)
        assert image.src == "data:old"

    def test_next_render_recovers(self, surface, status, clock):
        model = RecordingModel(error=RuntimeError("boom"))
        p = _pipeline(model, surface, status, clock)
        p.render(RECORD)
        model.error = None
        assert p.render(RECORD).ok
        assert status.status.startswith("Rendered in")


class TestStateful:
    def test_render_step(self, maze_model, surface, status, clock):
        p = _pipeline(maze_model, surface, status, clock)
        instance = p.build(ParameterRecord({"maze": "S.E"}))
        result = p.render_step(instance, 2, caption="Current Step: 2")
        assert result.handle == ("step", 2)
        assert instance.drawn == [2]

    def test_build_errors_become_parameter_errors(self, maze_model, surface, status, clock):
        p = _pipeline(maze_model, surface, status, clock)
        with pytest.raises(ParameterError):
            p.build(ParameterRecord({"maze": "#####"}))

    def test_step_count_errors_become_parameter_errors(self, surface, status, clock):
        p = _pipeline(CrashingMazeModel(), surface, status, clock)
        instance = p.build(ParameterRecord({"maze": "S.E"}))
        with pytest.raises(ParameterError, match="solver crashed"):
            p.step_count(instance)

    def test_step_count(self, maze_model, surface, status, clock):
        p = _pipeline(maze_model, surface, status, clock)
        assert p.step_count(p.build(ParameterRecord({"maze": "S.E"}))) == 2

    def test_render_step_without_instance(self, surface, status, clock):
        p = _pipeline(RecordingModel(), surface, status, clock)
        result = p.render_step(None, 0)
        assert result.outcome is RenderOutcome.INVALID_PARAMETERS


class TestRenderStats:
    def test_records_each_render(self, recording_model, surface, status, clock):
        stats = RenderStats()
        p = _pipeline(recording_model, surface, status, clock, stats=stats, name="demo")
        p.render(RECORD)
        p.render(RECORD)
        frame = stats.to_frame("demo")
        assert list(frame.columns) == ["page", "outcome", "latency_ms"]
        assert len(frame) == 2
        assert stats.summary("demo")["max_ms"] == 11

    def test_summary_counts_failures(self):
        stats = RenderStats()
        stats.record("a", "success", 3)
        stats.record("a", "render_failed", 5)
        stats.record("b", "success", 100)
        summary = stats.summary("a")
        assert summary == {"renders": 2, "mean_ms": 4.0, "max_ms": 5, "failures": 1}

    def test_empty_summary(self):
        assert RenderStats().summary()["renders"] == 0

    def test_bounded(self):
        stats = RenderStats(maxlen=3)
        for i in range(10):
            stats.record("a", "success", i)
        assert len(stats) == 3
        assert list(stats.to_frame()["latency_ms"]) == [7, 8, 9]
