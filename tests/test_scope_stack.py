"""Tests for scope entry/exit and frame restoration.

Validates:
    - Round-trip law: engine color/transform/stroke state after a scope
      exits equals the state before it entered
    - save/restore stay balanced (LIFO) when a body raises
    - Closing action runs before restore
    - Attribute order, conflicts and empty scopes
    - Handle misuse raises ScopeOrderingError

Run:
    pytest tests/test_scope_stack.py -v
"""

from __future__ import annotations

import math

import pytest

from penscope.attributes import Ink, Paper, Pen, Rotate, Scale, Translate
from penscope.configs.loader import load_config
from penscope.errors import EngineError, ScopeOrderingError
from penscope.path.tracker import PathTracker
from penscope.scope.stack import ScopeStack
from penscope.scope.grammar import ScopeKind

from conftest import RecordingEngine


def engine_state(engine) -> tuple:
    """Snapshot of the cairo context's color, matrix and stroke properties."""
    ctx = engine.raw
    m = ctx.get_matrix()
    return (
        tuple(ctx.get_source().get_rgba()),
        (m.xx, m.yx, m.xy, m.yy, m.x0, m.y0),
        ctx.get_line_width(),
        ctx.get_line_cap(),
        ctx.get_line_join(),
    )


# ---------------------------------------------------------------------------
# Round-trip restoration
# ---------------------------------------------------------------------------


ATTRIBUTE_SEQUENCES = [
    [Ink("blue")],
    [Pen(0.05, cap="round", join="bevel")],
    [Scale(0.5), Translate(1, 1)],
    [Translate(1, 1), Scale(0.5)],
    [Rotate(math.pi / 3), Ink((0.1, 0.2, 0.3, 0.4)), Pen(0.2)],
    [Ink("red"), Ink("green"), Scale(2, 3), Rotate(-1.0), Pen(cap="square")],
    [],
]


class TestRoundTrip:
    @pytest.mark.parametrize("attrs", ATTRIBUTE_SEQUENCES)
    @pytest.mark.parametrize("kind", ["with_scope", "draw_scope", "paint_scope"])
    def test_state_restored_after_exit(self, canvas, engine, attrs, kind) -> None:
        with canvas.with_scope(Paper(100, 80, border=0.1), Ink("red")):
            before = engine_state(engine)
            state_before = canvas.state
            with getattr(canvas, kind)(*attrs):
                pass
            assert engine_state(engine) == before
            assert canvas.state == state_before

    @pytest.mark.parametrize("attrs", ATTRIBUTE_SEQUENCES)
    def test_state_restored_after_error(self, canvas, engine, attrs) -> None:
        with canvas.with_scope(Paper(100, 80), Ink("red")):
            before = engine_state(engine)
            with pytest.raises(RuntimeError):
                with canvas.with_scope(*attrs):
                    with canvas.draw_scope(Ink("blue")):
                        canvas.move(0, 0)
                        raise RuntimeError("boom")
            assert engine_state(engine) == before
            assert canvas.depth == 1

    def test_nested_scopes_restore_each_level(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(100, 100)):
            s0 = engine_state(engine)
            with canvas.with_scope(Scale(0.5), Ink("blue")):
                s1 = engine_state(engine)
                with canvas.with_scope(Rotate(1.0), Pen(0.3)):
                    assert engine_state(engine) != s1
                assert engine_state(engine) == s1
            assert engine_state(engine) == s0


# ---------------------------------------------------------------------------
# Frame lifecycle
# ---------------------------------------------------------------------------


class TestFrameLifecycle:
    def test_save_restore_balanced(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(50, 50)):
            with canvas.with_scope(Ink("red")):
                with canvas.draw_scope():
                    canvas.move(0, 0)
                    canvas.line(1, 0)
        assert engine.calls.count("save") == 3
        assert engine.calls.count("restore") == 3

    def test_save_restore_balanced_on_error(self, canvas, engine) -> None:
        with pytest.raises(ValueError):
            with canvas.with_scope(Paper(50, 50)):
                with canvas.with_scope(Ink("red")):
                    with canvas.paint_scope():
                        raise ValueError("abort")
        assert engine.calls.count("save") == engine.calls.count("restore") == 3
        assert canvas.depth == 0
        assert canvas.finished

    def test_stroke_runs_before_restore(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(50, 50)):
            engine.calls.clear()
            with canvas.draw_scope(Ink("blue")):
                canvas.move(0, 0)
                canvas.line(1, 1)
        assert engine.calls == ["save", "set_source", "stroke", "restore"]

    def test_fill_runs_before_restore(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(50, 50)):
            engine.calls.clear()
            with canvas.paint_scope():
                canvas.move(0, 0)
                canvas.line(1, 0)
                canvas.line(1, 1)
        assert engine.calls == ["save", "fill", "restore"]

    def test_failed_scope_discards_path(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(50, 50)):
            with pytest.raises(KeyError):
                with canvas.draw_scope():
                    canvas.move(0, 0)
                    canvas.line(1, 1)
                    raise KeyError("x")
            assert not canvas.tracker.has_path()
        assert engine.strokes == []

    def test_failed_paint_scope_restores_without_filling(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(50, 50)):
            before = canvas.state
            with pytest.raises(KeyError):
                with canvas.paint_scope(Ink("red")):
                    canvas.move(0, 0)
                    canvas.line(1, 0)
                    canvas.line(1, 1)
                    raise KeyError("x")
            assert canvas.state == before
            assert canvas.depth == 1
        assert engine.fills == []

    def test_empty_scopes_are_no_ops(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(50, 50)):
            with canvas.draw_scope():
                pass
            with canvas.paint_scope():
                canvas.move(0.5, 0.5)
        assert engine.strokes == []
        assert engine.fills == []

    def test_failing_attribute_unwinds_scope(self, canvas, engine, monkeypatch) -> None:
        with canvas.with_scope(Paper(50, 50)):
            def reject(transform):
                raise EngineError("rejected")

            monkeypatch.setattr(engine, "set_transform", reject)
            with pytest.raises(EngineError, match="rejected"):
                with canvas.with_scope(Ink("red"), Scale(2)):
                    pass
            assert canvas.depth == 1
        assert engine.calls.count("save") == engine.calls.count("restore")


# ---------------------------------------------------------------------------
# Attribute application order
# ---------------------------------------------------------------------------


class TestAttributeOrder:
    def test_last_ink_wins(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(50, 50)):
            with canvas.draw_scope(Ink("red"), Ink("lime")):
                canvas.move(0, 0)
                canvas.line(1, 1)
        assert engine.strokes[0][1] == (0.0, 1.0, 0.0, 1.0)

    def test_scale_translate_order(self, canvas) -> None:
        with canvas.with_scope(Paper(100, 100)):
            with canvas.with_scope(Scale(0.5), Translate(1, 1)):
                a = canvas.state.transform.apply(0, 0)
            with canvas.with_scope(Translate(1, 1), Scale(0.5)):
                b = canvas.state.transform.apply(0, 0)
        # Unit space is 100 device px per unit, +Y up from the bottom edge
        assert a == pytest.approx((50.0, 50.0))
        assert b == pytest.approx((100.0, 0.0))

    def test_pen_width_fixed_at_application(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(100, 100)):
            with canvas.with_scope(Pen(0.1)):
                width = engine.raw.get_line_width()
                with canvas.draw_scope(Scale(0.25)):
                    canvas.move(0, 0)
                    canvas.line(1, 0)
        assert width == pytest.approx(10.0)
        assert engine.strokes[0][2] == pytest.approx(10.0)

    def test_pen_after_scale_uses_scaled_units(self, canvas, engine) -> None:
        with canvas.with_scope(Paper(100, 100)):
            with canvas.draw_scope(Scale(0.5), Pen(0.1)):
                canvas.move(0, 0)
                canvas.line(1, 0)
        assert engine.strokes[0][2] == pytest.approx(5.0)

    def test_pen_keeps_unset_fields(self, canvas) -> None:
        with canvas.with_scope(Paper(100, 100)):
            with canvas.with_scope(Pen(0.1, cap="round", join="bevel")):
                with canvas.with_scope(Pen(width=0.2)):
                    pen = canvas.state.pen
        assert (pen.cap, pen.join) == ("round", "bevel")
        assert pen.width == pytest.approx(20.0)


# ---------------------------------------------------------------------------
# Direct stack use
# ---------------------------------------------------------------------------


class TestScopeStackDirect:
    def make_stack(self) -> tuple[ScopeStack, RecordingEngine]:
        engine = RecordingEngine()
        return ScopeStack(engine, PathTracker(), load_config()), engine

    def test_out_of_order_exit(self) -> None:
        stack, _ = self.make_stack()
        outer = stack.enter(ScopeKind.WITH, [Paper(10, 10)])
        stack.enter(ScopeKind.WITH, [Ink("red")])
        with pytest.raises(ScopeOrderingError):
            stack.exit(outer)
        assert stack.depth == 2

    def test_double_exit(self) -> None:
        stack, _ = self.make_stack()
        outer = stack.enter(ScopeKind.WITH, [Paper(10, 10)])
        inner = stack.enter(ScopeKind.DRAW, [])
        stack.exit(inner)
        with pytest.raises(ScopeOrderingError):
            stack.exit(inner)
        stack.exit(outer)
        assert stack.finished

    def test_handles_record_depth(self) -> None:
        stack, _ = self.make_stack()
        outer = stack.enter(ScopeKind.WITH, [Paper(10, 10)])
        inner = stack.enter(ScopeKind.PAINT, [Ink("red")])
        assert (outer.depth, inner.depth) == (0, 1)
        assert inner.kind is ScopeKind.PAINT
        assert stack.current_kind is ScopeKind.PAINT
        stack.exit(inner)
        stack.exit(outer)

    def test_lifo_restore_count(self) -> None:
        stack, engine = self.make_stack()
        handles = [stack.enter(ScopeKind.WITH, [Paper(10, 10)])]
        for _ in range(4):
            handles.append(stack.enter(ScopeKind.WITH, [Scale(2)]))
        for handle in reversed(handles):
            stack.exit(handle)
        assert engine.calls.count("restore") == 5
        assert stack.depth == 0
