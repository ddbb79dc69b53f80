"""Tests for YAML sketches and the render_sketch CLI.

Test cases:
    - Attribute parsing (order preserved, shorthand forms, bad input)
    - Sketch execution goes through the same grammar as the Python API
    - Shipped example sketch renders
    - CLI exit codes for success, bad sketch and bad config

Run:
    pytest tests/test_sketch.py -v
"""

from __future__ import annotations

import logging
import math
import sys
from pathlib import Path

import pytest
from PIL import Image

from penscope.attributes import File, Ink, Paper, Pen, Rotate, Scale, Translate
from penscope.errors import GrammarError, MissingBootstrapError, PlacementError
from penscope.sketch import (
    SketchError,
    load_sketch,
    parse_attributes,
    render_sketch_file,
    run_sketch,
)
from scripts.render_sketch import main

REPO_ROOT = Path(__file__).resolve().parent.parent
NESTED_INK = REPO_ROOT / "sketches" / "nested_ink.yaml"


def square_sketch(**root) -> dict:
    return {
        "with": {
            "paper": {"width": 100, "height": 100},
            **root,
            "do": [
                {"draw": {"ink": "blue", "do": [["move", 0, 0], ["line", 1, 0]]}},
                {"draw": {"do": [["line", 1, 1]]}},
            ],
        }
    }


# ---------------------------------------------------------------------------
# Attribute parsing
# ---------------------------------------------------------------------------


class TestParseAttributes:
    def test_order_preserved(self) -> None:
        attrs = parse_attributes(
            {"scale": 0.5, "translate": [1, 1], "ink": "red", "do": []}
        )
        assert attrs == [Scale(0.5), Translate(1.0, 1.0), Ink("red")]

    def test_shorthand_forms(self) -> None:
        attrs = parse_attributes(
            {"pen": 0.02, "scale": [2, 3], "rotate": {"degrees": 90}, "ink": [0, 0, 255]}
        )
        pen, scale, rotate, ink = attrs
        assert pen == Pen(width=0.02)
        assert (scale.sx, scale.sy) == (2.0, 3.0)
        assert rotate.theta == pytest.approx(math.pi / 2)
        assert ink.rgba == (0.0, 0.0, 1.0, 1.0)

    def test_paper_forms(self) -> None:
        (explicit,) = parse_attributes({"paper": {"width": 10, "height": 20}})
        (named,) = parse_attributes({"paper": {"size": "A5", "dpi": 100}})
        assert explicit == Paper(10, 20)
        assert named.size == "A5" and named.dpi == 100

    def test_file_list(self) -> None:
        files = parse_attributes({"file": ["a.png", "b.svg"]})
        assert [f.fmt for f in files] == ["png", "svg"]
        assert all(isinstance(f, File) for f in files)

    def test_rotate_radians(self) -> None:
        assert parse_attributes({"rotate": 1.5}) == [Rotate(1.5)]

    def test_unknown_attribute(self) -> None:
        with pytest.raises(SketchError, match="Unknown attribute 'colour'"):
            parse_attributes({"colour": "red"})

    @pytest.mark.parametrize(
        "spec",
        [
            {"ink": "not-a-color"},
            {"pen": {"width": -1}},
            {"pen": {"nib": 3}},
            {"scale": 0},
            {"translate": [1]},
            {"rotate": {"turns": 1}},
            {"paper": "A4"},
        ],
    )
    def test_invalid_arguments(self, spec) -> None:
        with pytest.raises(SketchError):
            parse_attributes(spec)


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class TestRunSketch:
    def test_strokes_with_inherited_ink(self, engine) -> None:
        run_sketch(square_sketch(ink="red"), engine=engine)
        assert [rgba for _, rgba, _ in engine.strokes] == [
            (0.0, 0.0, 1.0, 1.0),
            (1.0, 0.0, 0.0, 1.0),
        ]
        # Second scope continues from (1, 0) = device (100, 100)
        assert engine.strokes[1][0][0][0] == pytest.approx((100.0, 100.0))

    def test_extra_outputs(self, tmp_path: Path) -> None:
        out = tmp_path / "square.png"
        canvas = run_sketch(square_sketch(), outputs=[out])
        assert canvas.finished
        assert out.exists()

    def test_action_in_with_scope(self) -> None:
        with pytest.raises(GrammarError):
            run_sketch({"with": {"paper": {"width": 10, "height": 10}, "do": [["move", 0, 0]]}})

    def test_nested_file_is_placement_error(self, tmp_path: Path) -> None:
        sketch = {
            "with": {
                "paper": {"width": 10, "height": 10},
                "do": [{"draw": {"file": str(tmp_path / "x.png")}}],
            }
        }
        with pytest.raises(PlacementError):
            run_sketch(sketch)

    @pytest.mark.parametrize(
        "sketch",
        [
            ["with", {}],
            {"with": {}, "draw": {}},
            {"group": {}},
            {"with": "paper"},
            {"draw": {"paper": {"width": 10, "height": 10}, "do": "move"}},
            {"draw": {"paper": {"width": 10, "height": 10}, "do": [["arc", 0, 0]]}},
            {"draw": {"paper": {"width": 10, "height": 10}, "do": [["line", "a", 0]]}},
        ],
    )
    def test_malformed_documents(self, sketch) -> None:
        with pytest.raises(SketchError):
            run_sketch(sketch)

    def test_empty_root_still_needs_paper(self) -> None:
        with pytest.raises(MissingBootstrapError):
            run_sketch({"with": None})


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class TestSketchFiles:
    def test_shipped_sketch_renders(self, tmp_path: Path) -> None:
        out = tmp_path / "nested_ink.png"
        render_sketch_file(NESTED_INK, outputs=[out])
        with Image.open(out) as img:
            # A6 landscape at 96 dpi
            assert img.size == (559, 397)

    def test_empty_file(self, tmp_path: Path) -> None:
        p = tmp_path / "empty.yaml"
        p.write_text("", encoding="utf-8")
        with pytest.raises(SketchError, match="Empty"):
            load_sketch(p)

    def test_unparsable_file(self, tmp_path: Path) -> None:
        p = tmp_path / "bad.yaml"
        p.write_text("with: {paper: [\n", encoding="utf-8")
        with pytest.raises(SketchError):
            load_sketch(p)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.fixture()
def restore_logging(monkeypatch):
    """Undo the root-logger and excepthook changes made by the CLI."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestRenderSketchCli:
    def test_success(self, tmp_path: Path, restore_logging) -> None:
        out = tmp_path / "cli.svg"
        assert main(["--sketch", str(NESTED_INK), "--output", str(out)]) == 0
        assert out.exists()

    def test_log_file(self, tmp_path: Path, restore_logging) -> None:
        log = tmp_path / "logs" / "render.log"
        out = tmp_path / "cli.png"
        code = main([
            "--sketch", str(NESTED_INK),
            "--output", str(out),
            "--log-file", str(log),
        ])
        logging.getLogger().handlers[-1].flush()
        assert code == 0
        assert "sketch=nested_ink.yaml" in log.read_text(encoding="utf-8")

    def test_missing_sketch(self, tmp_path: Path, restore_logging) -> None:
        assert main(["--sketch", str(tmp_path / "missing.yaml")]) == 1

    def test_bad_config(self, tmp_path: Path, restore_logging) -> None:
        cfg = tmp_path / "defaults.yaml"
        cfg.write_text("schema: something.else\n", encoding="utf-8")
        assert main(["--sketch", str(NESTED_INK), "--config", str(cfg)]) == 1

    def test_config_not_a_mapping(self, tmp_path: Path, restore_logging) -> None:
        cfg = tmp_path / "defaults.yaml"
        cfg.write_text("- 1\n- 2\n", encoding="utf-8")
        assert main(["--sketch", str(NESTED_INK), "--config", str(cfg)]) == 1

    def test_grammar_error(self, tmp_path: Path, restore_logging) -> None:
        sketch = tmp_path / "bad.yaml"
        sketch.write_text(
            "with:\n  paper: {width: 10, height: 10}\n  do:\n    - [move, 0, 0]\n",
            encoding="utf-8",
        )
        assert main(["--sketch", str(sketch)]) == 1
