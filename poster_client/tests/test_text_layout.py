from __future__ import annotations

import pytest

from conftest import RecordingSurface
from poster_client.client_config import PosterSettings
from poster_client.poster import PosterCanvas
from poster_client.text_layout import ELLIPSIS, draw_paragraph, truncate_lines, wrap_text
from poster_client.units import UnitConverter

CONVERTER = UnitConverter(scale=1.0)


def _measure(text: str) -> float:
    return len(text) * 10.0


def test_text_that_fits_is_one_line():
    assert wrap_text("abcdefghij", 100, _measure) == ["abcdefghij"]


def test_wrap_moves_the_overflowing_character_to_next_line():
    assert wrap_text("a" * 27, 100, _measure) == ["a" * 9, "a" * 9, "a" * 9]


def test_wrap_handles_remainder_line():
    lines = wrap_text("abcdefghijklmnopqrstu", 100, _measure)
    assert lines == ["abcdefghi", "jklmnopqr", "stu"]


def test_truncate_adds_ellipsis_only_on_overflow():
    lines = ["a" * 9, "b" * 9, "c" * 9]
    assert truncate_lines(lines, 2) == ["a" * 9, "b" * 8 + ELLIPSIS]
    assert truncate_lines(lines, 3) == lines
    assert truncate_lines(lines, 5) == lines
    assert truncate_lines(lines, None) == lines
    assert truncate_lines(lines, 0) == []


def test_paragraph_wraps_into_three_lines():
    surface = RecordingSurface()
    drawn = draw_paragraph(surface, CONVERTER, "x" * 27, 0, 0, 100, 20, 3)
    assert drawn == ["x" * 9] * 3


def test_paragraph_truncates_second_line_when_limited_to_two():
    surface = RecordingSurface()
    drawn = draw_paragraph(surface, CONVERTER, "x" * 27, 0, 0, 100, 20, 2)
    assert len(drawn) == 2
    assert drawn[1].endswith(ELLIPSIS)
    assert [args[0] for args in surface.args_of("fill_text")] == drawn


def test_exact_fit_is_never_truncated():
    surface = RecordingSurface()
    drawn = draw_paragraph(surface, CONVERTER, "y" * 18, 0, 0, 100, 20, 2)
    assert drawn == ["y" * 9, "y" * 9]
    assert not any(line.endswith(ELLIPSIS) for line in drawn)


def test_paragraph_lines_start_one_line_height_below_y():
    surface = RecordingSurface()
    canvas = PosterCanvas(surface, PosterSettings(pixel_ratio=1.0, supersample=2.0))
    canvas.paragraph("z" * 27, 5, 10, 50, 20, 5)
    positions = [(x, y) for _, x, y, _ in surface.args_of("fill_text")]
    assert positions == [(10, 60), (10, 100), (10, 140)]
    assert ("set_text_baseline", ("top",)) in surface.calls
    assert surface.depth == 0


def test_paragraph_outline_strokes_under_fill():
    surface = RecordingSurface()
    draw_paragraph(surface, CONVERTER, "ab", 0, 0, 100, 20, 2, color="#111", outline="2 #fff")
    names = [name for name in surface.names() if name in {"stroke_text", "fill_text"}]
    assert names == ["stroke_text", "fill_text"]
    assert ("set_line_width", (2,)) in surface.calls
    assert ("set_stroke_color", ("#fff",)) in surface.calls
    assert ("set_fill_color", ("#111",)) in surface.calls


def test_text_sets_font_and_passes_max_width_as_hint():
    surface = RecordingSurface()
    canvas = PosterCanvas(surface, PosterSettings(pixel_ratio=1.0, supersample=2.0))
    canvas.text("hello", 10, 20, font=14, color="#333", max_width=30)
    assert ("set_font", ("28px sans-serif",)) in surface.calls
    assert surface.args_of("fill_text") == [("hello", 20, 40, 60)]
    assert "stroke_text" not in surface.names()
    assert surface.names()[0] == "save"
    assert surface.names()[-1] == "restore"


def test_text_without_font_leaves_surface_font_alone():
    surface = RecordingSurface()
    PosterCanvas(surface).text("hi", 0, 0)
    assert "set_font" not in surface.names()
    assert surface.args_of("fill_text") == [("hi", 0, 0, None)]


def test_center_text_anchors_on_middle_of_width():
    surface = RecordingSurface()
    canvas = PosterCanvas(surface, PosterSettings(pixel_ratio=1.0, supersample=2.0))
    canvas.center_text("title", 10, 5, 100, outline=1)
    assert ("set_text_align", ("center",)) in surface.calls
    assert surface.args_of("stroke_text") == [("title", 120, 10, 200)]
    assert surface.args_of("fill_text") == [("title", 120, 10, 200)]


@pytest.mark.parametrize("outline", [None, ""])
def test_missing_outline_only_fills(outline):
    surface = RecordingSurface()
    PosterCanvas(surface).center_text("t", 0, 0, 10, outline=outline)
    assert "stroke_text" not in surface.names()
