"""Tests for reel.core.slides — Slide, TextStyle, SlideTransition, durations."""

import math
import pytest
from pydantic import ValidationError

from reel.core.slides import (
    FontFamily,
    Slide,
    SlideKind,
    SlideTransition,
    TextStyle,
    normalize_duration,
)


# ── TextStyle ───────────────────────────────────────────────────────────

class TestTextStyle:
    def test_defaults(self):
        s = TextStyle()
        assert s.font_size == 24
        assert s.color == "#FFFFFF"
        assert s.font_family == FontFamily.ARIAL

    def test_font_family_from_string(self):
        s = TextStyle(font_family="Times New Roman")
        assert s.font_family == FontFamily.TIMES_NEW_ROMAN

    @pytest.mark.parametrize("size", [7, 73, 0, -1])
    def test_font_size_bounds(self, size):
        with pytest.raises(ValidationError):
            TextStyle(font_size=size)

    @pytest.mark.parametrize("size", [8, 72])
    def test_font_size_edges_accepted(self, size):
        assert TextStyle(font_size=size).font_size == size

    def test_unknown_font_family_rejected(self):
        with pytest.raises(ValidationError):
            TextStyle(font_family="Comic Sans")

    def test_bad_color_rejected(self):
        with pytest.raises(ValidationError):
            TextStyle(color="white")

    def test_frozen(self):
        s = TextStyle()
        with pytest.raises(ValidationError):
            s.font_size = 30

    def test_clone_is_equal_but_distinct(self):
        s = TextStyle(font_size=40, color="#123456", font_family="Courier")
        c = s.clone()
        assert c == s
        assert c is not s


# ── normalize_duration ──────────────────────────────────────────────────

class TestNormalizeDuration:
    @pytest.mark.parametrize("given,expected", [
        (3.0, 3.0),
        (0.2, 1.0),
        (-5, 1.0),
        (11, 10.0),
        (2.74, 2.5),
        (2.75, 3.0),
        (1.25, 1.5),
        (9.9, 10.0),
        (math.inf, 10.0),
        (-math.inf, 1.0),
    ])
    def test_clamps_and_snaps(self, given, expected):
        assert normalize_duration(given) == expected

    def test_nan_falls_back_to_default(self):
        assert normalize_duration(math.nan) == 3.0

    @pytest.mark.parametrize("given", [-3, 0, 0.7, 1.1, 4.26, 6.5, 9.74, 100])
    def test_idempotent_and_on_grid(self, given):
        once = normalize_duration(given)
        assert normalize_duration(once) == once
        assert 1.0 <= once <= 10.0
        assert (once * 2) == int(once * 2)


# ── Slide ───────────────────────────────────────────────────────────────

class TestSlide:
    def test_auto_id(self):
        s = Slide(kind=SlideKind.TEXT, content="a")
        assert len(s.id) == 8
        s2 = Slide(kind=SlideKind.TEXT, content="a")
        assert s.id != s2.id

    def test_defaults(self):
        s = Slide(kind=SlideKind.IMAGE, content="data:image/png;base64,AA==")
        assert s.duration == 3.0
        assert s.style is None
        assert s.is_image

    @pytest.mark.parametrize("duration", [0.5, 10.5])
    def test_duration_bounds(self, duration):
        with pytest.raises(ValidationError):
            Slide(kind=SlideKind.TEXT, content="x", duration=duration)

    def test_frozen(self):
        s = Slide(kind=SlideKind.TEXT, content="x")
        with pytest.raises(ValidationError):
            s.duration = 5.0

    def test_clone_value_equal_reference_independent(self):
        s = Slide(kind=SlideKind.TEXT, content="Hi", duration=2.0,
                  style=TextStyle(font_size=48))
        c = s.clone()
        assert c == s
        assert c is not s
        assert c.style is not s.style

    def test_clone_image_without_style(self):
        s = Slide(kind=SlideKind.IMAGE, content="blob")
        assert s.clone().style is None

    def test_label(self):
        assert Slide(kind=SlideKind.IMAGE, content="x").label() == "(image)"
        long_text = Slide(kind=SlideKind.TEXT, content="y" * 50)
        assert long_text.label(10) == "y" * 10 + "..."


# ── SlideTransition ─────────────────────────────────────────────────────

class TestSlideTransition:
    def test_defaults(self):
        t = SlideTransition()
        assert t.type == "cross_dissolve"
        assert t.duration == 0.5

    def test_window_clamped_to_slide(self):
        t = SlideTransition(duration=2.0)
        assert t.window_for(1.0) == 1.0
        assert t.window_for(5.0) == 2.0

    def test_window_never_negative(self):
        assert SlideTransition(duration=0.5).window_for(0.0) == 0.0

    def test_opacity(self):
        t = SlideTransition(duration=0.5)
        assert t.opacity_at(3.0, 3.0) == 1.0
        assert t.opacity_at(0.5, 3.0) == 1.0
        assert t.opacity_at(0.25, 3.0) == pytest.approx(0.5)
        assert t.opacity_at(0.0, 3.0) == 0.0

    def test_zero_window_is_a_cut(self):
        t = SlideTransition(duration=0.0)
        assert t.opacity_at(0.01, 3.0) == 1.0
