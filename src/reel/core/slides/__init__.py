"""Slides package — public API re-exports."""

from .styles import FontFamily, TextStyle, MIN_FONT_SIZE, MAX_FONT_SIZE
from .animations import SlideTransition
from .slide import Slide, SlideKind, new_slide_id, normalize_duration

__all__ = [
    "Slide",
    "SlideKind",
    "TextStyle",
    "FontFamily",
    "SlideTransition",
    "new_slide_id",
    "normalize_duration",
    "MIN_FONT_SIZE",
    "MAX_FONT_SIZE",
]
