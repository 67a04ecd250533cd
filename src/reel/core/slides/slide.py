"""Slide data model."""

import math
import uuid
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from ..config import (
    DEFAULT_SLIDE_DURATION,
    DURATION_STEP,
    MAX_SLIDE_DURATION,
    MIN_SLIDE_DURATION,
)
from .styles import TextStyle


class SlideKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"


def new_slide_id() -> str:
    return uuid.uuid4().hex[:8]


def normalize_duration(seconds: float) -> float:
    """Clamp a duration to [1.0, 10.0] and snap it to the 0.5s grid.

    Ties round up (1.25 -> 1.5). NaN falls back to the default duration.
    """
    if math.isnan(seconds):
        return DEFAULT_SLIDE_DURATION
    clamped = max(MIN_SLIDE_DURATION, min(MAX_SLIDE_DURATION, seconds))
    steps = math.floor(clamped / DURATION_STEP + 0.5)
    return steps * DURATION_STEP


class Slide(BaseModel):
    """One image or text unit of a reel.

    Slides are frozen; the store swaps in a modified copy on edits.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_slide_id)
    kind: SlideKind
    content: str
    duration: float = Field(
        default=DEFAULT_SLIDE_DURATION,
        ge=MIN_SLIDE_DURATION,
        le=MAX_SLIDE_DURATION,
    )
    style: Optional[TextStyle] = None

    @property
    def is_image(self) -> bool:
        return self.kind == SlideKind.IMAGE

    def clone(self) -> "Slide":
        """Structural copy: equal in value, shares no nested objects."""
        return Slide(
            id=self.id,
            kind=self.kind,
            content=self.content,
            duration=self.duration,
            style=self.style.clone() if self.style is not None else None,
        )

    def label(self, width: int = 40) -> str:
        """Short human-readable label, as shown in the slide list."""
        if self.is_image:
            return "(image)"
        return (self.content[:width] + "...") if len(self.content) > width else self.content
