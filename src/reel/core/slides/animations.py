"""Transition model for the fade between consecutive slides."""

from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_FADE_WINDOW


class SlideTransition(BaseModel):
    """Transition effect out of a slide.

    Only cross_dissolve is played back: the outgoing slide fades to zero
    over the trailing `duration` seconds of its time on screen, and the
    next slide appears once the fade is done.
    """
    model_config = ConfigDict(frozen=True)

    type: str = "cross_dissolve"
    duration: float = Field(default=DEFAULT_FADE_WINDOW, ge=0)  # fade window, seconds

    def window_for(self, slide_duration: float) -> float:
        """Fade window for a slide, never longer than the slide itself."""
        return max(0.0, min(self.duration, slide_duration))

    def opacity_at(self, remaining: float, slide_duration: float) -> float:
        """Opacity of the outgoing slide with `remaining` seconds left."""
        window = self.window_for(slide_duration)
        if window <= 0 or remaining >= window:
            return 1.0
        if remaining <= 0:
            return 0.0
        return remaining / window
