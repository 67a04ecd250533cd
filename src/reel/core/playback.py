"""Playback state machine for a slide sequence.

A controller borrows a read-only sequence (the live SlideStore for a
preview, or a GeneratedVideo's frozen slides for a replay) and owns its
own position, countdown and clock subscription.

Phases:
    IDLE -> PLAYING <-> PAUSED
    PLAYING/PAUSED -> STOPPED (position reset; equivalent to IDLE)
    PLAYING -> TRANSITIONING_OUT -> PLAYING on the next slide

TRANSITIONING_OUT is the last `fade_window` seconds of a slide. It only
affects presentation (`opacity`); the countdown runs exactly as in PLAYING.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .clock import ManualClock, TimelineClock
from .errors import EmptySequence, IndexOutOfRange
from .notify import Notifier
from .slides import Slide, SlideTransition

logger = logging.getLogger("ReelMCP.core.playback")

# Countdown values are kept on a nanosecond grid so repeated 0.1s ticks
# land exactly on slide boundaries.
_PRECISION = 9


class PlaybackPhase(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"
    TRANSITIONING_OUT = "transitioning_out"


@dataclass
class OutgoingFade:
    """A vacated slide still fading out after a manual skip."""
    slide_index: int
    remaining: float
    window: float

    @property
    def opacity(self) -> float:
        if self.window <= 0:
            return 0.0
        return max(0.0, min(1.0, self.remaining / self.window))


class PlaybackController:
    def __init__(
        self,
        sequence: Sequence[Slide],
        clock: Optional[TimelineClock] = None,
        transition: Optional[SlideTransition] = None,
        notifier: Optional[Notifier] = None,
        name: str = "preview",
    ):
        self.sequence = sequence
        self.clock = clock if clock is not None else ManualClock()
        self.transition = transition if transition is not None else SlideTransition()
        self.notifier = notifier if notifier is not None else Notifier()
        self.name = name
        self.phase = PlaybackPhase.IDLE
        self.current_index = 0
        self.remaining = 0.0
        self.outgoing: Optional[OutgoingFade] = None
        self.disposed = False
        self._reset_position()

    # ── Derived state ──────────────────────────────────────────────────

    @property
    def is_playing(self) -> bool:
        return self.phase in (PlaybackPhase.PLAYING, PlaybackPhase.TRANSITIONING_OUT)

    @property
    def current_slide(self) -> Optional[Slide]:
        if 0 <= self.current_index < len(self.sequence):
            return self.sequence[self.current_index]
        return None

    @property
    def visible_slide(self) -> Optional[Slide]:
        """The slide on screen. During a fade this is still the outgoing one."""
        return self.current_slide

    @property
    def fade_window(self) -> float:
        slide = self.current_slide
        if slide is None:
            return 0.0
        return self.transition.window_for(slide.duration)

    @property
    def opacity(self) -> float:
        slide = self.current_slide
        if slide is None:
            return 0.0
        if self.phase != PlaybackPhase.TRANSITIONING_OUT:
            return 1.0
        return self.transition.opacity_at(self.remaining, slide.duration)

    def progress_fraction(self) -> float:
        if len(self.sequence) == 0:
            return 0.0
        return self.current_index / len(self.sequence)

    def status(self) -> dict:
        slide = self.current_slide
        return {
            "session": self.name,
            "phase": self.phase.value,
            "current_index": self.current_index,
            "slide_count": len(self.sequence),
            "slide_id": slide.id if slide else None,
            "remaining": round(self.remaining, 1),
            "opacity": round(self.opacity, 2),
            "progress_percent": round(self.progress_fraction() * 100, 1),
        }

    # ── Commands ───────────────────────────────────────────────────────

    def start(self) -> None:
        if self._ignored("start"):
            return
        if len(self.sequence) == 0:
            raise EmptySequence()
        self._reset_position()
        self._set_phase(PlaybackPhase.PLAYING)
        self._update_fade_phase()
        self.clock.subscribe(self.tick)

    def pause(self) -> None:
        if self._ignored("pause") or len(self.sequence) == 0 or not self.is_playing:
            return
        self.clock.unsubscribe()
        self._set_phase(PlaybackPhase.PAUSED)

    def resume(self) -> None:
        if self._ignored("resume") or len(self.sequence) == 0:
            return
        if self.phase != PlaybackPhase.PAUSED:
            return
        self._set_phase(PlaybackPhase.PLAYING)
        self._update_fade_phase()
        self.clock.subscribe(self.tick)

    def toggle(self) -> None:
        """Play/pause button: pause, resume, or start over from a stop."""
        if self.is_playing:
            self.pause()
        elif self.phase == PlaybackPhase.PAUSED:
            self.resume()
        elif len(self.sequence) > 0:
            self.start()

    def stop(self) -> None:
        if self._ignored("stop"):
            return
        self.clock.unsubscribe()
        self._reset_position()
        self._set_phase(PlaybackPhase.STOPPED)

    def advance(self) -> None:
        """Skip to the next slide, or stop after the last one."""
        if self._ignored("advance"):
            return
        if len(self.sequence) == 0:
            raise EmptySequence()
        self._cross_boundary(overshoot=0.0, manual=True)
        self._update_fade_phase()

    def seek(self, index: int) -> None:
        if self._ignored("seek"):
            return
        if not 0 <= index < len(self.sequence):
            raise IndexOutOfRange(index, len(self.sequence))
        self.current_index = index
        self.remaining = self.sequence[index].duration
        self.outgoing = None
        self._update_fade_phase()

    def dispose(self) -> None:
        """Tear down: release the clock; later ticks and commands do nothing."""
        if self.disposed:
            return
        self.clock.unsubscribe()
        self.disposed = True
        self.phase = PlaybackPhase.IDLE
        logger.info(f"[{self.name}] disposed")

    # ── Clock ──────────────────────────────────────────────────────────

    def tick(self, dt: float) -> None:
        if self.disposed or not self.is_playing:
            return
        if self.current_slide is None:
            # The live sequence shrank under us.
            logger.warning(f"[{self.name}] slide {self.current_index} vanished; stopping")
            self.stop()
            return

        if self.outgoing is not None:
            self.outgoing.remaining = round(self.outgoing.remaining - dt, _PRECISION)
            if self.outgoing.remaining <= 0:
                self.outgoing = None

        self.remaining = round(self.remaining - dt, _PRECISION)
        while self.remaining <= 0:
            if not self._cross_boundary(overshoot=-self.remaining, manual=False):
                return
        self._update_fade_phase()

    # ── Internals ──────────────────────────────────────────────────────

    def _cross_boundary(self, overshoot: float, manual: bool) -> bool:
        """Move past the current slide. Returns False when playback ended."""
        if self.current_index >= len(self.sequence) - 1:
            self._finish()
            return False

        vacated = self.current_index
        vacated_remaining = self.remaining
        self.current_index += 1
        self.remaining = round(
            self.sequence[self.current_index].duration - overshoot, _PRECISION
        )

        self.outgoing = None
        if manual and self.is_playing:
            # Skipped early: the vacated slide still owes its fade. A paused
            # player has no clock to run it down, so it cuts instead.
            window = self.transition.window_for(self.sequence[vacated].duration)
            fade = min(window, vacated_remaining)
            if fade > 0:
                self.outgoing = OutgoingFade(vacated, fade, window)

        logger.debug(f"[{self.name}] slide {vacated} -> {self.current_index}")
        return True

    def _finish(self) -> None:
        logger.info(f"[{self.name}] reached the end of {len(self.sequence)} slides")
        self.stop()
        self.notifier.playback_finished()

    def _reset_position(self) -> None:
        self.current_index = 0
        self.remaining = self.sequence[0].duration if len(self.sequence) > 0 else 0.0
        self.outgoing = None

    def _update_fade_phase(self) -> None:
        if not self.is_playing:
            return
        window = self.fade_window
        if window > 0 and 0 < self.remaining <= window:
            self._set_phase(PlaybackPhase.TRANSITIONING_OUT)
        else:
            self._set_phase(PlaybackPhase.PLAYING)

    def _set_phase(self, phase: PlaybackPhase) -> None:
        if phase != self.phase:
            logger.debug(f"[{self.name}] {self.phase.value} -> {phase.value}")
            self.phase = phase

    def _ignored(self, command: str) -> bool:
        if self.disposed:
            logger.warning(f"[{self.name}] {command}() after dispose ignored")
            return True
        return False
