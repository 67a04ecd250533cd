"""Session state: the single owner of the store, library and exporter."""

from typing import Optional
from pydantic import BaseModel, Field

from .clock import TimelineClock
from .config import EngineConfig
from .export import ExportPipeline
from .library import VideoLibrary
from .notify import LoggingNotifier, Notifier
from .playback import PlaybackController
from .slides import FontFamily, Slide, SlideTransition, TextStyle
from .store import SlideStore

MAX_UNDO_ENTRIES = 50


class StylePreset(BaseModel):
    """A named text style preset."""
    name: str
    description: str
    style: TextStyle


# Built-in presets
BUILTIN_PRESETS: dict[str, StylePreset] = {
    "title": StylePreset(
        name="title",
        description="Large serif lettering for the opening title card",
        style=TextStyle(font_size=64, color="#FFFFFF",
                        font_family=FontFamily.TIMES_NEW_ROMAN),
    ),
    "caption": StylePreset(
        name="caption",
        description="Plain sans-serif text at the editor's default size",
        style=TextStyle(font_size=24, color="#FFFFFF", font_family=FontFamily.ARIAL),
    ),
    "credits": StylePreset(
        name="credits",
        description="Small monospaced lines for cast and crew credits",
        style=TextStyle(font_size=18, color="#E0E0E0", font_family=FontFamily.COURIER),
    ),
}


class UndoEntry(BaseModel):
    """A snapshot of the slide sequence for undo."""
    description: str
    slides: tuple[Slide, ...]


class SessionState(BaseModel):
    """Everything one editing session owns.

    Edits and export starts all go through this object, so an export
    snapshot never interleaves with a store mutation.
    """
    config: EngineConfig = Field(default_factory=EngineConfig)
    store: Optional[SlideStore] = None
    library: VideoLibrary = Field(default_factory=VideoLibrary)
    notifier: Notifier = Field(default_factory=LoggingNotifier)
    pipeline: Optional[ExportPipeline] = None
    undo_stack: list[UndoEntry] = Field(default_factory=list)

    model_config = {"arbitrary_types_allowed": True}

    def model_post_init(self, __context) -> None:
        if self.store is None:
            self.store = SlideStore(
                max_images=self.config.max_images,
                default_duration=self.config.default_duration,
            )
        if self.pipeline is None:
            self.pipeline = ExportPipeline(
                self.library,
                notifier=self.notifier,
                step=self.config.export_step,
                step_delay=self.config.export_step_delay,
            )

    @property
    def transition(self) -> SlideTransition:
        return SlideTransition(duration=self.config.fade_window)

    def checkpoint(self, description: str):
        """Save the current slide order and values to the undo stack."""
        entry = UndoEntry(description=description, slides=self.store.snapshot())
        self.undo_stack.append(entry)
        if len(self.undo_stack) > MAX_UNDO_ENTRIES:
            self.undo_stack = self.undo_stack[-MAX_UNDO_ENTRIES:]

    def undo(self) -> Optional[str]:
        """Revert to the last checkpoint. Returns description of what was undone."""
        if not self.undo_stack:
            return None
        entry = self.undo_stack.pop()
        self.store.replace_all(s.clone() for s in entry.slides)
        return entry.description

    def preview(self, clock: Optional[TimelineClock] = None) -> PlaybackController:
        """A controller playing the live store."""
        return PlaybackController(
            self.store,
            clock=clock,
            transition=self.transition,
            notifier=self.notifier,
            name="preview",
        )

    def replay(self, video_id: str, clock: Optional[TimelineClock] = None) -> PlaybackController:
        return self.library.replay(
            video_id,
            clock=clock,
            transition=self.transition,
            notifier=self.notifier,
        )

    @staticmethod
    def get_preset(name: str) -> Optional[StylePreset]:
        return BUILTIN_PRESETS.get(name)

    @staticmethod
    def list_presets() -> list[dict]:
        return [
            {"name": p.name, "description": p.description, **p.style.model_dump(mode="json")}
            for p in BUILTIN_PRESETS.values()
        ]
