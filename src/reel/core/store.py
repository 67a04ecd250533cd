"""The working slide sequence being edited."""

import logging
from typing import Iterable, Iterator, Optional
from pydantic import BaseModel, Field

from .config import DEFAULT_MAX_IMAGES, DEFAULT_SLIDE_DURATION
from .errors import EmptyContent, IndexOutOfRange, NotFound, OrderMismatch, TooManyImages
from .slides import Slide, SlideKind, TextStyle, normalize_duration

logger = logging.getLogger("ReelMCP.core.store")


class SlideStore(BaseModel):
    """Ordered, mutable slide sequence with the editing operations.

    Mutations either apply fully or raise with the store untouched. The
    store also reads as a Sequence[Slide], so a preview can play it live.
    """
    slides: list[Slide] = Field(default_factory=list)
    max_images: int = DEFAULT_MAX_IMAGES
    default_duration: float = DEFAULT_SLIDE_DURATION

    # ── Read access ────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self.slides)

    def __getitem__(self, index):
        return self.slides[index]

    def __iter__(self) -> Iterator[Slide]:
        """Iterate slides in playback order, replacing BaseModel's (field, value) pairs."""
        return iter(self.slides)

    def get(self, slide_id: str) -> Optional[Slide]:
        for s in self.slides:
            if s.id == slide_id:
                return s
        return None

    def index_of(self, slide_id: str) -> Optional[int]:
        for i, s in enumerate(self.slides):
            if s.id == slide_id:
                return i
        return None

    @property
    def image_count(self) -> int:
        return sum(1 for s in self.slides if s.kind == SlideKind.IMAGE)

    @property
    def remaining_image_slots(self) -> int:
        return max(0, self.max_images - self.image_count)

    @property
    def total_duration(self) -> float:
        return sum(s.duration for s in self.slides)

    def snapshot(self) -> tuple[Slide, ...]:
        """Point-in-time copy of the whole sequence."""
        return tuple(s.clone() for s in self.slides)

    # ── Mutations ──────────────────────────────────────────────────────

    def add_image(self, content: str) -> Slide:
        if self.image_count >= self.max_images:
            raise TooManyImages(self.max_images)
        slide = Slide(kind=SlideKind.IMAGE, content=content,
                      duration=self.default_duration)
        self.slides.append(slide)
        logger.info(f"Added image slide {slide.id} ({self.image_count}/{self.max_images})")
        return slide

    def add_images(self, contents: Iterable[str]) -> list[Slide]:
        """Add as many images as there are free slots; extras are dropped."""
        contents = list(contents)
        accepted = contents[:self.remaining_image_slots]
        if len(accepted) < len(contents):
            logger.warning(
                f"Dropped {len(contents) - len(accepted)} image(s): "
                f"limit is {self.max_images}"
            )
        return [self.add_image(c) for c in accepted]

    def add_text(self, content: str, style: Optional[TextStyle] = None) -> Slide:
        if not content or not content.strip():
            raise EmptyContent()
        slide = Slide(
            kind=SlideKind.TEXT,
            content=content,
            duration=self.default_duration,
            style=style if style is not None else TextStyle(),
        )
        self.slides.append(slide)
        logger.info(f"Added text slide {slide.id}")
        return slide

    def remove(self, slide_id: str) -> bool:
        index = self.index_of(slide_id)
        if index is None:
            return False
        del self.slides[index]
        logger.info(f"Removed slide {slide_id}")
        return True

    def reorder(self, from_index: int, to_index: int) -> None:
        """Move one slide, keeping everything else in relative order."""
        length = len(self.slides)
        for index in (from_index, to_index):
            if not 0 <= index < length:
                raise IndexOutOfRange(index, length)
        slide = self.slides.pop(from_index)
        self.slides.insert(to_index, slide)

    def reorder_ids(self, slide_id_list: list[str]) -> None:
        """Replace the order with a full permutation of the current ids."""
        id_to_slide = {s.id: s for s in self.slides}
        if len(slide_id_list) != len(self.slides) or set(slide_id_list) != set(id_to_slide):
            raise OrderMismatch(len(slide_id_list), len(self.slides))
        self.slides[:] = [id_to_slide[sid] for sid in slide_id_list]

    def set_duration(self, slide_id: str, seconds: float) -> Optional[Slide]:
        index = self.index_of(slide_id)
        if index is None:
            return None
        updated = self.slides[index].model_copy(
            update={"duration": normalize_duration(seconds)}
        )
        self.slides[index] = updated
        return updated

    def set_style(self, slide_id: str, style: TextStyle) -> Slide:
        index = self.index_of(slide_id)
        if index is None:
            raise NotFound("Slide", slide_id)
        slide = self.slides[index]
        if slide.kind != SlideKind.TEXT:
            raise EmptyContent(f"Slide '{slide_id}' is an image and has no text to style.")
        updated = slide.model_copy(update={"style": style})
        self.slides[index] = updated
        return updated

    def replace_all(self, slides: Iterable[Slide]) -> None:
        self.slides[:] = list(slides)

    def to_summary(self) -> list[dict]:
        return [
            {
                "index": i,
                "id": s.id,
                "kind": s.kind.value,
                "duration": s.duration,
                "label": s.label(80),
            }
            for i, s in enumerate(self.slides)
        ]
