"""Generated videos and the in-memory library that holds them."""

import logging
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .clock import TimelineClock
from .errors import NotFound
from .notify import Notifier
from .playback import PlaybackController
from .slides import Slide, SlideTransition, new_slide_id

logger = logging.getLogger("ReelMCP.core.library")


class GeneratedVideo(BaseModel):
    """An exported reel. Frozen; its slides are private clones."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_slide_id)
    title: str
    created_at: datetime = Field(default_factory=datetime.now)
    thumbnail: str = ""
    slides: tuple[Slide, ...] = ()

    @property
    def duration(self) -> float:
        return sum(s.duration for s in self.slides)

    def summary(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at.isoformat(timespec="seconds"),
            "thumbnail": self.thumbnail,
            "slide_count": len(self.slides),
            "duration": self.duration,
        }


class VideoLibrary(BaseModel):
    """Generated videos in creation order."""
    videos: list[GeneratedVideo] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.videos)

    def add(self, video: GeneratedVideo) -> GeneratedVideo:
        self.videos.append(video)
        logger.info(f"Library: added '{video.title}' ({video.id})")
        return video

    def remove(self, video_id: str) -> bool:
        for i, v in enumerate(self.videos):
            if v.id == video_id:
                del self.videos[i]
                logger.info(f"Library: removed '{v.title}' ({video_id})")
                return True
        return False

    def get(self, video_id: str) -> GeneratedVideo:
        for v in self.videos:
            if v.id == video_id:
                return v
        raise NotFound("Video", video_id)

    def replay(
        self,
        video_id: str,
        clock: Optional[TimelineClock] = None,
        transition: Optional[SlideTransition] = None,
        notifier: Optional[Notifier] = None,
    ) -> PlaybackController:
        """A fresh controller over the video's frozen slides."""
        video = self.get(video_id)
        return PlaybackController(
            video.slides,
            clock=clock,
            transition=transition,
            notifier=notifier,
            name=f"replay:{video.id}",
        )

    def to_summary(self) -> list[dict]:
        return [v.summary() for v in self.videos]

    # Kept last: inside the class body this name shadows the builtin.
    def list(self) -> list[GeneratedVideo]:
        return list(self.videos)
