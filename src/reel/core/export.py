"""Export pipeline: freezes a slide sequence into a GeneratedVideo.

Export is a background job that steps its progress from 0 to 100. The
job cannot be cancelled once started. It ends COMPLETED, with a new video
in the library, or FAILED, with the library untouched.
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Sequence
from pydantic import BaseModel, Field

from .config import DEFAULT_EXPORT_STEP, DEFAULT_EXPORT_STEP_DELAY
from .errors import EmptySequence, ExportFailed, ExportInProgress
from .library import GeneratedVideo, VideoLibrary
from .notify import Notifier
from .slides import Slide, new_slide_id

logger = logging.getLogger("ReelMCP.core.export")

PLACEHOLDER_THUMBNAIL = "/placeholder.svg?height=100&width=180"

ProgressCallback = Callable[[int], None]  # 0 - 100


class ExportStatus(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ExportJob(BaseModel):
    """State of one export run."""
    id: str = Field(default_factory=new_slide_id)
    title: Optional[str] = None
    status: ExportStatus = ExportStatus.NOT_STARTED
    progress: int = 0
    reason: Optional[str] = None
    slides: tuple[Slide, ...] = ()
    video: Optional[GeneratedVideo] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def done(self) -> bool:
        return self.status in (ExportStatus.COMPLETED, ExportStatus.FAILED)

    def summary(self) -> dict:
        return {
            "job_id": self.id,
            "title": self.title,
            "status": self.status.value,
            "progress": self.progress,
            "reason": self.reason,
            "video_id": self.video.id if self.video else None,
        }


class Encoder:
    """Renders one progress step of an export.

    Raise from `encode_step` to fail the job; the message becomes the
    job's failure reason.
    """

    async def encode_step(self, slides: tuple[Slide, ...], progress: int) -> None:
        raise NotImplementedError


class SimulatedEncoder(Encoder):
    """Stands in for a real encoder; every step succeeds."""

    async def encode_step(self, slides: tuple[Slide, ...], progress: int) -> None:
        logger.debug(f"Simulated encode of {len(slides)} slides at {progress}%")


class ThumbnailProvider:
    def thumbnail_for(self, slides: tuple[Slide, ...]) -> str:
        raise NotImplementedError


class PlaceholderThumbnails(ThumbnailProvider):
    def thumbnail_for(self, slides: tuple[Slide, ...]) -> str:
        return PLACEHOLDER_THUMBNAIL


def progress_steps(step: int) -> list[int]:
    """Progress values reported by a run: 0, step, 2*step, ..., 100."""
    steps = list(range(0, 101, step))
    if steps[-1] != 100:
        steps.append(100)
    return steps


class ExportPipeline:
    """Runs at most one export job at a time."""

    def __init__(
        self,
        library: VideoLibrary,
        encoder: Optional[Encoder] = None,
        thumbnails: Optional[ThumbnailProvider] = None,
        notifier: Optional[Notifier] = None,
        step: int = DEFAULT_EXPORT_STEP,
        step_delay: float = DEFAULT_EXPORT_STEP_DELAY,
    ):
        self.library = library
        self.encoder = encoder if encoder is not None else SimulatedEncoder()
        self.thumbnails = thumbnails if thumbnails is not None else PlaceholderThumbnails()
        self.notifier = notifier if notifier is not None else Notifier()
        self.step = step
        self.step_delay = step_delay
        self.current_job: Optional[ExportJob] = None
        self.last_job: Optional[ExportJob] = None
        self._on_progress: Optional[ProgressCallback] = None

    @property
    def running(self) -> bool:
        return self.current_job is not None

    def start(
        self,
        title: Optional[str],
        sequence: Sequence[Slide],
        on_progress: Optional[ProgressCallback] = None,
    ) -> ExportJob:
        """Validate and snapshot the sequence; the job is RUNNING on return."""
        if len(sequence) == 0:
            raise EmptySequence("Add at least one slide before exporting.")
        if self.current_job is not None:
            raise ExportInProgress(self.current_job.id)

        job = ExportJob(
            title=title.strip() if title and title.strip() else None,
            slides=tuple(s.clone() for s in sequence),
            status=ExportStatus.RUNNING,
            started_at=datetime.now(),
        )
        self.current_job = job
        self.last_job = job
        self._on_progress = on_progress
        logger.info(f"Export {job.id} started: {len(job.slides)} slides")
        return job

    async def run(self, job: ExportJob) -> ExportJob:
        """Drive a started job to COMPLETED or FAILED."""
        if job is not self.current_job or job.status != ExportStatus.RUNNING:
            raise ValueError(f"Export job '{job.id}' is not the running job")

        display_title = job.title or "(untitled)"
        try:
            for progress in progress_steps(self.step):
                await asyncio.sleep(self.step_delay)
                await self.encoder.encode_step(job.slides, progress)
                self._report(job, progress)
            self._complete(job)
        except Exception as e:
            self._fail(job, str(e) or type(e).__name__)
            self.notifier.export_failed(display_title, job.reason)
            return job

        self.notifier.export_completed(job.video.title)
        return job

    async def export(
        self,
        title: Optional[str],
        sequence: Sequence[Slide],
        on_progress: Optional[ProgressCallback] = None,
    ) -> GeneratedVideo:
        """Start and await an export. Raises ExportFailed if it fails."""
        job = await self.run(self.start(title, sequence, on_progress))
        if job.status == ExportStatus.FAILED:
            raise ExportFailed(job.reason)
        return job.video

    def _report(self, job: ExportJob, progress: int):
        job.progress = max(job.progress, progress)
        logger.debug(f"Export {job.id}: {job.progress}%")
        if self._on_progress:
            self._on_progress(job.progress)

    def _complete(self, job: ExportJob):
        # No awaits in here: the record appears all at once or not at all.
        now = datetime.now()
        video = GeneratedVideo(
            title=job.title or f"Video {len(self.library) + 1}",
            created_at=now,
            thumbnail=self.thumbnails.thumbnail_for(job.slides),
            slides=job.slides,
        )
        self.library.add(video)
        job.video = video
        job.status = ExportStatus.COMPLETED
        job.finished_at = now
        self._clear()
        logger.info(f"Export {job.id} completed as '{video.title}' ({video.id})")

    def _fail(self, job: ExportJob, reason: str):
        job.status = ExportStatus.FAILED
        job.reason = reason
        job.finished_at = datetime.now()
        self._clear()
        logger.error(f"Export {job.id} failed at {job.progress}%: {reason}")

    def _clear(self):
        self.current_job = None
        self._on_progress = None
