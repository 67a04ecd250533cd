"""Tests for reel.core.export — ExportPipeline, jobs and collaborators."""

import asyncio
import pytest
from unittest.mock import MagicMock

from reel.core.errors import EmptySequence, ExportFailed, ExportInProgress
from reel.core.export import (
    PLACEHOLDER_THUMBNAIL,
    Encoder,
    ExportPipeline,
    ExportStatus,
    SimulatedEncoder,
    ThumbnailProvider,
    progress_steps,
)
from reel.core.library import VideoLibrary
from reel.core.notify import RecordingNotifier
from reel.core.slides import TextStyle
from reel.core.store import SlideStore


class FailingEncoder(Encoder):
    def __init__(self, fail_at: int):
        self.fail_at = fail_at

    async def encode_step(self, slides, progress):
        if progress >= self.fail_at:
            raise RuntimeError("disk full")


@pytest.fixture
def store():
    s = SlideStore()
    s.add_image("data:image/png;base64,AA==")
    s.add_text("Hi", TextStyle(font_size=40))
    return s


@pytest.fixture
def library():
    return VideoLibrary()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def pipeline(library, notifier):
    return ExportPipeline(library, notifier=notifier, step_delay=0)


# ── progress_steps ──────────────────────────────────────────────────────

class TestProgressSteps:
    def test_tens(self):
        assert progress_steps(10) == [0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100]

    def test_uneven_step_still_ends_at_100(self):
        assert progress_steps(30) == [0, 30, 60, 90, 100]


# ── Start validation ────────────────────────────────────────────────────

class TestStart:
    def test_empty_sequence(self, pipeline, library):
        with pytest.raises(EmptySequence):
            pipeline.start("x", SlideStore())
        assert len(library) == 0
        assert not pipeline.running

    def test_start_marks_running(self, pipeline, store):
        job = pipeline.start("Opening", store)
        assert job.status == ExportStatus.RUNNING
        assert job.progress == 0
        assert pipeline.running
        assert pipeline.current_job is job

    def test_second_export_while_running(self, pipeline, store):
        pipeline.start("first", store)
        with pytest.raises(ExportInProgress):
            pipeline.start("second", store)

    def test_blank_title_becomes_none(self, pipeline, store):
        assert pipeline.start("   ", store).title is None

    def test_snapshot_taken_at_start(self, pipeline, store):
        job = pipeline.start("Opening", store)
        store.set_duration(store[0].id, 9)
        store.add_text("later")
        assert len(job.slides) == 2
        assert job.slides[0].duration == 3.0


# ── Successful runs ─────────────────────────────────────────────────────

class TestRun:
    def test_completes_and_adds_video(self, pipeline, store, library, notifier):
        video = asyncio.run(pipeline.export("Opening", store))
        assert video.title == "Opening"
        assert library.list() == [video]
        assert pipeline.last_job.status == ExportStatus.COMPLETED
        assert pipeline.last_job.progress == 100
        assert not pipeline.running
        assert notifier.events == [("export_completed", ("Opening",))]

    def test_progress_monotonic_to_100(self, pipeline, store):
        seen = []
        asyncio.run(pipeline.export(None, store, on_progress=seen.append))
        assert seen == sorted(seen)
        assert seen[0] == 0
        assert seen[-1] == 100
        assert len(seen) == 11

    def test_default_titles_count_up(self, pipeline, store):
        first = asyncio.run(pipeline.export(None, store))
        second = asyncio.run(pipeline.export("", store))
        assert first.title == "Video 1"
        assert second.title == "Video 2"

    def test_video_fields(self, pipeline, store):
        video = asyncio.run(pipeline.export("Opening", store))
        assert video.thumbnail == PLACEHOLDER_THUMBNAIL
        assert video.created_at is not None
        assert video.created_at >= pipeline.last_job.started_at

    def test_video_is_value_equal_and_independent(self, pipeline, store):
        video = asyncio.run(pipeline.export("Opening", store))
        assert list(video.slides) == list(store)
        assert all(a is not b for a, b in zip(video.slides, store))
        assert video.slides[1].style is not store[1].style

        store.set_duration(store[0].id, 8)
        store.set_style(store[1].id, TextStyle(font_size=10))
        store.reorder(0, 1)
        store.remove(store[0].id)
        assert video.slides[0].duration == 3.0
        assert video.slides[1].style.font_size == 40
        assert len(video.slides) == 2

    def test_pipeline_free_after_completion(self, pipeline, store):
        asyncio.run(pipeline.export("a", store))
        job = pipeline.start("b", store)
        assert job.status == ExportStatus.RUNNING

    def test_second_call_rejected_while_first_runs(self, library, store):
        pipeline = ExportPipeline(library, step_delay=0.01)

        async def scenario():
            job = pipeline.start("first", store)
            task = asyncio.create_task(pipeline.run(job))
            await asyncio.sleep(0.02)
            assert 0 <= job.progress < 100
            with pytest.raises(ExportInProgress):
                pipeline.start("second", store)
            await task
            return job

        job = asyncio.run(scenario())
        assert job.status == ExportStatus.COMPLETED
        assert len(library) == 1

    def test_run_rejects_foreign_job(self, pipeline, store):
        job = pipeline.start("a", store)
        other = ExportPipeline(VideoLibrary(), step_delay=0)
        with pytest.raises(ValueError):
            asyncio.run(other.run(job))

    def test_custom_thumbnail_provider(self, library, store):
        thumbs = MagicMock(spec=ThumbnailProvider)
        thumbs.thumbnail_for.return_value = "thumb://1"
        pipeline = ExportPipeline(library, thumbnails=thumbs, step_delay=0)
        video = asyncio.run(pipeline.export("x", store))
        assert video.thumbnail == "thumb://1"
        thumbs.thumbnail_for.assert_called_once()


# ── Failures ────────────────────────────────────────────────────────────

class TestFailure:
    def test_encoder_failure(self, library, notifier, store):
        pipeline = ExportPipeline(library, encoder=FailingEncoder(50),
                                  notifier=notifier, step_delay=0)
        job = asyncio.run(pipeline.run(pipeline.start("Opening", store)))
        assert job.status == ExportStatus.FAILED
        assert job.reason == "disk full"
        assert job.progress == 40
        assert job.video is None
        assert len(library) == 0
        assert not pipeline.running
        assert notifier.events == [("export_failed", ("Opening", "disk full"))]

    def test_export_raises_export_failed(self, library, store):
        pipeline = ExportPipeline(library, encoder=FailingEncoder(0), step_delay=0)
        with pytest.raises(ExportFailed) as exc_info:
            asyncio.run(pipeline.export(None, store))
        assert exc_info.value.reason == "disk full"
        assert len(library) == 0

    def test_failure_leaves_store_untouched(self, library, store):
        before = list(store)
        pipeline = ExportPipeline(library, encoder=FailingEncoder(0), step_delay=0)
        with pytest.raises(ExportFailed):
            asyncio.run(pipeline.export(None, store))
        assert list(store) == before

    def test_can_export_again_after_failure(self, library, store):
        pipeline = ExportPipeline(library, encoder=FailingEncoder(0), step_delay=0)
        with pytest.raises(ExportFailed):
            asyncio.run(pipeline.export(None, store))
        pipeline.encoder = SimulatedEncoder()
        video = asyncio.run(pipeline.export(None, store))
        assert video.title == "Video 1"

    def test_thumbnail_failure_fails_job(self, library, notifier, store):
        thumbs = MagicMock(spec=ThumbnailProvider)
        thumbs.thumbnail_for.side_effect = RuntimeError("no preview frame")
        pipeline = ExportPipeline(library, thumbnails=thumbs,
                                  notifier=notifier, step_delay=0)
        job = asyncio.run(pipeline.run(pipeline.start("Opening", store)))
        assert job.status == ExportStatus.FAILED
        assert job.reason == "no preview frame"
        assert job.video is None
        assert len(library) == 0
        assert not pipeline.running
        assert notifier.names() == ["export_failed"]

        pipeline.thumbnails = MagicMock(spec=ThumbnailProvider)
        pipeline.thumbnails.thumbnail_for.return_value = "thumb://ok"
        video = asyncio.run(pipeline.export("Again", store))
        assert library.list() == [video]

    def test_progress_callback_failure_fails_job(self, pipeline, library, notifier, store):
        def on_progress(value):
            if value >= 30:
                raise ValueError("listener gone")

        job = asyncio.run(pipeline.run(pipeline.start("Opening", store, on_progress)))
        assert job.status == ExportStatus.FAILED
        assert job.reason == "listener gone"
        assert len(library) == 0
        assert not pipeline.running
        assert notifier.events == [("export_failed", ("Opening", "listener gone"))]

        video = asyncio.run(pipeline.export("Again", store))
        assert video.title == "Again"
        assert len(library) == 1
