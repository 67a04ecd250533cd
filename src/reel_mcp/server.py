"""Reel MCP Server - MCP tools for building, previewing and exporting slide reels."""

from mcp.server.fastmcp import FastMCP, Context
import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Any, Optional

from pydantic import ValidationError

# SDK imports
from reel.core.clock import AsyncioClock
from reel.core.config import EngineConfig
from reel.core.errors import NotFound, ReelError
from reel.core.playback import PlaybackController
from reel.core.slides import Slide, TextStyle
from reel.core.state import SessionState, BUILTIN_PRESETS
from reel.intake.images import ImageLoader

# Configure logging
logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("ReelMCP")


# ── Global State ────────────────────────────────────────────────────────

_session_state = SessionState(config=EngineConfig.from_env())
_image_loader = ImageLoader()
_preview: Optional[PlaybackController] = None
_replays: dict[str, PlaybackController] = {}
_export_tasks: set[asyncio.Task] = set()


def _make_clock() -> AsyncioClock:
    return AsyncioClock(period=_session_state.config.tick_period)


def _error(e: Exception) -> str:
    """Surface an engine error as the single user-visible message."""
    message = str(e)
    _session_state.notifier.error(message)
    return f"Error: {message}"


def _slide_dict(slide: Slide) -> dict:
    data = slide.model_dump(mode="json")
    if slide.is_image and len(slide.content) > 64:
        data["content"] = slide.content[:64] + "..."
    return data


def _build_style(base: TextStyle, preset: Optional[str], font_size: Optional[int],
                 color: Optional[str], font_family: Optional[str]) -> TextStyle:
    """Layer a preset and individual overrides on top of `base`."""
    if preset:
        p = _session_state.get_preset(preset)
        if not p:
            available = ", ".join(BUILTIN_PRESETS.keys())
            raise ValueError(f"Unknown preset '{preset}'. Available: {available}")
        base = p.style

    fields = base.model_dump()
    if font_size is not None:
        fields["font_size"] = font_size
    if color is not None:
        fields["color"] = color
    if font_family is not None:
        fields["font_family"] = font_family
    return TextStyle(**fields)


def _close_all_players():
    global _preview
    if _preview is not None:
        _preview.dispose()
        _preview = None
    for player in _replays.values():
        player.dispose()
    _replays.clear()


# ── Server Setup ────────────────────────────────────────────────────────

@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[Dict[str, Any]]:
    try:
        logger.info("ReelMCP server starting up")
        yield {}
    finally:
        _close_all_players()
        if _export_tasks:
            logger.info(f"Waiting for {len(_export_tasks)} export job(s) to finish")
            await asyncio.gather(*_export_tasks, return_exceptions=True)
        logger.info("ReelMCP server shut down")


mcp = FastMCP("ReelMCP", lifespan=server_lifespan)


# ═══════════════════════════════════════════════════════════════════════
# SLIDE TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def add_image_slide(ctx: Context, file_path: str) -> str:
    """Add an image slide from a local image file (max 5 images per reel).

    Parameters:
    - file_path: Path to a png/jpg/gif/webp image
    """
    try:
        content = _image_loader.load(file_path)
    except (FileNotFoundError, ValueError) as e:
        return _error(e)

    _session_state.checkpoint("Add image slide")
    try:
        slide = _session_state.store.add_image(content)
    except ReelError as e:
        _session_state.undo_stack.pop()
        return _error(e)

    return json.dumps({
        "status": "added",
        "slide": _slide_dict(slide),
        "image_slots_left": _session_state.store.remaining_image_slots,
    }, indent=2)


@mcp.tool()
def add_image_slides(ctx: Context, file_paths: list[str]) -> str:
    """Add several image slides at once. Images beyond the free slots are skipped.

    Parameters:
    - file_paths: Paths to image files, in the order they should appear
    """
    try:
        contents = _image_loader.load_many(file_paths)
    except (FileNotFoundError, ValueError) as e:
        return _error(e)

    _session_state.checkpoint("Add image slides")
    added = _session_state.store.add_images(contents)
    if not added:
        _session_state.undo_stack.pop()
    return json.dumps({
        "status": "added",
        "added": len(added),
        "skipped": len(contents) - len(added),
        "slides": _session_state.store.to_summary(),
    }, indent=2)


@mcp.tool()
def add_text_slide(ctx: Context, text: str, preset: str = None,
                   font_size: int = None, color: str = None,
                   font_family: str = None) -> str:
    """Add a text slide.

    Parameters:
    - text: The text to show (must not be blank)
    - preset: Optional style preset (title, caption, credits)
    - font_size: Font size 8-72
    - color: Hex color, e.g. "#FFFFFF"
    - font_family: Arial, Verdana, Times New Roman or Courier
    """
    try:
        style = _build_style(TextStyle(), preset, font_size, color, font_family)
    except (ValueError, ValidationError) as e:
        return _error(e)

    _session_state.checkpoint("Add text slide")
    try:
        slide = _session_state.store.add_text(text, style)
    except ReelError as e:
        _session_state.undo_stack.pop()
        return _error(e)

    return json.dumps({"status": "added", "slide": _slide_dict(slide)}, indent=2)


@mcp.tool()
def get_slides(ctx: Context) -> str:
    """List all slides with their IDs, kinds and durations, in playback order."""
    store = _session_state.store
    if len(store) == 0:
        return "No slides yet. Use add_image_slide or add_text_slide."
    return json.dumps({
        "slides": store.to_summary(),
        "total_duration": store.total_duration,
        "image_count": store.image_count,
    }, indent=2)


@mcp.tool()
def get_slide(ctx: Context, slide_id: str) -> str:
    """Get full details of a specific slide.

    Parameters:
    - slide_id: The ID of the slide to retrieve
    """
    slide = _session_state.store.get(slide_id)
    if not slide:
        return _error(NotFound("Slide", slide_id))
    return json.dumps(_slide_dict(slide), indent=2)


@mcp.tool()
def remove_slide(ctx: Context, slide_id: str) -> str:
    """Remove a slide. Removing an unknown ID changes nothing.

    Parameters:
    - slide_id: The ID of the slide to remove
    """
    _session_state.checkpoint(f"Remove slide {slide_id}")
    if _session_state.store.remove(slide_id):
        return f"Slide '{slide_id}' removed. {len(_session_state.store)} slides remaining."
    _session_state.undo_stack.pop()
    return f"Slide '{slide_id}' was not in the reel; nothing changed."


@mcp.tool()
def reorder_slide(ctx: Context, from_index: int, to_index: int) -> str:
    """Move one slide to a new position; the others keep their relative order.

    Parameters:
    - from_index: Current position (0-based)
    - to_index: Target position (0-based)
    """
    _session_state.checkpoint("Move slide")
    try:
        _session_state.store.reorder(from_index, to_index)
    except ReelError as e:
        _session_state.undo_stack.pop()
        return _error(e)
    return json.dumps({
        "status": "reordered",
        "slides": _session_state.store.to_summary(),
    }, indent=2)


@mcp.tool()
def reorder_slides(ctx: Context, slide_id_list: list[str]) -> str:
    """Reorder slides by providing the complete list of slide IDs in desired order.

    Parameters:
    - slide_id_list: List of all slide IDs in the new order
    """
    _session_state.checkpoint("Reorder slides")
    try:
        _session_state.store.reorder_ids(slide_id_list)
    except ReelError as e:
        _session_state.undo_stack.pop()
        return _error(e)
    return json.dumps({
        "status": "reordered",
        "slides": _session_state.store.to_summary(),
    }, indent=2)


@mcp.tool()
def set_slide_duration(ctx: Context, slide_id: str, seconds: float) -> str:
    """Set how long a slide stays on screen (1-10s, snapped to 0.5s steps).

    Parameters:
    - slide_id: The slide to change
    - seconds: Requested duration in seconds
    """
    _session_state.checkpoint(f"Duration of slide {slide_id}")
    slide = _session_state.store.set_duration(slide_id, seconds)
    if slide is None:
        _session_state.undo_stack.pop()
        return f"Slide '{slide_id}' was not in the reel; nothing changed."
    return json.dumps({"status": "updated", "slide_id": slide.id,
                       "duration": slide.duration}, indent=2)


@mcp.tool()
def set_text_style(ctx: Context, slide_id: str, preset: str = None,
                   font_size: int = None, color: str = None,
                   font_family: str = None) -> str:
    """Restyle a text slide. Unspecified properties keep their current values.

    Parameters:
    - slide_id: The text slide to style
    - (same style properties as add_text_slide)
    """
    slide = _session_state.store.get(slide_id)
    if not slide:
        return _error(NotFound("Slide", slide_id))

    try:
        style = _build_style(slide.style or TextStyle(), preset, font_size, color, font_family)
    except (ValueError, ValidationError) as e:
        return _error(e)

    _session_state.checkpoint(f"Style slide {slide_id}")
    try:
        updated = _session_state.store.set_style(slide_id, style)
    except ReelError as e:
        _session_state.undo_stack.pop()
        return _error(e)
    return json.dumps({"status": "updated", "slide": _slide_dict(updated)}, indent=2)


@mcp.tool()
def list_style_presets(ctx: Context) -> str:
    """List the built-in text style presets."""
    return json.dumps(_session_state.list_presets(), indent=2)


@mcp.tool()
def undo(ctx: Context) -> str:
    """Undo the last slide edit."""
    description = _session_state.undo()
    if description:
        return f"Undone: {description}. Slide count: {len(_session_state.store)}"
    return "Nothing to undo."


# ═══════════════════════════════════════════════════════════════════════
# PREVIEW TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
async def open_preview(ctx: Context) -> str:
    """Open a live preview of the current slides and start playing from slide 1."""
    global _preview
    if _preview is not None:
        _preview.dispose()
    _preview = _session_state.preview(clock=_make_clock())
    try:
        _preview.start()
    except ReelError as e:
        _preview.dispose()
        _preview = None
        return _error(e)
    return json.dumps(_preview.status(), indent=2)


def _with_preview(action) -> str:
    if _preview is None:
        return _error(ReelError("No preview is open. Use open_preview first."))
    try:
        action(_preview)
    except ReelError as e:
        return _error(e)
    return json.dumps(_preview.status(), indent=2)


@mcp.tool()
async def play_pause(ctx: Context) -> str:
    """Toggle play/pause on the open preview."""
    return _with_preview(lambda p: p.toggle())


@mcp.tool()
def stop_preview(ctx: Context) -> str:
    """Stop the preview and rewind to the first slide."""
    return _with_preview(lambda p: p.stop())


@mcp.tool()
def next_slide(ctx: Context) -> str:
    """Skip to the next slide of the preview (stops after the last one)."""
    return _with_preview(lambda p: p.advance())


@mcp.tool()
def seek_preview(ctx: Context, index: int) -> str:
    """Jump the preview to a slide position.

    Parameters:
    - index: 0-based slide position
    """
    return _with_preview(lambda p: p.seek(index))


@mcp.tool()
def preview_status(ctx: Context) -> str:
    """Current slide, time remaining and progress of the preview."""
    return _with_preview(lambda p: None)


@mcp.tool()
def close_preview(ctx: Context) -> str:
    """Close the preview and stop its clock."""
    global _preview
    if _preview is None:
        return "No preview is open."
    _preview.dispose()
    _preview = None
    return "Preview closed."


# ═══════════════════════════════════════════════════════════════════════
# EXPORT TOOLS
# ═══════════════════════════════════════════════════════════════════════

async def _run_export(job):
    await _session_state.pipeline.run(job)


@mcp.tool()
async def export_video(ctx: Context, title: str = "") -> str:
    """Export the current slides as a new video in the library.

    Runs in the background; poll export_status for progress.

    Parameters:
    - title: Optional title (defaults to "Video N")
    """
    try:
        job = _session_state.pipeline.start(title or None, _session_state.store)
    except ReelError as e:
        return _error(e)

    task = asyncio.get_running_loop().create_task(_run_export(job))
    _export_tasks.add(task)
    task.add_done_callback(_export_tasks.discard)
    return json.dumps({"status": "started", "job": job.summary()}, indent=2)


@mcp.tool()
def export_status(ctx: Context) -> str:
    """Progress of the running export, or the outcome of the last one."""
    job = _session_state.pipeline.last_job
    if job is None:
        return "No export has been started."
    return json.dumps(job.summary(), indent=2)


# ═══════════════════════════════════════════════════════════════════════
# VIDEO LIBRARY TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def list_videos(ctx: Context) -> str:
    """List generated videos, oldest first."""
    if len(_session_state.library) == 0:
        return "No videos yet. Use export_video."
    return json.dumps(_session_state.library.to_summary(), indent=2)


@mcp.tool()
def get_video(ctx: Context, video_id: str) -> str:
    """Get a generated video with its frozen slides.

    Parameters:
    - video_id: The video ID
    """
    try:
        video = _session_state.library.get(video_id)
    except ReelError as e:
        return _error(e)
    data = video.summary()
    data["slides"] = [_slide_dict(s) for s in video.slides]
    return json.dumps(data, indent=2)


@mcp.tool()
def delete_video(ctx: Context, video_id: str) -> str:
    """Delete a generated video (and close its replay, if open).

    Parameters:
    - video_id: The video ID
    """
    player = _replays.pop(video_id, None)
    if player is not None:
        player.dispose()
    if _session_state.library.remove(video_id):
        return f"Video '{video_id}' deleted. {len(_session_state.library)} videos remaining."
    return f"Video '{video_id}' was not in the library; nothing changed."


@mcp.tool()
async def replay_video(ctx: Context, video_id: str) -> str:
    """Play a generated video from its own frozen slides.

    Parameters:
    - video_id: The video ID
    """
    old = _replays.pop(video_id, None)
    if old is not None:
        old.dispose()
    try:
        player = _session_state.replay(video_id, clock=_make_clock())
        player.start()
    except ReelError as e:
        return _error(e)
    _replays[video_id] = player
    return json.dumps(player.status(), indent=2)


@mcp.tool()
def replay_status(ctx: Context, video_id: str) -> str:
    """Status of a video's replay.

    Parameters:
    - video_id: The video ID
    """
    player = _replays.get(video_id)
    if player is None:
        return _error(ReelError(f"No replay open for video '{video_id}'."))
    return json.dumps(player.status(), indent=2)


@mcp.tool()
def close_replay(ctx: Context, video_id: str) -> str:
    """Close a video's replay and stop its clock.

    Parameters:
    - video_id: The video ID
    """
    player = _replays.pop(video_id, None)
    if player is None:
        return f"No replay open for video '{video_id}'."
    player.dispose()
    return "Replay closed."


# ═══════════════════════════════════════════════════════════════════════
# MCP PROMPT
# ═══════════════════════════════════════════════════════════════════════

@mcp.prompt()
def reel_workflow() -> str:
    """Recommended workflow for building an opening reel"""
    return """You are helping the user build a short opening reel from slides. Follow this workflow:

1. **Add Content**: Use add_image_slide() or add_image_slides() for pictures
   (at most 5 images) and add_text_slide() for title cards and captions.
   - Use list_style_presets() to see the title, caption and credits styles

2. **Arrange**: Use get_slides() to review the order, then:
   - Use reorder_slide() to move a slide, or reorder_slides() for a full order
   - Use set_slide_duration() to adjust time on screen (1-10s, 0.5s steps)
   - Use set_text_style() to restyle text slides
   - Use remove_slide() for unwanted content

3. **Preview**: Use open_preview() to play the reel with cross-fades.
   - play_pause(), next_slide(), seek_preview() and stop_preview() control it
   - preview_status() shows the current slide and time left
   - close_preview() when done

4. **Export**: Use export_video() with an optional title, then poll export_status().

5. **Library**: Use list_videos() to see exported videos, replay_video() to watch
   one, and delete_video() to remove it. Exported videos never change when the
   slides are edited afterwards.

Tips:
- Use undo() if you make a mistake
- Only one export can run at a time
"""


# ── Main ────────────────────────────────────────────────────────────────

def main():
    """Run the MCP server"""
    mcp.run()


if __name__ == "__main__":
    main()
