"""Slideshow video builder.

Drives the frame compositor over a :class:`~pin_reel.timeline.TimelinePlan`
and feeds every frame, plus an optional procedural music track, into a
recording sink. A build either returns the complete encoded video or raises
a single :class:`~pin_reel.errors.SlideshowError`; partial output is never
returned.
"""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from .audio import AudioDestination, create_audio_track
from .compositor import Surface, draw_frame
from .errors import BuildCancelled, DecodeError, EmptyOutputError, SlideshowError
from .layers import clear_shadow_cache
from .loader import load_rgb_array
from .recorder import FFmpegRecordingSink, OutputFormat, RecordingSink, select_format
from .timeline import FramePhase, TimelinePlan, audio_duration, plan_frames, total_frames


class BuildState(enum.Enum):
    IDLE = "idle"
    RECORDING_STARTED = "recording_started"
    HOLD_FRAMES = "hold_frames"
    CROSSFADE_FRAMES = "crossfade_frames"
    RECORDING_STOPPED = "recording_stopped"
    ENCODED = "encoded"
    FAILED = "failed"
    CANCELLED = "cancelled"


_PHASE_STATES = {
    FramePhase.HOLD: BuildState.HOLD_FRAMES,
    FramePhase.CROSSFADE: BuildState.CROSSFADE_FRAMES,
}


@dataclass(frozen=True)
class VideoResult:
    data: bytes
    mime_type: str
    extension: str
    frame_count: int
    duration: float


class SlideshowBuilder:
    """One slideshow build. Instances are single use."""

    def __init__(
        self,
        plan: TimelinePlan,
        sink: Optional[RecordingSink] = None,
        realtime: bool = False,
        rng: Optional[np.random.Generator] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ):
        self.plan = plan
        self.sink = sink if sink is not None else FFmpegRecordingSink()
        self.realtime = realtime
        self.rng = rng
        self.sleep = sleep
        self.on_progress = on_progress
        self.state = BuildState.IDLE
        self.history: List[BuildState] = [BuildState.IDLE]
        self.frames_drawn = 0

    def _enter(self, state: BuildState) -> None:
        if state != self.state:
            self.state = state
            self.history.append(state)
            logging.debug("slideshow state: %s", state.value)

    def _load_images(self) -> List[np.ndarray]:
        images = []
        for seg in sorted(self.plan.segments, key=lambda s: s.order):
            try:
                images.append(load_rgb_array(seg.image))
            except DecodeError as e:
                raise DecodeError(f"image load failed for slide {seg.order + 1}: {e}") from e
        return images

    def _make_audio(self) -> Optional[AudioDestination]:
        if self.plan.audio_style == "mute":
            return None
        dest = AudioDestination()
        try:
            create_audio_track(self.plan.audio_style, dest, audio_duration(self.plan), self.rng)
        except Exception as e:
            # music is optional; any failure records a silent video
            logging.warning("audio synthesis failed, continuing without music: %s: %s", type(e).__name__, e)
            return None
        return dest

    def build(self, should_cancel: Optional[Callable[[], bool]] = None) -> VideoResult:
        """Run the build and return the encoded video.

        *should_cancel* is polled between frames; once it returns true the
        recording is aborted and :class:`BuildCancelled` is raised.
        """
        if self.state != BuildState.IDLE:
            raise SlideshowError("a SlideshowBuilder can only build once")
        plan = self.plan
        if not plan.segments:
            self._enter(BuildState.FAILED)
            raise ValueError("at least one slide is required")

        try:
            fmt = select_format(self.sink.supported_formats())
            images = self._load_images()
        except SlideshowError:
            self._enter(BuildState.FAILED)
            raise
        audio = self._make_audio()

        surface = Surface(plan.width, plan.height)
        handle = None
        try:
            handle = self.sink.begin(surface, plan.fps, fmt, audio)
            self._enter(BuildState.RECORDING_STARTED)
            self._draw_all(surface, images, handle, should_cancel)
            self._enter(BuildState.RECORDING_STOPPED)
            data = self.sink.stop(handle)
            handle = None
            if not data:
                raise EmptyOutputError("recording sink returned no data")
        except BuildCancelled:
            self._enter(BuildState.CANCELLED)
            raise
        except SlideshowError:
            self._enter(BuildState.FAILED)
            raise
        except Exception as e:
            self._enter(BuildState.FAILED)
            raise SlideshowError(f"slideshow rendering failed: {e}") from e
        finally:
            if handle is not None:
                self.sink.abort(handle)
            clear_shadow_cache()

        self._enter(BuildState.ENCODED)
        frames = self.frames_drawn
        logging.info("slideshow encoded: %d frames, %d bytes (%s)", frames, len(data), fmt.mime_type)
        return VideoResult(
            data=data,
            mime_type=fmt.mime_type,
            extension=fmt.extension,
            frame_count=frames,
            duration=frames / float(plan.fps),
        )

    def _draw_all(self, surface, images, handle, should_cancel) -> None:
        plan = self.plan
        expected = total_frames(plan)
        backdrops: Dict[int, np.ndarray] = {}
        interval = 1.0 / plan.fps
        for frame in plan_frames(plan):
            if should_cancel is not None and should_cancel():
                raise BuildCancelled(f"cancelled at frame {frame.index} of {expected}")
            self._enter(_PHASE_STATES[frame.phase])
            started = time.monotonic()
            for depth, layer in enumerate(frame.layers):
                draw_frame(
                    surface,
                    images[layer.segment_index],
                    layer.scale,
                    layer.alpha,
                    plan.fit_mode,
                    backdrops=backdrops,
                    base_layer=depth == 0,
                )
            self.sink.capture(handle)
            self.frames_drawn += 1
            if self.on_progress is not None:
                self.on_progress(self.frames_drawn, expected)
            if self.realtime:
                remaining = interval - (time.monotonic() - started)
                if remaining > 0:
                    self.sleep(remaining)


def create_slideshow_video(
    images: Sequence[str],
    speed: float = 2.5,
    width: int = 720,
    height: int = 1280,
    audio_style: str = "mute",
    fit_mode: str = "cover",
    sink: Optional[RecordingSink] = None,
    **kwargs,
) -> VideoResult:
    """Build a slideshow video from ordered image references.

    ``speed`` is seconds per slide; ``0`` renders the static variant without
    zoom. Remaining keyword arguments go to :class:`SlideshowBuilder`.
    """
    if not images:
        raise ValueError("at least one slide is required")
    plan = TimelinePlan.from_images(
        images,
        speed=speed,
        width=width,
        height=height,
        audio_style=audio_style,
        fit_mode=fit_mode,
    )
    return SlideshowBuilder(plan, sink=sink, **kwargs).build()


def default_format(sink: Optional[RecordingSink] = None) -> OutputFormat:
    """Return the format a build with *sink* would record in."""
    sink = sink if sink is not None else FFmpegRecordingSink()
    return select_format(sink.supported_formats())
