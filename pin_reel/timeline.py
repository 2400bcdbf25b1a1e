"""Slideshow timeline planning.

The timeline is a pure function of a :class:`TimelinePlan`: every frame is
described by one or two :class:`RenderState` layers which the compositor
draws bottom to top.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Sequence, Tuple

from .config import AUDIO_STYLES, FIT_MODES, FPS, STATIC_SLIDE_SECONDS, TRANSITION_FRAMES, ZOOM_SPEED
from .compositor import zoom_scale


@dataclass(frozen=True)
class SlideSegment:
    """One still image slot of the timeline."""

    image: str
    order: int


@dataclass(frozen=True)
class TimelinePlan:
    segments: Tuple[SlideSegment, ...]
    per_slide_seconds: float = STATIC_SLIDE_SECONDS
    zoom: bool = True
    audio_style: str = "mute"
    fit_mode: str = "cover"
    width: int = 720
    height: int = 1280
    fps: int = FPS
    transition_frames: int = TRANSITION_FRAMES
    zoom_speed: float = field(default=ZOOM_SPEED, repr=False)

    def __post_init__(self) -> None:
        if self.per_slide_seconds <= 0:
            raise ValueError("per_slide_seconds must be > 0")
        if self.audio_style not in AUDIO_STYLES:
            raise ValueError(f"unknown audio style: {self.audio_style}")
        if self.fit_mode not in FIT_MODES:
            raise ValueError(f"unknown fit mode: {self.fit_mode}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("output size must be positive")
        if self.fps <= 0:
            raise ValueError("fps must be > 0")
        if self.transition_frames < 2:
            raise ValueError("transition_frames must be >= 2")

    @classmethod
    def from_images(
        cls,
        images: Sequence[str],
        speed: float = STATIC_SLIDE_SECONDS,
        **kwargs,
    ) -> "TimelinePlan":
        """Build a plan from ordered image references.

        ``speed`` is seconds per slide; ``0`` selects the static mode: no
        zoom and the fixed fallback duration.
        """
        segments = tuple(SlideSegment(image=ref, order=i) for i, ref in enumerate(images))
        if speed == 0:
            kwargs["zoom"] = False
            speed = STATIC_SLIDE_SECONDS
        return cls(segments=segments, per_slide_seconds=speed, **kwargs)

    @property
    def hold_frames(self) -> int:
        return max(1, int(round(self.per_slide_seconds * self.fps)))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class RenderState:
    """How to draw one segment in one frame."""

    segment_index: int
    local_frame: int
    scale: float
    alpha: float


class FramePhase(enum.Enum):
    HOLD = "hold"
    CROSSFADE = "crossfade"


@dataclass(frozen=True)
class FrameInstruction:
    index: int
    phase: FramePhase
    layers: Tuple[RenderState, ...]


def crossfade_alpha(f: int, frames: int) -> float:
    """Alpha of the incoming segment at transition frame *f*: 0 first, 1 last."""
    return f / float(frames - 1)


def total_frames(plan: TimelinePlan) -> int:
    n = len(plan.segments)
    if n == 0:
        return 0
    return n * plan.hold_frames + (n - 1) * plan.transition_frames


def audio_duration(plan: TimelinePlan) -> float:
    """Length of the music track requested for *plan*, in seconds."""
    return len(plan.segments) * (plan.hold_frames + plan.transition_frames) / float(plan.fps)


def plan_frames(plan: TimelinePlan) -> Iterator[FrameInstruction]:
    """Yield every frame of *plan* in playback order.

    The first segment holds from its local frame 0. Every later segment
    enters during a crossfade starting at scale 1 and then holds from local
    frame ``transition_frames`` on, so the zoom never jumps.
    """
    hold = plan.hold_frames
    T = plan.transition_frames
    n = len(plan.segments)
    index = 0
    for i in range(n):
        start = 0 if i == 0 else T
        for f in range(start, start + hold):
            state = RenderState(i, f, zoom_scale(f, plan.zoom, plan.zoom_speed), 1.0)
            yield FrameInstruction(index, FramePhase.HOLD, (state,))
            index += 1
        if i + 1 < n:
            end = start + hold
            for f in range(T):
                alpha = crossfade_alpha(f, T)
                exiting = RenderState(
                    i, end + f, zoom_scale(end + f, plan.zoom, plan.zoom_speed), 1.0
                )
                entering = RenderState(i + 1, f, zoom_scale(f, plan.zoom, plan.zoom_speed), alpha)
                yield FrameInstruction(index, FramePhase.CROSSFADE, (exiting, entering))
                index += 1
