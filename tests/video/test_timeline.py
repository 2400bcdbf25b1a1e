import pytest

from pin_reel.config import ZOOM_SPEED
from pin_reel.timeline import (
    FramePhase,
    TimelinePlan,
    audio_duration,
    crossfade_alpha,
    plan_frames,
    total_frames,
)


def _plan(n, **kwargs):
    return TimelinePlan.from_images([f"img{i}.png" for i in range(n)], **kwargs)


def test_three_slides_frame_count():
    plan = _plan(3, speed=2.5)
    assert plan.hold_frames == 75
    assert total_frames(plan) == 265
    frames = list(plan_frames(plan))
    assert len(frames) == 265
    assert [f.index for f in frames] == list(range(265))
    assert sum(f.phase == FramePhase.CROSSFADE for f in frames) == 40


def test_single_slide_has_no_crossfade():
    plan = _plan(1, speed=2.5)
    frames = list(plan_frames(plan))
    assert len(frames) == 75
    assert all(f.phase == FramePhase.HOLD and len(f.layers) == 1 for f in frames)
    assert all(f.layers[0].alpha == 1.0 for f in frames)


def test_crossfade_alpha_endpoints():
    alphas = [crossfade_alpha(f, 20) for f in range(20)]
    assert alphas[0] == 0.0
    assert alphas[-1] == 1.0
    assert all(b > a for a, b in zip(alphas, alphas[1:]))


def test_crossfade_layers_order_and_zoom():
    plan = _plan(2, speed=1.0)
    frames = list(plan_frames(plan))
    hold = plan.hold_frames
    first = frames[hold]
    assert first.phase == FramePhase.CROSSFADE
    exiting, entering = first.layers
    assert exiting.segment_index == 0 and exiting.alpha == 1.0
    assert exiting.local_frame == hold
    assert entering.segment_index == 1 and entering.local_frame == 0
    assert entering.scale == 1.0 and entering.alpha == 0.0
    last = frames[hold + plan.transition_frames - 1]
    assert last.layers[1].alpha == 1.0


def test_entering_zoom_continues_into_hold():
    plan = _plan(2, speed=1.0)
    frames = list(plan_frames(plan))
    T = plan.transition_frames
    last_fade = frames[plan.hold_frames + T - 1].layers[1]
    first_hold = frames[plan.hold_frames + T].layers[0]
    assert first_hold.segment_index == 1
    assert first_hold.local_frame == T
    assert first_hold.scale - last_fade.scale == pytest.approx(ZOOM_SPEED)


def test_static_mode_disables_zoom():
    plan = _plan(2, speed=0)
    assert plan.zoom is False
    assert plan.per_slide_seconds == 2.5
    assert all(l.scale == 1.0 for f in plan_frames(plan) for l in f.layers)


def test_audio_duration():
    plan = _plan(3, speed=2.5)
    assert audio_duration(plan) == pytest.approx(3 * 95 / 30.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"speed": -1},
        {"audio_style": "jazz"},
        {"fit_mode": "stretch"},
        {"width": 0},
        {"transition_frames": 1},
    ],
)
def test_invalid_plans(kwargs):
    with pytest.raises(ValueError):
        _plan(2, **kwargs)


def test_empty_plan_has_no_frames():
    plan = TimelinePlan(segments=())
    assert total_frames(plan) == 0
    assert list(plan_frames(plan)) == []
