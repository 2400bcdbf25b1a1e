"""Pin reel package: still overlays and slideshow videos for pins."""

__all__ = ["create_slideshow_video", "render_edit", "apply_edits"]


def create_slideshow_video(*args, **kwargs):
    from .slideshow import create_slideshow_video as _create_slideshow_video

    return _create_slideshow_video(*args, **kwargs)


def render_edit(*args, **kwargs):
    from .overlay import render_edit as _render_edit

    return _render_edit(*args, **kwargs)


def apply_edits(*args, **kwargs):
    from .overlay import apply_edits as _apply_edits

    return _apply_edits(*args, **kwargs)
