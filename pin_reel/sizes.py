"""Output frame sizes for slideshow videos."""
from __future__ import annotations

from typing import Tuple

QUALITIES = ("720p", "1080p")
ASPECTS = ("1:1", "3:4", "16:9", "9:16")

_SIZES = {
    "720p": {"1:1": (720, 720), "3:4": (720, 960), "16:9": (1280, 720), "9:16": (720, 1280)},
    "1080p": {"1:1": (1080, 1080), "3:4": (1080, 1440), "16:9": (1920, 1080), "9:16": (1080, 1920)},
}


def resolve_output_size(quality: str = "720p", aspect: str = "9:16", fit_mode: str = "cover") -> Tuple[int, int]:
    """Return ``(width, height)`` of the video for *quality* and *aspect*.

    Unknown aspects fall back to portrait 9:16. A square pin in ``contain``
    mode is also rendered portrait, leaving room for the blurred backdrop.
    """
    if quality not in _SIZES:
        raise ValueError(f"unknown quality: {quality}")
    if aspect not in ASPECTS or (fit_mode == "contain" and aspect == "1:1"):
        aspect = "9:16"
    return _SIZES[quality][aspect]
