"""Frame compositing for slideshow videos."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

import numpy as np

from .config import FIT_MODES, ZOOM_SPEED
from .layers import drop_shadow
from .utils import clip_rect, gaussian_blur, resize

BG_OVERSCAN = 1.1
BG_BLUR = 20
BG_BRIGHTNESS = 0.6
FG_FIT = 0.9
FG_SHADOW = dict(strength=0.5, blur=20, offset_xy=(0, 10))


class Surface:
    """Fixed-size RGB drawing surface.

    ``global_alpha`` applies to every :meth:`blit`. It is only changed
    through :meth:`opacity`, which restores the previous value on exit.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid surface size: {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.pixels = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self.global_alpha = 1.0

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def fill(self, color: Tuple[int, int, int] = (0, 0, 0)) -> None:
        self.pixels[:] = color

    @contextmanager
    def opacity(self, alpha: float) -> Iterator["Surface"]:
        prev = self.global_alpha
        self.global_alpha = float(min(1.0, max(0.0, alpha)))
        try:
            yield self
        finally:
            self.global_alpha = prev

    def blit(self, img: np.ndarray, x: int, y: int) -> None:
        """Draw RGB *img* with its top-left at ``(x, y)``, clipped to the surface."""
        region = clip_rect(self.pixels.shape, img.shape, x, y)
        if region is None:
            return
        rows, cols, srows, scols = region
        src = img[srows, scols]
        a = self.global_alpha
        if a >= 1.0:
            self.pixels[rows, cols] = src
        elif a > 0.0:
            dst = self.pixels[rows, cols].astype(np.float32)
            out = src.astype(np.float32) * a + dst * (1.0 - a)
            self.pixels[rows, cols] = np.clip(out + 0.5, 0, 255).astype(np.uint8)

    def snapshot(self) -> np.ndarray:
        return self.pixels.copy()


def zoom_scale(frame: int, zoom: bool, speed: float = ZOOM_SPEED) -> float:
    """Return the Ken Burns scale factor for local *frame* of a segment."""
    return 1.0 + frame * speed if zoom else 1.0


def _placement(img_w: int, img_h: int, W: int, H: int, scale: float) -> Tuple[int, int, int, int]:
    w = max(1, int(round(img_w * scale)))
    h = max(1, int(round(img_h * scale)))
    return (W - w) // 2, (H - h) // 2, w, h


def cover_rect(img_shape, size: Tuple[int, int], scale: float) -> Tuple[int, int, int, int]:
    """Return ``(x, y, w, h)`` of *img* filling ``size`` at zoom *scale*."""
    W, H = size
    h, w = img_shape[:2]
    fit = max(W / w, H / h) * scale
    return _placement(w, h, W, H, fit)


def contain_rect(img_shape, size: Tuple[int, int], scale: float) -> Tuple[int, int, int, int]:
    """Return ``(x, y, w, h)`` of *img* fitted inside 90% of ``size``."""
    W, H = size
    h, w = img_shape[:2]
    fit = min(W / w, H / h) * FG_FIT * scale
    return _placement(w, h, W, H, fit)


def backdrop(img: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Blurred, darkened over-fill of *img* used behind contained frames."""
    W, H = size
    h, w = img.shape[:2]
    fit = max(W / w, H / h) * BG_OVERSCAN
    x, y, bw, bh = _placement(w, h, W, H, fit)
    scaled = resize(img, (bw, bh))
    canvas = np.zeros((H, W, 3), dtype=np.uint8)
    region = clip_rect(canvas.shape, scaled.shape, x, y)
    if region is not None:
        rows, cols, srows, scols = region
        canvas[rows, cols] = scaled[srows, scols]
    canvas = gaussian_blur(canvas, BG_BLUR)
    return np.clip(canvas.astype(np.float32) * BG_BRIGHTNESS, 0, 255).astype(np.uint8)


def draw_frame(
    surface: Surface,
    img: np.ndarray,
    scale: float,
    alpha: float,
    fit_mode: str,
    backdrops: Optional[Dict[int, np.ndarray]] = None,
    base_layer: bool = True,
) -> None:
    """Draw *img* onto *surface* at zoom *scale* and opacity *alpha*.

    ``cover`` fills the whole surface, cropping overflow. ``contain`` lays
    a blurred backdrop of the image and then the image itself, fitted
    inside 90% of the surface, with a drop shadow.

    A *base_layer* starts a new frame: the surface is cleared to black
    first, so a translucent image never shows the previous frame through.
    Layers stacked on top of an already drawn one pass ``base_layer=False``.
    *backdrops* caches the contain backdrop per image between frames.
    """
    if fit_mode not in FIT_MODES:
        raise ValueError(f"unknown fit mode: {fit_mode}")
    size = surface.size
    if base_layer:
        surface.fill((0, 0, 0))
    with surface.opacity(alpha):
        if fit_mode == "cover":
            x, y, w, h = cover_rect(img.shape, size, scale)
            surface.blit(resize(img, (w, h)), x, y)
            return

        key = id(img)
        bg = backdrops.get(key) if backdrops is not None else None
        if bg is None:
            bg = backdrop(img, size)
            if backdrops is not None:
                backdrops[key] = bg
        surface.blit(bg, 0, 0)
        x, y, w, h = contain_rect(img.shape, size, scale)
        drop_shadow(
            surface.pixels,
            (x, y, w, h),
            strength=FG_SHADOW["strength"] * surface.global_alpha,
            blur=FG_SHADOW["blur"],
            offset_xy=FG_SHADOW["offset_xy"],
        )
        surface.blit(resize(img, (w, h)), x, y)
