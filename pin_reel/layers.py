"""Layer effects utilities."""
from __future__ import annotations

from functools import lru_cache
from typing import Tuple

import numpy as np

from .utils import clip_rect, gaussian_blur

# masks are about frame sized and contain zoom makes a new one per frame;
# keep only the most recent
SHADOW_CACHE_SIZE = 4


@lru_cache(maxsize=SHADOW_CACHE_SIZE)
def shadow_mask(w: int, h: int, blur: int) -> np.ndarray:
    """Return a float32 mask of a ``w``×``h`` rectangle softened by *blur*.

    The mask is padded by ``2 * blur`` on every side so the falloff is not
    cut off. The most recent masks are cached and returned read-only.
    """
    pad = 2 * blur
    mask = np.zeros((h + 2 * pad, w + 2 * pad), dtype=np.float32)
    mask[pad : pad + h, pad : pad + w] = 1.0
    if blur > 0:
        mask = gaussian_blur(mask, blur / 2.0)
    mask.setflags(write=False)
    return mask


def shadow_cache_stats() -> Tuple[int, int]:
    """Return ``(hits, misses)`` of the shadow mask cache."""
    info = shadow_mask.cache_info()
    return info.hits, info.misses


def clear_shadow_cache() -> None:
    """Drop every cached shadow mask."""
    shadow_mask.cache_clear()


def drop_shadow(
    canvas: np.ndarray,
    rect: Tuple[int, int, int, int],
    strength: float = 0.5,
    blur: int = 20,
    offset_xy: Tuple[int, int] = (0, 10),
) -> None:
    """Darken *canvas* in place under ``rect = (x, y, w, h)`` like a CSS shadow."""
    x, y, w, h = rect
    if w <= 0 or h <= 0 or strength <= 0:
        return
    mask = shadow_mask(int(w), int(h), int(blur))
    pad = 2 * blur
    ox, oy = offset_xy
    region = clip_rect(canvas.shape, mask.shape, x - pad + ox, y - pad + oy)
    if region is None:
        return
    rows, cols, srows, scols = region
    dst = canvas[rows, cols].astype(np.float32)
    mult = (1.0 - strength * mask[srows, scols])[..., None]
    canvas[rows, cols] = np.clip(dst * mult, 0, 255).astype(np.uint8)
