"""Promo sticker badges drawn onto still edits."""
from __future__ import annotations

import math
from typing import List, Tuple

from PIL import Image, ImageDraw

from .text import hex_color, load_font

STICKERS = ("none", "sale", "new", "hit", "best")

STICKER_SIZE = 0.25
STICKER_OFFSET = 0.1
STICKER_ROTATION = 18.0  # degrees, counter-clockwise


def star_points(cx: float, cy: float, outer: float, inner: float, spikes: int = 5) -> List[Tuple[float, float]]:
    """Vertices of a star with its first spike pointing up."""
    step = math.pi / spikes
    rot = math.pi * 1.5
    pts = []
    for _ in range(spikes):
        pts.append((cx + math.cos(rot) * outer, cy + math.sin(rot) * outer))
        rot += step
        pts.append((cx + math.cos(rot) * inner, cy + math.sin(rot) * inner))
        rot += step
    return pts


def _label(draw: ImageDraw.ImageDraw, c: float, text: str, size: float, fill) -> None:
    font = load_font("sans-bold", int(round(size)))
    draw.text((c, c), text, font=font, fill=fill, anchor="mm")


def render_sticker(kind: str, size: float) -> Image.Image:
    """Return an unrotated RGBA tile of side ``2 * size`` with the badge centred."""
    s = float(size)
    side = int(math.ceil(2 * s))
    c = side / 2.0
    tile = Image.new("RGBA", (side, side), (0, 0, 0, 0))
    draw = ImageDraw.Draw(tile)
    if kind == "sale":
        draw.ellipse((c - s / 2, c - s / 2, c + s / 2, c + s / 2), fill=hex_color("#e53e3e"))
        _label(draw, c, "SALE", s * 0.4, "white")
    elif kind == "new":
        draw.rounded_rectangle(
            (c - s / 2, c - s / 4, c + s / 2, c + s / 4), radius=min(10.0, s / 4), fill=hex_color("#48bb78")
        )
        _label(draw, c, "NEW", s * 0.35, "white")
    elif kind == "hit":
        draw.polygon(star_points(c, c, s / 2, s / 4), fill=hex_color("#d69e2e"))
        _label(draw, c, "HIT", s * 0.3, "black")
    elif kind == "best":
        gold = hex_color("#d4af37")
        # radius is capped to half the side, so the badge is a disc
        radius = min(100.0, s / 2)
        draw.rounded_rectangle(
            (c - s / 2, c - s / 2, c + s / 2, c + s / 2),
            radius=radius,
            fill=(0, 0, 0),
            outline=gold,
            width=5,
        )
        _label(draw, c, "BEST", s * 0.3, gold)
    else:
        raise ValueError(f"unknown sticker: {kind}")
    return tile


def apply_sticker(canvas: Image.Image, kind: str) -> Image.Image:
    """Composite sticker *kind* onto RGBA *canvas* near its top-left corner."""
    if kind == "none":
        return canvas
    W, H = canvas.size
    s = W * STICKER_SIZE
    tile = render_sticker(kind, s).rotate(STICKER_ROTATION, resample=Image.Resampling.BICUBIC)
    cx = W * STICKER_OFFSET + s / 2
    cy = H * STICKER_OFFSET + s / 2
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    layer.paste(tile, (int(round(cx - tile.width / 2)), int(round(cy - tile.height / 2))))
    return Image.alpha_composite(canvas, layer)
