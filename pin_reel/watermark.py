"""Draft watermark stamped on client previews."""
from __future__ import annotations

import logging
from typing import Union

from PIL import Image, ImageDraw

from .errors import DecodeError
from .loader import ImageRef, encode_png, load_image
from .text import load_font, shadow_pass

DEFAULT_TEXT = "DRAFT • PIN EMPIRE"
WATERMARK_FILL = (255, 255, 255, 102)
WATERMARK_SHADOW = (0, 0, 0, 128)
WATERMARK_SHADOW_BLUR = 10


def _stamp(canvas: Image.Image, mask: Image.Image) -> Image.Image:
    canvas = shadow_pass(canvas, mask, WATERMARK_SHADOW, WATERMARK_SHADOW_BLUR)
    layer = Image.new("RGBA", canvas.size, WATERMARK_FILL[:3] + (0,))
    layer.putalpha(mask.point(lambda v: v * WATERMARK_FILL[3] // 255))
    return Image.alpha_composite(canvas, layer)


def watermark_image(img: Image.Image, text: str = DEFAULT_TEXT) -> Image.Image:
    """Diagonal watermark across the centre plus a small footer line."""
    canvas = img.convert("RGBA")
    W, H = canvas.size
    size = W * 0.06

    font = load_font("sans-heavy", int(round(size)))
    left, top, right, bottom = font.getbbox(text, anchor="mm")
    pad = int(size)
    tw, th = int(right - left) + 2 * pad, int(bottom - top) + 2 * pad
    tile = Image.new("L", (tw, th), 0)
    ImageDraw.Draw(tile).text((tw / 2.0, th / 2.0), text, font=font, fill=255, anchor="mm")
    tile = tile.rotate(45, resample=Image.Resampling.BICUBIC, expand=True)
    diagonal = Image.new("L", canvas.size, 0)
    diagonal.paste(tile, (int(round(W / 2.0 - tile.width / 2.0)), int(round(H / 2.0 - tile.height / 2.0))))
    canvas = _stamp(canvas, diagonal)

    footer = Image.new("L", canvas.size, 0)
    small = load_font("sans-bold", int(round(size * 0.5)))
    ImageDraw.Draw(footer).text((W / 2.0, H - size), text, font=small, fill=255, anchor="mm")
    canvas = _stamp(canvas, footer)
    return canvas.convert(img.mode) if img.mode == "RGB" else canvas


def apply_watermark(ref: ImageRef, text: str = DEFAULT_TEXT) -> Union[bytes, ImageRef]:
    """Return PNG bytes of *ref* with the watermark, or *ref* if it cannot be loaded."""
    try:
        img = load_image(ref)
    except DecodeError as e:
        logging.warning("watermark skipped: %s", e)
        return ref
    return encode_png(watermark_image(img, text))
