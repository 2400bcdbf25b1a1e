"""Text layout and styled text rendering for still overlays."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .config import FONT_DIR

Color = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]

WRAP_RATIO = 0.9
LINE_HEIGHT = 1.2
SUB_TEXT_RATIO = 0.6
BAND_PADDING = 0.5

FONT_FAMILIES = {
    "sans-bold": (
        "Inter-Bold.ttf",
        "DejaVuSans-Bold.ttf",
        "LiberationSans-Bold.ttf",
        "Arial Bold.ttf",
        "arialbd.ttf",
    ),
    "sans-heavy": (
        "Inter-ExtraBold.ttf",
        "Inter-Bold.ttf",
        "DejaVuSans-Bold.ttf",
        "LiberationSans-Bold.ttf",
        "arialbd.ttf",
    ),
    "serif": (
        "Georgia.ttf",
        "georgia.ttf",
        "DejaVuSerif.ttf",
        "LiberationSerif-Regular.ttf",
    ),
    "serif-black": (
        "Times New Roman Bold.ttf",
        "timesbd.ttf",
        "DejaVuSerif-Bold.ttf",
        "LiberationSerif-Bold.ttf",
    ),
    "mono": (
        "Courier New.ttf",
        "cour.ttf",
        "DejaVuSansMono.ttf",
        "LiberationMono-Regular.ttf",
    ),
}

_SYSTEM_FONT_DIRS = (
    "/usr/share/fonts/truetype/dejavu",
    "/usr/share/fonts/truetype/liberation",
    "/usr/share/fonts/TTF",
    "/Library/Fonts",
    "/System/Library/Fonts/Supplemental",
)


def _font_dirs() -> List[str]:
    dirs = [FONT_DIR] if FONT_DIR else []
    return dirs + list(_SYSTEM_FONT_DIRS)


@lru_cache(maxsize=128)
def load_font(family: str, size: int) -> ImageFont.FreeTypeFont:
    """Return a TrueType font of *family* at pixel *size*.

    ``PIN_REEL_FONT_DIR`` is searched first, then common system locations,
    then Pillow's own lookup by file name. Pillow's bundled scalable font is
    the last resort, so this never fails.
    """
    if family not in FONT_FAMILIES:
        raise ValueError(f"unknown font family: {family}")
    size = max(1, int(size))
    for name in FONT_FAMILIES[family]:
        for d in _font_dirs():
            path = os.path.join(d, name)
            if os.path.isfile(path):
                try:
                    return ImageFont.truetype(path, size)
                except OSError as e:
                    logging.debug("font %s unusable: %s", path, e)
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logging.debug("no %s font found, using Pillow default", family)
    return ImageFont.load_default(size=size)


def text_width(font: ImageFont.FreeTypeFont, text: str) -> float:
    return float(font.getlength(text))


def wrap_text(text: str, font: ImageFont.FreeTypeFont, max_width: float) -> List[str]:
    """Greedy word wrap of *text* to *max_width* pixels.

    A line is broken before a word when the line plus the word and a
    trailing space would overflow. The first word of a line is never
    moved, so a single word wider than *max_width* stays alone on its line.
    """
    words = text.split(" ")
    lines: List[str] = []
    line = ""
    for n, word in enumerate(words):
        candidate = line + word + " "
        if n > 0 and text_width(font, candidate) > max_width:
            lines.append(line)
            line = word + " "
        else:
            line = candidate
    lines.append(line)
    return [l.strip() for l in lines]


@dataclass(frozen=True)
class TextBlock:
    """A wrapped, vertically centred block of lines."""

    lines: Tuple[str, ...]
    size: float
    line_height: float
    start_y: float

    @property
    def total_height(self) -> float:
        return len(self.lines) * self.line_height

    @property
    def top(self) -> float:
        return self.start_y - self.line_height / 2

    @property
    def bottom(self) -> float:
        return self.top + self.total_height

    def band(self) -> Tuple[float, float]:
        """Vertical extent ``(top, height)`` of the magazine band behind the block."""
        padding = self.size * BAND_PADDING
        return self.top - padding / 2, self.total_height + padding


def layout_text(
    text: str, font: ImageFont.FreeTypeFont, size: float, canvas_width: int, center_y: float
) -> TextBlock:
    lines = wrap_text(text, font, canvas_width * WRAP_RATIO)
    lh = size * LINE_HEIGHT
    total = len(lines) * lh
    return TextBlock(tuple(lines), size, lh, center_y - total / 2 + lh / 2)


@dataclass(frozen=True)
class TextStyle:
    family: str
    fill: Color = (255, 255, 255)
    shadow: Optional[RGBA] = None
    shadow_blur: float = 0.0  # relative to font size
    gradient: Optional[Sequence[Color]] = None
    band: bool = False


GOLD_GRADIENT = ((0xFC, 0xF6, 0xBA), (0xBF, 0x95, 0x3F), (0xFC, 0xF6, 0xBA))

TEXT_STYLES = {
    "modern": TextStyle("sans-bold", shadow=(0, 0, 0, 204), shadow_blur=0.5),
    "minimal": TextStyle("sans-heavy", shadow=(0, 0, 0, 128), shadow_blur=0.3),
    "neon": TextStyle("sans-heavy", shadow=(0, 255, 255, 255), shadow_blur=0.8),
    "luxury": TextStyle("serif", shadow=(0, 0, 0, 230), shadow_blur=0.4, gradient=GOLD_GRADIENT),
    "magazine": TextStyle("serif-black", band=True),
}


def hex_color(value: str) -> Color:
    value = value.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    return tuple(int(value[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def composite_mask(canvas: Image.Image, mask: Image.Image, fill, opacity: float = 1.0) -> Image.Image:
    """Composite *fill* (colour or RGB image) onto RGBA *canvas* through *mask*."""
    if isinstance(fill, Image.Image):
        layer = fill.convert("RGBA")
    else:
        layer = Image.new("RGBA", canvas.size, tuple(fill[:3]) + (0,))
    alpha = mask
    if opacity < 1.0:
        alpha = mask.point(lambda v: int(v * opacity + 0.5))
    layer.putalpha(alpha)
    return Image.alpha_composite(canvas, layer)


def shadow_pass(
    canvas: Image.Image, mask: Image.Image, color: RGBA, blur: float, offset: Tuple[int, int] = (0, 0)
) -> Image.Image:
    """Composite a blurred copy of *mask* in *color* under the next drawing."""
    shadow = mask
    if offset != (0, 0):
        shadow = Image.new("L", mask.size, 0)
        shadow.paste(mask, offset)
    if blur > 0:
        # canvas shadowBlur is twice the Gaussian sigma
        shadow = shadow.filter(ImageFilter.GaussianBlur(blur / 2.0))
    return composite_mask(canvas, shadow, color[:3], color[3] / 255.0)


def vertical_gradient(size: Tuple[int, int], y0: float, y1: float, stops: Sequence[Color]) -> Image.Image:
    """RGB image whose rows run through *stops* evenly from *y0* to *y1*."""
    W, H = size
    rows = np.arange(H, dtype=np.float32)
    t = np.clip((rows - y0) / max(1e-6, y1 - y0), 0.0, 1.0)
    xp = np.linspace(0.0, 1.0, len(stops))
    cols = np.stack([np.interp(t, xp, [c[i] for c in stops]) for i in range(3)], axis=-1)
    arr = np.repeat(cols[:, None, :], W, axis=1)
    return Image.fromarray((arr + 0.5).astype(np.uint8), "RGB")


def draw_text_block(
    canvas: Image.Image,
    text: str,
    center_y: float,
    size: float,
    style: str,
    band_color: Color = (0, 0, 0),
) -> Tuple[Image.Image, TextBlock]:
    """Render *text* centred on *center_y* in the named *style*.

    Parameters
    ----------
    canvas:
        RGBA image; a new composited image is returned.
    text:
        Text to wrap at 90% of the canvas width.
    center_y:
        Vertical centre of the whole wrapped block.
    size:
        Font size in pixels.
    style:
        Key of :data:`TEXT_STYLES`.
    band_color:
        Fill of the full-width band for ``magazine``.
    """
    recipe = TEXT_STYLES[style]
    font = load_font(recipe.family, int(round(size)))
    W, H = canvas.size
    block = layout_text(text, font, size, W, center_y)

    if recipe.band:
        top, height = block.band()
        band = Image.new("L", canvas.size, 0)
        ImageDraw.Draw(band).rectangle(
            (0, int(round(top)), W, int(round(top + height)) - 1), fill=255
        )
        canvas = composite_mask(canvas, band, band_color)

    mask = Image.new("L", canvas.size, 0)
    draw = ImageDraw.Draw(mask)
    y = block.start_y
    for line in block.lines:
        draw.text((W / 2.0, y), line, font=font, fill=255, anchor="mm")
        y += block.line_height

    if recipe.shadow is not None:
        canvas = shadow_pass(canvas, mask, recipe.shadow, recipe.shadow_blur * size)
    if recipe.gradient is not None:
        fill = vertical_gradient(canvas.size, center_y - size, center_y + size, recipe.gradient)
    else:
        fill = recipe.fill
    return composite_mask(canvas, mask, fill), block


def draw_overlay_text(
    canvas: Image.Image,
    overlay_text: str,
    sub_text: str,
    font_size_percent: float,
    position: str,
    style: str,
) -> Image.Image:
    """Draw the headline and the optional sub-text of an edit."""
    W, H = canvas.size
    size = W * font_size_percent / 100.0
    anchor = {"top": 0.15, "mid": 0.5, "bottom": 0.85}[position] * H
    sub_size = size * SUB_TEXT_RATIO

    sub_center = anchor + size * 1.5
    if overlay_text:
        canvas, block = draw_text_block(canvas, overlay_text, anchor, size, style)
        if sub_text:
            # sub block starts below the headline block, clear of both bands
            gap = (size + sub_size) * BAND_PADDING / 2
            font = load_font(TEXT_STYLES[style].family, int(round(sub_size)))
            sub_block = layout_text(sub_text, font, sub_size, W, 0.0)
            sub_center = block.bottom + gap + sub_block.total_height / 2
    if sub_text:
        canvas, _ = draw_text_block(canvas, sub_text, sub_center, sub_size, style, band_color=(0x33,) * 3)
    return canvas
