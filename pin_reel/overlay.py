"""Still image edit engine.

An :class:`EditState` is applied to a pristine source in a fixed order:
colour filter, dimming, sticker, text and mockup frame. The result is a new
PNG; the source is never modified, so edits can be re-applied from the
original as often as needed with byte-identical results.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

import numpy as np
from PIL import Image

from .errors import DecodeError
from .filters import FILTER_PRESETS, apply_filter
from .loader import ImageRef, encode_png, load_image, to_data_url
from .mockups import MOCKUPS, apply_mockup
from .stickers import STICKERS, apply_sticker
from .text import TEXT_STYLES, draw_overlay_text

TEXT_POSITIONS = ("top", "mid", "bottom")
MAX_DIM = 0.8


@dataclass(frozen=True)
class EditState:
    filter_preset: str = "none"
    dim: float = 0.0
    overlay_text: str = ""
    sub_text: str = ""
    font_size_percent: float = 8.0
    text_position: str = "mid"
    text_style: str = "modern"
    sticker: str = "none"
    mockup: str = "none"

    def __post_init__(self) -> None:
        if self.filter_preset not in FILTER_PRESETS:
            raise ValueError(f"unknown filter preset: {self.filter_preset}")
        if not 0.0 <= self.dim <= MAX_DIM:
            raise ValueError(f"dim must be within [0, {MAX_DIM}]")
        if not 0.0 < self.font_size_percent <= 100.0:
            raise ValueError("font_size_percent must be within (0, 100]")
        if self.text_position not in TEXT_POSITIONS:
            raise ValueError(f"unknown text position: {self.text_position}")
        if self.text_style not in TEXT_STYLES:
            raise ValueError(f"unknown text style: {self.text_style}")
        if self.sticker not in STICKERS:
            raise ValueError(f"unknown sticker: {self.sticker}")
        if self.mockup not in MOCKUPS:
            raise ValueError(f"unknown mockup: {self.mockup}")


@dataclass(frozen=True)
class PinImage:
    """Pristine and current image of one pin, both as image references."""

    original: str
    current: Optional[str] = None

    @property
    def source(self) -> str:
        return self.original

    @property
    def shown(self) -> str:
        return self.current if self.current is not None else self.original


def _dim(canvas: Image.Image, amount: float) -> Image.Image:
    if amount <= 0:
        return canvas
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, int(round(amount * 255))))
    return Image.alpha_composite(canvas, layer)


def _filtered(img: Image.Image, preset: str) -> Image.Image:
    rgba = np.array(img.convert("RGBA"))
    rgba[..., :3] = apply_filter(rgba[..., :3], preset)
    return Image.fromarray(rgba, "RGBA")


def compose(img: Image.Image, edit: EditState) -> Image.Image:
    """Run the edit pipeline on decoded *img* and return the finished canvas."""
    canvas = _filtered(img, edit.filter_preset)
    canvas = _dim(canvas, edit.dim)
    canvas = apply_sticker(canvas, edit.sticker)
    if edit.overlay_text or edit.sub_text:
        canvas = draw_overlay_text(
            canvas,
            edit.overlay_text,
            edit.sub_text,
            edit.font_size_percent,
            edit.text_position,
            edit.text_style,
        )
    canvas = apply_mockup(canvas, edit.mockup)
    if img.mode == "RGB" and edit.mockup in ("none", "polaroid", "browser"):
        canvas = canvas.convert("RGB")
    return canvas


def render_edit(source: ImageRef, edit: EditState) -> Union[bytes, ImageRef]:
    """Apply *edit* to *source* and return the PNG bytes.

    If *source* cannot be loaded it is returned unchanged; a still edit is
    cosmetic and never fails the caller.
    """
    try:
        img = load_image(source)
    except DecodeError as e:
        logging.warning("edit skipped, source not loadable: %s", e)
        return source
    return encode_png(compose(img, edit))


def apply_edits(pin: PinImage, edit: EditState) -> PinImage:
    """Re-derive ``pin.current`` from ``pin.original`` with *edit*.

    The original reference is kept untouched. On a load failure *pin* is
    returned as it was.
    """
    out = render_edit(pin.source, edit)
    if not isinstance(out, bytes):
        return pin
    return replace(pin, current=to_data_url(out))
