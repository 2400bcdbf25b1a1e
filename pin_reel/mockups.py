"""Device and print mockup frames around finished edits.

Every mockup returns a new, larger RGBA canvas with the content placed
inside; the content itself is never rescaled.
"""
from __future__ import annotations

import numpy as np
from PIL import Image, ImageDraw

from .text import hex_color, load_font

MOCKUPS = ("none", "phone", "polaroid", "browser")

POLAROID_CAPTION = "pin empire collection"
POLAROID_GRAIN_DOTS = 100
POLAROID_GRAIN_SEED = 7


def _rounded_mask(size, box, radius: float) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle(box, radius=int(round(radius)), fill=255)
    return mask


def _diagonal_glass(size) -> Image.Image:
    """White sheen: alpha 0.1 at the top-left, 0 mid-diagonal, 0.05 at the bottom-right."""
    W, H = size
    yy, xx = np.mgrid[0:H, 0:W].astype(np.float32)
    t = (xx * W + yy * H) / float(W * W + H * H)
    alpha = np.interp(t, [0.0, 0.5, 1.0], [0.1, 0.0, 0.05]) * 255.0
    layer = np.full((H, W, 4), 255, dtype=np.uint8)
    layer[..., 3] = (alpha + 0.5).astype(np.uint8)
    return Image.fromarray(layer, "RGBA")


def polaroid(content: Image.Image) -> Image.Image:
    W, H = content.size
    pad = int(round(W * 0.1))
    bottom = int(round(W * 0.3))
    fw, fh = W + 2 * pad, H + pad + bottom
    frame = Image.new("RGBA", (fw, fh), hex_color("#fdfdfd") + (255,))

    # fixed seed: the same edit must always give the same bytes
    rng = np.random.default_rng(POLAROID_GRAIN_SEED)
    grain = Image.new("RGBA", (fw, fh), (0, 0, 0, 0))
    gdraw = ImageDraw.Draw(grain)
    for x, y in zip(rng.uniform(0, fw, POLAROID_GRAIN_DOTS), rng.uniform(0, fh, POLAROID_GRAIN_DOTS)):
        gdraw.rectangle((int(x), int(y), int(x) + 1, int(y) + 1), fill=(0, 0, 0, 5))
    frame = Image.alpha_composite(frame, grain)

    frame.alpha_composite(content, (pad, pad))
    font = load_font("mono", int(round(fw * 0.05)))
    ImageDraw.Draw(frame).text(
        (fw / 2.0, fh - bottom / 2.0), POLAROID_CAPTION, font=font, fill=hex_color("#333"), anchor="ms"
    )
    return frame


def phone(content: Image.Image) -> Image.Image:
    W, H = content.size
    border = int(round(W * 0.05))
    fw, fh = W + 2 * border, H + 2 * border
    r = border * 2.5

    frame = Image.new("RGBA", (fw, fh), (0, 0, 0, 0))
    body = _rounded_mask((fw, fh), (0, 0, fw - 1, fh - 1), r)
    frame.paste(hex_color("#1a1a1a") + (255,), (0, 0, fw, fh), body)

    screen = Image.new("RGBA", (fw, fh), (0, 0, 0, 0))
    screen.paste(content, (border, border))
    clip = _rounded_mask((fw, fh), (border, border, border + W - 1, border + H - 1), r * 0.8)
    screen.putalpha(Image.fromarray(np.minimum(np.array(screen.getchannel("A")), np.array(clip))))
    frame = Image.alpha_composite(frame, screen)

    notch_w = fw * 0.3
    notch_h = border * 1.5
    nx = (fw - notch_w) / 2.0
    ImageDraw.Draw(frame).rounded_rectangle(
        (nx, border, nx + notch_w, border + notch_h), radius=min(20.0, notch_h / 2), fill=(0, 0, 0, 255)
    )

    glass = _diagonal_glass((fw, fh))
    glass.putalpha(Image.fromarray(np.minimum(np.array(glass.getchannel("A")), np.array(body))))
    return Image.alpha_composite(frame, glass)


def browser(content: Image.Image) -> Image.Image:
    W, H = content.size
    header = int(round(W * 0.08))
    frame = Image.new("RGBA", (W, H + header), (0, 0, 0, 0))
    draw = ImageDraw.Draw(frame)
    draw.rectangle((0, 0, W - 1, header - 1), fill=hex_color("#e5e5e5") + (255,))

    r = header * 0.25
    cy = header / 2.0
    x0 = header * 0.5
    for i, color in enumerate(("#ff5f56", "#ffbd2e", "#27c93f")):
        cx = x0 + i * 3 * r
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=hex_color(color) + (255,))
    bar_x = x0 + 9 * r
    draw.rounded_rectangle(
        (bar_x, header * 0.2, bar_x + W * 0.6, header * 0.8),
        radius=min(5.0, header * 0.3),
        fill=(255, 255, 255, 255),
    )
    frame.paste(content, (0, header))
    return frame


_MOCKUPS = {"phone": phone, "polaroid": polaroid, "browser": browser}


def apply_mockup(content: Image.Image, kind: str) -> Image.Image:
    """Place RGBA *content* inside mockup *kind*; ``none`` returns it as is."""
    if kind == "none":
        return content
    try:
        fn = _MOCKUPS[kind]
    except KeyError:
        raise ValueError(f"unknown mockup: {kind}") from None
    return fn(content.convert("RGBA"))
