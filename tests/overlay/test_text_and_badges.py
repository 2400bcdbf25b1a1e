import numpy as np
import pytest
from PIL import Image

from pin_reel.filters import apply_filter
from pin_reel.stickers import apply_sticker, render_sticker, star_points
from pin_reel.text import (
    TEXT_STYLES,
    draw_overlay_text,
    layout_text,
    load_font,
    text_width,
    wrap_text,
)


def test_wrap_respects_ninety_percent():
    font = load_font("sans-bold", 40)
    width = 600
    text = "the quick brown fox jumps over the lazy dog " * 4
    lines = wrap_text(text.strip(), font, width * 0.9)
    assert len(lines) > 1
    for line in lines:
        if " " in line:
            assert text_width(font, line) <= width * 0.9


def test_long_word_stays_alone():
    font = load_font("sans-bold", 40)
    lines = wrap_text("a supercalifragilisticexpialidocious b", font, 120)
    assert lines == ["a", "supercalifragilisticexpialidocious", "b"]


def test_first_word_never_wrapped():
    font = load_font("sans-bold", 40)
    assert wrap_text("incomprehensibilities", font, 10) == ["incomprehensibilities"]


def test_layout_centres_block():
    font = load_font("sans-bold", 50)
    block = layout_text("one two three four five six seven eight", font, 50, 300, 500.0)
    assert block.line_height == pytest.approx(60.0)
    middle = (block.top + block.bottom) / 2
    assert middle == pytest.approx(500.0)
    top, height = block.band()
    assert height == pytest.approx(block.total_height + 25.0)


@pytest.mark.parametrize("style", sorted(TEXT_STYLES))
def test_every_style_draws_text(style):
    canvas = Image.new("RGBA", (400, 400), (40, 40, 40, 255))
    out = draw_overlay_text(canvas, "Hello pins", "", 10, "mid", style)
    assert out.size == canvas.size
    diff = np.abs(np.array(out, dtype=int) - np.array(canvas, dtype=int)).sum(axis=-1)
    assert diff[150:250].sum() > 0
    assert diff[:40].sum() == 0


def test_sub_text_below_headline():
    canvas = Image.new("RGBA", (400, 400), (0, 0, 0, 255))
    out = np.array(draw_overlay_text(canvas, "Title", "small print here", 10, "top", "modern"))
    rows = np.where(out[..., :3].max(axis=(1, 2)) > 200)[0]
    assert rows.min() < 60 + 20
    assert rows.max() > 60 + 40


def test_filters():
    rgb = np.zeros((4, 4, 3), dtype=np.uint8)
    rgb[:] = (200, 80, 40)
    noir = apply_filter(rgb, "noir")
    assert (noir[..., 0] == noir[..., 1]).all() and (noir[..., 1] == noir[..., 2]).all()
    assert np.array_equal(apply_filter(rgb, "none"), rgb)
    vivid = apply_filter(rgb, "vivid").astype(int)
    assert vivid[0, 0, 0] - vivid[0, 0, 2] > 160
    gray = np.full((2, 2, 3), 128, dtype=np.uint8)
    gold = apply_filter(gray, "gold").astype(int)
    assert gold[0, 0, 0] > gold[0, 0, 2]
    with pytest.raises(ValueError):
        apply_filter(rgb, "sepia")


def test_contrast_keeps_mid_gray():
    gray = np.full((2, 2, 3), 128, dtype=np.uint8)
    out = apply_filter(gray, "noir")
    assert abs(int(out[0, 0, 0]) - 128) <= 1


def test_star_points():
    pts = star_points(0, 0, 10, 5)
    assert len(pts) == 10
    assert pts[0] == pytest.approx((0, -10))
    assert np.hypot(*pts[1]) == pytest.approx(5)


@pytest.mark.parametrize(
    "kind,color",
    [("sale", (0xE5, 0x3E, 0x3E)), ("new", (0x48, 0xBB, 0x78)), ("hit", (0xD6, 0x9E, 0x2E))],
)
def test_sticker_colors(kind, color):
    tile = np.array(render_sticker(kind, 100))
    match = (np.abs(tile[..., :3].astype(int) - color).sum(axis=-1) < 10) & (tile[..., 3] == 255)
    assert match.sum() > 1000


def test_best_sticker_has_gold_ring():
    tile = np.array(render_sticker("best", 100))
    gold = (np.abs(tile[..., :3].astype(int) - (0xD4, 0xAF, 0x37)).sum(axis=-1) < 10) & (tile[..., 3] > 200)
    assert gold.sum() > 100


def test_sticker_placed_top_left():
    canvas = Image.new("RGBA", (400, 600), (255, 255, 255, 255))
    out = np.array(apply_sticker(canvas, "sale"))
    region = out[60:160, 40:140, :3].astype(int)
    red = np.abs(region - (0xE5, 0x3E, 0x3E)).sum(axis=-1) < 10
    assert red.sum() > 1000
    assert (out[500:, 300:, :3] == 255).all()


def test_no_sticker_is_noop():
    canvas = Image.new("RGBA", (10, 10), (1, 2, 3, 255))
    assert apply_sticker(canvas, "none") is canvas
    with pytest.raises(ValueError):
        render_sticker("free", 10)
