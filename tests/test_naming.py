import os
from pathlib import Path

from pin_reel.naming import asset_name, pack_filename, transliterate, unique_path, video_filename
from pin_reel.sizes import resolve_output_size

import pytest


def test_transliterate_cyrillic():
    assert transliterate("Привет мир") == "privet-mir"
    assert transliterate("Щука и Ёж") == "schuka-i-yozh"
    assert transliterate("Cozy  Fall / Decor") == "cozy-fall-decor"


def test_video_filename_from_topic():
    assert video_filename("Осенний декор", "webm") == "osenniy-dekor_video.webm"
    long = "x" * 100
    assert video_filename(long, "mp4") == "x" * 60 + "_video.mp4"


def test_video_filename_timestamp_fallback():
    assert video_filename("", "webm", now=1.5) == "pinempire_video_1500.webm"


def test_asset_and_pack_names():
    assert asset_name("Кухня мечты", 0) == "kuhnya-mechty_1"
    assert asset_name("y" * 50, 2) == "y" * 40 + "_3"
    assert pack_filename("Home Decor") == "home-decor_PROJECT_PACK.zip"


def test_unique_path(tmp_path: Path) -> None:
    target = tmp_path / "sub" / "clip.webm"
    assert unique_path(str(target)) == str(target)
    assert target.parent.is_dir()
    target.write_bytes(b"1")
    other = unique_path(str(target))
    assert other != str(target)
    assert other.endswith(".webm")
    assert not os.path.exists(other)


@pytest.mark.parametrize(
    "quality,aspect,fit,size",
    [
        ("720p", "9:16", "cover", (720, 1280)),
        ("1080p", "16:9", "cover", (1920, 1080)),
        ("720p", "3:4", "contain", (720, 960)),
        ("1080p", "1:1", "cover", (1080, 1080)),
        ("1080p", "1:1", "contain", (1080, 1920)),
        ("720p", "21:9", "cover", (720, 1280)),
    ],
)
def test_resolve_output_size(quality, aspect, fit, size):
    assert resolve_output_size(quality, aspect, fit) == size


def test_unknown_quality():
    with pytest.raises(ValueError):
        resolve_output_size("4k")
