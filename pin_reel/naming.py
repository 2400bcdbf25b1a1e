"""File names for exported pins, videos and project packs."""
from __future__ import annotations

import os
import re
import time
from datetime import datetime
from typing import Optional

_RU = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d",
    "е": "e", "ё": "yo", "ж": "zh", "з": "z", "и": "i",
    "й": "y", "к": "k", "л": "l", "м": "m", "н": "n",
    "о": "o", "п": "p", "р": "r", "с": "s", "т": "t",
    "у": "u", "ф": "f", "х": "h", "ц": "ts", "ч": "ch",
    "ш": "sh", "щ": "sch", "ъ": "", "ы": "y", "ь": "",
    "э": "e", "ю": "yu", "я": "ya",
}


def transliterate(text: str) -> str:
    """Lower-case ASCII slug of *text*; Cyrillic is romanised, the rest becomes ``-``."""
    out = "".join(_RU.get(ch, ch) for ch in (text or "").lower())
    out = re.sub(r"[^a-z0-9-]", "-", out)
    return re.sub(r"-+", "-", out)


def video_filename(topic: str, extension: str, now: Optional[float] = None) -> str:
    slug = transliterate(topic)[:60]
    if slug:
        return f"{slug}_video.{extension}"
    ts = int((now if now is not None else time.time()) * 1000)
    return f"pinempire_video_{ts}.{extension}"


def asset_name(title: str, index: int) -> str:
    """Base name of the *index*-th (0-based) still in a project pack."""
    return f"{transliterate(title)[:40]}_{index + 1}"


def pack_filename(topic: str) -> str:
    return f"{transliterate(topic)}_PROJECT_PACK.zip"


def unique_path(path: str) -> str:
    """Return *path*, or a timestamped / numbered sibling if it already exists."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    if not os.path.exists(path):
        return path
    root, ext = os.path.splitext(path)
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    cand = f"{root}_{ts}{ext}"
    if not os.path.exists(cand):
        return cand
    i = 2
    while True:
        cand = f"{root}_{i}{ext}"
        if not os.path.exists(cand):
            return cand
        i += 1
