"""ZIP project pack: finished stills plus a plain-text strategy manifest."""
from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from .loader import ImageRef, encode_png, load_image
from .naming import asset_name
from .watermark import watermark_image

SEPARATOR = "-" * 48
MANIFEST_NAME = "strategy_plan.txt"


@dataclass
class PackAsset:
    title: str
    image: ImageRef
    description: str = ""
    tags: List[str] = field(default_factory=list)
    link: Optional[str] = None


def manifest_header(topic: str, today: date) -> str:
    return (
        f"# PROJECT STRATEGY: {topic.upper()}\n\n"
        f"Generated by PinEmpire AI\nDate: {today.isoformat()}\n\n"
        f"{SEPARATOR}\n\n"
    )


def manifest_entry(index: int, asset: PackAsset, filename: str) -> str:
    tags = " ".join("#" + t.replace("#", "") for t in asset.tags)
    return (
        f"[ASSET {index + 1}]: {asset.title}\n"
        f"FILE: {filename}\n"
        f"DESCRIPTION:\n{asset.description}\n"
        f"TAGS: {tags}\n"
        f"LINK: {asset.link or 'N/A'}\n\n"
        f"{SEPARATOR}\n\n"
    )


def build_project_pack(
    topic: str,
    assets: Sequence[PackAsset],
    watermark: bool = False,
    today: Optional[date] = None,
) -> bytes:
    """Return a ZIP archive holding ``images/*.png`` and the strategy manifest.

    Every asset image is decoded and re-encoded as PNG, watermarked first if
    requested. An asset that cannot be loaded raises
    :class:`~pin_reel.errors.DecodeError`; a pack is never silently partial.
    """
    if not assets:
        raise ValueError("a project pack needs at least one asset")
    today = today or date.today()
    manifest = manifest_header(topic, today)
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for i, asset in enumerate(assets):
            filename = f"{asset_name(asset.title, i)}.png"
            img = load_image(asset.image)
            if watermark:
                img = watermark_image(img)
            zf.writestr(f"images/{filename}", encode_png(img))
            manifest += manifest_entry(i, asset, filename)
        zf.writestr(MANIFEST_NAME, manifest)
    logging.info("project pack for %r: %d assets", topic, len(assets))
    return buf.getvalue()
