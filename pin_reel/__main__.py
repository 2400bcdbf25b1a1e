"""Command line interface for pin_reel."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Dict, List

import numpy as np
import yaml

from .config import AUDIO_SAMPLE_RATE, AUDIO_STYLES, FIT_MODES, FPS, IMAGE_EXTS
from .errors import SlideshowError
from .validate import validate_args


def _collect_images(refs: List[str]) -> List[str]:
    """Expand directories into their image files, sorted by name."""
    out: List[str] = []
    for ref in refs:
        if os.path.isdir(ref):
            files = [
                os.path.join(ref, f)
                for f in os.listdir(ref)
                if os.path.splitext(f)[1].lower() in IMAGE_EXTS
            ]
            files.sort(key=lambda s: os.path.basename(s).lower())
            out.extend(files)
        else:
            out.append(ref)
    return out


def _output_path(output: str | None, default_name: str) -> str:
    from .naming import unique_path

    if output and not (output.endswith(os.sep) or os.path.isdir(output)):
        return unique_path(output)
    return unique_path(os.path.join(output or ".", default_name))


def _write(path: str, data: bytes) -> None:
    with open(path, "wb") as fh:
        fh.write(data)


def build_parser() -> tuple[argparse.ArgumentParser, Dict[str, argparse.ArgumentParser]]:
    from .filters import FILTER_PRESETS
    from .mockups import MOCKUPS
    from .overlay import TEXT_POSITIONS
    from .sizes import ASPECTS, QUALITIES
    from .stickers import STICKERS
    from .text import TEXT_STYLES

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--preset", action="append", default=[], help="Path to YAML preset overriding defaults")
    common.add_argument("--validate", action="store_true", help="Validate arguments and exit")
    common.add_argument("--verbose", action="store_true", help="Debug logging")
    common.add_argument("--output", help="Output file or directory. If existing, a timestamp/counter is appended.")

    parser = argparse.ArgumentParser(prog="pin_reel", description="Pin stills and slideshow videos")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("slideshow", parents=[common], help="Build a slideshow video")
    p.add_argument("images", nargs="+", help="Image files, URLs or folders, in playback order")
    p.add_argument("--topic", default="", help="Topic used to name the video file")
    p.add_argument("--speed", type=float, default=2.5, help="Seconds per slide; 0 = static slides")
    p.add_argument("--quality", choices=QUALITIES, default="720p")
    p.add_argument("--aspect", choices=ASPECTS, default="9:16")
    p.add_argument("--fit", choices=FIT_MODES, default="cover")
    p.add_argument("--audio", choices=AUDIO_STYLES, default="mute", help="Procedural music style")
    p.add_argument("--fps", type=int, default=FPS)
    p.add_argument("--realtime", action="store_true", help="Pace frames at 1/fps like a live capture")
    p.add_argument("--ffmpeg", help="Path to ffmpeg binary")
    p.add_argument("--seed", type=int, default=None, help="Seed for noise based music")

    p = sub.add_parser("edit", parents=[common], help="Apply overlays to a still")
    p.add_argument("image", help="Source image file or URL")
    p.add_argument("--filter", dest="filter_preset", choices=FILTER_PRESETS, default="none")
    p.add_argument("--dim", type=float, default=0.0, help="Black overlay alpha (0..0.8)")
    p.add_argument("--text", dest="overlay_text", default="")
    p.add_argument("--sub-text", default="")
    p.add_argument("--font-size", type=float, default=8.0, help="Font size in %% of width")
    p.add_argument("--position", choices=TEXT_POSITIONS, default="mid")
    p.add_argument("--style", choices=sorted(TEXT_STYLES), default="modern")
    p.add_argument("--sticker", choices=STICKERS, default="none")
    p.add_argument("--mockup", choices=MOCKUPS, default="none")
    p.add_argument("--watermark", action="store_true", help="Stamp the draft watermark")

    p = sub.add_parser("audio", parents=[common], help="Render a music style to WAV")
    p.add_argument("style", choices=AUDIO_STYLES[1:])
    p.add_argument("--duration", type=float, default=10.0)
    p.add_argument("--sample-rate", type=int, default=AUDIO_SAMPLE_RATE)

    p = sub.add_parser("pack", parents=[common], help="Build the ZIP project pack")
    p.add_argument("manifest", help="YAML file with topic and assets")
    p.add_argument("--watermark", action="store_true")

    return parser, sub.choices


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser, commands = build_parser()
    prelim, _ = parser.parse_known_args(argv)
    target = commands[prelim.command]
    for path in prelim.preset:
        with open(path, "r", encoding="utf8") as fh:
            data = yaml.safe_load(fh) or {}
        target.set_defaults(**data)
    return parser.parse_args(argv)


def _run_slideshow(args: argparse.Namespace) -> None:
    from .naming import video_filename
    from .recorder import FFmpegRecordingSink
    from .sizes import resolve_output_size
    from .slideshow import SlideshowBuilder
    from .timeline import TimelinePlan

    images = _collect_images(args.images)
    if not images:
        raise SystemExit("❌ No images found.")
    width, height = resolve_output_size(args.quality, args.aspect, args.fit)
    plan = TimelinePlan.from_images(
        images,
        speed=args.speed,
        audio_style=args.audio,
        fit_mode=args.fit,
        width=width,
        height=height,
        fps=args.fps,
    )
    sink = FFmpegRecordingSink(args.ffmpeg)
    rng = np.random.default_rng(args.seed) if args.seed is not None else None
    result = SlideshowBuilder(plan, sink=sink, realtime=args.realtime, rng=rng).build()
    out = _output_path(args.output, video_filename(args.topic, result.extension))
    _write(out, result.data)
    print(f"✅ Saved {out} ({result.frame_count} frames, {result.duration:.1f}s, {result.mime_type})")


def _run_edit(args: argparse.Namespace) -> None:
    from .overlay import EditState, render_edit
    from .watermark import apply_watermark

    edit = EditState(
        filter_preset=args.filter_preset,
        dim=args.dim,
        overlay_text=args.overlay_text,
        sub_text=args.sub_text,
        font_size_percent=args.font_size,
        text_position=args.position,
        text_style=args.style,
        sticker=args.sticker,
        mockup=args.mockup,
    )
    data = render_edit(args.image, edit)
    if args.watermark and isinstance(data, bytes):
        data = apply_watermark(data)
    if not isinstance(data, bytes):
        print(f"⚠️ Could not load {args.image}, nothing written.", file=sys.stderr)
        raise SystemExit(1)
    stem = os.path.splitext(os.path.basename(args.image))[0] or "pin"
    out = _output_path(args.output, f"{stem}_edit.png")
    _write(out, data)
    print(f"✅ Saved {out}")


def _run_audio(args: argparse.Namespace) -> None:
    from .audio import write_audio_track

    out = _output_path(args.output, f"{args.style}.wav")
    write_audio_track(args.style, out, args.duration, args.sample_rate)
    print(f"✅ Saved {out}")


def _run_pack(args: argparse.Namespace) -> None:
    from .naming import pack_filename
    from .pack import PackAsset, build_project_pack

    with open(args.manifest, "r", encoding="utf8") as fh:
        data = yaml.safe_load(fh) or {}
    topic = str(data.get("topic", ""))
    base = os.path.dirname(os.path.abspath(args.manifest))
    assets = []
    for item in data.get("assets") or []:
        image = str(item["image"])
        if not image.startswith(("data:", "http://", "https://")) and not os.path.isabs(image):
            image = os.path.join(base, image)
        assets.append(
            PackAsset(
                title=str(item.get("title", "")),
                image=image,
                description=str(item.get("description", "")),
                tags=[str(t) for t in item.get("tags") or []],
                link=item.get("link"),
            )
        )
    blob = build_project_pack(topic, assets, watermark=args.watermark)
    out = _output_path(args.output, pack_filename(topic))
    _write(out, blob)
    print(f"✅ Saved {out} ({len(assets)} assets)")


_COMMANDS = {
    "slideshow": _run_slideshow,
    "edit": _run_edit,
    "audio": _run_audio,
    "pack": _run_pack,
}


def main(argv: List[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )
    if args.validate:
        errs = validate_args(args)
        if errs:
            for e in errs:
                print(f"validation error: {e}", file=sys.stderr)
            raise SystemExit(1)
        return
    try:
        _COMMANDS[args.command](args)
    except (SlideshowError, ValueError, KeyError) as e:
        raise SystemExit(f"❌ {args.command} failed: {e}") from e


if __name__ == "__main__":
    main()
