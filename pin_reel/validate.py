"""Argument validation helpers for the pin_reel CLI."""
from __future__ import annotations

import os
from argparse import Namespace
from typing import List

from .overlay import MAX_DIM


def _is_local(ref: str) -> bool:
    return not ref.startswith(("data:", "http://", "https://"))


def validate_args(args: Namespace) -> List[str]:
    """Validate parsed CLI arguments.

    Returns a list of human readable error messages. The caller should abort
    if the list is non-empty.
    """
    errors: List[str] = []
    cmd = args.command
    if cmd == "slideshow":
        if not args.images:
            errors.append("no images given")
        for ref in args.images:
            if _is_local(ref) and not os.path.exists(ref):
                errors.append(f"image not found: {ref}")
        if args.speed < 0:
            errors.append(f"--speed {args.speed:.2f}s must be >= 0")
        if args.fps <= 0:
            errors.append("--fps must be > 0")
    elif cmd == "edit":
        if _is_local(args.image) and not os.path.isfile(args.image):
            errors.append(f"image not found: {args.image}")
        if not 0.0 <= args.dim <= MAX_DIM:
            errors.append(f"--dim {args.dim:.2f} out of range [0, {MAX_DIM}]")
        if not 0.0 < args.font_size <= 100.0:
            errors.append("--font-size must be within (0, 100]")
    elif cmd == "audio":
        if args.duration <= 0:
            errors.append("--duration must be > 0")
        if args.sample_rate <= 0:
            errors.append("--sample-rate must be > 0")
    elif cmd == "pack":
        if not os.path.isfile(args.manifest):
            errors.append(f"manifest not found: {args.manifest}")
    return errors
