"""Helpers to resolve the ffmpeg executable.

The recording sink needs a real ffmpeg binary both for encoding and for
querying which encoders are available. Resolution honors an explicit CLI
argument, the ``FFMPEG_BINARY`` environment variable, moviepy's own
configuration and finally a search on ``PATH``.
"""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
from functools import lru_cache
from typing import FrozenSet, Optional


def _usable(path: str | None) -> Optional[str]:
    """*path* when it names a file or a command found on ``PATH``."""
    if path and (os.path.isfile(path) or shutil.which(path)):
        return path
    return None


def _moviepy_ffmpeg() -> Optional[str]:
    try:
        from moviepy.config import FFMPEG_BINARY
    except ImportError:  # pragma: no cover - moviepy always ships it
        return None
    return FFMPEG_BINARY


def resolve_ffmpeg(cli_path: str | None = None) -> Optional[str]:
    """Find the ffmpeg used for recording, or ``None``.

    ``--ffmpeg`` wins over ``FFMPEG_BINARY``, which wins over moviepy's
    configured binary and a plain ``PATH`` lookup. The winner is exported
    as ``FFMPEG_BINARY`` so moviepy subprocesses use the same executable.
    """
    for source in (cli_path, os.environ.get("FFMPEG_BINARY"), _moviepy_ffmpeg(), shutil.which("ffmpeg")):
        found = _usable(source)
        if found:
            os.environ["FFMPEG_BINARY"] = found
            return found
    return None


@lru_cache(maxsize=8)
def available_encoders(binary: str) -> FrozenSet[str]:
    """Return names of the encoders compiled into *binary*."""
    try:
        out = subprocess.run(
            [binary, "-hide_banner", "-encoders"],
            capture_output=True,
            text=True,
            check=True,
        ).stdout
    except (OSError, subprocess.CalledProcessError) as e:
        logging.warning("could not list ffmpeg encoders: %s", e)
        return frozenset()
    names = set()
    started = False
    for line in out.splitlines():
        if line.strip().startswith("------"):
            started = True
            continue
        if not started:
            continue
        parts = line.split()
        if len(parts) >= 2:
            names.add(parts[1])
    return frozenset(names)
