"""Configuration constants for pin_reel."""
from __future__ import annotations

import os

# Timeline
FPS = 30
TRANSITION_FRAMES = 20
ZOOM_SPEED = 0.002
STATIC_SLIDE_SECONDS = 2.5

# Audio (can be overridden via environment)
AUDIO_SAMPLE_RATE = int(os.environ.get("PIN_REEL_SAMPLE_RATE", "44100"))
AUDIO_STYLES = ("mute", "luxury", "focus", "pulse", "lofi")

FIT_MODES = ("cover", "contain")

# Recorder output, best first: (mime type, container, video encoder, audio encoder)
OUTPUT_FORMATS = (
    ("video/webm;codecs=vp9", "webm", "libvpx-vp9", "libopus"),
    ("video/webm;codecs=vp8", "webm", "libvpx", "libvorbis"),
    ("video/webm", "webm", "libvpx", "libvorbis"),
    ("video/mp4", "mp4", "libx264", "aac"),
)

# Fonts for still overlays; searched before Pillow's bundled fallback
FONT_DIR = os.environ.get("PIN_REEL_FONT_DIR")

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".webp"}
