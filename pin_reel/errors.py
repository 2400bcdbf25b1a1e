"""Error types raised by the slideshow pipeline."""
from __future__ import annotations


class SlideshowError(RuntimeError):
    """Base class for slideshow build failures."""


class UnsupportedCapabilityError(SlideshowError):
    """A required encoder or capture facility is missing."""


class DecodeError(SlideshowError):
    """A source image could not be loaded."""


class RecorderError(SlideshowError):
    """The recording sink could not be started or finalized."""


class EmptyOutputError(SlideshowError):
    """Recording finished without producing any data."""


class SynthesisError(SlideshowError):
    """The procedural audio track could not be built."""


class BuildCancelled(SlideshowError):
    """The build was cancelled before the recording finished."""
