"""Procedural background music for slideshow videos.

Every style is synthesized from oscillators and noise, no samples are
shipped. Tracks are mixed into an :class:`AudioDestination` which the
recorder later muxes next to the video stream.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import soundfile as sf
from scipy import signal

from .config import AUDIO_SAMPLE_RATE, AUDIO_STYLES
from .errors import SynthesisError

MASTER_GAIN = 0.5
FADE_SECONDS = 1.0

LUXURY_PARTIALS = ((55.0, "sine"), (110.0, "triangle"), (110.5, "sine"))
LOFI_CHORD = (261.63, 311.13, 392.00, 466.16)
KICK_BEAT = 60.0 / 120.0
KICK_LENGTH = 0.5


@dataclass
class AudioDestination:
    """Mono float32 mix bus of a fixed sample rate."""

    sample_rate: int = AUDIO_SAMPLE_RATE
    samples: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float32))

    def add(self, sig: np.ndarray) -> None:
        """Mix *sig* into the bus starting at sample 0, growing it if needed."""
        sig = np.asarray(sig, dtype=np.float32)
        if len(sig) > len(self.samples):
            grown = np.zeros(len(sig), dtype=np.float32)
            grown[: len(self.samples)] = self.samples
            self.samples = grown
        self.samples[: len(sig)] += sig

    @property
    def duration(self) -> float:
        return len(self.samples) / float(self.sample_rate)


def _time_axis(duration: float, sr: int) -> np.ndarray:
    n = max(0, int(round(duration * sr)))
    return np.arange(n, dtype=np.float64) / sr


def _oscillator(kind: str, phase: np.ndarray) -> np.ndarray:
    if kind == "sine":
        return np.sin(phase)
    if kind == "triangle":
        return signal.sawtooth(phase + np.pi / 2, width=0.5)
    raise ValueError(f"unknown oscillator: {kind}")


def _lowpass(x: np.ndarray, cutoff: float, sr: int) -> np.ndarray:
    sos = signal.butter(2, cutoff, btype="lowpass", fs=sr, output="sos")
    return signal.sosfilt(sos, x)


def _highpass(x: np.ndarray, cutoff: float, sr: int) -> np.ndarray:
    sos = signal.butter(2, cutoff, btype="highpass", fs=sr, output="sos")
    return signal.sosfilt(sos, x)


def master_envelope(duration: float, sr: int) -> np.ndarray:
    """Return the master gain curve for a track of *duration* seconds.

    The gain rises linearly from 0 to :data:`MASTER_GAIN` during the first
    second and falls back to exactly 0 at ``duration``. For tracks shorter
    than two seconds both ramps overlap and the lower one wins.
    """
    n = max(0, int(round(duration * sr)))
    if n == 0:
        return np.zeros(0, dtype=np.float64)
    t = np.linspace(0.0, duration, n)
    fade_in = np.clip(t / FADE_SECONDS, 0.0, 1.0)
    fade_out = np.clip((duration - t) / FADE_SECONDS, 0.0, 1.0)
    return MASTER_GAIN * np.minimum(fade_in, fade_out)


def _luxury(t: np.ndarray, sr: int, rng: np.random.Generator) -> np.ndarray:
    mix = np.zeros_like(t)
    for freq, kind in LUXURY_PARTIALS:
        mix += _oscillator(kind, 2 * np.pi * freq * t)
    mix /= len(LUXURY_PARTIALS)
    return _lowpass(mix, 400.0, sr)


def _focus(t: np.ndarray, sr: int, rng: np.random.Generator) -> np.ndarray:
    white = rng.uniform(-1.0, 1.0, len(t))
    # leaky integrator: y[n] = (y[n-1] + 0.02 * w[n]) / 1.02
    brown = signal.lfilter([0.02 / 1.02], [1.0, -1.0 / 1.02], white) * 3.5
    return _lowpass(brown, 300.0, sr)


def kick(sr: int, length: float = KICK_LENGTH) -> np.ndarray:
    """Synthesize a single kick: falling pitch with an exponential decay."""
    t = _time_axis(length, sr)
    f0, f1 = 150.0, 0.01
    ratio = f1 / f0
    # integral of f0 * ratio**(t/length)
    phase = 2 * np.pi * f0 * length / np.log(ratio) * (ratio ** (t / length) - 1.0)
    gain = 0.8 * (0.01 / 0.8) ** (t / length)
    return np.sin(phase) * gain


def _pulse(t: np.ndarray, sr: int, rng: np.random.Generator) -> np.ndarray:
    out = np.zeros_like(t)
    hit = kick(sr)
    beat = KICK_BEAT
    start = 0.0
    duration = len(t) / sr
    while start < duration:
        i0 = int(round(start * sr))
        i1 = min(len(out), i0 + len(hit))
        out[i0:i1] += hit[: i1 - i0]
        start += beat
    return out


def _lofi(t: np.ndarray, sr: int, rng: np.random.Generator) -> np.ndarray:
    hiss = _highpass(rng.uniform(-1.0, 1.0, len(t)) * 0.1, 1000.0, sr)
    cents = 15.0 * np.sin(2 * np.pi * 0.5 * t)
    chord = np.zeros_like(t)
    for freq in LOFI_CHORD:
        inst = freq * 2.0 ** (cents / 1200.0)
        phase = 2 * np.pi * np.cumsum(inst) / sr
        chord += _oscillator("triangle", phase)
    chord = _lowpass(chord, 800.0, sr) * 0.15
    return hiss + chord


_STYLES = {
    "luxury": _luxury,
    "focus": _focus,
    "pulse": _pulse,
    "lofi": _lofi,
}


def synthesize(
    style: str,
    duration: float,
    sr: int = AUDIO_SAMPLE_RATE,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Return the enveloped mono signal for *style*.

    ``mute`` yields an empty array. Noise based styles draw from *rng*
    (a fresh unseeded generator by default), so they are not reproducible
    unless a seeded generator is passed in.
    """
    if style not in AUDIO_STYLES:
        raise ValueError(f"unknown audio style: {style}")
    if style == "mute" or duration <= 0:
        return np.zeros(0, dtype=np.float32)
    rng = rng if rng is not None else np.random.default_rng()
    t = _time_axis(duration, sr)
    try:
        raw = _STYLES[style](t, sr, rng)
        out = raw * master_envelope(duration, sr)
    except (ValueError, FloatingPointError, MemoryError) as e:
        raise SynthesisError(f"{style} synthesis failed: {e}") from e
    return out.astype(np.float32)


def create_audio_track(
    style: str,
    destination: AudioDestination,
    duration: float,
    rng: Optional[np.random.Generator] = None,
) -> None:
    """Mix a *style* track lasting *duration* seconds into *destination*."""
    if style == "mute":
        return
    destination.add(synthesize(style, duration, destination.sample_rate, rng))


def write_audio_track(style: str, path: str, duration: float, sr: int = AUDIO_SAMPLE_RATE) -> str:
    """Render *style* to a WAV file at *path* and return the path."""
    dest = AudioDestination(sample_rate=sr)
    create_audio_track(style, dest, duration)
    if len(dest.samples) == 0:
        dest.samples = np.zeros(int(round(duration * sr)), dtype=np.float32)
    sf.write(path, dest.samples, sr)
    return path
