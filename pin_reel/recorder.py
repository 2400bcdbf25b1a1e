"""Recording sinks turning drawn frames into an encoded video stream."""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Sequence

import numpy as np
import soundfile as sf
from moviepy.video.io.ffmpeg_tools import ffmpeg_merge_video_audio
from moviepy.video.io.ffmpeg_writer import FFMPEG_VideoWriter

from .audio import AudioDestination
from .bin_config import available_encoders, resolve_ffmpeg
from .compositor import Surface
from .config import OUTPUT_FORMATS
from .errors import EmptyOutputError, RecorderError, UnsupportedCapabilityError


@dataclass(frozen=True)
class OutputFormat:
    mime_type: str
    extension: str
    video_codec: str
    audio_codec: str


PREFERRED_FORMATS = tuple(OutputFormat(*row) for row in OUTPUT_FORMATS)

# single pass, speed over size
_ENCODER_PARAMS = {
    "libvpx-vp9": ["-deadline", "realtime", "-cpu-used", "8", "-row-mt", "1", "-b:v", "2M"],
    "libvpx": ["-deadline", "realtime", "-cpu-used", "8", "-b:v", "2M"],
    "libx264": ["-movflags", "+faststart", "-crf", "23", "-pix_fmt", "yuv420p"],
}


def select_format(
    supported: Sequence[str], preferences: Sequence[OutputFormat] = PREFERRED_FORMATS
) -> OutputFormat:
    """Return the first of *preferences* whose mime type is in *supported*."""
    available = set(supported)
    for fmt in preferences:
        if fmt.mime_type in available:
            return fmt
    raise UnsupportedCapabilityError(
        "no supported video format; tried "
        + ", ".join(f.mime_type for f in preferences)
    )


class RecordingSink(Protocol):
    """Capture facility fed by the slideshow builder.

    ``begin`` starts a recording of *surface*; every ``capture`` appends
    the surface's current pixels as the next frame; ``stop`` finalizes and
    returns the container bytes. ``abort`` discards a recording.
    """

    def supported_formats(self) -> Sequence[str]: ...

    def begin(
        self,
        surface: Surface,
        fps: int,
        fmt: OutputFormat,
        audio: Optional[AudioDestination] = None,
    ) -> Any: ...

    def capture(self, handle: Any) -> None: ...

    def stop(self, handle: Any) -> bytes: ...

    def abort(self, handle: Any) -> None: ...


@dataclass
class _Recording:
    surface: Surface
    fps: int
    fmt: OutputFormat
    audio: Optional[AudioDestination]
    workdir: str
    video_path: str
    writer: Any = None
    frames: int = 0
    closed: bool = field(default=False, repr=False)


class FFmpegRecordingSink:
    """Stream frames into ffmpeg through moviepy's writer.

    Audio, if any, is trimmed to the recorded length and muxed after the
    video stream is closed.
    """

    def __init__(self, ffmpeg_binary: str | None = None, preset: str = "medium"):
        self.binary = resolve_ffmpeg(ffmpeg_binary)
        self.preset = preset

    def supported_formats(self) -> List[str]:
        if not self.binary:
            return []
        encoders = available_encoders(self.binary)
        return [
            fmt.mime_type
            for fmt in PREFERRED_FORMATS
            if fmt.video_codec in encoders and fmt.audio_codec in encoders
        ]

    def begin(
        self,
        surface: Surface,
        fps: int,
        fmt: OutputFormat,
        audio: Optional[AudioDestination] = None,
    ) -> _Recording:
        if not self.binary:
            raise UnsupportedCapabilityError("ffmpeg binary not found")
        workdir = tempfile.mkdtemp(prefix="pin_reel_rec")
        video_path = os.path.join(workdir, f"video.{fmt.extension}")
        rec = _Recording(surface, fps, fmt, audio, workdir, video_path)
        try:
            rec.writer = FFMPEG_VideoWriter(
                video_path,
                surface.size,
                fps,
                codec=fmt.video_codec,
                preset=self.preset,
                ffmpeg_params=list(_ENCODER_PARAMS.get(fmt.video_codec, [])),
            )
        except (OSError, ValueError) as e:
            shutil.rmtree(workdir, ignore_errors=True)
            raise RecorderError(f"failed to initialize video recorder: {e}") from e
        logging.debug("recording %s %dx%d@%d", fmt.mime_type, *surface.size, fps)
        return rec

    def capture(self, handle: _Recording) -> None:
        try:
            handle.writer.write_frame(np.ascontiguousarray(handle.surface.pixels))
        except (OSError, ValueError) as e:
            raise RecorderError(f"frame {handle.frames} rejected by encoder: {e}") from e
        handle.frames += 1

    def _close_writer(self, handle: _Recording) -> None:
        if handle.writer is not None and not handle.closed:
            handle.closed = True
            handle.writer.close()

    def _mux_audio(self, handle: _Recording) -> str:
        audio = handle.audio
        if audio is None or len(audio.samples) == 0:
            return handle.video_path
        n = int(round(handle.frames / float(handle.fps) * audio.sample_rate))
        samples = audio.samples[:n]
        wav = os.path.join(handle.workdir, "audio.wav")
        sf.write(wav, samples, audio.sample_rate)
        out = os.path.join(handle.workdir, f"final.{handle.fmt.extension}")
        ffmpeg_merge_video_audio(
            handle.video_path, wav, out, "copy", handle.fmt.audio_codec, logger=None
        )
        return out

    def stop(self, handle: _Recording) -> bytes:
        try:
            try:
                self._close_writer(handle)
            except (OSError, ValueError) as e:
                raise RecorderError(f"failed to finalize video: {e}") from e
            if handle.frames == 0:
                raise EmptyOutputError("video recording produced no frames")
            try:
                path = self._mux_audio(handle)
            except (OSError, ValueError) as e:
                raise RecorderError(f"failed to mux audio track: {e}") from e
            if not os.path.exists(path) or os.path.getsize(path) == 0:
                raise EmptyOutputError("video recording produced no data")
            with open(path, "rb") as fh:
                return fh.read()
        finally:
            shutil.rmtree(handle.workdir, ignore_errors=True)

    def abort(self, handle: _Recording) -> None:
        try:
            self._close_writer(handle)
        except (OSError, ValueError) as e:
            logging.debug("writer close during abort failed: %s", e)
        finally:
            shutil.rmtree(handle.workdir, ignore_errors=True)
