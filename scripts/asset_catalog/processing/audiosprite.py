"""
Audio sprite encoding.
Concatenates short sounds into one file per export format and reports where
each sound starts and ends inside it.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from ..errors import DecodeFailure

logger = logging.getLogger(__name__)

CODECS = {
    "ogg": ["-c:a", "libvorbis", "-q:a", "5"],
    "mp3": ["-c:a", "libmp3lame", "-q:a", "4"],
    "wav": ["-c:a", "pcm_s16le"],
}


@dataclass(frozen=True)
class SpriteTiming:
    """Offset of one sound inside the sprite, in seconds."""
    start: float
    end: float
    loop: bool = False


@dataclass
class AudioSpriteResult:
    """Timings per sprite key and the files written, one per export format."""
    timings: Dict[str, SpriteTiming] = field(default_factory=dict)
    written_files: List[str] = field(default_factory=list)


class AudioSpriteBuilder(ABC):
    """Capability that encodes an audio sprite."""

    @abstractmethod
    def build(self, sources: Mapping[str, str], output: str, formats: Sequence[str]) -> AudioSpriteResult:
        """
        Encode the sprite.

        Args:
            sources: Sprite key to source file, in sprite order
            output: Output path without extension
            formats: Export formats such as "ogg" or "mp3"
        """
        pass


class FfmpegAudioSpriteBuilder(AudioSpriteBuilder):
    """Builds audio sprites with the ffmpeg and ffprobe command-line tools."""

    def __init__(self, ffmpeg: Optional[str] = None, ffprobe: Optional[str] = None,
                 gap: float = 1.0, sample_rate: int = 44100,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        self.ffmpeg = ffmpeg or shutil.which("ffmpeg")
        self.ffprobe = ffprobe or shutil.which("ffprobe")
        self.gap = gap
        self.sample_rate = sample_rate
        self.runner = runner

    def probe_duration(self, path: str) -> float:
        """Duration of an audio file in seconds."""
        if not self.ffprobe:
            raise DecodeFailure(path, "ffprobe is required to build audio sprites but was not found in PATH")

        cmd = [
            self.ffprobe,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            path,
        ]
        completed = self.runner(cmd, capture_output=True, text=True)
        if completed.returncode != 0:
            raise DecodeFailure(path, (completed.stderr or "ffprobe failed").strip())

        try:
            return float(completed.stdout.strip())
        except ValueError:
            raise DecodeFailure(path, f"unexpected ffprobe output: {completed.stdout.strip()!r}")

    def plan_timings(self, durations: Mapping[str, float]) -> Dict[str, SpriteTiming]:
        """Lay sounds end to end with a fixed gap of silence between them."""
        timings = {}
        cursor = 0.0
        for key, duration in durations.items():
            start = round(cursor, 3)
            end = round(cursor + duration, 3)
            timings[key] = SpriteTiming(start, end)
            cursor += duration + self.gap
        return timings

    def build(self, sources: Mapping[str, str], output: str, formats: Sequence[str]) -> AudioSpriteResult:
        if not sources:
            return AudioSpriteResult()

        durations = {key: self.probe_duration(path) for key, path in sources.items()}
        timings = self.plan_timings(durations)

        if not self.ffmpeg:
            raise DecodeFailure(output, "ffmpeg is required to build audio sprites but was not found in PATH")

        Path(output).parent.mkdir(parents=True, exist_ok=True)
        written = []
        for fmt in formats:
            if fmt not in CODECS:
                raise DecodeFailure(output, f"unsupported sprite export format: {fmt}")
            target = f"{output}.{fmt}"
            self._encode(list(sources.values()), target, fmt)
            written.append(target)
            logger.info(f"Wrote audio sprite {target}")

        return AudioSpriteResult(timings=timings, written_files=written)

    def _encode(self, files: List[str], target: str, fmt: str) -> None:
        cmd = [self.ffmpeg, "-hide_banner", "-loglevel", "error", "-y"]
        for path in files:
            cmd.extend(["-i", path])

        chains = []
        labels = []
        for index in range(len(files)):
            chain = f"[{index}:a]aresample={self.sample_rate},aformat=channel_layouts=stereo"
            if index < len(files) - 1:
                chain += f",apad=pad_dur={self.gap}"
            chains.append(f"{chain}[a{index}]")
            labels.append(f"[a{index}]")
        graph = ";".join(chains) + ";" + "".join(labels) + f"concat=n={len(files)}:v=0:a=1[out]"

        cmd.extend(["-filter_complex", graph, "-map", "[out]", "-vn"])
        cmd.extend(CODECS[fmt])
        cmd.append(target)

        completed = self.runner(cmd, capture_output=True, text=True)
        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "ffmpeg failed").strip()
            raise DecodeFailure(target, detail)
