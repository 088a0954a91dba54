"""
Tests for ffmpeg-based audio sprite encoding.
External processes are replaced by a recording runner.
"""

import os
import shutil
import subprocess
import tempfile
import unittest

from ..errors import DecodeFailure
from ..processing.audiosprite import FfmpegAudioSpriteBuilder, SpriteTiming


class RecordingRunner:
    """Stands in for subprocess.run; answers ffprobe with fixed durations."""

    def __init__(self, durations, fail_encode=False):
        self.durations = durations
        self.fail_encode = fail_encode
        self.commands = []

    def __call__(self, cmd, capture_output=True, text=True):
        self.commands.append(cmd)
        if cmd[0] == "ffprobe":
            path = cmd[-1]
            if path not in self.durations:
                return subprocess.CompletedProcess(cmd, 1, "", f"{path}: Invalid data found")
            return subprocess.CompletedProcess(cmd, 0, f"{self.durations[path]}\n", "")
        if self.fail_encode:
            return subprocess.CompletedProcess(cmd, 1, "", "Unknown encoder")
        return subprocess.CompletedProcess(cmd, 0, "", "")


class TestFfmpegAudioSpriteBuilder(unittest.TestCase):
    """Test FfmpegAudioSpriteBuilder command planning."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.output = os.path.join(self.temp_dir, "out", "sprite")
        self.runner = RecordingRunner({"ui/click.wav": 0.25, "sfx/jump.ogg": 1.5})
        self.builder = FfmpegAudioSpriteBuilder(ffmpeg="ffmpeg", ffprobe="ffprobe", gap=1.0, runner=self.runner)
        self.sources = {"ui_click": "ui/click.wav", "sfx_jump": "sfx/jump.ogg"}

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_plan_timings(self):
        timings = self.builder.plan_timings({"a": 1.5, "b": 0.25, "c": 2.0})

        self.assertEqual(timings["a"], SpriteTiming(0.0, 1.5))
        self.assertEqual(timings["b"], SpriteTiming(2.5, 2.75))
        self.assertEqual(timings["c"], SpriteTiming(3.75, 5.75))

    def test_plan_timings_does_not_accumulate_rounding(self):
        timings = self.builder.plan_timings({f"s{i}": 0.0004 for i in range(10)})

        # 9 gaps of 1 s plus 9 sounds of 0.4 ms
        self.assertEqual(timings["s9"], SpriteTiming(9.004, 9.004))
        self.assertEqual(timings["s1"], SpriteTiming(1.0, 1.001))

    def test_plan_timings_keeps_order(self):
        timings = self.builder.plan_timings({"z": 1.0, "a": 1.0})

        self.assertEqual(list(timings), ["z", "a"])

    def test_probe_duration(self):
        self.assertEqual(self.builder.probe_duration("sfx/jump.ogg"), 1.5)

    def test_probe_failure(self):
        with self.assertRaises(DecodeFailure) as ctx:
            self.builder.probe_duration("missing.ogg")
        self.assertIn("Invalid data found", str(ctx.exception))

    def test_build_writes_one_file_per_format(self):
        result = self.builder.build(self.sources, self.output, ["ogg", "mp3"])

        self.assertEqual(result.written_files, [f"{self.output}.ogg", f"{self.output}.mp3"])
        self.assertEqual(result.timings["ui_click"], SpriteTiming(0.0, 0.25))
        self.assertEqual(result.timings["sfx_jump"], SpriteTiming(1.25, 2.75))
        self.assertTrue(os.path.isdir(os.path.dirname(self.output)))

    def test_encode_command(self):
        self.builder.build(self.sources, self.output, ["ogg"])

        encode = self.runner.commands[-1]
        self.assertEqual(encode[0], "ffmpeg")
        self.assertEqual(encode[-1], f"{self.output}.ogg")
        self.assertIn("libvorbis", encode)
        self.assertEqual([encode[i + 1] for i, arg in enumerate(encode) if arg == "-i"],
                         ["ui/click.wav", "sfx/jump.ogg"])

        graph = encode[encode.index("-filter_complex") + 1]
        self.assertIn("[0:a]aresample=44100,aformat=channel_layouts=stereo,apad=pad_dur=1.0[a0]", graph)
        self.assertIn("[1:a]aresample=44100,aformat=channel_layouts=stereo[a1]", graph)
        self.assertTrue(graph.endswith("[a0][a1]concat=n=2:v=0:a=1[out]"))

    def test_empty_sources(self):
        result = self.builder.build({}, self.output, ["ogg"])

        self.assertEqual(result.written_files, [])
        self.assertEqual(self.runner.commands, [])

    def test_unsupported_format(self):
        with self.assertRaises(DecodeFailure):
            self.builder.build(self.sources, self.output, ["flac"])

    def test_encoder_failure(self):
        builder = FfmpegAudioSpriteBuilder(ffmpeg="ffmpeg", ffprobe="ffprobe",
                                           runner=RecordingRunner(self.runner.durations, fail_encode=True))

        with self.assertRaises(DecodeFailure) as ctx:
            builder.build(self.sources, self.output, ["mp3"])
        self.assertIn("Unknown encoder", str(ctx.exception))

    def test_missing_ffmpeg(self):
        builder = FfmpegAudioSpriteBuilder(ffmpeg="ffmpeg", ffprobe="ffprobe", runner=self.runner)
        builder.ffmpeg = None

        with self.assertRaises(DecodeFailure) as ctx:
            builder.build(self.sources, self.output, ["ogg"])
        self.assertIn("ffmpeg is required", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
