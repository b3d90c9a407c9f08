import subprocess
from unittest.mock import patch

import pytest

from vtt_thumbnails.errors import ExternalProcessTimeout, ProbeParseError, ProbeUnavailable
from vtt_thumbnails.probe import get_video_metadata, parse_probe_output, run_probe


class TestParseProbeOutput:
    def test_real_ffmpeg_output(self, probe_output):
        metadata = parse_probe_output(probe_output)
        assert metadata.duration_seconds == 125
        assert metadata.start_offset_seconds == pytest.approx(0.021333)
        assert metadata.frame_rate == 24
        assert metadata.version == "6.1.1-3ubuntu5"

    def test_hours_and_minutes_counted(self):
        text = "ffmpeg version 5.1\n  Duration: 01:02:03.99, start: 0.000000, bitrate: 1 kb/s\n 25 tbr\n"
        assert parse_probe_output(text).duration_seconds == 3723

    def test_fractional_seconds_dropped(self):
        text = "ffmpeg version 5.1\n  Duration: 00:00:09.99, start: 0.000000\n 25 tbr\n"
        assert parse_probe_output(text).duration_seconds == 9

    def test_decimal_frame_rate(self):
        text = "ffmpeg version 5.1\n  Duration: 00:00:30.00, start: 1.5\n 29.97 fps, 29.97 tbr, 30k tbn\n"
        metadata = parse_probe_output(text)
        assert metadata.frame_rate == pytest.approx(29.97)
        assert metadata.start_offset_seconds == 1.5

    def test_start_not_available(self):
        text = "ffmpeg version 5.1\n  Duration: 00:00:30.00, start: N/A, bitrate: N/A\n 25 tbr\n"
        assert parse_probe_output(text).start_offset_seconds == 0.0

    def test_leading_whitespace_before_banner(self):
        text = "\n  ffmpeg version 4.4.2\n  Duration: 00:00:30.00, start: 0.0\n 25 tbr\n"
        assert parse_probe_output(text).version == "4.4.2"

    def test_banner_is_case_insensitive(self):
        text = "FFmpeg version N-112345\n  Duration: 00:00:30.00, start: 0.0\n 25 tbr\n"
        assert parse_probe_output(text).version == "N-112345"

    def test_missing_banner(self):
        with pytest.raises(ProbeUnavailable):
            parse_probe_output("sh: 1: ffmpeg: not found\n")

    def test_empty_output(self):
        with pytest.raises(ProbeUnavailable):
            parse_probe_output("")

    def test_missing_duration_and_rate(self, broken_probe_output):
        with pytest.raises(ProbeParseError):
            parse_probe_output(broken_probe_output)

    def test_missing_frame_rate(self):
        # audio-only files have a duration but no tbr
        text = "ffmpeg version 5.1\n  Duration: 00:03:00.00, start: 0.000000\n  Stream #0:0: Audio: mp3\n"
        with pytest.raises(ProbeParseError):
            parse_probe_output(text)

    def test_missing_duration(self):
        text = "ffmpeg version 5.1\n  Stream #0:0: Video: h264, 25 tbr\n"
        with pytest.raises(ProbeParseError):
            parse_probe_output(text)

    def test_zero_frame_rate_rejected(self):
        text = "ffmpeg version 5.1\n  Duration: 00:00:30.00, start: 0.0\n 0 tbr\n"
        with pytest.raises(ProbeParseError):
            parse_probe_output(text)


class TestRunProbe:
    def test_runs_ffmpeg_info_mode(self, probe_output):
        with patch("vtt_thumbnails.utils.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess([], 1, stdout=probe_output)
            assert run_probe("clip.mp4", ffmpeg="/opt/ffmpeg/bin/ffmpeg") == probe_output
        cmd = mock_run.call_args.args[0]
        assert cmd == ["/opt/ffmpeg/bin/ffmpeg", "-i", "clip.mp4"]
        assert mock_run.call_args.kwargs["stderr"] == subprocess.STDOUT

    def test_binary_not_found(self):
        with patch("vtt_thumbnails.utils.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(ProbeUnavailable):
                run_probe("clip.mp4", ffmpeg="no-such-ffmpeg")

    def test_timeout(self):
        with patch("vtt_thumbnails.utils.subprocess.run", side_effect=subprocess.TimeoutExpired([], 5)):
            with pytest.raises(ExternalProcessTimeout):
                run_probe("clip.mp4", timeout=5)


class TestGetVideoMetadata:
    def test_parses_probe(self, probe_output):
        with patch("vtt_thumbnails.utils.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess([], 1, stdout=probe_output)
            metadata = get_video_metadata("clip.mp4")
        assert metadata.duration_seconds == 125
        assert metadata.frame_rate == 24

    def test_parse_error_names_input(self, broken_probe_output):
        with patch("vtt_thumbnails.utils.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess([], 1, stdout=broken_probe_output)
            with pytest.raises(ProbeParseError, match="broken.mp4"):
                get_video_metadata("broken.mp4")
