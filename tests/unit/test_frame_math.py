"""Unit tests for frame math conversions."""

from decimal import Decimal

import pytest

from pcm_analysis.analyzers.frame_math import (
    clamp_frame,
    duration_to_frame_threshold,
    frames_to_elapsed_ms_floor,
    time_ms_to_frames_floor,
    time_offset_to_frames,
    to_invariant_time_text,
)
from pcm_analysis.exceptions import InvalidArgumentError
from pcm_analysis.models import TimeArgument


class TestDurationToFrameThreshold:
    """Test suite for duration_to_frame_threshold."""

    @pytest.mark.parametrize('text, sample_rate, expected', [
        ('2000ms', 44100, 88200),
        ('1ms', 44100, 45),
        ('100ms', 48000, 4800),
        ('2s', 8000, 16000),
    ])
    def test_known_thresholds(self, text, sample_rate, expected):
        """Test thresholds round up to whole frames."""
        assert duration_to_frame_threshold(TimeArgument.parse(text), sample_rate) == expected

    def test_tiny_duration_is_at_least_one_frame(self):
        """Test a sub-frame duration still needs one frame."""
        assert duration_to_frame_threshold(TimeArgument.parse('0.001ms'), 8000) == 1

    def test_accepts_plain_seconds(self):
        """Test float and Decimal seconds are converted exactly."""
        assert duration_to_frame_threshold(0.1, 48000) == 4800
        assert duration_to_frame_threshold(Decimal('0.0005'), 44100) == 23

    @pytest.mark.parametrize('duration', ['0ms', '-5ms'])
    def test_non_positive_duration_rejected(self, duration):
        """Test zero and negative durations raise InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            duration_to_frame_threshold(TimeArgument.parse(duration), 44100)

    def test_non_positive_sample_rate_rejected(self):
        """Test zero sample rate raises and is also a ValueError."""
        with pytest.raises(ValueError):
            duration_to_frame_threshold(TimeArgument.parse('1ms'), 0)


class TestTimeOffsetToFrames:
    """Test suite for time_offset_to_frames."""

    @pytest.mark.parametrize('text, expected', [
        ('0.5ms', 22),
        ('-0.5ms', -22),
        ('1ms', 44),
        ('0ms', 0),
        ('-1s', -44100),
    ])
    def test_offsets_at_44100(self, text, expected):
        """Test signed offsets round to nearest frame."""
        assert time_offset_to_frames(TimeArgument.parse(text), 44100) == expected

    def test_half_frame_rounds_away_from_zero(self):
        """Test exact half frames round away from zero in both directions."""
        assert time_offset_to_frames(TimeArgument.parse('0.5ms'), 1000) == 1
        assert time_offset_to_frames(TimeArgument.parse('-0.5ms'), 1000) == -1
        assert time_offset_to_frames(TimeArgument.parse('2.5ms'), 1000) == 3

    def test_invalid_sample_rate(self):
        with pytest.raises(InvalidArgumentError):
            time_offset_to_frames(TimeArgument.parse('1ms'), -1)


class TestClampFrame:
    """Test suite for clamp_frame."""

    @pytest.mark.parametrize('frame, expected', [(-5, 0), (15, 10), (5, 5), (0, 0), (10, 10)])
    def test_clamps_into_range(self, frame, expected):
        assert clamp_frame(frame, 0, 10) == expected

    def test_single_point_range(self):
        assert clamp_frame(1, 5, 5) == 5

    def test_empty_range_rejected(self):
        """Test min greater than max raises InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            clamp_frame(3, 10, 0)


class TestInvariantTimeText:
    """Test suite for to_invariant_time_text."""

    @pytest.mark.parametrize('frame, sample_rate, expected', [
        (66150, 44100, '1.5'),
        (44100, 44100, '1'),
        (0, 44100, '0'),
        (22050, 44100, '0.5'),
        (1, 3, '0.3333333333333333'),
        (2, 3, '0.6666666666666667'),
        (441, 44100, '0.01'),
    ])
    def test_formatting(self, frame, sample_rate, expected):
        """Test seconds text uses a dot, up to 16 digits, no trailing zeros."""
        assert to_invariant_time_text(frame, sample_rate) == expected


class TestFloorConversions:
    """Test suite for the floor conversions used by windowed analyzers."""

    def test_ms_to_frames(self):
        assert time_ms_to_frames_floor(10, 44100) == 441
        assert time_ms_to_frames_floor(1, 44100) == 44
        assert time_ms_to_frames_floor(3, 100) == 0

    def test_frames_to_elapsed_ms(self):
        assert frames_to_elapsed_ms_floor(45, 44100) == 1
        assert frames_to_elapsed_ms_floor(44, 44100) == 0
        assert frames_to_elapsed_ms_floor(1, 100) == 10
