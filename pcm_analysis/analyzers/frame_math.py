"""
Frame math.

Pure conversions between wall-clock durations/offsets and frame counts.
Time values are converted through Decimal so that rounding decisions
are made on the exact decimal value the caller supplied.
"""

from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP
from typing import Union

from pcm_analysis.exceptions import InvalidArgumentError
from pcm_analysis.models.value_objects import TimeArgument

TimeLike = Union[TimeArgument, Decimal, float, int]

_FRACTION_DIGITS = Decimal(1).scaleb(-16)


def _to_seconds(value: TimeLike) -> Decimal:
    if isinstance(value, TimeArgument):
        return value.seconds
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _require_sample_rate(sample_rate: int) -> None:
    if sample_rate <= 0:
        raise InvalidArgumentError(f"sample rate must be positive, got {sample_rate}")


def duration_to_frame_threshold(duration: TimeLike, sample_rate: int) -> int:
    """
    Convert a minimum duration into a frame-count threshold.

    Uses ceiling so a requested minimum duration is never under-counted,
    and never returns less than one frame.

    Args:
        duration: Positive duration (TimeArgument or seconds)
        sample_rate: Sample rate in Hz

    Returns:
        Threshold in frames

    Raises:
        InvalidArgumentError: If duration or sample rate is not positive

    Examples:
        >>> duration_to_frame_threshold(TimeArgument.parse('1ms'), 44100)
        45
    """
    _require_sample_rate(sample_rate)
    seconds = _to_seconds(duration)
    if seconds <= 0:
        raise InvalidArgumentError(f"duration must be positive, got {seconds}s")

    frames = int((seconds * sample_rate).to_integral_value(rounding=ROUND_CEILING))
    return max(1, frames)


def time_offset_to_frames(offset: TimeLike, sample_rate: int) -> int:
    """
    Convert a signed offset into a signed frame count.

    Rounds half away from zero: 0.5ms at 44100 Hz is 22 frames and
    -0.5ms is -22 frames.

    Raises:
        InvalidArgumentError: If sample rate is not positive
    """
    _require_sample_rate(sample_rate)
    seconds = _to_seconds(offset)
    return int((seconds * sample_rate).to_integral_value(rounding=ROUND_HALF_UP))


def clamp_frame(frame: int, minimum: int, maximum: int) -> int:
    """
    Saturating clamp of a frame index.

    Raises:
        InvalidArgumentError: If minimum is greater than maximum
    """
    if minimum > maximum:
        raise InvalidArgumentError(f"clamp range is empty: min={minimum}, max={maximum}")
    return min(max(frame, minimum), maximum)


def to_invariant_time_text(frame: int, sample_rate: int) -> str:
    """
    Format a frame position as seconds with a locale-independent decimal.

    Up to 16 fractional digits are kept and trailing zeros are trimmed.

    Examples:
        >>> to_invariant_time_text(66150, 44100)
        '1.5'
        >>> to_invariant_time_text(44100, 44100)
        '1'
    """
    _require_sample_rate(sample_rate)
    seconds = (Decimal(frame) / Decimal(sample_rate)).quantize(_FRACTION_DIGITS, rounding=ROUND_HALF_UP)
    text = format(seconds, 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('', '-0'):
        return '0'
    return text


def time_ms_to_frames_floor(milliseconds: int, sample_rate: int) -> int:
    """Frames covered by a whole number of milliseconds, rounded down."""
    return milliseconds * sample_rate // 1000


def frames_to_elapsed_ms_floor(frames: int, sample_rate: int) -> int:
    """Whole milliseconds elapsed after a number of frames, rounded down."""
    return frames * 1000 // sample_rate
