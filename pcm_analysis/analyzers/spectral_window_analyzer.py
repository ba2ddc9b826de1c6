"""
Spectral Window Analyzers.

This module provides the windowed-FFT analyzers. Both keep a per-channel
ring of the latest frames and, at every hop anchor, transform the
trailing window of each channel into band magnitudes in dB:

- StftWindowAnalyzer: window and hop in samples, anchors by frame count,
  anchor reported in samples or elapsed milliseconds.
- SfftWindowAnalyzer: window and hop in milliseconds, anchors by elapsed
  stream time.

One SpectralPoint is handed to the point sink per channel per anchor.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

import numpy as np
from scipy.signal import windows

from pcm_analysis.analyzers.frame_math import frames_to_elapsed_ms_floor, time_ms_to_frames_floor
from pcm_analysis.analyzers.sliding_window import SampleRingBuffer
from pcm_analysis.exceptions import InvalidArgumentError
from pcm_analysis.models.points import AnalysisSummary, AnchorUnit, SpectralPoint

logger = logging.getLogger(__name__)

SpectralPointSink = Callable[[SpectralPoint], None]


def next_power_of_two(value: int) -> int:
    """Smallest power of two greater than or equal to value."""
    if value <= 0:
        raise InvalidArgumentError(f"FFT input length must be positive, got {value}")
    return 1 << (value - 1).bit_length()


def max_bin_count(window_frames: int) -> int:
    """Number of positive-frequency bins (Nyquist inclusive) for a window."""
    return next_power_of_two(window_frames) // 2 + 1


def band_edges(positive_bins: int, bin_count: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split positive-frequency bins into bin_count contiguous bands.

    Band b spans [b*P//B, (b+1)*P//B), widened to one bin when empty; the
    last band always ends at P.

    Returns:
        (starts, ends) arrays of length bin_count
    """
    starts = np.empty(bin_count, dtype=np.int64)
    ends = np.empty(bin_count, dtype=np.int64)
    for band in range(bin_count):
        start = band * positive_bins // bin_count
        end = (band + 1) * positive_bins // bin_count
        if end <= start:
            end = min(positive_bins, start + 1)
        if band == bin_count - 1:
            end = positive_bins
        starts[band] = start
        ends[band] = end
    return starts, ends


class SpectralWindowAnalyzer(ABC):
    """
    Shared ring buffering, FFT and band aggregation.

    Subclasses decide when anchors fire and what anchor/window values are
    written on points.

    Algorithm per anchor:
    1. Read the trailing window_frames frames of every channel (zeros before frame 0)
    2. Apply a symmetric Hann window
    3. Zero-pad to the next power of two and take the real FFT
    4. Average magnitudes per band, convert to dB, floor at min_limit_db
    """

    def __init__(
        self,
        sample_rate: int,
        channel_count: int,
        name: str,
        window_frames: int,
        bin_count: int,
        min_limit_db: float,
        point_sink: SpectralPointSink
    ):
        """
        Initialize spectral analyzer.

        Args:
            sample_rate: Analysis sample rate in Hz
            channel_count: Channels per frame
            name: Label written on every point
            window_frames: Analysis window in frames
            bin_count: Number of output bands
            min_limit_db: Floor applied to band values
            point_sink: Callable receiving each SpectralPoint as produced

        Raises:
            InvalidArgumentError: If any parameter is out of range, including a
                bin count above the positive-frequency maximum
        """
        if sample_rate <= 0:
            raise InvalidArgumentError(f"sample rate must be positive, got {sample_rate}")
        if channel_count <= 0:
            raise InvalidArgumentError(f"channel count must be positive, got {channel_count}")
        if not name or not name.strip():
            raise InvalidArgumentError('name must not be empty')
        if window_frames <= 0:
            raise InvalidArgumentError(f"window must be positive, got {window_frames} frames")
        if bin_count <= 0:
            raise InvalidArgumentError(f"bin count must be positive, got {bin_count}")
        if math.isnan(min_limit_db) or math.isinf(min_limit_db):
            raise InvalidArgumentError(f"min limit dB must be finite, got {min_limit_db}")

        self.fft_length = next_power_of_two(window_frames)
        self.positive_bins = self.fft_length // 2 + 1
        if bin_count > self.positive_bins:
            raise InvalidArgumentError(f"binCount={bin_count}, max={self.positive_bins}")

        self.sample_rate = sample_rate
        self.channel_count = channel_count
        self.name = name
        self.window_frames = window_frames
        self.bin_count = bin_count
        self.min_limit_db = min_limit_db
        self.point_sink = point_sink

        self.point_count = 0
        self.last_anchor = 0
        self._ring = SampleRingBuffer(channel_count, window_frames)
        self._hann = windows.hann(window_frames, sym=True)
        self._band_starts, self._band_ends = band_edges(self.positive_bins, bin_count)

    @property
    def frame_index(self) -> int:
        return self._ring.frames_written

    def on_frame(self, samples: np.ndarray) -> None:
        """
        Store one frame and emit every anchor it completes.

        Raises:
            InvalidArgumentError: If the frame's channel count is unexpected
        """
        if len(samples) != self.channel_count:
            raise InvalidArgumentError(
                f"unexpected channel count: got {len(samples)}, expected {self.channel_count}"
            )
        self._ring.append(samples)
        self._emit_due_anchors()

    def build_summary(self) -> AnalysisSummary:
        return AnalysisSummary(
            point_count=self.point_count,
            total_frames=self.frame_index,
            last_anchor=self.last_anchor,
        )

    def band_values(self, end_frame_exclusive: int) -> np.ndarray:
        """
        Band magnitudes in dB for the window ending at end_frame_exclusive.

        Returns:
            Array of shape (channel_count, bin_count)
        """
        frames = self._ring.window(end_frame_exclusive - self.window_frames) * self._hann
        magnitudes = np.abs(np.fft.rfft(frames, n=self.fft_length, axis=1))

        cumulative = np.zeros((self.channel_count, self.positive_bins + 1), dtype=np.float64)
        cumulative[:, 1:] = np.cumsum(magnitudes, axis=1)
        sums = cumulative[:, self._band_ends] - cumulative[:, self._band_starts]
        means = sums / (self._band_ends - self._band_starts)

        with np.errstate(divide='ignore'):
            db = np.where(means > 0, 20.0 * np.log10(np.where(means > 0, means, 1.0)), -np.inf)
        return np.maximum(db, self.min_limit_db)

    @abstractmethod
    def _emit_due_anchors(self) -> None:
        """Emit every anchor that became due with the latest frame."""

    def _emit(self, end_frame_exclusive: int, window_value: int, anchor_value: int) -> None:
        bands = self.band_values(end_frame_exclusive)
        for channel in range(self.channel_count):
            self.point_sink(SpectralPoint(
                name=self.name,
                channel=channel,
                window=window_value,
                anchor=anchor_value,
                bins=tuple(bands[channel].tolist()),
            ))
            self.point_count += 1
        self.last_anchor = anchor_value


class StftWindowAnalyzer(SpectralWindowAnalyzer):
    """
    Sample-anchored spectral analyzer.

    Anchors fall every hop_samples frames starting at hop_samples; the
    window ends at the anchor frame. The anchor written on points is the
    frame count or the elapsed ms at that frame, per anchor_unit.
    """

    def __init__(
        self,
        sample_rate: int,
        channel_count: int,
        name: str,
        window_samples: int,
        hop_samples: int,
        bin_count: int,
        min_limit_db: float,
        point_sink: SpectralPointSink,
        anchor_unit: AnchorUnit = AnchorUnit.SAMPLE,
        window_persisted_value: Optional[int] = None
    ):
        if hop_samples <= 0:
            raise InvalidArgumentError(f"hop must be positive, got {hop_samples} samples")
        if window_persisted_value is not None and window_persisted_value <= 0:
            raise InvalidArgumentError(
                f"persisted window value must be positive, got {window_persisted_value}"
            )
        super().__init__(
            sample_rate, channel_count, name, window_samples, bin_count, min_limit_db, point_sink
        )
        self.hop_samples = hop_samples
        self.anchor_unit = anchor_unit
        self.window_persisted_value = window_persisted_value or window_samples
        self._next_anchor_sample = hop_samples

    def _emit_due_anchors(self) -> None:
        while self._next_anchor_sample <= self.frame_index:
            anchor_sample = self._next_anchor_sample
            if self.anchor_unit == AnchorUnit.SAMPLE:
                anchor_value = anchor_sample
            else:
                anchor_value = frames_to_elapsed_ms_floor(anchor_sample, self.sample_rate)
            self._emit(anchor_sample, self.window_persisted_value, anchor_value)
            self._next_anchor_sample += self.hop_samples


class SfftWindowAnalyzer(SpectralWindowAnalyzer):
    """
    Millisecond-anchored spectral analyzer.

    The window spans max(1, floor(window_ms * sample_rate / 1000)) frames.
    Anchors start at hop_ms and fire when elapsed stream time reaches them;
    the window ends at floor(anchor_ms * sample_rate / 1000).
    """

    def __init__(
        self,
        sample_rate: int,
        channel_count: int,
        name: str,
        window_ms: int,
        hop_ms: int,
        bin_count: int,
        min_limit_db: float,
        point_sink: SpectralPointSink
    ):
        if window_ms <= 0:
            raise InvalidArgumentError(f"window must be positive, got {window_ms}ms")
        if hop_ms <= 0:
            raise InvalidArgumentError(f"hop must be positive, got {hop_ms}ms")
        if sample_rate <= 0:
            raise InvalidArgumentError(f"sample rate must be positive, got {sample_rate}")
        super().__init__(
            sample_rate,
            channel_count,
            name,
            max(1, time_ms_to_frames_floor(window_ms, sample_rate)),
            bin_count,
            min_limit_db,
            point_sink,
        )
        self.window_ms = window_ms
        self.hop_ms = hop_ms
        self._next_anchor_ms = hop_ms

    def _emit_due_anchors(self) -> None:
        elapsed_ms = frames_to_elapsed_ms_floor(self.frame_index, self.sample_rate)
        while self._next_anchor_ms <= elapsed_ms:
            anchor_ms = self._next_anchor_ms
            self._emit(time_ms_to_frames_floor(anchor_ms, self.sample_rate), self.window_ms, anchor_ms)
            self._next_anchor_ms += self.hop_ms
