"""
Peak Window Analyzer.

This module provides the sliding-window peak envelope generator. Every
hop_ms of elapsed stream time it emits the maximum frame peak over the
trailing window_ms, in dB, to a point sink.
"""

import logging
import math
from typing import Callable

import numpy as np

from pcm_analysis.analyzers.frame_math import frames_to_elapsed_ms_floor, time_ms_to_frames_floor
from pcm_analysis.analyzers.silence_state_machine import frame_peak, peak_to_db
from pcm_analysis.analyzers.sliding_window import SlidingWindowMax
from pcm_analysis.exceptions import InvalidArgumentError
from pcm_analysis.models.points import AnalysisSummary, PeakPoint

logger = logging.getLogger(__name__)

PeakPointSink = Callable[[PeakPoint], None]


class PeakWindowAnalyzer:
    """
    Emits a peak envelope sample at every hop anchor.

    Frame peaks are kept in a SlidingWindowMax. At anchor a (ms), the window
    covers frames [max(0, end - window_frames), end) with
    end = floor(a * sample_rate / 1000); its maximum is converted to dB and
    floored at min_limit_db.

    Anchors start at hop_ms and are emitted as soon as the elapsed stream
    time (floor of frames * 1000 / sample_rate) reaches them.

    Not thread-safe: one producer pushes frames in order.
    """

    def __init__(
        self,
        sample_rate: int,
        name: str,
        stem: str,
        window_ms: int,
        hop_ms: int,
        min_limit_db: float,
        point_sink: PeakPointSink
    ):
        """
        Initialize peak window analyzer.

        Args:
            sample_rate: Sample rate in Hz
            name: Label written on every point
            stem: Input file stem written on every point
            window_ms: Trailing window length in ms
            hop_ms: Distance between anchors in ms
            min_limit_db: Floor applied to emitted dB values
            point_sink: Callable receiving each PeakPoint as produced

        Raises:
            InvalidArgumentError: If any parameter is out of range
        """
        if sample_rate <= 0:
            raise InvalidArgumentError(f"sample rate must be positive, got {sample_rate}")
        if not name or not name.strip():
            raise InvalidArgumentError('name must not be empty')
        if window_ms <= 0:
            raise InvalidArgumentError(f"window must be positive, got {window_ms}ms")
        if hop_ms <= 0:
            raise InvalidArgumentError(f"hop must be positive, got {hop_ms}ms")
        if math.isnan(min_limit_db) or math.isinf(min_limit_db):
            raise InvalidArgumentError(f"min limit dB must be finite, got {min_limit_db}")

        self.sample_rate = sample_rate
        self.name = name
        self.stem = stem
        self.window_ms = window_ms
        self.hop_ms = hop_ms
        self.min_limit_db = min_limit_db
        self.point_sink = point_sink

        self.window_frames = max(1, time_ms_to_frames_floor(window_ms, sample_rate))
        self.frame_index = 0
        self.point_count = 0
        self.last_ms = 0
        self._next_anchor_ms = hop_ms
        self._window = SlidingWindowMax()

    def on_frame(self, samples: np.ndarray) -> None:
        """Frame sink entry point: peak-reduce the frame and add it."""
        self.add_peak(frame_peak(samples))

    def add_peak(self, peak: float) -> None:
        """
        Add one frame's peak and emit every anchor it completes.

        An anchor reached by this frame whose window ends before the frame
        is emitted before the frame enters the deque, so the frame can
        neither count toward nor evict entries of a window it is not part of.
        """
        elapsed_ms = frames_to_elapsed_ms_floor(self.frame_index + 1, self.sample_rate)

        while (
            self._next_anchor_ms <= elapsed_ms
            and time_ms_to_frames_floor(self._next_anchor_ms, self.sample_rate) <= self.frame_index
        ):
            self._emit_next()

        self._window.push(self.frame_index, peak)
        self.frame_index += 1

        while self._next_anchor_ms <= elapsed_ms:
            self._emit_next()

    def build_summary(self) -> AnalysisSummary:
        return AnalysisSummary(
            point_count=self.point_count,
            total_frames=self.frame_index,
            last_anchor=self.last_ms,
        )

    def window_peak_db(self, anchor_ms: int) -> float:
        """Evict frames that left the window ending at anchor_ms and return its dB."""
        end_frame = time_ms_to_frames_floor(anchor_ms, self.sample_rate)
        self._window.evict_before(max(0, end_frame - self.window_frames))
        db = peak_to_db(self._window.max(default=0.0))
        return max(db, self.min_limit_db)

    def _emit_next(self) -> None:
        anchor_ms = self._next_anchor_ms
        self._next_anchor_ms += self.hop_ms
        point = PeakPoint(
            name=self.name,
            stem=self.stem,
            window_ms=self.window_ms,
            ms=anchor_ms,
            db=self.window_peak_db(anchor_ms),
        )
        self.point_sink(point)
        self.point_count += 1
        self.last_ms = anchor_ms
