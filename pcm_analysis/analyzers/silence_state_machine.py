"""
Silence State Machine.

This module provides single-pass silence run detection over a pushed
frame stream. Frames are classified against a dB level, contiguous silent
frames are accumulated into a run, and a run is kept only when its length
meets the minimum-duration frame threshold.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from pcm_analysis.analyzers.frame_math import duration_to_frame_threshold, TimeLike
from pcm_analysis.exceptions import InvalidArgumentError
from pcm_analysis.models.silence import SilenceAnalysisResult, SilenceRun

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL_FRAMES = 2048

ProgressCallback = Callable[[int, Optional[int]], None]


def peak_to_db(peak: float) -> float:
    """Convert a peak amplitude to dB, -inf at or below zero."""
    if peak <= 0:
        return -math.inf
    return 20.0 * math.log10(peak)


def frame_peak(samples: np.ndarray) -> float:
    """Maximum absolute sample across the channels of one frame."""
    if len(samples) == 0:
        return 0.0
    return float(np.max(np.abs(samples)))


@dataclass
class _RunInProgress:
    """Silent run that has started but not yet ended."""

    start_frame: int
    length: int = 0


class SilenceStateMachine:
    """
    Accumulates qualifying silence runs over a frame stream.

    The machine is either idle or holds one run in progress. A non-silent
    frame or the end of the stream flushes the run in progress, keeping it
    only if it is at least duration_frame_threshold frames long. A flush
    always returns the machine to idle, so flushing twice cannot emit the
    same run twice.

    Progress is reported every PROGRESS_INTERVAL_FRAMES frames and once at
    finish() as (processed_frames, estimated_total_frames).

    Not thread-safe: one producer pushes frames in order.

    Attributes:
        level_db: Frames with dB strictly below this level are silent
        duration_frame_threshold: Minimum run length in frames
        total_frames: Frames observed so far
        first_sound_frame: Index of the first non-silent frame (None until seen)
    """

    def __init__(
        self,
        level_db: float,
        duration_frame_threshold: int,
        estimated_total_frames: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        """
        Initialize the state machine.

        Args:
            level_db: Silence level in dB
            duration_frame_threshold: Minimum run length in frames (>= 1)
            estimated_total_frames: Progress denominator, None when unknown
            progress_callback: Optional callable(processed, estimated_total)

        Raises:
            InvalidArgumentError: If the threshold is not positive or level is NaN
        """
        if duration_frame_threshold <= 0:
            raise InvalidArgumentError(
                f"duration frame threshold must be positive, got {duration_frame_threshold}"
            )
        if level_db is None or math.isnan(level_db):
            raise InvalidArgumentError(f"silence level must be a number, got {level_db}")

        self.level_db = level_db
        self.duration_frame_threshold = duration_frame_threshold
        self.estimated_total_frames = estimated_total_frames
        self.progress_callback = progress_callback

        self.total_frames = 0
        self.first_sound_frame: Optional[int] = None
        self._runs: List[SilenceRun] = []
        self._current: Optional[_RunInProgress] = None
        self._last_reported = 0
        self._result: Optional[SilenceAnalysisResult] = None

    @classmethod
    def for_duration(
        cls,
        level_db: float,
        duration: TimeLike,
        sample_rate: int,
        estimated_total_frames: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> 'SilenceStateMachine':
        """Build a state machine whose threshold is derived from a duration."""
        return cls(
            level_db=level_db,
            duration_frame_threshold=duration_to_frame_threshold(duration, sample_rate),
            estimated_total_frames=estimated_total_frames,
            progress_callback=progress_callback,
        )

    @property
    def in_run(self) -> bool:
        return self._current is not None

    def on_frame(self, samples: np.ndarray) -> None:
        """Frame sink entry point: peak-reduce the frame and add it."""
        self.add_frame(frame_peak(samples))

    def add_frame(self, peak_amplitude: float) -> None:
        """
        Classify one frame and advance the state machine.

        Args:
            peak_amplitude: Max absolute sample across channels of the frame

        Raises:
            RuntimeError: If called after finish()
        """
        if self._result is not None:
            raise RuntimeError('Silence analysis already finished')

        if peak_to_db(peak_amplitude) < self.level_db:
            if self._current is None:
                self._current = _RunInProgress(start_frame=self.total_frames)
            self._current.length += 1
        else:
            if self.first_sound_frame is None:
                self.first_sound_frame = self.total_frames
            self._flush_current_run()

        self.total_frames += 1

        if self.total_frames - self._last_reported >= PROGRESS_INTERVAL_FRAMES:
            self._last_reported = self.total_frames
            self._report_progress()

    def finish(self) -> SilenceAnalysisResult:
        """
        Flush any trailing run and build the immutable result.

        Calling finish() again returns the same result without reporting
        progress or flushing a second time.
        """
        if self._result is not None:
            return self._result

        self._flush_current_run()
        self._report_progress()
        self._result = SilenceAnalysisResult(
            total_frames=self.total_frames,
            first_sound_frame=self.first_sound_frame,
            silence_runs=tuple(self._runs),
        )

        logger.debug(
            f"Silence analysis finished: frames={self.total_frames}, "
            f"runs={len(self._runs)}, first_sound={self.first_sound_frame}"
        )
        return self._result

    def _flush_current_run(self) -> None:
        current = self._current
        self._current = None
        if current is None or current.length < self.duration_frame_threshold:
            return
        self._runs.append(
            SilenceRun(start_frame=current.start_frame, end_frame=current.start_frame + current.length)
        )

    def _report_progress(self) -> None:
        if self.progress_callback is not None:
            self.progress_callback(self.total_frames, self.estimated_total_frames)
