"""
Silence analysis data models.

This module defines dataclasses for silence runs, the finished silence
analysis aggregate and the playable segments planned from it.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SilenceRun:
    """A qualifying run of silent frames, end exclusive."""

    start_frame: int
    end_frame: int

    def __post_init__(self):
        """Validates run bounds."""
        if self.start_frame < 0:
            raise ValueError('Silence run start must be non-negative')
        if self.end_frame <= self.start_frame:
            raise ValueError('Silence run end must be greater than start')

    @property
    def length(self) -> int:
        return self.end_frame - self.start_frame


@dataclass(frozen=True)
class SilenceAnalysisResult:
    """
    Finished result of one silence analysis pass.

    Attributes:
        total_frames: Count of frames actually observed
        first_sound_frame: Index of the first non-silent frame, None if the
            whole stream is silent
        silence_runs: Qualifying runs, non-overlapping and increasing
    """

    total_frames: int
    first_sound_frame: Optional[int]
    silence_runs: Tuple[SilenceRun, ...] = ()

    def __post_init__(self):
        """Validates result values."""
        if self.total_frames < 0:
            raise ValueError('Total frames must be non-negative')
        if self.first_sound_frame is not None and not (
            0 <= self.first_sound_frame < self.total_frames
        ):
            raise ValueError('First sound frame must lie within the stream')
        # Accept any iterable but store a tuple
        object.__setattr__(self, 'silence_runs', tuple(self.silence_runs))
        previous_end = 0
        for run in self.silence_runs:
            if run.start_frame < previous_end:
                raise ValueError('Silence runs must be ordered and non-overlapping')
            if run.end_frame > self.total_frames:
                raise ValueError('Silence run exceeds total frames')
            previous_end = run.end_frame

    @property
    def is_entirely_silent(self) -> bool:
        return self.first_sound_frame is None


@dataclass(frozen=True)
class AudioSegment:
    """A contiguous frame range exported as one output unit, end exclusive."""

    start_frame: int
    end_frame: int

    def __post_init__(self):
        """Validates segment bounds."""
        if self.start_frame < 0:
            raise ValueError('Segment start must be non-negative')
        if self.end_frame <= self.start_frame:
            raise ValueError('Segment end must be greater than start')

    @property
    def frame_count(self) -> int:
        return self.end_frame - self.start_frame


@dataclass(frozen=True)
class SplitSummary:
    """Outcome of splitting one input file."""

    generated: int
    skipped: int
    segments: Tuple[AudioSegment, ...]
    output_paths: Tuple[str, ...] = ()

    @property
    def total_segments(self) -> int:
        return len(self.segments)
