"""
Streaming analyzers.

This module contains the push-driven frame analyzers and the pure
functions they build on.
"""

from pcm_analysis.analyzers.frame_math import (
    clamp_frame,
    duration_to_frame_threshold,
    frames_to_elapsed_ms_floor,
    time_ms_to_frames_floor,
    time_offset_to_frames,
    to_invariant_time_text,
)
from pcm_analysis.analyzers.silence_state_machine import SilenceStateMachine
from pcm_analysis.analyzers.segment_planner import build_segments
from pcm_analysis.analyzers.sliding_window import SampleRingBuffer, SlidingWindowMax
from pcm_analysis.analyzers.peak_window_analyzer import PeakWindowAnalyzer
from pcm_analysis.analyzers.spectral_window_analyzer import (
    SfftWindowAnalyzer,
    SpectralWindowAnalyzer,
    StftWindowAnalyzer,
    max_bin_count,
)

__all__ = [
    'clamp_frame',
    'duration_to_frame_threshold',
    'frames_to_elapsed_ms_floor',
    'time_ms_to_frames_floor',
    'time_offset_to_frames',
    'to_invariant_time_text',
    'SilenceStateMachine',
    'build_segments',
    'SampleRingBuffer',
    'SlidingWindowMax',
    'PeakWindowAnalyzer',
    'SfftWindowAnalyzer',
    'SpectralWindowAnalyzer',
    'StftWindowAnalyzer',
    'max_bin_count',
]
