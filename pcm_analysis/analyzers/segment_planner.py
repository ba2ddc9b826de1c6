"""
Segment planner.

Turns a finished silence analysis into the list of playable segments
between silence runs, shifted by an "after" offset (applied to the start
of each silence run) and a "resume" offset (applied to the end of each
silence run and to the first sound).
"""

from typing import List

from pcm_analysis.analyzers.frame_math import clamp_frame, time_offset_to_frames, TimeLike
from pcm_analysis.models.silence import AudioSegment, SilenceAnalysisResult


def build_segments(
    result: SilenceAnalysisResult,
    sample_rate: int,
    after_offset: TimeLike,
    resume_offset: TimeLike
) -> List[AudioSegment]:
    """
    Build segments from a silence analysis result.

    Algorithm:
    1. Entirely silent stream: no segments
    2. Start at first sound + resume offset
    3. Each silence run closes the current segment at run start + after
       offset and reopens at run end + resume offset
    4. The final segment ends at the stream end, or at last run start +
       after offset when the stream ends in silence

    Every boundary is clamped to [0, total_frames] and a segment is kept
    only if its end is after its start. Offsets may make neighbouring
    segments overlap; overlap is kept as is.

    Args:
        result: Finished silence analysis
        sample_rate: Sample rate in Hz
        after_offset: Signed offset applied to silence starts
        resume_offset: Signed offset applied to silence ends

    Returns:
        Segments in stream order

    Raises:
        InvalidArgumentError: If sample rate is not positive

    Examples:
        >>> result = SilenceAnalysisResult(10000, 100, (SilenceRun(3100, 6100),))
        >>> build_segments(result, 1000, TimeArgument.parse('500ms'),
        ...                TimeArgument.parse('-200ms'))
        [AudioSegment(start_frame=0, end_frame=3600), AudioSegment(start_frame=5900, end_frame=10000)]
    """
    after_frames = time_offset_to_frames(after_offset, sample_rate)
    resume_frames = time_offset_to_frames(resume_offset, sample_rate)

    if result.first_sound_frame is None:
        return []

    total = result.total_frames
    segments: List[AudioSegment] = []

    def add_segment(start: int, end: int) -> None:
        if end > start:
            segments.append(AudioSegment(start_frame=start, end_frame=end))

    current_start = clamp_frame(result.first_sound_frame + resume_frames, 0, total)
    for run in result.silence_runs:
        add_segment(current_start, clamp_frame(run.start_frame + after_frames, 0, total))
        current_start = clamp_frame(run.end_frame + resume_frames, 0, total)

    final_end = total
    if result.silence_runs and result.silence_runs[-1].end_frame == total:
        final_end = clamp_frame(result.silence_runs[-1].start_frame + after_frames, 0, total)
    add_segment(current_start, final_end)

    return segments
